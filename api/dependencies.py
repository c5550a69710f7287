"""
API dependencies for dependency injection
"""

import logging
from functools import lru_cache
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from adapters import FoodResolver, NullFoodResolver, USDAFoodResolver
from app.config import settings
from domain.models import get_db_session
from repositories import UnitOfWork
from services import (
    CalorieDistributionNormalizer,
    MealPlanService,
    MealService,
    NutrientCalculator,
    NutritionReportService,
)

logger = logging.getLogger("mealtrack.api.dependencies")


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


@lru_cache(maxsize=1)
def get_food_resolver() -> FoodResolver:
    """Shared resolver; FoodData Central when an API key is configured."""
    if not settings.usda_api_key:
        logger.info("USDA_API_KEY not set, external food lookups are disabled")
        return NullFoodResolver()
    return USDAFoodResolver(
        api_key=settings.usda_api_key,
        base_url=settings.usda_base_url,
        timeout=settings.usda_timeout_sec,
        page_size=settings.usda_search_page_size,
    )


def get_calculator() -> NutrientCalculator:
    return NutrientCalculator(settings.calorie_source)


def get_normalizer() -> CalorieDistributionNormalizer:
    return CalorieDistributionNormalizer.from_settings(settings)


def get_unit_of_work(db: Session = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)


def get_meal_service(
    uow: UnitOfWork = Depends(get_unit_of_work),
    resolver: FoodResolver = Depends(get_food_resolver),
    calculator: NutrientCalculator = Depends(get_calculator),
) -> MealService:
    return MealService(uow, resolver=resolver, calculator=calculator)


def get_meal_plan_service(
    uow: UnitOfWork = Depends(get_unit_of_work),
    meal_service: MealService = Depends(get_meal_service),
    normalizer: CalorieDistributionNormalizer = Depends(get_normalizer),
) -> MealPlanService:
    return MealPlanService(
        uow,
        normalizer=normalizer,
        meal_service=meal_service,
        default_target_calories=settings.default_target_calories,
    )


def get_report_service(
    uow: UnitOfWork = Depends(get_unit_of_work),
    calculator: NutrientCalculator = Depends(get_calculator),
) -> NutritionReportService:
    return NutritionReportService(uow, calculator=calculator)
