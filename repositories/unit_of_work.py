"""
Unit of work - one session, its repositories and an explicit transaction boundary.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from repositories.food_repository import FoodRepository
from repositories.meal_plan_repository import (
    MealPlanRepository,
    MealRepository,
    MealFoodRepository,
)

logger = logging.getLogger("mealtrack.uow")


class UnitOfWork:
    """
    Groups the repositories that share a session.

    Usage:
        uow = UnitOfWork(db)
        with uow.transaction():
            uow.meal_plans.add(plan)
            uow.meals.add(meal)
        # committed here, or rolled back if the block raised
    """

    def __init__(self, db: Session):
        self.db = db
        self.foods = FoodRepository(db)
        self.meal_plans = MealPlanRepository(db)
        self.meals = MealRepository(db)
        self.meal_foods = MealFoodRepository(db)

    @contextmanager
    def transaction(self) -> Iterator["UnitOfWork"]:
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.debug("Transaction rolled back", exc_info=True)
            raise
