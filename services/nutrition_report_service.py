"""
Read-only nutrition reports over persisted meals.
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import date, timedelta
from typing import Any, Dict, Optional

from app.exceptions import NotFoundError, ServiceValidationError
from repositories import UnitOfWork
from services.nutrition_calculator import NutrientCalculator

logger = logging.getLogger("mealtrack.nutrition")

MAX_REPORT_DAYS = 366


class NutritionReportService:
    def __init__(self, uow: UnitOfWork, calculator: Optional[NutrientCalculator] = None):
        self.uow = uow
        self.calculator = calculator or NutrientCalculator()

    def get_meal_nutrition(self, meal_id: uuid.UUID, owner_id: uuid.UUID) -> Dict[str, Any]:
        meal = self.uow.meals.get_by_id_and_owner(meal_id, owner_id)
        if not meal:
            raise NotFoundError(f"Meal not found: {meal_id}")
        return self.calculator.meal_nutrition(meal)

    def get_daily_nutrition(self, day: date, owner_id: uuid.UUID) -> Dict[str, Any]:
        """
        Summary of every meal the owner has planned on ``day``.

        The calorie target and distribution come from the plan covering the
        day; with no plan the target falls back to the sum of meal targets.
        """
        meals = self.uow.meals.list_for_date(day, owner_id)
        plans = self.uow.meal_plans.list_covering(day, owner_id)
        plan = plans[0] if plans else None

        return self.calculator.daily_nutrition(
            day,
            meals,
            target_calories=plan.target_calories if plan else None,
            distribution=plan.calorie_distribution if plan else None,
        )

    def get_weekly_nutrition(
        self, start: date, end: date, owner_id: uuid.UUID
    ) -> Dict[str, Any]:
        if end < start:
            raise ServiceValidationError(
                "end date must not be before start date",
                details={"start": str(start), "end": str(end)},
            )
        days = (end - start).days + 1
        if days > MAX_REPORT_DAYS:
            raise ServiceValidationError(f"Report range is limited to {MAX_REPORT_DAYS} days")

        daily = [
            self.get_daily_nutrition(start + timedelta(days=offset), owner_id)
            for offset in range(days)
        ]
        logger.debug("Weekly report for %s: %s to %s (%d days)", owner_id, start, end, days)
        return self.calculator.weekly_nutrition(start, end, daily)

    # ---------- averages ----------

    def get_average_calories(self, owner_id: uuid.UUID) -> Dict[str, Any]:
        """
        Average calories per meal over the owner's meals that hold food.

        A meal counts with the calories of all its foods, eaten or not. With no
        such meal the average comes from the plans' distributions instead.
        """
        totals = []
        for meal in self.uow.meals.list_by_owner(owner_id):
            calories = sum(self.calculator.food_nutrients(mf)["calories"] for mf in meal.meal_foods)
            if calories > 0:
                totals.append(calories)

        if not totals:
            logger.debug("No meals with food for %s, averaging plan distributions", owner_id)
            return self.get_average_calories_from_meal_plans(owner_id)

        return _average(totals, "meals")

    def get_average_calories_from_meal_plans(self, owner_id: uuid.UUID) -> Dict[str, Any]:
        """Average calorie amount over every positive distribution entry of the owner's plans"""
        amounts = [
            entry.get("calorie_amount")
            for plan in self.uow.meal_plans.list_by_owner(owner_id, limit=None)
            for entry in plan.calorie_distribution or []
            if (entry.get("calorie_amount") or 0) > 0
        ]
        return _average(amounts, "meal_plans")


def _average(values, source: str) -> Dict[str, Any]:
    if not values:
        return {"average_calories": 0, "total_meals": 0, "source": None}
    # half-up rounding to whole calories
    average = math.floor(sum(values) / len(values) + 0.5)
    return {"average_calories": average, "total_meals": len(values), "source": source}
