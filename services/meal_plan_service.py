from __future__ import annotations

import logging
import math
import uuid
from datetime import date, time
from typing import Any, Dict, List, Optional

from app.exceptions import NotFoundError, ServiceValidationError
from domain.models import Meal, MealFood, MealPlan
from domain.schemas.meal_plan_schemas import MealPlanCreate, MealPlanUpdate
from repositories import UnitOfWork
from services.calorie_distribution import CalorieDistributionNormalizer
from services.meal_service import DEFAULT_MEAL_TIME, MealService
from services.nutrition_calculator import macro_goals

logger = logging.getLogger("mealtrack.meal_plans")

DEFAULT_MEAL_TIMES = {
    "breakfast": time(8, 0),
    "morning snack": time(10, 30),
    "lunch": time(13, 0),
    "afternoon snack": time(16, 0),
    "dinner": time(19, 0),
    "evening snack": time(21, 0),
}


def default_meal_time(meal_name: str) -> time:
    return DEFAULT_MEAL_TIMES.get((meal_name or "").strip().lower(), DEFAULT_MEAL_TIME)


class MealPlanService:
    """
    Meal plan lifecycle: create (with generated meals), list, update,
    delete, duplicate, daily meals from a template and new-meal rebalancing.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        normalizer: Optional[CalorieDistributionNormalizer] = None,
        meal_service: Optional[MealService] = None,
        default_target_calories: float = 2000,
    ):
        self.uow = uow
        self.normalizer = normalizer or CalorieDistributionNormalizer()
        self.meals = meal_service or MealService(uow)
        self.default_target_calories = default_target_calories

    def _owned_plan(
        self, plan_id: uuid.UUID, owner_id: uuid.UUID, with_meals: bool = True
    ) -> MealPlan:
        plan = self.uow.meal_plans.get_by_id_and_owner(plan_id, owner_id, with_meals=with_meals)
        if not plan:
            raise NotFoundError(f"Meal plan not found: {plan_id}")
        return plan

    @staticmethod
    def _check_dates(start_date: Optional[date], end_date: Optional[date]) -> None:
        if start_date and end_date and end_date < start_date:
            raise ServiceValidationError(
                "end_date must not be before start_date",
                details={"start_date": str(start_date), "end_date": str(end_date)},
            )

    # ---------- create ----------

    def create_meal_plan(self, plan_data: MealPlanCreate, owner_id: uuid.UUID) -> MealPlan:
        """
        Create a plan, normalize its distribution and, unless disabled,
        generate one meal per distribution entry.

        Plan and generated meals are committed together.
        """
        start_date = plan_data.start_date or date.today()
        self._check_dates(start_date, plan_data.end_date)
        distribution = (
            [entry.model_dump() for entry in plan_data.calorie_distribution]
            if plan_data.calorie_distribution
            else None
        )

        with self.uow.transaction():
            plan = MealPlan(
                owner_id=owner_id,
                name=plan_data.name,
                description=plan_data.description,
                start_date=start_date,
                end_date=plan_data.end_date,
                target_calories=plan_data.target_calories or self.default_target_calories,
            )
            plan.apply_distribution(distribution, self.normalizer)
            self.uow.meal_plans.add(plan)

            if plan_data.auto_generate_meals:
                for entry in plan.calorie_distribution:
                    calories = entry["calorie_amount"]
                    self.meals.build_meal(
                        plan,
                        entry["meal_name"],
                        default_meal_time(entry["meal_name"]),
                        calories,
                        macro_goals(calories),
                    )
                self.uow.db.flush()
            plan_id = plan.plan_id
            meal_count = len(plan.meals)

        logger.info(
            "Created meal plan %s for owner %s with %d meals", plan_id, owner_id, meal_count
        )
        return plan

    # ---------- read ----------

    def get_meal_plans(
        self, owner_id: uuid.UUID, page: int = 1, page_size: int = 10
    ) -> Dict[str, Any]:
        if page < 1 or page_size < 1:
            raise ServiceValidationError("page and page_size must be positive")

        total = self.uow.meal_plans.count_by_owner(owner_id)
        items = self.uow.meal_plans.list_by_owner(
            owner_id, skip=(page - 1) * page_size, limit=page_size
        )
        return {
            "items": items,
            "meta": {
                "page": page,
                "page_size": page_size,
                "total": total,
                "total_pages": math.ceil(total / page_size) if total else 0,
            },
        }

    def get_meal_plan_by_id(self, plan_id: uuid.UUID, owner_id: uuid.UUID) -> MealPlan:
        return self._owned_plan(plan_id, owner_id)

    def get_meal_plan_by_date(self, day: date, owner_id: uuid.UUID) -> Optional[MealPlan]:
        """Most recently started owned plan covering ``day``, if any"""
        plans = self.uow.meal_plans.list_covering(day, owner_id)
        return plans[0] if plans else None

    # ---------- update / delete ----------

    def update_meal_plan(
        self, plan_id: uuid.UUID, patch: MealPlanUpdate, owner_id: uuid.UUID
    ) -> MealPlan:
        data = patch.model_dump(exclude_unset=True)
        if not data:
            raise ServiceValidationError("No fields to update")

        distribution = data.pop("calorie_distribution", None)
        target_calories = data.pop("target_calories", None)

        with self.uow.transaction():
            plan = self._owned_plan(plan_id, owner_id, with_meals=False)

            for field in ("name", "start_date"):
                if data.get(field) is not None:
                    setattr(plan, field, data[field])
            for field in ("description", "end_date"):
                if field in data:
                    setattr(plan, field, data[field])
            self._check_dates(plan.start_date, plan.end_date)

            if distribution is not None:
                plan.apply_distribution(distribution, self.normalizer, target_calories)
            elif target_calories is not None:
                plan.target_calories = target_calories
                plan.recompute_calorie_amounts(self.normalizer)
            self.uow.db.flush()

        logger.info("Updated meal plan %s fields=%s", plan_id, sorted(patch.model_fields_set))
        return plan

    def delete_meal_plan(self, plan_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        with self.uow.transaction():
            plan = self._owned_plan(plan_id, owner_id, with_meals=False)
            self.uow.meal_plans.remove(plan)

        logger.info("Deleted meal plan %s", plan_id)

    # ---------- duplicate ----------

    def _copy_meals(self, source: MealPlan, target: MealPlan) -> int:
        """Copy meals and catalog meal foods of ``source`` into ``target`` uneaten.

        Returns the number of meal foods skipped for having no catalog food.
        """
        skipped = 0
        for meal in source.meals:
            clone = self.meals.build_meal(
                target,
                meal.name,
                meal.target_time,
                meal.target_calories,
                meal.nutrition_goals,
            )
            for meal_food in meal.meal_foods:
                if meal_food.food_id is None:
                    skipped += 1
                    continue
                clone.meal_foods.append(
                    MealFood(
                        food_id=meal_food.food_id,
                        serving_size=meal_food.serving_size,
                        serving_unit=meal_food.serving_unit,
                        nutrients=dict(meal_food.nutrients or {}),
                        eaten=False,
                        eaten_at=None,
                    )
                )
        return skipped

    def duplicate_meal_plan(
        self,
        source_id: uuid.UUID,
        owner_id: uuid.UUID,
        target_date: Optional[date] = None,
    ) -> MealPlan:
        """
        Deep-copy a plan with fresh ids and cleared eaten state.

        Meal foods without a catalog food (unsaved custom foods) are not
        copied.
        """
        with self.uow.transaction():
            source = self._owned_plan(source_id, owner_id)

            start_date = target_date or date.today()
            end_date = None
            if source.end_date is not None:
                end_date = start_date + (source.end_date - source.start_date)

            copy = MealPlan(
                owner_id=owner_id,
                name=f"Copy of {source.name}",
                description=source.description,
                start_date=start_date,
                end_date=end_date,
                target_calories=source.target_calories,
                calorie_distribution=[dict(e) for e in source.calorie_distribution or []],
            )
            self.uow.meal_plans.add(copy)

            skipped = self._copy_meals(source, copy)
            self.uow.db.flush()
            copy_id = copy.plan_id

        if skipped:
            logger.warning(
                "Duplicated plan %s without %d meal foods that have no catalog food",
                source_id,
                skipped,
            )
        logger.info("Duplicated meal plan %s into %s", source_id, copy_id)
        return copy

    def create_daily_meals_from_template(
        self, template_id: uuid.UUID, day: date, owner_id: uuid.UUID
    ) -> List[Meal]:
        """
        Lay out a template plan's meals on ``day``.

        The meals land in a new single-day plan. When the owner already has
        meals on ``day`` those are returned and nothing is created; a template
        without meals yields an empty list.
        """
        with self.uow.transaction():
            template = self._owned_plan(template_id, owner_id)
            if not template.meals:
                return []

            existing = self.uow.meals.list_for_date(day, owner_id)
            if existing:
                logger.info(
                    "Owner %s already has %d meals on %s, template %s not applied",
                    owner_id,
                    len(existing),
                    day,
                    template_id,
                )
                return existing

            daily = MealPlan(
                owner_id=owner_id,
                name=f"{template.name} ({day.isoformat()})",
                description=template.description,
                start_date=day,
                end_date=day,
                target_calories=template.target_calories,
                calorie_distribution=[dict(e) for e in template.calorie_distribution or []],
            )
            self.uow.meal_plans.add(daily)
            skipped = self._copy_meals(template, daily)
            self.uow.db.flush()
            meals = list(daily.meals)

        if skipped:
            logger.warning(
                "Template %s applied without %d meal foods that have no catalog food",
                template_id,
                skipped,
            )
        logger.info("Created %d meals on %s from template %s", len(meals), day, template_id)
        return meals

    # ---------- rebalancing ----------

    def adjust_meal_percentages_for_new_meal(
        self,
        plan_id: uuid.UUID,
        new_percentage: Optional[float],
        owner_id: uuid.UUID,
        meal_name: str = "New Meal",
    ) -> List[Dict[str, Any]]:
        """Proposed distribution after inserting a meal; nothing is persisted."""
        plan = self._owned_plan(plan_id, owner_id, with_meals=False)
        return self.normalizer.adjust_for_new_meal(
            plan.calorie_distribution,
            new_percentage,
            meal_name=meal_name,
            target_calories=plan.target_calories,
        )
