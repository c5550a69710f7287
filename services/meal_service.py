from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional, Tuple

from adapters.food_resolver import FoodRecord, FoodResolver, NullFoodResolver
from app.exceptions import (
    ConsistencyViolationError,
    NotFoundError,
    ServiceValidationError,
)
from domain.models import Food, Meal, MealFood, MealPlan
from domain.schemas.meal_schemas import (
    AddFoodToMealRequest,
    MealCreate,
    MealFoodUpdate,
    MealUpdate,
)
from repositories import UnitOfWork
from services.nutrition_calculator import NutrientCalculator, nutrient_value

logger = logging.getLogger("mealtrack.meals")

DEFAULT_MEAL_TIME = time(12, 0)


def parse_meal_time(value: Optional[str]) -> time:
    """Parse an ``HH:MM`` string; missing values default to noon."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_MEAL_TIME
    if isinstance(value, time):
        return value
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (TypeError, ValueError):
        raise ServiceValidationError(
            f"Invalid time '{value}', expected HH:MM", details={"target_time": value}
        )


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MealService:
    """
    Meals of a plan, the foods inside them and their eaten state.

    Every write runs inside one ``UnitOfWork.transaction()``. Eaten flags are
    only changed through the ``Meal``/``MealFood`` aggregate methods and the
    meal is checked against its foods before the transaction commits.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        resolver: Optional[FoodResolver] = None,
        calculator: Optional[NutrientCalculator] = None,
    ):
        self.uow = uow
        self.resolver = resolver or NullFoodResolver()
        self.calculator = calculator or NutrientCalculator()

    # ---------- lookups ----------

    def _owned_plan(self, plan_id: uuid.UUID, owner_id: uuid.UUID) -> MealPlan:
        plan = self.uow.meal_plans.get_by_id_and_owner(plan_id, owner_id, with_meals=False)
        if not plan:
            raise NotFoundError(f"Meal plan not found: {plan_id}")
        return plan

    def _owned_meal(self, meal_id: uuid.UUID, owner_id: uuid.UUID) -> Meal:
        meal = self.uow.meals.get_by_id_and_owner(meal_id, owner_id)
        if not meal:
            raise NotFoundError(f"Meal not found: {meal_id}")
        return meal

    def _owned_meal_food(self, meal_food_id: uuid.UUID, owner_id: uuid.UUID) -> MealFood:
        meal_food = self.uow.meal_foods.get_by_id_and_owner(meal_food_id, owner_id)
        if not meal_food:
            raise NotFoundError(f"Meal food not found: {meal_food_id}")
        return meal_food

    @staticmethod
    def _find_in_meal(meal: Meal, food_id: uuid.UUID) -> MealFood:
        """Match a meal food by its own id first, then by its catalog food id."""
        for mf in meal.meal_foods:
            if mf.meal_food_id == food_id:
                return mf
        for mf in meal.meal_foods:
            if mf.food_id is not None and mf.food_id == food_id:
                return mf
        raise NotFoundError(f"Food {food_id} not found in meal {meal.meal_id}")

    @staticmethod
    def _verify(meal: Meal) -> None:
        if not meal.is_consistent():
            raise ConsistencyViolationError(
                "Meal eaten flag disagrees with its foods",
                details={
                    "meal_id": str(meal.meal_id),
                    "meal_eaten": bool(meal.eaten),
                    "foods_eaten": [bool(mf.eaten) for mf in meal.meal_foods],
                },
            )

    def get_meal_by_id(self, meal_id: uuid.UUID, owner_id: uuid.UUID) -> Meal:
        return self._owned_meal(meal_id, owner_id)

    def get_meals_by_date(self, day: date, owner_id: uuid.UUID) -> List[Meal]:
        """Meals of every owned plan active on ``day``, by target time"""
        return self.uow.meals.list_for_date(day, owner_id)

    # ---------- meals ----------

    @staticmethod
    def build_meal(
        plan: MealPlan,
        name: str,
        target_time: time,
        target_calories: float = 0,
        nutrition_goals: Optional[Dict[str, float]] = None,
    ) -> Meal:
        meal = Meal(
            name=name,
            target_time=target_time,
            target_calories=target_calories or 0,
            nutrition_goals=dict(nutrition_goals or {}),
            eaten=False,
        )
        plan.meals.append(meal)
        return meal

    def add_meal_to_plan(
        self, plan_id: uuid.UUID, meal_data: MealCreate, owner_id: uuid.UUID
    ) -> Meal:
        target_time = parse_meal_time(meal_data.target_time)
        goals = meal_data.nutrition_goals.model_dump() if meal_data.nutrition_goals else {}

        with self.uow.transaction():
            plan = self._owned_plan(plan_id, owner_id)
            meal = self.build_meal(
                plan, meal_data.name, target_time, meal_data.target_calories, goals
            )
            self.uow.meals.add(meal)
            meal_id = meal.meal_id

        logger.info("Added meal %s '%s' to plan %s", meal_id, meal_data.name, plan_id)
        return meal

    def update_meal(
        self, meal_id: uuid.UUID, patch: MealUpdate, owner_id: uuid.UUID
    ) -> Meal:
        data = patch.model_dump(exclude_unset=True)
        if not data:
            raise ServiceValidationError("No fields to update")
        if "target_time" in data:
            if data["target_time"] is None:
                raise ServiceValidationError("target_time cannot be null")
            data["target_time"] = parse_meal_time(data["target_time"])
        if "nutrition_goals" in data:
            data["nutrition_goals"] = dict(data["nutrition_goals"] or {})

        with self.uow.transaction():
            meal = self._owned_meal(meal_id, owner_id)
            for field, value in data.items():
                if value is None and field in ("name", "target_calories"):
                    continue
                setattr(meal, field, value)
            self.uow.db.flush()

        logger.info("Updated meal %s fields=%s", meal_id, sorted(data))
        return meal

    def delete_meal(self, meal_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        with self.uow.transaction():
            meal = self._owned_meal(meal_id, owner_id)
            removed_foods = len(meal.meal_foods)
            self.uow.meals.remove(meal)

        logger.info("Deleted meal %s with %d foods", meal_id, removed_foods)

    # ---------- foods ----------

    def _cache_record(self, record: FoodRecord) -> Food:
        if record.external_id:
            cached = self.uow.foods.get_by_external_id(record.external_id)
            if cached:
                return cached
        food = Food(**record.to_dict(), is_custom=False)
        self.uow.foods.add(food)
        logger.info("Cached external food %s '%s'", record.external_id, record.name)
        return food

    def _resolve_food(
        self, request: AddFoodToMealRequest, owner_id: uuid.UUID
    ) -> Tuple[Optional[Food], Optional[Dict[str, Any]]]:
        """Return the catalog food, or the embedded record of an unsaved custom food."""
        if request.food_id is not None:
            food = self.uow.foods.get_by_id(request.food_id)
            if not food or (food.is_custom and food.owner_id not in (None, owner_id)):
                raise NotFoundError(f"Food not found: {request.food_id}")
            return food, None

        external_id = (request.external_food_id or "").strip()
        if external_id:
            food = self.uow.foods.get_by_external_id(external_id)
            if food:
                return food, None
            record = self.resolver.get_by_id(external_id)
            if record is None:
                raise NotFoundError(f"External food not found: {external_id}")
            return self._cache_record(record), None

        if request.custom_food is not None:
            custom = request.custom_food.model_dump()
            if request.save_to_collection:
                food = Food(**custom, is_custom=True, owner_id=owner_id)
                self.uow.foods.add(food)
                logger.info("Saved custom food '%s' for owner %s", food.name, owner_id)
                return food, None
            return None, FoodRecord.from_dict({**custom, "external_id": None}).to_dict()

        query = request.query.strip()
        results = self.resolver.search(query)
        if not results:
            raise NotFoundError(f"No foods found for '{query}'")
        return self._cache_record(results[0]), None

    def add_food_to_meal(
        self, meal_id: uuid.UUID, request: AddFoodToMealRequest, owner_id: uuid.UUID
    ) -> MealFood:
        """
        Resolve a food and attach it to a meal with a nutrient snapshot.

        Raises:
            ServiceValidationError: zero or several resolution strategies given
            NotFoundError: meal or food could not be found
            ExternalLookupError: the food provider failed
        """
        strategies = request.strategies()
        if len(strategies) != 1:
            raise ServiceValidationError(
                "Provide exactly one of food_id, external_food_id, custom_food or query",
                details={"strategies": strategies},
            )

        with self.uow.transaction():
            meal = self._owned_meal(meal_id, owner_id)
            food, custom = self._resolve_food(request, owner_id)
            source = food if food is not None else custom

            serving_size = request.serving_size or nutrient_value(source, "serving_size") or 100.0
            if food is not None:
                serving_unit = request.serving_unit or food.serving_unit or "g"
            else:
                serving_unit = request.serving_unit or custom.get("serving_unit") or "g"

            meal_food = MealFood(
                meal=meal,
                food=food,
                serving_size=serving_size,
                serving_unit=serving_unit,
                nutrients=self.calculator.scale(source, serving_size),
                custom_food=custom,
                eaten=False,
            )
            self.uow.meal_foods.add(meal_food)

            if meal.sync_eaten_from_foods():
                logger.info("Meal %s no longer fully eaten after adding a food", meal_id)
            self._verify(meal)
            meal_food_id = meal_food.meal_food_id

        logger.info(
            "Added food to meal %s via %s (meal_food=%s)", meal_id, strategies[0], meal_food_id
        )
        return meal_food

    def remove_food_from_meal(self, meal_food_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        # removal is not a toggle: the meal's eaten flag is left as is
        with self.uow.transaction():
            meal_food = self._owned_meal_food(meal_food_id, owner_id)
            self.uow.meal_foods.remove(meal_food)

        logger.info("Removed meal food %s", meal_food_id)

    def update_meal_food(
        self, meal_food_id: uuid.UUID, patch: MealFoodUpdate, owner_id: uuid.UUID
    ) -> MealFood:
        data = patch.model_dump(exclude_unset=True, exclude_none=True)
        if not data:
            raise ServiceValidationError("No fields to update")

        with self.uow.transaction():
            meal_food = self._owned_meal_food(meal_food_id, owner_id)

            new_size = data.pop("serving_size", None)
            if new_size is not None and new_size != meal_food.serving_size:
                source = meal_food.food if meal_food.food is not None else meal_food.custom_food
                if source is not None:
                    meal_food.nutrients = self.calculator.scale(source, new_size)
                else:
                    # catalog food is gone: rescale the snapshot itself
                    ratio = new_size / meal_food.serving_size if meal_food.serving_size else 0.0
                    meal_food.nutrients = {
                        field: nutrient_value(meal_food.nutrients, field) * ratio
                        for field in (meal_food.nutrients or {})
                    }
                meal_food.serving_size = new_size

            for field, value in data.items():
                setattr(meal_food, field, value)
            self.uow.db.flush()

        logger.info("Updated meal food %s", meal_food_id)
        return meal_food

    def recalculate_meal_nutrition(self, meal_id: uuid.UUID, owner_id: uuid.UUID) -> Meal:
        """
        Refresh every food snapshot of a meal from the current catalog values.

        Snapshots whose catalog food was deleted are kept as they are.
        """
        with self.uow.transaction():
            meal = self._owned_meal(meal_id, owner_id)
            refreshed = 0
            for meal_food in meal.meal_foods:
                source = meal_food.food if meal_food.food is not None else meal_food.custom_food
                if source is None:
                    continue
                meal_food.nutrients = self.calculator.scale(source, meal_food.serving_size)
                refreshed += 1
            self.uow.db.flush()

        logger.info(
            "Recalculated %d of %d food snapshots of meal %s",
            refreshed,
            len(meal.meal_foods),
            meal_id,
        )
        return meal

    # ---------- eaten state ----------

    def toggle_food_eaten(
        self, meal_id: uuid.UUID, food_id: uuid.UUID, owner_id: uuid.UUID
    ) -> bool:
        """
        Flip one food's eaten flag and bring the meal in line with its foods.

        ``food_id`` is the meal food id; a catalog food id is accepted as well.
        Returns the food's new flag.
        """
        with self.uow.transaction():
            meal = self._owned_meal(meal_id, owner_id)
            meal_food = self._find_in_meal(meal, food_id)
            now = _now()
            eaten = meal_food.toggle_eaten(now)
            if meal.sync_eaten_from_foods(now):
                logger.info("Meal %s eaten=%s after food toggle", meal_id, meal.eaten)
            self._verify(meal)

        return eaten

    def set_meal_eaten(self, meal_id: uuid.UUID, eaten: bool, owner_id: uuid.UUID) -> bool:
        """Set a meal's flag and push it to every food of the meal."""
        with self.uow.transaction():
            meal = self._owned_meal(meal_id, owner_id)
            meal.set_eaten(bool(eaten), _now())
            self._verify(meal)
            result = bool(meal.eaten)

        logger.info("Meal %s eaten=%s", meal_id, result)
        return result

    def toggle_meal_eaten(self, meal_id: uuid.UUID, owner_id: uuid.UUID) -> bool:
        with self.uow.transaction():
            meal = self._owned_meal(meal_id, owner_id)
            meal.set_eaten(not meal.eaten, _now())
            self._verify(meal)
            result = bool(meal.eaten)

        logger.info("Meal %s toggled to eaten=%s", meal_id, result)
        return result
