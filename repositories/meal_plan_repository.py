"""
Meal Plan Repository - Data access layer for meal plans, meals and meal foods.

Every lookup that takes an ``owner_id`` filters through the owning plan, so a
row belonging to another owner behaves exactly like a missing row.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload, joinedload

from repositories.base import BaseRepository
from domain.models import MealPlan, Meal, MealFood


def _meal_tree():
    return selectinload(Meal.meal_foods).joinedload(MealFood.food)


class MealPlanRepository(BaseRepository[MealPlan]):
    """Repository for meal plan data access"""

    def __init__(self, db: Session):
        super().__init__(db, MealPlan)

    def get_by_id_and_owner(
        self, plan_id: UUID, owner_id: UUID, with_meals: bool = True
    ) -> Optional[MealPlan]:
        """Get meal plan by ID for a specific owner, optionally with meals and foods"""
        query = self.db.query(MealPlan).filter(
            MealPlan.plan_id == plan_id, MealPlan.owner_id == owner_id
        )
        if with_meals:
            query = query.options(selectinload(MealPlan.meals).options(_meal_tree()))
        return query.first()

    def list_by_owner(
        self, owner_id: UUID, skip: int = 0, limit: Optional[int] = 10
    ) -> List[MealPlan]:
        """Owner's plans, newest first; ``limit=None`` returns all of them"""
        return (
            self.db.query(MealPlan)
            .filter(MealPlan.owner_id == owner_id)
            .order_by(MealPlan.created_at.desc(), MealPlan.start_date.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_owner(self, owner_id: UUID) -> int:
        return self.db.query(MealPlan).filter(MealPlan.owner_id == owner_id).count()

    def list_covering(self, day: date, owner_id: UUID) -> List[MealPlan]:
        """Owner's plans whose [start_date, end_date] window contains ``day``"""
        return (
            self.db.query(MealPlan)
            .filter(
                MealPlan.owner_id == owner_id,
                MealPlan.start_date <= day,
                or_(MealPlan.end_date.is_(None), MealPlan.end_date >= day),
            )
            .order_by(MealPlan.start_date.desc())
            .all()
        )


class MealRepository(BaseRepository[Meal]):
    """Repository for meal data access"""

    def __init__(self, db: Session):
        super().__init__(db, Meal)

    def get_by_id_and_owner(self, meal_id: UUID, owner_id: UUID) -> Optional[Meal]:
        """Get meal with its foods, constrained by the owning plan's owner"""
        return (
            self.db.query(Meal)
            .join(MealPlan, Meal.plan_id == MealPlan.plan_id)
            .filter(Meal.meal_id == meal_id, MealPlan.owner_id == owner_id)
            .options(joinedload(Meal.plan), _meal_tree())
            .first()
        )

    def list_for_date(self, day: date, owner_id: UUID) -> List[Meal]:
        """Meals of the owner's plans active on ``day``, ordered by target time"""
        return (
            self.db.query(Meal)
            .join(MealPlan, Meal.plan_id == MealPlan.plan_id)
            .filter(
                MealPlan.owner_id == owner_id,
                MealPlan.start_date <= day,
                or_(MealPlan.end_date.is_(None), MealPlan.end_date >= day),
            )
            .options(joinedload(Meal.plan), _meal_tree())
            .order_by(Meal.target_time, Meal.name)
            .all()
        )

    def list_by_owner(self, owner_id: UUID) -> List[Meal]:
        """Every meal of the owner's plans, with foods"""
        return (
            self.db.query(Meal)
            .join(MealPlan, Meal.plan_id == MealPlan.plan_id)
            .filter(MealPlan.owner_id == owner_id)
            .options(_meal_tree())
            .order_by(MealPlan.start_date, Meal.target_time)
            .all()
        )


class MealFoodRepository(BaseRepository[MealFood]):
    """Repository for meal food data access"""

    def __init__(self, db: Session):
        super().__init__(db, MealFood)

    def get_by_id_and_owner(self, meal_food_id: UUID, owner_id: UUID) -> Optional[MealFood]:
        return (
            self.db.query(MealFood)
            .join(Meal, MealFood.meal_id == Meal.meal_id)
            .join(MealPlan, Meal.plan_id == MealPlan.plan_id)
            .filter(MealFood.meal_food_id == meal_food_id, MealPlan.owner_id == owner_id)
            .options(joinedload(MealFood.food), joinedload(MealFood.meal))
            .first()
        )
