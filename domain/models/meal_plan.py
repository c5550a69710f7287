"""
Meal planning models.

MealPlan owns its Meals and each Meal owns its MealFoods. The eaten flags and
the calorie distribution are changed through the aggregate methods below so
the plan and meal invariants hold after every write.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    ForeignKey,
    Float,
    Date,
    Time,
    Boolean,
    JSON,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MealPlan(Base):
    """Dated plan splitting a daily calorie target across named meals"""

    __tablename__ = "meal_plan"

    plan_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    target_calories = Column(Float, nullable=False, default=2000)
    calorie_distribution = Column(JSON, nullable=False, default=list)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    meals = relationship(
        "Meal",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="Meal.target_time",
    )

    def apply_distribution(self, distribution, normalizer, target_calories=None):
        """Normalize ``distribution`` and store it with calorie amounts for this plan's target."""
        if target_calories is not None:
            self.target_calories = target_calories
        normalized = normalizer.normalize(distribution)
        self.calorie_distribution = normalizer.compute_amounts(
            normalized, self.target_calories
        )
        return self.calorie_distribution

    def recompute_calorie_amounts(self, normalizer):
        """Refresh amounts after a target change without touching percentages."""
        self.calorie_distribution = normalizer.compute_amounts(
            list(self.calorie_distribution or []), self.target_calories
        )
        return self.calorie_distribution

    def __repr__(self):
        return f"<MealPlan(id={self.plan_id}, name='{self.name}')>"


class Meal(Base):
    """A named meal of a plan with its own calorie target and eaten state"""

    __tablename__ = "meal"

    meal_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    plan_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("meal_plan.plan_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(Text, nullable=False)
    target_time = Column(Time, nullable=False)
    target_calories = Column(Float, nullable=False, default=0)
    nutrition_goals = Column(JSON, nullable=False, default=dict)  # grams
    eaten = Column(Boolean, nullable=False, default=False)
    eaten_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    plan = relationship("MealPlan", back_populates="meals")
    meal_foods = relationship(
        "MealFood",
        back_populates="meal",
        cascade="all, delete-orphan",
        order_by="MealFood.created_at",
    )

    def set_eaten(self, eaten: bool, at: datetime = None):
        """Set the meal's flag and push the same value and timestamp to every food."""
        at = (at or _utcnow()) if eaten else None
        self.eaten = eaten
        self.eaten_at = at
        for meal_food in self.meal_foods:
            meal_food.set_eaten(eaten, at)

    def sync_eaten_from_foods(self, at: datetime = None) -> bool:
        """Recompute the flag as the AND of the foods' flags.

        Returns True when the meal changed. Meals without foods are left alone.
        """
        if not self.meal_foods:
            return False
        all_eaten = all(bool(mf.eaten) for mf in self.meal_foods)
        if all_eaten == bool(self.eaten):
            return False
        self.eaten = all_eaten
        self.eaten_at = (at or _utcnow()) if all_eaten else None
        return True

    def is_consistent(self) -> bool:
        if not self.meal_foods:
            return True
        return bool(self.eaten) == all(bool(mf.eaten) for mf in self.meal_foods)

    def __repr__(self):
        return f"<Meal(id={self.meal_id}, name='{self.name}', eaten={self.eaten})>"


class MealFood(Base):
    """A serving of a food inside a meal, with its nutrient snapshot"""

    __tablename__ = "meal_food"

    meal_food_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    meal_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("meal.meal_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    food_id = Column(
        Uuid(as_uuid=True), ForeignKey("food.food_id", ondelete="SET NULL"), nullable=True
    )
    serving_size = Column(Float, nullable=False)
    serving_unit = Column(Text, nullable=False, default="g")
    nutrients = Column(JSON, nullable=False, default=dict)
    # unsaved custom foods are embedded here instead of referencing the catalog
    custom_food = Column(JSON)
    eaten = Column(Boolean, nullable=False, default=False)
    eaten_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    meal = relationship("Meal", back_populates="meal_foods")
    food = relationship("Food")

    @property
    def food_name(self) -> str:
        if self.food is not None:
            return self.food.name
        if self.custom_food:
            return self.custom_food.get("name") or "Unknown Food"
        return "Unknown Food"

    def set_eaten(self, eaten: bool, at: datetime = None):
        self.eaten = eaten
        self.eaten_at = (at or _utcnow()) if eaten else None

    def toggle_eaten(self, at: datetime = None) -> bool:
        self.set_eaten(not self.eaten, at)
        return self.eaten

    def __repr__(self):
        return f"<MealFood(id={self.meal_food_id}, eaten={self.eaten})>"
