from __future__ import annotations

from datetime import datetime, time
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class NutritionGoals(BaseModel):
    """Macro goals of a meal, in grams"""

    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)


class MealCreate(BaseModel):
    """Schema for adding a meal to a plan"""

    name: str = Field(..., min_length=1)
    target_time: Optional[str] = Field(None, description="HH:MM, defaults to 12:00")
    target_calories: float = Field(default=0, ge=0)
    nutrition_goals: Optional[NutritionGoals] = None


class MealUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    target_time: Optional[str] = Field(None, description="HH:MM")
    target_calories: Optional[float] = Field(None, ge=0)
    nutrition_goals: Optional[NutritionGoals] = None


class CustomFoodCreate(BaseModel):
    """Caller-supplied food, per reference serving"""

    name: str = Field(..., min_length=1)
    brand: Optional[str] = None
    serving_size: float = Field(default=100, gt=0)
    serving_unit: str = Field(default="g", min_length=1)
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbohydrates: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)
    fiber: float = Field(default=0, ge=0)
    sugar: float = Field(default=0, ge=0)
    sodium: float = Field(default=0, ge=0)
    cholesterol: float = Field(default=0, ge=0)


class AddFoodToMealRequest(BaseModel):
    """
    Add a food to a meal.

    Exactly one of ``food_id``, ``external_food_id``, ``custom_food`` or
    ``query`` selects how the food is resolved.
    """

    food_id: Optional[UUID] = Field(None, description="Food from the local catalog")
    external_food_id: Optional[str] = Field(None, description="FoodData Central id")
    custom_food: Optional[CustomFoodCreate] = None
    query: Optional[str] = Field(None, description="Free-text search, first hit is used")
    serving_size: Optional[float] = Field(
        None, gt=0, description="Defaults to the food's reference serving"
    )
    serving_unit: Optional[str] = None
    save_to_collection: bool = Field(
        default=False, description="Persist a custom food to the catalog"
    )

    def strategies(self) -> List[str]:
        """Names of the resolution strategies set on this request"""
        chosen = []
        if self.food_id is not None:
            chosen.append("food_id")
        if self.external_food_id and self.external_food_id.strip():
            chosen.append("external_food_id")
        if self.custom_food is not None:
            chosen.append("custom_food")
        if self.query and self.query.strip():
            chosen.append("query")
        return chosen


class MealFoodUpdate(BaseModel):
    serving_size: Optional[float] = Field(None, gt=0)
    serving_unit: Optional[str] = Field(None, min_length=1)


class SetMealEatenRequest(BaseModel):
    eaten: bool = True


class ToggleResponse(BaseModel):
    eaten: bool


class MealFoodResponse(BaseModel):
    """Schema for a food entry of a meal"""

    meal_food_id: UUID
    meal_id: UUID
    food_id: Optional[UUID] = None
    food_name: str
    serving_size: float
    serving_unit: str
    nutrients: Dict[str, float] = {}
    custom_food: Optional[Dict[str, Any]] = None
    eaten: bool
    eaten_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MealResponse(BaseModel):
    """Schema for a meal with its foods"""

    meal_id: UUID
    plan_id: UUID
    name: str
    target_time: time
    target_calories: float
    nutrition_goals: Dict[str, float] = {}
    eaten: bool
    eaten_at: Optional[datetime] = None
    meal_foods: List[MealFoodResponse] = []

    model_config = {"from_attributes": True}
