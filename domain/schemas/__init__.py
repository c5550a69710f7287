"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.meal_schemas import (
    NutritionGoals,
    MealCreate,
    MealUpdate,
    CustomFoodCreate,
    AddFoodToMealRequest,
    MealFoodUpdate,
    SetMealEatenRequest,
    ToggleResponse,
    MealFoodResponse,
    MealResponse,
)
from domain.schemas.meal_plan_schemas import (
    DistributionEntry,
    MealPlanCreate,
    MealPlanUpdate,
    DuplicateMealPlanRequest,
    DailyMealsRequest,
    AdjustDistributionRequest,
    MealPlanResponse,
    MealPlanSummary,
    PageMeta,
    MealPlanPage,
)

__all__ = [
    # Meal schemas
    "NutritionGoals",
    "MealCreate",
    "MealUpdate",
    "CustomFoodCreate",
    "AddFoodToMealRequest",
    "MealFoodUpdate",
    "SetMealEatenRequest",
    "ToggleResponse",
    "MealFoodResponse",
    "MealResponse",
    # Meal plan schemas
    "DistributionEntry",
    "MealPlanCreate",
    "MealPlanUpdate",
    "DuplicateMealPlanRequest",
    "DailyMealsRequest",
    "AdjustDistributionRequest",
    "MealPlanResponse",
    "MealPlanSummary",
    "PageMeta",
    "MealPlanPage",
]
