"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.food_repository import FoodRepository
from repositories.meal_plan_repository import (
    MealPlanRepository,
    MealRepository,
    MealFoodRepository,
)
from repositories.unit_of_work import UnitOfWork

__all__ = [
    "BaseRepository",
    "FoodRepository",
    "MealPlanRepository",
    "MealRepository",
    "MealFoodRepository",
    "UnitOfWork",
]
