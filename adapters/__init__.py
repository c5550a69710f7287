"""
Adapters package - External service connections.
Food lookup providers behind the FoodResolver contract.
"""

from adapters.food_resolver import FoodRecord, FoodResolver, NullFoodResolver
from adapters.usda_adapter import USDAFoodResolver

__all__ = [
    "FoodRecord",
    "FoodResolver",
    "NullFoodResolver",
    "USDAFoodResolver",
]
