"""API routes package"""

from . import health, meal_plans, meals, nutrition

__all__ = ["health", "meal_plans", "meals", "nutrition"]
