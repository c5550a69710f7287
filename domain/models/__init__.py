"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    build_engine,
    init_database,
    get_db_session,
)
from domain.models.food import Food, NUTRIENT_FIELDS
from domain.models.meal_plan import MealPlan, Meal, MealFood

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "build_engine",
    "init_database",
    "get_db_session",
    # Food catalog
    "Food",
    "NUTRIENT_FIELDS",
    # Meal plan models
    "MealPlan",
    "Meal",
    "MealFood",
]
