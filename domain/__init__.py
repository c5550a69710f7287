"""
Domain layer - ORM models and Pydantic schemas.
"""

from domain import models, schemas

__all__ = ["models", "schemas"]
