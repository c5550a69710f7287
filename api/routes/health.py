"""Health check and utility routes"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, get_food_resolver
from adapters import NullFoodResolver
from app.config import settings

router = APIRouter(tags=["Health"])
logger = logging.getLogger("mealtrack.api.health")


@router.get("/health-check")
def health_check():
    """Basic health check endpoint"""
    return {"status": "ok", "service": settings.app_name}


@router.get("/health-check/dependencies")
def dependencies_status(db: Session = Depends(get_db), resolver=Depends(get_food_resolver)):
    """Report database reachability and whether external food lookups are enabled."""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.exception("Database health check failed")
        database = f"error: {e.__class__.__name__}"
    return {
        "database": database,
        "food_lookup": "disabled" if isinstance(resolver, NullFoodResolver) else "enabled",
    }
