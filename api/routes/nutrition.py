"""Nutrition report routes"""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_report_service
from services import NutritionReportService

router = APIRouter(prefix="/nutrition", tags=["Nutrition"])
logger = logging.getLogger("mealtrack.api.nutrition")


@router.get("/daily")
def get_daily_nutrition(
    day: date = Query(...),
    owner_id: UUID = Query(...),
    service: NutritionReportService = Depends(get_report_service),
):
    """Calories, macros and meal progress for one day (eaten foods only)"""
    return service.get_daily_nutrition(day, owner_id)


@router.get("/weekly")
def get_weekly_nutrition(
    start: date = Query(...),
    end: date = Query(...),
    owner_id: UUID = Query(...),
    service: NutritionReportService = Depends(get_report_service),
):
    """Totals, daily averages and progress over an inclusive date range"""
    return service.get_weekly_nutrition(start, end, owner_id)


@router.get("/average-calories")
def get_average_calories(
    owner_id: UUID = Query(...),
    service: NutritionReportService = Depends(get_report_service),
):
    """Average calories per meal, from logged foods or else from plan distributions"""
    return service.get_average_calories(owner_id)


@router.get("/meals/{meal_id}")
def get_meal_nutrition(
    meal_id: UUID,
    owner_id: UUID = Query(...),
    service: NutritionReportService = Depends(get_report_service),
):
    return service.get_meal_nutrition(meal_id, owner_id)
