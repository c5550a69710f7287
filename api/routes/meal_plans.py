"""Meal plan routes"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status

from api.dependencies import get_meal_plan_service, get_meal_service
from domain.schemas.meal_plan_schemas import (
    AdjustDistributionRequest,
    DailyMealsRequest,
    DistributionEntry,
    DuplicateMealPlanRequest,
    MealPlanCreate,
    MealPlanPage,
    MealPlanResponse,
    MealPlanSummary,
    MealPlanUpdate,
)
from domain.schemas.meal_schemas import MealCreate, MealResponse
from services import MealPlanService, MealService

router = APIRouter(prefix="/meal-plans", tags=["Meal Plans"])
logger = logging.getLogger("mealtrack.api.meal_plans")


@router.post("", response_model=MealPlanResponse, status_code=status.HTTP_201_CREATED)
def create_meal_plan(
    body: MealPlanCreate,
    owner_id: UUID = Query(...),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    """
    Create a meal plan.

    The calorie distribution is normalized to 100% (Breakfast 25 / Lunch 40 /
    Dinner 35 when omitted) and one meal is generated per entry
    unless ``auto_generate_meals`` is false.
    """
    plan = service.create_meal_plan(body, owner_id)
    return MealPlanResponse.model_validate(plan)


@router.get("", response_model=MealPlanPage)
def list_meal_plans(
    owner_id: UUID = Query(...),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    result = service.get_meal_plans(owner_id, page=page, page_size=page_size)
    return MealPlanPage(
        items=[MealPlanSummary.model_validate(p) for p in result["items"]],
        meta=result["meta"],
    )


@router.get("/by-date", response_model=Optional[MealPlanResponse])
def get_meal_plan_by_date(
    day: date = Query(..., description="Date the plan must cover"),
    owner_id: UUID = Query(...),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    """Plan active on ``day``, or null"""
    plan = service.get_meal_plan_by_date(day, owner_id)
    return MealPlanResponse.model_validate(plan) if plan else None


@router.get("/{plan_id}", response_model=MealPlanResponse)
def get_meal_plan(
    plan_id: UUID,
    owner_id: UUID = Query(...),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    return MealPlanResponse.model_validate(service.get_meal_plan_by_id(plan_id, owner_id))


@router.patch("/{plan_id}", response_model=MealPlanResponse)
def update_meal_plan(
    plan_id: UUID,
    body: MealPlanUpdate,
    owner_id: UUID = Query(...),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    """Partial update; a new distribution is re-normalized and re-priced"""
    plan = service.update_meal_plan(plan_id, body, owner_id)
    return MealPlanResponse.model_validate(plan)


@router.delete("/{plan_id}")
def delete_meal_plan(
    plan_id: UUID,
    owner_id: UUID = Query(...),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    service.delete_meal_plan(plan_id, owner_id)
    return {"status": "ok", "removed": str(plan_id)}


@router.post(
    "/{plan_id}/duplicate",
    response_model=MealPlanResponse,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_meal_plan(
    plan_id: UUID,
    owner_id: UUID = Query(...),
    body: Optional[DuplicateMealPlanRequest] = Body(default=None),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    """Copy a plan with its meals and foods; eaten state is cleared"""
    target_date = body.target_date if body else None
    plan = service.duplicate_meal_plan(plan_id, owner_id, target_date)
    return MealPlanResponse.model_validate(plan)


@router.post("/{plan_id}/daily-meals", response_model=List[MealResponse])
def create_daily_meals_from_template(
    plan_id: UUID,
    body: DailyMealsRequest,
    owner_id: UUID = Query(...),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    """
    Copy this plan's meals and foods onto one day.

    Meals already planned on that day are returned instead of creating
    duplicates.
    """
    meals = service.create_daily_meals_from_template(plan_id, body.day, owner_id)
    return [MealResponse.model_validate(m) for m in meals]


@router.post("/{plan_id}/adjust-distribution", response_model=List[DistributionEntry])
def adjust_distribution_for_new_meal(
    plan_id: UUID,
    body: AdjustDistributionRequest,
    owner_id: UUID = Query(...),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    """Preview the distribution after inserting a meal; nothing is saved"""
    return service.adjust_meal_percentages_for_new_meal(
        plan_id, body.new_percentage, owner_id, meal_name=body.meal_name
    )


@router.post(
    "/{plan_id}/meals",
    response_model=MealResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_meal_to_plan(
    plan_id: UUID,
    body: MealCreate,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    meal = service.add_meal_to_plan(plan_id, body, owner_id)
    return MealResponse.model_validate(meal)
