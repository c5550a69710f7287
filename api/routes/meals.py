"""Meal and meal food routes"""

from __future__ import annotations

import logging
from datetime import date
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_meal_service
from domain.schemas.meal_schemas import (
    AddFoodToMealRequest,
    MealFoodResponse,
    MealFoodUpdate,
    MealResponse,
    MealUpdate,
    SetMealEatenRequest,
    ToggleResponse,
)
from services import MealService

router = APIRouter(prefix="/meals", tags=["Meals"])
logger = logging.getLogger("mealtrack.api.meals")


@router.get("", response_model=List[MealResponse])
def get_meals_by_date(
    day: date = Query(..., description="Meals of every plan active on this date"),
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    meals = service.get_meals_by_date(day, owner_id)
    return [MealResponse.model_validate(m) for m in meals]


@router.patch("/foods/{meal_food_id}", response_model=MealFoodResponse)
def update_meal_food(
    meal_food_id: UUID,
    body: MealFoodUpdate,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    """Change a serving; the nutrient snapshot follows the new size"""
    meal_food = service.update_meal_food(meal_food_id, body, owner_id)
    return MealFoodResponse.model_validate(meal_food)


@router.delete("/foods/{meal_food_id}")
def remove_food_from_meal(
    meal_food_id: UUID,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    service.remove_food_from_meal(meal_food_id, owner_id)
    return {"status": "ok", "removed": str(meal_food_id)}


@router.get("/{meal_id}", response_model=MealResponse)
def get_meal(
    meal_id: UUID,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    return MealResponse.model_validate(service.get_meal_by_id(meal_id, owner_id))


@router.patch("/{meal_id}", response_model=MealResponse)
def update_meal(
    meal_id: UUID,
    body: MealUpdate,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    meal = service.update_meal(meal_id, body, owner_id)
    return MealResponse.model_validate(meal)


@router.delete("/{meal_id}")
def delete_meal(
    meal_id: UUID,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    service.delete_meal(meal_id, owner_id)
    return {"status": "ok", "removed": str(meal_id)}


@router.post(
    "/{meal_id}/foods",
    response_model=MealFoodResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_food_to_meal(
    meal_id: UUID,
    body: AddFoodToMealRequest,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    """
    Add a food to a meal.

    Give exactly one of:
    - food_id: a food from the local catalog
    - external_food_id: a FoodData Central id (fetched and cached on first use)
    - custom_food: your own food, kept in the catalog if save_to_collection is true
    - query: free-text search, the first match is used
    """
    meal_food = service.add_food_to_meal(meal_id, body, owner_id)
    return MealFoodResponse.model_validate(meal_food)


@router.post("/{meal_id}/foods/{food_id}/toggle-eaten", response_model=ToggleResponse)
def toggle_food_eaten(
    meal_id: UUID,
    food_id: UUID,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    """Flip a food's eaten flag; the meal is eaten once all its foods are"""
    return ToggleResponse(eaten=service.toggle_food_eaten(meal_id, food_id, owner_id))


@router.post("/{meal_id}/toggle-eaten", response_model=ToggleResponse)
def toggle_meal_eaten(
    meal_id: UUID,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    """Flip a meal's eaten flag and apply it to every food of the meal"""
    return ToggleResponse(eaten=service.toggle_meal_eaten(meal_id, owner_id))


@router.put("/{meal_id}/eaten", response_model=ToggleResponse)
def set_meal_eaten(
    meal_id: UUID,
    body: SetMealEatenRequest,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    return ToggleResponse(eaten=service.set_meal_eaten(meal_id, body.eaten, owner_id))


@router.post("/{meal_id}/recalculate", response_model=MealResponse)
def recalculate_meal_nutrition(
    meal_id: UUID,
    owner_id: UUID = Query(...),
    service: MealService = Depends(get_meal_service),
):
    """Refresh the meal's food nutrients from the current food catalog"""
    return MealResponse.model_validate(service.recalculate_meal_nutrition(meal_id, owner_id))
