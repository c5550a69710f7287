from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.schemas.meal_schemas import MealResponse


class DistributionEntry(BaseModel):
    """One named share of a plan's daily calories"""

    meal_name: str = Field(..., min_length=1)
    percentage: float = Field(..., ge=0)
    calorie_amount: Optional[float] = None


class MealPlanCreate(BaseModel):
    """Schema for creating a meal plan"""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = Field(None, description="Defaults to today")
    end_date: Optional[date] = None
    target_calories: Optional[float] = Field(
        None, gt=0, description="Daily target, defaults to 2000"
    )
    calorie_distribution: Optional[List[DistributionEntry]] = Field(
        None, description="Defaults to Breakfast 25 / Lunch 40 / Dinner 35 when omitted"
    )
    auto_generate_meals: bool = Field(
        default=True, description="Create one meal per distribution entry"
    )


class MealPlanUpdate(BaseModel):
    """Partial update; unset fields are left unchanged"""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    target_calories: Optional[float] = Field(None, gt=0)
    calorie_distribution: Optional[List[DistributionEntry]] = None


class DuplicateMealPlanRequest(BaseModel):
    target_date: Optional[date] = None


class DailyMealsRequest(BaseModel):
    day: date = Field(..., description="Date to lay the template meals out on")


class AdjustDistributionRequest(BaseModel):
    new_percentage: Optional[float] = Field(None, ge=0, le=100)
    meal_name: str = Field(default="New Meal", min_length=1)


class MealPlanResponse(BaseModel):
    """Schema for a meal plan with its meals"""

    plan_id: UUID
    owner_id: UUID
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    target_calories: float
    calorie_distribution: List[DistributionEntry] = []
    meals: List[MealResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MealPlanSummary(BaseModel):
    """Plan without its meals, used in listings"""

    plan_id: UUID
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    target_calories: float
    calorie_distribution: List[DistributionEntry] = []
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PageMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class MealPlanPage(BaseModel):
    items: List[MealPlanSummary]
    meta: PageMeta
