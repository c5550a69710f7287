"""Services package - Business logic layer"""

from services.calorie_distribution import CalorieDistributionNormalizer
from services.nutrition_calculator import NutrientCalculator
from services.meal_service import MealService
from services.meal_plan_service import MealPlanService
from services.nutrition_report_service import NutritionReportService

__all__ = [
    "CalorieDistributionNormalizer",
    "NutrientCalculator",
    "MealService",
    "MealPlanService",
    "NutritionReportService",
]
