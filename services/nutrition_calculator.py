"""
Nutrient arithmetic: scaling a food to a serving, and per-meal, daily and
weekly aggregation.

Everything here is pure. Missing or malformed inputs degrade to zero through
``nutrient_value``; no function raises on bad numbers or divides by zero.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Mapping, Optional

from app.config import CalorieSource
from domain.models.food import NUTRIENT_FIELDS

KCAL_PER_GRAM = {"protein": 4.0, "carbohydrates": 4.0, "fat": 9.0}
MACRO_SPLIT = {"protein": 0.25, "carbohydrates": 0.50, "fat": 0.25}

MAIN_NUTRIENTS = (("protein", "protein"), ("carbs", "carbohydrates"), ("fat", "fat"))
ADDITIONAL_NUTRIENTS = (("fiber", "g"), ("sugar", "g"), ("sodium", "mg"), ("cholesterol", "mg"))


def nutrient_value(source: Any, field: str) -> float:
    """Read ``field`` from an object or mapping as a float, defaulting to 0."""
    if source is None:
        return 0.0
    if isinstance(source, Mapping):
        raw = source.get(field)
    else:
        raw = getattr(source, field, None)
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def empty_nutrients() -> Dict[str, float]:
    return {field: 0.0 for field in NUTRIENT_FIELDS}


def percent(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return part / whole * 100


def macro_calories(protein: float, carbohydrates: float, fat: float) -> float:
    return (
        protein * KCAL_PER_GRAM["protein"]
        + carbohydrates * KCAL_PER_GRAM["carbohydrates"]
        + fat * KCAL_PER_GRAM["fat"]
    )


def macro_goals(calories: float) -> Dict[str, float]:
    """Gram goals for a calorie amount at the 25/50/25 protein/carbs/fat split."""
    calories = max(0.0, nutrient_value({"c": calories}, "c"))
    return {
        "protein": round(calories * MACRO_SPLIT["protein"] / KCAL_PER_GRAM["protein"], 1),
        "carbs": round(calories * MACRO_SPLIT["carbohydrates"] / KCAL_PER_GRAM["carbohydrates"], 1),
        "fat": round(calories * MACRO_SPLIT["fat"] / KCAL_PER_GRAM["fat"], 1),
    }


def _add_into(totals: Dict[str, float], nutrients: Mapping[str, float]) -> None:
    for field in NUTRIENT_FIELDS:
        totals[field] += nutrient_value(nutrients, field)


def _on_time(eaten_at: Optional[datetime], target_time: Optional[time]) -> Optional[bool]:
    if eaten_at is None or target_time is None:
        return None
    return eaten_at.time().replace(tzinfo=None) <= target_time


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


class NutrientCalculator:
    """Stateless nutrient calculator.

    ``calorie_source`` picks the single authoritative calorie value of a scaled
    food: the food's stored calorie field, or 4P + 4C + 9F from its macros.
    """

    def __init__(self, calorie_source: CalorieSource = CalorieSource.STORED):
        self.calorie_source = CalorieSource(calorie_source)

    # ---------- scaling ----------

    def scale(self, food: Any, serving_size: Any) -> Dict[str, float]:
        reference = nutrient_value(food, "serving_size") or 100.0
        size = max(0.0, nutrient_value({"s": serving_size}, "s"))
        ratio = size / reference

        scaled = {field: nutrient_value(food, field) * ratio for field in NUTRIENT_FIELDS}
        if self.calorie_source == CalorieSource.MACROS:
            scaled["calories"] = (
                macro_calories(
                    nutrient_value(food, "protein"),
                    nutrient_value(food, "carbohydrates"),
                    nutrient_value(food, "fat"),
                )
                * ratio
            )
        return scaled

    def food_nutrients(self, meal_food: Any) -> Dict[str, float]:
        """Nutrients of a meal food: its stored snapshot, else scaled from its food."""
        snapshot = getattr(meal_food, "nutrients", None)
        if snapshot:
            return {field: nutrient_value(snapshot, field) for field in NUTRIENT_FIELDS}
        source = getattr(meal_food, "food", None) or getattr(meal_food, "custom_food", None)
        if source is None:
            return empty_nutrients()
        return self.scale(source, getattr(meal_food, "serving_size", 0))

    # ---------- per meal ----------

    def meal_nutrition(self, meal: Any) -> Dict[str, Any]:
        meal_foods = list(getattr(meal, "meal_foods", None) or [])
        target_time = getattr(meal, "target_time", None)
        goals = getattr(meal, "nutrition_goals", None) or {}

        planned = empty_nutrients()
        eaten = empty_nutrients()
        foods = []
        for mf in meal_foods:
            nutrients = self.food_nutrients(mf)
            _add_into(planned, nutrients)
            if mf.eaten:
                _add_into(eaten, nutrients)
            foods.append(
                {
                    "meal_food_id": getattr(mf, "meal_food_id", None),
                    "food_id": getattr(mf, "food_id", None),
                    "name": getattr(mf, "food_name", None) or "Unknown Food",
                    "serving_size": nutrient_value(mf, "serving_size"),
                    "serving_unit": getattr(mf, "serving_unit", None),
                    "nutrients": nutrients,
                    "eaten": bool(mf.eaten),
                    "eaten_at": mf.eaten_at,
                    "on_time": _on_time(mf.eaten_at, target_time),
                }
            )

        target = {
            "calories": nutrient_value(meal, "target_calories"),
            "protein": nutrient_value(goals, "protein"),
            "carbs": nutrient_value(goals, "carbs"),
            "fat": nutrient_value(goals, "fat"),
        }
        actual = {
            "calories": eaten["calories"],
            "protein": eaten["protein"],
            "carbs": eaten["carbohydrates"],
            "fat": eaten["fat"],
        }

        return {
            "meal_id": getattr(meal, "meal_id", None),
            "name": getattr(meal, "name", None),
            "target_time": _iso(target_time),
            "eaten": bool(getattr(meal, "eaten", False)),
            "eaten_at": getattr(meal, "eaten_at", None),
            "on_time": _on_time(getattr(meal, "eaten_at", None), target_time),
            "target": target,
            "actual": actual,
            "total_nutrients": planned,
            "eaten_nutrients": eaten,
            "progress": {
                "percentage": round(percent(actual["calories"], target["calories"]), 1),
                "remaining": round(target["calories"] - actual["calories"], 1),
            },
            "foods": foods,
        }

    # ---------- per day ----------

    def daily_nutrition(
        self,
        day: date,
        meals: Iterable[Any],
        target_calories: Optional[float] = None,
        distribution: Optional[List[Mapping[str, Any]]] = None,
    ) -> Dict[str, Any]:
        meals = list(meals)
        totals = empty_nutrients()
        meals_data = []
        actual_by_name: Dict[str, Dict[str, float]] = {}
        meals_eaten = 0

        for meal in meals:
            summary = self.meal_nutrition(meal)
            _add_into(totals, summary["eaten_nutrients"])
            if summary["eaten"]:
                meals_eaten += 1

            bucket = actual_by_name.setdefault((meal.name or "").strip().lower(), empty_nutrients())
            _add_into(bucket, summary["eaten_nutrients"])

            meals_data.append(
                {
                    "meal_id": summary["meal_id"],
                    "name": summary["name"],
                    "target_time": summary["target_time"],
                    "status": "eaten" if summary["eaten"] else "not_eaten",
                    "eaten": summary["eaten"],
                    "eaten_at": summary["eaten_at"],
                    "calories": {
                        "target": summary["target"]["calories"],
                        "actual": summary["actual"]["calories"],
                    },
                    "foods": [
                        {
                            "meal_food_id": f["meal_food_id"],
                            "name": f["name"],
                            "amount": f"{f['serving_size']:g} {f['serving_unit'] or ''}".strip(),
                            "calories": f["nutrients"]["calories"],
                            "eaten": f["eaten"],
                        }
                        for f in summary["foods"]
                    ],
                }
            )

        if target_calories is None:
            target_calories = sum(nutrient_value(m, "target_calories") for m in meals)
        target_calories = nutrient_value({"t": target_calories}, "t")

        macro_kcal = macro_calories(totals["protein"], totals["carbohydrates"], totals["fat"])
        main_nutrients = {
            key: {
                "amount": totals[field],
                "unit": "g",
                "percentage": round(percent(totals[field] * KCAL_PER_GRAM[field], macro_kcal)),
            }
            for key, field in MAIN_NUTRIENTS
        }
        additional_nutrients = {
            field: {"amount": totals[field], "unit": unit} for field, unit in ADDITIONAL_NUTRIENTS
        }

        return {
            "date": day,
            "summary": {
                "calories": {
                    "target": target_calories,
                    "eaten": totals["calories"],
                    "remaining": max(0.0, target_calories - totals["calories"]),
                },
                "main_nutrients": main_nutrients,
                "additional_nutrients": additional_nutrients,
            },
            "meals": meals_data,
            "progress": {
                "meals_eaten": meals_eaten,
                "total_meals": len(meals),
                "percentage": round(percent(meals_eaten, len(meals))),
            },
            "meal_distribution": self._distribution_vs_actual(
                distribution, target_calories, actual_by_name
            ),
        }

    def _distribution_vs_actual(self, distribution, target_calories, actual_by_name):
        if not distribution:
            return []
        rows = []
        for entry in distribution:
            name = entry.get("meal_name") or entry.get("mealName") or ""
            pct = nutrient_value(entry, "percentage")
            target = entry.get("calorie_amount")
            target = (
                nutrient_value(entry, "calorie_amount")
                if target is not None
                else round(target_calories * pct / 100)
            )
            actual = actual_by_name.get(name.strip().lower(), empty_nutrients())
            rows.append(
                {
                    "meal_name": name,
                    "percentage": pct,
                    "target_calories": target,
                    "actual_calories": actual["calories"],
                    "deficit": target - actual["calories"],
                    "nutrients": {
                        key: {
                            "grams": actual[field],
                            "calories": actual[field] * KCAL_PER_GRAM[field],
                        }
                        for key, field in MAIN_NUTRIENTS
                    },
                }
            )
        return rows

    # ---------- per week ----------

    def weekly_nutrition(
        self, start: date, end: date, daily_summaries: Iterable[Mapping[str, Any]]
    ) -> Dict[str, Any]:
        daily_summaries = list(daily_summaries)
        totals = empty_nutrients()
        calories = {"target": 0.0, "eaten": 0.0}
        meals_eaten = 0
        meals_planned = 0
        daily_data = []

        for daily in daily_summaries:
            summary = daily["summary"]
            calories["target"] += nutrient_value(summary["calories"], "target")
            calories["eaten"] += nutrient_value(summary["calories"], "eaten")
            for key, field in MAIN_NUTRIENTS:
                totals[field] += nutrient_value(summary["main_nutrients"][key], "amount")
            for field, _unit in ADDITIONAL_NUTRIENTS:
                totals[field] += nutrient_value(summary["additional_nutrients"][field], "amount")

            progress = daily["progress"]
            meals_eaten += int(progress["meals_eaten"])
            meals_planned += int(progress["total_meals"])

            daily_data.append(
                {
                    "date": daily["date"],
                    "calories": {
                        "target": summary["calories"]["target"],
                        "eaten": summary["calories"]["eaten"],
                    },
                    "macro_nutrients": {
                        key: summary["main_nutrients"][key]["amount"] for key, _ in MAIN_NUTRIENTS
                    },
                    "progress": progress,
                }
            )

        days = len(daily_summaries)

        def per_day(value: float) -> float:
            return value / days if days else 0.0

        macro_kcal = macro_calories(totals["protein"], totals["carbohydrates"], totals["fat"])

        return {
            "start_date": start,
            "end_date": end,
            "daily_data": daily_data,
            "summary": {
                "weekly_totals": {
                    "calories": calories,
                    **{f: totals[f] for f in NUTRIENT_FIELDS if f != "calories"},
                },
                "averages": {
                    "calories": {
                        "target": per_day(calories["target"]),
                        "eaten": per_day(calories["eaten"]),
                    },
                    "protein": per_day(totals["protein"]),
                    "carbohydrates": per_day(totals["carbohydrates"]),
                    "fat": per_day(totals["fat"]),
                },
                "macro_distribution": {
                    key: round(percent(totals[field] * KCAL_PER_GRAM[field], macro_kcal))
                    for key, field in MAIN_NUTRIENTS
                },
                "target_achieved": round(percent(calories["eaten"], calories["target"])),
            },
            "progress": {
                "meals_eaten": meals_eaten,
                "total_meals": meals_planned,
                "percentage": round(percent(meals_eaten, meals_planned)),
            },
        }

    # ---------- planning ----------

    def meal_distribution(
        self, target_calories: float, distribution: Iterable[Mapping[str, Any]]
    ) -> List[Dict[str, Any]]:
        target_calories = nutrient_value({"t": target_calories}, "t")
        plan = []
        for entry in distribution:
            pct = nutrient_value(entry, "percentage")
            calories = round(target_calories * pct / 100)
            plan.append(
                {
                    "meal_name": entry.get("meal_name") or entry.get("mealName"),
                    "percentage": pct,
                    "target_calories": calories,
                    "recommended": macro_goals(calories),
                }
            )
        return plan
