"""
Calorie distribution arithmetic.

A distribution is an ordered list of ``{"meal_name", "percentage",
"calorie_amount"}`` dicts describing how a plan's daily target is split
across its meals.
"""

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.exceptions import ConsistencyViolationError

logger = logging.getLogger("mealtrack.distribution")

DEFAULT_DISTRIBUTION = (("Breakfast", 25.0), ("Lunch", 40.0), ("Dinner", 35.0))

DistributionEntry = Dict[str, Any]


def _entry_name(entry: Mapping[str, Any]) -> Optional[str]:
    name = entry.get("meal_name") or entry.get("mealName")
    if not isinstance(name, str) or not name.strip():
        return None
    return name.strip()


def _entry_percentage(entry: Mapping[str, Any]) -> Optional[float]:
    value = entry.get("percentage")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return value


class CalorieDistributionNormalizer:
    """Normalizes, prices and rebalances calorie distributions.

    Args:
        tolerance: how far (in percentage points) a total may sit from 100
            before it is rescaled
        new_meal_cap: largest share a newly inserted meal may take
        default_new_meal_percentage: share given to a new meal when the
            caller does not ask for one
    """

    def __init__(
        self,
        tolerance: float = 0.1,
        new_meal_cap: float = 50.0,
        default_new_meal_percentage: float = 20.0,
    ):
        self.tolerance = tolerance
        self.new_meal_cap = new_meal_cap
        self.default_new_meal_percentage = default_new_meal_percentage

    @classmethod
    def from_settings(cls, settings) -> "CalorieDistributionNormalizer":
        return cls(
            tolerance=settings.distribution_tolerance,
            new_meal_cap=settings.new_meal_percentage_cap,
            default_new_meal_percentage=settings.default_new_meal_percentage,
        )

    @staticmethod
    def default_distribution() -> List[DistributionEntry]:
        return [
            {"meal_name": name, "percentage": pct, "calorie_amount": None}
            for name, pct in DEFAULT_DISTRIBUTION
        ]

    def clean(self, distribution: Optional[Sequence[Mapping[str, Any]]]) -> List[DistributionEntry]:
        """Drop entries without a name or a usable percentage."""
        cleaned = []
        for entry in distribution or []:
            if not isinstance(entry, Mapping):
                continue
            name = _entry_name(entry)
            pct = _entry_percentage(entry)
            if name is None or pct is None:
                continue
            cleaned.append(
                {
                    "meal_name": name,
                    "percentage": pct,
                    "calorie_amount": entry.get("calorie_amount"),
                }
            )
        return cleaned

    def total(self, distribution: Sequence[Mapping[str, Any]]) -> float:
        return sum(float(entry["percentage"]) for entry in distribution)

    def is_balanced(self, distribution: Sequence[Mapping[str, Any]]) -> bool:
        return abs(self.total(distribution) - 100) < self.tolerance

    def normalize(self, distribution: Optional[Sequence[Mapping[str, Any]]]) -> List[DistributionEntry]:
        cleaned = self.clean(distribution)
        total = self.total(cleaned)
        if not cleaned or total <= 0:
            if distribution:
                logger.info("Distribution has no usable entries, using the default")
            return self.default_distribution()

        if abs(total - 100) < self.tolerance:
            return cleaned

        factor = 100 / total
        for entry in cleaned:
            entry["percentage"] = entry["percentage"] * factor
        return cleaned

    def compute_amounts(
        self, distribution: Sequence[Mapping[str, Any]], target_calories: Optional[float]
    ) -> List[DistributionEntry]:
        target = float(target_calories or 0)
        return [
            {
                **entry,
                "calorie_amount": round(float(entry["percentage"]) / 100 * target),
            }
            for entry in distribution
        ]

    def adjust_for_new_meal(
        self,
        existing: Optional[Sequence[Mapping[str, Any]]],
        requested_percentage: Optional[float] = None,
        meal_name: str = "New Meal",
        target_calories: Optional[float] = None,
    ) -> List[DistributionEntry]:
        """Make room for a new meal by shrinking every existing share proportionally."""
        if requested_percentage is None:
            requested_percentage = self.default_new_meal_percentage
        requested = min(max(float(requested_percentage), 0.0), float(self.new_meal_cap))

        current = self.clean(existing)
        if not current:
            adjusted = [{"meal_name": meal_name, "percentage": 100.0, "calorie_amount": None}]
        else:
            current = self.normalize(current)
            factor = (100 - requested) / 100
            adjusted = [
                {**entry, "percentage": entry["percentage"] * factor, "calorie_amount": None}
                for entry in current
            ]
            adjusted.append({"meal_name": meal_name, "percentage": requested, "calorie_amount": None})

        if not self.is_balanced(adjusted):
            raise ConsistencyViolationError(
                "Adjusted distribution does not sum to 100",
                details={"total": self.total(adjusted)},
            )

        if target_calories is not None:
            adjusted = self.compute_amounts(adjusted, target_calories)
        return adjusted
