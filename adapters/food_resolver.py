"""
Food resolver boundary.

External food providers are mapped once into ``FoodRecord`` here; the rest of
the engine never sees a raw provider payload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import List, Optional


@dataclass(frozen=True)
class FoodRecord:
    """Food as returned by an external provider, per reference portion."""

    external_id: Optional[str]
    name: str
    serving_size: float = 100.0
    serving_unit: str = "g"
    brand: Optional[str] = None
    calories: float = 0.0
    protein: float = 0.0
    carbohydrates: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0
    cholesterol: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "FoodRecord":
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        known.setdefault("external_id", None)
        known.setdefault("name", "Unknown Food")
        return cls(**known)


class FoodResolver(ABC):
    """Lookup contract for foods that are not in the local catalog.

    Implementations raise ``ExternalLookupError`` on transport failures and
    return None / an empty list when the provider simply has no match.
    """

    @abstractmethod
    def get_by_id(self, external_id: str) -> Optional[FoodRecord]:
        ...

    @abstractmethod
    def search(self, query: str) -> List[FoodRecord]:
        ...


class NullFoodResolver(FoodResolver):
    """Resolver used when no provider is configured: nothing is ever found."""

    def get_by_id(self, external_id: str) -> Optional[FoodRecord]:
        return None

    def search(self, query: str) -> List[FoodRecord]:
        return []
