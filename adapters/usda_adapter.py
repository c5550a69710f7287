"""
USDA FoodData Central resolver.

Search and detail lookups over the FDC REST API. Every food is reported per
100 g, which becomes the record's reference portion.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from adapters.food_resolver import FoodRecord, FoodResolver
from app.exceptions import ExternalLookupError

logger = logging.getLogger("mealtrack.usda")

# FDC nutrient ids
NUTRIENT_IDS = {
    "calories": 1008,
    "protein": 1003,
    "carbohydrates": 1005,
    "fat": 1004,
    "fiber": 1079,
    "sugar": 2000,
    "sodium": 1093,
    "cholesterol": 1253,
}

SEARCH_DATA_TYPES = "Survey (FNDDS),Foundation,SR Legacy"


def _nutrient_amount(food_nutrients: List[Dict[str, Any]], nutrient_id: int) -> float:
    # search results carry nutrientId/value, detail results nutrient.id/amount
    for n in food_nutrients:
        nested = n.get("nutrient") or {}
        if n.get("nutrientId") == nutrient_id or nested.get("id") == nutrient_id:
            value = n.get("amount", n.get("value"))
            try:
                return float(value) if value is not None else 0.0
            except (TypeError, ValueError):
                return 0.0
    return 0.0


def map_usda_food(payload: Dict[str, Any]) -> FoodRecord:
    """Map one FDC food (search hit or detail document) to a FoodRecord."""
    nutrients = payload.get("foodNutrients") or []
    fdc_id = payload.get("fdcId")
    return FoodRecord(
        external_id=str(fdc_id) if fdc_id is not None else None,
        name=payload.get("description") or payload.get("lowercaseDescription") or "Unknown Food",
        brand=payload.get("brandOwner") or payload.get("brandName"),
        serving_size=100.0,
        serving_unit="g",
        **{field: _nutrient_amount(nutrients, nid) for field, nid in NUTRIENT_IDS.items()},
    )


class USDAFoodResolver(FoodResolver):
    """FoodResolver backed by the FoodData Central API.

    Example:
        >>> resolver = USDAFoodResolver(api_key="DEMO_KEY")
        >>> record = resolver.get_by_id("171705")
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.nal.usda.gov/fdc/v1",
        timeout: float = 8.0,
        page_size: int = 10,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        self._client.close()

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        query = dict(params or {})
        query["api_key"] = self.api_key
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._client.get(url, params=query)
        except httpx.HTTPError as e:
            logger.warning("USDA request failed: %s %s", endpoint, e)
            raise ExternalLookupError(
                "FoodData Central request failed", details={"endpoint": endpoint, "error": str(e)}
            ) from e

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.warning("USDA returned HTTP %d for %s", response.status_code, endpoint)
            raise ExternalLookupError(
                f"FoodData Central returned HTTP {response.status_code}",
                details={"endpoint": endpoint, "status": response.status_code},
            )
        try:
            return response.json()
        except ValueError as e:
            raise ExternalLookupError("FoodData Central returned a non-JSON body") from e

    def get_by_id(self, external_id: str) -> Optional[FoodRecord]:
        data = self._get(f"/food/{external_id}")
        if not data:
            logger.info("USDA food %s not found", external_id)
            return None
        return map_usda_food(data)

    def search(self, query: str) -> List[FoodRecord]:
        data = self._get(
            "/foods/search",
            {"query": query, "pageSize": self.page_size, "dataType": SEARCH_DATA_TYPES},
        )
        foods = (data or {}).get("foods") or []
        logger.info("USDA search '%s' returned %d foods", query, len(foods))
        return [map_usda_food(f) for f in foods]
