"""
Tests for the FoodData Central resolver using httpx.MockTransport.
"""

import httpx
import pytest

from adapters import USDAFoodResolver
from adapters.usda_adapter import map_usda_food
from app.exceptions import ExternalLookupError

DETAIL = {
    "fdcId": 171477,
    "description": "Chicken, broilers or fryers, breast, meat only, cooked, roasted",
    "foodNutrients": [
        {"nutrient": {"id": 1008, "name": "Energy"}, "amount": 165},
        {"nutrient": {"id": 1003, "name": "Protein"}, "amount": 31.02},
        {"nutrient": {"id": 1004, "name": "Total lipid (fat)"}, "amount": 3.57},
        {"nutrient": {"id": 1093, "name": "Sodium, Na"}, "amount": 74},
        {"nutrient": {"id": 1253, "name": "Cholesterol"}, "amount": 85},
    ],
}

SEARCH = {
    "totalHits": 2,
    "foods": [
        {
            "fdcId": 169756,
            "description": "Rice, white, cooked",
            "foodNutrients": [
                {"nutrientId": 1008, "value": 130},
                {"nutrientId": 1005, "value": 28.17},
                {"nutrientId": 1079, "value": 0.4},
            ],
        },
        {
            "fdcId": 2512381,
            "description": "RICE CAKES",
            "brandOwner": "Quaker",
            "foodNutrients": [{"nutrientId": 1008, "value": "not-a-number"}],
        },
    ],
}


def resolver_for(handler, **kwargs):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return USDAFoodResolver(api_key="TEST_KEY", base_url="https://fdc.test/v1/", client=client, **kwargs)


def test_get_by_id_maps_detail_document():
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json=DETAIL)

    record = resolver_for(handler).get_by_id("171477")

    assert seen[0].url.path == "/v1/food/171477"
    assert seen[0].url.params["api_key"] == "TEST_KEY"
    assert record.external_id == "171477"
    assert record.calories == 165
    assert record.protein == pytest.approx(31.02)
    assert record.carbohydrates == 0
    assert record.cholesterol == 85
    assert (record.serving_size, record.serving_unit) == (100.0, "g")


def test_search_maps_result_shape():
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json=SEARCH)

    records = resolver_for(handler, page_size=5).search("rice")

    params = seen[0].url.params
    assert seen[0].url.path == "/v1/foods/search"
    assert params["query"] == "rice"
    assert params["pageSize"] == "5"
    assert [r.external_id for r in records] == ["169756", "2512381"]
    assert records[0].carbohydrates == pytest.approx(28.17)
    assert records[0].fiber == pytest.approx(0.4)
    assert records[1].brand == "Quaker"
    assert records[1].calories == 0


def test_search_without_foods():
    records = resolver_for(lambda request: httpx.Response(200, json={"totalHits": 0})).search("zzz")
    assert records == []


def test_missing_food_returns_none():
    assert resolver_for(lambda request: httpx.Response(404)).get_by_id("1") is None


@pytest.mark.parametrize("status", [400, 429, 500, 503])
def test_http_errors_raise_lookup_error(status):
    resolver = resolver_for(lambda request: httpx.Response(status, text="nope"))
    with pytest.raises(ExternalLookupError) as exc:
        resolver.search("rice")
    assert exc.value.details["status"] == status
    assert exc.value.http_status == 503


def test_transport_error_raises_lookup_error():
    def handler(request: httpx.Request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExternalLookupError):
        resolver_for(handler).get_by_id("171477")


def test_non_json_body_raises_lookup_error():
    resolver = resolver_for(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
    with pytest.raises(ExternalLookupError):
        resolver.get_by_id("171477")


def test_map_usda_food_defaults():
    record = map_usda_food({"lowercaseDescription": "mystery"})
    assert record.external_id is None
    assert record.name == "mystery"
    assert record.calories == 0


def test_close_closes_client():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    USDAFoodResolver(api_key="k", client=client).close()
    assert client.is_closed
