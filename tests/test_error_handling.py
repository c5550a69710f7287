"""
Error handling tests.

Checks the JSON error envelope and status code for each service error, request
validation failures, and that failed writes leave no partial state behind.
"""

import uuid
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_food_resolver
from domain.models import Meal, MealFood
from main import app
from test_fixtures import FakeFoodResolver

client = TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def owner(tables):
    return {"owner_id": str(uuid.uuid4())}


@pytest.fixture
def lunch(owner):
    plan = client.post(
        "/meal-plans",
        params=owner,
        json={"name": "Errors", "start_date": "2024-03-04", "auto_generate_meals": False},
    ).json()
    return client.post(
        f"/meal-plans/{plan['plan_id']}/meals", params=owner, json={"name": "Lunch", "target_time": "13:00"}
    ).json()


@pytest.fixture
def failing_resolver():
    app.dependency_overrides[get_food_resolver] = lambda: FakeFoodResolver(fail=True)
    yield
    app.dependency_overrides.pop(get_food_resolver, None)


def assert_envelope(response, status_code, code):
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["message"]
    assert "timestamp" in body
    return body["error"]


# =============================================================================
# NOT FOUND
# =============================================================================


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/meal-plans/{id}"),
        ("delete", "/meal-plans/{id}"),
        ("get", "/meals/{id}"),
        ("post", "/meals/{id}/toggle-eaten"),
        ("delete", "/meals/foods/{id}"),
        ("get", "/nutrition/meals/{id}"),
    ],
)
def test_missing_resources_return_404(owner, method, path):
    response = getattr(client, method)(path.format(id=uuid.uuid4()), params=owner)
    assert_envelope(response, 404, "NOT_FOUND")


def test_other_owners_meal_is_not_found(owner, lunch):
    response = client.get(f"/meals/{lunch['meal_id']}", params={"owner_id": str(uuid.uuid4())})
    assert_envelope(response, 404, "NOT_FOUND")


def test_unknown_route_uses_envelope():
    assert_envelope(client.get("/no-such-route"), 404, "HTTP_404")


# =============================================================================
# INVALID INPUT
# =============================================================================


def test_two_food_strategies_rejected(owner, lunch):
    response = client.post(
        f"/meals/{lunch['meal_id']}/foods",
        params=owner,
        json={"food_id": str(uuid.uuid4()), "query": "rice"},
    )
    error = assert_envelope(response, 400, "SERVICE_VALIDATION_ERROR")
    assert error["details"] == {"strategies": ["food_id", "query"]}


def test_no_food_strategy_rejected(owner, lunch):
    response = client.post(f"/meals/{lunch['meal_id']}/foods", params=owner, json={"serving_size": 50})
    assert_envelope(response, 400, "SERVICE_VALIDATION_ERROR")


def test_empty_patch_rejected(owner, lunch):
    response = client.patch(f"/meals/{lunch['meal_id']}", params=owner, json={})
    assert_envelope(response, 400, "SERVICE_VALIDATION_ERROR")


def test_bad_meal_time_rejected(owner, lunch):
    response = client.patch(f"/meals/{lunch['meal_id']}", params=owner, json={"target_time": "1pm"})
    error = assert_envelope(response, 400, "SERVICE_VALIDATION_ERROR")
    assert error["details"] == {"target_time": "1pm"}


def test_inverted_plan_dates_rejected(owner):
    response = client.post(
        "/meal-plans",
        params=owner,
        json={"name": "Backwards", "start_date": "2024-03-10", "end_date": "2024-03-01"},
    )
    assert_envelope(response, 400, "SERVICE_VALIDATION_ERROR")


def test_inverted_report_range_rejected(owner):
    response = client.get(
        "/nutrition/weekly", params={**owner, "start": "2024-03-10", "end": "2024-03-01"}
    )
    assert_envelope(response, 400, "SERVICE_VALIDATION_ERROR")


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"name": ""},
        {"name": "x", "target_calories": -5},
        {"name": "x", "calorie_distribution": [{"meal_name": "Lunch", "percentage": -1}]},
        {"name": "x", "calorie_distribution": [{"percentage": 50}]},
        {"name": "x", "calorie_distribution": [{"meal_name": "", "percentage": 50}]},
        {"name": "x", "start_date": "not-a-date"},
    ],
)
def test_request_validation_returns_422(owner, payload):
    response = client.post("/meal-plans", params=owner, json=payload)
    error = assert_envelope(response, 422, "VALIDATION_ERROR")
    assert error["details"]


def test_missing_owner_is_422(tables):
    assert client.get("/meal-plans").status_code == 422


def test_negative_serving_rejected(owner, lunch):
    response = client.post(
        f"/meals/{lunch['meal_id']}/foods", params=owner, json={"query": "rice", "serving_size": -10}
    )
    assert response.status_code == 422


# =============================================================================
# PROVIDER AND CONSISTENCY FAILURES
# =============================================================================


def test_provider_outage_is_retryable_503(owner, lunch, failing_resolver, db_session):
    response = client.post(f"/meals/{lunch['meal_id']}/foods", params=owner, json={"query": "rice"})

    assert_envelope(response, 503, "EXTERNAL_LOOKUP_FAILED")
    assert response.headers["Retry-After"] == "30"
    assert db_session.query(MealFood).count() == 0


def test_consistency_violation_is_500_and_rolled_back(owner, lunch, db_session):
    with patch.object(Meal, "is_consistent", return_value=False):
        response = client.post(f"/meals/{lunch['meal_id']}/toggle-eaten", params=owner)

    assert_envelope(response, 500, "CONSISTENCY_VIOLATION")
    assert client.get(f"/meals/{lunch['meal_id']}", params=owner).json()["eaten"] is False


def test_unexpected_error_is_500(owner):
    with patch("services.meal_plan_service.MealPlanService.get_meal_plans", side_effect=RuntimeError("db gone")):
        response = client.get("/meal-plans", params=owner)
    assert_envelope(response, 500, "INTERNAL_SERVER_ERROR")
