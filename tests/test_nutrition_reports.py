"""
Tests for NutritionReportService against persisted plans and meals.
"""

import uuid
from datetime import date

import pytest

from app.exceptions import NotFoundError, ServiceValidationError
from services import NutritionReportService
from test_fixtures import add_catalog_food, create_plan, make_food, make_services

TWO_MEALS = [
    {"meal_name": "Lunch", "percentage": 50},
    {"meal_name": "Dinner", "percentage": 50},
]


@pytest.fixture
def setup(uow, owner_id):
    meals, plans = make_services(uow)
    plan = create_plan(plans, owner_id, distribution=TWO_MEALS, target_calories=1800)
    return meals, plan, NutritionReportService(uow)


def lunch_of(plan):
    return next(m for m in plan.meals if m.name == "Lunch")


# =============================================================================
# DAILY
# =============================================================================


def test_daily_with_nothing_eaten(setup, owner_id):
    _, _, reports = setup

    daily = reports.get_daily_nutrition(date(2024, 3, 5), owner_id)

    assert daily["summary"]["calories"]["eaten"] == 0
    assert daily["summary"]["calories"]["target"] == 1800
    assert daily["progress"] == {"meals_eaten": 0, "total_meals": 2, "percentage": 0}
    assert [m["status"] for m in daily["meals"]] == ["not_eaten", "not_eaten"]


def test_daily_with_one_meal_eaten(setup, owner_id, db_session):
    meals, plan, reports = setup
    lunch = lunch_of(plan)
    add_catalog_food(meals, lunch.meal_id, owner_id, make_food(db_session, "chicken"), 200)
    meals.toggle_meal_eaten(lunch.meal_id, owner_id)

    daily = reports.get_daily_nutrition(date(2024, 3, 5), owner_id)

    calories = daily["summary"]["calories"]
    assert calories["eaten"] == pytest.approx(330)
    assert calories["remaining"] == pytest.approx(1470)
    assert daily["summary"]["main_nutrients"]["protein"]["amount"] == pytest.approx(62)
    assert daily["summary"]["additional_nutrients"]["sodium"] == {
        "amount": pytest.approx(148),
        "unit": "mg",
    }
    assert daily["progress"]["percentage"] == 50

    by_name = {row["meal_name"]: row for row in daily["meal_distribution"]}
    assert by_name["Lunch"]["target_calories"] == 900
    assert by_name["Lunch"]["actual_calories"] == pytest.approx(330)
    assert by_name["Lunch"]["deficit"] == pytest.approx(570)
    assert by_name["Dinner"]["actual_calories"] == 0


def test_daily_uses_latest_covering_plan_target(uow, owner_id):
    _, plans = make_services(uow)
    create_plan(plans, owner_id, start_date=date(2024, 3, 1), target_calories=2000)
    create_plan(
        plans, owner_id, start_date=date(2024, 3, 4), target_calories=1500, auto_generate_meals=False
    )

    daily = NutritionReportService(uow).get_daily_nutrition(date(2024, 3, 5), owner_id)

    assert daily["summary"]["calories"]["target"] == 1500
    assert daily["progress"]["total_meals"] == 3


def test_daily_without_plan_is_empty(setup, owner_id):
    _, _, reports = setup

    daily = reports.get_daily_nutrition(date(2024, 1, 1), owner_id)

    assert daily["meals"] == []
    assert daily["meal_distribution"] == []
    assert daily["summary"]["calories"] == {"target": 0, "eaten": 0, "remaining": 0}
    assert daily["progress"]["percentage"] == 0


def test_daily_hides_other_owners(setup):
    _, _, reports = setup
    assert reports.get_daily_nutrition(date(2024, 3, 5), uuid.uuid4())["meals"] == []


# =============================================================================
# WEEKLY
# =============================================================================


def test_weekly_sums_each_covered_day(setup, owner_id, db_session):
    meals, plan, reports = setup
    lunch = lunch_of(plan)
    add_catalog_food(meals, lunch.meal_id, owner_id, make_food(db_session, "chicken"), 200)
    meals.toggle_meal_eaten(lunch.meal_id, owner_id)

    # 2024-03-03 is before the plan starts
    weekly = reports.get_weekly_nutrition(date(2024, 3, 3), date(2024, 3, 6), owner_id)

    assert [d["date"] for d in weekly["daily_data"]] == [
        date(2024, 3, 3),
        date(2024, 3, 4),
        date(2024, 3, 5),
        date(2024, 3, 6),
    ]
    totals = weekly["summary"]["weekly_totals"]
    assert totals["calories"] == {"target": 5400, "eaten": pytest.approx(990)}
    assert totals["protein"] == pytest.approx(186)
    assert weekly["summary"]["averages"]["calories"]["target"] == 1350
    assert weekly["summary"]["target_achieved"] == 18
    assert weekly["progress"] == {"meals_eaten": 3, "total_meals": 6, "percentage": 50}


def test_weekly_single_day(setup, owner_id):
    _, _, reports = setup
    weekly = reports.get_weekly_nutrition(date(2024, 3, 4), date(2024, 3, 4), owner_id)
    assert len(weekly["daily_data"]) == 1


def test_weekly_rejects_inverted_range(setup, owner_id):
    _, _, reports = setup
    with pytest.raises(ServiceValidationError):
        reports.get_weekly_nutrition(date(2024, 3, 10), date(2024, 3, 4), owner_id)


def test_weekly_rejects_oversized_range(setup, owner_id):
    _, _, reports = setup
    with pytest.raises(ServiceValidationError):
        reports.get_weekly_nutrition(date(2024, 1, 1), date(2025, 6, 1), owner_id)


# =============================================================================
# PER MEAL
# =============================================================================


def test_meal_nutrition(setup, owner_id, db_session):
    meals, plan, reports = setup
    lunch = lunch_of(plan)
    add_catalog_food(meals, lunch.meal_id, owner_id, make_food(db_session, "chicken"), 200)
    rice = add_catalog_food(meals, lunch.meal_id, owner_id, make_food(db_session, "rice"), 150)
    meals.toggle_food_eaten(lunch.meal_id, rice.meal_food_id, owner_id)

    report = reports.get_meal_nutrition(lunch.meal_id, owner_id)

    assert report["name"] == "Lunch"
    assert report["target"]["calories"] == 900
    assert report["total_nutrients"]["calories"] == pytest.approx(525)
    assert report["actual"]["calories"] == pytest.approx(195)
    assert report["progress"] == {"percentage": 21.7, "remaining": 705}
    assert report["eaten"] is False


def test_meal_nutrition_not_found(setup, owner_id):
    _, plan, reports = setup
    with pytest.raises(NotFoundError):
        reports.get_meal_nutrition(uuid.uuid4(), owner_id)
    with pytest.raises(NotFoundError):
        reports.get_meal_nutrition(lunch_of(plan).meal_id, uuid.uuid4())


# =============================================================================
# AVERAGE CALORIES
# =============================================================================


def test_average_calories_from_meals_with_food(setup, owner_id, db_session):
    meals, plan, reports = setup
    dinner = next(m for m in plan.meals if m.name == "Dinner")
    add_catalog_food(meals, lunch_of(plan).meal_id, owner_id, make_food(db_session, "chicken"), 200)
    add_catalog_food(meals, dinner.meal_id, owner_id, make_food(db_session, "rice"), 150)

    # 330 and 195 kcal, eaten or not
    assert reports.get_average_calories(owner_id) == {
        "average_calories": 263,
        "total_meals": 2,
        "source": "meals",
    }


def test_average_calories_skips_meals_without_food(setup, owner_id, db_session):
    meals, plan, reports = setup
    add_catalog_food(meals, lunch_of(plan).meal_id, owner_id, make_food(db_session, "oats"), 50)

    average = reports.get_average_calories(owner_id)

    assert average["total_meals"] == 1
    assert average["average_calories"] == 195


def test_average_calories_falls_back_to_plan_distributions(setup, uow, owner_id):
    _, plans = make_services(uow)
    create_plan(plans, owner_id, name="Maintenance")
    reports = setup[2]

    # 900 + 900 from the first plan, 500 + 800 + 700 from the second
    assert reports.get_average_calories(owner_id) == {
        "average_calories": 760,
        "total_meals": 5,
        "source": "meal_plans",
    }
    assert reports.get_average_calories_from_meal_plans(owner_id)["average_calories"] == 760


def test_average_calories_without_data(setup):
    reports = setup[2]
    assert reports.get_average_calories(uuid.uuid4()) == {
        "average_calories": 0,
        "total_meals": 0,
        "source": None,
    }


def test_average_calories_ignores_other_owners(setup, uow, owner_id, db_session):
    meals, plan, reports = setup
    add_catalog_food(meals, lunch_of(plan).meal_id, owner_id, make_food(db_session, "chicken"), 100)
    other = uuid.uuid4()
    _, plans = make_services(uow)
    create_plan(plans, other, distribution=[{"meal_name": "Only", "percentage": 100}], target_calories=3000)

    assert reports.get_average_calories(owner_id)["average_calories"] == 165
    assert reports.get_average_calories(other) == {
        "average_calories": 3000,
        "total_meals": 1,
        "source": "meal_plans",
    }
