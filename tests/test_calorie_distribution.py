"""
Tests for calorie distribution arithmetic.

- normalize: filtering, default fallback, tolerance, proportional rescale
- compute_amounts: rounding and conservation of the daily target
- adjust_for_new_meal: cap, default share, sum stays at 100
"""

import pytest

from app.exceptions import ConsistencyViolationError
from services.calorie_distribution import CalorieDistributionNormalizer


def entries(*pairs):
    return [{"meal_name": name, "percentage": pct} for name, pct in pairs]


def percentages(distribution):
    return [e["percentage"] for e in distribution]


@pytest.fixture
def normalizer():
    return CalorieDistributionNormalizer()


# =============================================================================
# NORMALIZE
# =============================================================================


def test_normalize_rescales_overfull_distribution(normalizer):
    """Breakfast 30 / Lunch 50 / Dinner 30 sums to 110 and is scaled by 100/110"""
    result = normalizer.normalize(entries(("Breakfast", 30), ("Lunch", 50), ("Dinner", 30)))

    assert [e["meal_name"] for e in result] == ["Breakfast", "Lunch", "Dinner"]
    assert percentages(result) == pytest.approx([27.27, 45.45, 27.27], abs=0.01)
    assert sum(percentages(result)) == pytest.approx(100, abs=0.1)


def test_normalize_rescaled_amounts_stay_close_to_target(normalizer):
    normalized = normalizer.normalize(entries(("Breakfast", 30), ("Lunch", 50), ("Dinner", 30)))
    priced = normalizer.compute_amounts(normalized, 2000)

    amounts = [e["calorie_amount"] for e in priced]
    assert all(isinstance(a, int) for a in amounts)
    assert abs(sum(amounts) - 2000) <= 3


def test_normalize_keeps_balanced_distribution_unchanged(normalizer):
    original = entries(("Breakfast", 25), ("Lunch", 40), ("Dinner", 35.05))
    result = normalizer.normalize(original)
    assert percentages(result) == [25, 40, 35.05]


def test_normalize_scales_underfull_distribution_proportionally(normalizer):
    result = normalizer.normalize(entries(("Breakfast", 10), ("Lunch", 20), ("Dinner", 20)))
    assert percentages(result) == pytest.approx([20, 40, 40])


@pytest.mark.parametrize(
    "distribution",
    [
        None,
        [],
        [{"meal_name": "", "percentage": 50}],
        [{"percentage": 50}],
        [{"meal_name": "Lunch", "percentage": "fifty"}],
        [{"meal_name": "Lunch", "percentage": None}],
        [{"meal_name": "Lunch", "percentage": True}],
        [{"meal_name": "Lunch", "percentage": 0}],
    ],
)
def test_normalize_falls_back_to_default(normalizer, distribution):
    result = normalizer.normalize(distribution)
    assert result == normalizer.default_distribution()
    assert [(e["meal_name"], e["percentage"]) for e in result] == [
        ("Breakfast", 25.0),
        ("Lunch", 40.0),
        ("Dinner", 35.0),
    ]


def test_normalize_drops_invalid_entries_only(normalizer):
    result = normalizer.normalize(
        [
            {"meal_name": "Breakfast", "percentage": 30},
            {"meal_name": "Brunch"},
            {"meal_name": "Dinner", "percentage": -5},
            {"meal_name": "Supper", "percentage": 70},
        ]
    )
    assert [e["meal_name"] for e in result] == ["Breakfast", "Supper"]
    assert sum(percentages(result)) == pytest.approx(100)


def test_normalize_accepts_camel_case_names(normalizer):
    result = normalizer.normalize([{"mealName": "Lunch", "percentage": 100}])
    assert result[0]["meal_name"] == "Lunch"


@pytest.mark.parametrize(
    "pcts",
    [(1, 1, 1), (5, 90, 33, 12), (0.5, 99.4), (300, 100), (12.5,) * 7, (70,)],
)
def test_normalize_always_sums_to_100(normalizer, pcts):
    distribution = entries(*[(f"Meal {i}", p) for i, p in enumerate(pcts)])
    result = normalizer.normalize(distribution)
    assert abs(sum(percentages(result)) - 100) < 0.1
    assert all(p >= 0 for p in percentages(result))


def test_normalize_does_not_mutate_input(normalizer):
    original = entries(("Breakfast", 30), ("Lunch", 50), ("Dinner", 30))
    normalizer.normalize(original)
    assert percentages(original) == [30, 50, 30]


def test_tolerance_is_configurable():
    strict = CalorieDistributionNormalizer(tolerance=0.01)
    result = strict.normalize(entries(("Lunch", 50), ("Dinner", 50.05)))
    assert sum(percentages(result)) == pytest.approx(100)

    loose = CalorieDistributionNormalizer(tolerance=1)
    result = loose.normalize(entries(("Lunch", 50), ("Dinner", 50.5)))
    assert percentages(result) == [50, 50.5]


# =============================================================================
# COMPUTE AMOUNTS
# =============================================================================


def test_compute_amounts_rounds_each_entry(normalizer):
    result = normalizer.compute_amounts(entries(("Breakfast", 25), ("Lunch", 40), ("Dinner", 35)), 2150)
    assert [e["calorie_amount"] for e in result] == [538, 860, 752]
    assert percentages(result) == [25, 40, 35]


@pytest.mark.parametrize("target", [1200, 1777, 2000, 2345.5, 3999])
def test_compute_amounts_conserves_target_within_entry_count(normalizer, target):
    distribution = normalizer.normalize(entries(("A", 13), ("B", 29), ("C", 31), ("D", 17), ("E", 11)))
    amounts = [e["calorie_amount"] for e in normalizer.compute_amounts(distribution, target)]
    assert abs(sum(amounts) - target) <= len(distribution)


def test_compute_amounts_with_zero_target(normalizer):
    result = normalizer.compute_amounts(normalizer.default_distribution(), 0)
    assert [e["calorie_amount"] for e in result] == [0, 0, 0]


# =============================================================================
# ADJUST FOR NEW MEAL
# =============================================================================


def test_adjust_for_new_meal_shrinks_existing_shares(normalizer):
    result = normalizer.adjust_for_new_meal(
        entries(("Breakfast", 25), ("Lunch", 40), ("Dinner", 35)), 20, meal_name="Snack"
    )

    assert [e["meal_name"] for e in result] == ["Breakfast", "Lunch", "Dinner", "Snack"]
    assert percentages(result) == pytest.approx([20, 32, 28, 20])
    assert sum(percentages(result)) == pytest.approx(100)


def test_adjust_for_new_meal_defaults_to_twenty_percent(normalizer):
    result = normalizer.adjust_for_new_meal(entries(("Lunch", 50), ("Dinner", 50)))
    assert result[-1] == {"meal_name": "New Meal", "percentage": 20.0, "calorie_amount": None}
    assert percentages(result)[:2] == pytest.approx([40, 40])


@pytest.mark.parametrize("requested", [50, 65, 100, 1000])
def test_adjust_for_new_meal_caps_share_at_fifty(normalizer, requested):
    result = normalizer.adjust_for_new_meal(entries(("Lunch", 60), ("Dinner", 40)), requested)
    assert result[-1]["percentage"] == 50
    assert sum(percentages(result)) == pytest.approx(100)


def test_adjust_for_new_meal_clamps_negative_share_to_zero(normalizer):
    result = normalizer.adjust_for_new_meal(entries(("Lunch", 60), ("Dinner", 40)), -10)
    assert result[-1]["percentage"] == 0
    assert percentages(result)[:2] == pytest.approx([60, 40])


def test_adjust_for_new_meal_with_empty_plan_gives_single_entry(normalizer):
    result = normalizer.adjust_for_new_meal([], 30, meal_name="Brunch")
    assert result == [{"meal_name": "Brunch", "percentage": 100.0, "calorie_amount": None}]


def test_adjust_for_new_meal_prices_against_target(normalizer):
    result = normalizer.adjust_for_new_meal(
        entries(("Breakfast", 25), ("Lunch", 40), ("Dinner", 35)), 10, target_calories=2000
    )
    assert [e["calorie_amount"] for e in result] == [450, 720, 630, 200]


def test_adjust_for_new_meal_respects_configured_cap():
    normalizer = CalorieDistributionNormalizer(new_meal_cap=30, default_new_meal_percentage=15)
    assert normalizer.adjust_for_new_meal(entries(("Lunch", 100)), 45)[-1]["percentage"] == 30
    assert normalizer.adjust_for_new_meal(entries(("Lunch", 100)))[-1]["percentage"] == 15


def test_adjust_for_new_meal_raises_when_sum_drifts(normalizer):
    normalizer.tolerance = 0.1
    normalizer.normalize = lambda d: [{"meal_name": "Lunch", "percentage": 90.0, "calorie_amount": None}]

    with pytest.raises(ConsistencyViolationError):
        normalizer.adjust_for_new_meal(entries(("Lunch", 100)), 20)


def test_from_settings_reads_named_constants():
    class FakeSettings:
        distribution_tolerance = 0.5
        new_meal_percentage_cap = 40
        default_new_meal_percentage = 10

    normalizer = CalorieDistributionNormalizer.from_settings(FakeSettings())
    assert (normalizer.tolerance, normalizer.new_meal_cap, normalizer.default_new_meal_percentage) == (
        0.5,
        40,
        10,
    )
