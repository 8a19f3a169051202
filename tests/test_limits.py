"""
Unit tests for daily limit recommendations.
"""

import pytest

from caffeine_tracker.core.errors import InvalidInput
from caffeine_tracker.core.limits import caffeine_for_serving, recommend_daily_limits


def _limits(**kwargs):
    result = recommend_daily_limits(**kwargs)
    return result["optimal_mg"], result["safe_mg"]


def test_defaults_without_inputs():
    assert _limits() == (200, 400)


def test_weight_scaled():
    assert _limits(weight_kg=60) == (180, 360)
    assert _limits(weight_kg=96) == (200, 400)


def test_age_ranges():
    assert _limits(weight_kg=70, age_range="over_60") == (160, 400)
    assert _limits(weight_kg=70, age_range="under_18") == (80, 100)


def test_pregnancy_halves_optimal_and_caps_safe():
    assert _limits(weight_kg=80, is_pregnant=True) == (100, 200)


def test_heart_condition_caps():
    assert _limits(weight_kg=80, has_heart_condition=True) == (100, 200)


def test_sensitivity_and_alcohol():
    assert _limits(weight_kg=50, sensitivity="high") == (75, 300)
    assert _limits(weight_kg=50, sensitivity="low") == (165, 300)
    assert _limits(weight_kg=60, alcohol_intake="daily") == (153, 360)


def test_strongest_medication_wins():
    assert _limits(medications=["acid_reflux", "adhd_medication"]) == (120, 400)
    assert _limits(medications=["acid_reflux"]) == (150, 400)


def test_none_medication_means_no_reduction():
    assert _limits(medications=["none", "adhd_medication"]) == (200, 400)


def test_optimal_floor():
    assert _limits(weight_kg=20, sensitivity="high") == (50, 120)


@pytest.mark.parametrize("kwargs", [
    {"weight_kg": 0},
    {"weight_kg": float("nan")},
    {"weight_kg": float("inf")},
    {"age_range": "teen"},
    {"sensitivity": "extreme"},
    {"medications": ["aspirin"]},
])
def test_invalid_inputs(kwargs):
    with pytest.raises(InvalidInput):
        recommend_daily_limits(**kwargs)


def test_caffeine_for_serving():
    assert caffeine_for_serving(212, 30) == 64
    assert caffeine_for_serving(40, 240) == 96
    assert caffeine_for_serving(25, 10) == 3


def test_caffeine_for_serving_negative_rejected():
    with pytest.raises(InvalidInput):
        caffeine_for_serving(-1, 100)


@pytest.mark.parametrize("per_100ml, serving", [(float("nan"), 250), (40, float("inf"))])
def test_caffeine_for_serving_non_finite_rejected(per_100ml, serving):
    with pytest.raises(InvalidInput):
        caffeine_for_serving(per_100ml, serving)
