"""
Unit tests for the decay model.
"""

import pytest

from caffeine_tracker.core.decay import hours_until_below, remaining
from caffeine_tracker.core.errors import InvalidConfiguration, InvalidInput


@pytest.mark.parametrize("dose", [0.0, 1.0, 76.0, 400.0])
@pytest.mark.parametrize("half_life", [2.5, 5.0, 9.0])
def test_dose_at_zero_and_at_one_half_life(dose, half_life):
    assert remaining(dose, 0, half_life) == dose
    assert remaining(dose, half_life, half_life) == pytest.approx(dose / 2)


def test_strictly_decreasing_in_elapsed_time():
    values = [remaining(100, h / 2, 5) for h in range(0, 49)]
    assert all(a > b for a, b in zip(values, values[1:]))


def test_deterministic():
    assert remaining(95, 3.25, 5.5) == remaining(95, 3.25, 5.5)


def test_two_half_lives_quarter_dose():
    assert remaining(100, 10, 5) == pytest.approx(25)


def test_negative_elapsed_is_invalid_input():
    with pytest.raises(InvalidInput):
        remaining(100, -0.1, 5)


@pytest.mark.parametrize("half_life", [0, -5, None, float("nan"), float("inf")])
def test_non_positive_half_life_is_invalid_configuration(half_life):
    with pytest.raises(InvalidConfiguration):
        remaining(100, 1, half_life)


@pytest.mark.parametrize("dose, elapsed", [
    (float("nan"), 1),
    (float("inf"), 1),
    (100, float("nan")),
    (100, float("inf")),
])
def test_non_finite_dose_or_elapsed_is_invalid_input(dose, elapsed):
    with pytest.raises(InvalidInput):
        remaining(dose, elapsed, 5)


def test_engine_errors_are_value_errors():
    with pytest.raises(ValueError):
        remaining(100, -1, 5)


def test_hours_until_below():
    assert hours_until_below(100, 25, 5) == pytest.approx(10)
    assert hours_until_below(100, 50, 4) == pytest.approx(4)


def test_hours_until_below_already_below_target():
    assert hours_until_below(20, 30, 5) == 0.0
    assert hours_until_below(30, 30, 5) == 0.0


def test_hours_until_below_zero_target_rejected():
    with pytest.raises(InvalidInput):
        hours_until_below(100, 0, 5)


@pytest.mark.parametrize("current, target", [
    (float("nan"), 30),
    (100, float("nan")),
    (100, float("inf")),
])
def test_hours_until_below_non_finite_rejected(current, target):
    with pytest.raises(InvalidInput):
        hours_until_below(current, target, 5)
