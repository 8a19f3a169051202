"""
Unit tests for threshold evaluation, sleep window and cutoff time.
"""

from dataclasses import replace
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from caffeine_tracker.core.errors import InvalidConfiguration, InvalidInput, OutOfRange
from caffeine_tracker.core.models import Safety, SafetyBands
from caffeine_tracker.core.thresholds import (
    assess_sleep_window,
    caffeine_cutoff_time,
    classify_sleep_load,
    evaluate,
    next_sleep_cutoff,
)
from caffeine_tracker.core.timeline import aggregate


def _day_timeline(records, t0, hours=18):
    return aggregate(records, t0 - timedelta(hours=6), t0 + timedelta(hours=hours), 5, 5)


def test_evaluate_single_dose(make_record, profile, t0):
    result = evaluate(_day_timeline([make_record(200)], t0), profile, t0)

    assert result.current_mg == 200.0
    assert result.percent_of_limit == 50.0
    assert result.classification is Safety.SAFE
    assert result.sleep_at == datetime(2024, 3, 10, 23, 0, tzinfo=timezone.utc)
    assert result.projected_at_sleep_mg == pytest.approx(200 * 0.5 ** (11 / 5))


def test_evaluate_empty_timeline(profile, t0):
    result = evaluate(_day_timeline([], t0), profile, t0)

    assert result.current_mg == 0
    assert result.percent_of_limit == 0
    assert result.projected_at_sleep_mg == 0
    assert result.classification is Safety.SAFE


def test_percent_scales_linearly(make_record, profile, t0):
    low = evaluate(_day_timeline([make_record(100)], t0), profile, t0)
    high = evaluate(_day_timeline([make_record(300)], t0), profile, t0)

    assert low.percent_of_limit == 25.0
    assert high.percent_of_limit == 75.0


@pytest.mark.parametrize("dose,expected", [
    (300, Safety.SAFE),
    (340, Safety.WARNING),
    (400, Safety.DANGER),
    (500, Safety.DANGER),
])
def test_classification_bands(make_record, profile, t0, dose, expected):
    result = evaluate(_day_timeline([make_record(dose)], t0), profile, t0)
    assert result.classification is expected


def test_percent_unclamped_over_limit(make_record, profile, t0):
    result = evaluate(_day_timeline([make_record(500)], t0), profile, t0)
    assert result.percent_of_limit == 125.0


def test_band_boundaries_inclusive():
    bands = SafetyBands()

    assert bands.classify(79.999) is Safety.SAFE
    assert bands.classify(80.0) is Safety.WARNING
    assert bands.classify(99.999) is Safety.WARNING
    assert bands.classify(100.0) is Safety.DANGER


def test_custom_bands(make_record, profile, t0):
    tuned = replace(profile, bands=SafetyBands(warning_pct=50, danger_pct=75))
    result = evaluate(_day_timeline([make_record(300)], t0), tuned, t0)
    assert result.classification is Safety.DANGER


def test_inverted_bands_rejected():
    with pytest.raises(InvalidConfiguration):
        SafetyBands(warning_pct=90, danger_pct=80).classify(10)


@pytest.mark.parametrize("warning, danger", [(float("nan"), 100), (80, float("nan")), (80, float("inf"))])
def test_non_finite_bands_rejected(warning, danger):
    with pytest.raises(InvalidConfiguration):
        SafetyBands(warning_pct=warning, danger_pct=danger).classify(10)


def test_nan_percent_is_not_classified_safe():
    with pytest.raises(InvalidInput):
        SafetyBands().classify(float("nan"))


@pytest.mark.parametrize("limit", [0, -100, float("nan"), float("inf")])
def test_non_positive_limit_rejected(make_record, profile, t0, limit):
    with pytest.raises(InvalidConfiguration):
        evaluate(_day_timeline([make_record(100)], t0), replace(profile, daily_limit_mg=limit), t0)


def test_now_outside_timeline(make_record, profile, t0):
    timeline = _day_timeline([make_record(100)], t0)
    with pytest.raises(OutOfRange):
        evaluate(timeline, profile, t0 + timedelta(hours=19))


def test_sleep_cutoff_outside_timeline(make_record, profile, t0):
    timeline = _day_timeline([make_record(100)], t0, hours=8)
    with pytest.raises(OutOfRange):
        evaluate(timeline, profile, t0)


def test_next_sleep_cutoff_later_today(t0):
    assert next_sleep_cutoff(t0, time(23, 0), timezone.utc) == datetime(
        2024, 3, 10, 23, 0, tzinfo=timezone.utc
    )


def test_next_sleep_cutoff_rolls_to_tomorrow():
    now = datetime(2024, 3, 10, 23, 30, tzinfo=timezone.utc)
    assert next_sleep_cutoff(now, time(23, 0), timezone.utc) == datetime(
        2024, 3, 11, 23, 0, tzinfo=timezone.utc
    )


def test_next_sleep_cutoff_at_exact_instant():
    now = datetime(2024, 3, 10, 23, 0, tzinfo=timezone.utc)
    assert next_sleep_cutoff(now, time(23, 0), timezone.utc) == now


def test_next_sleep_cutoff_local_timezone():
    now = datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)
    sleep_at = next_sleep_cutoff(now, time(23, 0), ZoneInfo("Europe/Zurich"))
    assert sleep_at == datetime(2024, 7, 1, 21, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("max_mg,expected", [
    (0, Safety.SAFE),
    (29.9, Safety.SAFE),
    (30, Safety.WARNING),
    (40, Safety.WARNING),
    (40.1, Safety.DANGER),
])
def test_classify_sleep_load(max_mg, expected):
    assert classify_sleep_load(max_mg) is expected


def test_sleep_window_late_coffee(make_record, profile, t0):
    late = make_record(100, at=datetime(2024, 3, 10, 18, 0, tzinfo=timezone.utc))
    timeline = _day_timeline([late], t0)

    impact = assess_sleep_window(timeline, profile, t0)

    assert impact.window_start == datetime(2024, 3, 10, 23, 0, tzinfo=timezone.utc)
    assert impact.window_end == datetime(2024, 3, 11, 5, 0, tzinfo=timezone.utc)
    assert impact.max_mg == pytest.approx(50)
    assert impact.status is Safety.DANGER


def test_sleep_window_morning_coffee(make_record, profile, t0):
    morning = make_record(100, at=datetime(2024, 3, 10, 8, 0, tzinfo=timezone.utc))
    impact = assess_sleep_window(_day_timeline([morning], t0), profile, t0)

    assert impact.max_mg == 0.0
    assert impact.status is Safety.SAFE


def test_sleep_window_not_covered(make_record, profile, t0):
    timeline = _day_timeline([make_record(100)], t0, hours=14)
    with pytest.raises(OutOfRange):
        assess_sleep_window(timeline, profile, t0)


def test_caffeine_cutoff_time():
    sleep_at = datetime(2024, 3, 10, 23, 0, tzinfo=timezone.utc)

    assert caffeine_cutoff_time(120, sleep_at, 30, 5) == sleep_at - timedelta(hours=10)
    assert caffeine_cutoff_time(20, sleep_at, 30, 5) == sleep_at
