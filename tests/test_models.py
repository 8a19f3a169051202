"""
Unit tests for engine value types.
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from caffeine_tracker.core.errors import InvalidInput
from caffeine_tracker.core.models import IntakeRecord


def test_record_normalised_to_utc():
    local = datetime(2024, 7, 1, 9, 0, tzinfo=ZoneInfo("Europe/Zurich"))
    record = IntakeRecord(id="x", timestamp=local, caffeine_mg=80)

    assert record.timestamp == datetime(2024, 7, 1, 7, 0, tzinfo=timezone.utc)
    assert record.timestamp.utcoffset() == timedelta(0)


def test_record_is_immutable(make_record):
    record = make_record(80)
    with pytest.raises(AttributeError):
        record.caffeine_mg = 120


def test_negative_caffeine_rejected(t0):
    with pytest.raises(InvalidInput):
        IntakeRecord(id="x", timestamp=t0, caffeine_mg=-1)


@pytest.mark.parametrize("mg", [float("nan"), float("inf")])
def test_non_finite_caffeine_rejected(t0, mg):
    with pytest.raises(InvalidInput):
        IntakeRecord(id="x", timestamp=t0, caffeine_mg=mg)


def test_non_finite_serving_rejected(t0):
    with pytest.raises(InvalidInput):
        IntakeRecord(id="x", timestamp=t0, caffeine_mg=80, serving_ml=float("nan"))


def test_naive_timestamp_rejected():
    with pytest.raises(InvalidInput):
        IntakeRecord(id="x", timestamp=datetime(2024, 3, 10, 12), caffeine_mg=10)


def test_from_dict():
    record = IntakeRecord.from_dict({
        "id": 7,
        "timestamp": "2024-03-10T12:00:00Z",
        "caffeine_mg": "95",
        "source": "coffee",
        "serving_ml": 240,
    })

    assert record.id == "7"
    assert record.timestamp == datetime(2024, 3, 10, 12, tzinfo=timezone.utc)
    assert record.caffeine_mg == 95.0
    assert record.source == "coffee"


@pytest.mark.parametrize("data", [
    {"caffeine_mg": 95},
    {"timestamp": "2024-03-10T12:00:00Z"},
    {"timestamp": "not a date", "caffeine_mg": 95},
    {"timestamp": "2024-03-10T12:00:00Z", "caffeine_mg": "lots"},
    {"timestamp": "2024-03-10T12:00:00Z", "caffeine_mg": "nan"},
])
def test_from_dict_rejects_bad_rows(data):
    with pytest.raises(InvalidInput):
        IntakeRecord.from_dict(data)
