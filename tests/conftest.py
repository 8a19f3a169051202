from datetime import datetime, time, timezone

import pytest

from caffeine_tracker.core.models import IntakeRecord, Profile

T0 = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def make_record():
    counter = {"n": 0}

    def _make(mg=100.0, at=T0, source="coffee", **kwargs):
        counter["n"] += 1
        return IntakeRecord(
            id=kwargs.pop("id", f"r{counter['n']}"),
            timestamp=at,
            caffeine_mg=mg,
            source=source,
            **kwargs,
        )

    return _make


@pytest.fixture
def profile():
    return Profile(
        daily_limit_mg=400,
        half_life_hours=5,
        sleep_cutoff=time(23, 0),
        timezone=timezone.utc,
    )
