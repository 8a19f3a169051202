"""
Per-intake decay curve, sampled from the intake instant to instant + horizon.
"""

from datetime import timedelta
from typing import Optional

from caffeine_tracker.config import EPSILON_MG, HORIZON_HOURS, MAX_SAMPLES, RESOLUTION_MINUTES
from caffeine_tracker.core.decay import check_half_life, is_non_negative, is_positive, remaining
from caffeine_tracker.core.errors import InvalidConfiguration, InvalidInput
from caffeine_tracker.core.models import DecayCurveSample, IntakeRecord


class DecayCurve:
    """
    Lazy, restartable view of one record's decay samples.

    Iterating computes samples on the fly; every iteration yields the same
    finite sequence. `value(i)` gives random access for the aggregator.
    """

    def __init__(
        self,
        record: IntakeRecord,
        resolution_minutes: float,
        half_life_hours: float,
        horizon_hours: float,
        epsilon_mg: float,
    ):
        self.record = record
        self.half_life_hours = half_life_hours
        self.epsilon_mg = epsilon_mg
        self.step = timedelta(minutes=resolution_minutes)
        self.horizon = timedelta(hours=horizon_hours)
        self.start = record.timestamp
        self.end = record.timestamp + self.horizon
        self.last_index = self.horizon // self.step

    def __len__(self) -> int:
        return self.last_index + 1

    def __iter__(self):
        for i in range(self.last_index + 1):
            yield DecayCurveSample(self.start + i * self.step, self.value(i))

    def value(self, index: int) -> float:
        elapsed_hours = (index * self.step).total_seconds() / 3600.0
        mg = remaining(self.record.caffeine_mg, elapsed_hours, self.half_life_hours)
        return mg if mg >= self.epsilon_mg else 0.0

    def values(self) -> list[float]:
        return [self.value(i) for i in range(self.last_index + 1)]

    def __repr__(self) -> str:
        return (
            f"DecayCurve(record={self.record.id!r}, start={self.start.isoformat()}, "
            f"samples={len(self)})"
        )


def build_curve(
    record: IntakeRecord,
    resolution_minutes: float = RESOLUTION_MINUTES,
    half_life_hours: Optional[float] = None,
    horizon_hours: float = HORIZON_HOURS,
    epsilon_mg: float = EPSILON_MG,
) -> DecayCurve:
    """
    Decay curve for one intake. Half-life has no default: the caller's
    profile must always supply it.
    """
    if not is_positive(resolution_minutes):
        raise InvalidInput(f"resolution must be > 0 minutes, got {resolution_minutes}")
    check_half_life(half_life_hours)
    if not is_positive(horizon_hours):
        raise InvalidConfiguration(f"horizon must be > 0 hours, got {horizon_hours}")
    if not is_non_negative(epsilon_mg):
        raise InvalidConfiguration(f"epsilon must be >= 0 mg, got {epsilon_mg}")
    step = timedelta(minutes=resolution_minutes)
    if not step:
        raise InvalidInput(f"resolution {resolution_minutes} min is below one microsecond")
    count = timedelta(hours=horizon_hours) // step + 1
    if count > MAX_SAMPLES:
        raise InvalidInput(
            f"{count} curve samples requested, at most {MAX_SAMPLES} allowed; "
            f"use a coarser resolution"
        )
    return DecayCurve(record, resolution_minutes, half_life_hours, horizon_hours, epsilon_mg)
