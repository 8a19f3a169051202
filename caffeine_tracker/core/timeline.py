"""
Timeline aggregation: linear superposition of per-intake decay curves.

  C_total(t) = SUM_i C_i(t - tau_i) * W_i(t)

where W_i is 1 inside the record's window [tau_i, tau_i + horizon]
(inclusive at both ends) and 0 outside it. Grid instants that fall between
two samples of a record's curve are linearly interpolated.

Cost is O(records x samples-per-record); both factors are bounded by the
fixed horizon and the chosen resolution, so everything is recomputed from
scratch on each call.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from caffeine_tracker.config import EPSILON_MG, HORIZON_HOURS, MAX_SAMPLES, RESOLUTION_MINUTES
from caffeine_tracker.core.curve import DecayCurve, build_curve
from caffeine_tracker.core.decay import check_half_life, is_positive
from caffeine_tracker.core.errors import InvalidInput, OutOfRange
from caffeine_tracker.core.models import (
    CombinedTimeline,
    IntakeRecord,
    TimelineSample,
    to_utc,
)

log = logging.getLogger("caffeine.timeline")


# ── Grid helpers ─────────────────────────────────────────────────────

def _ceil_div(delta: timedelta, step: timedelta) -> int:
    q, r = divmod(delta, step)
    return q + 1 if r else q


def _contribution(curve: DecayCurve, values: list[float], instant: datetime) -> float:
    """Value of one record's curve at an instant inside its window."""
    idx, rem = divmod(instant - curve.start, curve.step)
    if idx >= curve.last_index:
        # Past the final sample but still within the horizon: hold it.
        return values[curve.last_index]
    if not rem:
        return values[idx]
    frac = rem / curve.step
    lo, hi = values[idx], values[idx + 1]
    return lo + (hi - lo) * frac


# ── Aggregation ──────────────────────────────────────────────────────

def aggregate(
    records: Iterable[IntakeRecord],
    start: datetime,
    end: datetime,
    resolution_minutes: float = RESOLUTION_MINUTES,
    half_life_hours: Optional[float] = None,
    horizon_hours: float = HORIZON_HOURS,
    curve_resolution_minutes: Optional[float] = None,
    epsilon_mg: float = EPSILON_MG,
) -> CombinedTimeline:
    """
    Combined caffeine-in-body timeline over [start, end].

    The grid runs start, start + resolution, ... up to end. Each record's
    curve is sampled at `curve_resolution_minutes` (defaults to the grid
    resolution). With no records the timeline has no samples but still
    covers [start, end].
    """
    start = to_utc(start, "start")
    end = to_utc(end, "end")
    if end < start:
        raise InvalidInput(f"range end {end.isoformat()} precedes start {start.isoformat()}")
    if not is_positive(resolution_minutes):
        raise InvalidInput(f"resolution must be > 0 minutes, got {resolution_minutes}")
    check_half_life(half_life_hours)

    step = timedelta(minutes=resolution_minutes)
    if not step:
        raise InvalidInput(f"resolution {resolution_minutes} min is below one microsecond")
    count = (end - start) // step + 1
    if count > MAX_SAMPLES:
        raise InvalidInput(
            f"{count} samples requested, at most {MAX_SAMPLES} allowed; "
            f"narrow the range or use a coarser resolution"
        )

    records = list(records)
    if not records:
        return CombinedTimeline(start, end, resolution_minutes)

    totals = [0.0] * count
    curve_res = resolution_minutes if curve_resolution_minutes is None else curve_resolution_minutes

    for record in records:
        curve = build_curve(record, curve_res, half_life_hours, horizon_hours, epsilon_mg)
        if curve.end < start or curve.start > end:
            continue
        k_lo = 0 if curve.start <= start else _ceil_div(curve.start - start, step)
        k_hi = min(count - 1, (curve.end - start) // step)
        if k_lo > k_hi:
            continue
        values = curve.values()
        for k in range(k_lo, k_hi + 1):
            totals[k] += _contribution(curve, values, start + k * step)

    log.debug(
        "Aggregated %d records into %d samples (%s .. %s)",
        len(records), count, start.isoformat(), end.isoformat(),
    )
    samples = tuple(
        TimelineSample(start + k * step, max(0.0, total))
        for k, total in enumerate(totals)
    )
    return CombinedTimeline(start, end, resolution_minutes, samples)


# ── Lookups ──────────────────────────────────────────────────────────

def _check_covered(timeline: CombinedTimeline, instant: datetime, what: str) -> datetime:
    instant = to_utc(instant, what)
    if not timeline.covers(instant):
        raise OutOfRange(
            f"{what} {instant.isoformat()} outside timeline "
            f"[{timeline.start.isoformat()}, {timeline.end.isoformat()}]"
        )
    return instant


def sample_at(timeline: CombinedTimeline, instant: datetime) -> TimelineSample:
    """Sample at or immediately preceding `instant`."""
    instant = _check_covered(timeline, instant, "instant")
    idx = (instant - timeline.start) // timeline.step
    if timeline.is_empty:
        return TimelineSample(timeline.start + idx * timeline.step, 0.0)
    return timeline.samples[min(idx, len(timeline.samples) - 1)]


def nearest_sample(timeline: CombinedTimeline, instant: datetime) -> TimelineSample:
    """Sample closest to `instant`; exact midpoints resolve to the later one."""
    instant = _check_covered(timeline, instant, "instant")
    step = timeline.step
    idx, rem = divmod(instant - timeline.start, step)
    if rem * 2 >= step:
        idx += 1
    last = (timeline.end - timeline.start) // step
    idx = min(idx, last)
    if timeline.is_empty:
        return TimelineSample(timeline.start + idx * step, 0.0)
    return timeline.samples[idx]


def peak(
    timeline: CombinedTimeline,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> TimelineSample:
    """Highest sample within [start, end] (defaults to the whole timeline)."""
    lo = timeline.start if start is None else _check_covered(timeline, start, "window start")
    hi = timeline.end if end is None else _check_covered(timeline, end, "window end")
    if hi < lo:
        raise InvalidInput(f"window end {hi.isoformat()} precedes start {lo.isoformat()}")
    best = TimelineSample(lo, 0.0)
    for sample in timeline.samples:
        if lo <= sample.instant <= hi and sample.total_mg > best.total_mg:
            best = sample
    return best
