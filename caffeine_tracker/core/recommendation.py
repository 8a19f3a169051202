"""
Next focus dose: how much caffeine to take, and when.

A candidate intake is accepted only if, added to the logged records,
  - the combined peak stays at or below PEAK_CAP_FRACTION * optimal, and
  - the combined maximum during the sleep window stays below SLEEP_SAFE_MG.

Candidates run from the earliest allowed time (MIN_DOSE_GAP_MINUTES after
the last dose, never before `now`) to DOSE_CUTOFF_HOURS before bedtime, in
SIMULATION_STEP_MINUTES steps. The dose starts at the remaining budget
spread over the hours left and steps down by DOSE_STEP_MG until a time fits.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Iterable

from caffeine_tracker.config import (
    DOSE_CUTOFF_HOURS,
    DOSE_SLOT_HOURS,
    DOSE_STEP_MG,
    DOSE_WINDOW_MINUTES,
    HORIZON_HOURS,
    MAX_DOSE_MG,
    MIN_DOSE_GAP_MINUTES,
    MIN_DOSE_MG,
    PEAK_CAP_FRACTION,
    SIMULATION_STEP_MINUTES,
    SLEEP_SAFE_MG,
    SLEEP_WINDOW_HOURS,
)
from caffeine_tracker.core.decay import is_positive
from caffeine_tracker.core.errors import InvalidConfiguration
from caffeine_tracker.core.models import (
    CombinedTimeline,
    DoseRecommendation,
    IntakeRecord,
    Profile,
    RecommendationStatus,
    to_utc,
)
from caffeine_tracker.core.statistics import total_for_day
from caffeine_tracker.core.thresholds import next_sleep_cutoff
from caffeine_tracker.core.timeline import aggregate, peak

log = logging.getLogger("caffeine.recommendation")


def _with_candidate(
    records: list[IntakeRecord],
    dose_mg: float,
    at: datetime,
    start: datetime,
    end: datetime,
    half_life_hours: float,
) -> CombinedTimeline:
    candidate = IntakeRecord(id="candidate", timestamp=at, caffeine_mg=dose_mg, source="candidate")
    return aggregate(records + [candidate], start, end, SIMULATION_STEP_MINUTES, half_life_hours)


def _fits(
    records: list[IntakeRecord],
    dose_mg: float,
    at: datetime,
    sleep_at: datetime,
    peak_cap_mg: float,
    half_life_hours: float,
) -> bool:
    # The candidate only contributes within its horizon.
    ahead = _with_candidate(
        records, dose_mg, at, at, at + timedelta(hours=HORIZON_HOURS), half_life_hours,
    )
    if peak(ahead).total_mg > peak_cap_mg:
        return False
    asleep = _with_candidate(
        records, dose_mg, at, sleep_at, sleep_at + timedelta(hours=SLEEP_WINDOW_HOURS),
        half_life_hours,
    )
    return peak(asleep).total_mg < SLEEP_SAFE_MG


def recommend_next_dose(
    records: Iterable[IntakeRecord],
    profile: Profile,
    now: datetime,
    wake_at: datetime,
    optimal_mg: float,
) -> DoseRecommendation:
    """
    Suggest the next focus dose and the earliest time it is safe to take.

    `optimal_mg` is the user's optimal daily amount (see limits.py);
    `wake_at` anchors the day when nothing has been logged yet.
    """
    profile.validate()
    if not is_positive(optimal_mg):
        raise InvalidConfiguration(f"optimal daily amount must be > 0 mg, got {optimal_mg}")
    now = to_utc(now, "now")
    wake_at = to_utc(wake_at, "wake_at")
    records = list(records)

    sleep_at = next_sleep_cutoff(now, profile.sleep_cutoff, profile.timezone)
    dose_cutoff = sleep_at - timedelta(hours=DOSE_CUTOFF_HOURS)
    budget_mg = optimal_mg - total_for_day(records, profile.timezone, now)
    stop = DoseRecommendation(RecommendationStatus.NO_MORE_CAFFEINE_TODAY, max(0.0, budget_mg))

    taken = [r.timestamp for r in records if r.timestamp <= now]
    last_dose = max(taken) if taken else wake_at
    earliest = max(now, last_dose + timedelta(minutes=MIN_DOSE_GAP_MINUTES))
    if earliest > dose_cutoff or budget_mg < MIN_DOSE_MG:
        return stop

    # Spread what is left of the budget over the hours until the cutoff.
    available_hours = (dose_cutoff - max(last_dose, wake_at)).total_seconds() / 3600.0
    slots = max(1, math.floor(available_hours / DOSE_SLOT_HOURS))
    dose = min(budget_mg / slots, MAX_DOSE_MG)

    peak_cap_mg = PEAK_CAP_FRACTION * optimal_mg
    step = timedelta(minutes=SIMULATION_STEP_MINUTES)
    while dose >= MIN_DOSE_MG:
        at = earliest
        while at <= dose_cutoff:
            if _fits(records, dose, at, sleep_at, peak_cap_mg, profile.half_life_hours):
                log.debug("Recommending %.1f mg at %s", dose, at.isoformat())
                return DoseRecommendation(
                    status=RecommendationStatus.RECOMMENDED,
                    remaining_budget_mg=budget_mg,
                    focus_dose_mg=int(math.floor(dose + 0.5)),
                    best_time_start=at,
                    best_time_end=at + timedelta(minutes=DOSE_WINDOW_MINUTES),
                )
            at += step
        dose -= DOSE_STEP_MG
    return stop
