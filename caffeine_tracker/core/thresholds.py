"""
Threshold evaluation over a combined timeline.

  current_mg        sample at or before `now`
  percent_of_limit  current_mg / daily_limit * 100, unclamped
  projected         sample nearest the next sleep cutoff
  classification    safe / warning / danger per profile.bands

`now` is always passed in; nothing here reads the clock.
"""

from datetime import datetime, time, timedelta, timezone, tzinfo

from caffeine_tracker.config import SLEEP_DANGER_MG, SLEEP_SAFE_MG, SLEEP_WINDOW_HOURS
from caffeine_tracker.core.decay import hours_until_below
from caffeine_tracker.core.errors import InvalidConfiguration
from caffeine_tracker.core.models import (
    CombinedTimeline,
    Profile,
    Safety,
    SleepImpact,
    ThresholdResult,
    to_utc,
)
from caffeine_tracker.core.timeline import nearest_sample, peak, sample_at


def next_sleep_cutoff(now: datetime, cutoff: time, tz: tzinfo) -> datetime:
    """Next occurrence of the local time-of-day `cutoff` at or after `now` (UTC)."""
    now = to_utc(now, "now")
    local_now = now.astimezone(tz)
    candidate = datetime.combine(local_now.date(), cutoff, tzinfo=tz)
    if candidate.astimezone(timezone.utc) < now:
        candidate = datetime.combine(local_now.date() + timedelta(days=1), cutoff, tzinfo=tz)
    return candidate.astimezone(timezone.utc)


def evaluate(timeline: CombinedTimeline, profile: Profile, now: datetime) -> ThresholdResult:
    """
    Current level, percent of limit, projected level at bedtime and the
    safety class. Raises OutOfRange if `now` or the next sleep cutoff is
    not covered by the timeline; the caller must re-aggregate wider.
    """
    profile.validate()
    now = to_utc(now, "now")

    current = sample_at(timeline, now).total_mg
    percent = current / profile.daily_limit_mg * 100.0

    sleep_at = next_sleep_cutoff(now, profile.sleep_cutoff, profile.timezone)
    projected = nearest_sample(timeline, sleep_at).total_mg

    return ThresholdResult(
        current_mg=current,
        percent_of_limit=percent,
        projected_at_sleep_mg=projected,
        sleep_at=sleep_at,
        classification=profile.bands.classify(percent),
    )


# ── Sleep window ─────────────────────────────────────────────────────

def classify_sleep_load(
    max_mg: float,
    safe_below_mg: float = SLEEP_SAFE_MG,
    danger_above_mg: float = SLEEP_DANGER_MG,
) -> Safety:
    """< safe_below: undisrupted; up to danger_above: may disrupt; above: likely."""
    if safe_below_mg > danger_above_mg:
        raise InvalidConfiguration(
            f"sleep safe threshold ({safe_below_mg} mg) above danger threshold ({danger_above_mg} mg)"
        )
    if max_mg < safe_below_mg:
        return Safety.SAFE
    if max_mg <= danger_above_mg:
        return Safety.WARNING
    return Safety.DANGER


def assess_sleep_window(
    timeline: CombinedTimeline,
    profile: Profile,
    now: datetime,
    window_hours: float = SLEEP_WINDOW_HOURS,
    safe_below_mg: float = SLEEP_SAFE_MG,
    danger_above_mg: float = SLEEP_DANGER_MG,
) -> SleepImpact:
    """Highest level during the first `window_hours` of sleep."""
    profile.validate()
    if window_hours is None or window_hours < 0:
        raise InvalidConfiguration(f"sleep window must be >= 0 hours, got {window_hours}")
    sleep_at = next_sleep_cutoff(now, profile.sleep_cutoff, profile.timezone)
    window_end = sleep_at + timedelta(hours=window_hours)
    top = peak(timeline, sleep_at, window_end)
    return SleepImpact(
        max_mg=top.total_mg,
        window_start=sleep_at,
        window_end=window_end,
        status=classify_sleep_load(top.total_mg, safe_below_mg, danger_above_mg),
    )


def caffeine_cutoff_time(
    current_mg: float,
    sleep_at: datetime,
    sleep_threshold_mg: float,
    half_life_hours: float,
) -> datetime:
    """
    Latest instant at which the current load, left to decay, is still
    down to `sleep_threshold_mg` by `sleep_at`. Anything taken after it
    pushes the bedtime level over the threshold.
    """
    sleep_at = to_utc(sleep_at, "sleep_at")
    hours = hours_until_below(current_mg, sleep_threshold_mg, half_life_hours)
    return sleep_at - timedelta(hours=hours)
