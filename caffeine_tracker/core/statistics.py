"""
Reporting over raw intake records.

These figures are logged quantities, not decayed-remaining amounts; they
never touch the decay model. Day and hour buckets are local to a
caller-supplied timezone, because "today" depends on where the user is.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from caffeine_tracker.core.errors import InvalidInput
from caffeine_tracker.core.models import IntakeRecord, to_utc


class Dimension(str, Enum):
    DAY = "day"
    SOURCE = "source"
    HOUR = "hour"


@dataclass(frozen=True)
class GroupSummary:
    total_mg: float
    count: int
    records: tuple

    def to_dict(self) -> dict:
        return {
            "total_mg": round(self.total_mg, 1),
            "count": self.count,
            "record_ids": [r.id for r in self.records],
        }


def resolve_timezone(tz: Union[str, tzinfo, None]) -> Optional[tzinfo]:
    """Accept an IANA name or a tzinfo."""
    if tz is None or isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidInput(f"unknown timezone: {tz!r}") from None


def _sort_key(record: IntakeRecord):
    return (record.timestamp, record.id)


def group_by(
    records: Iterable[IntakeRecord],
    dimension: Union[Dimension, str],
    tz: Union[str, tzinfo, None] = None,
) -> dict:
    """
    Map group key -> GroupSummary, keys in ascending order.

    day    -> datetime.date in `tz`
    hour   -> int 0-23 in `tz`
    source -> the record's source category, treated as an opaque string
    """
    try:
        dimension = Dimension(dimension)
    except ValueError:
        raise InvalidInput(f"unknown grouping dimension: {dimension!r}") from None
    zone = resolve_timezone(tz)
    if zone is None and dimension is not Dimension.SOURCE:
        raise InvalidInput(f"grouping by {dimension.value} needs a timezone")

    buckets: dict = {}
    for record in sorted(records, key=_sort_key):
        if dimension is Dimension.SOURCE:
            key = record.source
        else:
            local = record.timestamp.astimezone(zone)
            key = local.date() if dimension is Dimension.DAY else local.hour
        buckets.setdefault(key, []).append(record)

    return {
        key: GroupSummary(
            total_mg=sum(r.caffeine_mg for r in buckets[key]),
            count=len(buckets[key]),
            records=tuple(buckets[key]),
        )
        for key in sorted(buckets)
    }


def daily_totals(
    records: Iterable[IntakeRecord],
    tz: Union[str, tzinfo],
    start_day: date,
    end_day: date,
) -> dict:
    """Logged mg per local day, zero-filled for days without intakes."""
    if end_day < start_day:
        raise InvalidInput(f"end day {end_day} precedes start day {start_day}")
    grouped = group_by(records, Dimension.DAY, tz)
    totals = {}
    day = start_day
    while day <= end_day:
        summary = grouped.get(day)
        totals[day] = summary.total_mg if summary else 0.0
        day += timedelta(days=1)
    return totals


def total_for_day(
    records: Iterable[IntakeRecord],
    tz: Union[str, tzinfo],
    instant: datetime,
) -> float:
    """Logged mg on the local day containing `instant`."""
    zone = resolve_timezone(tz)
    if zone is None:
        raise InvalidInput("daily totals need a timezone")
    day = to_utc(instant, "instant").astimezone(zone).date()
    return daily_totals(records, tz, day, day)[day]


def filter_range(
    records: Iterable[IntakeRecord],
    start: datetime,
    end: datetime,
) -> list[IntakeRecord]:
    """Records with start <= timestamp <= end, oldest first."""
    start = to_utc(start, "start")
    end = to_utc(end, "end")
    return sorted(
        (r for r in records if start <= r.timestamp <= end),
        key=_sort_key,
    )
