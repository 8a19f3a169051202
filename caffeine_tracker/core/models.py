"""
Plain value types shared by the engine.

All instants are timezone-aware and normalised to UTC on entry, so that
timedelta arithmetic is absolute and never wall-clock (DST) arithmetic.
"""

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone, tzinfo
from enum import Enum
from typing import NamedTuple, Optional

from caffeine_tracker.core.decay import is_non_negative, is_positive
from caffeine_tracker.core.errors import InvalidConfiguration, InvalidInput


def to_utc(instant: datetime, what: str = "timestamp") -> datetime:
    """Normalise an aware datetime to UTC. Naive datetimes are rejected."""
    if not isinstance(instant, datetime):
        raise InvalidInput(f"{what} must be a datetime, got {type(instant).__name__}")
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise InvalidInput(f"{what} must be timezone-aware: {instant.isoformat()}")
    return instant.astimezone(timezone.utc)


def parse_instant(value, what: str = "timestamp") -> datetime:
    """Accept a datetime or an ISO-8601 string carrying an offset."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInput(f"malformed {what}: {value!r}") from None
    return to_utc(value, what)


class Safety(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class IntakeRecord:
    """One logged intake. Edits replace the record wholesale."""

    id: str
    timestamp: datetime
    caffeine_mg: float
    source: str = "other"
    name: str = ""
    serving_ml: Optional[float] = None
    notes: str = ""

    def __post_init__(self):
        object.__setattr__(self, "timestamp", to_utc(self.timestamp))
        if not is_non_negative(self.caffeine_mg):
            raise InvalidInput(f"caffeine_mg must be a finite amount >= 0 for intake {self.id!r}")
        if self.serving_ml is not None and not is_non_negative(self.serving_ml):
            raise InvalidInput(f"serving_ml must be a finite amount >= 0 for intake {self.id!r}")

    @classmethod
    def from_dict(cls, data: dict) -> "IntakeRecord":
        """Build a record from a store row (ISO timestamp string)."""
        try:
            raw_ts = data["timestamp"]
            mg = float(data["caffeine_mg"])
        except KeyError as exc:
            raise InvalidInput(f"intake is missing field {exc.args[0]!r}") from None
        except (TypeError, ValueError):
            raise InvalidInput(f"caffeine_mg is not a number: {data['caffeine_mg']!r}") from None
        return cls(
            id=str(data.get("id", "")),
            timestamp=parse_instant(raw_ts),
            caffeine_mg=mg,
            source=data.get("source") or "other",
            name=data.get("name", ""),
            serving_ml=data.get("serving_ml"),
            notes=data.get("notes", ""),
        )


class DecayCurveSample(NamedTuple):
    instant: datetime
    mg: float


class TimelineSample(NamedTuple):
    instant: datetime
    total_mg: float


@dataclass(frozen=True)
class CombinedTimeline:
    """
    Total caffeine on a fixed grid start, start+step, ... <= end.

    `samples` is empty when no records were aggregated; the covered
    range [start, end] is still meaningful and reads as zero everywhere.
    """

    start: datetime
    end: datetime
    resolution_minutes: float
    samples: tuple = ()

    @property
    def step(self) -> timedelta:
        return timedelta(minutes=self.resolution_minutes)

    @property
    def is_empty(self) -> bool:
        return not self.samples

    def covers(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "resolution_minutes": self.resolution_minutes,
            "points": [
                {"t": s.instant.isoformat(), "mg": round(s.total_mg, 3)}
                for s in self.samples
            ],
        }


@dataclass(frozen=True)
class SafetyBands:
    """Percent-of-limit boundaries. Both are inclusive lower bounds."""

    warning_pct: float = 80.0
    danger_pct: float = 100.0

    def validate(self) -> None:
        if not is_non_negative(self.warning_pct) or not is_positive(self.danger_pct):
            raise InvalidConfiguration(
                f"safety band boundaries must be finite and positive, "
                f"got {self.warning_pct}% / {self.danger_pct}%"
            )
        if self.warning_pct > self.danger_pct:
            raise InvalidConfiguration(
                f"warning band ({self.warning_pct}%) above danger band ({self.danger_pct}%)"
            )

    def classify(self, percent_of_limit: float) -> Safety:
        self.validate()
        if not is_non_negative(percent_of_limit):
            raise InvalidInput(f"percent of limit must be finite and >= 0, got {percent_of_limit}")
        if percent_of_limit >= self.danger_pct:
            return Safety.DANGER
        if percent_of_limit >= self.warning_pct:
            return Safety.WARNING
        return Safety.SAFE


@dataclass(frozen=True)
class Profile:
    """Read-only user settings supplied by the profile provider."""

    daily_limit_mg: float
    half_life_hours: float
    sleep_cutoff: time
    timezone: tzinfo
    resolution_minutes: float = 5
    bands: SafetyBands = field(default_factory=SafetyBands)

    def validate(self) -> None:
        if not is_positive(self.daily_limit_mg):
            raise InvalidConfiguration(f"daily limit must be > 0, got {self.daily_limit_mg}")
        if not is_positive(self.half_life_hours):
            raise InvalidConfiguration(f"half-life must be > 0, got {self.half_life_hours}")
        if not isinstance(self.sleep_cutoff, time):
            raise InvalidConfiguration("sleep cutoff must be a time of day")
        if self.timezone is None:
            raise InvalidConfiguration("profile timezone is required")
        if not is_positive(self.resolution_minutes):
            raise InvalidInput(f"resolution must be > 0 minutes, got {self.resolution_minutes}")
        self.bands.validate()


@dataclass(frozen=True)
class ThresholdResult:
    current_mg: float
    percent_of_limit: float
    projected_at_sleep_mg: float
    sleep_at: datetime
    classification: Safety

    def to_dict(self) -> dict:
        return {
            "current_mg": round(self.current_mg, 1),
            "percent_of_limit": round(self.percent_of_limit, 1),
            "projected_at_sleep_mg": round(self.projected_at_sleep_mg, 1),
            "sleep_at": self.sleep_at.isoformat(),
            "classification": self.classification.value,
        }


@dataclass(frozen=True)
class SleepImpact:
    max_mg: float
    window_start: datetime
    window_end: datetime
    status: Safety

    def to_dict(self) -> dict:
        return {
            "max_mg": round(self.max_mg, 1),
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "status": self.status.value,
        }


class RecommendationStatus(str, Enum):
    RECOMMENDED = "RECOMMENDED"
    NO_MORE_CAFFEINE_TODAY = "NO_MORE_CAFFEINE_TODAY"


@dataclass(frozen=True)
class DoseRecommendation:
    """
    Next focus dose, or a stop signal. Dose and window are only set
    when status is RECOMMENDED.
    """

    status: RecommendationStatus
    remaining_budget_mg: float
    focus_dose_mg: Optional[int] = None
    best_time_start: Optional[datetime] = None
    best_time_end: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "remaining_budget_mg": round(self.remaining_budget_mg, 1),
            "focus_dose_mg": self.focus_dose_mg,
            "best_time_start": self.best_time_start.isoformat() if self.best_time_start else None,
            "best_time_end": self.best_time_end.isoformat() if self.best_time_end else None,
        }
