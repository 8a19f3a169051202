"""
FastAPI API routes for the caffeine engine.

Records travel in the request body; nothing is persisted here. Engine
errors propagate and are mapped to HTTP responses in main.py.
"""

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

from caffeine_tracker.config import (
    API_KEY,
    DAILY_LIMIT_MG,
    DANGER_PCT,
    HALF_LIFE_HOURS,
    HORIZON_HOURS,
    RESOLUTION_MINUTES,
    SLEEP_CUTOFF,
    SLEEP_SAFE_MG,
    SLEEP_WINDOW_HOURS,
    TIMEZONE,
    WAKE_TIME,
    WARNING_PCT,
)
from caffeine_tracker.core.curve import build_curve
from caffeine_tracker.core.limits import recommend_daily_limits
from caffeine_tracker.core.models import IntakeRecord, Profile, SafetyBands, parse_instant
from caffeine_tracker.core.recommendation import recommend_next_dose
from caffeine_tracker.core.statistics import Dimension, group_by, resolve_timezone, total_for_day
from caffeine_tracker.core.thresholds import (
    assess_sleep_window,
    caffeine_cutoff_time,
    evaluate,
    next_sleep_cutoff,
)
from caffeine_tracker.core.timeline import aggregate

log = logging.getLogger("caffeine.api")

router = APIRouter(prefix="/api")

HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


# --- Auth ---

def verify_api_key(x_api_key: str = Header(default="")):
    if API_KEY and x_api_key != API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")


# --- Models ---

class IntakeModel(BaseModel):
    id: str = ""
    timestamp: str
    caffeine_mg: float
    source: str = "other"
    name: str = ""
    serving_ml: Optional[float] = None
    notes: str = ""


class ProfileModel(BaseModel):
    daily_limit_mg: float = DAILY_LIMIT_MG
    half_life_hours: float = HALF_LIFE_HOURS
    sleep_cutoff: str = Field(SLEEP_CUTOFF, pattern=HHMM)
    timezone: str = TIMEZONE
    resolution_minutes: float = RESOLUTION_MINUTES
    warning_pct: float = WARNING_PCT
    danger_pct: float = DANGER_PCT


class CurveRequest(BaseModel):
    record: IntakeModel
    profile: ProfileModel = ProfileModel()


class TimelineRequest(BaseModel):
    records: list[IntakeModel] = []
    start: str
    end: str
    profile: ProfileModel = ProfileModel()


class StatusRequest(BaseModel):
    records: list[IntakeModel] = []
    now: Optional[str] = None
    profile: ProfileModel = ProfileModel()


class StatisticsRequest(BaseModel):
    records: list[IntakeModel] = []
    timezone: str = TIMEZONE


class RecommendationRequest(BaseModel):
    records: list[IntakeModel] = []
    now: Optional[str] = None
    wake_time: str = Field(WAKE_TIME, pattern=HHMM)
    optimal_mg: Optional[float] = None
    profile: ProfileModel = ProfileModel()


class LimitsRequest(BaseModel):
    weight_kg: Optional[float] = None
    age_range: Optional[str] = Field(None, pattern="^(under_18|18_to_60|over_60)$")
    is_pregnant: bool = False
    has_heart_condition: bool = False
    sensitivity: Optional[str] = Field(None, pattern="^(low|medium|high)$")
    alcohol_intake: Optional[str] = Field(None, pattern="^(rare|sometimes|daily)$")
    medications: list[str] = []


# --- Conversion ---

def _records(items: list[IntakeModel]) -> list[IntakeRecord]:
    return [IntakeRecord.from_dict(item.model_dump()) for item in items]


def _time_of_day(value: str) -> time:
    hours, minutes = (int(part) for part in value.split(":"))
    return time(hours, minutes)


def _now(value: Optional[str]) -> datetime:
    return parse_instant(value, "now") if value else datetime.now(timezone.utc)


def _profile(req: ProfileModel) -> Profile:
    return Profile(
        daily_limit_mg=req.daily_limit_mg,
        half_life_hours=req.half_life_hours,
        sleep_cutoff=_time_of_day(req.sleep_cutoff),
        timezone=resolve_timezone(req.timezone),
        resolution_minutes=req.resolution_minutes,
        bands=SafetyBands(req.warning_pct, req.danger_pct),
    )


# --- Endpoints ---

@router.post("/curve", dependencies=[Depends(verify_api_key)])
def decay_curve(req: CurveRequest):
    """Decay curve of a single intake over the post-dose horizon."""
    profile = _profile(req.profile)
    profile.validate()
    record = IntakeRecord.from_dict(req.record.model_dump())
    curve = build_curve(record, profile.resolution_minutes, profile.half_life_hours)
    return {
        "id": record.id,
        "resolution_minutes": profile.resolution_minutes,
        "points": [{"t": s.instant.isoformat(), "mg": round(s.mg, 3)} for s in curve],
    }


@router.post("/timeline", dependencies=[Depends(verify_api_key)])
def combined_timeline(req: TimelineRequest):
    """Combined caffeine-in-body timeline over [start, end]."""
    profile = _profile(req.profile)
    profile.validate()
    records = _records(req.records)
    timeline = aggregate(
        records,
        parse_instant(req.start, "start"),
        parse_instant(req.end, "end"),
        profile.resolution_minutes,
        profile.half_life_hours,
    )
    log.info("Timeline: %d records, %d samples", len(records), len(timeline.samples))
    return timeline.to_dict()


@router.post("/status", dependencies=[Depends(verify_api_key)])
def caffeine_status(req: StatusRequest):
    """
    Current level, percent of limit, bedtime projection, sleep-window
    impact and the latest acceptable time for more caffeine.
    """
    profile = _profile(req.profile)
    profile.validate()
    now = _now(req.now)
    records = _records(req.records)

    # Wide enough for every record still active now and the whole sleep window.
    sleep_at = next_sleep_cutoff(now, profile.sleep_cutoff, profile.timezone)
    start = now - timedelta(hours=HORIZON_HOURS)
    end = sleep_at + timedelta(hours=SLEEP_WINDOW_HOURS)
    timeline = aggregate(records, start, end, profile.resolution_minutes, profile.half_life_hours)

    result = evaluate(timeline, profile, now)
    sleep_window = assess_sleep_window(timeline, profile, now)
    cutoff = caffeine_cutoff_time(
        result.current_mg, sleep_at, SLEEP_SAFE_MG, profile.half_life_hours,
    )
    consumed_today = total_for_day(records, profile.timezone, now)

    log.info(
        "Status: %.1f mg now (%.0f%%, %s), %.1f mg at bedtime",
        result.current_mg, result.percent_of_limit,
        result.classification.value, result.projected_at_sleep_mg,
    )
    return {
        **result.to_dict(),
        "now": now.isoformat(),
        "consumed_today_mg": round(consumed_today, 1),
        "sleep_window": sleep_window.to_dict(),
        "caffeine_cutoff": cutoff.isoformat(),
    }


@router.post("/statistics/{dimension}", dependencies=[Depends(verify_api_key)])
def intake_statistics(dimension: Dimension, req: StatisticsRequest):
    """Logged intake grouped by local day, source or hour of day."""
    grouped = group_by(_records(req.records), dimension, req.timezone)
    return {
        "dimension": dimension.value,
        "timezone": req.timezone,
        "groups": [
            {"key": key.isoformat() if hasattr(key, "isoformat") else key, **summary.to_dict()}
            for key, summary in grouped.items()
        ],
    }


@router.post("/limits", dependencies=[Depends(verify_api_key)])
def daily_limits(req: LimitsRequest):
    """Suggested optimal and safe daily caffeine limits."""
    return recommend_daily_limits(
        weight_kg=req.weight_kg,
        age_range=req.age_range,
        is_pregnant=req.is_pregnant,
        has_heart_condition=req.has_heart_condition,
        sensitivity=req.sensitivity,
        alcohol_intake=req.alcohol_intake,
        medications=req.medications,
    )


@router.post("/recommendation", dependencies=[Depends(verify_api_key)])
def next_dose(req: RecommendationRequest):
    """Next focus dose and when to take it, or a stop for today."""
    profile = _profile(req.profile)
    profile.validate()
    now = _now(req.now)
    local_today = now.astimezone(profile.timezone).date()
    wake_at = datetime.combine(local_today, _time_of_day(req.wake_time), tzinfo=profile.timezone)
    optimal_mg = req.optimal_mg
    if optimal_mg is None:
        optimal_mg = recommend_daily_limits()["optimal_mg"]

    result = recommend_next_dose(_records(req.records), profile, now, wake_at, optimal_mg)
    log.info(
        "Recommendation: %s (%s mg), %.1f mg left of %.0f mg",
        result.status.value, result.focus_dose_mg, result.remaining_budget_mg, optimal_mg,
    )
    return result.to_dict()
