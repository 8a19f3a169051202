"""
Personalised daily caffeine limits.

Feeds the profile provider with a suggested daily limit; the engine itself
only ever consumes the limit the profile supplies.

  optimal = min(3 mg/kg, 200)      safe = min(6 mg/kg, 400)

then adjusted for age, pregnancy, heart condition, sensitivity, alcohol
and medication, with optimal finally clamped to [50, 200] mg.
"""

import math
from typing import Optional

from caffeine_tracker.config import (
    MEDICATION_MULTIPLIERS,
    OPTIMAL_CAP_MG,
    OPTIMAL_FLOOR_MG,
    OPTIMAL_MG_PER_KG,
    SAFE_CAP_MG,
    SAFE_MG_PER_KG,
)
from caffeine_tracker.core.decay import is_non_negative, is_positive
from caffeine_tracker.core.errors import InvalidInput

AGE_RANGES = ("under_18", "18_to_60", "over_60")
SENSITIVITY_MULTIPLIERS = {"low": 1.1, "medium": 1.0, "high": 0.5}
ALCOHOL_MULTIPLIERS = {"rare": 1.0, "sometimes": 0.9, "daily": 0.85}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _lookup(table: dict, key: Optional[str], what: str) -> float:
    if key is None:
        return 1.0
    if key not in table:
        raise InvalidInput(f"unknown {what}: {key!r}")
    return table[key]


def recommend_daily_limits(
    weight_kg: Optional[float] = None,
    age_range: Optional[str] = None,
    is_pregnant: bool = False,
    has_heart_condition: bool = False,
    sensitivity: Optional[str] = None,
    alcohol_intake: Optional[str] = None,
    medications: Optional[list[str]] = None,
) -> dict:
    """
    Compute optimal and safe daily caffeine limits (mg).

    Returns dict with optimal_mg, safe_mg and the inputs that shaped them.
    """
    optimal = float(OPTIMAL_CAP_MG)
    safe = float(SAFE_CAP_MG)

    if weight_kg is not None:
        if not is_positive(weight_kg):
            raise InvalidInput(f"weight must be > 0 kg, got {weight_kg}")
        optimal = min(weight_kg * OPTIMAL_MG_PER_KG, OPTIMAL_CAP_MG)
        safe = min(weight_kg * SAFE_MG_PER_KG, SAFE_CAP_MG)

    if age_range is not None and age_range not in AGE_RANGES:
        raise InvalidInput(f"unknown age range: {age_range!r}")
    if age_range == "over_60":
        optimal *= 0.8
    elif age_range == "under_18":
        optimal, safe = 80.0, 100.0

    if is_pregnant:
        optimal = min(optimal, 200.0)
        safe = min(safe, 200.0)
        optimal *= 0.5

    if has_heart_condition:
        optimal = min(optimal, 100.0)
        safe = min(safe, 200.0)

    optimal *= _lookup(SENSITIVITY_MULTIPLIERS, sensitivity, "sensitivity")
    optimal *= _lookup(ALCOHOL_MULTIPLIERS, alcohol_intake, "alcohol intake")

    # Only the strongest interaction counts.
    meds = medications or []
    if meds and "none" not in meds:
        optimal *= min(_lookup(MEDICATION_MULTIPLIERS, m, "medication") for m in meds)

    optimal_mg = min(max(_round_half_up(optimal), OPTIMAL_FLOOR_MG), OPTIMAL_CAP_MG)

    return {
        "optimal_mg": optimal_mg,
        "safe_mg": _round_half_up(safe),
        "weight_kg": weight_kg,
        "age_range": age_range,
        "is_pregnant": is_pregnant,
        "has_heart_condition": has_heart_condition,
        "sensitivity": sensitivity,
        "alcohol_intake": alcohol_intake,
        "medications": meds,
    }


def caffeine_for_serving(caffeine_per_100ml: float, serving_ml: float) -> int:
    """Whole milligrams of caffeine in a serving."""
    if not is_non_negative(caffeine_per_100ml) or not is_non_negative(serving_ml):
        raise InvalidInput("caffeine content and serving size must be finite and >= 0")
    return _round_half_up(caffeine_per_100ml * serving_ml / 100.0)
