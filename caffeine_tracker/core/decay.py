"""
Decay model: first-order elimination with instantaneous absorption.

  A(t) = D * 2^(-t / t_half)

The curve approaches zero asymptotically and never reaches it in floating
point, so consumers bound the active window with a fixed horizon and treat
anything below EPSILON_MG as zero.
"""

import math

from caffeine_tracker.core.errors import InvalidConfiguration, InvalidInput


def is_positive(value) -> bool:
    """True for a finite number > 0. NaN and infinities never qualify."""
    return value is not None and math.isfinite(value) and value > 0


def is_non_negative(value) -> bool:
    return value is not None and math.isfinite(value) and value >= 0


def check_half_life(half_life_hours: float) -> None:
    if not is_positive(half_life_hours):
        raise InvalidConfiguration(f"half-life must be > 0 hours, got {half_life_hours}")


def remaining(dose_mg: float, elapsed_hours: float, half_life_hours: float) -> float:
    """Milligrams of `dose_mg` still active `elapsed_hours` after the dose."""
    check_half_life(half_life_hours)
    if not is_non_negative(elapsed_hours):
        raise InvalidInput(f"elapsed time must be finite and >= 0 hours, got {elapsed_hours}")
    if not is_non_negative(dose_mg):
        raise InvalidInput(f"dose must be a finite amount >= 0 mg, got {dose_mg}")
    return dose_mg * 0.5 ** (elapsed_hours / half_life_hours)


def hours_until_below(current_mg: float, target_mg: float, half_life_hours: float) -> float:
    """
    Hours for `current_mg` to decay down to `target_mg`.
    t = t_half * log2(current / target); 0 if already at or below target.
    """
    check_half_life(half_life_hours)
    if not is_positive(target_mg):
        raise InvalidInput("target must be > 0 mg; exponential decay never reaches zero")
    if not is_non_negative(current_mg):
        raise InvalidInput(f"current amount must be a finite amount >= 0 mg, got {current_mg}")
    if current_mg <= target_mg:
        return 0.0
    return half_life_hours * math.log2(current_mg / target_mg)
