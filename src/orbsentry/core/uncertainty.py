"""Position uncertainty growth model.

Uncertainty starts at a fixed base for a fresh element set, inflates with
the element set's age, and grows linearly with the forward propagation
horizon at a rate that depends on altitude (low orbits are perturbed most).
"""
from __future__ import annotations

from datetime import datetime, timezone

from orbsentry.core.objects import TrackedObject
from orbsentry.utils.constants import (
    AGE_GROWTH_PER_DAY,
    BASE_UNCERTAINTY_KM,
    DEFAULT_TLE_AGE_HOURS,
    GROWTH_BANDS_KM_PER_DAY,
    HIGH_ORBIT_GROWTH_KM_PER_DAY,
    MAX_UNCERTAINTY_KM,
)


def tle_age_hours(obj: TrackedObject, now: datetime) -> float:
    """Hours elapsed between the object's epoch and ``now``.

    Returns :data:`DEFAULT_TLE_AGE_HOURS` when the epoch is unknown, and
    never a negative value.
    """
    if obj.epoch is None:
        return DEFAULT_TLE_AGE_HOURS
    epoch = obj.epoch
    if epoch.tzinfo is None:
        epoch = epoch.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max(0.0, (now - epoch).total_seconds() / 3600.0)


def growth_rate_km_per_day(altitude_km: float) -> float:
    """Daily uncertainty growth for an object at ``altitude_km``."""
    for upper_km, rate in GROWTH_BANDS_KM_PER_DAY:
        if altitude_km < upper_km:
            return rate
    return HIGH_ORBIT_GROWTH_KM_PER_DAY


def position_uncertainty(
    tle_age_hours: float,
    altitude_km: float,
    propagation_hours: float,
) -> float:
    """Scalar position uncertainty radius in km.

    Args:
        tle_age_hours: Age of the element set at the reference time.
        altitude_km: Altitude used to pick the growth band.
        propagation_hours: Forward horizon from the reference time. Negative
            values (a TCA refined to before the reference time) are clamped to
            zero instead of shrinking the base uncertainty.

    Returns:
        ``base * (1 + age_days * 0.5) + horizon_days * growth``, capped at
        :data:`MAX_UNCERTAINTY_KM`.
    """
    age_factor = 1 + (tle_age_hours / 24.0) * AGE_GROWTH_PER_DAY
    horizon_days = max(0.0, propagation_hours) / 24.0
    uncertainty = BASE_UNCERTAINTY_KM * age_factor + horizon_days * growth_rate_km_per_day(altitude_km)
    return min(uncertainty, MAX_UNCERTAINTY_KM)
