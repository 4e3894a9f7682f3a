from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable

import numpy as np

from orbsentry.core.frames import ric_components
from orbsentry.core.objects import TrackedObject
from orbsentry.core.probability import collision_probability
from orbsentry.core.propagation import State
from orbsentry.core.uncertainty import position_uncertainty, tle_age_hours
from orbsentry.utils.constants import (
    CRITICAL_DISTANCE_KM,
    HIGH_DISTANCE_KM,
    MEDIUM_DISTANCE_KM,
)

logger = logging.getLogger(__name__)


class RiskLevel(Enum):
    """Severity tier of a close approach."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def classify_risk(distance_km: float) -> RiskLevel:
    """Map a miss distance to a severity tier (bounds are inclusive)."""
    if distance_km <= CRITICAL_DISTANCE_KM:
        return RiskLevel.CRITICAL
    elif distance_km <= HIGH_DISTANCE_KM:
        return RiskLevel.HIGH
    elif distance_km <= MEDIUM_DISTANCE_KM:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


@dataclass(frozen=True)
class CollisionRisk:
    """A close approach between two tracked objects.

    Attributes:
        primary_id: Id of the first object of the pair.
        secondary_id: Id of the second object of the pair.
        primary_name: Name of the first object.
        secondary_name: Name of the second object.
        distance_km: Miss distance at TCA in km, rounded to 2 decimals.
        tca: Time of closest approach (UTC).
        risk_level: Severity tier derived from the unrounded distance.
        position_primary_km: Primary position at TCA in km.
        position_secondary_km: Secondary position at TCA in km.
        collision_probability_pct: Estimated probability in percent.
        relative_velocity_km_s: Relative speed at TCA in km/s.
        uncertainty_primary_km: Modeled position uncertainty in km.
        uncertainty_secondary_km: Modeled position uncertainty in km.
        tle_age_primary_hours: Element-set age at screening time in hours.
        tle_age_secondary_hours: Element-set age at screening time in hours.
        miss_radial_km: Radial miss component in the primary's frame.
        miss_in_track_km: In-track miss component in the primary's frame.
        miss_cross_track_km: Cross-track miss component in the primary's frame.
        predicted: True for forecast records, False for real-time ones.
        exact_distance_km: Unrounded miss distance used for ranking. Not part
            of equality.
    """

    primary_id: str
    secondary_id: str
    primary_name: str
    secondary_name: str
    distance_km: float
    tca: datetime
    risk_level: RiskLevel
    position_primary_km: tuple[float, float, float]
    position_secondary_km: tuple[float, float, float]
    collision_probability_pct: float
    relative_velocity_km_s: float
    uncertainty_primary_km: float
    uncertainty_secondary_km: float
    tle_age_primary_hours: float
    tle_age_secondary_hours: float
    miss_radial_km: float | None = None
    miss_in_track_km: float | None = None
    miss_cross_track_km: float | None = None
    predicted: bool = False
    exact_distance_km: float | None = field(default=None, repr=False, compare=False)

    @property
    def risk_id(self) -> str:
        suffix = "-pred" if self.predicted else ""
        return f"{self.primary_id}-{self.secondary_id}{suffix}"


def build_risk(
    primary: TrackedObject,
    secondary: TrackedObject,
    state_primary: State,
    state_secondary: State,
    distance_km: float,
    tca: datetime,
    now: datetime,
    predicted: bool = False,
) -> CollisionRisk:
    """Assemble a :class:`CollisionRisk` from a pair's states at TCA.

    Uncertainty uses each object's element-set age at ``now`` and the
    horizon ``tca - now``.

    Args:
        primary: First object of the pair.
        secondary: Second object of the pair.
        state_primary: Primary state at ``tca``.
        state_secondary: Secondary state at ``tca``.
        distance_km: Unrounded miss distance in km.
        tca: Time of closest approach.
        now: Screening reference time.
        predicted: Whether the record comes from the forecaster.

    Returns:
        The immutable risk record.
    """
    horizon_hours = (tca - now).total_seconds() / 3600.0
    age1 = tle_age_hours(primary, now)
    age2 = tle_age_hours(secondary, now)
    sigma1 = position_uncertainty(age1, state_primary.altitude_km, horizon_hours)
    sigma2 = position_uncertainty(age2, state_secondary.altitude_km, horizon_hours)
    probability = collision_probability(distance_km, sigma1, sigma2)
    rel_vel = float(np.linalg.norm(state_primary.velocity_km_s - state_secondary.velocity_km_s))

    ric = ric_components(state_primary.position_km, state_primary.velocity_km_s, state_secondary.position_km)
    radial, in_track, cross_track = (round(c, 3) for c in ric) if ric is not None else (None, None, None)

    return CollisionRisk(
        primary_id=primary.object_id,
        secondary_id=secondary.object_id,
        primary_name=primary.name,
        secondary_name=secondary.name,
        distance_km=round(distance_km, 2),
        tca=tca,
        risk_level=classify_risk(distance_km),
        position_primary_km=tuple(float(x) for x in state_primary.position_km),
        position_secondary_km=tuple(float(x) for x in state_secondary.position_km),
        collision_probability_pct=probability,
        relative_velocity_km_s=round(rel_vel, 3),
        uncertainty_primary_km=round(sigma1, 2),
        uncertainty_secondary_km=round(sigma2, 2),
        tle_age_primary_hours=round(age1, 1),
        tle_age_secondary_hours=round(age2, 1),
        miss_radial_km=radial,
        miss_in_track_km=in_track,
        miss_cross_track_km=cross_track,
        predicted=predicted,
        exact_distance_km=float(distance_km),
    )


def _ranking_distance(risk: CollisionRisk) -> float:
    if risk.exact_distance_km is not None:
        return risk.exact_distance_km
    return risk.distance_km


def rank_risks(risks: Iterable[CollisionRisk], limit: int | None = None) -> list[CollisionRisk]:
    """Sort risks by ascending miss distance, optionally keeping the first ``limit``.

    Records built by :func:`build_risk` sort on their unrounded distance, so
    approaches a few metres apart keep their true order. The sort is stable,
    so records at equal distance keep their input order.
    """
    ranked = sorted(risks, key=_ranking_distance)
    if limit is not None and len(ranked) > limit:
        logger.debug("rank_risks: capping %d records to %d", len(ranked), limit)
        ranked = ranked[:limit]
    return ranked
