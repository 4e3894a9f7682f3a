"""Tracked objects, orbit regimes and caller-side population filters."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

from orbsentry.core.tle import TLE
from orbsentry.utils.constants import (
    GEO_MAX_ECCENTRICITY,
    GEO_PERIOD_RANGE_MIN,
    HEO_MIN_APOGEE_KM,
    HEO_MIN_ECCENTRICITY,
    LEO_MAX_ALT_KM,
)

logger = logging.getLogger(__name__)


class OrbitRegime(Enum):
    """Coarse orbit classification."""

    LEO = "LEO"
    MEO = "MEO"
    GEO = "GEO"
    HEO = "HEO"


def classify_regime(tle: TLE) -> OrbitRegime:
    """Classify an element set as LEO, MEO, GEO or HEO.

    Geosynchronous period wins over everything else, then high eccentricity
    with a distant apogee, then a low apogee.
    """
    low, high = GEO_PERIOD_RANGE_MIN
    if low < tle.period_minutes < high and tle.eccentricity < GEO_MAX_ECCENTRICITY:
        return OrbitRegime.GEO
    apogee = tle.apogee_altitude_km
    if tle.eccentricity > HEO_MIN_ECCENTRICITY and apogee > HEO_MIN_APOGEE_KM:
        return OrbitRegime.HEO
    if apogee < LEO_MAX_ALT_KM:
        return OrbitRegime.LEO
    return OrbitRegime.MEO


@dataclass(frozen=True)
class TrackedObject:
    """An object whose state can be queried at arbitrary timestamps.

    Attributes:
        object_id: Opaque identifier, unique within a population.
        name: Human-readable name.
        elements: Orbital element set understood by the propagator in use.
            The default SGP4 adapter expects a :class:`TLE`.
        regime: Cached orbit-regime classification, if known.
        epoch: Epoch of the element set (UTC), if known.
    """

    object_id: str
    name: str
    elements: Any
    regime: OrbitRegime | None = None
    epoch: datetime | None = None

    @classmethod
    def from_tle(cls, tle: TLE, object_id: str | None = None) -> TrackedObject:
        """Wrap a parsed TLE, deriving id, epoch and regime from it."""
        return cls(
            object_id=object_id if object_id is not None else str(tle.norad_id),
            name=tle.name or str(tle.norad_id),
            elements=tle,
            regime=classify_regime(tle),
            epoch=tle.epoch,
        )


def filter_stale(
    objects: Iterable[TrackedObject],
    max_age_hours: float,
    now: datetime | None = None,
) -> list[TrackedObject]:
    """Drop objects whose element set is older than ``max_age_hours``.

    Objects with an unknown epoch are dropped as well.

    Args:
        objects: Population to filter.
        max_age_hours: Maximum element-set age in hours.
        now: Reference time for age calculation. Defaults to now (UTC).

    Returns:
        Objects with an epoch no older than ``max_age_hours``.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    objects = list(objects)
    fresh = []
    for obj in objects:
        if obj.epoch is None:
            continue
        epoch = obj.epoch
        if epoch.tzinfo is None:
            epoch = epoch.replace(tzinfo=timezone.utc)
        if abs((now - epoch).total_seconds()) / 3600.0 <= max_age_hours:
            fresh.append(obj)

    logger.debug("filter_stale: %d/%d objects within %.1f h", len(fresh), len(objects), max_age_hours)
    return fresh


def select_regimes(
    objects: Iterable[TrackedObject],
    regimes: Iterable[OrbitRegime],
) -> list[TrackedObject]:
    """Keep only objects whose cached regime is in ``regimes``."""
    wanted = set(regimes)
    return [obj for obj in objects if obj.regime in wanted]
