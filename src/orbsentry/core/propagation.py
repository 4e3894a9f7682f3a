"""Propagation adapter contract and the default SGP4 implementation.

A propagator is any callable ``(TrackedObject, datetime) -> State | None``.
It must be a pure function of the object's element set and the timestamp,
and it signals failure by returning ``None`` rather than raising.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

import numpy as np
from numpy.typing import NDArray
from sgp4.api import jday

from orbsentry.core.objects import TrackedObject
from orbsentry.core.tle import TLE
from orbsentry.utils.constants import EARTH_RADIUS_KM

logger = logging.getLogger(__name__)


@dataclass
class State:
    """Position and velocity of one object at one instant.

    Attributes:
        position_km: [x, y, z] position in km (inertial frame).
        velocity_km_s: [vx, vy, vz] velocity in km/s.
        altitude_km: Height above the equatorial Earth radius in km.
        epoch: Time of this state.
    """

    position_km: NDArray[np.float64]  # shape (3,)
    velocity_km_s: NDArray[np.float64]  # shape (3,)
    altitude_km: float
    epoch: datetime

    @classmethod
    def from_vectors(cls, position_km, velocity_km_s, epoch: datetime) -> State:
        """Build a state, deriving altitude from the position vector."""
        pos = np.asarray(position_km, dtype=np.float64)
        vel = np.asarray(velocity_km_s, dtype=np.float64)
        return cls(
            position_km=pos,
            velocity_km_s=vel,
            altitude_km=float(np.linalg.norm(pos)) - EARTH_RADIUS_KM,
            epoch=epoch,
        )


Propagator = Callable[[TrackedObject, datetime], Optional[State]]


def propagate(obj: TrackedObject, when: datetime) -> State | None:
    """Propagate a TLE-backed object to ``when`` with SGP4.

    Args:
        obj: Object whose ``elements`` is a :class:`TLE`.
        when: UTC datetime to propagate to.

    Returns:
        The TEME state at ``when``, or ``None`` if the elements are not a
        TLE, SGP4 reports an error, or the output is not finite.
    """
    tle = obj.elements
    if not isinstance(tle, TLE):
        logger.debug("Object %s has no TLE, cannot propagate", obj.object_id)
        return None

    jd, fr = jday(when.year, when.month, when.day, when.hour, when.minute,
                  when.second + when.microsecond / 1e6)
    error_code, pos, vel = tle.satrec.sgp4(jd, fr)

    if error_code != 0:
        logger.debug("SGP4 failed for %s at %s: error code %d", obj.object_id, when, error_code)
        return None

    state = State.from_vectors(pos, vel, when)
    if not (np.all(np.isfinite(state.position_km)) and np.all(np.isfinite(state.velocity_km_s))):
        logger.debug("SGP4 returned non-finite state for %s at %s", obj.object_id, when)
        return None
    return state


def safe_propagate(propagator: Propagator, obj: TrackedObject, when: datetime) -> State | None:
    """Call a propagator, mapping numerical exceptions to ``None``.

    Custom adapters are expected to return ``None`` on failure; ones that
    raise ``ValueError`` or ``ArithmeticError`` instead are tolerated so a
    single bad sample never aborts a screening run.
    """
    try:
        return propagator(obj, when)
    except (ValueError, ArithmeticError) as exc:
        logger.warning("Propagator raised for %s at %s: %s", obj.object_id, when, exc)
        return None


def propagate_batch(
    objects: Sequence[TrackedObject],
    when: datetime,
    propagator: Propagator = propagate,
) -> list[State | None]:
    """Propagate many objects to a single time.

    Args:
        objects: Objects to propagate.
        when: Single UTC datetime to propagate all objects to.
        propagator: Adapter to use. Defaults to SGP4.

    Returns:
        One entry per object, ``None`` where propagation failed.
    """
    states = [safe_propagate(propagator, obj, when) for obj in objects]
    failed = sum(1 for s in states if s is None)
    if failed:
        logger.debug("propagate_batch: %d/%d objects failed at %s", failed, len(objects), when)
    return states
