"""Shared fixtures: a straight-line propagator for deterministic geometry."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np
import pytest

from orbsentry.core.objects import TrackedObject
from orbsentry.core.propagation import State

NOW = datetime(2024, 2, 14, 12, 0, 0, tzinfo=timezone.utc)


@dataclass(frozen=True)
class LinearElements:
    """Constant-velocity motion through ``position_km`` at ``reference``."""

    position_km: tuple[float, float, float]
    velocity_km_s: tuple[float, float, float]
    reference: datetime


def linear_propagate(obj: TrackedObject, when: datetime) -> State | None:
    el = obj.elements
    if not isinstance(el, LinearElements):
        return None
    dt = (when - el.reference).total_seconds()
    pos = np.array(el.position_km, dtype=np.float64) + np.array(el.velocity_km_s, dtype=np.float64) * dt
    return State.from_vectors(pos, el.velocity_km_s, when)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def propagator():
    return linear_propagate


@pytest.fixture
def make_object():
    """Factory for objects moving in a straight line."""

    def _make(
        object_id: str,
        position_km=(7000.0, 0.0, 0.0),
        velocity_km_s=(0.0, 0.0, 0.0),
        reference: datetime = NOW,
        epoch: datetime | None = NOW,
    ) -> TrackedObject:
        return TrackedObject(
            object_id=object_id,
            name=object_id.upper(),
            elements=LinearElements(tuple(position_km), tuple(velocity_km_s), reference),
            epoch=epoch,
        )

    return _make


@pytest.fixture
def broken_object():
    """An object no propagator can handle."""
    return TrackedObject(object_id="broken", name="BROKEN", elements=None)
