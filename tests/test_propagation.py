"""Tests for the propagation adapter."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from orbsentry.core.objects import TrackedObject
from orbsentry.core.propagation import State, propagate, propagate_batch, safe_propagate
from orbsentry.core.tle import TLE
from orbsentry.utils.constants import EARTH_RADIUS_KM

ISS_LINE1 = "1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993"
ISS_LINE2 = "2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596"


@pytest.fixture
def iss() -> TrackedObject:
    return TrackedObject.from_tle(TLE.from_lines(ISS_LINE1, ISS_LINE2, "ISS (ZARYA)"))


def test_propagate_at_epoch(iss: TrackedObject):
    state = propagate(iss, iss.epoch)

    assert isinstance(state, State)
    assert state.position_km.shape == (3,)
    assert state.velocity_km_s.shape == (3,)
    assert state.epoch == iss.epoch
    assert 300 < state.altitude_km < 500
    assert 7.0 < np.linalg.norm(state.velocity_km_s) < 8.0


def test_altitude_matches_position(iss: TrackedObject):
    state = propagate(iss, iss.epoch + timedelta(hours=1))
    assert state.altitude_km == pytest.approx(np.linalg.norm(state.position_km) - EARTH_RADIUS_KM)


def test_propagate_is_repeatable(iss: TrackedObject):
    t = iss.epoch + timedelta(minutes=37)
    first = propagate(iss, t)
    second = propagate(iss, t)
    np.testing.assert_array_equal(first.position_km, second.position_km)
    np.testing.assert_array_equal(first.velocity_km_s, second.velocity_km_s)


def test_propagate_without_tle_returns_none(broken_object):
    assert propagate(broken_object, datetime(2024, 2, 14, tzinfo=timezone.utc)) is None


def test_propagate_far_future_does_not_raise(iss: TrackedObject):
    """Decayed or diverged propagation yields either a state or None."""
    state = propagate(iss, iss.epoch + timedelta(days=365 * 50))
    assert state is None or np.all(np.isfinite(state.position_km))


def test_state_from_vectors():
    state = State.from_vectors([7000.0, 0.0, 0.0], [0.0, 7.5, 0.0], datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert state.altitude_km == pytest.approx(7000.0 - EARTH_RADIUS_KM)
    assert state.position_km.dtype == np.float64


class TestSafePropagate:
    def test_value_error_becomes_none(self, iss: TrackedObject):
        def exploding(obj, when):
            raise ValueError("diverged")

        assert safe_propagate(exploding, iss, iss.epoch) is None

    def test_arithmetic_error_becomes_none(self, iss: TrackedObject):
        def dividing(obj, when):
            return 1 / 0

        assert safe_propagate(dividing, iss, iss.epoch) is None

    def test_other_errors_propagate(self, iss: TrackedObject):
        def buggy(obj, when):
            raise KeyError("bug")

        with pytest.raises(KeyError):
            safe_propagate(buggy, iss, iss.epoch)


def test_propagate_batch_mixed(iss: TrackedObject, broken_object):
    states = propagate_batch([iss, broken_object, iss], iss.epoch)

    assert len(states) == 3
    assert states[1] is None
    np.testing.assert_allclose(states[0].position_km, states[2].position_km)


def test_propagate_batch_empty():
    assert propagate_batch([], datetime.now(timezone.utc)) == []


def test_propagate_batch_custom_propagator(make_object, propagator, now):
    a = make_object("a", position_km=(7000.0, 0.0, 0.0), velocity_km_s=(0.0, 1.0, 0.0))
    states = propagate_batch([a], now + timedelta(seconds=10), propagator)
    np.testing.assert_allclose(states[0].position_km, [7000.0, 10.0, 0.0])
