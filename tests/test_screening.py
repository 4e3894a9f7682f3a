"""Tests for real-time conjunction screening."""
from __future__ import annotations

from datetime import timedelta

import pytest

from orbsentry.core.propagation import State
from orbsentry.core.risk import RiskLevel
from orbsentry.core.screening import ScreeningDiagnostics, screen_now, screen_states


def test_pair_beyond_threshold_is_ignored(make_object, propagator, now):
    a = make_object("a", position_km=(7000.0, 0.0, 0.0))
    b = make_object("b", position_km=(7060.0, 0.0, 0.0))

    assert screen_now([a, b], threshold_km=50.0, now=now, propagator=propagator) == []


def test_pair_within_threshold_is_low(make_object, propagator, now):
    a = make_object("a", position_km=(7000.0, 0.0, 0.0))
    b = make_object("b", position_km=(7040.0, 0.0, 0.0))

    risks = screen_now([a, b], threshold_km=50.0, now=now, propagator=propagator)

    assert len(risks) == 1
    risk = risks[0]
    assert risk.distance_km == 40.0
    assert risk.risk_level == RiskLevel.LOW
    assert risk.tca == now
    assert risk.predicted is False
    assert (risk.primary_id, risk.secondary_id) == ("a", "b")


def test_threshold_is_exclusive(make_object, propagator, now):
    a = make_object("a", position_km=(7000.0, 0.0, 0.0))
    b = make_object("b", position_km=(7050.0, 0.0, 0.0))

    assert screen_now([a, b], threshold_km=50.0, now=now, propagator=propagator) == []


def test_identical_positions_are_critical(make_object, propagator, now):
    a = make_object("a", position_km=(7000.0, 100.0, -20.0))
    b = make_object("b", position_km=(7000.0, 100.0, -20.0))

    risks = screen_now([a, b], now=now, propagator=propagator)

    assert len(risks) == 1
    assert risks[0].distance_km == 0.0
    assert risks[0].risk_level == RiskLevel.CRITICAL


def test_sorted_by_distance(make_object, propagator, now):
    objects = [
        make_object("a", position_km=(7000.0, 0.0, 0.0)),
        make_object("b", position_km=(7020.0, 0.0, 0.0)),
        make_object("c", position_km=(7005.0, 0.0, 0.0)),
    ]

    risks = screen_now(objects, now=now, propagator=propagator)

    assert [r.distance_km for r in risks] == [5.0, 15.0, 20.0]
    assert [(r.primary_id, r.secondary_id) for r in risks] == [("a", "c"), ("b", "c"), ("a", "b")]
    assert [r.risk_level for r in risks] == [RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.MEDIUM]


def test_zero_horizon_uncertainty(make_object, propagator, now):
    a = make_object("a", position_km=(6778.137, 0.0, 0.0), epoch=now)
    b = make_object("b", position_km=(6778.137, 3.0, 0.0), epoch=now - timedelta(hours=24))

    risk = screen_now([a, b], now=now, propagator=propagator)[0]

    assert risk.uncertainty_primary_km == 0.5
    assert risk.uncertainty_secondary_km == 0.75
    assert risk.tle_age_secondary_hours == 24.0


def test_relative_velocity(make_object, propagator, now):
    a = make_object("a", position_km=(7000.0, 0.0, 0.0), velocity_km_s=(0.0, 7.5, 0.0))
    b = make_object("b", position_km=(7000.0, 0.0, 2.0), velocity_km_s=(0.0, 7.5, 0.25))

    risk = screen_now([a, b], now=now, propagator=propagator)[0]

    assert risk.relative_velocity_km_s == pytest.approx(0.25)


def test_missing_state_excluded(make_object, broken_object, propagator, now):
    a = make_object("a", position_km=(7000.0, 0.0, 0.0))
    b = make_object("b", position_km=(7001.0, 0.0, 0.0))
    diagnostics = ScreeningDiagnostics()

    risks = screen_now([a, broken_object, b], now=now, propagator=propagator, diagnostics=diagnostics)

    assert [(r.primary_id, r.secondary_id) for r in risks] == [("a", "b")]
    assert diagnostics.propagation_failures == 1
    assert diagnostics.pairs_considered == 3
    assert diagnostics.pairs_without_data == 2


def test_no_objects(propagator, now):
    assert screen_now([], now=now, propagator=propagator) == []


def test_all_broken(broken_object, now):
    assert screen_now([broken_object, broken_object], now=now) == []


def test_no_cap_on_realtime_results(make_object, propagator, now):
    objects = [make_object(f"o{i}", position_km=(7000.0 + 0.1 * i, 0.0, 0.0)) for i in range(15)]

    risks = screen_now(objects, now=now, propagator=propagator)

    assert len(risks) == 15 * 14 // 2


class TestScreenStates:
    def test_uses_given_states(self, make_object, now):
        a = make_object("a")
        b = make_object("b")
        states = [
            State.from_vectors([7000.0, 0.0, 0.0], [0.0, 7.5, 0.0], now),
            State.from_vectors([7000.0, 12.0, 0.0], [0.0, 7.5, 0.0], now),
        ]

        risks = screen_states([a, b], states, now)

        assert len(risks) == 1
        assert risks[0].distance_km == 12.0
        assert risks[0].miss_in_track_km == pytest.approx(12.0)

    def test_none_state_skipped(self, make_object, now):
        a = make_object("a")
        b = make_object("b")
        states = [State.from_vectors([7000.0, 0.0, 0.0], [0.0, 7.5, 0.0], now), None]

        assert screen_states([a, b], states, now) == []

    def test_length_mismatch_raises(self, make_object, now):
        with pytest.raises(ValueError, match="same length"):
            screen_states([make_object("a")], [], now)
