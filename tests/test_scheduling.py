"""Tests for clock-driven recurring tasks."""
from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from orbsentry.scheduling import ManualClock, Scheduler, SystemClock


@pytest.fixture
def clock(now) -> ManualClock:
    return ManualClock(now)


@pytest.fixture
def scheduler(clock) -> Scheduler:
    return Scheduler(clock)


class TestManualClock:
    def test_advance(self, clock, now):
        assert clock.advance(timedelta(seconds=5)) == now + timedelta(seconds=5)
        assert clock.now() == now + timedelta(seconds=5)

    def test_cannot_go_backwards(self, clock):
        with pytest.raises(ValueError):
            clock.advance(timedelta(seconds=-1))


def test_system_clock_is_utc():
    assert SystemClock().now().tzinfo is not None


class TestScheduler:
    def test_runs_immediately_then_every_interval(self, scheduler, clock, now):
        fired = []
        scheduler.every("tick", timedelta(seconds=5), fired.append)

        assert scheduler.run_pending() == 1
        assert scheduler.run_pending() == 0

        clock.advance(timedelta(seconds=4))
        assert scheduler.run_pending() == 0

        clock.advance(timedelta(seconds=1))
        assert scheduler.run_pending() == 1
        assert fired == [now, now + timedelta(seconds=5)]

    def test_delayed_first_run(self, scheduler, clock):
        fired = []
        task = scheduler.every("tick", timedelta(minutes=5), fired.append, run_immediately=False)

        assert scheduler.run_pending() == 0
        clock.advance(timedelta(minutes=5))
        assert scheduler.run_pending() == 1
        assert task.runs == 1

    def test_missed_periods_not_replayed(self, scheduler, clock, now):
        fired = []
        task = scheduler.every("tick", timedelta(seconds=5), fired.append)
        scheduler.run_pending()

        clock.advance(timedelta(seconds=60))
        assert scheduler.run_pending() == 1
        assert task.next_run == now + timedelta(seconds=65)

    def test_cancel(self, scheduler, clock):
        fired = []
        task = scheduler.every("tick", timedelta(seconds=5), fired.append)

        assert scheduler.cancel("tick") is True
        assert task.cancelled
        assert scheduler.run_pending() == 0
        assert fired == []
        assert scheduler.cancel("tick") is False

    def test_cancel_task_directly(self, scheduler):
        task = scheduler.every("tick", timedelta(seconds=5), lambda now: None)
        task.cancel()
        assert scheduler.run_pending() == 0

    def test_same_name_replaces(self, scheduler):
        first = scheduler.every("tick", timedelta(seconds=5), lambda now: "first")
        second = scheduler.every("tick", timedelta(seconds=5), lambda now: "second")

        assert first.cancelled
        assert scheduler.tasks == [second]
        scheduler.run_pending()
        assert second.last_result == "second"

    def test_cancel_all(self, scheduler):
        scheduler.every("a", timedelta(seconds=5), lambda now: None)
        scheduler.every("b", timedelta(seconds=5), lambda now: None)
        scheduler.cancel_all()
        assert scheduler.tasks == []
        assert scheduler.run_pending() == 0

    def test_non_positive_interval_rejected(self, scheduler):
        with pytest.raises(ValueError, match="positive"):
            scheduler.every("tick", timedelta(0), lambda now: None)

    def test_callback_errors_propagate(self, scheduler):
        def boom(now):
            raise RuntimeError("boom")

        scheduler.every("boom", timedelta(seconds=1), boom)
        with pytest.raises(RuntimeError, match="boom"):
            scheduler.run_pending()

    def test_run_until_stopped(self, scheduler):
        stop = threading.Event()
        fired = []

        def once(now):
            fired.append(now)
            stop.set()

        scheduler.every("once", timedelta(seconds=1), once)
        scheduler.run(stop, poll_seconds=0.01)

        assert len(fired) == 1
