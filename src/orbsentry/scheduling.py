"""Recurring task scheduling driven by an explicit clock.

Screening is re-run periodically by callers. Rather than relying on
platform timers, tasks are registered with a :class:`Scheduler` that reads
time from a :class:`Clock`, so tests can swap in a :class:`ManualClock` and
advance logical time deterministically.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock UTC time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> datetime:
        if delta < timedelta(0):
            raise ValueError(f"Cannot move clock backwards by {delta}")
        self._now += delta
        return self._now


@dataclass
class RecurringTask:
    """A callback that fires every ``interval`` until cancelled.

    Attributes:
        name: Unique task name within its scheduler.
        interval: Period between runs.
        callback: Called with the firing time.
        next_run: Next time the task is due.
        runs: Number of completed runs.
        cancelled: Set once :meth:`cancel` is called.
        last_result: Return value of the latest run.
    """

    name: str
    interval: timedelta
    callback: Callable[[datetime], Any]
    next_run: datetime
    runs: int = 0
    cancelled: bool = False
    last_result: Any = field(default=None, repr=False)

    def is_due(self, now: datetime) -> bool:
        return not self.cancelled and now >= self.next_run

    def run(self, now: datetime) -> Any:
        """Run the callback and schedule the next run one interval later.

        Missed periods are not replayed: the next run is computed from
        ``now``, not from the previous due time.
        """
        self.last_result = self.callback(now)
        self.runs += 1
        self.next_run = now + self.interval
        return self.last_result

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """Runs due :class:`RecurringTask` objects against a clock."""

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock if clock is not None else SystemClock()
        self._tasks: dict[str, RecurringTask] = {}
        self._lock = threading.Lock()

    @property
    def tasks(self) -> list[RecurringTask]:
        with self._lock:
            return list(self._tasks.values())

    def every(
        self,
        name: str,
        interval: timedelta,
        callback: Callable[[datetime], Any],
        run_immediately: bool = True,
    ) -> RecurringTask:
        """Register a recurring task.

        Args:
            name: Unique task name. Re-using a name replaces the old task.
            interval: Period between runs; must be positive.
            callback: Called with the firing time.
            run_immediately: If True the first run is due now, otherwise one
                interval from now.

        Returns:
            The registered task.

        Raises:
            ValueError: If ``interval`` is not positive.
        """
        if interval <= timedelta(0):
            raise ValueError(f"Task interval must be positive, got {interval}")

        now = self.clock.now()
        task = RecurringTask(
            name=name,
            interval=interval,
            callback=callback,
            next_run=now if run_immediately else now + interval,
        )
        with self._lock:
            old = self._tasks.get(name)
            if old is not None:
                old.cancel()
            self._tasks[name] = task
        logger.debug("Scheduled %s every %s", name, interval)
        return task

    def cancel(self, name: str) -> bool:
        """Cancel and remove a task. Returns False if no such task exists."""
        with self._lock:
            task = self._tasks.pop(name, None)
        if task is None:
            return False
        task.cancel()
        logger.debug("Cancelled %s after %d runs", name, task.runs)
        return True

    def cancel_all(self) -> None:
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()
        for task in tasks:
            task.cancel()

    def run_pending(self) -> int:
        """Run every task that is due at the clock's current time.

        Each due task runs at most once per call. Exceptions raised by a
        callback propagate to the caller.

        Returns:
            Number of tasks that ran.
        """
        now = self.clock.now()
        due = [t for t in self.tasks if t.is_due(now)]
        for task in due:
            task.run(now)
        return len(due)

    def run(self, stop: threading.Event, poll_seconds: float = 0.5) -> None:
        """Block, running due tasks until ``stop`` is set."""
        logger.info("Scheduler started with %d tasks", len(self.tasks))
        while not stop.is_set():
            self.run_pending()
            stop.wait(poll_seconds)
        logger.info("Scheduler stopped")
