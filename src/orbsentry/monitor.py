"""Periodic conjunction monitoring.

Keeps the latest real-time and forecast results for a population that is
re-read from a supplier on every run.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Sequence

from orbsentry.core.forecast import forecast_conjunctions
from orbsentry.core.objects import TrackedObject
from orbsentry.core.propagation import Propagator, propagate
from orbsentry.core.risk import CollisionRisk
from orbsentry.core.screening import ScreeningDiagnostics, screen_now
from orbsentry.scheduling import Scheduler
from orbsentry.utils.constants import (
    DEFAULT_THRESHOLD_KM,
    FORECAST_INTERVAL,
    REALTIME_INTERVAL,
)

logger = logging.getLogger(__name__)

REALTIME_TASK = "realtime-screen"
FORECAST_TASK = "forecast"


class ConjunctionMonitor:
    """Schedules real-time screening and 24-hour forecasts.

    Args:
        objects_supplier: Returns the population to screen on each run. The
            caller is responsible for keeping it small enough for pairwise
            screening.
        scheduler: Scheduler whose clock provides the screening time.
        threshold_km: Miss-distance threshold for both runs.
        realtime_interval: Period between real-time screens.
        forecast_interval: Period between forecasts.
        propagator: Propagation adapter. Defaults to SGP4.
        forecast_workers: Thread pool size for forecast refinement.
    """

    def __init__(
        self,
        objects_supplier: Callable[[], Sequence[TrackedObject]],
        scheduler: Scheduler,
        threshold_km: float = DEFAULT_THRESHOLD_KM,
        realtime_interval: timedelta = REALTIME_INTERVAL,
        forecast_interval: timedelta = FORECAST_INTERVAL,
        propagator: Propagator = propagate,
        forecast_workers: int | None = None,
    ) -> None:
        self.objects_supplier = objects_supplier
        self.scheduler = scheduler
        self.threshold_km = threshold_km
        self.realtime_interval = realtime_interval
        self.forecast_interval = forecast_interval
        self.propagator = propagator
        self.forecast_workers = forecast_workers

        self.realtime: list[CollisionRisk] = []
        self.forecast: list[CollisionRisk] = []
        self.realtime_diagnostics = ScreeningDiagnostics()
        self.forecast_diagnostics = ScreeningDiagnostics()
        self.last_realtime_at: datetime | None = None
        self.last_forecast_at: datetime | None = None

    def start(self) -> None:
        """Register both tasks; each first runs on the next ``run_pending``."""
        self.scheduler.every(REALTIME_TASK, self.realtime_interval, self.run_realtime)
        self.scheduler.every(FORECAST_TASK, self.forecast_interval, self.run_forecast)

    def stop(self) -> None:
        self.scheduler.cancel(REALTIME_TASK)
        self.scheduler.cancel(FORECAST_TASK)

    def run_realtime(self, now: datetime) -> list[CollisionRisk]:
        diagnostics = ScreeningDiagnostics()
        self.realtime = screen_now(
            self.objects_supplier(),
            threshold_km=self.threshold_km,
            now=now,
            propagator=self.propagator,
            diagnostics=diagnostics,
        )
        self.realtime_diagnostics = diagnostics
        self.last_realtime_at = now
        logger.debug("Real-time screen at %s: %d risks", now, len(self.realtime))
        return self.realtime

    def run_forecast(self, now: datetime) -> list[CollisionRisk]:
        diagnostics = ScreeningDiagnostics()
        self.forecast = forecast_conjunctions(
            self.objects_supplier(),
            threshold_km=self.threshold_km,
            now=now,
            propagator=self.propagator,
            max_workers=self.forecast_workers,
            diagnostics=diagnostics,
        )
        self.forecast_diagnostics = diagnostics
        self.last_forecast_at = now
        logger.info("Forecast at %s: %d risks", now, len(self.forecast))
        return self.forecast
