"""
orbsentry: conjunction detection and collision-risk assessment for Python.

Screens tracked objects for close approaches, both at the current instant
and over a 24-hour forecast horizon, and estimates collision likelihood
from a simple uncertainty-growth model.
"""

from __future__ import annotations

__version__ = "0.1.0-dev"

from orbsentry.core.tle import TLE, parse_tle
from orbsentry.core.objects import (
    OrbitRegime,
    TrackedObject,
    classify_regime,
    filter_stale,
    select_regimes,
)
from orbsentry.core.propagation import State, propagate, propagate_batch
from orbsentry.core.uncertainty import position_uncertainty, tle_age_hours
from orbsentry.core.probability import collision_probability, format_probability
from orbsentry.core.risk import CollisionRisk, RiskLevel, classify_risk, rank_risks
from orbsentry.core.screening import ScreeningDiagnostics, screen_now, screen_states
from orbsentry.core.forecast import REFINEMENT_PHASES, RefinementPhase, forecast_conjunctions
from orbsentry.scheduling import ManualClock, Scheduler, SystemClock
from orbsentry.monitor import ConjunctionMonitor

__all__ = [
    "__version__",
    "TLE",
    "parse_tle",
    "OrbitRegime",
    "TrackedObject",
    "classify_regime",
    "filter_stale",
    "select_regimes",
    "State",
    "propagate",
    "propagate_batch",
    "position_uncertainty",
    "tle_age_hours",
    "collision_probability",
    "format_probability",
    "CollisionRisk",
    "RiskLevel",
    "classify_risk",
    "rank_risks",
    "ScreeningDiagnostics",
    "screen_now",
    "screen_states",
    "REFINEMENT_PHASES",
    "RefinementPhase",
    "forecast_conjunctions",
    "ManualClock",
    "Scheduler",
    "SystemClock",
    "ConjunctionMonitor",
]
