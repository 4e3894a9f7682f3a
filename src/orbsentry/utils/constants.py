from __future__ import annotations

"""Physical constants and default thresholds for conjunction screening.

Distances in km, velocities in km/s, durations as noted.
"""

from datetime import timedelta

# --- Earth parameters (WGS-84) ---
EARTH_RADIUS_KM: float = 6378.137
"""Equatorial radius of Earth in km."""

EARTH_MU_KM3_S2: float = 398600.4418
"""Earth gravitational parameter (GM) in km³/s²."""

# --- Screening thresholds ---
DEFAULT_THRESHOLD_KM: float = 50.0
"""Outer miss-distance threshold for reported risks in km."""

CANDIDATE_THRESHOLD_KM: float = 100.0
"""Coarse-scan distance below which a pair is refined in km."""

FINER_TRIGGER_KM: float = 10.0
"""Distance below which the 10-second refinement runs in km."""

FINEST_TRIGGER_KM: float = 1.0
"""Distance below which the 1-second refinement runs in km."""

MAX_PAIRS: int = 10_000
"""Hard ceiling on pairs examined by the forecaster."""

MAX_FORECAST_RESULTS: int = 50
"""Maximum number of forecast records returned."""

# --- Forecast time grid ---
FORECAST_HORIZON: timedelta = timedelta(hours=24)
"""Forward window searched by the forecaster."""

COARSE_SAMPLES: int = 96
"""Number of coarse samples across the horizon (15 min spacing)."""

# --- Risk tiers (upper bounds, inclusive) ---
CRITICAL_DISTANCE_KM: float = 1.0
HIGH_DISTANCE_KM: float = 10.0
MEDIUM_DISTANCE_KM: float = 25.0

# --- Uncertainty model ---
BASE_UNCERTAINTY_KM: float = 0.5
"""Position uncertainty of a freshly issued element set in km."""

AGE_GROWTH_PER_DAY: float = 0.5
"""Fractional inflation of the base uncertainty per day of TLE age."""

MAX_UNCERTAINTY_KM: float = 100.0
"""Upper bound on modeled position uncertainty in km."""

DEFAULT_TLE_AGE_HOURS: float = 168.0
"""Age assumed when an object's epoch is unknown (7 days)."""

GROWTH_BANDS_KM_PER_DAY: tuple[tuple[float, float], ...] = (
    (600.0, 3.0),
    (2000.0, 1.5),
    (35000.0, 0.5),
)
"""(altitude upper bound km, growth km/day) bands, checked in order."""

HIGH_ORBIT_GROWTH_KM_PER_DAY: float = 0.2
"""Growth rate above the last band (GEO and beyond) in km/day."""

# --- Probability model ---
HARD_BODY_RADIUS_KM: float = 0.01
"""Combined hard-body radius of both objects in km (~10 m)."""

MIN_COMBINED_SIGMA_KM: float = 0.001
"""Combined sigma below which probability is reported as zero."""

# --- Orbit regime boundaries ---
LEO_MAX_ALT_KM: float = 2000.0
"""Maximum apogee altitude for Low Earth Orbit in km."""

HEO_MIN_APOGEE_KM: float = 20000.0
"""Minimum apogee altitude for a highly elliptical orbit in km."""

HEO_MIN_ECCENTRICITY: float = 0.25
"""Minimum eccentricity for a highly elliptical orbit."""

GEO_PERIOD_RANGE_MIN: tuple[float, float] = (1400.0, 1500.0)
"""Exclusive orbital period range (minutes) for geosynchronous objects."""

GEO_MAX_ECCENTRICITY: float = 0.1
"""Maximum eccentricity for a geosynchronous object."""

# --- Monitor refresh intervals ---
REALTIME_INTERVAL: timedelta = timedelta(seconds=5)
"""Default period between real-time screens."""

FORECAST_INTERVAL: timedelta = timedelta(minutes=5)
"""Default period between 24-hour forecasts."""
