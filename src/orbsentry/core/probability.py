"""Collision probability estimation.

Uses a closed-form approximation of an isotropic 2D encounter:

    Pc ≈ (r² / (2σ²)) · exp(-d² / (2σ²))

with ``σ`` the root-sum-square of both objects' position uncertainty, ``r``
the combined hard-body radius and ``d`` the miss distance. Results are in
percent. This is not a covariance-based Pc integral; display thresholds
downstream are tuned to its numeric range.
"""

from __future__ import annotations

import logging
import math

from orbsentry.utils.constants import HARD_BODY_RADIUS_KM, MIN_COMBINED_SIGMA_KM

logger = logging.getLogger(__name__)


def combined_sigma(sigma1_km: float, sigma2_km: float) -> float:
    """Root-sum-square of two independent position uncertainties."""
    return math.sqrt(sigma1_km * sigma1_km + sigma2_km * sigma2_km)


def collision_probability(
    miss_distance_km: float,
    sigma1_km: float,
    sigma2_km: float,
    hard_body_radius_km: float = HARD_BODY_RADIUS_KM,
) -> float:
    """Probability of collision in percent (0-100).

    Args:
        miss_distance_km: Separation at closest approach in km.
        sigma1_km: Position uncertainty of the first object in km.
        sigma2_km: Position uncertainty of the second object in km.
        hard_body_radius_km: Combined hard-body radius in km.

    Returns:
        Probability in percent, capped at 100. Zero when the combined
        uncertainty is below :data:`MIN_COMBINED_SIGMA_KM`.
    """
    sigma = combined_sigma(sigma1_km, sigma2_km)
    if sigma < MIN_COMBINED_SIGMA_KM:
        logger.debug("Combined sigma %.2e km is degenerate, Pc=0", sigma)
        return 0.0

    r2 = hard_body_radius_km * hard_body_radius_km
    s2 = sigma * sigma
    d2 = miss_distance_km * miss_distance_km

    probability = (r2 / (2 * s2)) * math.exp(-d2 / (2 * s2))
    return min(probability * 100, 100.0)


def format_probability(probability_pct: float) -> str:
    """Render a percentage the way operator displays show it.

    >>> format_probability(1.234)
    '1.2%'
    >>> format_probability(0.0123)
    '0.01%'
    """
    if probability_pct >= 1:
        return f"{probability_pct:.1f}%"
    if probability_pct >= 0.01:
        return f"{probability_pct:.2f}%"
    if probability_pct >= 0.0001:
        return f"{probability_pct * 10000:.1f}×10⁻⁴"
    return "< 10⁻⁴"
