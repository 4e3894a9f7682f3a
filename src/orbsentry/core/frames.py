"""Local orbital frame helpers."""
from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def ric_basis(
    position_km: NDArray[np.float64],
    velocity_km_s: NDArray[np.float64],
) -> NDArray[np.float64] | None:
    """Radial / in-track / cross-track unit vectors as rows of a 3x3 matrix.

    Args:
        position_km: Reference position (km).
        velocity_km_s: Reference velocity (km/s).

    Returns:
        Matrix whose rows are ``[e_r, e_i, e_c]`` in the inertial frame, or
        ``None`` when the position is at the origin or the orbit normal is
        undefined (position parallel to velocity).
    """
    r_mag = np.linalg.norm(position_km)
    if r_mag < 1e-10:
        return None

    e_r = position_km / r_mag
    h = np.cross(position_km, velocity_km_s)
    h_mag = np.linalg.norm(h)
    if h_mag < 1e-10:
        return None

    e_c = h / h_mag
    e_i = np.cross(e_c, e_r)
    return np.vstack([e_r, e_i, e_c])


def ric_components(
    position_primary_km: NDArray[np.float64],
    velocity_primary_km_s: NDArray[np.float64],
    position_secondary_km: NDArray[np.float64],
) -> tuple[float, float, float] | None:
    """Decompose the miss vector (secondary minus primary) in the primary's RIC frame.

    Returns:
        ``(radial_km, in_track_km, cross_track_km)`` or ``None`` if the
        primary's frame is degenerate.
    """
    basis = ric_basis(
        np.asarray(position_primary_km, dtype=np.float64),
        np.asarray(velocity_primary_km_s, dtype=np.float64),
    )
    if basis is None:
        return None
    miss = np.asarray(position_secondary_km, dtype=np.float64) - np.asarray(position_primary_km, dtype=np.float64)
    radial, in_track, cross_track = basis @ miss
    return float(radial), float(in_track), float(cross_track)
