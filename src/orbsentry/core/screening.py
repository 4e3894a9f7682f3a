"""Real-time conjunction screening of close pairs at a single instant."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

import numpy as np
from scipy.spatial import cKDTree

from orbsentry.core.objects import TrackedObject
from orbsentry.core.propagation import Propagator, State, propagate, propagate_batch
from orbsentry.core.risk import CollisionRisk, build_risk, rank_risks
from orbsentry.utils.constants import DEFAULT_THRESHOLD_KM

logger = logging.getLogger(__name__)


@dataclass
class ScreeningDiagnostics:
    """Counters describing what a screening run skipped.

    Pass an instance through ``diagnostics=`` to have it filled in. The
    counters never change what a screening call returns.

    Attributes:
        pairs_considered: Pairs the run looked at.
        pairs_skipped_ceiling: Pairs dropped by the pair-count ceiling.
        pairs_without_data: Pairs with no usable sample on either side.
        propagation_failures: Propagation calls that produced no state.
        candidates: Pairs that passed the coarse stage of a forecast.
        phase_counts: Pairs that entered each refinement phase, by name.
    """

    pairs_considered: int = 0
    pairs_skipped_ceiling: int = 0
    pairs_without_data: int = 0
    propagation_failures: int = 0
    candidates: int = 0
    phase_counts: dict[str, int] = field(default_factory=dict)

    def merge(self, other: ScreeningDiagnostics) -> None:
        """Add another run's counters into this one."""
        self.pairs_considered += other.pairs_considered
        self.pairs_skipped_ceiling += other.pairs_skipped_ceiling
        self.pairs_without_data += other.pairs_without_data
        self.propagation_failures += other.propagation_failures
        self.candidates += other.candidates
        for name, count in other.phase_counts.items():
            self.phase_counts[name] = self.phase_counts.get(name, 0) + count


def screen_states(
    objects: Sequence[TrackedObject],
    states: Sequence[State | None],
    now: datetime,
    threshold_km: float = DEFAULT_THRESHOLD_KM,
    diagnostics: ScreeningDiagnostics | None = None,
) -> list[CollisionRisk]:
    """Find pairs closer than ``threshold_km`` among already-propagated states.

    Every record has ``tca == now`` and uses a zero propagation horizon for
    its uncertainty. Objects whose state is ``None`` are left out.

    Args:
        objects: Objects at a shared timestamp.
        states: One state per object (``None`` where unavailable).
        now: The shared timestamp of ``states``.
        threshold_km: Report pairs strictly closer than this (km).
        diagnostics: Optional counters to fill in.

    Returns:
        CollisionRisk records sorted by miss distance (no cap).
    """
    if len(objects) != len(states):
        raise ValueError("objects and states must have same length")

    n = len(objects)
    idx_map = [i for i, s in enumerate(states) if s is not None]
    if diagnostics is not None:
        diagnostics.pairs_considered += n * (n - 1) // 2
        diagnostics.pairs_without_data += n * (n - 1) // 2 - len(idx_map) * (len(idx_map) - 1) // 2

    if len(idx_map) < 2 or threshold_km <= 0:
        return []

    pos_valid = np.array([states[i].position_km for i in idx_map], dtype=np.float64)
    tree = cKDTree(pos_valid)
    close = tree.query_pairs(threshold_km, output_type="ndarray")

    risks: list[tuple[int, int, CollisionRisk]] = []
    for a, b in close:
        real_a, real_b = sorted((idx_map[a], idx_map[b]))
        sa, sb = states[real_a], states[real_b]
        distance = float(np.linalg.norm(sa.position_km - sb.position_km))
        if distance >= threshold_km:
            continue
        risk = build_risk(objects[real_a], objects[real_b], sa, sb, distance, now, now)
        risks.append((real_a, real_b, risk))

    # pair order first so equal distances come out deterministically
    risks.sort(key=lambda item: (item[0], item[1]))
    events = rank_risks(r for _, _, r in risks)
    logger.debug("screen_states: %d objects, %d pairs under %.1f km", n, len(events), threshold_km)
    return events


def screen_now(
    objects: Sequence[TrackedObject],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
    now: datetime | None = None,
    propagator: Propagator = propagate,
    diagnostics: ScreeningDiagnostics | None = None,
) -> list[CollisionRisk]:
    """Propagate every object to ``now`` and screen all pairs.

    Intended for a pre-filtered (e.g. visible) population; the pair check is
    quadratic in the worst case.

    Args:
        objects: Objects to screen.
        threshold_km: Report pairs strictly closer than this (km).
        now: Screening instant. Defaults to now (UTC).
        propagator: Propagation adapter. Defaults to SGP4.
        diagnostics: Optional counters to fill in.

    Returns:
        CollisionRisk records sorted by miss distance (no cap).
    """
    if now is None:
        now = datetime.now(timezone.utc)

    objects = list(objects)
    states = propagate_batch(objects, now, propagator)
    if diagnostics is not None:
        diagnostics.propagation_failures += sum(1 for s in states if s is None)
    return screen_states(objects, states, now, threshold_km, diagnostics)
