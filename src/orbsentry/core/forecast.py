"""24-hour conjunction forecasting by progressively refined time search.

The search runs in stages:

1. Coarse scan of every pair (up to a hard ceiling) across the horizon.
2. A table of refinement phases, each re-centered on the best time found so
   far and entered only while the pair stays under the phase trigger.

Each phase can only tighten a pair's minimum: a new sample replaces the
current best when its ``(distance, time)`` compares lower, so equal
distances keep the earlier timestamp.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from itertools import combinations, islice
from typing import Sequence

import numpy as np

from orbsentry.core.objects import TrackedObject
from orbsentry.core.propagation import Propagator, State, propagate, safe_propagate
from orbsentry.core.risk import CollisionRisk, build_risk, rank_risks
from orbsentry.core.screening import ScreeningDiagnostics
from orbsentry.utils.constants import (
    CANDIDATE_THRESHOLD_KM,
    COARSE_SAMPLES,
    DEFAULT_THRESHOLD_KM,
    FINER_TRIGGER_KM,
    FINEST_TRIGGER_KM,
    FORECAST_HORIZON,
    MAX_FORECAST_RESULTS,
    MAX_PAIRS,
)

logger = logging.getLogger(__name__)

_PAIR_CHUNK = 4096


@dataclass(frozen=True)
class RefinementPhase:
    """One stage of the refinement table.

    Attributes:
        name: Label used in logs and diagnostics.
        half_window: Search extends this far either side of the current best.
        step: Sample spacing inside the window.
        trigger_km: The phase runs only if the current best is below this.
    """

    name: str
    half_window: timedelta
    step: timedelta
    trigger_km: float

    def offsets(self) -> list[timedelta]:
        n = int(self.half_window / self.step)
        return [k * self.step for k in range(-n, n + 1)]


REFINEMENT_PHASES: tuple[RefinementPhase, ...] = (
    RefinementPhase("fine", timedelta(minutes=30), timedelta(minutes=1), CANDIDATE_THRESHOLD_KM),
    RefinementPhase("finer", timedelta(minutes=5), timedelta(seconds=10), FINER_TRIGGER_KM),
    RefinementPhase("finest", timedelta(minutes=1), timedelta(seconds=1), FINEST_TRIGGER_KM),
)


@dataclass(frozen=True)
class CollisionCandidate:
    """Best approach found so far for one pair."""

    index_a: int
    index_b: int
    distance_km: float
    tca: datetime
    state_a: State
    state_b: State


def _select_pairs(n: int, max_pairs: int) -> tuple[list[tuple[int, int]], int]:
    """First ``max_pairs`` pairs in index order, and how many were left out."""
    total = n * (n - 1) // 2
    pairs = list(islice(combinations(range(n), 2), max_pairs))
    return pairs, total - len(pairs)


def _coarse_scan(
    objects: Sequence[TrackedObject],
    pairs: list[tuple[int, int]],
    times: list[datetime],
    propagator: Propagator,
    candidate_km: float,
    diag: ScreeningDiagnostics,
) -> list[CollisionCandidate]:
    """Sample every pair on the coarse grid and keep those under ``candidate_km``.

    Each object is propagated once per sample time and shared by all of its
    pairs.
    """
    involved = sorted({i for pair in pairs for i in pair})
    row_of = {i: row for row, i in enumerate(involved)}
    tracks: dict[int, list[State | None]] = {}
    positions = np.full((len(involved), len(times), 3), np.nan, dtype=np.float64)

    for i in involved:
        track = [safe_propagate(propagator, objects[i], t) for t in times]
        tracks[i] = track
        for k, state in enumerate(track):
            if state is None:
                diag.propagation_failures += 1
            else:
                positions[row_of[i], k, :] = state.position_km

    logger.debug("Coarse scan: %d objects x %d samples", len(involved), len(times))

    candidates: list[CollisionCandidate] = []
    for start in range(0, len(pairs), _PAIR_CHUNK):
        chunk = pairs[start:start + _PAIR_CHUNK]
        ia = np.array([row_of[p[0]] for p in chunk], dtype=np.intp)
        ib = np.array([row_of[p[1]] for p in chunk], dtype=np.intp)

        dist = np.linalg.norm(positions[ia] - positions[ib], axis=2)
        dist = np.where(np.isnan(dist), np.inf, dist)
        # argmin returns the first occurrence, i.e. the earliest sample on ties
        best_k = np.argmin(dist, axis=1)
        best_d = dist[np.arange(len(chunk)), best_k]

        diag.pairs_without_data += int(np.count_nonzero(np.isinf(best_d)))

        for row in np.nonzero(best_d < candidate_km)[0]:
            a, b = chunk[row]
            k = int(best_k[row])
            candidates.append(CollisionCandidate(
                index_a=a,
                index_b=b,
                distance_km=float(best_d[row]),
                tca=times[k],
                state_a=tracks[a][k],
                state_b=tracks[b][k],
            ))

    return candidates


def _refine(
    candidate: CollisionCandidate,
    obj_a: TrackedObject,
    obj_b: TrackedObject,
    phases: Sequence[RefinementPhase],
    propagator: Propagator,
) -> tuple[CollisionCandidate, ScreeningDiagnostics]:
    """Run the refinement table on one candidate.

    Returns the tightened candidate and the counters for this pair alone, so
    callers can run pairs concurrently and merge afterwards.
    """
    best = candidate
    local = ScreeningDiagnostics()

    for phase in phases:
        if not best.distance_km < phase.trigger_km:
            break
        local.phase_counts[phase.name] = local.phase_counts.get(phase.name, 0) + 1
        center = best.tca

        for offset in phase.offsets():
            t = center + offset
            sa = safe_propagate(propagator, obj_a, t)
            sb = safe_propagate(propagator, obj_b, t)
            if sa is None or sb is None:
                local.propagation_failures += (sa is None) + (sb is None)
                continue
            distance = float(np.linalg.norm(sa.position_km - sb.position_km))
            if (distance, t) < (best.distance_km, best.tca):
                best = replace(best, distance_km=distance, tca=t, state_a=sa, state_b=sb)

        logger.debug("Phase %s for %s/%s: %.4f km at %s",
                     phase.name, obj_a.object_id, obj_b.object_id, best.distance_km, best.tca)

    return best, local


def forecast_conjunctions(
    objects: Sequence[TrackedObject],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
    now: datetime | None = None,
    propagator: Propagator = propagate,
    horizon: timedelta = FORECAST_HORIZON,
    coarse_samples: int = COARSE_SAMPLES,
    phases: Sequence[RefinementPhase] = REFINEMENT_PHASES,
    max_pairs: int = MAX_PAIRS,
    max_results: int = MAX_FORECAST_RESULTS,
    max_workers: int | None = None,
    diagnostics: ScreeningDiagnostics | None = None,
) -> list[CollisionRisk]:
    """Forecast close approaches over the next ``horizon``.

    Uses a multi-resolution search:
    1. Coarse scan at ``horizon / coarse_samples`` spacing for up to
       ``max_pairs`` pairs in index order (the rest are skipped and counted)
    2. Refinement phases from ``phases``, each only for pairs still under its
       trigger distance
    3. Pairs whose final minimum is not below ``threshold_km`` are dropped

    Args:
        objects: Objects to screen.
        threshold_km: Report pairs whose final minimum is strictly below this (km).
        now: Start of the horizon. Defaults to now (UTC).
        propagator: Propagation adapter. Defaults to SGP4.
        horizon: Forward window to search.
        coarse_samples: Number of coarse samples across the horizon.
        phases: Refinement table. The first trigger is the coarse candidate
            threshold.
        max_pairs: Hard ceiling on pairs examined.
        max_results: Maximum number of records returned.
        max_workers: If set, refine candidates on a thread pool of this size.
        diagnostics: Optional counters to fill in.

    Returns:
        CollisionRisk records sorted by miss distance, at most ``max_results``.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    diag = ScreeningDiagnostics()
    objects = list(objects)

    pairs, skipped = _select_pairs(len(objects), max_pairs)
    diag.pairs_considered += len(pairs)
    diag.pairs_skipped_ceiling += skipped
    if skipped:
        logger.warning("forecast: pair ceiling %d reached, skipping %d pairs", max_pairs, skipped)

    if not pairs:
        if diagnostics is not None:
            diagnostics.merge(diag)
        return []

    logger.info("forecast: %d objects, %d pairs, %s horizon, %.1f km threshold",
                len(objects), len(pairs), horizon, threshold_km)

    step = horizon / coarse_samples
    times = [now + k * step for k in range(coarse_samples)]
    candidate_km = phases[0].trigger_km if phases else threshold_km
    candidates = _coarse_scan(objects, pairs, times, propagator, candidate_km, diag)
    diag.candidates += len(candidates)
    logger.debug("forecast: %d candidates under %.1f km after coarse scan", len(candidates), candidate_km)

    def refine(candidate: CollisionCandidate):
        return _refine(candidate, objects[candidate.index_a], objects[candidate.index_b], phases, propagator)

    if max_workers and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            refined = list(pool.map(refine, candidates))
    else:
        refined = [refine(c) for c in candidates]

    risks: list[CollisionRisk] = []
    for best, local in refined:
        diag.merge(local)
        if best.distance_km < threshold_km:
            risks.append(build_risk(
                objects[best.index_a],
                objects[best.index_b],
                best.state_a,
                best.state_b,
                best.distance_km,
                best.tca,
                now,
                predicted=True,
            ))

    events = rank_risks(risks, max_results)
    logger.info("forecast: %d pairs under %.1f km, returning %d", len(risks), threshold_km, len(events))

    if diagnostics is not None:
        diagnostics.merge(diag)
    return events
