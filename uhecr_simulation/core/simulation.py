"""
High-level simulation driver functions.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from .. import config
from .constants import EeV, Mpc
from .data_classes import Candidate, CandidateRecord
from .random_source import RandomSource

logger = logging.getLogger(__name__)


def propagate_candidate(
    candidate: Candidate,
    modules: Sequence,
    random: RandomSource,
    max_distance: float = config.DEFAULT_MAX_DISTANCE_MPC * Mpc,
    min_energy: float = config.DEFAULT_MIN_ENERGY_EEV * EeV,
    max_steps: int = config.DEFAULT_MAX_STEPS,
) -> int:
    """Apply the module chain to ``candidate`` until it is deactivated.

    Each step runs every module once (propagator first, then the
    interactions) and adds the step to the trajectory length. The candidate
    is deactivated when it has travelled ``max_distance``, its energy
    drops below ``min_energy``, or after ``max_steps`` steps.

    Returns
    -------
    int
        Number of steps taken.
    """
    if candidate.current.energy < min_energy:
        candidate.active = False
        return 0

    n_steps = 0
    while candidate.active:
        for module in modules:
            module.process(candidate, random)
        candidate.trajectory_length += candidate.current_step
        n_steps += 1

        remaining = max_distance - candidate.trajectory_length
        if remaining <= 0.0:
            candidate.active = False
        else:
            candidate.limit_next_step(remaining)

        if candidate.current.energy < min_energy:
            candidate.active = False
        if candidate.active and n_steps >= max_steps:
            logger.warning("Step budget of %d exhausted for %s", max_steps, candidate.description())
            candidate.active = False
    return n_steps


def simulate_candidate_history(
    primary: Candidate,
    modules: Sequence,
    random: RandomSource,
    primary_index: int = 0,
    max_distance: float = config.DEFAULT_MAX_DISTANCE_MPC * Mpc,
    min_energy: float = config.DEFAULT_MIN_ENERGY_EEV * EeV,
    max_steps: int = config.DEFAULT_MAX_STEPS,
    follow_secondaries: bool = True,
) -> List[CandidateRecord]:
    """Propagate a primary and, depth first, all of its secondaries.

    Returns
    -------
    list of CandidateRecord
        One record per propagated candidate, the primary first.
    """
    records: List[CandidateRecord] = []
    work: List[Tuple[Candidate, int]] = [(primary, 0)]

    while work:
        candidate, generation = work.pop()
        initial = candidate.current.copy()
        n_steps = propagate_candidate(candidate, modules, random, max_distance, min_energy, max_steps)

        records.append(CandidateRecord(
            primary_index=primary_index,
            generation=generation,
            initial_id=initial.id,
            final_id=candidate.current.id,
            initial_energy=initial.energy,
            final_energy=candidate.current.energy,
            trajectory_length=candidate.trajectory_length,
            final_position=candidate.current.position.copy(),
            tag_origin=candidate.tag_origin,
            n_secondaries=len(candidate.secondaries),
            n_steps=n_steps,
        ))

        if follow_secondaries:
            # reversed so that the first secondary is processed next
            work.extend((secondary, generation + 1) for secondary in reversed(candidate.secondaries))
        candidate.secondaries = []

    return records


def run_simulation(
    n_candidates: int,
    source_id: int,
    source_energy: float,
    modules: Sequence,
    max_distance: float = config.DEFAULT_MAX_DISTANCE_MPC * Mpc,
    min_energy: float = config.DEFAULT_MIN_ENERGY_EEV * EeV,
    source_position: Optional[np.ndarray] = None,
    source_direction: Optional[np.ndarray] = None,
    redshift: float = 0.0,
    seed: Optional[int] = config.DEFAULT_SEED,
    n_workers: int = 1,
    max_steps: int = config.DEFAULT_MAX_STEPS,
    follow_secondaries: bool = True,
    show_progress: bool = True,
) -> List[CandidateRecord]:
    """Simulate ``n_candidates`` primaries and return the records of all candidates.

    Every primary gets its own random stream spawned from ``seed``, so the
    result does not depend on ``n_workers``. Records are ordered by primary.

    Parameters
    ----------
    n_candidates : int
        Number of primaries.
    source_id : int
        Particle id of the primaries.
    source_energy : float
        Primary energy (J).
    modules : sequence
        Module chain; every element provides ``process(candidate, random)``.
    n_workers : int
        Threads used to simulate primaries concurrently.

    Returns
    -------
    list of CandidateRecord
    """
    position = np.zeros(3) if source_position is None else np.asarray(source_position, dtype=float)
    direction = np.array([1.0, 0.0, 0.0]) if source_direction is None else np.asarray(source_direction, dtype=float)
    streams = RandomSource(seed).spawn(n_candidates)

    def simulate(index: int) -> List[CandidateRecord]:
        primary = Candidate.create(source_id, source_energy, position, direction, redshift)
        return simulate_candidate_history(
            primary, modules, streams[index], index,
            max_distance=max_distance,
            min_energy=min_energy,
            max_steps=max_steps,
            follow_secondaries=follow_secondaries,
        )

    indices = range(n_candidates)
    if n_workers > 1:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            results = list(tqdm(executor.map(simulate, indices), total=n_candidates,
                                desc="Simulating Candidates", disable=not show_progress))
    else:
        results = [simulate(i) for i in tqdm(indices, desc="Simulating Candidates", disable=not show_progress)]

    records = [record for history in results for record in history]
    logger.info("Simulated %d primaries, %d candidates in total", n_candidates, len(records))
    return records
