"""
Data classes for the UHECR propagation simulation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from . import particle_id
from .constants import c_squared


def _as_vector(value) -> np.ndarray:
    return np.array(value, dtype=float).reshape(3)


@dataclass
class ParticleState:
    """Identity and kinematics of a particle at one point of its history.

    Attributes
    ----------
    id : int
        PDG code (see :mod:`particle_id`).
    energy : float
        Total energy (J).
    position : np.ndarray
        Position (m), comoving.
    direction : np.ndarray
        Unit vector of the momentum direction.
    """

    id: int = 0
    energy: float = 0.0
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    direction: np.ndarray = field(default_factory=lambda: np.array([-1.0, 0.0, 0.0]))

    def __post_init__(self):
        self.position = _as_vector(self.position)
        self.set_direction(self.direction)

    def set_direction(self, direction) -> None:
        direction = _as_vector(direction)
        norm = np.linalg.norm(direction)
        if norm == 0.0:
            raise ValueError("Direction vector must be non-zero")
        self.direction = direction / norm

    @property
    def charge(self) -> float:
        return particle_id.charge(self.id)

    @property
    def mass(self) -> float:
        return particle_id.particle_mass(self.id)

    @property
    def mass_number(self) -> int:
        return particle_id.mass_number(self.id)

    @property
    def charge_number(self) -> int:
        return particle_id.charge_number(self.id)

    @property
    def lorentz_factor(self) -> float:
        """E / (m c^2); infinite for massless particles."""
        rest_energy = self.mass * c_squared
        if rest_energy == 0.0:
            return math.inf
        return self.energy / rest_energy

    @lorentz_factor.setter
    def lorentz_factor(self, gamma: float) -> None:
        self.energy = gamma * self.mass * c_squared

    def copy(self) -> "ParticleState":
        return ParticleState(
            id=self.id,
            energy=self.energy,
            position=self.position.copy(),
            direction=self.direction.copy(),
        )


@dataclass
class Candidate:
    """A particle being propagated, with its history snapshots and secondaries.

    ``current`` is mutated by the modules. ``previous`` is the state at the
    start of the last propagation step and ``created`` the state at the last
    point where the particle changed identity.
    """

    current: ParticleState = field(default_factory=ParticleState)
    previous: Optional[ParticleState] = None
    created: Optional[ParticleState] = None
    redshift: float = 0.0
    current_step: float = 0.0
    next_step: float = math.inf
    trajectory_length: float = 0.0
    weight: float = 1.0
    tag_origin: str = "PRIM"
    active: bool = True
    secondaries: List["Candidate"] = field(default_factory=list)

    def __post_init__(self):
        if self.previous is None:
            self.previous = self.current.copy()
        if self.created is None:
            self.created = self.current.copy()

    @classmethod
    def create(
        cls,
        pid: int,
        energy: float,
        position=(0.0, 0.0, 0.0),
        direction=(-1.0, 0.0, 0.0),
        redshift: float = 0.0,
        tag_origin: str = "PRIM",
    ) -> "Candidate":
        state = ParticleState(id=pid, energy=energy, position=position, direction=direction)
        return cls(current=state, redshift=redshift, tag_origin=tag_origin)

    def limit_next_step(self, step: float) -> None:
        self.next_step = min(self.next_step, step)

    def add_secondary(
        self,
        pid: int,
        energy: float,
        position: np.ndarray,
        weight: float = 1.0,
        tag: str = "SEC",
    ) -> "Candidate":
        """Append a new independent candidate created at ``position``.

        The secondary starts in the primary's current direction.
        """
        state = ParticleState(
            id=pid,
            energy=energy,
            position=position,
            direction=self.current.direction.copy(),
        )
        secondary = Candidate(
            current=state,
            redshift=self.redshift,
            trajectory_length=self.trajectory_length,
            weight=self.weight * weight,
            tag_origin=tag,
        )
        self.secondaries.append(secondary)
        return secondary

    def description(self) -> str:
        state = self.current
        return (
            f"{particle_id.describe(state.id)} E={state.energy:.6e} J "
            f"x={state.position.tolist()} u={state.direction.tolist()} "
            f"z={self.redshift} step={self.current_step}"
        )


@dataclass
class CandidateRecord:
    """Summary of a finished candidate history.

    Attributes
    ----------
    primary_index : int
        Index of the primary history this candidate belongs to.
    generation : int
        0 for the primary, n for an n-th generation secondary.
    initial_id, final_id : int
        PDG codes at creation and at the end.
    initial_energy, final_energy : float
        Energies (J).
    trajectory_length : float
        Total comoving distance travelled (m).
    final_position : np.ndarray
        Position at the end (m).
    tag_origin : str
        Interaction tag of the process that created the candidate.
    n_secondaries : int
        Number of direct secondaries produced along the history.
    n_steps : int
        Number of propagation steps taken.
    """

    primary_index: int
    generation: int
    initial_id: int
    final_id: int
    initial_energy: float
    final_energy: float
    trajectory_length: float
    final_position: np.ndarray
    tag_origin: str
    n_secondaries: int = 0
    n_steps: int = 0
