"""
Propagation of charged particles in magnetic fields with the Boris push.

The step size is adapted by step doubling: a full step is compared with two
half steps and the step is shrunk until the relative position error is
below the tolerance, or grown for the next step when it is well below.
Neutral particles move on straight lines.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import numpy as np

from .. import config
from .constants import c_light, c_squared, kpc, Mpc
from .data_classes import Candidate
from .fields import AdvectionField, MagneticField

logger = logging.getLogger(__name__)

# Step size control
SAFETY_FACTOR = 0.95
STEP_EXPONENT = -0.2
MAX_SHRINK = 0.1
MAX_GROWTH = 5.0


def _clip(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


class BorisPropagator:
    """Boris push propagation with optional adaptive step size.

    Parameters
    ----------
    field : MagneticField
        Magnetic field (T) evaluated at position and redshift.
    advection_field : AdvectionField, optional
        Bulk velocity (m/s) added to the direction of motion.
    tolerance : float
        Target relative position error of one step, in [0, 1].
    min_step, max_step : float
        Step size bounds (m). Equal bounds give fixed steps without error
        estimation.
    shock_radius : float
        Inside this radius the field falls off as ``shock_radius / R``,
        weakened by the shock compression ratio.

    Raises
    ------
    ValueError
        For a tolerance outside [0, 1] or step bounds with
        ``not 0 <= min_step <= max_step``.
    """

    def __init__(
        self,
        field: Optional[MagneticField],
        advection_field: Optional[AdvectionField] = None,
        tolerance: float = config.DEFAULT_TOLERANCE,
        min_step: float = config.DEFAULT_MIN_STEP_KPC * kpc,
        max_step: float = config.DEFAULT_MAX_STEP_MPC * Mpc,
        shock_radius: float = 0.0,
    ):
        self.field = field
        self.advection_field = advection_field
        self.set_tolerance(tolerance)
        self.set_step_bounds(min_step, max_step)
        self.shock_radius = shock_radius

    @classmethod
    def fixed(
        cls,
        field: Optional[MagneticField],
        step: float,
        advection_field: Optional[AdvectionField] = None,
        shock_radius: float = 0.0,
    ) -> "BorisPropagator":
        """Propagator taking steps of exactly ``step``."""
        return cls(field, advection_field, config.DEFAULT_TOLERANCE, step, step, shock_radius)

    @classmethod
    def adaptive(
        cls,
        field: Optional[MagneticField],
        tolerance: float = config.DEFAULT_TOLERANCE,
        min_step: float = config.DEFAULT_MIN_STEP_KPC * kpc,
        max_step: float = config.DEFAULT_MAX_STEP_MPC * Mpc,
        advection_field: Optional[AdvectionField] = None,
        shock_radius: float = 0.0,
    ) -> "BorisPropagator":
        return cls(field, advection_field, tolerance, min_step, max_step, shock_radius)

    def set_tolerance(self, tolerance: float) -> None:
        if tolerance < 0.0 or tolerance > 1.0:
            raise ValueError(f"Tolerance must be in [0, 1], got {tolerance}")
        self.tolerance = tolerance

    def set_step_bounds(self, min_step: float, max_step: float) -> None:
        if min_step < 0.0:
            raise ValueError(f"Minimum step must not be negative, got {min_step}")
        if min_step > max_step:
            raise ValueError(f"Minimum step {min_step} exceeds maximum step {max_step}")
        self.min_step = min_step
        self.max_step = max_step

    @property
    def description(self) -> str:
        return (
            "Propagation in magnetic fields using the adaptive Boris push method. "
            f"Target error: {self.tolerance}, "
            f"Minimum Step: {self.min_step / kpc} kpc, "
            f"Maximum Step: {self.max_step / kpc} kpc"
        )

    # =========================================================================
    # Field access
    # =========================================================================

    def field_at(self, position: np.ndarray, z: float) -> np.ndarray:
        """Magnetic field (T) at ``position``; zero if the evaluation fails."""
        if self.field is None:
            return np.zeros(3)
        try:
            b_field = np.asarray(self.field.get_field(position, z), dtype=float)
        except (ValueError, ArithmeticError, LookupError) as e:
            logger.error("Magnetic field evaluation failed at %s: %s", np.asarray(position).tolist(), e)
            return np.zeros(3)

        r = float(np.linalg.norm(position))
        if 0.0 < r < self.shock_radius:
            b_field = b_field * (self.shock_radius / r) / math.sqrt(config.SHOCK_COMPRESSION)
        return b_field

    def advection_at(self, position: np.ndarray) -> np.ndarray:
        """Advection velocity (m/s) at ``position``; zero if the evaluation fails."""
        if self.advection_field is None:
            return np.zeros(3)
        try:
            return np.asarray(self.advection_field.get_field(position), dtype=float)
        except (ValueError, ArithmeticError, LookupError) as e:
            logger.error("Advection field evaluation failed at %s: %s", np.asarray(position).tolist(), e)
            return np.zeros(3)

    # =========================================================================
    # Integration
    # =========================================================================

    def boris_step(
        self,
        position: np.ndarray,
        direction: np.ndarray,
        step: float,
        z: float,
        q: float,
        m: float,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """One Boris push of length ``step`` (charge ``q`` in C, mass ``m`` in kg).

        The position moves in two half steps around the velocity rotation,
        each along the direction combined with the advection velocity.
        """
        wind = self.advection_at(position) / c_light

        total = direction + wind
        position = position + total / np.linalg.norm(total) * step / 2.0

        t = self.field_at(position, z) * q / (2.0 * m) * step / c_light
        s = 2.0 * t / (1.0 + np.dot(t, t))
        v_help = direction + np.cross(direction, t)
        direction = direction + np.cross(v_help, s)

        total = direction + wind
        position = position + total / np.linalg.norm(total) * step / 2.0
        return position, direction

    @staticmethod
    def error_estimate(x1: np.ndarray, x2: np.ndarray, step: float) -> float:
        """Relative error of one full step ``x1`` against two half steps ``x2``."""
        if step <= 0.0:
            return 0.0
        return float(np.linalg.norm(x1 - x2)) / (step * (1.0 - 1.0 / 4.0))

    def try_step(self, position, direction, step, z, q, m) -> Tuple[np.ndarray, np.ndarray, float]:
        """Full step plus error estimate from two half steps."""
        x_out, u_out = self.boris_step(position, direction, step, z, q, m)
        x_half, u_half = self.boris_step(position, direction, step / 2.0, z, q, m)
        x_compare, _ = self.boris_step(x_half, u_half, step / 2.0, z, q, m)
        return x_out, u_out, self.error_estimate(x_out, x_compare, step)

    def _proposal(self, step: float, ratio: float) -> float:
        if ratio == 0.0:
            return MAX_GROWTH * step
        return step * SAFETY_FACTOR * ratio ** STEP_EXPONENT

    def process(self, candidate: Candidate, random=None) -> None:
        """Move ``candidate`` by one step and propose the next step size."""
        current = candidate.current
        candidate.previous = current.copy()

        position = current.position
        direction = current.direction
        q = current.charge

        if q == 0.0:
            step = _clip(candidate.next_step, self.min_step, self.max_step)
            current.position = position + direction * step
            candidate.current_step = step
            candidate.next_step = self.max_step
            return

        z = candidate.redshift
        m = current.energy / c_squared

        if self.min_step == self.max_step:
            step = self.max_step
            next_step = step
            x_out, u_out = self.boris_step(position, direction, step, z, q, m)
        else:
            step = _clip(candidate.next_step, self.min_step, self.max_step)
            next_step = step
            while True:
                x_out, u_out, error = self.try_step(position, direction, step, z, q, m)
                ratio = error / self.tolerance if self.tolerance > 0.0 else math.inf
                if ratio > 1.0:
                    if step == self.min_step:
                        break
                    next_step = self._proposal(step, ratio)
                    next_step = max(next_step, MAX_SHRINK * step)
                    next_step = max(next_step, self.min_step)
                    step = next_step
                else:
                    if step != self.max_step:
                        next_step = self._proposal(step, ratio)
                        next_step = min(next_step, MAX_GROWTH * step)
                        next_step = min(next_step, self.max_step)
                    break

        current.position = x_out
        current.set_direction(u_out)
        candidate.current_step = step
        candidate.next_step = next_step
