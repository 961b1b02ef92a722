"""
Field evaluators used by the interaction modules and the propagator.

The propagation core only queries fields as black boxes: a photon field
provides its name (which selects the interaction tables) and its redshift
and radial scaling, magnetic and advection fields return a vector at a
position. The simple implementations here cover uniform fields; any object
with the same methods can be used instead.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import numpy as np


class PhotonField:
    """Photon background described by name and scaling laws.

    Parameters
    ----------
    name : str
        Field name used in table file names, e.g. ``"CMB"`` or
        ``"IRB_Kneiske04"``.
    redshift_table : tuple of sequences, optional
        ``(z, scaling)`` pairs of the comoving photon density relative to
        z = 0. Linear interpolation, constant beyond the last point. Without a
        table the scaling is 1 (a field whose density evolves like the CMB).
    radial_profile : callable, optional
        ``f(r)`` intensity relative to the tabulated field at distance ``r``
        (m) from the origin. Defaults to 1 everywhere.
    """

    def __init__(
        self,
        name: str,
        redshift_table: Optional[tuple[Sequence[float], Sequence[float]]] = None,
        radial_profile: Optional[Callable[[float], float]] = None,
    ):
        self.name = name
        if redshift_table is not None:
            z_values, scaling = redshift_table
            self._z = np.asarray(z_values, dtype=float)
            self._scaling = np.asarray(scaling, dtype=float)
            if self._z.shape != self._scaling.shape or self._z.ndim != 1:
                raise ValueError("redshift_table must be two sequences of equal length")
        else:
            self._z = None
            self._scaling = None
        self._radial_profile = radial_profile

    @property
    def short_name(self) -> str:
        """First three characters, used by tables shared between field models."""
        return self.name[:3]

    def get_redshift_scaling(self, z: float) -> float:
        if self._z is None:
            return 1.0
        return float(np.interp(z, self._z, self._scaling))

    def get_radial_scaling(self, r: float) -> float:
        if self._radial_profile is None:
            return 1.0
        return float(self._radial_profile(r))

    def __repr__(self) -> str:
        return f"PhotonField({self.name!r})"


def CMB() -> PhotonField:
    """Cosmic microwave background."""
    return PhotonField("CMB")


class MagneticField:
    """Base class for magnetic field evaluators."""

    def get_field(self, position: np.ndarray, z: float = 0.0) -> np.ndarray:
        raise NotImplementedError


class UniformMagneticField(MagneticField):
    """Spatially constant magnetic field (tesla)."""

    def __init__(self, value):
        self.value = np.array(value, dtype=float).reshape(3)

    def get_field(self, position: np.ndarray, z: float = 0.0) -> np.ndarray:
        return self.value.copy()


class AdvectionField:
    """Base class for bulk advection (wind) velocity evaluators."""

    def get_field(self, position: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class UniformAdvectionField(AdvectionField):
    """Spatially constant advection velocity (m/s)."""

    def __init__(self, value):
        self.value = np.array(value, dtype=float).reshape(3)

    def get_field(self, position: np.ndarray) -> np.ndarray:
        return self.value.copy()
