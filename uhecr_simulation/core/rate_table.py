"""
Tabulated interaction data and interpolation.

Most tables are indexed by the isotope (Z, N) and sampled on a fixed,
equidistant grid of log10(Lorentz factor). Rates are stored as inverse
lengths per comoving distance (1/m); the tables are redshift agnostic and
callers apply the cosmological and spatial scaling.

All tables are filled once by the loaders at the bottom of this module and
are read-only afterwards.
"""

from __future__ import annotations

import logging
import math
import os
import warnings
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .. import config
from .constants import Mpc, eV
from .exceptions import TableFormatError, TableLoadError

logger = logging.getLogger(__name__)

LG_MIN = config.LG_MIN
LG_MAX = config.LG_MAX
N_LG = config.N_LG
LG_GRID = np.linspace(LG_MIN, LG_MAX, N_LG)


def interpolate_equidistant(x: float, lo: float, hi: float, values: np.ndarray) -> float:
    """Linear interpolation of ``values`` tabulated equidistantly on [lo, hi].

    Values outside the range are clamped to the first / last entry.
    """
    n = len(values)
    if x <= lo:
        return float(values[0])
    if x >= hi:
        return float(values[-1])
    p = (x - lo) / (hi - lo) * (n - 1)
    i = int(p)
    if i >= n - 1:
        return float(values[-1])
    return float(values[i] + (p - i) * (values[i + 1] - values[i]))


def round_half_up(x: float) -> int:
    """Nearest integer, exact halves rounded up (``round`` would pick the even one)."""
    return int(math.floor(x + 0.5))


def grid_index(lg: float) -> int:
    """Index of the grid point closest to ``lg`` (clipped to the grid)."""
    index = round_half_up((lg - LG_MIN) / (LG_MAX - LG_MIN) * (N_LG - 1))
    return min(max(index, 0), N_LG - 1)


def in_table_bounds(z: int, n: int) -> bool:
    return 0 <= z <= config.MAX_Z and 0 <= n <= config.MAX_N


@dataclass
class Branch:
    """Reaction channel with its branching ratio curve on the lg grid."""

    channel: int
    branching_ratio: np.ndarray


@dataclass
class PhotonEmission:
    """De-excitation photon line (energy in J) with emission probability curve."""

    energy: float
    emission_probability: np.ndarray


@dataclass
class DecayMode:
    """Decay channel of an unstable isotope with its rest frame lifetime (s)."""

    channel: int
    lifetime: float


class RateTable:
    """Interaction rates keyed by isotope (Z, N).

    Isotopes outside ``Z <= MAX_Z, N <= MAX_N`` or without an entry have no
    interaction: :meth:`rate` returns 0 and :meth:`mean_free_path` infinity.
    """

    def __init__(self):
        self._rates: Dict[Tuple[int, int], np.ndarray] = {}

    def set_rates(self, z: int, n: int, rates) -> None:
        if not in_table_bounds(z, n):
            raise ValueError(f"Isotope (Z={z}, N={n}) outside table coverage")
        rates = np.asarray(rates, dtype=float)
        if rates.shape != (N_LG,):
            raise ValueError(f"Expected {N_LG} rate values, got {rates.shape}")
        self._rates[(z, n)] = rates

    def get(self, z: int, n: int) -> Optional[np.ndarray]:
        if not in_table_bounds(z, n):
            return None
        return self._rates.get((z, n))

    def has(self, z: int, n: int) -> bool:
        return self.get(z, n) is not None

    def rate(self, z: int, n: int, lg: float) -> float:
        """Interaction rate (1/m) at log10(Lorentz factor) ``lg``."""
        rates = self.get(z, n)
        if rates is None:
            return 0.0
        if lg < LG_MIN or lg > LG_MAX:
            return 0.0
        return interpolate_equidistant(lg, LG_MIN, LG_MAX, rates)

    def mean_free_path(self, z: int, n: int, lg: float) -> float:
        rate = self.rate(z, n, lg)
        if rate <= 0.0:
            return math.inf
        return 1.0 / rate

    def isotopes(self) -> List[Tuple[int, int]]:
        return sorted(self._rates)

    def __len__(self) -> int:
        return len(self._rates)


class BranchTable:
    """Reaction channels keyed by isotope (Z, N)."""

    def __init__(self):
        self._branches: Dict[Tuple[int, int], List[Branch]] = {}

    def add(self, z: int, n: int, branch: Branch) -> None:
        if not in_table_bounds(z, n):
            raise ValueError(f"Isotope (Z={z}, N={n}) outside table coverage")
        if np.shape(branch.branching_ratio) != (N_LG,):
            raise ValueError(f"Expected {N_LG} branching ratios for channel {branch.channel}")
        self._branches.setdefault((z, n), []).append(branch)

    def branches(self, z: int, n: int) -> List[Branch]:
        if not in_table_bounds(z, n):
            return []
        return self._branches.get((z, n), [])

    def __len__(self) -> int:
        return len(self._branches)


class PhotonEmissionTable:
    """De-excitation photon lines keyed by (Z, N, Z_daughter, N_daughter)."""

    def __init__(self):
        self._emissions: Dict[Tuple[int, int, int, int], List[PhotonEmission]] = {}

    def add(self, z: int, n: int, z_daughter: int, n_daughter: int, emission: PhotonEmission) -> None:
        self._emissions.setdefault((z, n, z_daughter, n_daughter), []).append(emission)

    def emissions(self, z: int, n: int, z_daughter: int, n_daughter: int) -> List[PhotonEmission]:
        return self._emissions.get((z, n, z_daughter, n_daughter), [])

    def __len__(self) -> int:
        return len(self._emissions)


class DecayTable:
    """Decay modes keyed by isotope (Z, N). Not limited to the (26, 30) grid."""

    def __init__(self):
        self._modes: Dict[Tuple[int, int], List[DecayMode]] = {}

    def add(self, z: int, n: int, mode: DecayMode) -> None:
        if mode.lifetime <= 0.0:
            raise ValueError(f"Non-positive lifetime for (Z={z}, N={n}) channel {mode.channel}")
        self._modes.setdefault((z, n), []).append(mode)

    def modes(self, z: int, n: int) -> List[DecayMode]:
        return self._modes.get((z, n), [])

    def __len__(self) -> int:
        return len(self._modes)


class LorentzFactorTable:
    """Rate (1/m) tabulated against log10(Lorentz factor), not necessarily equidistant.

    Below the first point the rate is zero. Above the last point the rate is
    either zero or extrapolated with the power law ``gamma**extrapolation_index``.
    """

    def __init__(self, log_lorentz_factors, rates, extrapolation_index: Optional[float] = None):
        self.log_lorentz_factors = np.asarray(log_lorentz_factors, dtype=float)
        self.rates = np.asarray(rates, dtype=float)
        if self.log_lorentz_factors.shape != self.rates.shape or self.rates.ndim != 1:
            raise ValueError("Lorentz factor and rate columns must have equal length")
        if len(self.rates) < 2:
            raise ValueError("At least two tabulation points are required")
        if np.any(np.diff(self.log_lorentz_factors) <= 0):
            raise ValueError("Lorentz factor column must be strictly increasing")
        self.lorentz_factors = 10.0 ** self.log_lorentz_factors
        self.extrapolation_index = extrapolation_index

    def rate(self, lorentz_factor: float) -> float:
        if lorentz_factor < self.lorentz_factors[0]:
            return 0.0
        if lorentz_factor < self.lorentz_factors[-1]:
            return float(np.interp(lorentz_factor, self.lorentz_factors, self.rates))
        if self.extrapolation_index is None:
            return 0.0
        return float(self.rates[-1] * (lorentz_factor / self.lorentz_factors[-1]) ** self.extrapolation_index)


class PairSpectrum:
    """Cumulative electron energy distribution of pair production.

    Row ``i`` belongs to log10(gamma) = 6.05 + 0.1 i, column ``j`` to
    log10(Ee / eV) between 6.95 + 0.1 j and 7.05 + 0.1 j.
    """

    def __init__(self, cdf: np.ndarray):
        self.cdf = np.asarray(cdf, dtype=float)
        if self.cdf.ndim != 2:
            raise ValueError("Pair spectrum must be two-dimensional")

    def row_index(self, lorentz_factor: float) -> int:
        i = round_half_up((math.log10(lorentz_factor) - 6.05) * 10)
        return min(max(i, 0), self.cdf.shape[0] - 1)

    def sample_electron_energy(self, lorentz_factor: float, random) -> float:
        """Draw one electron (or positron) energy in J."""
        row = self.cdf[self.row_index(lorentz_factor)]
        if row[-1] <= 0.0:
            return 0.0
        j = random.rand_bin(row)
        return 10.0 ** (6.95 + (j + random.rand()) * 0.1) * eV


class EmissionSpectrum:
    """Discrete rest frame photon energy distribution (energies in J)."""

    def __init__(self, energies, weights):
        self.energies = np.asarray(energies, dtype=float)
        weights = np.asarray(weights, dtype=float)
        if self.energies.shape != weights.shape or self.energies.ndim != 1 or len(weights) == 0:
            raise ValueError("Emission spectrum needs matching, non-empty energy and weight columns")
        if np.any(weights < 0) or weights.sum() <= 0:
            raise ValueError("Emission spectrum weights must be non-negative with a positive sum")
        self.cdf = np.cumsum(weights)

    def sample(self, random) -> float:
        return float(self.energies[random.rand_bin(self.cdf)])


# =============================================================================
# Loaders
# =============================================================================

def _load_columns(filename: str, n_columns: Optional[int] = None) -> np.ndarray:
    """Read a whitespace separated table, skipping ``#`` comments.

    Raises
    ------
    TableLoadError
        If the file does not exist.
    TableFormatError
        If the content is not a rectangular block of numbers.
    """
    if not os.path.isfile(filename):
        raise TableLoadError(f"Interaction table '{filename}' could not be opened.")

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            data = np.loadtxt(filename, comments='#', dtype=float, ndmin=2)
    except ValueError as e:
        raise TableFormatError(str(filename), None, f"could not parse table: {e}") from e

    if data.size == 0:
        return np.empty((0, n_columns or 0))
    if n_columns is not None and data.shape[1] != n_columns:
        raise TableFormatError(
            str(filename), None,
            f"expected {n_columns} columns per line, found {data.shape[1]}",
        )
    return data


def _isotope(row: np.ndarray, filename: str, line: int, offset: int = 0) -> Tuple[int, int]:
    z, n = int(round(row[offset])), int(round(row[offset + 1]))
    if not in_table_bounds(z, n):
        raise TableFormatError(str(filename), line, f"isotope (Z={z}, N={n}) outside table coverage")
    return z, n


def _rows(data: np.ndarray) -> Iterator[Tuple[int, np.ndarray]]:
    for index, row in enumerate(data, start=1):
        yield index, row


def load_rate_table(filename: str) -> RateTable:
    """Load ``Z N r_0 ... r_250`` lines; rates are given in 1/Mpc."""
    data = _load_columns(filename, 2 + N_LG)
    table = RateTable()
    for line, row in _rows(data):
        z, n = _isotope(row, filename, line)
        table.set_rates(z, n, row[2:] / Mpc)
    logger.info("Loaded rates for %d isotopes from %s", len(table), os.path.basename(filename))
    return table


def load_branch_table(filename: str) -> BranchTable:
    """Load ``Z N channel br_0 ... br_250`` lines."""
    data = _load_columns(filename, 3 + N_LG)
    table = BranchTable()
    for line, row in _rows(data):
        z, n = _isotope(row, filename, line)
        table.add(z, n, Branch(channel=int(round(row[2])), branching_ratio=row[3:].copy()))
    logger.info("Loaded branching ratios for %d isotopes from %s", len(table), os.path.basename(filename))
    return table


def load_photon_emission_table(filename: str) -> PhotonEmissionTable:
    """Load ``Z N Zd Nd E_eV p_0 ... p_250`` lines."""
    data = _load_columns(filename, 5 + N_LG)
    table = PhotonEmissionTable()
    for line, row in _rows(data):
        z, n, zd, nd = (int(round(v)) for v in row[:4])
        if min(z, n, zd, nd) < 0:
            raise TableFormatError(str(filename), line, "negative nucleon number")
        table.add(z, n, zd, nd, PhotonEmission(energy=row[4] * eV, emission_probability=row[5:].copy()))
    logger.info("Loaded photon lines for %d transitions from %s", len(table), os.path.basename(filename))
    return table


def load_decay_table(filename: str) -> DecayTable:
    """Load ``Z N channel lifetime_s`` lines."""
    data = _load_columns(filename, 4)
    table = DecayTable()
    for line, row in _rows(data):
        z, n = int(round(row[0])), int(round(row[1]))
        if z < 0 or n < 0:
            raise TableFormatError(str(filename), line, "negative nucleon number")
        try:
            table.add(z, n, DecayMode(channel=int(round(row[2])), lifetime=float(row[3])))
        except ValueError as e:
            raise TableFormatError(str(filename), line, str(e)) from e
    logger.info("Loaded decay modes for %d isotopes from %s", len(table), os.path.basename(filename))
    return table


def load_lorentz_factor_table(
    filename: str,
    columns: int = 2,
    column: int = 1,
    extrapolation_index: Optional[float] = None,
) -> LorentzFactorTable:
    """Load ``log10(gamma) rate ...`` lines; rates are given in 1/Mpc."""
    data = _load_columns(filename, columns)
    if len(data) < 2:
        raise TableFormatError(str(filename), None, "at least two tabulation points are required")
    try:
        return LorentzFactorTable(data[:, 0], data[:, column] / Mpc, extrapolation_index)
    except ValueError as e:
        raise TableFormatError(str(filename), None, str(e)) from e


def load_pair_spectrum(filename: str) -> PairSpectrum:
    """Load the 70 x 170 dN/dEe table and turn it into cumulative rows."""
    data = _load_columns(filename)
    values = data.ravel()
    rows, columns = config.PAIR_SPECTRUM_ROWS, config.PAIR_SPECTRUM_COLUMNS
    if values.size != rows * columns:
        raise TableFormatError(
            str(filename), None, f"expected {rows * columns} spectrum values, found {values.size}"
        )
    pdf = values.reshape(rows, columns) * 10.0 ** (7.0 + 0.1 * np.arange(columns))
    return PairSpectrum(np.cumsum(pdf, axis=1))


def load_emission_spectrum(filename: str) -> EmissionSpectrum:
    """Load ``eps_eV weight`` lines."""
    data = _load_columns(filename, 2)
    try:
        return EmissionSpectrum(data[:, 0] * eV, data[:, 1])
    except ValueError as e:
        raise TableFormatError(str(filename), None, str(e)) from e
