"""
Electron pair production of charged nuclei on a photon background.

Unlike the other processes this is treated as a continuous energy loss: the
relative loss over a step is the step length divided by the energy loss
length. Electron/positron pairs are optionally sampled from the tabulated
pair spectrum until the lost energy is used up.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from .. import config
from ..data_paths import get_data_path
from .constants import mass_proton
from .data_classes import Candidate
from .fields import PhotonField
from .particle_id import ELECTRON, POSITRON, charge_number, is_nucleus, particle_mass
from .random_source import RandomSource
from .rate_table import LorentzFactorTable, PairSpectrum, load_lorentz_factor_table, load_pair_spectrum
from .stochastic import InteractionModule, physical_rate_scaling

logger = logging.getLogger(__name__)

# Power law index of the loss rate above the last tabulated Lorentz factor
EXTRAPOLATION_INDEX = -0.6


class ElectronPairProduction(InteractionModule):
    """Continuous energy loss of nuclei by e+ e- pair production.

    Parameters
    ----------
    photon_field : PhotonField
        Target photon background.
    have_electrons : bool
        Produce electron/positron secondaries (loads the pair spectrum).
    limit : float
        Fraction of the energy loss length the next step is limited to.
    data_dir : str or Path, optional
        Table directory.
    loss_rate : LorentzFactorTable, optional
        Preloaded loss rate table.
    spectrum : PairSpectrum, optional
        Preloaded pair spectrum.
    """

    default_tag = config.EPP_TAG

    def __init__(
        self,
        photon_field: PhotonField,
        have_electrons: bool = False,
        limit: float = config.DEFAULT_LIMIT,
        data_dir=None,
        loss_rate: Optional[LorentzFactorTable] = None,
        spectrum: Optional[PairSpectrum] = None,
    ):
        super().__init__(limit)
        self._have_electrons = have_electrons
        self.data_dir = data_dir
        self.spectrum = spectrum
        self.set_photon_field(photon_field, loss_rate)

    def set_photon_field(self, photon_field: PhotonField, loss_rate: Optional[LorentzFactorTable] = None) -> None:
        if loss_rate is None:
            filename = get_data_path(f"{config.PAIR_PRODUCTION_DIR}/lossrate_{photon_field.name}.txt", self.data_dir)
            loss_rate = load_lorentz_factor_table(str(filename), extrapolation_index=EXTRAPOLATION_INDEX)
        self.loss_rate = loss_rate
        self.photon_field = photon_field
        if self._have_electrons and self.spectrum is None:
            self._load_spectrum()

    def _load_spectrum(self) -> None:
        filename = get_data_path(
            f"{config.PAIR_PRODUCTION_DIR}/spectrum_{self.photon_field.short_name}.txt", self.data_dir
        )
        self.spectrum = load_pair_spectrum(str(filename))

    @property
    def have_electrons(self) -> bool:
        return self._have_electrons

    @have_electrons.setter
    def have_electrons(self, value: bool) -> None:
        self._have_electrons = value
        if value and self.spectrum is None:
            self._load_spectrum()

    @property
    def description(self) -> str:
        return f"ElectronPairProduction: {self.photon_field.name}"

    def loss_length(self, pid: int, lorentz_factor: float, z: float = 0.0) -> float:
        """Energy loss length (m) per physical distance; ``math.inf`` if none."""
        charge = charge_number(pid)
        if charge == 0:
            return math.inf

        rate = self.loss_rate.rate(lorentz_factor * (1.0 + z))
        if rate <= 0.0:
            return math.inf

        a = particle_mass(pid) / mass_proton
        rate *= charge * charge / a * physical_rate_scaling(self.photon_field, z)
        return 1.0 / rate

    def process(self, candidate: Candidate, random: RandomSource) -> int:
        """Apply the energy loss of the current step; returns the number of pairs."""
        state = candidate.current
        if not is_nucleus(state.id):
            return 0

        lorentz_factor = state.lorentz_factor
        z = candidate.redshift
        loss_length = self.loss_length(state.id, lorentz_factor, z)
        radial_scaling = self.photon_field.get_radial_scaling(float(np.linalg.norm(state.position)))
        if radial_scaling <= 0.0 or not math.isfinite(loss_length):
            return 0
        loss_length /= radial_scaling

        step = candidate.current_step / (1.0 + z)
        loss = min(step / loss_length, 1.0)

        pairs = 0
        if self._have_electrons:
            pairs = self._emit_pairs(candidate, state.energy * loss, lorentz_factor, random)

        state.lorentz_factor = lorentz_factor * (1.0 - loss)
        candidate.limit_next_step(self.limit * loss_length)
        return pairs

    def _emit_pairs(self, candidate: Candidate, energy_loss: float, lorentz_factor: float, random: RandomSource) -> int:
        """Draw pairs while their energy fits into ``energy_loss``.

        The last pair, if larger than the remaining energy, is accepted with
        probability remaining / pair energy.
        """
        pairs = 0
        while energy_loss > 0.0:
            electron_energy = self.spectrum.sample_electron_energy(lorentz_factor, random)
            if electron_energy <= 0.0:
                break
            pair_energy = 2.0 * electron_energy
            if pair_energy > energy_loss and random.rand() > energy_loss / pair_energy:
                break
            energy_loss -= pair_energy
            position = random.random_interpolated_position(candidate.previous.position, candidate.current.position)
            candidate.add_secondary(ELECTRON, electron_energy, position, 1.0, self.interaction_tag)
            candidate.add_secondary(POSITRON, electron_energy, position, 1.0, self.interaction_tag)
            pairs += 1
        return pairs
