"""
Decay of unstable nuclei.

Decay channels are encoded as five digits giving the number of beta minus
(10^4), beta plus (10^3), alpha (10^2), proton (10^1) and neutron (10^0)
emissions of one decay.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Tuple

import numpy as np

from .. import config
from ..data_paths import get_data_path
from .channel_selector import select_index
from .constants import MeV, c_light, c_squared, mass_electron
from .data_classes import Candidate
from .particle_id import charge_number, is_nucleus, mass_number, nuclear_mass
from .random_source import RandomSource
from .rate_table import DecayMode, DecayTable, PhotonEmissionTable, load_decay_table, load_photon_emission_table
from .secondaries import digit, emit_beta_decay, emit_deexcitation_photons, emit_fragments
from .stochastic import InteractionModule

logger = logging.getLogger(__name__)


def parse_decay_channel(channel: int) -> Tuple[int, int, int, int, int]:
    """Counts ``(beta_minus, beta_plus, alpha, proton, neutron)`` of ``channel``."""
    return (
        digit(channel, 10000),
        digit(channel, 1000),
        digit(channel, 100),
        digit(channel, 10),
        digit(channel, 1),
    )


def decay_mass_change(channel: int) -> Tuple[int, int]:
    """Change ``(dA, dZ)`` of the decaying nucleus."""
    beta_minus, beta_plus, alpha, proton, neutron = parse_decay_channel(channel)
    d_a = -4 * alpha - proton - neutron
    d_z = beta_minus - beta_plus - 2 * alpha - proton
    return d_a, d_z


def beta_q_value(a: int, z: int, beta_minus: bool) -> float:
    """Kinetic energy (J) released in a beta decay, from nuclear masses.

    Never smaller than ``config.MIN_BETA_Q_MEV``, which keeps the estimate
    usable where the mass formula predicts a forbidden decay.
    """
    daughter_z = z + 1 if beta_minus else z - 1
    q_value = (nuclear_mass(a, z) - nuclear_mass(a, daughter_z) - mass_electron) * c_squared
    return max(q_value, config.MIN_BETA_Q_MEV * MeV)


class NuclearDecay(InteractionModule):
    """Decay of unstable nuclei with beta, alpha and nucleon emission.

    Parameters
    ----------
    have_electrons, have_neutrinos, have_photons : bool
        Emit the respective decay products.
    limit : float
        Fraction of the mean decay length the next step is limited to.
    data_dir : str or Path, optional
        Table directory.
    decay_table : DecayTable, optional
        Preloaded decay modes.
    photon_table : PhotonEmissionTable, optional
        Preloaded de-excitation lines, keyed by parent and daughter.
    """

    default_tag = config.ND_TAG

    def __init__(
        self,
        have_electrons: bool = False,
        have_neutrinos: bool = False,
        have_photons: bool = False,
        limit: float = config.DEFAULT_LIMIT,
        data_dir=None,
        decay_table: Optional[DecayTable] = None,
        photon_table: Optional[PhotonEmissionTable] = None,
    ):
        super().__init__(limit)
        self.have_electrons = have_electrons
        self.have_neutrinos = have_neutrinos
        self.data_dir = data_dir
        if decay_table is None:
            decay_table = load_decay_table(str(get_data_path(config.NUCLEAR_DECAY_FILE, data_dir)))
        self.decay_table = decay_table
        self.photon_table = photon_table
        self._have_photons = False
        self.have_photons = have_photons

    @property
    def have_photons(self) -> bool:
        return self._have_photons

    @have_photons.setter
    def have_photons(self, value: bool) -> None:
        self._have_photons = value
        if value and self.photon_table is None:
            self.photon_table = load_photon_emission_table(
                str(get_data_path(config.NUCLEAR_DECAY_PHOTON_FILE, self.data_dir))
            )

    def _modes(self, pid: int) -> List[DecayMode]:
        if not is_nucleus(pid):
            return []
        return self.decay_table.modes(charge_number(pid), mass_number(pid) - charge_number(pid))

    def decay_rate(self, pid: int, lorentz_factor: float) -> float:
        """Lab frame decay rate (1/m) per physical distance; 0 for stable species."""
        modes = self._modes(pid)
        if not modes:
            return 0.0
        return sum(1.0 / (mode.lifetime * lorentz_factor * c_light) for mode in modes)

    def interaction_rate(self, candidate: Candidate) -> float:
        state = candidate.current
        return self.decay_rate(state.id, state.lorentz_factor) / (1.0 + candidate.redshift)

    def interact(self, candidate: Candidate, random: RandomSource) -> None:
        modes = self._modes(candidate.current.id)
        if not modes:
            return
        inverse_lifetimes = np.array([1.0 / mode.lifetime for mode in modes])
        index = select_index(inverse_lifetimes / inverse_lifetimes.sum(), random)
        if index is None:
            # rounding residue of the normalised partial rates
            index = len(modes) - 1
        self.perform_interaction(candidate, modes[index].channel, random)

    def perform_interaction(self, candidate: Candidate, channel: int, random: RandomSource) -> None:
        """Realise decay ``channel``: beta decays first, then particle emission."""
        logger.debug("Decay channel %05d on candidate %s", channel, candidate.description())
        state = candidate.current
        parent_a = state.mass_number
        parent_z = state.charge_number
        beta_minus, beta_plus, alpha, proton, neutron = parse_decay_channel(channel)

        position = None
        for _ in range(beta_minus):
            q_value = beta_q_value(state.mass_number, state.charge_number, True)
            position = emit_beta_decay(
                candidate, True, q_value, random, self.interaction_tag, self.have_electrons, self.have_neutrinos
            )
        for _ in range(beta_plus):
            q_value = beta_q_value(state.mass_number, state.charge_number, False)
            position = emit_beta_decay(
                candidate, False, q_value, random, self.interaction_tag, self.have_electrons, self.have_neutrinos
            )

        # alpha, proton and neutron emission share the disintegration encoding
        disintegration = alpha * 1 + proton * 10000 + neutron * 100000
        if disintegration:
            position = emit_fragments(candidate, disintegration, random, self.interaction_tag)

        if not self._have_photons or position is None:
            return
        emissions = self.photon_table.emissions(
            parent_z, parent_a - parent_z, state.charge_number, state.mass_number - state.charge_number
        )
        emit_deexcitation_photons(candidate, emissions, position, random, self.interaction_tag)

    def loss_length(self, pid: int, lorentz_factor: float, z: float = 0.0) -> float:
        """Nucleon loss length (m) per physical distance, 1 / (rate * <dA> / A).

        Pure beta emitters change charge but not mass and return ``math.inf``.
        """
        modes = self._modes(pid)
        if not modes:
            return math.inf
        a = mass_number(pid)
        loss_rate = sum(
            -decay_mass_change(mode.channel)[0] / a / (mode.lifetime * lorentz_factor * c_light) for mode in modes
        )
        if loss_rate <= 0.0:
            return math.inf
        return 1.0 / loss_rate
