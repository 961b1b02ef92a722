"""
Photo-pion production of nucleons and nuclei on a photon background.

The interacting nucleon gives a fixed fraction of its energy to the pion.
Free nucleons may change identity (p -> n pi+, n -> p pi-); for nuclei the
struck nucleon is knocked out and the remnant keeps the energy per nucleon.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .. import config
from ..data_paths import get_data_path
from .channel_selector import select_index
from .data_classes import Candidate
from .fields import PhotonField
from .particle_id import is_nucleus, mass_number, charge_number, nucleus_id
from .random_source import RandomSource
from .rate_table import LorentzFactorTable, load_lorentz_factor_table
from .secondaries import emit_pion_decay_products, production_error
from .stochastic import InteractionModule, comoving_rate_scaling, physical_rate_scaling

logger = logging.getLogger(__name__)

PROTON = nucleus_id(1, 1)
NEUTRON = nucleus_id(1, 0)


@dataclass
class PionProductionTables:
    """Interaction rates (1/m) of free protons and neutrons."""

    proton: LorentzFactorTable
    neutron: LorentzFactorTable


def load_pion_production_tables(field: PhotonField, data_dir=None) -> PionProductionTables:
    """Load ``ppp_<name>.txt`` with columns ``log10(gamma) r_p r_n``."""
    filename = str(get_data_path(f"{config.PION_PRODUCTION_DIR}/ppp_{field.name}.txt", data_dir))
    return PionProductionTables(
        proton=load_lorentz_factor_table(filename, columns=3, column=1),
        neutron=load_lorentz_factor_table(filename, columns=3, column=2),
    )


def nucleon_rate_factor(a: int, x: int) -> float:
    """Number of effective targets among ``x`` protons (or neutrons) of a nucleus of mass ``a``."""
    if a == 1:
        return float(x)
    if a <= 8:
        return config.PION_NUCLEAR_SCALING * x ** (2.0 / 3.0)
    return config.PION_NUCLEAR_SCALING * x


class PhotoPionProduction(InteractionModule):
    """Pion production by nucleons, free or bound in nuclei.

    Parameters
    ----------
    photon_field : PhotonField
        Target photon background.
    have_photons, have_neutrinos, have_electrons : bool
        Emit the respective pion decay products.
    limit : float
        Fraction of the mean free path the next step is limited to.
    data_dir : str or Path, optional
        Table directory.
    tables : PionProductionTables, optional
        Preloaded tables.
    """

    default_tag = config.PPP_TAG

    def __init__(
        self,
        photon_field: PhotonField,
        have_photons: bool = False,
        have_neutrinos: bool = False,
        have_electrons: bool = False,
        limit: float = config.DEFAULT_LIMIT,
        data_dir=None,
        tables: Optional[PionProductionTables] = None,
    ):
        super().__init__(limit)
        self.have_photons = have_photons
        self.have_neutrinos = have_neutrinos
        self.have_electrons = have_electrons
        self.data_dir = data_dir
        self.set_photon_field(photon_field, tables)

    def set_photon_field(self, photon_field: PhotonField, tables: Optional[PionProductionTables] = None) -> None:
        if tables is None:
            tables = load_pion_production_tables(photon_field, self.data_dir)
        self.tables = tables
        self.photon_field = photon_field

    @property
    def description(self) -> str:
        return f"PhotoPionProduction: {self.photon_field.name}"

    def _partial_rates(self, pid: int, lorentz_factor: float) -> Tuple[float, float]:
        """Unscaled proton and neutron interaction rates of ``pid`` (1/m)."""
        a = mass_number(pid)
        z = charge_number(pid)
        proton_rate = 0.0
        neutron_rate = 0.0
        if z > 0:
            proton_rate = self.tables.proton.rate(lorentz_factor) * nucleon_rate_factor(a, z)
        if a - z > 0:
            neutron_rate = self.tables.neutron.rate(lorentz_factor) * nucleon_rate_factor(a, a - z)
        return proton_rate, neutron_rate

    def interaction_rate(self, candidate: Candidate) -> float:
        state = candidate.current
        if not is_nucleus(state.id):
            return 0.0
        z = candidate.redshift
        proton_rate, neutron_rate = self._partial_rates(state.id, state.lorentz_factor * (1.0 + z))
        rate = proton_rate + neutron_rate
        if rate <= 0.0:
            return 0.0
        rate *= comoving_rate_scaling(self.photon_field, z)
        rate *= self.photon_field.get_radial_scaling(float(np.linalg.norm(state.position)))
        return rate

    def interact(self, candidate: Candidate, random: RandomSource) -> None:
        state = candidate.current
        proton_rate, neutron_rate = self._partial_rates(state.id, state.lorentz_factor * (1.0 + candidate.redshift))
        total = proton_rate + neutron_rate
        if total <= 0.0:
            return
        on_proton = select_index([proton_rate / total, neutron_rate / total], random) == 0
        charged = random.rand() >= config.PION_NEUTRAL_BRANCHING
        self.perform_interaction(candidate, on_proton, charged, random)

    def perform_interaction(self, candidate: Candidate, on_proton: bool, charged: bool, random: RandomSource) -> None:
        """Produce one pion off a proton (``on_proton``) or neutron.

        A charged pion converts the nucleon (p -> n pi+, n -> p pi-), a
        neutral one leaves it unchanged.
        """
        state = candidate.current
        a = state.mass_number
        z = state.charge_number
        energy_per_nucleon = state.energy / a

        pion_charge = 0
        outgoing = PROTON if on_proton else NEUTRON
        if charged:
            pion_charge = 1 if on_proton else -1
            outgoing = NEUTRON if on_proton else PROTON
        logger.debug("Pion production (charge %+d) on candidate %s", pion_charge, candidate.description())

        pion_energy = config.PION_INELASTICITY * energy_per_nucleon
        nucleon_energy = energy_per_nucleon - pion_energy
        position = random.random_interpolated_position(candidate.previous.position, state.position)

        candidate.created = state.copy()
        if a == 1:
            state.id = outgoing
            state.energy = nucleon_energy
        else:
            try:
                remnant = nucleus_id(a - 1, z - 1 if on_proton else z)
            except ValueError as e:
                raise production_error("Could not create pion production remnant", candidate, pion_charge, random, e) from e
            candidate.add_secondary(outgoing, nucleon_energy, position, 1.0, self.interaction_tag)
            state.id = remnant
            state.energy = energy_per_nucleon * (a - 1)

        emit_pion_decay_products(
            candidate, pion_charge, pion_energy, position, random, self.interaction_tag,
            have_photons=self.have_photons,
            have_neutrinos=self.have_neutrinos,
            have_electrons=self.have_electrons,
        )

    def loss_length(self, pid: int, lorentz_factor: float, z: float = 0.0) -> float:
        """Energy loss length (m) per physical distance; ``math.inf`` if none.

        Free nucleons lose the inelasticity per interaction, nuclei the
        fraction 1/A carried away by the knocked out nucleon.
        """
        if not is_nucleus(pid):
            return math.inf
        proton_rate, neutron_rate = self._partial_rates(pid, lorentz_factor * (1.0 + z))
        rate = proton_rate + neutron_rate
        if rate <= 0.0:
            return math.inf
        a = mass_number(pid)
        relative_loss = config.PION_INELASTICITY if a == 1 else 1.0 / a
        rate *= relative_loss * physical_rate_scaling(self.photon_field, z)
        return 1.0 / rate
