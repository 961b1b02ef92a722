"""
Photodisintegration of nuclei on a photon background.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .. import config
from ..data_paths import get_data_path
from .channel_selector import branching_ratios, select_branch
from .data_classes import Candidate, ParticleState
from .fields import PhotonField
from .particle_id import charge_number, is_nucleus, mass_number
from .random_source import RandomSource
from .rate_table import (
    LG_MAX,
    LG_MIN,
    BranchTable,
    PhotonEmissionTable,
    RateTable,
    interpolate_equidistant,
    load_branch_table,
    load_photon_emission_table,
    load_rate_table,
)
from .secondaries import channel_mass_change, emit_deexcitation_photons, emit_fragments, nucleons_lost
from .stochastic import InteractionModule, comoving_rate_scaling, physical_rate_scaling

logger = logging.getLogger(__name__)


@dataclass
class PhotoDisintegrationTables:
    """Rate, branching and photon emission tables of one photon field."""

    rates: RateTable
    branches: BranchTable
    photons: PhotonEmissionTable


def load_photodisintegration_tables(field: PhotonField, data_dir=None) -> PhotoDisintegrationTables:
    """Load the tables for ``field`` (rate_<name>, branching_<name>, photon_emission_<abc>)."""
    directory = config.PHOTODISINTEGRATION_DIR
    return PhotoDisintegrationTables(
        rates=load_rate_table(str(get_data_path(f"{directory}/rate_{field.name}.txt", data_dir))),
        branches=load_branch_table(str(get_data_path(f"{directory}/branching_{field.name}.txt", data_dir))),
        photons=load_photon_emission_table(
            str(get_data_path(f"{directory}/photon_emission_{field.short_name}.txt", data_dir))
        ),
    )


class PhotoDisintegration(InteractionModule):
    """Disintegration of nuclei (Z <= 26, N <= 30) by background photons.

    Parameters
    ----------
    photon_field : PhotonField
        Target photon background; its name selects the tables.
    have_photons : bool
        Emit de-excitation photons.
    limit : float
        Fraction of the mean free path the next step is limited to.
    data_dir : str or Path, optional
        Table directory (default ``config.INTERACTION_DATA_DIR``).
    tables : PhotoDisintegrationTables, optional
        Preloaded tables; skips file loading.
    """

    default_tag = config.PD_TAG

    def __init__(
        self,
        photon_field: PhotonField,
        have_photons: bool = False,
        limit: float = config.DEFAULT_LIMIT,
        data_dir=None,
        tables: Optional[PhotoDisintegrationTables] = None,
    ):
        super().__init__(limit)
        self.have_photons = have_photons
        self.data_dir = data_dir
        self.set_photon_field(photon_field, tables)

    def set_photon_field(self, photon_field: PhotonField, tables: Optional[PhotoDisintegrationTables] = None) -> None:
        if tables is None:
            tables = load_photodisintegration_tables(photon_field, self.data_dir)
        self.tables = tables
        self.photon_field = photon_field

    @property
    def description(self) -> str:
        return f"PhotoDisintegration: {self.photon_field.name}"

    def _tabulated(self, state: ParticleState, z: float) -> Optional[Tuple[int, int, float]]:
        """(Z, N, lg) if the particle is a nucleus inside the tabulated range."""
        if not is_nucleus(state.id):
            return None
        charge = state.charge_number
        neutrons = state.mass_number - charge
        if not self.tables.rates.has(charge, neutrons):
            return None
        lg = math.log10(state.lorentz_factor * (1.0 + z))
        if lg <= LG_MIN or lg >= LG_MAX:
            return None
        return charge, neutrons, lg

    def interaction_rate(self, candidate: Candidate) -> float:
        z = candidate.redshift
        tabulated = self._tabulated(candidate.current, z)
        if tabulated is None:
            return 0.0
        charge, neutrons, lg = tabulated
        rate = self.tables.rates.rate(charge, neutrons, lg)
        rate *= comoving_rate_scaling(self.photon_field, z)
        rate *= self.photon_field.get_radial_scaling(float(np.linalg.norm(candidate.current.position)))
        return rate

    def interact(self, candidate: Candidate, random: RandomSource) -> None:
        tabulated = self._tabulated(candidate.current, candidate.redshift)
        if tabulated is None:
            return
        charge, neutrons, lg = tabulated
        branches = self.tables.branches.branches(charge, neutrons)
        branch = select_branch(branches, branching_ratios(branches, lg, "nearest"), random)
        if branch is None:
            return
        self.perform_interaction(candidate, branch.channel, random)

    def perform_interaction(self, candidate: Candidate, channel: int, random: RandomSource) -> None:
        """Realise ``channel`` on ``candidate`` (fragments, then photons)."""
        logger.debug("Channel %06d on candidate %s", channel, candidate.description())
        a = candidate.current.mass_number
        charge = candidate.current.charge_number
        d_a, d_z = channel_mass_change(channel)

        position = emit_fragments(candidate, channel, random, self.interaction_tag)
        if not self.have_photons:
            return

        emissions = self.tables.photons.emissions(charge, a - charge, charge + d_z, (a + d_a) - (charge + d_z))
        emit_deexcitation_photons(candidate, emissions, position, random, self.interaction_tag)

    def loss_length(self, pid: int, lorentz_factor: float, z: float = 0.0) -> float:
        """Energy loss length (m), 1 / (rate * <dA> / A), per physical distance.

        Returns ``math.inf`` when photodisintegration does not apply.
        """
        if not is_nucleus(pid):
            return math.inf
        a = mass_number(pid)
        charge = charge_number(pid)
        rates = self.tables.rates.get(charge, a - charge)
        if rates is None:
            return math.inf
        lg = math.log10(lorentz_factor * (1.0 + z))
        if lg <= LG_MIN or lg >= LG_MAX:
            return math.inf

        loss_rate = interpolate_equidistant(lg, LG_MIN, LG_MAX, rates)
        loss_rate *= physical_rate_scaling(self.photon_field, z)

        branches = self.tables.branches.branches(charge, a - charge)
        ratios = branching_ratios(branches, lg, "linear")
        average_d_a = sum(ratio * nucleons_lost(b.channel) for b, ratio in zip(branches, ratios))

        loss_rate *= average_d_a / a
        if loss_rate <= 0.0:
            return math.inf
        return 1.0 / loss_rate

