"""
Elastic scattering of background photons off nuclei.

The nucleus keeps its identity; the scattered photon is emitted with a
rest frame energy drawn from a tabulated spectrum and boosted to the lab.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .. import config
from ..data_paths import get_data_path
from .constants import c_squared
from .data_classes import Candidate
from .fields import PhotonField
from .particle_id import PHOTON, charge_number, is_nucleus, mass_number, particle_mass
from .random_source import RandomSource
from .rate_table import LG_MAX, LG_MIN, EmissionSpectrum, RateTable, load_emission_spectrum, load_rate_table
from .stochastic import InteractionModule, comoving_rate_scaling, physical_rate_scaling

logger = logging.getLogger(__name__)


@dataclass
class ElasticScatteringTables:
    rates: RateTable
    spectrum: EmissionSpectrum


def load_elastic_scattering_tables(field: PhotonField, data_dir=None) -> ElasticScatteringTables:
    """Load ``rate_<name>.txt`` and the shared ``spectrum.txt``."""
    directory = config.ELASTIC_SCATTERING_DIR
    return ElasticScatteringTables(
        rates=load_rate_table(str(get_data_path(f"{directory}/rate_{field.name}.txt", data_dir))),
        spectrum=load_emission_spectrum(str(get_data_path(f"{directory}/spectrum.txt", data_dir))),
    )


class ElasticScattering(InteractionModule):
    """Photon emission by nuclei scattering background photons.

    Parameters
    ----------
    photon_field : PhotonField
        Target photon background.
    limit : float
        Fraction of the mean free path the next step is limited to.
    data_dir : str or Path, optional
        Table directory.
    tables : ElasticScatteringTables, optional
        Preloaded tables.
    """

    default_tag = config.ES_TAG

    def __init__(
        self,
        photon_field: PhotonField,
        limit: float = config.DEFAULT_LIMIT,
        data_dir=None,
        tables: Optional[ElasticScatteringTables] = None,
    ):
        super().__init__(limit)
        self.data_dir = data_dir
        self.set_photon_field(photon_field, tables)

    def set_photon_field(self, photon_field: PhotonField, tables: Optional[ElasticScatteringTables] = None) -> None:
        if tables is None:
            tables = load_elastic_scattering_tables(photon_field, self.data_dir)
        self.tables = tables
        self.photon_field = photon_field

    @property
    def description(self) -> str:
        return f"ElasticScattering: {self.photon_field.name}"

    def _rate(self, pid: int, lorentz_factor: float, z: float) -> float:
        """Unscaled rate (1/m), 0 outside the tabulated range."""
        if not is_nucleus(pid):
            return 0.0
        charge = charge_number(pid)
        lg = math.log10(lorentz_factor * (1.0 + z))
        if lg <= LG_MIN or lg >= LG_MAX:
            return 0.0
        return self.tables.rates.rate(charge, mass_number(pid) - charge, lg)

    def interaction_rate(self, candidate: Candidate) -> float:
        state = candidate.current
        z = candidate.redshift
        rate = self._rate(state.id, state.lorentz_factor, z)
        if rate <= 0.0:
            return 0.0
        rate *= comoving_rate_scaling(self.photon_field, z)
        rate *= self.photon_field.get_radial_scaling(float(np.linalg.norm(state.position)))
        return rate

    def interact(self, candidate: Candidate, random: RandomSource) -> None:
        state = candidate.current
        lorentz_factor = state.lorentz_factor
        rest_energy = self.tables.spectrum.sample(random)
        cos_theta = 2.0 * random.rand() - 1.0
        energy = rest_energy * lorentz_factor * (1.0 - cos_theta)
        if energy <= 0.0 or energy >= state.energy:
            logger.debug("Skipping scattered photon of %.3e J for %s", energy, candidate.description())
            return

        position = random.random_interpolated_position(candidate.previous.position, state.position)
        candidate.add_secondary(PHOTON, energy, position, 1.0, self.interaction_tag)
        state.energy -= energy

    def loss_length(self, pid: int, lorentz_factor: float, z: float = 0.0) -> float:
        """Rough energy loss length (m) per physical distance, using the mean photon energy."""
        rate = self._rate(pid, lorentz_factor, z)
        if rate <= 0.0:
            return math.inf
        spectrum = self.tables.spectrum
        weights = np.diff(np.concatenate(([0.0], spectrum.cdf)))
        mean_rest_energy = float(np.dot(weights, spectrum.energies) / spectrum.cdf[-1])

        relative_loss = min(mean_rest_energy / (particle_mass(pid) * c_squared), 1.0)
        rate *= relative_loss * physical_rate_scaling(self.photon_field, z)
        return 1.0 / rate
