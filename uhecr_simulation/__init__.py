"""
UHECR Propagation Simulation Package
====================================

This package provides a modular Monte-Carlo simulator for the propagation of
ultra-high-energy cosmic ray nuclei and their secondaries over cosmological
distances, with stochastic interactions on photon backgrounds and deflection
in magnetic fields.

Modules:
--------
- config: Configurable simulation parameters
- data_paths: Location of the interaction tables
- log_config: Logging setup
- core: Particles, tables, interaction processes, propagation and driver
- plotting: Visualization of results
- testing: Synthetic interaction tables
- runner: Complete simulation run and command-line entry point
"""

from . import config
from .core.constants import *
from .core.exceptions import (
    UHECRSimError,
    TableLoadError,
    TableFormatError,
    SecondaryProductionError,
)
from .core.particle_id import nucleus_id, is_nucleus, mass_number, charge_number
from .core.data_classes import ParticleState, Candidate, CandidateRecord
from .core.random_source import RandomSource
from .core.fields import PhotonField, CMB, UniformMagneticField, UniformAdvectionField
from .core.stochastic import StochasticStepper, InteractionModule
from .core.photodisintegration import PhotoDisintegration
from .core.pair_production import ElectronPairProduction
from .core.pion_production import PhotoPionProduction
from .core.nuclear_decay import NuclearDecay
from .core.elastic_scattering import ElasticScattering
from .core.propagation import BorisPropagator
from .core.simulation import propagate_candidate, run_simulation
from .core.io_utils import export_records_to_csv, export_secondaries_to_csv
from .log_config import setup_logging

__version__ = "1.0.0"
__all__ = [
    # Config module
    "config",
    # Exceptions
    "UHECRSimError",
    "TableLoadError",
    "TableFormatError",
    "SecondaryProductionError",
    # Particles
    "nucleus_id",
    "is_nucleus",
    "mass_number",
    "charge_number",
    # Data classes
    "ParticleState",
    "Candidate",
    "CandidateRecord",
    # Randomness
    "RandomSource",
    # Fields
    "PhotonField",
    "CMB",
    "UniformMagneticField",
    "UniformAdvectionField",
    # Interactions
    "StochasticStepper",
    "InteractionModule",
    "PhotoDisintegration",
    "ElectronPairProduction",
    "PhotoPionProduction",
    "NuclearDecay",
    "ElasticScattering",
    # Propagation
    "BorisPropagator",
    # Simulation
    "propagate_candidate",
    "run_simulation",
    # IO
    "export_records_to_csv",
    "export_secondaries_to_csv",
    # Logging
    "setup_logging",
]
