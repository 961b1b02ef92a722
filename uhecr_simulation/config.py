"""
Configuration settings for the UHECR propagation simulation.

This module collects the tunable defaults of the simulation. Users can modify
these values to customise a run without changing the core code.

Interaction tables are looked up below ``INTERACTION_DATA_DIR``; use
`uhecr_simulation.data_paths` to resolve individual files:

    from uhecr_simulation.data_paths import get_data_path
"""

from __future__ import annotations

from pathlib import Path

# =============================================================================
# Package Data Paths
# =============================================================================

# Package root directory
_PACKAGE_DIR = Path(__file__).resolve().parent

# Interaction tables (rate, branching, emission, decay)
INTERACTION_DATA_DIR = _PACKAGE_DIR / "data" / "interactions"

PHOTODISINTEGRATION_DIR = "Photodisintegration"
PAIR_PRODUCTION_DIR = "ElectronPairProduction"
PION_PRODUCTION_DIR = "PhotoPionProduction"
ELASTIC_SCATTERING_DIR = "ElasticScattering"
NUCLEAR_DECAY_FILE = "nuclear_decay.txt"
NUCLEAR_DECAY_PHOTON_FILE = "nuclear_decay_photons.txt"

# Output directories (user working directory)
DATA_OUTPUT_DIR = "Data"
FIGURES_OUTPUT_DIR = "Figures"
SYNTHETIC_TABLE_DIR = "tables"

# Output file names
RECORD_DATA_CSV = "candidate_records.csv"
SPECTRUM_FIGURE_BASE = "uhecr_spectra"

# =============================================================================
# Tabulation Grid
# =============================================================================

# log10(Lorentz factor) grid of all (Z, N) indexed tables
LG_MIN = 4.0
LG_MAX = 14.0
N_LG = 251

# Coverage of the (Z, N) indexed tables
MAX_Z = 26
MAX_N = 30

# Pair production spectrum shape (rows: log10 gamma, columns: log10 Ee)
PAIR_SPECTRUM_ROWS = 70
PAIR_SPECTRUM_COLUMNS = 170

# =============================================================================
# Interaction Defaults
# =============================================================================

# Next step is limited to this fraction of the mean free path / loss length
DEFAULT_LIMIT = 0.1

PD_TAG = "PD"
EPP_TAG = "EPP"
PPP_TAG = "PPP"
ND_TAG = "ND"
ES_TAG = "ES"

# Photo-pion production
PION_INELASTICITY = 0.2
PION_NEUTRAL_BRANCHING = 2.0 / 3.0
PION_NUCLEAR_SCALING = 0.85

# Beta decay Q-values below this floor (MeV) are raised to it
MIN_BETA_Q_MEV = 0.1

# =============================================================================
# Propagation Defaults
# =============================================================================

DEFAULT_TOLERANCE = 0.42
DEFAULT_MIN_STEP_KPC = 10.0
DEFAULT_MAX_STEP_MPC = 1.0

# Field amplification at the shock, upstream field weaker by this factor
SHOCK_COMPRESSION = 11.0

# =============================================================================
# Simulation Parameters
# =============================================================================

DEFAULT_N_CANDIDATES = 20
DEFAULT_SEED = 42
DEFAULT_SOURCE_A = 12
DEFAULT_SOURCE_Z = 6
DEFAULT_SOURCE_ENERGY_EEV = 100.0
DEFAULT_MAX_DISTANCE_MPC = 100.0
DEFAULT_MIN_ENERGY_EEV = 1.0
DEFAULT_MAX_STEPS = 100000
DEFAULT_FIELD_NAME = "CMB"

# =============================================================================
# Visualization Settings
# =============================================================================

PLOT_DPI = 150
SPECTRUM_BINS = 30
