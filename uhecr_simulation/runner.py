"""
UHECR Propagation Simulation Runner Module

This module provides the main simulation runner function that can be called
from scripts or imported directly.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from . import config
from .core.constants import EeV, Mpc, kpc, nanogauss
from .core.data_classes import CandidateRecord
from .core.elastic_scattering import ElasticScattering
from .core.fields import PhotonField, UniformMagneticField
from .core.io_utils import export_records_to_csv, export_secondaries_to_csv
from .core.nuclear_decay import NuclearDecay
from .core.pair_production import ElectronPairProduction
from .core.particle_id import nucleus_id
from .core.photodisintegration import PhotoDisintegration
from .core.pion_production import PhotoPionProduction
from .core.propagation import BorisPropagator
from .core.simulation import run_simulation
from .data_paths import get_data_dir, has_interaction_data
from .log_config import setup_logging
from .plotting import visualize_spectra, visualize_composition, print_statistics
from .testing.synthetic_tables import write_all_tables

logger = logging.getLogger(__name__)


def resolve_table_directory(data_dir: Optional[Path], output_dir: Path) -> Path:
    """Return a directory holding interaction tables.

    Falls back to synthetic tables written below ``output_dir`` when neither
    ``data_dir`` nor the bundled data directory contains any tables.
    """
    if has_interaction_data(data_dir):
        directory = get_data_dir(data_dir)
        print(f"[info] Using interaction tables from {directory}")
        return directory

    directory = output_dir / config.SYNTHETIC_TABLE_DIR
    print(f"[warning] No interaction tables found in {get_data_dir(data_dir)}.")
    print(f"[info] Generating synthetic tables in {directory} (for testing only).")
    return write_all_tables(directory)


def build_module_chain(
    photon_field: PhotonField,
    data_dir: Path,
    b_field_ng: float = 0.0,
    have_secondary_photons: bool = False,
) -> list:
    """Propagator followed by all interaction processes on ``photon_field``."""
    propagator = BorisPropagator.adaptive(
        UniformMagneticField([0.0, 0.0, b_field_ng * nanogauss]),
        tolerance=config.DEFAULT_TOLERANCE,
        min_step=config.DEFAULT_MIN_STEP_KPC * kpc,
        max_step=config.DEFAULT_MAX_STEP_MPC * Mpc,
    )
    modules = [
        propagator,
        PhotoDisintegration(photon_field, have_photons=have_secondary_photons, data_dir=data_dir),
        ElectronPairProduction(photon_field, data_dir=data_dir),
        PhotoPionProduction(photon_field, have_photons=have_secondary_photons, data_dir=data_dir),
        NuclearDecay(have_photons=have_secondary_photons, data_dir=data_dir),
        ElasticScattering(photon_field, data_dir=data_dir),
    ]
    for module in modules:
        logger.info("Module: %s", module.description)
    return modules


def run_full_simulation(
    output_dir: Optional[Path] = None,
    n_candidates: Optional[int] = None,
    source_a: int = config.DEFAULT_SOURCE_A,
    source_z: int = config.DEFAULT_SOURCE_Z,
    energy_eev: float = config.DEFAULT_SOURCE_ENERGY_EEV,
    max_distance_mpc: float = config.DEFAULT_MAX_DISTANCE_MPC,
    min_energy_eev: float = config.DEFAULT_MIN_ENERGY_EEV,
    field_name: str = config.DEFAULT_FIELD_NAME,
    b_field_ng: float = 0.0,
    data_dir: Optional[Path] = None,
    seed: Optional[int] = config.DEFAULT_SEED,
    n_workers: int = 1,
    save_results: bool = True,
    generate_plots: bool = True,
    show_plots: bool = True,
) -> List[CandidateRecord]:
    """Run the complete UHECR propagation simulation.

    This is the main entry point for running simulations. It handles:
    1. Locating interaction tables (or generating synthetic ones)
    2. Building the propagation and interaction module chain
    3. Running the Monte Carlo simulation
    4. Exporting results
    5. Generating visualization plots

    Parameters
    ----------
    output_dir : Path, optional
        Directory for output files (Data/, Figures/). If None, uses current working directory.
    n_candidates : int, optional
        Number of primaries to simulate. If None, uses config default.
    source_a, source_z : int
        Mass and charge number of the primaries.
    energy_eev : float
        Primary energy in EeV.
    save_results : bool
        Whether to save results to CSV files.
    generate_plots : bool
        Whether to generate visualization plots.

    Returns
    -------
    List[CandidateRecord]
        Records of all propagated candidates.
    """
    if output_dir is None:
        output_dir = Path.cwd()
    else:
        output_dir = Path(output_dir)

    if n_candidates is None:
        n_candidates = config.DEFAULT_N_CANDIDATES

    table_dir = resolve_table_directory(data_dir, output_dir)
    photon_field = PhotonField(field_name)
    modules = build_module_chain(photon_field, table_dir, b_field_ng)

    print("\n" + "="*70)
    print("SOURCE CONFIGURATION")
    print("="*70)
    print(f"Primary: A={source_a}, Z={source_z}, E={energy_eev:.1f} EeV")
    print(f"Photon field: {photon_field.name}")
    print(f"Magnetic field: {b_field_ng:.3g} nG along +Z")
    print(f"Maximum distance: {max_distance_mpc:.1f} Mpc, minimum energy: {min_energy_eev:.2f} EeV")
    print("="*70 + "\n")

    print(f"[info] Starting simulation with {n_candidates} primaries...")
    records = run_simulation(
        n_candidates=n_candidates,
        source_id=nucleus_id(source_a, source_z),
        source_energy=energy_eev * EeV,
        modules=modules,
        max_distance=max_distance_mpc * Mpc,
        min_energy=min_energy_eev * EeV,
        source_direction=np.array([1.0, 0.0, 0.0]),
        seed=seed,
        n_workers=n_workers,
    )

    print_statistics(records, n_candidates)

    if save_results and records:
        data_dir_out = output_dir / config.DATA_OUTPUT_DIR
        export_records_to_csv(records, filename=str(data_dir_out / config.RECORD_DATA_CSV))
        export_secondaries_to_csv(records, filename=str(data_dir_out / f"secondaries_{config.RECORD_DATA_CSV}"))

    if generate_plots and records:
        print("[info] Generating visualizations...")
        save_base = str(output_dir / config.FIGURES_OUTPUT_DIR / config.SPECTRUM_FIGURE_BASE)
        (output_dir / config.FIGURES_OUTPUT_DIR).mkdir(parents=True, exist_ok=True)
        visualize_spectra(records, save_path=save_base, show=show_plots)
        visualize_composition(records, save_path=save_base, show=show_plots)
        print("[info] Visualization complete!")

    return records


def main():
    """Command-line entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Run UHECR propagation simulation")
    parser.add_argument("-n", "--candidates", type=int, default=None,
                        help="Number of primaries to simulate")
    parser.add_argument("-A", "--mass-number", type=int, default=config.DEFAULT_SOURCE_A,
                        help="Mass number of the primaries")
    parser.add_argument("-Z", "--charge-number", type=int, default=config.DEFAULT_SOURCE_Z,
                        help="Charge number of the primaries")
    parser.add_argument("-E", "--energy", type=float, default=config.DEFAULT_SOURCE_ENERGY_EEV,
                        help="Primary energy in EeV")
    parser.add_argument("-D", "--distance", type=float, default=config.DEFAULT_MAX_DISTANCE_MPC,
                        help="Maximum propagation distance in Mpc")
    parser.add_argument("--min-energy", type=float, default=config.DEFAULT_MIN_ENERGY_EEV,
                        help="Energy threshold in EeV")
    parser.add_argument("--field", default=config.DEFAULT_FIELD_NAME,
                        help="Photon field name (selects the tables)")
    parser.add_argument("--bfield", type=float, default=0.0,
                        help="Uniform magnetic field strength in nG")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Directory with interaction tables")
    parser.add_argument("--seed", type=int, default=config.DEFAULT_SEED,
                        help="Root random seed")
    parser.add_argument("-j", "--workers", type=int, default=1,
                        help="Number of worker threads")
    parser.add_argument("--no-save", action="store_true",
                        help="Don't save results to CSV")
    parser.add_argument("--no-plot", action="store_true",
                        help="Don't generate visualization plots")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Output directory for results and figures")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    run_full_simulation(
        output_dir=args.output_dir,
        n_candidates=args.candidates,
        source_a=args.mass_number,
        source_z=args.charge_number,
        energy_eev=args.energy,
        max_distance_mpc=args.distance,
        min_energy_eev=args.min_energy,
        field_name=args.field,
        b_field_ng=args.bfield,
        data_dir=args.data_dir,
        seed=args.seed,
        n_workers=args.workers,
        save_results=not args.no_save,
        generate_plots=not args.no_plot,
    )


if __name__ == "__main__":
    main()
