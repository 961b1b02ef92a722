"""
Simulation results visualization.

This module provides visualization functions for propagation results,
including energy spectra at the end of the trajectories, the mass
composition of the arriving nuclei and statistical summaries.
"""

from __future__ import annotations

from collections import Counter
from typing import List, Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .. import config
from ..core.constants import EeV, Mpc
from ..core.data_classes import CandidateRecord
from ..core.particle_id import is_nucleus, mass_number, describe


def load_record_data(csv_file: str) -> pd.DataFrame:
    """Load candidate records written by ``export_records_to_csv``.

    Example
    -------
    >>> df = load_record_data('Data/candidate_records.csv')
    >>> df.groupby('tag_origin').size()
    """
    df = pd.read_csv(csv_file)
    df['is_primary'] = df['generation'] == 0
    return df


def visualize_spectra(records: List[CandidateRecord], save_path: Optional[str] = None, show: bool = True):
    """Plot initial and final energy spectra of primaries and secondaries.

    Parameters
    ----------
    records : List[CandidateRecord]
        Records of all candidates.
    save_path : str, optional
        Base path for saving the figure.
    show : bool
        Call ``plt.show()``.
    """
    if not records:
        print("[warning] No candidate records to visualize.")
        return

    primaries = [r for r in records if r.generation == 0]
    nuclei = [r for r in records if r.generation > 0 and is_nucleus(r.final_id)]
    others = [r for r in records if r.generation > 0 and not is_nucleus(r.final_id)]

    fig, axes = plt.subplots(1, 2, figsize=(13, 5))

    # 1. Energy spectra at the end of the trajectories (log-spaced bins)
    ax1 = axes[0]
    energies = np.array([r.final_energy for r in records if r.final_energy > 0]) / EeV
    if energies.size:
        bins = np.logspace(np.log10(energies.min()), np.log10(energies.max()) + 1e-9, config.SPECTRUM_BINS)
        for group, label, color in ((primaries, 'Primaries', 'blue'),
                                    (nuclei, 'Secondary nuclei', 'red'),
                                    (others, 'Other secondaries', 'gray')):
            values = np.array([r.final_energy for r in group if r.final_energy > 0]) / EeV
            if values.size:
                ax1.hist(values, bins=bins, alpha=0.6, label=label, color=color)
        ax1.set_xscale('log')
        ax1.set_yscale('log')
    ax1.set_xlabel('Final Energy (EeV)')
    ax1.set_ylabel('Count')
    ax1.set_title('Energy Spectrum at Trajectory End')
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    # 2. Energy retention of the primaries
    ax2 = axes[1]
    retention = np.array([r.final_energy / r.initial_energy for r in primaries if r.initial_energy > 0])
    ax2.hist(retention, bins=config.SPECTRUM_BINS, color='teal', alpha=0.7)
    if retention.size:
        ax2.axvline(np.mean(retention), color='red', linestyle='--', linewidth=2,
                    label=f'Mean: {np.mean(retention):.3f}')
        ax2.legend()
    ax2.set_xlabel('Energy Retention (Final/Initial)')
    ax2.set_ylabel('Count')
    ax2.set_title('Primary Energy Retention')
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(f"{save_path}_spectra.png", dpi=config.PLOT_DPI, bbox_inches='tight')
        print(f"[info] Saved spectra to {save_path}_spectra.png")

    if show:
        plt.show()
    plt.close(fig)


def visualize_composition(records: List[CandidateRecord], save_path: Optional[str] = None, show: bool = True):
    """Bar chart of the final mass numbers and of the producing processes."""
    if not records:
        print("[warning] No candidate records to visualize.")
        return

    masses = Counter(mass_number(r.final_id) for r in records if is_nucleus(r.final_id))
    tags = Counter(r.tag_origin for r in records)

    fig, axes = plt.subplots(1, 2, figsize=(13, 5))

    ax1 = axes[0]
    if masses:
        a_values = sorted(masses)
        ax1.bar(a_values, [masses[a] for a in a_values], color='purple', alpha=0.7)
    ax1.set_xlabel('Final Mass Number A')
    ax1.set_ylabel('Count')
    ax1.set_title('Mass Composition at Trajectory End')
    ax1.grid(True, alpha=0.3)

    ax2 = axes[1]
    labels = sorted(tags)
    ax2.bar(labels, [tags[t] for t in labels], color='orange', alpha=0.7)
    ax2.set_xlabel('Origin')
    ax2.set_ylabel('Candidates')
    ax2.set_title('Candidates by Producing Process')
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(f"{save_path}_composition.png", dpi=config.PLOT_DPI, bbox_inches='tight')
        print(f"[info] Saved composition to {save_path}_composition.png")

    if show:
        plt.show()
    plt.close(fig)


def print_statistics(records: List[CandidateRecord], n_total: int):
    """Print statistical summary of simulation results.

    Parameters
    ----------
    records : List[CandidateRecord]
        Records of all candidates.
    n_total : int
        Number of primaries simulated.
    """
    if not records:
        print(f"\n[Statistics] No candidate records to display.")
        return

    primaries = [r for r in records if r.generation == 0]
    secondaries = [r for r in records if r.generation > 0]

    print("\n" + "="*60)
    print("PROPAGATION STATISTICS")
    print("="*60)
    print(f"Primaries simulated: {n_total}")
    print(f"Secondaries produced: {len(secondaries)}")
    if secondaries:
        print(f"Deepest generation: {max(r.generation for r in secondaries)}")
        for tag, count in sorted(Counter(r.tag_origin for r in secondaries).items()):
            print(f"  - {tag}: {count} ({100*count/len(secondaries):.2f}%)")
    print()

    initial = np.array([r.initial_energy for r in primaries]) / EeV
    final = np.array([r.final_energy for r in primaries]) / EeV
    lengths = np.array([r.trajectory_length for r in primaries]) / Mpc

    print("Primary Initial Energy (EeV):")
    print(f"  Mean: {np.mean(initial):.4f}, Std: {np.std(initial):.4f}")
    print()
    print("Primary Final Energy (EeV):")
    print(f"  Mean: {np.mean(final):.4f}, Std: {np.std(final):.4f}")
    print(f"  Range: [{np.min(final):.4f}, {np.max(final):.4f}]")
    print()
    print("Primary Trajectory Length (Mpc):")
    print(f"  Mean: {np.mean(lengths):.4f}, Std: {np.std(lengths):.4f}")
    print()
    print("Final Primary Species:")
    for name, count in Counter(describe(r.final_id) for r in primaries).most_common():
        print(f"  {name}: {count}")
    print("="*60 + "\n")
