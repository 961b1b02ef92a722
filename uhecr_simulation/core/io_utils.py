"""
Data import/export utilities for the propagation simulation.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import List

from .constants import EeV, Mpc
from .data_classes import CandidateRecord
from .particle_id import describe


RECORD_HEADERS = [
    'primary_index',
    'generation',
    'tag_origin',
    'initial_id',
    'final_id',
    'final_particle',
    'initial_energy_EeV',
    'final_energy_EeV',
    'trajectory_length_Mpc',
    'final_position_x_Mpc',
    'final_position_y_Mpc',
    'final_position_z_Mpc',
    'n_secondaries',
    'n_steps',
]


def _record_row(record: CandidateRecord) -> list:
    return [
        record.primary_index,
        record.generation,
        record.tag_origin,
        record.initial_id,
        record.final_id,
        describe(record.final_id),
        record.initial_energy / EeV,
        record.final_energy / EeV,
        record.trajectory_length / Mpc,
        record.final_position[0] / Mpc,
        record.final_position[1] / Mpc,
        record.final_position[2] / Mpc,
        record.n_secondaries,
        record.n_steps,
    ]


def export_records_to_csv(records: List[CandidateRecord], filename: str = "candidate_records.csv"):
    """Export candidate records to a CSV file.

    Parameters
    ----------
    records : List[CandidateRecord]
        Records from :func:`run_simulation`.
    filename : str
        Output CSV filename.
    """
    if not records:
        print("[warning] No candidate records to export.")
        return

    output_path = Path(filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(filename, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(RECORD_HEADERS)
        for record in records:
            writer.writerow(_record_row(record))

    print(f"[info] Candidate data exported to {filename}")
    print(f"[info] Total records: {len(records)}")
    print(f"[info] Primaries: {sum(1 for r in records if r.generation == 0)}")


def export_secondaries_to_csv(records: List[CandidateRecord], filename: str = "secondaries.csv"):
    """Export only the secondary candidates (generation > 0) to a CSV file."""
    secondaries = [r for r in records if r.generation > 0]
    if not secondaries:
        print("[warning] No secondaries to export.")
        return

    output_path = Path(filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(filename, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(RECORD_HEADERS)
        for record in secondaries:
            writer.writerow(_record_row(record))

    tags = sorted({r.tag_origin for r in secondaries})
    print(f"[info] Secondary data exported to {filename}")
    print(f"[info] Total secondaries: {len(secondaries)} (processes: {', '.join(tags)})")
