"""
Plotting subpackage for UHECR propagation results.

Example usage:
    from uhecr_simulation.plotting import visualize_spectra, print_statistics

    visualize_spectra(records, save_path='Figures/uhecr_spectra')
    print_statistics(records, n_total=20)

    # Load exported results for further analysis
    from uhecr_simulation.plotting import load_record_data
    df = load_record_data('Data/candidate_records.csv')
"""

from .results import (
    load_record_data,
    visualize_spectra,
    visualize_composition,
    print_statistics,
)

__all__ = [
    "load_record_data",
    "visualize_spectra",
    "visualize_composition",
    "print_statistics",
]
