"""
Testing subpackage for the UHECR propagation simulation.

This subpackage provides synthetic interaction tables in the same file
formats as the physics data, for tests and for running the simulation
without installed data.

Example usage:
    from uhecr_simulation.testing import write_all_tables

    data_dir = write_all_tables('tables')
    pd = PhotoDisintegration(CMB(), data_dir=data_dir)
"""

from .synthetic_tables import (
    synthetic_isotopes,
    write_photodisintegration_tables,
    write_pair_production_tables,
    write_pion_production_table,
    write_nuclear_decay_tables,
    write_elastic_scattering_tables,
    write_all_tables,
    SYNTHETIC_DECAYS,
)

__all__ = [
    "synthetic_isotopes",
    "write_photodisintegration_tables",
    "write_pair_production_tables",
    "write_pion_production_table",
    "write_nuclear_decay_tables",
    "write_elastic_scattering_tables",
    "write_all_tables",
    "SYNTHETIC_DECAYS",
]
