"""
Interaction table path utilities.

This module resolves interaction table files (rates, branching ratios,
photon emission lines, decay tables) either from the package data directory
or from a user supplied directory.

Example usage:
    from uhecr_simulation.data_paths import get_data_path

    rate_file = get_data_path("Photodisintegration/rate_CMB.txt")
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from . import config


def get_package_dir() -> Path:
    """Get the root directory of the uhecr_simulation package.

    Returns
    -------
    Path
        Path to the uhecr_simulation package directory.
    """
    return Path(__file__).resolve().parent


def get_data_dir(data_dir: Optional[Union[str, Path]] = None) -> Path:
    """Get the interaction table directory.

    Parameters
    ----------
    data_dir : str or Path, optional
        Explicit directory. Defaults to ``config.INTERACTION_DATA_DIR``.
    """
    if data_dir is None:
        return Path(config.INTERACTION_DATA_DIR)
    return Path(data_dir)


def get_data_path(relative: str, data_dir: Optional[Union[str, Path]] = None) -> Path:
    """Resolve a table file relative to the interaction data directory.

    The file is not required to exist; loaders raise ``TableLoadError`` when
    they cannot open it.

    Example
    -------
    >>> get_data_path("nuclear_decay.txt", "/tmp/tables")
    PosixPath('/tmp/tables/nuclear_decay.txt')
    """
    return get_data_dir(data_dir) / relative


def has_interaction_data(data_dir: Optional[Union[str, Path]] = None) -> bool:
    """Whether the interaction data directory exists and is non-empty."""
    directory = get_data_dir(data_dir)
    return directory.is_dir() and any(directory.iterdir())


def list_table_files(data_dir: Optional[Union[str, Path]] = None) -> list[Path]:
    """List all table files below the interaction data directory.

    Returns
    -------
    list[Path]
        Sorted list of ``*.txt`` files.
    """
    return sorted(get_data_dir(data_dir).rglob('*.txt'))
