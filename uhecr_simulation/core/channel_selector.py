"""
Weighted selection of reaction channels.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional, Sequence

import numpy as np

from .rate_table import LG_MAX, LG_MIN, Branch, grid_index, interpolate_equidistant

logger = logging.getLogger(__name__)

LookupPolicy = Literal["nearest", "linear"]


def branching_ratios(branches: Sequence[Branch], lg: float, policy: LookupPolicy = "nearest") -> np.ndarray:
    """Branching ratio of every branch at log10(Lorentz factor) ``lg``.

    Parameters
    ----------
    branches : sequence of Branch
        Channels of one isotope.
    lg : float
        log10 of the Lorentz factor (already redshift corrected).
    policy : {"nearest", "linear"}
        ``"nearest"`` takes the value at the closest grid point, ``"linear"``
        interpolates between the neighbouring grid points.
    """
    if policy == "nearest":
        index = grid_index(lg)
        return np.array([b.branching_ratio[index] for b in branches], dtype=float)
    if policy == "linear":
        return np.array(
            [interpolate_equidistant(lg, LG_MIN, LG_MAX, b.branching_ratio) for b in branches],
            dtype=float,
        )
    raise ValueError(f"Unknown branching ratio policy '{policy}'")


def select_index(ratios: Sequence[float], random) -> Optional[int]:
    """Walk the ratios with one uniform draw; return the selected index.

    The draw is reduced by successive ratios until it is no longer positive.
    If the ratios sum to less than the draw, no channel is selected and
    ``None`` is returned: the residual probability means "no reaction".
    """
    remainder = random.rand()
    for index, ratio in enumerate(ratios):
        remainder -= ratio
        if remainder <= 0.0:
            return index
    return None


def select_branch(branches: Sequence[Branch], ratios: Sequence[float], random) -> Optional[Branch]:
    """Select one of ``branches`` with probabilities ``ratios``.

    Returns ``None`` for an empty branch list or when the draw falls into the
    residual probability ``1 - sum(ratios)``.
    """
    if len(branches) == 0:
        logger.debug("No branches tabulated, no reaction")
        return None
    index = select_index(ratios, random)
    if index is None:
        logger.debug("Draw fell into residual branching probability %.3g, no reaction", 1.0 - float(np.sum(ratios)))
        return None
    return branches[index]
