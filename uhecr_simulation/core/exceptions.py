"""
Exception hierarchy for the propagation core.

Table problems are configuration errors raised while a module is being set
up. ``SecondaryProductionError`` is the only error raised on the simulation
path; it carries the random seed state needed to replay the failing history.
"""

from __future__ import annotations

from typing import Optional


class UHECRSimError(Exception):
    """Base class for all errors raised by uhecr_simulation."""
    pass


class TableLoadError(UHECRSimError, FileNotFoundError):
    """An interaction table file could not be opened."""
    pass


class TableFormatError(UHECRSimError, ValueError):
    """An interaction table file contains a malformed line."""

    def __init__(self, filename: str, line_number: Optional[int], reason: str):
        self.filename = filename
        self.line_number = line_number
        self.reason = reason
        where = f"{filename}:{line_number}" if line_number is not None else filename
        super().__init__(f"{where}: {reason}")


class SecondaryProductionError(UHECRSimError, RuntimeError):
    """A requested secondary particle could not be constructed.

    Attributes
    ----------
    seed_state : str
        Base64 encoded state of the random stream *at the time of the failure*.
        Restore it with ``RandomSource.from_seed_state`` to replay.
    channel : int
        Channel code that was being realised.
    candidate_description : str
        Description of the primary at the time of the failure.
    """

    def __init__(self, message: str, seed_state: str, channel: int, candidate_description: str):
        self.seed_state = seed_state
        self.channel = channel
        self.candidate_description = candidate_description
        super().__init__(
            f"{message} (channel {channel}, candidate {candidate_description}). "
            f"Random seed state for reproduction: {seed_state}"
        )
