"""
Stochastic interaction stepping.

A single stepping algorithm serves every free-path process. It is
parameterised by a rate provider (the local, fully scaled interaction rate
of a candidate) and an interaction effect (what happens when the particle
interacts). For one propagation step it:

1. evaluates the rate; a rate of zero means the process does not apply,
2. draws an exponentially distributed free path,
3. either limits the next step to a fraction of the mean free path (no
   interaction within the step) or triggers the interaction and repeats with
   the rest of the step.

The loop body runs at least once, also for a zero step length, so the next
step is always limited.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Optional, Protocol, Tuple

from .. import config
from .data_classes import Candidate
from .fields import PhotonField
from .random_source import RandomSource

logger = logging.getLogger(__name__)


class StepState(Enum):
    """States of one pass through the stepping loop."""

    IDLE = "idle"
    RATE_EVALUATED = "rate_evaluated"
    INTERACTION_PENDING = "interaction_pending"
    CONSUMED = "consumed"


class RateProvider(Protocol):
    def interaction_rate(self, candidate: Candidate) -> float:
        """Scaled local interaction rate (1/m); 0 if the process does not apply."""
        ...


class InteractionEffect(Protocol):
    def interact(self, candidate: Candidate, random: RandomSource) -> None:
        """Realise one interaction on ``candidate``."""
        ...


class StochasticStepper:
    """Free-path sampling loop shared by all stochastic processes.

    Parameters
    ----------
    rates : RateProvider
        Source of the local interaction rate.
    effect : InteractionEffect
        Applied once per sampled interaction.
    limit : float
        The next step is limited to ``limit`` mean free paths when no
        interaction occurs.
    """

    def __init__(self, rates: RateProvider, effect: InteractionEffect, limit: float = config.DEFAULT_LIMIT):
        self.rates = rates
        self.effect = effect
        self.limit = limit

    def step(self, candidate: Candidate, random: RandomSource) -> int:
        """Process the current step of ``candidate``.

        Returns
        -------
        int
            Number of interactions that took place.
        """
        return self.run(candidate, random)[0]

    def run(self, candidate: Candidate, random: RandomSource) -> Tuple[int, StepState]:
        """Like :meth:`step`, also returning the state the loop ended in.

        The stepper keeps no per-step state of its own, so one instance can
        serve candidates on several threads.
        """
        remaining = candidate.current_step
        interactions = 0
        while True:
            state = StepState.IDLE
            rate = self.rates.interaction_rate(candidate)
            if not (math.isfinite(rate) and rate > 0.0):
                if rate != 0.0:
                    logger.debug("Ignoring unusable interaction rate %r for %s", rate, candidate.description())
                return interactions, state
            state = StepState.RATE_EVALUATED

            free_path = random.rand_exponential() / rate
            if remaining < free_path:
                candidate.limit_next_step(self.limit / rate)
                return interactions, state
            state = StepState.INTERACTION_PENDING

            self.effect.interact(candidate, random)
            interactions += 1
            state = StepState.CONSUMED

            remaining -= free_path
            if remaining <= 0.0:
                return interactions, state


def comoving_rate_scaling(field: PhotonField, z: float) -> float:
    """Cosmological scaling of a rate per comoving distance, (1+z)^2."""
    return (1.0 + z) ** 2 * field.get_redshift_scaling(z)


def physical_rate_scaling(field: PhotonField, z: float) -> float:
    """Cosmological scaling of a rate per physical distance, (1+z)^3."""
    return (1.0 + z) ** 3 * field.get_redshift_scaling(z)


class InteractionModule:
    """Base class of the interaction processes.

    Subclasses implement :meth:`interaction_rate` and :meth:`interact`; the
    module itself acts as rate provider and interaction effect of its own
    :class:`StochasticStepper`. Processes with continuous losses override
    :meth:`process` instead.
    """

    default_tag = ""

    def __init__(self, limit: float = config.DEFAULT_LIMIT, tag: Optional[str] = None):
        self._interaction_tag = self.default_tag if tag is None else tag
        self._stepper = StochasticStepper(self, self, limit)

    @property
    def limit(self) -> float:
        return self._stepper.limit

    @limit.setter
    def limit(self, value: float) -> None:
        self._stepper.limit = value

    @property
    def interaction_tag(self) -> str:
        """Label attached to every secondary this module produces."""
        return self._interaction_tag

    @interaction_tag.setter
    def interaction_tag(self, tag: str) -> None:
        self._interaction_tag = tag

    @property
    def description(self) -> str:
        return type(self).__name__

    def process(self, candidate: Candidate, random: RandomSource) -> int:
        return self._stepper.step(candidate, random)

    def interaction_rate(self, candidate: Candidate) -> float:
        raise NotImplementedError

    def interact(self, candidate: Candidate, random: RandomSource) -> None:
        raise NotImplementedError
