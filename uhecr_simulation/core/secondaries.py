"""
Secondary particle emission.

Turns a selected reaction channel into secondary candidates and updates the
primary. Energy, mass number and charge are booked exactly: whatever a
secondary carries away is taken from the primary.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from .data_classes import Candidate
from .exceptions import SecondaryProductionError
from .particle_id import (
    ANTINU_ELECTRON,
    ANTINU_MUON,
    ELECTRON,
    NU_ELECTRON,
    NU_MUON,
    PHOTON,
    POSITRON,
    nucleus_id,
)
from .constants import c_squared, mass_electron
from .rate_table import PhotonEmission, grid_index

logger = logging.getLogger(__name__)

# Disintegration channel digits: (place value, A, Z) of the emitted fragment
FRAGMENT_DIGITS: Tuple[Tuple[int, int, int], ...] = (
    (100000, 1, 0),  # neutron
    (10000, 1, 1),   # proton
    (1000, 2, 1),    # deuteron
    (100, 3, 1),     # triton
    (10, 3, 2),      # helium-3
    (1, 4, 2),       # helium-4
)

# Energy fractions of the pi+- decay chain (muon neutrino, electron neutrino,
# muon anti/neutrino, electron); they sum to one.
CHARGED_PION_FRACTIONS = (0.25, 0.25, 0.25, 0.25)


def digit(value: int, place: int) -> int:
    """Decimal digit of ``value`` at ``place`` (1, 10, 100, ...)."""
    return (value // place) % 10


def parse_disintegration_channel(channel: int) -> List[Tuple[int, int, int]]:
    """List of ``(count, A, Z)`` for every fragment species in ``channel``."""
    return [(digit(channel, place), a, z) for place, a, z in FRAGMENT_DIGITS]


def channel_mass_change(channel: int) -> Tuple[int, int]:
    """Change ``(dA, dZ)`` of the primary when ``channel`` is realised."""
    d_a = 0
    d_z = 0
    for count, a, z in parse_disintegration_channel(channel):
        d_a -= count * a
        d_z -= count * z
    return d_a, d_z


def nucleons_lost(channel: int) -> int:
    return -channel_mass_change(channel)[0]


def production_error(message: str, candidate: Candidate, channel: int, random, cause: Exception) -> SecondaryProductionError:
    """Log and build the fatal error for a failed secondary production."""
    seed_state = random.get_seed_state()
    logger.error(
        "Secondary production failed: %s. Channel %d on candidate %s. "
        "Random seed %s, state: %s",
        cause, channel, candidate.description(), random.describe_seed(), seed_state,
    )
    return SecondaryProductionError(
        f"{message}: {cause} [{random.describe_seed()}]",
        seed_state=seed_state,
        channel=channel,
        candidate_description=candidate.description(),
    )


def emit_fragments(candidate: Candidate, channel: int, random, tag: str) -> np.ndarray:
    """Realise a disintegration channel on ``candidate``.

    Each fragment is emitted with the energy per nucleon of the primary,
    at a point drawn uniformly on the last propagation step. The primary is
    then reduced to the remaining nucleus and ``created`` is updated.

    Returns
    -------
    np.ndarray
        The emission position (also used for photons of the same event).

    Raises
    ------
    SecondaryProductionError
        If a fragment or the remnant is not a valid nucleus.
    """
    state = candidate.current
    a = state.mass_number
    z = state.charge_number
    d_a, d_z = channel_mass_change(channel)
    energy_per_nucleon = state.energy / a
    position = random.random_interpolated_position(candidate.previous.position, state.position)

    try:
        remnant = nucleus_id(a + d_a, z + d_z)
        for count, frag_a, frag_z in parse_disintegration_channel(channel):
            for _ in range(count):
                candidate.add_secondary(nucleus_id(frag_a, frag_z), energy_per_nucleon * frag_a, position, 1.0, tag)
    except ValueError as e:
        raise production_error("Could not create disintegration products", candidate, channel, random, e) from e

    candidate.created = state.copy()
    state.id = remnant
    state.energy = energy_per_nucleon * (a + d_a)
    return position


def emit_deexcitation_photons(
    candidate: Candidate,
    emissions: Sequence[PhotonEmission],
    position: np.ndarray,
    random,
    tag: str,
) -> int:
    """Emit de-excitation photons of the (already updated) primary.

    Every line is emitted independently with its tabulated probability at the
    primary's own Lorentz factor. The rest frame photon is emitted
    isotropically and boosted, ``E = eps * gamma * (1 - cos(theta))``.

    Returns
    -------
    int
        Number of photons emitted.
    """
    if not emissions:
        return 0
    state = candidate.current
    lorentz_factor = state.lorentz_factor
    index = grid_index(math.log10(lorentz_factor * (1.0 + candidate.redshift)))

    emitted = 0
    for emission in emissions:
        if random.rand() > emission.emission_probability[index]:
            continue
        cos_theta = 2.0 * random.rand() - 1.0
        energy = emission.energy * lorentz_factor * (1.0 - cos_theta)
        if energy <= 0.0 or energy >= state.energy:
            continue
        candidate.add_secondary(PHOTON, energy, position, 1.0, tag)
        state.energy -= energy
        emitted += 1
    return emitted


def _boosted_energy(rest_energy: float, rest_momentum: float, lorentz_factor: float, random) -> float:
    """Lab energy of a particle emitted isotropically in the rest frame (beta ~ 1)."""
    cos_theta = 2.0 * random.rand() - 1.0
    return lorentz_factor * (rest_energy + rest_momentum * cos_theta)


def emit_beta_decay(
    candidate: Candidate,
    beta_minus: bool,
    q_value: float,
    random,
    tag: str,
    have_electrons: bool = False,
    have_neutrinos: bool = False,
) -> np.ndarray:
    """Convert one neutron into a proton (beta minus) or vice versa.

    The Q-value ``q_value`` (J) is shared uniformly between the charged
    lepton's kinetic energy and the neutrino; both are boosted to the lab
    frame. The daughter nucleus keeps the remaining energy, whether or not
    the leptons are tracked.
    """
    state = candidate.current
    a = state.mass_number
    z = state.charge_number
    channel = 10000 if beta_minus else 1000
    lorentz_factor = state.lorentz_factor
    position = random.random_interpolated_position(candidate.previous.position, state.position)

    try:
        daughter = nucleus_id(a, z + 1 if beta_minus else z - 1)
    except ValueError as e:
        raise production_error("Could not create beta decay daughter", candidate, channel, random, e) from e

    electron_rest = mass_electron * c_squared
    fraction = random.rand()
    e_star = electron_rest + fraction * q_value
    p_star = math.sqrt(max(e_star * e_star - electron_rest * electron_rest, 0.0))
    nu_star = (1.0 - fraction) * q_value

    electron_energy = _boosted_energy(e_star, p_star, lorentz_factor, random)
    neutrino_energy = _boosted_energy(nu_star, nu_star, lorentz_factor, random)

    if have_electrons:
        candidate.add_secondary(ELECTRON if beta_minus else POSITRON, electron_energy, position, 1.0, tag)
    if have_neutrinos and neutrino_energy > 0.0:
        candidate.add_secondary(ANTINU_ELECTRON if beta_minus else NU_ELECTRON, neutrino_energy, position, 1.0, tag)

    candidate.created = state.copy()
    state.id = daughter
    state.energy -= electron_energy + neutrino_energy
    return position


def emit_pion_decay_products(
    candidate: Candidate,
    pion_charge: int,
    pion_energy: float,
    position: np.ndarray,
    random,
    tag: str,
    have_photons: bool = False,
    have_neutrinos: bool = False,
    have_electrons: bool = False,
) -> None:
    """Emit the stable decay products of a pion of energy ``pion_energy``.

    pi0 -> 2 photons (isotropic two-body split).
    pi+ -> e+ nu_e anti_nu_mu nu_mu, pi- -> e- anti_nu_e nu_mu anti_nu_mu,
    with fixed energy fractions. Untracked species are simply dropped.
    """
    if pion_charge == 0:
        cos_theta = 2.0 * random.rand() - 1.0
        first = 0.5 * pion_energy * (1.0 + cos_theta)
        if have_photons:
            candidate.add_secondary(PHOTON, first, position, 1.0, tag)
            candidate.add_secondary(PHOTON, pion_energy - first, position, 1.0, tag)
        return

    if pion_charge > 0:
        products = ((NU_MUON, False), (NU_ELECTRON, False), (ANTINU_MUON, False), (POSITRON, True))
    else:
        products = ((ANTINU_MUON, False), (ANTINU_ELECTRON, False), (NU_MUON, False), (ELECTRON, True))

    remaining = pion_energy
    for (pid, is_electron), fraction in zip(products, CHARGED_PION_FRACTIONS):
        energy = remaining if is_electron else fraction * pion_energy
        remaining -= energy
        if is_electron and have_electrons:
            candidate.add_secondary(pid, energy, position, 1.0, tag)
        elif not is_electron and have_neutrinos:
            candidate.add_secondary(pid, energy, position, 1.0, tag)
