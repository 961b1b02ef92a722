"""
Particle identifiers, masses and charges.

Nuclei use the PDG nuclear code ``1000000000 + 10000*Z + 10*A``; leptons and
photons use their plain PDG numbers.
"""

from __future__ import annotations

import math

from .constants import c_squared, eplus, mass_electron, mass_neutron, mass_proton, MeV

ELECTRON = 11
POSITRON = -11
NU_ELECTRON = 12
ANTINU_ELECTRON = -12
MUON = 13
NU_MUON = 14
ANTINU_MUON = -14
NU_TAU = 16
ANTINU_TAU = -16
PHOTON = 22

_NUCLEUS_OFFSET = 1000000000

# Semi-empirical (Weizsäcker) mass formula coefficients (MeV)
_A_VOLUME = 15.75
_A_SURFACE = 17.8
_A_COULOMB = 0.711
_A_ASYMMETRY = 23.7
_A_PAIRING = 11.18

_MASS_MUON = 105.6583755 * MeV / c_squared


def nucleus_id(a: int, z: int) -> int:
    """Return the PDG code of the nucleus with mass number ``a`` and charge ``z``.

    Raises
    ------
    ValueError
        If the combination does not describe a nucleus.
    """
    if z < 0:
        raise ValueError(f"nucleus_id: no nucleus with Z < 0 (A={a}, Z={z})")
    if a < 1:
        raise ValueError(f"nucleus_id: no nucleus with A < 1 (A={a}, Z={z})")
    if a < z:
        raise ValueError(f"nucleus_id: no nucleus with A < Z (A={a}, Z={z})")
    if a > 999 or z > 999:
        raise ValueError(f"nucleus_id: A or Z out of range (A={a}, Z={z})")
    return _NUCLEUS_OFFSET + 10000 * z + 10 * a


def is_nucleus(pid: int) -> bool:
    return pid >= _NUCLEUS_OFFSET


def charge_number(pid: int) -> int:
    """Charge number of a nucleus (0 for anything else)."""
    if not is_nucleus(pid):
        return 0
    return (pid // 10000) % 1000


def mass_number(pid: int) -> int:
    """Mass number of a nucleus (0 for anything else)."""
    if not is_nucleus(pid):
        return 0
    return (pid // 10) % 1000


def neutron_number(pid: int) -> int:
    return mass_number(pid) - charge_number(pid)


def charge(pid: int) -> float:
    """Electric charge in coulomb."""
    if is_nucleus(pid):
        return charge_number(pid) * eplus
    if pid in (ELECTRON, MUON):
        return -eplus
    if pid in (POSITRON, -MUON):
        return eplus
    return 0.0


def nuclear_mass(a: int, z: int) -> float:
    """Nuclear rest mass in kg from the semi-empirical mass formula.

    Free nucleons return the proton and neutron masses exactly.
    """
    n = a - z
    if a == 1:
        return mass_proton if z == 1 else mass_neutron

    if a % 2 == 1:
        pairing = 0.0
    elif z % 2 == 0:
        pairing = _A_PAIRING / math.sqrt(a)
    else:
        pairing = -_A_PAIRING / math.sqrt(a)

    binding = (
        _A_VOLUME * a
        - _A_SURFACE * a ** (2.0 / 3.0)
        - _A_COULOMB * z * (z - 1) / a ** (1.0 / 3.0)
        - _A_ASYMMETRY * (a - 2 * z) ** 2 / a
        + pairing
    )
    binding = max(binding, 0.0)
    return z * mass_proton + n * mass_neutron - binding * MeV / c_squared


def particle_mass(pid: int) -> float:
    """Rest mass in kg; zero for photons and neutrinos."""
    if is_nucleus(pid):
        return nuclear_mass(mass_number(pid), charge_number(pid))
    if abs(pid) == ELECTRON:
        return mass_electron
    if abs(pid) == MUON:
        return _MASS_MUON
    return 0.0


def describe(pid: int) -> str:
    """Short human readable name, e.g. ``'(A=12, Z=6)'`` or ``'photon'``."""
    if is_nucleus(pid):
        return f"(A={mass_number(pid)}, Z={charge_number(pid)})"
    names = {
        ELECTRON: "electron",
        POSITRON: "positron",
        PHOTON: "photon",
        NU_ELECTRON: "nu_e",
        ANTINU_ELECTRON: "anti_nu_e",
        NU_MUON: "nu_mu",
        ANTINU_MUON: "anti_nu_mu",
        NU_TAU: "nu_tau",
        ANTINU_TAU: "anti_nu_tau",
    }
    return names.get(pid, f"pid {pid}")
