"""
Units and physical constants.

All quantities inside the simulation are SI: metres, seconds, joules,
kilograms, coulombs and tesla. Multiply by a unit to convert into the
internal system, divide to convert back (``energy / EeV``).
"""

from scipy import constants as _sc

# Base units
meter = 1.0
second = 1.0
joule = 1.0
kilogram = 1.0
coulomb = 1.0
tesla = 1.0

# Derived units
kilometer = 1.0e3 * meter
gauss = 1.0e-4 * tesla
nanogauss = 1.0e-9 * gauss
microgauss = 1.0e-6 * gauss

# Physical constants
c_light = _sc.c  # m/s
eplus = _sc.e  # C
mass_proton = _sc.m_p  # kg
mass_neutron = _sc.m_n  # kg
mass_electron = _sc.m_e  # kg
amu = _sc.atomic_mass  # kg
c_squared = c_light * c_light

# Energy
eV = _sc.electron_volt
keV = 1.0e3 * eV
MeV = 1.0e6 * eV
GeV = 1.0e9 * eV
TeV = 1.0e12 * eV
PeV = 1.0e15 * eV
EeV = 1.0e18 * eV
ZeV = 1.0e21 * eV

# Distance
parsec = _sc.parsec
kpc = 1.0e3 * parsec
Mpc = 1.0e6 * parsec
Gpc = 1.0e9 * parsec
