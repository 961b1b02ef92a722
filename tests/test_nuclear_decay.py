"""
原子核衰变模块的单元测试
"""

import math

import pytest

from uhecr_simulation.core.constants import EeV, MeV, c_light, kilometer
from uhecr_simulation.core.data_classes import Candidate
from uhecr_simulation.core.nuclear_decay import (
    NuclearDecay,
    beta_q_value,
    decay_mass_change,
    parse_decay_channel,
)
from uhecr_simulation.core.particle_id import ANTINU_ELECTRON, ELECTRON, PHOTON, charge, nucleus_id
from uhecr_simulation.testing import write_nuclear_decay_tables

NEUTRON = nucleus_id(1, 0)
PROTON = nucleus_id(1, 1)
HELIUM4 = nucleus_id(4, 2)


def totals(candidate):
    particles = [candidate] + candidate.secondaries
    a = sum(p.current.mass_number for p in particles)
    q = sum(charge(p.current.id) for p in particles)
    e = sum(p.current.energy for p in particles)
    return a, q, e


@pytest.fixture
def decay(table_dir):
    return NuclearDecay(have_electrons=True, have_neutrinos=True, data_dir=table_dir)


class TestDecayChannels:
    """测试衰变道编码"""

    def test_parse(self):
        assert parse_decay_channel(10100) == (1, 0, 1, 0, 0)
        assert parse_decay_channel(1) == (0, 0, 0, 0, 1)

    def test_mass_change(self):
        assert decay_mass_change(10000) == (0, 1)
        assert decay_mass_change(1000) == (0, -1)
        assert decay_mass_change(100) == (-4, -2)
        assert decay_mass_change(10) == (-1, -1)
        assert decay_mass_change(1) == (-1, 0)

    def test_q_value(self):
        # n -> p e anti_nu: 0.78 MeV
        assert beta_q_value(1, 0, True) == pytest.approx(0.782 * MeV, rel=0.01)
        # 被质量公式禁止的衰变取下限
        assert beta_q_value(12, 6, True) == pytest.approx(0.1 * MeV)


class TestDecayRate:
    """测试实验室系衰变率"""

    def test_neutron(self, decay):
        gamma = 1.0e10
        assert decay.decay_rate(NEUTRON, gamma) == pytest.approx(1.0 / (879.4 * gamma * c_light))

    def test_redshift(self, decay):
        neutron = Candidate.create(NEUTRON, 1 * EeV, redshift=1.0)
        expected = decay.decay_rate(NEUTRON, neutron.current.lorentz_factor) / 2.0
        assert decay.interaction_rate(neutron) == pytest.approx(expected)

    def test_stable(self, decay, carbon, random):
        assert decay.decay_rate(nucleus_id(12, 6), 1.0e10) == 0.0
        assert decay.decay_rate(PHOTON, 1.0e10) == 0.0
        carbon.current_step = 1.0e30
        assert decay.process(carbon, random) == 0
        assert carbon.current.id == nucleus_id(12, 6)


class TestPerformInteraction:
    """测试各衰变道的守恒"""

    def test_neutron_beta_decay(self, decay, random):
        neutron = Candidate.create(NEUTRON, 1 * EeV)
        a0, q0, e0 = totals(neutron)
        decay.perform_interaction(neutron, 10000, random)

        assert neutron.current.id == PROTON
        assert sorted(s.current.id for s in neutron.secondaries) == sorted([ELECTRON, ANTINU_ELECTRON])
        a, q, e = totals(neutron)
        assert a == a0
        assert q == pytest.approx(q0, abs=1e-30)
        assert e == pytest.approx(e0)

    def test_beta_plus(self, decay, random):
        c9 = Candidate.create(nucleus_id(9, 6), 10 * EeV)
        decay.perform_interaction(c9, 1000, random)
        assert c9.current.id == nucleus_id(9, 5)
        a, q, _ = totals(c9)
        assert a == 9
        assert q == pytest.approx(charge(nucleus_id(9, 6)))

    def test_alpha_decay(self, decay, random):
        be8 = Candidate.create(nucleus_id(8, 4), 10 * EeV)
        decay.perform_interaction(be8, 100, random)
        assert be8.current.id == HELIUM4
        assert [s.current.id for s in be8.secondaries] == [HELIUM4]
        assert totals(be8)[2] == pytest.approx(10 * EeV)

    def test_nucleon_emission(self, decay, random):
        li5 = Candidate.create(nucleus_id(5, 3), 10 * EeV)
        decay.perform_interaction(li5, 10, random)
        assert li5.current.id == HELIUM4
        assert [s.current.id for s in li5.secondaries] == [PROTON]

        he5 = Candidate.create(nucleus_id(5, 2), 10 * EeV)
        decay.perform_interaction(he5, 1, random)
        assert he5.current.id == HELIUM4
        assert [s.current.id for s in he5.secondaries] == [NEUTRON]

    def test_deexcitation_photon(self, tmp_path, random):
        write_nuclear_decay_tables(tmp_path, photon_probability=1.0)
        decay = NuclearDecay(have_photons=True, data_dir=tmp_path)
        he6 = Candidate.create(nucleus_id(6, 2), 10 * EeV)
        e0 = he6.current.energy

        decay.perform_interaction(he6, 10000, random)

        assert he6.current.id == nucleus_id(6, 3)
        assert [s.current.id for s in he6.secondaries] == [PHOTON]
        assert he6.current.energy + he6.secondaries[0].current.energy < e0


class TestProcess:
    """测试随机步进"""

    def test_short_lived_decays(self, decay, random):
        """测试衰变长度约 40 m 的 Be-8 在 10 km 内必然衰变"""
        be8 = Candidate.create(nucleus_id(8, 4), 10 * EeV)
        be8.current_step = 10 * kilometer

        assert decay.process(be8, random) == 1
        assert be8.current.id == HELIUM4
        assert be8.secondaries[0].tag_origin == "ND"

    def test_next_step_limited(self, decay, random):
        neutron = Candidate.create(NEUTRON, 1 * EeV)
        neutron.current_step = 1.0
        decay.process(neutron, random)
        gamma = neutron.current.lorentz_factor
        assert neutron.next_step == pytest.approx(0.1 * 879.4 * gamma * c_light)


class TestLossLength:
    """测试核子损失长度"""

    def test_alpha_emitter(self, decay):
        gamma = 1.0e9
        assert decay.loss_length(nucleus_id(8, 4), gamma) == pytest.approx(2 * 1.0e-16 * gamma * c_light)

    def test_pure_beta_emitter(self, decay):
        assert math.isinf(decay.loss_length(nucleus_id(6, 2), 1.0e9))

    def test_stable(self, decay):
        assert math.isinf(decay.loss_length(nucleus_id(12, 6), 1.0e9))
