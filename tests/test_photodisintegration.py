"""
光致蜕变模块的单元测试
"""

import math

import numpy as np
import pytest

from uhecr_simulation.core.constants import EeV, Mpc
from uhecr_simulation.core.data_classes import Candidate
from uhecr_simulation.core.fields import CMB, PhotonField
from uhecr_simulation.core.particle_id import PHOTON, nucleus_id
from uhecr_simulation.core.photodisintegration import PhotoDisintegration
from uhecr_simulation.testing import write_photodisintegration_tables


def totals(candidate):
    particles = [candidate] + candidate.secondaries
    a = sum(p.current.mass_number for p in particles)
    z = sum(p.current.charge_number for p in particles)
    e = sum(p.current.energy for p in particles)
    return a, z, e


@pytest.fixture
def pd(table_dir):
    return PhotoDisintegration(CMB(), data_dir=table_dir)


class TestPhotoDisintegration:
    """测试光致蜕变的随机相互作用"""

    def test_long_step_conserves_nucleons_and_energy(self, pd, carbon, random):
        """测试 C-12 在 1000 Mpc 内完全蜕变时 A, Z 和能量守恒"""
        a0, z0, e0 = totals(carbon)
        carbon.current_step = 1000 * Mpc

        n = pd.process(carbon, random)

        assert n > 0
        assert carbon.current.mass_number < 12
        assert carbon.current.energy < e0
        assert len(carbon.secondaries) == n
        a, z, e = totals(carbon)
        assert (a, z) == (a0, z0)
        assert e == pytest.approx(e0)

    def test_non_nucleus_untouched(self, pd, random):
        """测试非原子核粒子完全不受影响"""
        photon = Candidate.create(PHOTON, 100 * EeV)
        photon.current_step = 1000 * Mpc
        before = photon.current.copy()
        state = random.get_seed_state()

        assert pd.process(photon, random) == 0
        assert photon.current.energy == before.energy
        assert np.array_equal(photon.current.position, before.position)
        assert photon.secondaries == []
        assert math.isinf(photon.next_step)
        assert random.get_seed_state() == state

    def test_next_step_limited(self, pd, carbon, random):
        carbon.current_step = 1.0
        assert pd.process(carbon, random) == 0
        assert carbon.next_step == pytest.approx(0.1 / (0.05 / Mpc))

    def test_below_threshold(self, pd, random):
        low = Candidate.create(nucleus_id(12, 6), 1 * EeV)
        low.current_step = 1000 * Mpc
        assert pd.process(low, random) == 0
        assert low.current.mass_number == 12
        assert math.isinf(low.next_step)

    def test_radial_scaling(self, table_dir, carbon):
        field = PhotonField("CMB", radial_profile=lambda r: 0.5)
        pd = PhotoDisintegration(field, data_dir=table_dir)
        assert pd.interaction_rate(carbon) == pytest.approx(0.025 / Mpc)

    def test_redshift_scaling(self, pd):
        candidate = Candidate.create(nucleus_id(12, 6), 100 * EeV, redshift=1.0)
        assert pd.interaction_rate(candidate) == pytest.approx(4 * 0.05 / Mpc)


class TestPerformInteraction:
    """测试给定反应道的执行"""

    def test_neutron_emission(self, pd, carbon, random):
        pd.perform_interaction(carbon, 100000, random)
        assert carbon.current.mass_number == 11
        assert carbon.current.charge_number == 6
        assert carbon.secondaries[0].current.id == nucleus_id(1, 0)
        assert carbon.created.mass_number == 12

    def test_interaction_tag(self, pd, carbon, random):
        assert pd.interaction_tag == "PD"
        pd.interaction_tag = "PD_custom"
        assert pd.interaction_tag == "PD_custom"
        pd.perform_interaction(carbon, 10000, random)
        assert carbon.secondaries[0].tag_origin == "PD_custom"

    def test_deexcitation_photons(self, tmp_path, carbon, random):
        write_photodisintegration_tables(tmp_path, photon_probability=1.0)
        pd = PhotoDisintegration(CMB(), have_photons=True, data_dir=tmp_path)
        e0 = carbon.current.energy

        pd.perform_interaction(carbon, 100000, random)

        ids = [s.current.id for s in carbon.secondaries]
        assert ids.count(PHOTON) == 1
        total = carbon.current.energy + sum(s.current.energy for s in carbon.secondaries)
        assert total == pytest.approx(e0)


class TestLossLength:
    """测试能量损失长度"""

    def test_carbon(self, pd):
        # 每次相互作用损失一个核子
        assert pd.loss_length(nucleus_id(12, 6), 1.0e10) == pytest.approx(12 / 0.05 * Mpc)

    def test_redshift(self, pd):
        gamma = 10.0 ** 9.5
        assert pd.loss_length(nucleus_id(12, 6), gamma, 1.0) == pytest.approx(12 / 0.05 / 8 * Mpc)

    def test_no_interaction(self, pd):
        assert math.isinf(pd.loss_length(PHOTON, 1.0e10))
        assert math.isinf(pd.loss_length(nucleus_id(12, 6), 1.0e8))
        assert math.isinf(pd.loss_length(nucleus_id(56, 26), 1.0e10))
