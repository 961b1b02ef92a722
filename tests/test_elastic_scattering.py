"""
弹性散射模块的单元测试
"""

import math

import pytest

from uhecr_simulation.core.constants import EeV, Mpc
from uhecr_simulation.core.data_classes import Candidate
from uhecr_simulation.core.elastic_scattering import ElasticScattering
from uhecr_simulation.core.fields import CMB
from uhecr_simulation.core.particle_id import PHOTON, nucleus_id


@pytest.fixture
def scattering(table_dir):
    return ElasticScattering(CMB(), data_dir=table_dir)


class TestElasticScattering:
    """测试光子发射"""

    def test_rate(self, scattering, carbon):
        assert scattering.interaction_rate(carbon) == pytest.approx(0.01 / Mpc)

    def test_no_rate(self, scattering):
        assert scattering.interaction_rate(Candidate.create(PHOTON, 100 * EeV)) == 0.0
        assert scattering.interaction_rate(Candidate.create(nucleus_id(12, 6), 1 * EeV)) == 0.0

    def test_interact_keeps_identity(self, scattering, carbon, random):
        e0 = carbon.current.energy
        scattering.interact(carbon, random)

        assert carbon.current.id == nucleus_id(12, 6)
        assert len(carbon.secondaries) == 1
        photon = carbon.secondaries[0]
        assert photon.current.id == PHOTON
        assert photon.tag_origin == "ES"
        assert 0.0 < photon.current.energy < e0
        assert carbon.current.energy + photon.current.energy == pytest.approx(e0)

    def test_process_conserves_energy(self, scattering, carbon, random):
        e0 = carbon.current.energy
        carbon.current_step = 1000 * Mpc
        n = scattering.process(carbon, random)

        assert n == len(carbon.secondaries)
        total = carbon.current.energy + sum(s.current.energy for s in carbon.secondaries)
        assert total == pytest.approx(e0)


class TestLossLength:
    """测试能量损失长度"""

    def test_longer_than_mean_free_path(self, scattering):
        loss_length = scattering.loss_length(nucleus_id(12, 6), 1.0e10)
        assert math.isfinite(loss_length)
        assert loss_length > Mpc / 0.01

    def test_no_interaction(self, scattering):
        assert math.isinf(scattering.loss_length(PHOTON, 1.0e10))
        assert math.isinf(scattering.loss_length(nucleus_id(12, 6), 1.0e8))
