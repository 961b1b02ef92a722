"""
粒子编号、数据类和日志配置的单元测试
"""

import logging
import math

import numpy as np
import pytest

from uhecr_simulation.core.constants import EeV, GeV, c_squared, eplus, mass_proton
from uhecr_simulation.core.data_classes import Candidate, ParticleState
from uhecr_simulation.core.particle_id import (
    ELECTRON,
    NU_TAU,
    PHOTON,
    POSITRON,
    charge,
    charge_number,
    describe,
    is_nucleus,
    mass_number,
    nuclear_mass,
    nucleus_id,
    particle_mass,
)
from uhecr_simulation.log_config import setup_logging


class TestParticleId:
    """测试 PDG 原子核编号"""

    def test_nucleus_id(self):
        assert nucleus_id(12, 6) == 1000060120
        assert nucleus_id(1, 0) == 1000000010
        assert mass_number(nucleus_id(56, 26)) == 56
        assert charge_number(nucleus_id(56, 26)) == 26

    def test_invalid(self):
        with pytest.raises(ValueError):
            nucleus_id(2, 3)
        with pytest.raises(ValueError):
            nucleus_id(0, 0)
        with pytest.raises(ValueError):
            nucleus_id(4, -1)

    def test_non_nuclei(self):
        assert not is_nucleus(PHOTON)
        assert mass_number(ELECTRON) == 0
        assert charge(ELECTRON) == -eplus
        assert charge(POSITRON) == eplus
        assert charge(nucleus_id(4, 2)) == 2 * eplus
        assert particle_mass(PHOTON) == 0.0
        assert describe(NU_TAU) == "nu_tau"
        assert describe(nucleus_id(4, 2)) == "(A=4, Z=2)"

    def test_nuclear_mass(self):
        assert nuclear_mass(1, 1) == mass_proton
        assert nuclear_mass(4, 2) * c_squared == pytest.approx(3.727 * GeV, rel=0.01)
        assert nuclear_mass(12, 6) < 6 * nuclear_mass(1, 1) + 6 * nuclear_mass(1, 0)


class TestDataClasses:
    """测试粒子状态和候选粒子"""

    def test_direction_normalised(self):
        state = ParticleState(id=PHOTON, energy=1.0, direction=[0.0, 3.0, 4.0])
        np.testing.assert_allclose(state.direction, [0.0, 0.6, 0.8])
        with pytest.raises(ValueError):
            state.set_direction([0.0, 0.0, 0.0])

    def test_lorentz_factor(self):
        state = ParticleState(id=nucleus_id(1, 1), energy=1 * EeV)
        assert state.lorentz_factor == pytest.approx(1 * EeV / (mass_proton * c_squared))
        state.lorentz_factor = 2.0
        assert state.energy == pytest.approx(2.0 * mass_proton * c_squared)
        assert math.isinf(ParticleState(id=PHOTON, energy=1.0).lorentz_factor)

    def test_snapshots(self):
        candidate = Candidate.create(nucleus_id(12, 6), 100 * EeV)
        assert candidate.previous is not candidate.current
        assert candidate.created.energy == candidate.current.energy

    def test_limit_next_step(self):
        candidate = Candidate.create(nucleus_id(12, 6), 100 * EeV)
        candidate.limit_next_step(5.0)
        candidate.limit_next_step(7.0)
        assert candidate.next_step == 5.0

    def test_add_secondary(self):
        candidate = Candidate.create(nucleus_id(12, 6), 100 * EeV, direction=(0.0, 1.0, 0.0), redshift=0.5)
        candidate.trajectory_length = 3.0
        secondary = candidate.add_secondary(PHOTON, 1 * EeV, np.ones(3), tag="ES")

        assert candidate.secondaries == [secondary]
        assert secondary.redshift == 0.5
        assert secondary.trajectory_length == 3.0
        assert secondary.tag_origin == "ES"
        np.testing.assert_allclose(secondary.current.direction, [0.0, 1.0, 0.0])
        np.testing.assert_allclose(secondary.previous.position, np.ones(3))

    def test_description(self):
        text = Candidate.create(nucleus_id(12, 6), 100 * EeV).description()
        assert "(A=12, Z=6)" in text


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class TestLogConfig:
    """测试日志配置"""

    def test_log_file(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(logging.DEBUG, log_file)
        setup_logging(logging.DEBUG, log_file)
        logging.getLogger("uhecr_simulation.test").debug("hello")

        root = logging.getLogger()
        assert len(root.handlers) == 2
        assert root.level == logging.DEBUG
        for handler in root.handlers:
            handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")
