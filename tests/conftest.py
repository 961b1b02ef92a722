"""
测试共享夹具：合成相互作用数据表和固定种子的随机数源
"""

import matplotlib
matplotlib.use("Agg")

import pytest

from uhecr_simulation.core.constants import EeV
from uhecr_simulation.core.data_classes import Candidate
from uhecr_simulation.core.particle_id import nucleus_id
from uhecr_simulation.core.random_source import RandomSource
from uhecr_simulation.testing import write_all_tables


@pytest.fixture(scope="session")
def table_dir(tmp_path_factory):
    """写入一整套合成数据表（Z, N <= 8）"""
    return write_all_tables(tmp_path_factory.mktemp("tables"), max_z=8, max_n=8)


@pytest.fixture
def random():
    return RandomSource(1234)


@pytest.fixture
def carbon():
    """100 EeV 的 C-12 候选粒子"""
    return Candidate.create(nucleus_id(12, 6), 100 * EeV)
