"""
模拟驱动、结果导出和可视化的测试
"""

import logging

import pandas as pd
import pytest

from uhecr_simulation.core.constants import EeV, Mpc
from uhecr_simulation.core.data_classes import Candidate
from uhecr_simulation.core.fields import CMB
from uhecr_simulation.core.io_utils import RECORD_HEADERS, export_records_to_csv, export_secondaries_to_csv
from uhecr_simulation.core.particle_id import mass_number, nucleus_id
from uhecr_simulation.core.pair_production import ElectronPairProduction
from uhecr_simulation.core.photodisintegration import PhotoDisintegration
from uhecr_simulation.core.propagation import BorisPropagator
from uhecr_simulation.core.simulation import propagate_candidate, run_simulation, simulate_candidate_history
from uhecr_simulation.plotting import (
    load_record_data,
    print_statistics,
    visualize_composition,
    visualize_spectra,
)

CARBON = nucleus_id(12, 6)


class HalveEnergy:
    """每一步能量减半的模块"""

    def process(self, candidate, random):
        candidate.current.energy /= 2.0


@pytest.fixture
def modules(table_dir):
    return [
        BorisPropagator.fixed(None, step=1 * Mpc),
        PhotoDisintegration(CMB(), data_dir=table_dir),
        ElectronPairProduction(CMB(), data_dir=table_dir),
    ]


@pytest.fixture
def records(modules):
    return run_simulation(4, CARBON, 100 * EeV, modules, max_distance=50 * Mpc, seed=3, show_progress=False)


class TestPropagateCandidate:
    """测试单个候选粒子的传播循环"""

    def test_stops_at_max_distance(self, random):
        candidate = Candidate.create(CARBON, 100 * EeV)
        n_steps = propagate_candidate(candidate, [BorisPropagator.fixed(None, step=1 * Mpc)], random,
                                      max_distance=9.5 * Mpc)
        assert n_steps == 10
        assert not candidate.active
        assert candidate.trajectory_length == pytest.approx(10 * Mpc)

    def test_adaptive_step_ends_on_max_distance(self, random):
        candidate = Candidate.create(nucleus_id(1, 0), 100 * EeV)
        propagator = BorisPropagator.adaptive(None)
        propagate_candidate(candidate, [propagator], random, max_distance=2.5 * Mpc)
        assert candidate.trajectory_length == pytest.approx(2.5 * Mpc)

    def test_below_min_energy_at_start(self, random):
        candidate = Candidate.create(CARBON, 0.5 * EeV)
        assert propagate_candidate(candidate, [HalveEnergy()], random, min_energy=1 * EeV) == 0
        assert not candidate.active
        assert candidate.current.energy == 0.5 * EeV

    def test_min_energy(self, random):
        candidate = Candidate.create(CARBON, 100 * EeV)
        n_steps = propagate_candidate(candidate, [HalveEnergy()], random, min_energy=1 * EeV)
        assert n_steps == 7
        assert candidate.current.energy < 1 * EeV

    def test_step_budget(self, random, caplog):
        candidate = Candidate.create(CARBON, 100 * EeV)
        propagator = BorisPropagator.fixed(None, step=1 * Mpc)
        with caplog.at_level(logging.WARNING):
            n_steps = propagate_candidate(candidate, [propagator], random, max_distance=1000 * Mpc, max_steps=3)
        assert n_steps == 3
        assert not candidate.active
        assert "Step budget" in caplog.text


class TestHistory:
    """测试次级粒子的深度优先处理"""

    def test_records_cover_all_secondaries(self, modules, random):
        primary = Candidate.create(CARBON, 100 * EeV)
        history = simulate_candidate_history(primary, modules, random, primary_index=5, max_distance=100 * Mpc)

        assert history[0].generation == 0
        assert history[0].tag_origin == "PRIM"
        assert all(r.primary_index == 5 for r in history)
        assert len(history) == 1 + sum(r.n_secondaries for r in history)
        assert all(r.tag_origin == "PD" for r in history[1:])

    def test_nucleon_number_conserved(self, modules, random):
        primary = Candidate.create(CARBON, 100 * EeV)
        history = simulate_candidate_history(primary, modules, random, max_distance=100 * Mpc, min_energy=0.0)
        assert sum(mass_number(r.final_id) for r in history) == 12

    def test_secondaries_not_followed(self, modules, random):
        primary = Candidate.create(CARBON, 100 * EeV)
        history = simulate_candidate_history(primary, modules, random, max_distance=300 * Mpc,
                                             follow_secondaries=False)
        assert len(history) == 1
        assert history[0].n_secondaries > 0


class TestRunSimulation:
    """测试多个初级粒子的模拟"""

    def test_records_ordered_by_primary(self, records):
        primaries = [r for r in records if r.generation == 0]
        assert [r.primary_index for r in primaries] == [0, 1, 2, 3]
        indices = [r.primary_index for r in records]
        assert indices == sorted(indices)

    def test_reproducible(self, modules, records):
        again = run_simulation(4, CARBON, 100 * EeV, modules, max_distance=50 * Mpc, seed=3, show_progress=False)
        assert [r.final_energy for r in again] == [r.final_energy for r in records]

    def test_independent_of_workers(self, modules, records):
        threaded = run_simulation(4, CARBON, 100 * EeV, modules, max_distance=50 * Mpc, seed=3,
                                  n_workers=2, show_progress=False)
        assert [(r.final_id, r.final_energy) for r in threaded] == [(r.final_id, r.final_energy) for r in records]

    def test_source_direction(self, modules):
        result = run_simulation(1, CARBON, 100 * EeV, modules, max_distance=4.5 * Mpc, seed=1,
                                follow_secondaries=False, show_progress=False)
        assert result[0].final_position[0] == pytest.approx(5 * Mpc)


class TestExport:
    """测试 CSV 导出"""

    def test_export_records(self, records, tmp_path):
        filename = tmp_path / "Data" / "candidate_records.csv"
        export_records_to_csv(records, str(filename))

        df = load_record_data(str(filename))
        assert list(df.columns[:len(RECORD_HEADERS)]) == RECORD_HEADERS
        assert len(df) == len(records)
        assert df["is_primary"].sum() == 4
        assert df.loc[0, "initial_energy_EeV"] == pytest.approx(100.0)

    def test_export_secondaries(self, records, tmp_path):
        filename = tmp_path / "secondaries.csv"
        export_secondaries_to_csv(records, str(filename))

        df = pd.read_csv(filename)
        assert len(df) == sum(1 for r in records if r.generation > 0)
        assert (df["generation"] > 0).all()

    def test_export_empty(self, tmp_path, capsys):
        filename = tmp_path / "empty.csv"
        export_records_to_csv([], str(filename))
        assert not filename.exists()
        assert "[warning]" in capsys.readouterr().out


class TestPlotting:
    """测试可视化函数"""

    def test_figures_saved(self, records, tmp_path):
        base = str(tmp_path / "uhecr_spectra")
        visualize_spectra(records, save_path=base, show=False)
        visualize_composition(records, save_path=base, show=False)
        assert (tmp_path / "uhecr_spectra_spectra.png").exists()
        assert (tmp_path / "uhecr_spectra_composition.png").exists()

    def test_statistics(self, records, capsys):
        print_statistics(records, 4)
        out = capsys.readouterr().out
        assert "PROPAGATION STATISTICS" in out
        assert "Primaries simulated: 4" in out
