"""
UHECR 传播模拟包基本使用示例

这个示例展示了如何使用 uhecr_simulation 包的基本功能。
"""

import tempfile

import numpy as np

# 导入主要模块
from uhecr_simulation import (
    # 数据类
    Candidate,
    RandomSource,

    # 单位
    EeV,
    Mpc,
    nanogauss,

    # 功能
    CMB,
    PhotoDisintegration,
    ElectronPairProduction,
    BorisPropagator,
    UniformMagneticField,
    nucleus_id,
    run_simulation,
)

# 导入子包
from uhecr_simulation.testing import write_all_tables
from uhecr_simulation.plotting import print_statistics


def example_photodisintegration(data_dir):
    """单步光致蜕变示例"""
    print("=" * 60)
    print("光致蜕变示例")
    print("=" * 60)

    pd = PhotoDisintegration(CMB(), data_dir=data_dir)
    random = RandomSource(1)

    candidate = Candidate.create(nucleus_id(12, 6), 100 * EeV)
    candidate.current_step = 100 * Mpc
    n = pd.process(candidate, random)

    print(f"\n相互作用次数: {n}")
    print(f"剩余核: {candidate.current.mass_number} 核子, E = {candidate.current.energy / EeV:.2f} EeV")
    print(f"次级粒子: {len(candidate.secondaries)}")
    total_a = candidate.current.mass_number + sum(s.current.mass_number for s in candidate.secondaries)
    print(f"核子数守恒: A = {total_a}")


def example_loss_lengths(data_dir):
    """能量损失长度示例"""
    print("\n" + "=" * 60)
    print("能量损失长度示例")
    print("=" * 60)

    pd = PhotoDisintegration(CMB(), data_dir=data_dir)
    epp = ElectronPairProduction(CMB(), data_dir=data_dir)
    carbon = nucleus_id(12, 6)
    for lg in (8.0, 9.5, 10.0, 11.0):
        gamma = 10.0 ** lg
        print(f"  log10(gamma) = {lg:4.1f}: PD {pd.loss_length(carbon, gamma) / Mpc:10.2f} Mpc, "
              f"EPP {epp.loss_length(carbon, gamma) / Mpc:10.2f} Mpc")


def example_deflection():
    """磁场偏转示例"""
    print("\n" + "=" * 60)
    print("磁场偏转示例")
    print("=" * 60)

    propagator = BorisPropagator.fixed(UniformMagneticField([0, 0, 1 * nanogauss]), step=0.1 * Mpc)
    candidate = Candidate.create(nucleus_id(1, 1), 10 * EeV, direction=(1, 0, 0))
    for _ in range(100):
        propagator.process(candidate)
    angle = np.degrees(np.arccos(np.clip(candidate.current.direction[0], -1, 1)))
    print(f"\n10 EeV 质子在 1 nG 中传播 10 Mpc 后偏转角: {angle:.2f}°")


def example_full_run(data_dir):
    """完整模拟示例"""
    print("\n" + "=" * 60)
    print("完整模拟示例")
    print("=" * 60)

    modules = [
        BorisPropagator.fixed(None, step=1 * Mpc),
        PhotoDisintegration(CMB(), data_dir=data_dir),
        ElectronPairProduction(CMB(), data_dir=data_dir),
    ]
    records = run_simulation(10, nucleus_id(12, 6), 100 * EeV, modules, max_distance=50 * Mpc, seed=7)
    print_statistics(records, 10)


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        tables = write_all_tables(tmp)
        example_photodisintegration(tables)
        example_loss_lengths(tables)
        example_deflection()
        example_full_run(tables)
