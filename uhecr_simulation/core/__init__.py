"""
UHECR 传播模拟核心模块

该子包包含模拟的核心功能模块：
- constants: 单位和物理常数
- exceptions: 异常类型
- particle_id: 粒子编号、质量和电荷
- data_classes: 数据结构定义（ParticleState, Candidate, CandidateRecord）
- random_source: 随机数源
- fields: 光子场、磁场和对流场
- rate_table: 相互作用率表和加载函数
- channel_selector: 反应道选择
- secondaries: 次级粒子产生
- stochastic: 随机步进算法和相互作用模块基类
- photodisintegration / pair_production / pion_production / nuclear_decay /
  elastic_scattering: 相互作用过程
- propagation: Boris 推进传播
- simulation: 模拟主逻辑
- io_utils: 输入输出工具
"""

# 常数
from .constants import EeV, Mpc, kpc, nanogauss, c_light

# 异常
from .exceptions import (
    UHECRSimError,
    TableLoadError,
    TableFormatError,
    SecondaryProductionError,
)

# 粒子
from .particle_id import (
    ELECTRON,
    POSITRON,
    PHOTON,
    nucleus_id,
    is_nucleus,
    mass_number,
    charge_number,
    particle_mass,
)

# 数据类
from .data_classes import (
    ParticleState,
    Candidate,
    CandidateRecord,
)

# 随机数
from .random_source import RandomSource

# 场
from .fields import (
    PhotonField,
    CMB,
    MagneticField,
    UniformMagneticField,
    AdvectionField,
    UniformAdvectionField,
)

# 数据表
from .rate_table import (
    RateTable,
    BranchTable,
    PhotonEmissionTable,
    DecayTable,
    LorentzFactorTable,
    PairSpectrum,
    EmissionSpectrum,
    load_rate_table,
    load_branch_table,
    load_photon_emission_table,
    load_decay_table,
    load_lorentz_factor_table,
    load_pair_spectrum,
    load_emission_spectrum,
)

# 反应道选择
from .channel_selector import branching_ratios, select_branch

# 随机步进
from .stochastic import (
    StochasticStepper,
    InteractionModule,
    comoving_rate_scaling,
    physical_rate_scaling,
)

# 相互作用过程
from .photodisintegration import PhotoDisintegration, PhotoDisintegrationTables, load_photodisintegration_tables
from .pair_production import ElectronPairProduction
from .pion_production import PhotoPionProduction, PionProductionTables, load_pion_production_tables
from .nuclear_decay import NuclearDecay
from .elastic_scattering import ElasticScattering, ElasticScatteringTables, load_elastic_scattering_tables

# 传播
from .propagation import BorisPropagator

# 模拟
from .simulation import (
    propagate_candidate,
    simulate_candidate_history,
    run_simulation,
)

# IO工具
from .io_utils import (
    export_records_to_csv,
    export_secondaries_to_csv,
)

__all__ = [
    # 常数
    'EeV',
    'Mpc',
    'kpc',
    'nanogauss',
    'c_light',
    # 异常
    'UHECRSimError',
    'TableLoadError',
    'TableFormatError',
    'SecondaryProductionError',
    # 粒子
    'ELECTRON',
    'POSITRON',
    'PHOTON',
    'nucleus_id',
    'is_nucleus',
    'mass_number',
    'charge_number',
    'particle_mass',
    # 数据类
    'ParticleState',
    'Candidate',
    'CandidateRecord',
    # 随机数
    'RandomSource',
    # 场
    'PhotonField',
    'CMB',
    'MagneticField',
    'UniformMagneticField',
    'AdvectionField',
    'UniformAdvectionField',
    # 数据表
    'RateTable',
    'BranchTable',
    'PhotonEmissionTable',
    'DecayTable',
    'LorentzFactorTable',
    'PairSpectrum',
    'EmissionSpectrum',
    'load_rate_table',
    'load_branch_table',
    'load_photon_emission_table',
    'load_decay_table',
    'load_lorentz_factor_table',
    'load_pair_spectrum',
    'load_emission_spectrum',
    # 反应道选择
    'branching_ratios',
    'select_branch',
    # 随机步进
    'StochasticStepper',
    'InteractionModule',
    'comoving_rate_scaling',
    'physical_rate_scaling',
    # 相互作用过程
    'PhotoDisintegration',
    'PhotoDisintegrationTables',
    'load_photodisintegration_tables',
    'ElectronPairProduction',
    'PhotoPionProduction',
    'PionProductionTables',
    'load_pion_production_tables',
    'NuclearDecay',
    'ElasticScattering',
    'ElasticScatteringTables',
    'load_elastic_scattering_tables',
    # 传播
    'BorisPropagator',
    # 模拟
    'propagate_candidate',
    'simulate_candidate_history',
    'run_simulation',
    # IO
    'export_records_to_csv',
    'export_secondaries_to_csv',
]
