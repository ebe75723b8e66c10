"""
Multi-species occupancy data simulation.

Provides common functionality for:
- simulator: synthetic detection data with fixed/random covariate slopes
- dgp: primitive draws of the data generating process
- config_schema: JSON configuration validation and defaults
- model_spec: engine model text and data contract
- sample_stats: per-species summary tables
"""

from .errors import InvalidParameter, NumericOverflow
from .simulator import (
    CovariateEffect,
    DistributionSettings,
    OccupancyDataset,
    OccupancySimulator,
    SimulationSettings,
    generate,
    resolve_effects,
)
from .config_schema import load_config, settings_from_config, validate_config
from .model_spec import (
    build_model_text,
    check_data_contract,
    monitored_parameters,
    write_engine_inputs,
)
from .sample_stats import generate_sample_stats

__version__ = "1.0.0"

__all__ = [
    'InvalidParameter',
    'NumericOverflow',
    'CovariateEffect',
    'DistributionSettings',
    'OccupancyDataset',
    'OccupancySimulator',
    'SimulationSettings',
    'generate',
    'resolve_effects',
    'load_config',
    'settings_from_config',
    'validate_config',
    'build_model_text',
    'check_data_contract',
    'monitored_parameters',
    'write_engine_inputs',
    'generate_sample_stats',
]
