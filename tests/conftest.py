"""
Pytest Configuration and Shared Fixtures
=========================================

Provides common test fixtures for occupancy simulation tests.
"""

import copy
import json
import logging
from pathlib import Path

import numpy as np
import pytest

from occupancy_sim.simulator import CovariateEffect, generate

PROJECT_ROOT = Path(__file__).parent.parent


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def project_root():
    """Return project root path."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def model_config_path():
    """Path to the shipped example configuration."""
    return PROJECT_ROOT / 'config' / 'model_config.json'


@pytest.fixture(scope="session")
def _model_config(model_config_path):
    with open(model_config_path, encoding='utf-8') as f:
        return json.load(f)


@pytest.fixture
def model_config(_model_config):
    """Fresh copy of the example configuration (safe to mutate)."""
    return copy.deepcopy(_model_config)


@pytest.fixture
def minimal_config():
    """Smallest configuration that validates without errors."""
    return {
        'model_info': {'name': 'Minimal'},
        'population': {
            'n_species': 3,
            'n_sites': 5,
            'n_covariates': 2,
            'n_surveys': 3,
            'seed': 1,
        },
        'distributions': {
            'intercept': {'mean': 0.0, 'sd': 1.0},
            'covariates': {'mean': 0.0, 'sd': 1.0},
            'slopes': {'mean': 0.0, 'sd': 1.0},
            'detection': {'mean': 0.0, 'sd': 1.0},
        },
        'effects': [
            {'covariate': 1, 'type': 'fixed'},
        ],
    }


@pytest.fixture
def write_config(tmp_path):
    """Write a config dict to a temporary JSON file and return its path."""
    def _write(config, name='config.json'):
        path = tmp_path / name
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(config, f)
        return path
    return _write


# =============================================================================
# Data Fixtures - Synthetic Data with Known Parameters
# =============================================================================

@pytest.fixture
def small_dataset():
    """2 species x 3 sites, one fixed covariate, 4 surveys."""
    return generate(num_species=2, num_sites=3, num_covariates=1, num_surveys=4,
                    effect_config=['fixed'], seed=42)


@pytest.fixture
def community_dataset():
    """A larger community with one fixed and two random covariates."""
    return generate(
        num_species=10, num_sites=30, num_covariates=3, num_surveys=5,
        effect_config=[
            CovariateEffect('fixed', 0.5, 1.0),
            CovariateEffect('random', -0.5, 0.75),
            'random',
        ],
        rng=np.random.default_rng(7),
    )


@pytest.fixture
def community_frame(community_dataset):
    """Long-format table of community_dataset including latent columns."""
    return community_dataset.to_frame(include_latent=True)


@pytest.fixture
def restore_root_logging():
    """Undo handlers installed by setup_logging during a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
