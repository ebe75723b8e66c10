"""
Configuration Schema for Occupancy Simulations
==============================================

This module defines the JSON configuration format for simulations.
It provides:
1. Schema definition with validation
2. Default values
3. Conversion to SimulationSettings

Configuration Structure:
------------------------
{
    "model_info": {
        "name": str,           # Model name (e.g., "MSOM 12 species")
        "description": str     # Brief description
    },
    "population": {
        "n_species": int,      # Number of species
        "n_sites": int,        # Number of sites
        "n_covariates": int,   # Site covariates
        "n_surveys": int,      # Repeat surveys per site (J)
        "seed": int            # Random seed for reproducibility
    },
    "distributions": {         # All optional; defaults N(0, 1)
        "intercept":  {"mean": float, "sd": float},   # logit-occupancy intercepts
        "covariates": {"mean": float, "sd": float},   # site covariate values
        "slopes":     {"mean": float, "sd": float},   # default slope distribution
        "detection":  {"mean": float, "sd": float}    # detection logits
    },
    "effects": [
        {
            "covariate": int,  # 1-based covariate index
            "type": str,       # "fixed" (one value, all species) or "random"
            "mean": float,     # Slope distribution mean (default: slopes.mean)
            "sd": float        # Slope distribution sd (default: slopes.sd)
        }
    ]
}

Covariates not listed under "effects" are random effects. Without an
"effects" section, covariate 1 is fixed and the rest random.
"""

import json
import warnings
from dataclasses import dataclass, field
from numbers import Integral, Real
from pathlib import Path
from typing import Dict, List, Union

import occupancy_sim.constants as C
from occupancy_sim.errors import InvalidParameter
from occupancy_sim.simulator import CovariateEffect, DistributionSettings, SimulationSettings

# =============================================================================
# CONSTANTS
# =============================================================================

POPULATION_COUNTS = ['n_species', 'n_sites', 'n_covariates', 'n_surveys']

# distributions.<key> -> DistributionSettings attribute prefix
DISTRIBUTION_KEYS = {
    'intercept': 'intercept',
    'covariates': 'covariate',
    'slopes': 'slope',
    'detection': 'detection',
}


# =============================================================================
# SCHEMA VALIDATION
# =============================================================================

@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_count(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool) and value > 0


def validate_config(config: Dict) -> ValidationResult:
    """
    Validate configuration against schema.

    Malformed sections (wrong JSON type) are reported as errors, never
    raised.

    Args:
        config: Configuration dictionary

    Returns:
        ValidationResult with validity status and any errors/warnings
    """
    errors = []
    warnings_list = []

    if not isinstance(config, dict):
        errors.append(f"Configuration must be a JSON object, got {type(config).__name__}")
        return ValidationResult(False, errors, warnings_list)

    if 'population' not in config:
        errors.append("Missing required key: population")
        return ValidationResult(False, errors, warnings_list)
    if not isinstance(config['population'], dict):
        errors.append("population must be an object")
        return ValidationResult(False, errors, warnings_list)

    model_info = config.get('model_info', {})
    if not isinstance(model_info, dict):
        errors.append("model_info must be an object")
    elif 'name' not in model_info:
        warnings_list.append("model_info.name not specified, using default")

    # Population counts
    pop = config['population']
    for key in POPULATION_COUNTS:
        if key not in pop:
            errors.append(f"population.{key} is required")
        elif not _is_count(pop[key]):
            errors.append(f"population.{key} must be a positive integer, got {pop[key]!r}")
    if 'seed' not in pop:
        warnings_list.append(f"population.seed not specified, using default {C.SEED_DEFAULT}")
    elif not isinstance(pop['seed'], Integral) or isinstance(pop['seed'], bool) or pop['seed'] < 0:
        errors.append(f"population.seed must be a non-negative integer, got {pop['seed']!r}")

    # Distributions
    dists = config.get('distributions', {})
    if not isinstance(dists, dict):
        errors.append("distributions must be an object")
        dists = {}
    for key in dists:
        if key not in DISTRIBUTION_KEYS:
            warnings_list.append(f"distributions.{key} is not used")
    for key in DISTRIBUTION_KEYS:
        if key not in dists:
            warnings_list.append(f"distributions.{key} not specified, using N(0, 1)")
            continue
        entry = dists[key]
        if not isinstance(entry, dict):
            errors.append(f"distributions.{key} must be an object with mean and sd")
            continue
        if 'mean' in entry and not _is_number(entry['mean']):
            errors.append(f"distributions.{key}.mean must be a number")
        if 'sd' in entry:
            if not _is_number(entry['sd']):
                errors.append(f"distributions.{key}.sd must be a number")
            elif entry['sd'] < 0:
                errors.append(f"distributions.{key}.sd must be >= 0, got {entry['sd']}")

    # Effects
    n_cov = pop.get('n_covariates')
    if 'effects' not in config:
        warnings_list.append(
            f"effects not specified: covariate {C.DEFAULT_FIXED_COVARIATE} fixed, others random"
        )
    effects = config.get('effects', [])
    if not isinstance(effects, list):
        errors.append("effects must be a list")
        effects = []
    seen = set()
    for i, effect in enumerate(effects):
        where = f"effects[{i}]"
        if not isinstance(effect, dict):
            errors.append(f"{where} must be an object with covariate and type")
            continue
        cov = effect.get('covariate')
        if not isinstance(cov, Integral) or isinstance(cov, bool):
            errors.append(f"{where}.covariate must be an integer")
        elif _is_count(n_cov) and not 1 <= cov <= n_cov:
            errors.append(f"{where}.covariate {cov} outside [1, {n_cov}]")
        elif cov in seen:
            errors.append(f"{where}.covariate {cov} listed more than once")
        else:
            seen.add(cov)

        kind = effect.get('type')
        if kind not in C.VALID_EFFECT_TYPES:
            errors.append(f"{where}.type must be one of {C.VALID_EFFECT_TYPES}, got {kind!r}")
        if 'mean' in effect and not _is_number(effect['mean']):
            errors.append(f"{where}.mean must be a number")
        if 'sd' in effect:
            if not _is_number(effect['sd']):
                errors.append(f"{where}.sd must be a number")
            elif effect['sd'] < 0:
                errors.append(f"{where}.sd must be >= 0, got {effect['sd']}")
        if kind == C.EFFECT_RANDOM and effect.get('sd') == 0:
            warnings_list.append(f"{where}: random effect with sd 0 gives identical slopes")

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings_list
    )


# =============================================================================
# CONFIG LOADING AND CONVERSION
# =============================================================================

def load_config(config_path: Union[str, Path]) -> Dict:
    """
    Load and validate configuration from JSON file.

    Args:
        config_path: Path to config.json

    Returns:
        Validated configuration dictionary with defaults applied

    Raises:
        InvalidParameter: If the file cannot be read or parsed, or the
                          configuration is invalid
    """
    try:
        with open(config_path, encoding='utf-8') as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidParameter(f"Cannot read configuration {config_path}: {e}") from e

    result = validate_config(config)

    if result.warnings:
        for w in result.warnings:
            warnings.warn(w, UserWarning)

    if not result.is_valid:
        raise InvalidParameter("Invalid configuration:\n" + "\n".join(result.errors))

    return apply_defaults(config)


def apply_defaults(config: Dict) -> Dict:
    """
    Apply default values to configuration.

    Args:
        config: Raw configuration dictionary

    Returns:
        Configuration with defaults applied
    """
    config.setdefault('model_info', {}).setdefault('name', 'Multi-species occupancy')
    config['population'].setdefault('seed', C.SEED_DEFAULT)

    defaults = DistributionSettings()
    dists = config.setdefault('distributions', {})
    for key, prefix in DISTRIBUTION_KEYS.items():
        entry = dists.setdefault(key, {})
        entry.setdefault('mean', getattr(defaults, f'{prefix}_mean'))
        entry.setdefault('sd', getattr(defaults, f'{prefix}_sd'))

    for effect in config.get('effects', []):
        effect.setdefault('mean', dists['slopes']['mean'])
        effect.setdefault('sd', dists['slopes']['sd'])

    return config


def settings_from_config(config: Dict) -> SimulationSettings:
    """
    Build SimulationSettings from a validated, defaulted configuration.

    Args:
        config: Output of load_config (or apply_defaults)

    Returns:
        SimulationSettings ready for OccupancySimulator
    """
    dists = config['distributions']
    distributions = DistributionSettings(**{
        f'{prefix}_{stat}': float(dists[key][stat])
        for key, prefix in DISTRIBUTION_KEYS.items()
        for stat in ('mean', 'sd')
    })

    effects = None
    if 'effects' in config:
        effects = {
            int(e['covariate']): CovariateEffect(e['type'], float(e['mean']), float(e['sd']))
            for e in config['effects']
        }

    pop = config['population']
    return SimulationSettings(
        n_species=int(pop['n_species']),
        n_sites=int(pop['n_sites']),
        n_covariates=int(pop['n_covariates']),
        n_surveys=int(pop['n_surveys']),
        effects=effects,
        distributions=distributions,
        seed=int(pop['seed']),
        name=config['model_info']['name'],
    )
