"""
Centralized Constants for Occupancy Simulation
==============================================

Defaults for every distribution the data generating process draws from,
plus numerical guards and output file names. Import from here rather than
hardcoding values.

Usage:
    from occupancy_sim.constants import LOGIT_BOUND, SEED_DEFAULT
    # or
    import occupancy_sim.constants as C
    psi = expit(np.clip(eta, -C.LOGIT_BOUND, C.LOGIT_BOUND))
"""

# =============================================================================
# DISTRIBUTION DEFAULTS
# =============================================================================

# Species intercepts on the logit-occupancy scale: N(mean, sd)
INTERCEPT_MEAN = 0.0
INTERCEPT_SD = 1.0

# Site covariates: independent N(mean, sd) entries
COVARIATE_MEAN = 0.0
COVARIATE_SD = 1.0

# Covariate slopes when an effect does not name its own mean/sd
SLOPE_MEAN = 0.0
SLOPE_SD = 1.0

# Detection logits: p_detect = logistic(N(mean, sd))
DETECTION_LOGIT_MEAN = 0.0
DETECTION_LOGIT_SD = 1.0


# =============================================================================
# EFFECT TYPES
# =============================================================================

EFFECT_FIXED = 'fixed'
EFFECT_RANDOM = 'random'
VALID_EFFECT_TYPES = [EFFECT_FIXED, EFFECT_RANDOM]

# Covariate (1-based) treated as fixed when no effect configuration is given
DEFAULT_FIXED_COVARIATE = 1


# =============================================================================
# NUMERICAL GUARDS
# =============================================================================

# Linear predictors are clamped to [-LOGIT_BOUND, LOGIT_BOUND] before the
# logistic transform. expit(30) = 1 - 9.4e-14, still strictly below 1.0.
LOGIT_BOUND = 30.0


# =============================================================================
# REPRODUCIBILITY
# =============================================================================

SEED_DEFAULT = 42


# =============================================================================
# ENGINE PRIORS
# =============================================================================

# Upper bound of the uniform priors on hyper-spreads
PRIOR_SD_UPPER = 5.0

# Precision of the normal priors on slope means and fixed slopes
PRIOR_SLOPE_PRECISION = 0.1


# =============================================================================
# FILE NAMES
# =============================================================================

SIMULATED_DATA_FILE = 'simulated_data.csv'
TRUE_VALUES_FILE = 'true_values.json'
SPECIES_EFFECTS_FILE = 'species_effects.csv'

MODEL_FILE = 'model.jags'
ENGINE_DATA_FILE = 'data.json'
ENGINE_INITS_FILE = 'inits.json'
ENGINE_MONITOR_FILE = 'monitor.txt'

OUTPUT_DIR = 'output'
STATS_DIR = 'sample_stats'
ENGINE_DIR = 'engine'


# =============================================================================
# VALIDATION
# =============================================================================

def validate_spread(sd: float) -> bool:
    """Check that a distribution spread is usable (finite, non-negative)."""
    return sd >= 0 and sd != float('inf')


def effect_label(kind: str) -> str:
    """Human-readable label for an effect type."""
    return 'fixed effect' if kind == EFFECT_FIXED else 'random effect'
