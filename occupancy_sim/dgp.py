"""
Occupancy Data Generating Process (DGP)
=======================================

Primitive draws for simulating multi-species detection/non-detection data.
``simulator.generate`` calls these in a fixed order so that a given seed
always produces the same dataset.

Generative model, species s, site i:

    alpha_s      ~ N(mu_alpha, sd_alpha)                    (intercept)
    x_i          ~ N(mu_x, sd_x)^K                          (site covariates)
    beta_{s,k}   ~ N(mu_k, sd_k)           if k is random
    beta_{s,k}   = b_k,  b_k ~ N(mu_k, sd_k) if k is fixed
    p_s          = logistic(N(mu_p, sd_p))                  (detection)
    psi_{s,i}    = logistic(alpha_s + beta_s . x_i)
    z_{s,i}      ~ Bernoulli(psi_{s,i})
    Y_{s,i}      ~ Binomial(J, p_s * z_{s,i})

Functions:
- logistic: clamped inverse logit
- draw_intercepts, draw_covariate_matrix, draw_slope_column, draw_slopes,
  draw_detection_probabilities: parameter draws
- linear_predictor: species x site logit-occupancy
- simulate_occupancy, simulate_detections: latent state and observations
- flatten_long: species-major long-format arrays
"""

import logging
from typing import Dict, Sequence, Tuple

import numpy as np
from scipy.special import expit

from occupancy_sim.constants import EFFECT_FIXED, LOGIT_BOUND
from occupancy_sim.errors import NumericOverflow

logger = logging.getLogger(__name__)


# =============================================================================
# CORE PROBABILITY FUNCTIONS
# =============================================================================

def logistic(eta: np.ndarray, quantity: str = "linear predictor") -> np.ndarray:
    """
    Inverse logit with clamping.

    p = 1 / (1 + exp(-eta)),  eta clamped to [-LOGIT_BOUND, LOGIT_BOUND]

    Clamping keeps the result strictly inside (0, 1) and keeps exp() away
    from overflow.

    Args:
        eta: Real-valued predictor(s)
        quantity: Name used in error and log messages

    Returns:
        Probabilities with the same shape as eta

    Raises:
        NumericOverflow: If eta contains inf or nan
    """
    eta = np.asarray(eta, dtype=float)
    bad = ~np.isfinite(eta)
    if bad.any():
        raise NumericOverflow(quantity, int(bad.sum()))

    n_clamped = int((np.abs(eta) > LOGIT_BOUND).sum())
    if n_clamped:
        logger.debug(f"{quantity}: clamped {n_clamped} value(s) to +/-{LOGIT_BOUND}")

    return expit(np.clip(eta, -LOGIT_BOUND, LOGIT_BOUND))


# =============================================================================
# PARAMETER DRAWS
# =============================================================================

def draw_intercepts(rng: np.random.Generator, n_species: int,
                    mean: float, sd: float) -> np.ndarray:
    """Draw one logit-occupancy intercept per species."""
    return rng.normal(mean, sd, size=n_species)


def draw_covariate_matrix(rng: np.random.Generator, n_sites: int,
                          n_covariates: int, mean: float, sd: float) -> np.ndarray:
    """
    Draw the site-by-covariate matrix.

    The returned array is read-only; covariates are fixed for the whole
    simulation.

    Returns:
        Array of shape (n_sites, n_covariates)
    """
    covariates = rng.normal(mean, sd, size=(n_sites, n_covariates))
    covariates.setflags(write=False)
    return covariates


def draw_slope_column(rng: np.random.Generator, n_species: int,
                      kind: str, mean: float, sd: float) -> np.ndarray:
    """
    Draw the per-species slopes of one covariate.

    A fixed effect draws a single value and replicates it across species.
    A random effect draws one value per species; with sd == 0 every species
    gets exactly the mean and no draw is consumed.

    Args:
        rng: NumPy random generator
        n_species: Number of species
        kind: 'fixed' or 'random'
        mean: Mean of the slope distribution
        sd: Spread of the slope distribution

    Returns:
        Array of shape (n_species,)
    """
    if kind == EFFECT_FIXED:
        return np.full(n_species, rng.normal(mean, sd))
    if sd == 0:
        return np.full(n_species, float(mean))
    return rng.normal(mean, sd, size=n_species)


def draw_slopes(rng: np.random.Generator, n_species: int,
                effects: Sequence[Tuple[str, float, float]]) -> np.ndarray:
    """
    Draw the species x covariate slope matrix, one column per effect.

    Args:
        rng: NumPy random generator
        n_species: Number of species
        effects: (kind, mean, sd) per covariate, in covariate order

    Returns:
        Array of shape (n_species, len(effects))
    """
    slopes = np.empty((n_species, len(effects)))
    for k, (kind, mean, sd) in enumerate(effects):
        slopes[:, k] = draw_slope_column(rng, n_species, kind, mean, sd)
    return slopes


def draw_detection_probabilities(rng: np.random.Generator, n_species: int,
                                 mean: float, sd: float) -> np.ndarray:
    """Draw per-species detection probabilities as logistic(N(mean, sd))."""
    logits = rng.normal(mean, sd, size=n_species)
    return logistic(logits, quantity="detection logit")


# =============================================================================
# LATENT STATE AND OBSERVATIONS
# =============================================================================

def linear_predictor(intercepts: np.ndarray, slopes: np.ndarray,
                     covariates: np.ndarray) -> np.ndarray:
    """
    Logit-occupancy for every (species, site) pair.

    eta[s, i] = alpha[s] + sum_k beta[s, k] * x[i, k]

    Returns:
        Array of shape (n_species, n_sites)
    """
    with np.errstate(over='ignore', invalid='ignore'):
        return intercepts[:, None] + slopes @ covariates.T


def simulate_occupancy(rng: np.random.Generator, psi: np.ndarray) -> np.ndarray:
    """Draw the latent presence/absence state z ~ Bernoulli(psi)."""
    return rng.binomial(1, psi).astype(np.int64)


def simulate_detections(rng: np.random.Generator, z: np.ndarray,
                        p_detect: np.ndarray, n_surveys: int) -> np.ndarray:
    """
    Draw detection counts conditional on the latent state.

    Y[s, i] ~ Binomial(n_surveys, p_detect[s] * z[s, i])

    A truly absent species (z = 0) has success probability 0 and so is never
    detected.

    Args:
        rng: NumPy random generator
        z: Latent occupancy, shape (n_species, n_sites)
        p_detect: Detection probability per species, shape (n_species,)
        n_surveys: Number of repeat surveys per site

    Returns:
        Integer counts in [0, n_surveys], shape (n_species, n_sites)
    """
    p_effective = p_detect[:, None] * z
    return rng.binomial(n_surveys, p_effective).astype(np.int64)


# =============================================================================
# LONG FORMAT
# =============================================================================

def flatten_long(counts: np.ndarray, covariates: np.ndarray,
                 n_surveys: int) -> Dict[str, np.ndarray]:
    """
    Flatten a species x site matrix into species-major long-format arrays.

    Row r = s * n_sites + i holds species s (1-indexed in the output) at
    site i. All arrays are allocated at their final size.

    Args:
        counts: Detection counts, shape (n_species, n_sites)
        covariates: Site covariates, shape (n_sites, n_covariates)
        n_surveys: Surveys per site

    Returns:
        Dict with 'Y', 'Species', 'site', 'X', 'J'
    """
    n_species, n_sites = counts.shape
    n_obs = n_species * n_sites

    species = np.repeat(np.arange(1, n_species + 1), n_sites)
    site = np.tile(np.arange(n_sites), n_species)

    return {
        'Y': counts.reshape(n_obs).copy(),
        'Species': species.astype(np.int64),
        'site': site.astype(np.int64),
        'X': covariates[site],
        'J': np.full(n_obs, n_surveys, dtype=np.int64),
    }
