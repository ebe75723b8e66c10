"""
Multi-Species Occupancy Data Simulator
======================================

Synthetic detection/non-detection survey data for a hierarchical
multi-species occupancy model with imperfect detection. Each species has
its own intercept, covariate slopes (fixed or random across species) and
detection probability; each (species, site) pair has a latent presence
state and an observed count of detections over J repeat surveys.

The output is the flat, row-aligned data contract an MCMC engine expects:
one observation vector Y, a species-index vector, a covariate matrix with
one row per observation, and a survey-count vector.

Usage:
    from occupancy_sim.simulator import generate

    data = generate(num_species=2, num_sites=3, num_covariates=1,
                    num_surveys=4, effect_config=['fixed'], seed=42)
    data.to_frame()
"""

import json
import logging
from dataclasses import dataclass, field
from numbers import Integral
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

import occupancy_sim.constants as C
from occupancy_sim import dgp
from occupancy_sim.errors import InvalidParameter, NumericOverflow
from occupancy_sim.logging_config import SimulationLogger

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION TYPES
# =============================================================================

@dataclass(frozen=True)
class CovariateEffect:
    """How the slopes of one covariate vary across species."""
    kind: str = C.EFFECT_RANDOM
    mean: float = C.SLOPE_MEAN
    sd: float = C.SLOPE_SD

    @property
    def is_fixed(self) -> bool:
        return self.kind == C.EFFECT_FIXED


@dataclass
class DistributionSettings:
    """Means and spreads of the generating distributions."""
    intercept_mean: float = C.INTERCEPT_MEAN
    intercept_sd: float = C.INTERCEPT_SD
    covariate_mean: float = C.COVARIATE_MEAN
    covariate_sd: float = C.COVARIATE_SD
    slope_mean: float = C.SLOPE_MEAN
    slope_sd: float = C.SLOPE_SD
    detection_mean: float = C.DETECTION_LOGIT_MEAN
    detection_sd: float = C.DETECTION_LOGIT_SD

    def validate(self) -> List[str]:
        """Return a list of problems; empty if the settings are usable."""
        errors = []
        for name in ('intercept', 'covariate', 'slope', 'detection'):
            mean = getattr(self, f'{name}_mean')
            sd = getattr(self, f'{name}_sd')
            if not np.isfinite(mean):
                errors.append(f"{name}_mean must be finite, got {mean}")
            if not C.validate_spread(sd):
                errors.append(f"{name}_sd must be finite and >= 0, got {sd}")
        return errors


EffectEntry = Union[str, CovariateEffect]
EffectConfig = Union[Sequence[EffectEntry], Mapping[int, EffectEntry], None]


@dataclass
class SimulationSettings:
    """A complete, validated simulation configuration."""
    n_species: int
    n_sites: int
    n_covariates: int
    n_surveys: int
    effects: Optional[Mapping[int, EffectEntry]] = None
    distributions: DistributionSettings = field(default_factory=DistributionSettings)
    seed: int = C.SEED_DEFAULT
    name: str = 'Multi-species occupancy'


# =============================================================================
# DATASET
# =============================================================================

@dataclass
class OccupancyDataset:
    """
    A simulated dataset in long format plus the parameters that generated it.

    Observation arrays (Y, Species, site, X, J, z, psi) are row-aligned,
    species-major: row r = s * n_sites + i. The latent columns z and psi are
    hidden truth for validation and are not part of the engine data.
    """

    Y: np.ndarray
    Species: np.ndarray
    site: np.ndarray
    X: np.ndarray
    J: np.ndarray
    z: np.ndarray
    psi: np.ndarray
    intercepts: np.ndarray
    slopes: np.ndarray
    p_detect: np.ndarray
    covariates: np.ndarray
    effects: List[CovariateEffect]

    @property
    def n_obs(self) -> int:
        return len(self.Y)

    @property
    def n_species(self) -> int:
        return len(self.intercepts)

    @property
    def n_sites(self) -> int:
        return self.covariates.shape[0]

    @property
    def n_covariates(self) -> int:
        return self.covariates.shape[1]

    @property
    def effect_kinds(self) -> List[str]:
        return [e.kind for e in self.effects]

    def to_engine_data(self) -> Dict[str, Any]:
        """
        Data dictionary for the inference engine.

        Returns:
            Dict with Y, Species, X, J (arrays) and Nobs, Nspecies, Ncov
        """
        return {
            'Y': self.Y,
            'Species': self.Species,
            'X': self.X,
            'J': self.J,
            'Nobs': self.n_obs,
            'Nspecies': self.n_species,
            'Ncov': self.n_covariates,
        }

    def to_frame(self, include_latent: bool = False) -> pd.DataFrame:
        """
        Long-format table, one row per (species, site).

        Args:
            include_latent: Add the true occupancy state z and probability psi

        Returns:
            DataFrame with species, site (1-indexed), X1..XK, J, Y
        """
        df = pd.DataFrame({
            'species': self.Species,
            'site': self.site + 1,
        })
        for k in range(self.n_covariates):
            df[f'X{k + 1}'] = self.X[:, k]
        df['J'] = self.J
        df['Y'] = self.Y

        if include_latent:
            df['z'] = self.z
            df['psi'] = self.psi

        return df

    def species_slopes_frame(self) -> pd.DataFrame:
        """Species x covariate table of intercepts, slopes and detection."""
        df = pd.DataFrame({'species': np.arange(1, self.n_species + 1)})
        df['alpha'] = self.intercepts
        for k in range(self.n_covariates):
            df[f'beta{k + 1}'] = self.slopes[:, k]
        df['p_detect'] = self.p_detect
        return df

    def true_values(self) -> Dict[str, float]:
        """
        True generating parameters keyed by engine parameter name.

        Returns:
            Dict like {'alpha[1]': ..., 'beta[1,2]': ..., 'p.detect[1]': ...}
        """
        values = {}
        for s in range(self.n_species):
            values[f'alpha[{s + 1}]'] = float(self.intercepts[s])
            for k in range(self.n_covariates):
                values[f'beta[{s + 1},{k + 1}]'] = float(self.slopes[s, k])
            values[f'p.detect[{s + 1}]'] = float(self.p_detect[s])
        for k, effect in enumerate(self.effects, start=1):
            if effect.is_fixed:
                values[f'beta.fixed[{k}]'] = float(self.slopes[0, k - 1])
        return values

    def naive_occupancy(self) -> float:
        """Share of (species, site) pairs with at least one detection."""
        return float((self.Y > 0).mean())

    def true_occupancy(self) -> float:
        """Share of (species, site) pairs that are truly occupied."""
        return float(self.z.mean())


# =============================================================================
# VALIDATION
# =============================================================================

def _check_count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidParameter(f"{name} must be positive, got {value}")
    return int(value)


def _parse_effect(entry: EffectEntry, covariate: int,
                  distributions: DistributionSettings) -> CovariateEffect:
    if isinstance(entry, CovariateEffect):
        effect = entry
    elif isinstance(entry, str):
        effect = CovariateEffect(entry.strip().lower(),
                                 distributions.slope_mean, distributions.slope_sd)
    else:
        raise InvalidParameter(
            f"Effect for covariate {covariate} must be a string or CovariateEffect, "
            f"got {type(entry).__name__}"
        )

    if effect.kind not in C.VALID_EFFECT_TYPES:
        raise InvalidParameter(
            f"Covariate {covariate}: invalid effect type '{effect.kind}'. "
            f"Must be one of {C.VALID_EFFECT_TYPES}"
        )
    if not C.validate_spread(effect.sd):
        raise InvalidParameter(
            f"Covariate {covariate}: slope sd must be finite and >= 0, got {effect.sd}"
        )
    if not np.isfinite(effect.mean):
        raise InvalidParameter(
            f"Covariate {covariate}: slope mean must be finite, got {effect.mean}"
        )
    return effect


def resolve_effects(effect_config: EffectConfig, num_covariates: int,
                    distributions: Optional[DistributionSettings] = None) -> List[CovariateEffect]:
    """
    Turn an effect configuration into one CovariateEffect per covariate.

    Accepted forms:
    - None: covariate 1 fixed, the rest random
    - sequence: entries for covariates 1..len(sequence), in order
    - mapping: {covariate index (1-based): entry}

    Entries are 'fixed', 'random' or a CovariateEffect. Covariates not named
    get a random effect with the default slope mean/sd.

    Raises:
        InvalidParameter: Unknown effect type, negative sd, or a covariate
                          index outside [1, num_covariates]
    """
    distributions = distributions or DistributionSettings()

    if effect_config is None:
        effect_config = {C.DEFAULT_FIXED_COVARIATE: C.EFFECT_FIXED}

    if isinstance(effect_config, Mapping):
        items = list(effect_config.items())
    elif isinstance(effect_config, (str, bytes)):
        raise InvalidParameter("effect_config must be a sequence or mapping, not a string")
    else:
        items = list(enumerate(effect_config, start=1))

    effects = [
        CovariateEffect(C.EFFECT_RANDOM, distributions.slope_mean, distributions.slope_sd)
        for _ in range(num_covariates)
    ]
    for covariate, entry in items:
        if isinstance(covariate, bool) or not isinstance(covariate, Integral):
            raise InvalidParameter(f"Covariate index must be an integer, got {covariate!r}")
        if not 1 <= covariate <= num_covariates:
            raise InvalidParameter(
                f"effect_config references covariate {covariate}, "
                f"outside [1, {num_covariates}]"
            )
        effects[covariate - 1] = _parse_effect(entry, covariate, distributions)

    return effects


# =============================================================================
# GENERATOR
# =============================================================================

def generate(num_species: int,
             num_sites: int,
             num_covariates: int,
             num_surveys: int,
             effect_config: EffectConfig = None,
             *,
             distributions: Optional[DistributionSettings] = None,
             rng: Optional[np.random.Generator] = None,
             seed: Optional[int] = None) -> OccupancyDataset:
    """
    Simulate one multi-species occupancy dataset.

    Draw order (fixed, so a seed reproduces the dataset exactly):
    1. species intercepts
    2. site x covariate matrix
    3. slope columns, covariate by covariate
    4. detection probabilities
    5. latent occupancy z, then detection counts Y given z

    Args:
        num_species: Number of species (> 0)
        num_sites: Number of sites (> 0)
        num_covariates: Number of site covariates (> 0)
        num_surveys: Repeat surveys per site (> 0)
        effect_config: Fixed/random designation per covariate (see resolve_effects)
        distributions: Means/spreads of the generating distributions
        rng: NumPy random generator to draw from
        seed: Seed for a new generator. Passing both rng and seed is an
              error; SEED_DEFAULT is used when neither is given.

    Returns:
        OccupancyDataset with num_species * num_sites rows

    Raises:
        InvalidParameter: Bad counts, effect configuration or spreads, or
                          both rng and seed given
        NumericOverflow: Non-finite linear predictor or detection logit
    """
    num_species = _check_count('num_species', num_species)
    num_sites = _check_count('num_sites', num_sites)
    num_covariates = _check_count('num_covariates', num_covariates)
    num_surveys = _check_count('num_surveys', num_surveys)

    distributions = distributions or DistributionSettings()
    errors = distributions.validate()
    if errors:
        raise InvalidParameter("Invalid distribution settings:\n" + "\n".join(errors))

    effects = resolve_effects(effect_config, num_covariates, distributions)

    if rng is not None and seed is not None:
        raise InvalidParameter("Pass either rng or seed, not both")
    if rng is None:
        rng = np.random.default_rng(C.SEED_DEFAULT if seed is None else seed)

    d = distributions
    intercepts = dgp.draw_intercepts(rng, num_species, d.intercept_mean, d.intercept_sd)
    covariates = dgp.draw_covariate_matrix(
        rng, num_sites, num_covariates, d.covariate_mean, d.covariate_sd
    )
    slopes = dgp.draw_slopes(rng, num_species, [(e.kind, e.mean, e.sd) for e in effects])
    p_detect = dgp.draw_detection_probabilities(
        rng, num_species, d.detection_mean, d.detection_sd
    )

    eta = dgp.linear_predictor(intercepts, slopes, covariates)
    psi = dgp.logistic(eta, quantity="occupancy linear predictor")
    z = dgp.simulate_occupancy(rng, psi)
    counts = dgp.simulate_detections(rng, z, p_detect, num_surveys)

    long = dgp.flatten_long(counts, covariates, num_surveys)
    n_obs = num_species * num_sites

    logger.debug(
        f"Generated {n_obs} rows: {int(z.sum())} occupied, "
        f"{int((counts > 0).sum())} detected"
    )

    return OccupancyDataset(
        Y=long['Y'],
        Species=long['Species'],
        site=long['site'],
        X=long['X'],
        J=long['J'],
        z=z.reshape(n_obs),
        psi=psi.reshape(n_obs),
        intercepts=intercepts,
        slopes=slopes,
        p_detect=p_detect,
        covariates=covariates,
        effects=effects,
    )


# =============================================================================
# SIMULATOR
# =============================================================================

class OccupancySimulator:
    """
    Runs a configured simulation and exports its outputs.

    Coordinates:
    - Data generation from a SimulationSettings
    - Progress logging
    - Export of the long-format table, true values and species effects
    """

    def __init__(self, settings: SimulationSettings, verbose: bool = True):
        """
        Initialize simulator.

        Args:
            settings: Validated simulation settings
            verbose: Print progress banners
        """
        self.settings = settings
        self.rng = np.random.default_rng(settings.seed)
        self.log = SimulationLogger(settings.name, verbose=verbose)
        self.dataset: Optional[OccupancyDataset] = None

    def run(self) -> OccupancyDataset:
        """Run the simulation once and keep the result on the simulator."""
        s = self.settings
        self.log.start(s.n_species, s.n_sites, s.n_covariates, s.n_surveys)

        try:
            effects = resolve_effects(s.effects, s.n_covariates, s.distributions)
            self.log.effects({k: C.effect_label(e.kind) for k, e in enumerate(effects, start=1)})
            self.dataset = generate(
                s.n_species, s.n_sites, s.n_covariates, s.n_surveys, effects,
                distributions=s.distributions, rng=self.rng,
            )
        except (InvalidParameter, NumericOverflow) as e:
            self.log.failed(str(e))
            raise

        self.log.finished(
            self.dataset.n_obs,
            self.dataset.naive_occupancy(),
            self.dataset.true_occupancy(),
        )
        return self.dataset

    def export(self, output_path: Union[str, Path], keep_latent: bool = False) -> pd.DataFrame:
        """
        Run the simulation (if not yet run) and write its outputs.

        Writes the long-format CSV to output_path, and true_values.json and
        species_effects.csv next to it.

        Args:
            output_path: Path for the long-format CSV
            keep_latent: Include the true z and psi columns in the CSV

        Returns:
            The exported long-format DataFrame
        """
        if self.dataset is None:
            self.run()

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        df = self.dataset.to_frame(include_latent=keep_latent)
        df.to_csv(output_path, index=False)
        self.log.saved('observations', str(output_path))

        true_path = output_path.parent / C.TRUE_VALUES_FILE
        with open(true_path, 'w', encoding='utf-8') as f:
            json.dump({
                'model_info': {'name': self.settings.name, 'seed': self.settings.seed},
                'effects': {str(k): e.kind for k, e in enumerate(self.dataset.effects, start=1)},
                'true_values': self.dataset.true_values(),
            }, f, indent=2)
        self.log.saved('true values', str(true_path))

        effects_path = output_path.parent / C.SPECIES_EFFECTS_FILE
        self.dataset.species_slopes_frame().to_csv(effects_path, index=False)
        self.log.saved('species effects', str(effects_path))

        return df
