"""
Tests for Configuration Validation
==================================
"""

import warnings

import pytest

from occupancy_sim.config_schema import (
    apply_defaults,
    load_config,
    settings_from_config,
    validate_config,
)
from occupancy_sim.errors import InvalidParameter
from occupancy_sim.simulator import CovariateEffect


@pytest.mark.unit
class TestValidateConfig:
    """Tests for schema validation."""

    def test_minimal_config_valid(self, minimal_config):
        """Test the minimal configuration validates without errors."""
        result = validate_config(minimal_config)
        assert result.is_valid, result.errors

    def test_shipped_config_valid(self, model_config):
        """Test the shipped configuration validates without errors or warnings."""
        result = validate_config(model_config)
        assert result.is_valid, result.errors
        assert result.warnings == []

    def test_missing_population(self):
        """Test a configuration without population is rejected."""
        result = validate_config({'model_info': {'name': 'x'}})
        assert not result.is_valid
        assert any('population' in e for e in result.errors)

    @pytest.mark.parametrize("key", ['n_species', 'n_sites', 'n_covariates', 'n_surveys'])
    def test_missing_count(self, minimal_config, key):
        """Test each population count is required."""
        del minimal_config['population'][key]
        result = validate_config(minimal_config)
        assert not result.is_valid
        assert any(key in e for e in result.errors)

    @pytest.mark.parametrize("value", [0, -2, 1.5, True, "4"])
    def test_bad_count(self, minimal_config, value):
        """Test non-positive and non-integer counts are rejected."""
        minimal_config['population']['n_sites'] = value
        assert not validate_config(minimal_config).is_valid

    def test_negative_distribution_sd(self, minimal_config):
        """Test a negative distribution sd is rejected."""
        minimal_config['distributions']['detection']['sd'] = -1.0
        result = validate_config(minimal_config)
        assert not result.is_valid
        assert any('detection.sd' in e for e in result.errors)

    def test_effect_covariate_out_of_range(self, minimal_config):
        """Test an effect naming a covariate beyond n_covariates is rejected."""
        minimal_config['effects'].append({'covariate': 3, 'type': 'random'})
        result = validate_config(minimal_config)
        assert not result.is_valid
        assert any('outside [1, 2]' in e for e in result.errors)

    def test_duplicate_effect(self, minimal_config):
        """Test a covariate listed twice under effects is rejected."""
        minimal_config['effects'].append({'covariate': 1, 'type': 'random'})
        assert not validate_config(minimal_config).is_valid

    def test_unknown_effect_type(self, minimal_config):
        """Test an effect type other than fixed or random is rejected."""
        minimal_config['effects'][0]['type'] = 'mixed'
        assert not validate_config(minimal_config).is_valid

    def test_negative_effect_sd(self, minimal_config):
        """Test a negative effect sd is rejected."""
        minimal_config['effects'][0]['sd'] = -0.5
        assert not validate_config(minimal_config).is_valid

    @pytest.mark.parametrize("section, value", [
        ('distributions', {'intercept': 1.0}),
        ('distributions', [1, 2]),
        ('effects', [1]),
        ('effects', None),
        ('population', 12),
        ('model_info', 'name'),
    ])
    def test_malformed_section_reported(self, minimal_config, section, value):
        """Test sections of the wrong JSON type are reported as errors."""
        minimal_config[section] = value
        result = validate_config(minimal_config)
        assert not result.is_valid
        assert any(section in e for e in result.errors)

    def test_non_object_config(self):
        """Test a configuration that is not an object is rejected."""
        assert not validate_config([1, 2]).is_valid

    def test_missing_optional_sections_warn(self, minimal_config):
        """Test missing optional sections produce warnings, not errors."""
        del minimal_config['distributions']
        del minimal_config['effects']
        del minimal_config['population']['seed']
        result = validate_config(minimal_config)
        assert result.is_valid
        assert any('seed' in w for w in result.warnings)
        assert any('effects' in w for w in result.warnings)
        assert any('distributions.intercept' in w for w in result.warnings)


@pytest.mark.unit
class TestLoadConfig:
    """Tests for loading, defaults and conversion."""

    def test_load_shipped_config(self, model_config_path):
        """Test the shipped configuration loads without warnings."""
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            config = load_config(model_config_path)
        assert config['population']['n_species'] == 12

    def test_invalid_file_raises(self, minimal_config, write_config):
        """Test loading an invalid configuration raises InvalidParameter."""
        minimal_config['population']['n_species'] = 0
        with pytest.raises(InvalidParameter, match='n_species'):
            load_config(write_config(minimal_config))

    @pytest.mark.parametrize("effects", [[1], None])
    def test_malformed_effects_raise_invalid(self, minimal_config, write_config, effects):
        """Test malformed effects raise InvalidParameter on load."""
        minimal_config['effects'] = effects
        with pytest.raises(InvalidParameter, match='effects'):
            load_config(write_config(minimal_config))

    def test_missing_file_raises(self, tmp_path):
        """Test a missing file raises InvalidParameter."""
        with pytest.raises(InvalidParameter, match='Cannot read configuration'):
            load_config(tmp_path / 'nope.json')

    def test_unparseable_file_raises(self, tmp_path):
        """Test a file that is not valid JSON raises InvalidParameter."""
        path = tmp_path / 'broken.json'
        path.write_text('{"population": ')
        with pytest.raises(InvalidParameter, match='Cannot read configuration'):
            load_config(path)

    def test_warnings_emitted(self, minimal_config, write_config):
        """Test validation warnings are emitted as UserWarning."""
        del minimal_config['population']['seed']
        with pytest.warns(UserWarning, match='seed'):
            config = load_config(write_config(minimal_config))
        assert config['population']['seed'] == 42

    def test_defaults_fill_distributions(self, minimal_config):
        """Test missing distributions default to N(0, 1)."""
        del minimal_config['distributions']
        config = apply_defaults(minimal_config)
        for key in ('intercept', 'covariates', 'slopes', 'detection'):
            assert config['distributions'][key] == {'mean': 0.0, 'sd': 1.0}

    def test_effect_defaults_from_slopes(self, minimal_config):
        """Test effects without mean or sd inherit the slope distribution."""
        minimal_config['distributions']['slopes'] = {'mean': 0.4, 'sd': 0.1}
        config = apply_defaults(minimal_config)
        assert config['effects'][0]['mean'] == 0.4
        assert config['effects'][0]['sd'] == 0.1

    def test_settings_from_config(self, model_config):
        """Test conversion of a configuration to SimulationSettings."""
        settings = settings_from_config(apply_defaults(model_config))
        assert (settings.n_species, settings.n_sites) == (12, 40)
        assert (settings.n_covariates, settings.n_surveys) == (3, 4)
        assert settings.seed == 42
        assert settings.effects[1] == CovariateEffect('fixed', 0.5, 1.0)
        assert settings.effects[2] == CovariateEffect('random', -0.5, 0.75)
        assert settings.distributions.detection_sd == 1.0

    def test_settings_without_effects_section(self, minimal_config):
        """Test a configuration without effects leaves the layout to the default."""
        del minimal_config['effects']
        settings = settings_from_config(apply_defaults(minimal_config))
        assert settings.effects is None
