"""Tests for configuration schemas."""

import pytest
from pydantic import ValidationError

from listing_qa.config.schemas import (
    DEFAULT_RECOMMENDED_FIELDS,
    EngineConfig,
    LoggingConfig,
    RuntimeConfig,
    ValidationConfig,
)


pytestmark = pytest.mark.fast


class TestDefaults:
    """Tests for default configuration values."""

    def test_validation_defaults(self):
        """Test the built-in check thresholds."""
        config = ValidationConfig()

        assert config.price_max_threshold == 10000.0
        assert config.description_min_length == 100
        assert config.description_max_length == 2000
        assert config.bullet_min_length == 15
        assert config.bullet_max_length == 500
        assert config.max_title_punctuation == 3

    def test_engine_defaults(self):
        """Test that every section has usable defaults."""
        config = EngineConfig()

        assert config.runtime.max_workers == 4
        assert config.enrichment.department_defaults.adult == "womens"
        assert config.enrichment.recommended_optional_fields == DEFAULT_RECOMMENDED_FIELDS
        assert config.rules.seed_path == "config/rules/default_rules.yaml"

    def test_recommended_fields_not_shared(self):
        """Test that each config gets its own recommended field list."""
        first = EngineConfig()
        first.enrichment.recommended_optional_fields.append("extra")

        assert "extra" not in EngineConfig().enrichment.recommended_optional_fields


class TestValidators:
    """Tests for schema validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_workers": 0}, {"batch_size": 0}, {"max_workers": 65}],
        ids=["no_workers", "empty_batch", "too_many_workers"],
    )
    def test_runtime_bounds(self, kwargs):
        """Test runtime setting bounds."""
        with pytest.raises(ValidationError):
            RuntimeConfig(**kwargs)

    def test_price_threshold_positive(self):
        """Test that the price threshold must be positive."""
        with pytest.raises(ValidationError):
            ValidationConfig(price_max_threshold=0)

    def test_logging_level_normalized(self):
        """Test that log level names are upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_logging_format_checked(self):
        """Test that only json and pretty formats are accepted."""
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_extra_sections_allowed(self):
        """Test that unknown top-level sections are kept."""
        config = EngineConfig(custom_section={"key": "value"})
        assert config.model_extra == {"custom_section": {"key": "value"}}
