"""Configuration schemas using Pydantic for type-safe configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_RECOMMENDED_FIELDS = [
    "bullet_point2",
    "bullet_point3",
    "bullet_point4",
    "bullet_point5",
    "other_image_url1",
    "other_image_url2",
    "material_type",
    "fabric_type",
    "care_instructions",
    "country_of_origin",
    "manufacturer",
]


class ValidationConfig(BaseModel):
    """Thresholds used by the built-in custom checks.

    Rule-level `rule_config` values (e.g. `maxThreshold`, `minLength`) take
    precedence over these defaults.
    """

    price_max_threshold: float = Field(
        default=10000.0, gt=0, description="Upper bound for a reasonable price"
    )
    description_max_length: int = Field(default=2000, ge=1)
    description_min_length: int = Field(
        default=100, ge=0, description="Minimum trimmed description length for quality"
    )
    bullet_max_length: int = Field(default=500, ge=1)
    bullet_min_length: int = Field(
        default=15, ge=0, description="Minimum trimmed bullet length for quality"
    )
    bullet_point_count: int = Field(default=5, ge=1, le=10)
    max_title_punctuation: int = Field(
        default=3, ge=0, description="Punctuation marks allowed in a title before flagging"
    )


class DepartmentDefaults(BaseModel):
    """Tie-break departments used when inference finds conflicting hints."""

    baby: str = "baby-girls"
    kids: str = "girls"
    adult: str = "womens"


class EnrichmentConfig(BaseModel):
    """Configuration for heuristic and lookup enrichment."""

    recommended_optional_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RECOMMENDED_FIELDS)
    )
    department_defaults: DepartmentDefaults = Field(default_factory=DepartmentDefaults)
    key_feature_words: int = Field(default=4, ge=1)
    suggest_title: bool = Field(
        default=True, description="Suggest a generated item_name when the record has none"
    )


class RuntimeConfig(BaseModel):
    """Per-run execution settings."""

    max_workers: int = Field(default=4, ge=1, le=64)
    batch_size: int = Field(default=500, ge=1)
    progress_log_interval: int = Field(
        default=1000, ge=1, description="Log progress every N records"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = Field(default="pretty", description="'json' or 'pretty'")
    file_path: str | None = None
    max_file_size_mb: int = Field(default=100, ge=1)
    backup_count: int = Field(default=5, ge=0)
    include_stage: bool = True
    include_run_id: bool = True
    include_timestamps: bool = True

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        """Normalize the log level name."""
        return value.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, value: str) -> str:
        if value not in ("json", "pretty"):
            raise ValueError("format must be 'json' or 'pretty'")
        return value


class RulesConfig(BaseModel):
    """Where the default rule/brand/lookup seed lives."""

    seed_path: str = Field(default="config/rules/default_rules.yaml")


class EngineConfig(BaseModel):
    """Root configuration model."""

    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    environment: str = "development"

    model_config = ConfigDict(extra="allow")
