"""Configuration loader: YAML file merging + environment overrides.

`load_config_from_files` only reads and deep-merges YAML files (base +
optional environment). Environment variable overrides and validation happen
in `get_config()`.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError, ErrorCode
from .schemas import EngineConfig


ENV_PREFIX = "LISTING_QA"


def _deep_merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _convert_env_value(value: str) -> Any:
    """Convert environment variable string to appropriate type."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def _apply_env_overrides(config_dict: dict[str, Any], prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Apply environment variable overrides to configuration dictionary.

    Example:
      LISTING_QA__RUNTIME__MAX_WORKERS=8 -> config_dict["runtime"]["max_workers"] = 8
    """
    result = config_dict.copy()

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(f"{prefix}__"):
            continue

        config_path = env_key[len(f"{prefix}__") :].lower().split("__")

        current = result
        for path_part in config_path[:-1]:
            if path_part not in current or not isinstance(current[path_part], dict):
                current[path_part] = {}
            else:
                current[path_part] = dict(current[path_part])
            current = current[path_part]

        current[config_path[-1]] = _convert_env_value(env_value)

    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to load config file {path}: {e}",
            operation="load_config_from_files",
            details={"file_path": str(path)},
            status_code=ErrorCode.CONFIG_LOAD_FAILED,
            cause=e,
        ) from e


def load_config_from_files(
    environment: str | None = None, config_dir: Path | None = None
) -> dict[str, Any]:
    """Load configuration from YAML files with environment-specific overrides.

    A missing `base.yaml` is not an error: every setting has a default, so
    the engine can be embedded without a config directory.
    """
    if config_dir is None:
        config_dir = Path("config")

    config: dict[str, Any] = {}
    base_file = Path(config_dir) / "base.yaml"
    if base_file.exists():
        config = _read_yaml(base_file)

    if environment:
        env_file = Path(config_dir) / f"{environment}.yaml"
        if env_file.exists():
            config = _deep_merge_dicts(config, _read_yaml(env_file))

    return config


@lru_cache(maxsize=1)
def get_config(
    environment: str | None = None,
    config_dir: Path | None = None,
    apply_env_overrides_flag: bool = True,
) -> EngineConfig:
    """Get validated configuration with caching.

    - Load merged file config via `load_config_from_files`
    - Apply environment variable overrides (if requested)
    - Validate and return an EngineConfig instance
    """
    if environment is None:
        environment = os.getenv(f"{ENV_PREFIX}__ENVIRONMENT", "development")

    try:
        config_dict = load_config_from_files(environment=environment, config_dir=config_dir)
        config_dict.setdefault("environment", environment)

        if apply_env_overrides_flag:
            config_dict = _apply_env_overrides(config_dict)

        return EngineConfig(**config_dict)

    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            operation="get_config",
            details={"environment": environment},
            cause=e,
        ) from e


def reload_config() -> None:
    """Clear configuration cache to force reload on next access."""
    get_config.cache_clear()
