"""Configuration management for the listing validation engine."""

from .loader import get_config, load_config_from_files, reload_config
from .schemas import EngineConfig


__all__ = ["EngineConfig", "get_config", "load_config_from_files", "reload_config"]
