"""Configuration package for PathWise."""

from pathwise.config.app_config import (
    AppConfig,
    LLMSettings,
    StoreConfig,
    TimeoutConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "LLMSettings",
    "StoreConfig",
    "TimeoutConfig",
    "clear_config_cache",
    "load_app_config",
]
