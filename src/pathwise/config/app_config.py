"""Application configuration loader.

Loads centralized configuration from config/pathwise.yaml with fallback
to built-in defaults. Secrets are never stored in the file: the config only
names the environment variables that hold them.

Usage:
    from pathwise.config.app_config import load_app_config

    config = load_app_config()
    url = config.store.get_url()
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("config/pathwise.yaml")

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


@dataclass
class StoreConfig:
    """Configuration for the hosted auth/database service."""

    url_env: str = "SUPABASE_URL"
    anon_key_env: str = "SUPABASE_ANON_KEY"
    service_role_key_env: str = "SUPABASE_SERVICE_ROLE_KEY"
    client_info: str = "pathwise-python"

    def get_url(self) -> str | None:
        """Get project URL from environment variable."""
        return os.environ.get(self.url_env)

    def get_anon_key(self) -> str | None:
        """Get anonymous (public) key from environment variable."""
        return os.environ.get(self.anon_key_env)

    def get_service_role_key(self) -> str | None:
        """Get service role key (admin operations only)."""
        return os.environ.get(self.service_role_key_env)


@dataclass
class LLMSettings:
    """Configuration for the generative-language endpoint."""

    provider: str = "gemini"
    base_url: str = GEMINI_OPENAI_BASE_URL
    model: str = "gemini-2.0-flash"
    api_key_env: str = "GEMINI_API_KEY"
    temperature: float = 0.7
    max_tokens: int = 8192

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class TimeoutConfig:
    """Per-call timeouts, in seconds."""

    auth_session: float = 10.0
    profile_fetch: float = 8.0
    store_query: float = 30.0
    llm_default: float = 15.0
    questions: float = 20.0
    roadmap: float = 30.0
    lesson_content: float = 25.0


@dataclass
class AppConfig:
    """Application-wide configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    llm: LLMSettings = field(default_factory=LLMSettings)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    paths: dict[str, str] = field(default_factory=dict)

    @property
    def cache_db_path(self) -> Path:
        """Location of the local lesson content cache."""
        return Path(self.paths.get("cache_db", "db/pathwise.db"))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "store": {
            "url_env": "SUPABASE_URL",
            "anon_key_env": "SUPABASE_ANON_KEY",
            "service_role_key_env": "SUPABASE_SERVICE_ROLE_KEY",
            "client_info": "pathwise-python",
        },
        "llm": {
            "provider": "gemini",
            "base_url": GEMINI_OPENAI_BASE_URL,
            "model": "gemini-2.0-flash",
            "api_key_env": "GEMINI_API_KEY",
            "temperature": 0.7,
            "max_tokens": 8192,
        },
        "timeouts": {
            "auth_session": 10.0,
            "profile_fetch": 8.0,
            "store_query": 30.0,
            "llm_default": 15.0,
            "questions": 20.0,
            "roadmap": 30.0,
            "lesson_content": 25.0,
        },
        "paths": {
            "cache_db": "db/pathwise.db",
        },
    }


def _merge(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge a partial config file over the defaults (one level deep)."""
    result = copy.deepcopy(defaults)
    for section, values in (overrides or {}).items():
        if isinstance(values, dict) and isinstance(result.get(section), dict):
            result[section].update(values)
        else:
            result[section] = values
    return result


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    store_data = data.get("store", {})
    store = StoreConfig(
        url_env=store_data.get("url_env", "SUPABASE_URL"),
        anon_key_env=store_data.get("anon_key_env", "SUPABASE_ANON_KEY"),
        service_role_key_env=store_data.get(
            "service_role_key_env", "SUPABASE_SERVICE_ROLE_KEY"
        ),
        client_info=store_data.get("client_info", "pathwise-python"),
    )

    llm_data = data.get("llm", {})
    llm = LLMSettings(
        provider=llm_data.get("provider", "gemini"),
        base_url=llm_data.get("base_url", GEMINI_OPENAI_BASE_URL),
        model=llm_data.get("model", "gemini-2.0-flash"),
        api_key_env=llm_data.get("api_key_env", "GEMINI_API_KEY"),
        temperature=float(llm_data.get("temperature", 0.7)),
        max_tokens=int(llm_data.get("max_tokens", 8192)),
    )

    timeout_data = data.get("timeouts", {})
    defaults = TimeoutConfig()
    timeouts = TimeoutConfig(
        **{
            name: float(timeout_data.get(name, getattr(defaults, name)))
            for name in defaults.__dataclass_fields__
        }
    )

    paths = data.get("paths", {})

    return AppConfig(store=store, llm=llm, timeouts=timeouts, paths=paths)


def load_app_config(
    force_reload: bool = False, config_path: Path | None = None
) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.
        config_path: Alternative config file (default: config/pathwise.yaml)

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload and config_path is None:
        return _cached_config

    path = config_path or CONFIG_FILE

    if path.exists():
        logger.debug("loading_app_config", source=str(path))
        overrides = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        data = _merge(_get_defaults(), overrides)
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
