"""Tests for application configuration loading."""

from pathlib import Path

from pathwise.config.app_config import (
    GEMINI_OPENAI_BASE_URL,
    clear_config_cache,
    load_app_config,
)


class TestLoadAppConfig:
    def test_defaults_when_file_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_app_config(force_reload=True)

        assert config.llm.provider == "gemini"
        assert config.llm.base_url == GEMINI_OPENAI_BASE_URL
        assert config.llm.model == "gemini-2.0-flash"
        assert config.timeouts.auth_session == 10.0
        assert config.timeouts.profile_fetch == 8.0
        assert config.timeouts.store_query == 30.0
        assert config.timeouts.lesson_content == 25.0
        assert config.cache_db_path == Path("db/pathwise.db")

    def test_partial_file_merges_over_defaults(self, tmp_path):
        config_file = tmp_path / "pathwise.yaml"
        config_file.write_text(
            "llm:\n  model: gemini-1.5-pro\ntimeouts:\n  questions: 5\n"
            "paths:\n  cache_db: cache/lessons.db\n"
        )

        config = load_app_config(config_path=config_file)

        assert config.llm.model == "gemini-1.5-pro"
        assert config.llm.api_key_env == "GEMINI_API_KEY"
        assert config.timeouts.questions == 5.0
        assert config.timeouts.roadmap == 30.0
        assert config.cache_db_path == Path("cache/lessons.db")

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "pathwise.yaml"
        config_file.write_text("")

        config = load_app_config(config_path=config_file)

        assert config.store.url_env == "SUPABASE_URL"

    def test_cached_until_cleared(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        first = load_app_config()
        assert load_app_config() is first

        clear_config_cache()
        assert load_app_config() is not first


class TestSecretsFromEnvironment:
    def test_store_credentials(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)

        store = load_app_config(force_reload=True).store

        assert store.get_url() == "https://demo.supabase.co"
        assert store.get_anon_key() == "anon"
        assert store.get_service_role_key() is None

    def test_llm_key_env_is_configurable(self, tmp_path, monkeypatch):
        config_file = tmp_path / "pathwise.yaml"
        config_file.write_text("llm:\n  api_key_env: MY_KEY\n")
        monkeypatch.setenv("MY_KEY", "k-123")

        assert load_app_config(config_path=config_file).llm.get_api_key() == "k-123"
