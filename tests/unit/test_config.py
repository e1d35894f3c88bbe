"""Тесты SearchConfig: дефолты, env, TOML, валидация."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from settings_search.config import (
    CONFIG_FILE_NAME,
    SearchConfig,
    find_config_file,
    get_config,
    reset_config,
)

TOML = """
[storage]
backend = "memory"

[api]
url = "http://club.local/api/"

[search]
threshold = 0.25
debounce_ms = 150

[history]
max_size = 20

[logging]
level = "DEBUG"
"""


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Пустая рабочая директория без TOML/.env и без SETTINGS_SEARCH_* в окружении."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.upper().startswith("SETTINGS_SEARCH_"):
            monkeypatch.delenv(name)
    return tmp_path


class TestDefaults:
    def test_default_values(self, isolated_env):
        config = SearchConfig()
        assert config.storage_backend == "sqlite"
        assert config.storage_path == Path("settings_search.db")
        assert config.fuzzy_enabled is True
        assert config.fuzzy_threshold == 0.4
        assert config.debounce_ms == 300
        assert config.persist_interval_ms == 1000
        assert config.duplicate_window_seconds == 5.0
        assert config.log_level == "WARNING"
        assert config.api_url is None

    def test_derived_values(self, isolated_env):
        config = SearchConfig(debounce_ms=250, persist_interval_ms=500)
        assert config.debounce_seconds == 0.25
        assert config.persist_interval_seconds == 0.5

    def test_history_defaults(self, isolated_env):
        settings = SearchConfig(max_history_size=10, retention_days=7).history_defaults()
        assert settings.max_history_size == 10
        assert settings.retention_days == 7


class TestSources:
    """Приоритет источников: kwargs > env > TOML > defaults."""

    def test_env_variables(self, isolated_env, monkeypatch):
        monkeypatch.setenv("SETTINGS_SEARCH_DEBOUNCE_MS", "120")
        monkeypatch.setenv("SETTINGS_SEARCH_FUZZY_ENABLED", "false")
        config = SearchConfig()
        assert config.debounce_ms == 120
        assert config.fuzzy_enabled is False

    def test_toml_sections(self, isolated_env):
        (isolated_env / CONFIG_FILE_NAME).write_text(TOML, encoding="utf-8")
        config = SearchConfig()
        assert config.storage_backend == "memory"
        assert config.api_url == "http://club.local/api"
        assert config.fuzzy_threshold == 0.25
        assert config.max_history_size == 20
        assert config.log_level == "DEBUG"

    def test_env_beats_toml(self, isolated_env, monkeypatch):
        (isolated_env / CONFIG_FILE_NAME).write_text(TOML, encoding="utf-8")
        monkeypatch.setenv("SETTINGS_SEARCH_DEBOUNCE_MS", "500")
        assert SearchConfig().debounce_ms == 500

    def test_kwargs_beat_toml(self, isolated_env):
        (isolated_env / CONFIG_FILE_NAME).write_text(TOML, encoding="utf-8")
        assert SearchConfig(debounce_ms=50).debounce_ms == 50

    def test_broken_toml_ignored(self, isolated_env):
        (isolated_env / CONFIG_FILE_NAME).write_text("[storage", encoding="utf-8")
        assert SearchConfig().storage_backend == "sqlite"

    def test_find_config_in_parent(self, isolated_env, monkeypatch):
        (isolated_env / CONFIG_FILE_NAME).write_text("", encoding="utf-8")
        nested = isolated_env / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == isolated_env / CONFIG_FILE_NAME


class TestValidation:
    def test_threshold_range(self, isolated_env):
        with pytest.raises(ValidationError):
            SearchConfig(fuzzy_threshold=1.5)

    def test_unknown_backend(self, isolated_env):
        with pytest.raises(ValidationError):
            SearchConfig(storage_backend="redis")

    def test_blank_values_normalized(self, isolated_env):
        config = SearchConfig(api_url="  ", api_token="", settings_file="")
        assert config.api_url is None
        assert config.api_token is None
        assert config.settings_file is None


class TestGlobalConfig:
    def test_cached_until_reset(self, isolated_env):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_overrides_create_new_instance(self, isolated_env):
        first = get_config()
        overridden = get_config(log_level="DEBUG")
        assert overridden is not first
        assert overridden.log_level == "DEBUG"

    def test_to_toml_dict_excludes_token(self, isolated_env):
        data = SearchConfig(api_token="secret-token").to_toml_dict()
        assert "token" not in data["api"]
        assert data["search"]["threshold"] == 0.4
