"""Tests for configuration settings."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from persona_engine.config import (
    AppConfig,
    Environment,
    get_environment,
    get_settings,
    settings,
)
from persona_engine.config.env_loader import early_log_format, early_log_level, load_env_files


class TestEnvironmentDetection:
    """Test environment detection."""

    def test_get_environment_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default environment is development."""
        monkeypatch.delenv("APP_ENV", raising=False)
        assert get_environment() == Environment.DEVELOPMENT

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("production", Environment.PRODUCTION),
            ("prod", Environment.PRODUCTION),
            ("staging", Environment.STAGING),
            ("stage", Environment.STAGING),
            ("test", Environment.TEST),
            ("TEST", Environment.TEST),
            ("anything", Environment.DEVELOPMENT),
        ],
    )
    def test_get_environment_mapping(
        self, monkeypatch: pytest.MonkeyPatch, value: str, expected: Environment
    ) -> None:
        monkeypatch.setenv("APP_ENV", value)
        assert get_environment() == expected


class TestAppConfig:
    """Test AppConfig class."""

    def test_app_config_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test AppConfig has correct code defaults (isolated from .env)."""
        for name in (
            "APP_ENV",
            "APP_DEBUG",
            "APP_LOG_LEVEL",
            "APP_LOG_FORMAT",
            "PERSONA_OLLAMA_BASE_URL",
            "PERSONA_GRAPH_MAX_RETRIES",
            "PERSONA_MEMORY_RETRIEVAL_LIMIT",
        ):
            monkeypatch.delenv(name, raising=False)

        config = AppConfig()

        assert config.environment == Environment.DEVELOPMENT
        assert config.debug is False
        assert config.project_name == "Persona Engine"
        assert config.log_level == "INFO"
        assert config.log_format == "console"
        assert config.ollama_base_url == "http://localhost:11434"
        assert config.graph_max_retries == 3
        assert config.graph_retry_backoff_seconds == 1.0
        assert config.graph_max_iterations == 100
        assert config.memory_retrieval_limit == 3
        assert config.memory_extraction_threshold == 7.0
        assert config.quest_temperature == 0.7
        assert config.quest_top_p == 0.9

    def test_app_config_from_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test AppConfig reads PERSONA_-prefixed and APP_ aliased variables."""
        monkeypatch.setenv("APP_DEBUG", "1")
        monkeypatch.setenv("APP_LOG_LEVEL", "debug")
        monkeypatch.setenv("PERSONA_OLLAMA_BASE_URL", "http://gpu-box:11434")
        monkeypatch.setenv("PERSONA_GRAPH_MAX_RETRIES", "5")

        config = AppConfig()

        assert config.debug is True
        assert config.log_level == "DEBUG"
        assert config.ollama_base_url == "http://gpu-box:11434"
        assert config.graph_max_retries == 5

    def test_app_config_log_level_validation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_LOG_LEVEL", "INVALID")
        with pytest.raises(ValidationError):
            AppConfig()

    def test_app_config_log_format_validation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            AppConfig()

    def test_app_config_rejects_negative_retries(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERSONA_GRAPH_MAX_RETRIES", "-1")
        with pytest.raises(ValidationError):
            AppConfig()

    def test_app_config_path_resolution(self) -> None:
        """Test that relative paths are resolved to absolute."""
        config = AppConfig()
        assert config.log_dir.is_absolute()
        assert config.model_config_path.is_absolute()
        assert config.model_config_path.name == "models.yaml"


class TestSingleton:
    """Test singleton pattern."""

    def test_get_settings_returns_singleton(self) -> None:
        assert get_settings() is get_settings()

    def test_settings_module_export(self) -> None:
        assert isinstance(settings, AppConfig)
        assert settings is get_settings()


class TestEarlyLogSettings:
    """Test the pre-settings log level and format lookups."""

    def test_level_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_LOG_LEVEL", "warning")
        assert early_log_level() == "WARNING"

    def test_invalid_level_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_LOG_LEVEL", "chatty")
        assert early_log_level(default="ERROR") == "ERROR"

    def test_format_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_LOG_FORMAT", "JSON")
        assert early_log_format() == "json"

    def test_invalid_format_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_LOG_FORMAT", "xml")
        assert early_log_format() == "console"


class TestEnvFileLoading:
    """Test .env file loading."""

    def test_load_env_files_priority(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the most specific .env file wins."""
        (tmp_path / ".env").write_text("PERSONA_TEST_VAR=base\n")
        (tmp_path / ".env.local").write_text("PERSONA_TEST_VAR=local\n")
        (tmp_path / ".env.development").write_text("PERSONA_TEST_VAR=development\n")
        (tmp_path / ".env.development.local").write_text(
            "PERSONA_TEST_VAR=development_local\n"
        )
        monkeypatch.setenv("APP_ENV", "development")
        monkeypatch.delenv("PERSONA_TEST_VAR", raising=False)

        loaded = load_env_files(tmp_path)

        assert os.environ["PERSONA_TEST_VAR"] == "development_local"
        assert loaded == [".env.development.local", ".env.development", ".env.local", ".env"]
        monkeypatch.delenv("PERSONA_TEST_VAR")

    def test_explicit_environment_wins(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / ".env").write_text("PERSONA_TEST_VAR=from_file\n")
        monkeypatch.setenv("PERSONA_TEST_VAR", "explicit")

        load_env_files(tmp_path)

        assert os.environ["PERSONA_TEST_VAR"] == "explicit"

    def test_no_env_files(self, tmp_path: Path) -> None:
        assert load_env_files(tmp_path) == []
