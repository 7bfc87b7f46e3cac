"""Application configuration settings.

This module provides the AppConfig class and settings singleton.
"""

from pathlib import Path

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from persona_engine.config.env_loader import Environment, get_environment, load_env_files
from persona_engine.config.validators import (
    resolve_path,
    validate_log_format,
    validate_log_level,
)

log = structlog.get_logger(__name__)


class AppConfig(BaseSettings):
    """Unified application configuration.

    Values come from PERSONA_* environment variables (after .env files are
    loaded) and fall back to the defaults below. All values are validated by
    Pydantic.
    """

    model_config = SettingsConfigDict(
        env_prefix="PERSONA_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        validate_default=True,
        protected_namespaces=(),  # model_config_path is a real field
    )

    # Environment
    environment: Environment = Field(
        default_factory=get_environment, description="Current environment"
    )
    debug: bool = Field(default=False, alias="APP_DEBUG", description="Debug mode flag")

    # Application
    project_name: str = Field(default="Persona Engine", description="Project name")
    version: str = Field(default="0.1.0", description="Application version")

    # Telemetry
    log_dir: Path = Field(default=Path("telemetry/logs"), description="Log directory path")
    log_level: str = Field(
        default="INFO",
        alias="APP_LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default="console",
        alias="APP_LOG_FORMAT",
        description="Console log format (json or console)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        return validate_log_format(v)

    @field_validator("log_dir", "model_config_path", mode="before")
    @classmethod
    def resolve_paths(cls, v: Path | str) -> Path:
        """Resolve relative paths to absolute."""
        return resolve_path(v)

    # Model backend (Ollama)
    ollama_base_url: str = Field(
        default="http://localhost:11434", description="Base URL of the local Ollama service"
    )
    llm_timeout_seconds: float = Field(
        default=60.0, gt=0, description="Timeout for a streaming chat request"
    )
    llm_service_check_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Timeout for the service availability check"
    )
    llm_model_list_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for listing installed backend models"
    )
    llm_pull_timeout_seconds: float = Field(
        default=600.0, gt=0, description="Timeout for pulling a missing backend model"
    )
    model_config_path: Path = Field(
        default=Path("config/models.yaml"), description="Path to the model catalog file"
    )
    default_model_id: str = Field(
        default="Llama-3.1-8B-Instruct-q4f32_1-MLC",
        description="Catalog model id used by the CLI when none is given",
    )

    # Orchestration graph
    graph_max_retries: int = Field(
        default=3, ge=0, description="Model attempts per turn before the error is fatal"
    )
    graph_retry_backoff_seconds: float = Field(
        default=1.0, ge=0, description="Backoff unit; the n-th retry waits n units"
    )
    graph_max_iterations: int = Field(
        default=100, ge=1, description="Hard ceiling on node transitions per turn"
    )

    # Memory engine
    memory_retrieval_limit: int = Field(
        default=3, ge=1, description="Memories injected into the system prompt per turn"
    )
    memory_extraction_threshold: float = Field(
        default=7.0, description="Importance assigned to newly extracted memories"
    )

    # Quest generation
    quest_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    quest_top_p: float = Field(default=0.9, gt=0.0, le=1.0)


_settings: AppConfig | None = None


def load_app_config() -> AppConfig:
    """Load and validate application configuration.

    This function:
    1. Loads .env files in priority order (via env_loader)
    2. Creates AppConfig instance (reads from environment variables)
    3. Validates all values using Pydantic

    Returns:
        Validated AppConfig instance.

    Raises:
        ValidationError: If configuration validation fails.
    """
    load_env_files()

    try:
        config = AppConfig()
        log.debug(
            "app_config_loaded",
            environment=config.environment.value,
            log_level=config.log_level,
            ollama_base_url=config.ollama_base_url,
        )
        return config
    except Exception as e:
        log.error("app_config_load_failed", error=str(e), error_type=type(e).__name__)
        raise


def get_settings() -> AppConfig:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = load_app_config()
    return _settings
