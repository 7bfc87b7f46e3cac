"""Unified configuration management for the persona engine.

This module provides a single source of truth for all configuration,
integrating environment variables, .env files, YAML files, and defaults.
"""

from persona_engine.config.env_loader import Environment, get_environment
from persona_engine.config.loader import ConfigLoadError
from persona_engine.config.model_loader import ModelConfigError, load_model_catalog
from persona_engine.config.settings import AppConfig, get_settings, load_app_config

# Singleton instance
settings = get_settings()

__all__ = [
    "settings",
    "AppConfig",
    "get_settings",
    "load_app_config",
    "Environment",
    "get_environment",
    "load_model_catalog",
    "ConfigLoadError",
    "ModelConfigError",
]
