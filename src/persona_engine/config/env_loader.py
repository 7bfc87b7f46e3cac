"""Environment detection and .env file loading.

Everything here runs before the settings singleton exists, so values are read
from os.environ directly. The logger also relies on this module to pick its
level before configuration is loaded; keep it free of telemetry imports.
"""

import os
from enum import Enum
from pathlib import Path

import structlog
from dotenv import load_dotenv

from persona_engine.config.validators import project_root as default_project_root
from persona_engine.config.validators import validate_log_format, validate_log_level

log = structlog.get_logger(__name__)


class Environment(str, Enum):
    """Deployment environment, selected with APP_ENV."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


_ENVIRONMENT_ALIASES = {
    "production": Environment.PRODUCTION,
    "prod": Environment.PRODUCTION,
    "staging": Environment.STAGING,
    "stage": Environment.STAGING,
    "test": Environment.TEST,
}


def get_environment() -> Environment:
    """Map APP_ENV to an Environment; unknown or unset values mean development."""
    app_env = os.getenv("APP_ENV", "").strip().lower()
    return _ENVIRONMENT_ALIASES.get(app_env, Environment.DEVELOPMENT)


def early_log_level(default: str = "INFO") -> str:
    """Return APP_LOG_LEVEL if it is a valid level, else default."""
    try:
        return validate_log_level(os.getenv("APP_LOG_LEVEL", default))
    except ValueError:
        return validate_log_level(default)


def early_log_format(default: str = "console") -> str:
    """Return APP_LOG_FORMAT if it is "json" or "console", else default."""
    try:
        return validate_log_format(os.getenv("APP_LOG_FORMAT", default))
    except ValueError:
        return validate_log_format(default)


def load_env_files(project_root: Path | None = None) -> list[str]:
    """Load .env files, most specific first.

    Files are tried in this order and a key keeps the first value it gets:

    1. `.env.{environment}.local`
    2. `.env.{environment}`
    3. `.env.local`
    4. `.env`

    Variables already present in the process environment are never overwritten.

    Args:
        project_root: Directory holding the .env files. Defaults to the repository root.

    Returns:
        Names of the loaded files relative to project_root, in load order.
    """
    root = project_root or default_project_root()
    env_name = get_environment().value
    candidates = (
        f".env.{env_name}.local",
        f".env.{env_name}",
        ".env.local",
        ".env",
    )

    loaded = [name for name in candidates if (root / name).is_file()]
    for name in loaded:
        load_dotenv(root / name, override=False)

    if loaded:
        log.info("env_files_loaded", environment=env_name, files=loaded)
    else:
        log.debug("no_env_files_found", environment=env_name, project_root=str(root))
    return loaded
