"""YAML file loading shared by the configuration loaders."""

from pathlib import Path
from typing import Any

import structlog
import yaml

log = structlog.get_logger(__name__)


class ConfigLoadError(Exception):
    """Base exception for configuration loading errors."""

    pass


def load_yaml_file(
    file_path: Path, error_class: type[Exception] = ConfigLoadError
) -> dict[str, Any]:
    """Read a YAML document whose top level is a mapping.

    Args:
        file_path: File to read.
        error_class: Exception raised for every failure, so callers can surface
            their own subclass (e.g. ModelConfigError).

    Returns:
        The parsed mapping; {} for an empty or comment-only file.

    Raises:
        error_class: If the file is missing or unreadable, is not valid YAML,
            or holds something other than a mapping.
    """
    if not file_path.exists():
        raise error_class(f"Configuration file not found: {file_path}")

    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise error_class(f"Could not read {file_path}: {e}") from None

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise error_class(f"Failed to parse YAML file {file_path}: {e}") from None

    if document is None:
        log.debug("yaml_file_empty", file_path=str(file_path))
        return {}
    if not isinstance(document, dict):
        raise error_class(
            f"Expected a mapping at the top of {file_path}, got {type(document).__name__}"
        )
    return document
