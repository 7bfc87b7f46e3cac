"""Field validators and path helpers shared by the configuration modules."""

from pathlib import Path

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "console")


def _one_of(field_name: str, value: str, allowed: tuple[str, ...]) -> str:
    if value not in allowed:
        raise ValueError(f"{field_name} must be one of {', '.join(allowed)}; got {value!r}")
    return value


def validate_log_level(value: str) -> str:
    """Return value uppercased if it names a standard logging level.

    Raises:
        ValueError: For anything else.
    """
    return _one_of("log_level", value.strip().upper(), LOG_LEVELS)


def validate_log_format(value: str) -> str:
    """Return value lowercased if it is "json" or "console"."""
    return _one_of("log_format", value.strip().lower(), LOG_FORMATS)


def project_root() -> Path:
    # src/persona_engine/config/validators.py -> repository root
    return Path(__file__).resolve().parents[3]


def resolve_path(value: Path | str) -> Path:
    """Anchor a relative path at the repository root and resolve it."""
    path = Path(value)
    if not path.is_absolute():
        path = project_root() / path
    return path.resolve()
