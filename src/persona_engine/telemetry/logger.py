"""Structured logging on top of structlog and stdlib logging.

Every event is written twice:
- as JSON lines to a rotating `current.jsonl` in the log directory (INFO and up)
- to stderr, as coloured console output or JSON depending on APP_LOG_FORMAT

Entries carry a UTC timestamp, the level, the logger name and a short
component name taken from the last segment of the logger name.
"""

import logging
import logging.handlers
import pathlib
import sys
from typing import Any

import structlog
from pydantic import ValidationError

LOG_FILE_NAME = "current.jsonl"
LOG_FILE_MAX_BYTES = 50 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3

_NOISY_LOGGERS = ("httpx", "httpcore")


def _get_log_level() -> str:
    # Read from the environment so logging can start before settings are loaded.
    from persona_engine.config.env_loader import early_log_level  # noqa: PLC0415

    return early_log_level()


def _get_log_format() -> str:
    from persona_engine.config.env_loader import early_log_format  # noqa: PLC0415

    return early_log_format()


def _get_log_dir() -> pathlib.Path:
    from persona_engine.config.validators import resolve_path  # noqa: PLC0415

    try:
        from persona_engine.config.settings import get_settings  # noqa: PLC0415

        return get_settings().log_dir
    except ValidationError:
        return resolve_path("telemetry/logs")


def _add_component(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Derive "component" from the logger name ("persona_engine.memory.system" -> "system")."""
    name = event_dict.get("logger") or getattr(logger, "name", "") or ""
    event_dict["component"] = name.rsplit(".", 1)[-1] if name else "unknown"
    return event_dict


def _shared_processors() -> list[Any]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_component,
    ]


def _handler(handler: logging.Handler, renderer: Any, level: int) -> logging.Handler:
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer, foreign_pre_chain=_shared_processors()
        )
    )
    handler.setLevel(level)
    return handler


def configure_logging() -> None:
    """Route structlog through stdlib logging to the JSON file and stderr.

    Call once at startup; get_logger() calls it on first use otherwise.
    Reconfiguring replaces the root logger's handlers.
    """
    console_level = getattr(logging, _get_log_level(), logging.INFO)
    log_dir = _get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=str(log_dir / LOG_FILE_NAME),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    # The file keeps turn-level events even when the console is quieter.
    root_logger.addHandler(
        _handler(file_handler, structlog.processors.JSONRenderer(), logging.INFO)
    )

    console_renderer = (
        structlog.processors.JSONRenderer()
        if _get_log_format() == "json"
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    root_logger.addHandler(
        _handler(logging.StreamHandler(sys.stderr), console_renderer, console_level)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:  # Returns structlog.stdlib.BoundLogger
    """Get a structured logger, configuring logging on first use.

    Example:
        >>> from persona_engine.telemetry import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("turn_started", persona_id="123", trace_id="abc")
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name)
