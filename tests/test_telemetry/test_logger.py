"""Tests for structured logging configuration."""

import json
import logging
import pathlib

import pytest
import structlog

import persona_engine.telemetry.logger as logger_module
from persona_engine.telemetry import TURN_STARTED, configure_logging, get_logger


@pytest.fixture
def log_dir(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> pathlib.Path:
    """Send the JSON log file to a temporary directory for one test."""
    directory = tmp_path / "logs"
    monkeypatch.setattr(logger_module, "_get_log_dir", lambda: directory)
    monkeypatch.setattr(logger_module, "_get_log_level", lambda: "DEBUG")
    original_handlers = list(logging.root.handlers)

    structlog.reset_defaults()
    configure_logging()
    yield directory

    for handler in logging.root.handlers:
        handler.close()
    logging.root.handlers[:] = original_handlers
    structlog.reset_defaults()


def read_entries(log_dir: pathlib.Path) -> list[dict]:
    for handler in logging.root.handlers:
        handler.flush()
    with open(log_dir / "current.jsonl", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


class TestLoggerConfiguration:
    """Test logger configuration and setup."""

    def test_get_logger_returns_bound_logger(self) -> None:
        log = get_logger(__name__)
        assert hasattr(log, "info")
        assert hasattr(log, "error")
        assert hasattr(log, "warning")

    def test_get_logger_configures_on_first_call(self, log_dir: pathlib.Path) -> None:
        structlog.reset_defaults()

        get_logger("persona_engine.test")

        assert structlog.is_configured()

    def test_creates_log_directory(self, log_dir: pathlib.Path) -> None:
        assert log_dir.is_dir()

    def test_emits_structured_json(self, log_dir: pathlib.Path) -> None:
        log = get_logger("persona_engine.engine")
        log.info(TURN_STARTED, persona_id="p-1", trace_id="trace-123", memory_count=2)

        entry = read_entries(log_dir)[-1]

        assert entry["event"] == "turn_started"
        assert entry["persona_id"] == "p-1"
        assert entry["trace_id"] == "trace-123"
        assert entry["memory_count"] == 2
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_component_from_module_name(self, log_dir: pathlib.Path) -> None:
        get_logger("persona_engine.orchestrator.graph").info("state_transition")

        assert read_entries(log_dir)[-1]["component"] == "graph"

    def test_debug_events_stay_out_of_file(self, log_dir: pathlib.Path) -> None:
        log = get_logger("persona_engine.memory.system")
        log.debug("memory_retrieved", selected=0)
        log.info("memory_extracted", role="user")

        events = [entry["event"] for entry in read_entries(log_dir)]

        assert "memory_extracted" in events
        assert "memory_retrieved" not in events
