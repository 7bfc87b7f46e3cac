"""Telemetry module for structured logging and trace correlation.

This module provides:
- TraceContext for per-turn correlation
- Structured logging via structlog
- Semantic event constants
"""

from persona_engine.telemetry.events import (
    GRAPH_INTEGRITY_ERROR,
    IMPORTANCE_UPDATED,
    MEMORY_EXTRACTED,
    MEMORY_RETRIEVED,
    MODEL_CALL_COMPLETED,
    MODEL_CALL_ERROR,
    MODEL_CALL_STARTED,
    QUEST_GENERATED,
    QUEST_GENERATION_FAILED,
    RETRIES_EXHAUSTED,
    RETRY_SCHEDULED,
    STATE_TRANSITION,
    TURN_COMPLETED,
    TURN_FAILED,
    TURN_STARTED,
)
from persona_engine.telemetry.logger import configure_logging, get_logger
from persona_engine.telemetry.trace import TraceContext

__all__ = [
    "TraceContext",
    "get_logger",
    "configure_logging",
    # Event constants
    "TURN_STARTED",
    "TURN_COMPLETED",
    "TURN_FAILED",
    "STATE_TRANSITION",
    "GRAPH_INTEGRITY_ERROR",
    "MODEL_CALL_STARTED",
    "MODEL_CALL_COMPLETED",
    "MODEL_CALL_ERROR",
    "RETRY_SCHEDULED",
    "RETRIES_EXHAUSTED",
    "MEMORY_RETRIEVED",
    "MEMORY_EXTRACTED",
    "IMPORTANCE_UPDATED",
    "QUEST_GENERATED",
    "QUEST_GENERATION_FAILED",
]
