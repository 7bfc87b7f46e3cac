"""Memory scoring engine: retrieval, extraction, importance decay and prompt formatting."""

from persona_engine.memory.extraction import (
    IMPORTANT_PATTERNS,
    FactExtractor,
    PatternFactExtractor,
)
from persona_engine.memory.system import MemorySystem

__all__ = [
    "IMPORTANT_PATTERNS",
    "FactExtractor",
    "PatternFactExtractor",
    "MemorySystem",
]
