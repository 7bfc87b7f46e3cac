"""Model invocation boundary.

This module provides the ModelManager protocol the orchestrator consumes, the
shared chunk/option types and error hierarchy, stream aggregation, and the
Ollama-backed manager.
"""

from typing import TYPE_CHECKING

from persona_engine.llm_client.base import ModelManager
from persona_engine.llm_client.models import ModelCatalog, ModelDefinition
from persona_engine.llm_client.stream import collect_stream
from persona_engine.llm_client.types import (
    ChatChunk,
    ChatMessage,
    ChatOptions,
    LLMClientError,
    LLMConnectionError,
    LLMInvalidResponse,
    LLMServerError,
    LLMTimeout,
    ModelConfigurationError,
    ModelNotInitializedError,
    ModelProgress,
    ProgressCallback,
    UnknownModelError,
)

if TYPE_CHECKING:
    from persona_engine.llm_client.ollama import OllamaModelManager, is_ollama_available
else:
    # The Ollama manager reads settings, and the config package imports this
    # package for the catalog models, so it is loaded on first access.
    def __getattr__(name: str):
        if name in ("OllamaModelManager", "is_ollama_available"):
            from persona_engine.llm_client import ollama

            return getattr(ollama, name)
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ModelManager",
    "OllamaModelManager",
    "is_ollama_available",
    "ModelCatalog",
    "ModelDefinition",
    "collect_stream",
    "ChatChunk",
    "ChatMessage",
    "ChatOptions",
    "ModelProgress",
    "ProgressCallback",
    "LLMClientError",
    "LLMConnectionError",
    "LLMInvalidResponse",
    "LLMServerError",
    "LLMTimeout",
    "ModelConfigurationError",
    "ModelNotInitializedError",
    "UnknownModelError",
]
