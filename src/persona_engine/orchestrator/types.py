"""Core types for the orchestrator.

This module defines the data structures used throughout the orchestrator:
- GraphNode: State machine nodes
- GraphState: Mutable state record threaded through one turn
- ChatResponse: Parsed model reply and the turn's final result
- GraphIntegrityError: Raised when the fixed topology is violated
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from persona_engine.llm_client import ChatMessage, ModelManager
from persona_engine.persona.models import MemoryEntry, Persona, Quest
from persona_engine.telemetry import TraceContext


class GraphNode(str, Enum):
    """Nodes of the fixed orchestration graph."""

    RETRIEVE_MEMORY = "retrieve_memory"
    FORMAT_PROMPT = "format_prompt"
    LLM_CALL = "llm_call"
    HANDLE_ERROR = "handle_error"
    EXTRACT_MEMORY = "extract_memory"
    UPDATE_IMPORTANCE = "update_importance"
    STORE_MEMORY = "store_memory"
    GENERATE_QUEST = "generate_quest"
    END = "end"


class GraphIntegrityError(RuntimeError):
    """Raised when the graph reaches an unknown node or route, or loops past its ceiling."""

    pass


@dataclass
class ChatResponse:
    """A persona's reply.

    Used both for the parsed model output inside a turn (quests unset) and for
    the result returned to callers.

    Attributes:
        message: Spoken dialogue.
        narration: Optional narrative actions, e.g. "(big smile)".
        quests: Quests generated this turn; None when none were generated.
    """

    message: str
    narration: str | None = None
    quests: list[Quest] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase quest fields, omitting absent narration/quests."""
        result: dict[str, Any] = {"message": self.message}
        if self.narration is not None:
            result["narration"] = self.narration
        if self.quests:
            result["quests"] = [
                q.model_dump(mode="json", by_alias=True, exclude_none=True) for q in self.quests
            ]
        return result


@dataclass
class GraphState:
    """Mutable state record passed through the graph for one turn.

    Node functions read the state and return a patch dict that the graph
    merges into it. The persona is the only object mutated in place: its
    memory set changes during retrieval, extraction and importance updates.

    Attributes:
        persona: Persona taking the turn (shared by reference with the caller).
        message: Incoming user message.
        model_manager: Streaming chat capability.
        context: Optional free-form context substituted into the prompt template.
        retrieved_memories: Memories retrieved for this turn.
        formatted_messages: Message list sent to the model.
        llm_response: Raw aggregated model output.
        parsed_response: Structured reply parsed from llm_response.
        extracted_memories: Memories appended by this turn's extraction.
        generated_quests: Quests generated this turn.
        error: Error from the last model call, if it failed.
        retry_count: Number of failed model calls handled so far.
        max_retries: Retry ceiling for this turn.
        backoff_seconds: Base delay unit for the linear retry backoff.
        trace_id: Trace identifier for log correlation.
    """

    persona: Persona
    message: str
    model_manager: ModelManager
    context: dict | None = None
    retrieved_memories: list[MemoryEntry] = field(default_factory=list)
    formatted_messages: list[ChatMessage] = field(default_factory=list)
    llm_response: str | None = None
    parsed_response: ChatResponse | None = None
    extracted_memories: list[MemoryEntry] = field(default_factory=list)
    generated_quests: list[Quest] = field(default_factory=list)
    error: Exception | None = None
    retry_count: int = 0
    max_retries: int = 3
    backoff_seconds: float = 1.0
    trace_id: str = field(default_factory=lambda: TraceContext.new_trace().trace_id)
