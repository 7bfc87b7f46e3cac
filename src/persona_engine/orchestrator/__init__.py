"""Orchestrator: the fixed persona graph and its node functions.

This module provides the state machine that runs one conversational turn:
memory retrieval, prompt assembly, the model call with its retry loop, memory
extraction and decay, and optional quest generation.
"""

from persona_engine.orchestrator.graph import (
    CONDITIONAL_EDGES,
    EDGES,
    NODE_FUNCTIONS,
    PersonaGraph,
    should_generate_quest_route,
    should_retry,
)
from persona_engine.orchestrator.quest import (
    build_quest_messages,
    generate_quest,
    request_quest,
    should_generate_quest,
)
from persona_engine.orchestrator.types import (
    ChatResponse,
    GraphIntegrityError,
    GraphNode,
    GraphState,
)

__all__ = [
    "PersonaGraph",
    "NODE_FUNCTIONS",
    "EDGES",
    "CONDITIONAL_EDGES",
    "should_retry",
    "should_generate_quest_route",
    "should_generate_quest",
    "build_quest_messages",
    "request_quest",
    "generate_quest",
    "ChatResponse",
    "GraphIntegrityError",
    "GraphNode",
    "GraphState",
]
