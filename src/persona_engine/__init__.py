"""Persona engine: persona-driven NPC conversations with memory and quests."""

from persona_engine.engine import PersonaEngine
from persona_engine.orchestrator import ChatResponse

__all__ = ["PersonaEngine", "ChatResponse"]
