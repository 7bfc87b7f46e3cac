"""Shared fixtures: a scripted in-process model manager and sample personas."""

from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest

from persona_engine.llm_client import ChatChunk, ChatMessage, ChatOptions, ModelDefinition
from persona_engine.persona import (
    Persona,
    Personality,
    PersonaType,
    create_persona_from_template,
    get_template,
)


async def _chunks(parts: list[Any]) -> AsyncIterator[ChatChunk]:
    for part in parts:
        if isinstance(part, Exception):
            raise part
        yield {"content": part}
    yield {"done": True}


class FakeModelManager:
    """ModelManager that replays scripted replies.

    Each reply is one of:
    - str: streamed as a single chunk
    - list: streamed item by item; an Exception item is raised mid-stream
    - Exception: raised by chat() itself
    """

    def __init__(self, replies: list[Any] | None = None, ready: bool = True) -> None:
        self.replies = list(replies or [])
        self.calls: list[tuple[list[ChatMessage], ChatOptions | None]] = []
        self.init_calls: list[ModelDefinition] = []
        self.disposed = False
        self._ready = ready
        self._model_id: str | None = None

    @property
    def current_model(self) -> str | None:
        return self._model_id

    async def init(self, model: ModelDefinition, progress_callback=None) -> None:
        self.init_calls.append(model)
        if progress_callback is not None:
            progress_callback({"text": f"Model {model.id} ready", "progress": 1.0})
        self._model_id = model.id
        self._ready = True

    async def chat(
        self, messages: list[ChatMessage], options: ChatOptions | None = None
    ) -> AsyncIterator[ChatChunk]:
        self.calls.append((messages, options))
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return _chunks(reply if isinstance(reply, list) else [reply])

    def is_ready(self) -> bool:
        return self._ready

    async def dispose(self) -> None:
        self.disposed = True
        self._ready = False
        self._model_id = None


@pytest.fixture
def make_manager() -> Callable[..., FakeModelManager]:
    """Factory for scripted model managers."""
    return FakeModelManager


@pytest.fixture
def plain_persona() -> Persona:
    """A custom persona that never triggers quest generation on its own."""
    return Persona(
        name="Innkeeper Ida",
        type=PersonaType.CUSTOM,
        personality=Personality(friendliness=7, formality=3, verbosity=5, humor=6),
        system_prompt="You are Ida, a cheerful innkeeper.",
        user_prompt_template="Context: {context}\nGuest: {message}",
    )


@pytest.fixture
def quest_persona() -> Persona:
    """The built-in quest-giving persona."""
    return create_persona_from_template(get_template(PersonaType.QUEST_NPC))
