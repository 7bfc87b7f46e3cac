"""Model manager protocol.

The orchestrator never runs inference itself. It talks to any object that
satisfies ModelManager, which keeps the local-service backend, test fakes and
future backends interchangeable.
"""

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from persona_engine.llm_client.models import ModelDefinition
from persona_engine.llm_client.types import (
    ChatChunk,
    ChatMessage,
    ChatOptions,
    ProgressCallback,
)


@runtime_checkable
class ModelManager(Protocol):
    """Streaming chat capability consumed by the orchestrator."""

    async def init(
        self, model: ModelDefinition, progress_callback: ProgressCallback | None = None
    ) -> None:
        """Prepare the backend to serve model. Re-initializing the same model is a no-op."""
        ...

    async def chat(
        self, messages: list[ChatMessage], options: ChatOptions | None = None
    ) -> AsyncIterator[ChatChunk]:
        """Start a chat completion and return its chunk stream.

        The call may be repeated any number of times (once per retry, once per
        quest request) and every returned stream must terminate. Failures are
        signalled by raising, either here or while the stream is consumed.
        """
        ...

    def is_ready(self) -> bool:
        """Return True once init() has completed."""
        ...

    @property
    def current_model(self) -> str | None:
        """Catalog id of the initialized model, if any."""
        ...

    async def dispose(self) -> None:
        """Release the backend. is_ready() is False afterwards."""
        ...
