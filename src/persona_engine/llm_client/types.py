"""Type definitions for the model invocation boundary.

This module defines the core types shared by every model manager:
- ChatMessage / ChatOptions: request structures
- ChatChunk: one streamed increment of a reply
- ModelProgress: initialization progress reports
- Error classes: transient failures vs. configuration errors
"""

from collections.abc import Callable
from typing import Literal

from typing_extensions import NotRequired, TypedDict

ChatRole = Literal["system", "user", "assistant"]


class ChatMessage(TypedDict):
    """A single chat message sent to the model.

    Attributes:
        role: "system", "user" or "assistant".
        content: Message text.
    """

    role: ChatRole
    content: str


class ChatOptions(TypedDict, total=False):
    """Sampling options for a chat call. Omitted keys use backend defaults."""

    temperature: float
    top_p: float
    max_tokens: int


class ChatChunk(TypedDict):
    """One streamed increment of a model reply.

    Attributes:
        content: Incremental text delta, absent or None when the chunk carries no text.
        done: True on the backend's final chunk, when it reports one.
    """

    content: NotRequired[str | None]
    done: NotRequired[bool]


class ModelProgress(TypedDict):
    """Model initialization progress report.

    Attributes:
        text: Human-readable status line.
        progress: Completion fraction in [0, 1].
    """

    text: str
    progress: float


ProgressCallback = Callable[[ModelProgress], None]


# Error hierarchy


class LLMClientError(Exception):
    """Base exception for model invocation failures.

    Everything in this branch is treated as transient by the orchestrator and
    retried up to the turn's retry ceiling.
    """

    pass


class LLMTimeout(LLMClientError):
    """Raised when a model request times out."""

    pass


class LLMConnectionError(LLMClientError):
    """Raised when the model backend cannot be reached."""

    pass


class LLMServerError(LLMClientError):
    """Raised when the model backend returns an error status."""

    pass


class LLMInvalidResponse(LLMClientError):
    """Raised when the model backend returns an unreadable stream."""

    pass


class ModelConfigurationError(Exception):
    """Base exception for caller-contract violations. Never retried."""

    pass


class ModelNotInitializedError(ModelConfigurationError):
    """Raised when chat is requested before a model was initialized."""

    pass


class UnknownModelError(ModelConfigurationError):
    """Raised when a model id is not in the catalog or has no backend mapping."""

    pass
