"""Helpers for consuming model chunk streams."""

from collections.abc import AsyncIterable

from persona_engine.llm_client.types import ChatChunk


async def collect_stream(stream: AsyncIterable[ChatChunk]) -> str:
    """Consume a chunk stream fully and return the concatenated text.

    Chunks without a text delta contribute nothing. Exceptions raised by the
    stream propagate to the caller unchanged.

    Args:
        stream: Async iterable of chunks as returned by ModelManager.chat().

    Returns:
        The full reply text.
    """
    parts: list[str] = []
    async for chunk in stream:
        parts.append(chunk.get("content") or "")
    return "".join(parts)
