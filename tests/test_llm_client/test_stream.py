"""Tests for chunk stream aggregation."""

import pytest

from persona_engine.llm_client import LLMConnectionError, collect_stream


async def chunks(*items):
    for item in items:
        if isinstance(item, Exception):
            raise item
        yield item


class TestCollectStream:
    """Test collect_stream."""

    @pytest.mark.asyncio
    async def test_joins_deltas(self) -> None:
        text = await collect_stream(chunks({"content": "Hel"}, {"content": "lo"}, {"done": True}))
        assert text == "Hello"

    @pytest.mark.asyncio
    async def test_missing_and_none_deltas_count_as_empty(self) -> None:
        text = await collect_stream(chunks({}, {"content": None}, {"content": "x"}))
        assert text == "x"

    @pytest.mark.asyncio
    async def test_empty_stream(self) -> None:
        assert await collect_stream(chunks()) == ""

    @pytest.mark.asyncio
    async def test_errors_propagate(self) -> None:
        with pytest.raises(LLMConnectionError, match="dropped"):
            await collect_stream(chunks({"content": "a"}, LLMConnectionError("dropped")))
