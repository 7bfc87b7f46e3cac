"""Tests for TraceContext and per-turn trace ids."""

import uuid
from dataclasses import FrozenInstanceError

import pytest

from persona_engine.orchestrator.types import GraphState
from persona_engine.telemetry.trace import TraceContext


class TestTraceContext:
    """Test TraceContext functionality."""

    def test_new_trace_ids_are_unique_uuids(self) -> None:
        first = TraceContext.new_trace()
        second = TraceContext.new_trace()

        assert first.trace_id != second.trace_id
        assert first.parent_span_id is None
        uuid.UUID(first.trace_id)

    def test_spans_share_the_turn_trace(self) -> None:
        """Each model call in a turn gets its own span under one trace."""
        turn = TraceContext.new_trace()
        reply_ctx, reply_span = turn.new_span()
        quest_ctx, quest_span = turn.new_span()

        assert reply_ctx.trace_id == quest_ctx.trace_id == turn.trace_id
        assert reply_ctx.parent_span_id == reply_span
        assert reply_span != quest_span
        uuid.UUID(quest_span)

    def test_rebuilt_from_trace_id(self) -> None:
        ctx = TraceContext(trace_id="turn-1")
        child, span_id = ctx.new_span()

        assert child == TraceContext(trace_id="turn-1", parent_span_id=span_id)

    def test_is_immutable(self) -> None:
        ctx = TraceContext.new_trace()

        with pytest.raises(FrozenInstanceError):
            ctx.trace_id = "other"  # type: ignore[misc]


def test_graph_state_gets_its_own_trace(plain_persona, make_manager) -> None:
    manager = make_manager()
    first = GraphState(persona=plain_persona, message="Hi", model_manager=manager)
    second = GraphState(persona=plain_persona, message="Hi", model_manager=manager)

    assert first.trace_id != second.trace_id
    uuid.UUID(first.trace_id)
