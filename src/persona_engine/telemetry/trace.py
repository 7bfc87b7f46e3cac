"""Trace ids for correlating the log events of one chat turn.

A turn gets one trace_id. Every model call inside it (the reply, each retry,
the quest request) opens a span, so a retry storm can be read back from the
logs call by call.
"""

import uuid
from dataclasses import dataclass


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class TraceContext:
    """Immutable trace position.

    Attributes:
        trace_id: Identifier shared by every event of the turn.
        parent_span_id: Span this context was opened under, if any.
    """

    trace_id: str
    parent_span_id: str | None = None

    @classmethod
    def new_trace(cls) -> "TraceContext":
        return cls(trace_id=_new_id())

    def new_span(self) -> tuple["TraceContext", str]:
        """Open a span in this trace; returns (context under the span, span_id)."""
        span_id = _new_id()
        return TraceContext(self.trace_id, parent_span_id=span_id), span_id
