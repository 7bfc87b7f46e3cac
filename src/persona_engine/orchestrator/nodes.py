"""Node functions for the persona graph.

Each node receives the full GraphState and returns a patch dict that the graph
merges into the state. Nodes never assign to the state directly; the persona's
memory set is the only thing they mutate in place.
"""

import asyncio
import time
from typing import Any

import orjson

from persona_engine.config import settings
from persona_engine.llm_client import ChatMessage, LLMClientError, collect_stream
from persona_engine.memory import MemorySystem
from persona_engine.orchestrator.types import ChatResponse, GraphState
from persona_engine.persona.models import Message
from persona_engine.telemetry import TraceContext, get_logger
from persona_engine.telemetry.events import (
    MODEL_CALL_COMPLETED,
    MODEL_CALL_ERROR,
    MODEL_CALL_STARTED,
    RESPONSE_PARSE_FALLBACK,
    RETRIES_EXHAUSTED,
    RETRY_SCHEDULED,
)

log = get_logger(__name__)

NodePatch = dict[str, Any]


def parse_model_reply(raw: str) -> ChatResponse:
    """Parse a model reply of the form {"message": ..., "narration": ...}.

    Anything that is not a JSON object with a non-empty string message falls
    back to the raw text as the message, with no narration.
    """
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError:
        return ChatResponse(message=raw)

    if not isinstance(data, dict):
        return ChatResponse(message=raw)

    message = data.get("message")
    narration = data.get("narration")
    return ChatResponse(
        message=message if isinstance(message, str) and message else raw,
        narration=narration if isinstance(narration, str) else None,
    )


async def retrieve_memory(state: GraphState) -> NodePatch:
    memories = MemorySystem.retrieve_memories(
        state.persona, state.message, limit=settings.memory_retrieval_limit
    )
    return {"retrieved_memories": memories}


async def format_prompt(state: GraphState) -> NodePatch:
    """Assemble [system, *history, user turn] for the model.

    Only the first {message} and the first {context} in the template are
    replaced. The context is serialized as compact JSON with keys stringified,
    or "" when absent.
    """
    system_prompt = state.persona.system_prompt
    if state.retrieved_memories:
        system_prompt += MemorySystem.format_memories_for_prompt(state.retrieved_memories)

    context_text = (
        orjson.dumps(state.context, option=orjson.OPT_NON_STR_KEYS).decode()
        if state.context is not None
        else ""
    )
    user_prompt = state.persona.user_prompt_template.replace("{message}", state.message, 1)
    user_prompt = user_prompt.replace("{context}", context_text, 1)

    messages: list[ChatMessage] = [{"role": "system", "content": system_prompt}]
    messages.extend(
        {"role": m.role, "content": m.content} for m in state.persona.conversation_history
    )
    messages.append({"role": "user", "content": user_prompt})
    return {"formatted_messages": messages}


async def llm_call(state: GraphState) -> NodePatch:
    """Call the model and parse its reply.

    Any exception raised while starting or consuming the stream is recorded
    in the patch as the only field; the router decides whether to retry.
    """
    params = state.persona.model_params
    _, span_id = TraceContext(trace_id=state.trace_id).new_span()
    start_time = time.time()
    log.debug(
        MODEL_CALL_STARTED,
        trace_id=state.trace_id,
        span_id=span_id,
        persona_id=state.persona.id,
        attempt=state.retry_count + 1,
        message_count=len(state.formatted_messages),
    )

    try:
        stream = await state.model_manager.chat(
            state.formatted_messages,
            {"temperature": params.temperature, "top_p": params.top_p},
        )
        raw = await collect_stream(stream)
    except Exception as e:
        log.warning(
            MODEL_CALL_ERROR,
            trace_id=state.trace_id,
            span_id=span_id,
            persona_id=state.persona.id,
            attempt=state.retry_count + 1,
            error=str(e),
            error_type=type(e).__name__,
        )
        return {"error": e}

    parsed = parse_model_reply(raw)
    if parsed.message is raw:
        log.debug(RESPONSE_PARSE_FALLBACK, trace_id=state.trace_id, response_length=len(raw))

    log.info(
        MODEL_CALL_COMPLETED,
        trace_id=state.trace_id,
        span_id=span_id,
        persona_id=state.persona.id,
        response_length=len(raw),
        duration_ms=int((time.time() - start_time) * 1000),
    )
    return {"llm_response": raw, "parsed_response": parsed, "error": None}


async def handle_error(state: GraphState) -> NodePatch:
    """Count a failed model call, then back off or give up.

    Raises:
        Exception: The stored error once the retry ceiling is reached
            (LLMClientError when no error was stored).
    """
    retry_count = state.retry_count + 1

    if retry_count >= state.max_retries:
        log.error(
            RETRIES_EXHAUSTED,
            trace_id=state.trace_id,
            persona_id=state.persona.id,
            attempts=retry_count,
            error=str(state.error) if state.error else None,
        )
        raise state.error or LLMClientError(
            "Failed to get response from model after retries"
        )

    delay = state.backoff_seconds * retry_count
    log.info(
        RETRY_SCHEDULED,
        trace_id=state.trace_id,
        persona_id=state.persona.id,
        retry_count=retry_count,
        delay_seconds=delay,
    )
    await asyncio.sleep(delay)
    return {"retry_count": retry_count, "error": None}


async def extract_memory(state: GraphState) -> NodePatch:
    """Extract facts from this turn's user message and reply."""
    if state.parsed_response is None:
        return {}

    turn = [
        Message(role="user", content=state.message),
        Message(
            role="assistant",
            content=state.parsed_response.message,
            narration=state.parsed_response.narration,
        ),
    ]
    count_before = len(state.persona.memory)
    MemorySystem.extract_and_store_memory(
        state.persona, turn, threshold=settings.memory_extraction_threshold
    )
    return {"extracted_memories": state.persona.memory[count_before:]}


async def update_importance(state: GraphState) -> NodePatch:
    MemorySystem.update_importance_from_access(
        state.persona, [m.id for m in state.retrieved_memories]
    )
    return {}


async def store_memory(state: GraphState) -> NodePatch:
    # Persisting the persona is the caller's job.
    return {}
