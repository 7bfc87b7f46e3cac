"""Quest generation.

Quests are a best-effort side artifact of a turn: a second model call turns
the conversation into a structured Quest. Any failure degrades to "no quest"
and is only logged.
"""

import re

import orjson

from persona_engine.config import settings
from persona_engine.llm_client import ChatMessage, collect_stream
from persona_engine.orchestrator.types import GraphState
from persona_engine.persona.models import Persona, PersonaType, Quest
from persona_engine.telemetry import get_logger
from persona_engine.telemetry.events import QUEST_GENERATED, QUEST_GENERATION_FAILED

log = get_logger(__name__)

QUEST_TRIGGERS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(quest|mission|task|job|adventure)"),
    re.compile(r"(need|want|looking for|searching)"),
    re.compile(r"(help|assist|aid)"),
    re.compile(r"(reward|payment|gold|coins)"),
)

# The graph edge checks only the first three families; the generator checks all four.
EDGE_QUEST_TRIGGERS = QUEST_TRIGGERS[:3]

QUEST_SYSTEM_PROMPT = (
    "You are a quest generation assistant. Generate quests that match the NPC's "
    "personality and the conversation context."
)

QUEST_PROMPT_TEMPLATE = """Based on this conversation, generate an appropriate quest for the party.

Persona: {name}
Personality: {personality}
Last user message: {message}
NPC response: {response}

Generate a quest as JSON with these exact fields:
{{
  "title": "Quest title",
  "description": "Detailed quest description",
  "partySize": 4,
  "level": 5,
  "rewards": "Optional reward description"
}}

Respond only with valid JSON, no other text."""

DEFAULT_QUEST_TITLE = "Untitled Quest"
DEFAULT_PARTY_SIZE = 4
DEFAULT_LEVEL = 5


def is_quest_persona(persona: Persona) -> bool:
    """True for quest-NPC personas or any persona whose system prompt mentions quests."""
    return persona.type == PersonaType.QUEST_NPC or "quest" in persona.system_prompt.lower()


def has_quest_keywords(state: GraphState, patterns: tuple[re.Pattern[str], ...]) -> bool:
    """True if the reply or the user message matches any of patterns (lowercased)."""
    if state.parsed_response is None:
        return False
    response = state.parsed_response.message.lower()
    message = state.message.lower()
    return any(p.search(response) or p.search(message) for p in patterns)


def should_generate_quest(state: GraphState) -> bool:
    if state.parsed_response is None:
        return False
    return has_quest_keywords(state, QUEST_TRIGGERS) or is_quest_persona(state.persona)


def build_quest_messages(state: GraphState) -> list[ChatMessage]:
    """Build the dedicated quest request for the current turn."""
    persona = state.persona
    response = state.parsed_response.message if state.parsed_response else ""
    prompt = QUEST_PROMPT_TEMPLATE.format(
        name=persona.name,
        personality=orjson.dumps(persona.personality.model_dump(by_alias=True)).decode(),
        message=state.message,
        response=response,
    )
    return [
        {"role": "system", "content": QUEST_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def _text(value: object, default: str) -> str:
    if not value:
        return default
    return value if isinstance(value, str) else str(value)


def _quest_from_reply(data: dict) -> Quest:
    rewards = data.get("rewards")
    return Quest(
        title=_text(data.get("title"), DEFAULT_QUEST_TITLE),
        description=_text(data.get("description"), ""),
        status="active",
        party_size=data.get("partySize") or DEFAULT_PARTY_SIZE,
        level=data.get("level") or DEFAULT_LEVEL,
        rewards=str(rewards) if rewards is not None else None,
    )


async def request_quest(state: GraphState) -> Quest | None:
    """Ask the model for a quest matching this turn.

    Never raises. Returns None when the model call fails, the reply is not a
    JSON object, or the object cannot be turned into a Quest.
    """
    try:
        stream = await state.model_manager.chat(
            build_quest_messages(state),
            {"temperature": settings.quest_temperature, "top_p": settings.quest_top_p},
        )
        raw = await collect_stream(stream)
    except Exception as e:
        log.warning(
            QUEST_GENERATION_FAILED,
            trace_id=state.trace_id,
            persona_id=state.persona.id,
            reason="model_error",
            error=str(e),
        )
        return None

    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        log.warning(
            QUEST_GENERATION_FAILED,
            trace_id=state.trace_id,
            persona_id=state.persona.id,
            reason="invalid_json",
            error=str(e),
        )
        return None

    if not isinstance(data, dict):
        log.warning(
            QUEST_GENERATION_FAILED,
            trace_id=state.trace_id,
            persona_id=state.persona.id,
            reason="not_an_object",
        )
        return None

    try:
        quest = _quest_from_reply(data)
    except ValueError as e:
        log.warning(
            QUEST_GENERATION_FAILED,
            trace_id=state.trace_id,
            persona_id=state.persona.id,
            reason="invalid_fields",
            error=str(e),
        )
        return None

    log.info(
        QUEST_GENERATED,
        trace_id=state.trace_id,
        persona_id=state.persona.id,
        quest_id=quest.id,
        title=quest.title,
    )
    return quest


async def generate_quest(state: GraphState) -> dict:
    if not should_generate_quest(state):
        return {"generated_quests": []}
    quest = await request_quest(state)
    return {"generated_quests": [quest] if quest else []}
