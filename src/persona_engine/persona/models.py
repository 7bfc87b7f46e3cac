"""Data models for personas, their memories and quests.

Field names are snake_case; serialization uses camelCase aliases so exported
persona JSON keeps the persisted format (systemPrompt, lastAccessed, ...).
Both spellings are accepted on input.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = "1.0.0"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Always timezone-aware, in UTC.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


def new_id() -> str:
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class PersonaType(str, Enum):
    """Closed set of persona type tags."""

    BARKEEP = "barkeep"
    SHOPKEEP = "shopkeep"
    QUEST_NPC = "quest-npc"
    TOWN_GUARD = "town-guard"
    TAVERN_PATRON = "tavern-patron"
    BLACKSMITH = "blacksmith"
    HEALER = "healer"
    MYSTERIOUS_STRANGER = "mysterious-stranger"
    VILLAGE_ELDER = "village-elder"
    MERCHANT_CARAVAN = "merchant-caravan"
    DUNGEON_BOSS = "dungeon-boss"
    CUSTOM = "custom"


class Personality(CamelModel):
    """Four personality sliders, each 0-10."""

    friendliness: int = Field(ge=0, le=10)
    formality: int = Field(ge=0, le=10)
    verbosity: int = Field(ge=0, le=10)
    humor: int = Field(ge=0, le=10)


class ModelParams(CamelModel):
    """Sampling parameters used for this persona's replies."""

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_p: float = Field(default=0.9, gt=0.0, le=1.0)
    max_tokens: int = Field(default=512, gt=0)


class Message(CamelModel):
    """One entry of a persona's conversation history."""

    role: Literal["user", "assistant", "system"]
    content: str
    narration: str | None = None
    timestamp: UtcDatetime = Field(default_factory=utcnow)


class MemoryEntry(CamelModel):
    """A remembered fact.

    importance is nominally in [0, 10] but is only clamped by the importance
    update step, never at creation.
    """

    id: str = Field(default_factory=new_id)
    content: str
    embedding: list[float] | None = None
    importance: float
    created_at: UtcDatetime = Field(default_factory=utcnow)
    last_accessed: UtcDatetime = Field(default_factory=utcnow)


class Quest(CamelModel):
    """A generated in-fiction task for the party."""

    id: str = Field(default_factory=new_id)
    title: str
    description: str
    status: Literal["active", "completed", "failed"] = "active"
    party_size: int
    level: int
    rewards: str | None = None
    created_at: UtcDatetime = Field(default_factory=utcnow)


class Persona(CamelModel):
    """A configured conversational identity and its accumulated state."""

    id: str = Field(default_factory=new_id)
    name: str
    type: PersonaType
    personality: Personality
    system_prompt: str
    user_prompt_template: str  # Contains {message} and {context}
    model_params: ModelParams = Field(default_factory=ModelParams)
    conversation_history: list[Message] = Field(default_factory=list)
    memory: list[MemoryEntry] = Field(default_factory=list)
    quests: list[Quest] = Field(default_factory=list)
    schema_version: str | None = None
    created_at: UtcDatetime = Field(default_factory=utcnow)
    updated_at: UtcDatetime = Field(default_factory=utcnow)

    def to_export(self) -> dict:
        """Serialize to the persisted camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
