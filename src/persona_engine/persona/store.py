"""Persona persistence collaborator.

The orchestrator never touches storage. Callers persist the persona it returns
through any object satisfying PersonaStore. InMemoryPersonaStore is the
dict-backed implementation used by the CLI and tests.
"""

from typing import Any, Protocol

from persona_engine.persona.models import (
    SCHEMA_VERSION,
    Message,
    Persona,
    Quest,
    utcnow,
)
from persona_engine.telemetry import get_logger
from persona_engine.telemetry.events import PERSONA_MIGRATED

log = get_logger(__name__)


class PersonaStoreError(Exception):
    """Base exception for persona store failures."""

    pass


class PersonaNotFoundError(PersonaStoreError):
    """Raised when a persona id is not in the store."""

    pass


class PersonaExistsError(PersonaStoreError):
    """Raised when adding a persona whose id is already stored."""

    pass


class PersonaStore(Protocol):
    """Get/update-by-id contract for persona persistence."""

    def get(self, persona_id: str) -> Persona | None: ...

    def list(self) -> list[Persona]: ...

    def add(self, persona: Persona) -> str: ...

    def update(self, persona_id: str, **fields: Any) -> Persona: ...

    def delete(self, persona_id: str) -> None: ...


class InMemoryPersonaStore:
    """PersonaStore backed by a dict keyed by persona id."""

    def __init__(self, personas: list[Persona] | None = None) -> None:
        self._personas: dict[str, Persona] = {}
        for persona in personas or []:
            self.add(persona)

    def get(self, persona_id: str) -> Persona | None:
        return self._personas.get(persona_id)

    def list(self) -> list[Persona]:
        return list(self._personas.values())

    def add(self, persona: Persona) -> str:
        if persona.id in self._personas:
            raise PersonaExistsError(f"Persona with id {persona.id} already exists")
        self._personas[persona.id] = persona
        return persona.id

    def update(self, persona_id: str, **fields: Any) -> Persona:
        """Apply a partial update and bump updated_at.

        Args:
            persona_id: Persona to update.
            **fields: Persona field names (snake_case) and their new values.

        Raises:
            PersonaNotFoundError: If persona_id is unknown.
            ValueError: If a field name is not a Persona field.
        """
        persona = self._require(persona_id)
        unknown = set(fields) - set(Persona.model_fields)
        if unknown:
            raise ValueError(f"Unknown persona fields: {sorted(unknown)}")
        for name, value in fields.items():
            setattr(persona, name, value)
        persona.updated_at = utcnow()
        return persona

    def delete(self, persona_id: str) -> None:
        self._personas.pop(persona_id, None)

    def add_message(self, persona_id: str, message: Message) -> Persona:
        persona = self._require(persona_id)
        return self.update(persona_id, conversation_history=[*persona.conversation_history, message])

    def clear_history(self, persona_id: str) -> Persona:
        return self.update(persona_id, conversation_history=[])

    def add_quest(self, persona_id: str, quest: Quest) -> Persona:
        persona = self._require(persona_id)
        return self.update(persona_id, quests=[*persona.quests, quest])

    def delete_memory(self, persona_id: str, memory_id: str) -> Persona:
        persona = self._require(persona_id)
        return self.update(persona_id, memory=[m for m in persona.memory if m.id != memory_id])

    def _require(self, persona_id: str) -> Persona:
        persona = self._personas.get(persona_id)
        if persona is None:
            raise PersonaNotFoundError(f"Persona {persona_id} not found")
        return persona


def migrate_personas(store: PersonaStore) -> list[str]:
    """Bring every stored persona to the current schema version.

    Personas with a missing or different schema_version have their
    conversation history cleared.

    Returns:
        Ids of the migrated personas.
    """
    outdated = [p for p in store.list() if p.schema_version != SCHEMA_VERSION]
    migrated: list[str] = []
    for persona in outdated:
        store.update(persona.id, conversation_history=[], schema_version=SCHEMA_VERSION)
        log.info(
            PERSONA_MIGRATED,
            persona_id=persona.id,
            persona_name=persona.name,
            schema_version=SCHEMA_VERSION,
        )
        migrated.append(persona.id)
    return migrated
