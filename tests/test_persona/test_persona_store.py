"""Tests for the in-memory persona store and schema migration."""

from datetime import timedelta

import pytest

from persona_engine.persona import (
    SCHEMA_VERSION,
    InMemoryPersonaStore,
    MemoryEntry,
    Message,
    Persona,
    PersonaExistsError,
    PersonaNotFoundError,
    Quest,
    create_persona_from_template,
    get_template,
    migrate_personas,
)
from persona_engine.persona.models import utcnow


@pytest.fixture
def store(plain_persona: Persona) -> InMemoryPersonaStore:
    return InMemoryPersonaStore([plain_persona])


class TestInMemoryPersonaStore:
    """Test get/update-by-id semantics."""

    def test_get_and_list(self, store: InMemoryPersonaStore, plain_persona: Persona) -> None:
        assert store.get(plain_persona.id) is plain_persona
        assert store.get("missing") is None
        assert store.list() == [plain_persona]

    def test_add_returns_id(self, store: InMemoryPersonaStore) -> None:
        persona = create_persona_from_template(get_template("healer"))
        assert store.add(persona) == persona.id
        assert len(store.list()) == 2

    def test_add_duplicate_rejected(self, store: InMemoryPersonaStore, plain_persona: Persona) -> None:
        with pytest.raises(PersonaExistsError):
            store.add(plain_persona)

    def test_update_applies_fields_and_bumps_updated_at(
        self, store: InMemoryPersonaStore, plain_persona: Persona
    ) -> None:
        plain_persona.updated_at = utcnow() - timedelta(days=1)
        old_updated = plain_persona.updated_at

        updated = store.update(plain_persona.id, name="Ida the Bold")

        assert updated.name == "Ida the Bold"
        assert updated.updated_at > old_updated

    def test_update_unknown_id(self, store: InMemoryPersonaStore) -> None:
        with pytest.raises(PersonaNotFoundError):
            store.update("missing", name="x")

    def test_update_unknown_field(self, store: InMemoryPersonaStore, plain_persona: Persona) -> None:
        with pytest.raises(ValueError, match="Unknown persona fields"):
            store.update(plain_persona.id, nickname="x")

    def test_delete(self, store: InMemoryPersonaStore, plain_persona: Persona) -> None:
        store.delete(plain_persona.id)
        store.delete(plain_persona.id)
        assert store.list() == []

    def test_add_message_and_clear_history(
        self, store: InMemoryPersonaStore, plain_persona: Persona
    ) -> None:
        store.add_message(plain_persona.id, Message(role="user", content="Hi"))
        store.add_message(plain_persona.id, Message(role="assistant", content="Hello"))
        assert [m.content for m in plain_persona.conversation_history] == ["Hi", "Hello"]

        store.clear_history(plain_persona.id)
        assert plain_persona.conversation_history == []

    def test_add_quest(self, store: InMemoryPersonaStore, plain_persona: Persona) -> None:
        quest = Quest(title="Rats", description="Clear the cellar", party_size=3, level=1)

        store.add_quest(plain_persona.id, quest)

        assert plain_persona.quests == [quest]

    def test_delete_memory(self, store: InMemoryPersonaStore, plain_persona: Persona) -> None:
        keep = MemoryEntry(content="keep", importance=5)
        drop = MemoryEntry(content="drop", importance=5)
        plain_persona.memory.extend([keep, drop])

        store.delete_memory(plain_persona.id, drop.id)

        assert plain_persona.memory == [keep]


class TestMigratePersonas:
    """Test schema migration."""

    def test_outdated_personas_lose_history(self) -> None:
        current = create_persona_from_template(get_template("barkeep"))
        current.conversation_history.append(Message(role="user", content="kept"))
        legacy = create_persona_from_template(get_template("healer"))
        legacy.schema_version = None
        legacy.conversation_history.append(Message(role="user", content="dropped"))
        older = create_persona_from_template(get_template("blacksmith"))
        older.schema_version = "0.9.0"
        older.memory.append(MemoryEntry(content="kept memory", importance=5))
        store = InMemoryPersonaStore([current, legacy, older])

        migrated = migrate_personas(store)

        assert migrated == [legacy.id, older.id]
        assert legacy.conversation_history == []
        assert legacy.schema_version == SCHEMA_VERSION
        assert older.schema_version == SCHEMA_VERSION
        assert len(older.memory) == 1
        assert [m.content for m in current.conversation_history] == ["kept"]

    def test_nothing_to_migrate(self) -> None:
        store = InMemoryPersonaStore([create_persona_from_template(get_template("barkeep"))])
        assert migrate_personas(store) == []
