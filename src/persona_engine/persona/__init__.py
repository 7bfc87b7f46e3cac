"""Persona data model, templates and persistence collaborator."""

from persona_engine.persona.models import (
    SCHEMA_VERSION,
    MemoryEntry,
    Message,
    ModelParams,
    Persona,
    Personality,
    PersonaType,
    Quest,
)
from persona_engine.persona.store import (
    InMemoryPersonaStore,
    PersonaExistsError,
    PersonaNotFoundError,
    PersonaStore,
    PersonaStoreError,
    migrate_personas,
)
from persona_engine.persona.templates import (
    PERSONA_TEMPLATES,
    create_persona_from_template,
    get_template,
)

__all__ = [
    "SCHEMA_VERSION",
    "MemoryEntry",
    "Message",
    "ModelParams",
    "Persona",
    "Personality",
    "PersonaType",
    "Quest",
    "InMemoryPersonaStore",
    "PersonaExistsError",
    "PersonaNotFoundError",
    "PersonaStore",
    "PersonaStoreError",
    "migrate_personas",
    "PERSONA_TEMPLATES",
    "create_persona_from_template",
    "get_template",
]
