"""Memory scoring engine.

MemorySystem groups the operations the orchestrator runs against a persona's
memory set. Every operation mutates the persona in place; persisting it is the
caller's job.

Scoring and decay are deliberately simple:
- retrieval: keyword hits + importance / 10 + 1 / (days since creation + 1)
- extraction: first matching declarative pattern per message
- importance: boost accessed memories, decay the rest, clamp to [0, 10]
"""

import re
from datetime import datetime
from typing import Iterable

from persona_engine.memory.extraction import FactExtractor, PatternFactExtractor
from persona_engine.persona.models import MemoryEntry, Message, Persona, utcnow
from persona_engine.telemetry import get_logger
from persona_engine.telemetry.events import (
    IMPORTANCE_UPDATED,
    MEMORY_EXTRACTED,
    MEMORY_RETRIEVED,
)

log = get_logger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24
RECENT_MESSAGE_WINDOW = 6
MIN_IMPORTANCE = 0.0
MAX_IMPORTANCE = 10.0
IMPORTANCE_CHANGE_THRESHOLD = 0.1
MAX_ACCESS_BOOST = 2.0

_default_extractor = PatternFactExtractor()


def _days_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def _clamp(value: float) -> float:
    return max(MIN_IMPORTANCE, min(MAX_IMPORTANCE, value))


class MemorySystem:
    """Retrieval, extraction and importance bookkeeping for persona memories."""

    @staticmethod
    def add_memory(persona: Persona, content: str, importance: float = 5) -> MemoryEntry:
        """Append a new memory with current timestamps. importance is not clamped."""
        now = utcnow()
        memory = MemoryEntry(
            content=content, importance=importance, created_at=now, last_accessed=now
        )
        persona.memory.append(memory)
        return memory

    @staticmethod
    def retrieve_memories(
        persona: Persona, query: str, limit: int = 5, min_score: float = 0
    ) -> list[MemoryEntry]:
        """Return the memories most relevant to query.

        Every returned memory has its last_accessed set to now.

        Args:
            persona: Persona whose memory set is searched.
            query: Free text; split on whitespace into lowercase terms.
            limit: Maximum number of memories returned.
            min_score: Memories scoring below this are dropped.

        Returns:
            Memories sorted by descending score. Ties keep their stored order.
        """
        if not persona.memory:
            return []

        terms = re.split(r"\s+", query.lower())
        now = utcnow()

        scored: list[tuple[float, MemoryEntry]] = []
        for memory in persona.memory:
            text = memory.content.lower()
            score = float(sum(1 for term in terms if term in text))
            score += memory.importance / 10
            score += 1 / (_days_between(memory.created_at, now) + 1)
            scored.append((score, memory))

        relevant = [item for item in scored if item[0] >= min_score]
        relevant.sort(key=lambda item: item[0], reverse=True)
        selected = relevant[:limit]

        for _, memory in selected:
            memory.last_accessed = now

        log.debug(
            MEMORY_RETRIEVED,
            persona_id=persona.id,
            candidates=len(persona.memory),
            selected=len(selected),
            top_score=round(selected[0][0], 3) if selected else None,
        )
        return [memory for _, memory in selected]

    @staticmethod
    def extract_and_store_memory(
        persona: Persona,
        messages: Iterable[Message],
        threshold: float = 7,
        extractor: FactExtractor | None = None,
    ) -> None:
        """Store facts found in the most recent user/assistant messages.

        Only the last six messages are inspected. A fact is skipped when an
        existing memory contains it or is contained by it (case-insensitive).
        New memories get importance = threshold, without clamping.
        """
        extractor = extractor or _default_extractor
        recent = list(messages)[-RECENT_MESSAGE_WINDOW:]

        for message in recent:
            if message.role not in ("user", "assistant"):
                continue
            fact = extractor.extract(message.content)
            if fact is None:
                continue

            fact_lower = fact.lower()
            duplicate = any(
                fact_lower in m.content.lower() or m.content.lower() in fact_lower
                for m in persona.memory
            )
            if duplicate:
                continue

            memory = MemorySystem.add_memory(persona, fact, threshold)
            log.info(
                MEMORY_EXTRACTED,
                persona_id=persona.id,
                memory_id=memory.id,
                role=message.role,
                importance=threshold,
            )

    @staticmethod
    def update_importance_from_access(persona: Persona, accessed_memory_ids: Iterable[str]) -> None:
        """Boost accessed memories and decay the others.

        Accessed: +min(2, 1 / (days since last access + 0.1)).
        Not accessed: -rate * min(days since last access / 30, 1), where rate is
        0.5 past a week without access and 0.1 otherwise, plus a further -0.2
        for memories older than 90 days unused for over 30.

        Results are clamped to [0, 10] and only written when they move by more
        than 0.1.
        """
        accessed = set(accessed_memory_ids)
        now = utcnow()
        changed = 0

        for memory in persona.memory:
            since_access = _days_between(memory.last_accessed, now)
            since_creation = _days_between(memory.created_at, now)

            if memory.id in accessed:
                importance = memory.importance + min(
                    MAX_ACCESS_BOOST, 1 / (since_access + 0.1)
                )
            else:
                rate = 0.5 if since_access > 7 else 0.1
                importance = memory.importance - rate * min(since_access / 30, 1)
                if since_creation > 90 and since_access > 30:
                    importance -= 0.2

            importance = _clamp(importance)
            if abs(importance - memory.importance) > IMPORTANCE_CHANGE_THRESHOLD:
                memory.importance = importance
                changed += 1

        if changed:
            log.debug(IMPORTANCE_UPDATED, persona_id=persona.id, changed=changed)

    @staticmethod
    def update_memory_importance(persona: Persona, memory_id: str, new_importance: float) -> None:
        """Set one memory's importance, clamped to [0, 10]. Unknown ids are ignored."""
        for memory in persona.memory:
            if memory.id == memory_id:
                memory.importance = _clamp(new_importance)
                return

    @staticmethod
    def delete_memory(persona: Persona, memory_id: str) -> None:
        persona.memory = [m for m in persona.memory if m.id != memory_id]

    @staticmethod
    def format_memories_for_prompt(memories: list[MemoryEntry]) -> str:
        """Render memories as a numbered block for the system prompt."""
        if not memories:
            return ""
        lines = [f"{idx}. {m.content}" for idx, m in enumerate(memories, start=1)]
        return "\n\n**Important Memories:**\n" + "\n".join(lines)
