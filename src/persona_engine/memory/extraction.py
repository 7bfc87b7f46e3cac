"""Heuristic fact extraction.

Facts are pulled from declarative statements with a fixed, ordered list of
case-insensitive patterns. The first matching pattern wins and the whole
matched span becomes the fact.
"""

import re
from typing import Protocol

IMPORTANT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"my name is (.+)", re.IGNORECASE),
    re.compile(r"i am (.+)", re.IGNORECASE),
    re.compile(r"i have (.+)", re.IGNORECASE),
    re.compile(r"i'm from (.+)", re.IGNORECASE),
    re.compile(r"remember that (.+)", re.IGNORECASE),
    re.compile(r"importantly, (.+)", re.IGNORECASE),
)


class FactExtractor(Protocol):
    """Turns one message's text into at most one candidate fact."""

    def extract(self, content: str) -> str | None: ...


class PatternFactExtractor:
    """FactExtractor driven by an ordered list of regular expressions."""

    def __init__(self, patterns: tuple[re.Pattern[str], ...] = IMPORTANT_PATTERNS) -> None:
        self.patterns = patterns

    def extract(self, content: str) -> str | None:
        for pattern in self.patterns:
            match = pattern.search(content)
            if match:
                return match.group(0)
        return None
