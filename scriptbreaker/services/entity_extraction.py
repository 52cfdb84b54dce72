"""
Gazetteer-based entity extraction.

Scans raw script text for the known characters, locations and props listed
in ``config/gazetteer_v1.json``. Matching is a case-insensitive substring
test, so a name embedded in a longer word still counts (``"Ryu"`` inside
``"Ryuji"``). Output order always follows the gazetteer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from scriptbreaker.config import loaders
from scriptbreaker.config.loaders import GazetteerEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityMention:
    """A gazetteer entry found in the text."""

    name: str
    mention_count: int
    tags: tuple[str, ...] = ()


# Same shape, named by role for readability at call sites.
CharacterMention = EntityMention
LocationMention = EntityMention
PropMention = EntityMention


@dataclass
class ExtractionResult:
    characters: list[CharacterMention] = field(default_factory=list)
    locations: list[LocationMention] = field(default_factory=list)
    props: list[PropMention] = field(default_factory=list)


def count_mentions(text: str, name: str) -> int:
    """Count case-insensitive, non-overlapping occurrences of ``name``."""
    if not text or not name:
        return 0
    return text.lower().count(name.lower())


def _scan(text: str, entries: list[GazetteerEntry]) -> list[EntityMention]:
    lowered = (text or "").lower()
    mentions: list[EntityMention] = []
    for entry in entries:
        if entry.name.lower() not in lowered:
            continue
        mentions.append(
            EntityMention(
                name=entry.name,
                mention_count=count_mentions(text, entry.name),
                tags=tuple(dict.fromkeys(entry.tags)),
            )
        )
    return mentions


def fallback_character() -> CharacterMention:
    entry = loaders.load_gazetteer_v1().fallback_character
    return EntityMention(name=entry.name, mention_count=0, tags=tuple(dict.fromkeys(entry.tags)))


def extract(text: str | None) -> ExtractionResult:
    """Extract characters, locations and props. Never raises for any text input."""
    gazetteer = loaders.load_gazetteer_v1()
    text = text or ""

    characters = _scan(text, gazetteer.characters)
    if not characters:
        characters = [fallback_character()]

    result = ExtractionResult(
        characters=characters,
        locations=_scan(text, gazetteer.locations),
        props=_scan(text, gazetteer.props),
    )
    logger.debug(
        "entities_extracted",
        extra={
            "characters": len(result.characters),
            "locations": len(result.locations),
            "props": len(result.props),
        },
    )
    return result
