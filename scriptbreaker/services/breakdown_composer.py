"""
Breakdown composition.

Turns segmented scenes plus extracted entities into a candidate
Episode → Page → Panel tree. The result is a plain value: nothing here
allocates IDs or touches the production store.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Literal

from scriptbreaker.config import loaders
from scriptbreaker.services.entity_extraction import (
    CharacterMention,
    LocationMention,
    PropMention,
    fallback_character,
)
from scriptbreaker.services.scene_segmentation import Scene

logger = logging.getLogger(__name__)

EpisodeCountHint = int | Literal["auto"]


@dataclass
class PanelDraft:
    name: str
    page_number: int
    panel_type: str
    framing: str
    description: str
    dialogue: str = ""
    characters: list[str] = field(default_factory=list)
    scene: str = ""
    props: list[str] = field(default_factory=list)


@dataclass
class PageDraft:
    page_number: int
    panels: list[PanelDraft] = field(default_factory=list)


@dataclass
class EpisodeDraft:
    title: str
    pages: list[PageDraft] = field(default_factory=list)

    def panels(self) -> list[PanelDraft]:
        return [panel for page in self.pages for panel in page.panels]


@dataclass
class Breakdown:
    episodes: list[EpisodeDraft] = field(default_factory=list)
    characters: list[CharacterMention] = field(default_factory=list)
    locations: list[LocationMention] = field(default_factory=list)
    props: list[PropMention] = field(default_factory=list)
    scenes: list[Scene] = field(default_factory=list)
    suggested_next_episode_id: int = 1

    def panel_count(self) -> int:
        return sum(len(page.panels) for episode in self.episodes for page in episode.pages)

    def page_count(self) -> int:
        return sum(len(episode.pages) for episode in self.episodes)


def _is_explicit(hint: EpisodeCountHint) -> bool:
    return isinstance(hint, int) and not isinstance(hint, bool) and hint >= 1


def resolve_episode_count(scene_count: int, hint: EpisodeCountHint = "auto") -> int:
    """Number of episodes for ``scene_count`` scenes.

    An explicit hint is raised so no episode holds more than
    ``scenes_per_episode`` scenes, and capped so no episode is empty.
    """
    if scene_count <= 0:
        return 0
    per_episode = loaders.load_breakdown_rules_v1().scenes_per_episode
    minimum = math.ceil(scene_count / per_episode)
    if not _is_explicit(hint):
        return minimum
    return min(max(hint, minimum), scene_count)


def slice_scenes(scenes: list[Scene], chunk_size: int) -> list[list[Scene]]:
    """Slice scenes into consecutive chunks of ``chunk_size``; the last may be shorter."""
    return [list(scenes[start : start + chunk_size]) for start in range(0, len(scenes), chunk_size)]


def partition_scenes(scenes: list[Scene], episode_count: int) -> list[list[Scene]]:
    """Slice scenes into ``episode_count`` contiguous, near-equal chunks."""
    if episode_count <= 0:
        return []
    base, extra = divmod(len(scenes), episode_count)
    chunks: list[list[Scene]] = []
    start = 0
    for index in range(episode_count):
        size = base + (1 if index < extra else 0)
        chunks.append(list(scenes[start : start + size]))
        start += size
    return chunks


def _leading_token(name: str) -> str:
    parts = name.split()
    return parts[0].lower() if parts else ""


def _panel_characters(text: str, characters: list[CharacterMention]) -> list[str]:
    lowered = text.lower()
    names = [c.name for c in characters if c.name.lower() in lowered]
    if names:
        return list(dict.fromkeys(names))
    if characters:
        return [characters[0].name]
    return [fallback_character().name]


def _panel_location(text: str, locations: list[LocationMention]) -> str:
    lowered = text.lower()
    for location in locations:
        token = _leading_token(location.name)
        if token and token in lowered:
            return location.name
    if locations:
        return locations[0].name
    return loaders.load_breakdown_rules_v1().unknown_location


def _panel_props(text: str, props: list[PropMention]) -> list[str]:
    lowered = text.lower()
    names: list[str] = []
    for prop in props:
        token = _leading_token(prop.name)
        if token and token in lowered:
            names.append(prop.name)
    return list(dict.fromkeys(names))


def _headline(text: str, max_words: int) -> str:
    words = text.split()
    headline = " ".join(words[:max_words]).rstrip(",;:-")
    return headline or "Untitled"


def compose(
    scenes: list[Scene],
    characters: list[CharacterMention],
    locations: list[LocationMention],
    props: list[PropMention],
    episode_count_hint: EpisodeCountHint = "auto",
    next_episode_id: int = 1,
) -> Breakdown:
    rules = loaders.load_breakdown_rules_v1()
    if _is_explicit(episode_count_hint):
        chunks = partition_scenes(scenes, resolve_episode_count(len(scenes), episode_count_hint))
    else:
        chunks = slice_scenes(scenes, rules.scenes_per_episode)

    episodes: list[EpisodeDraft] = []
    for episode_index, chunk in enumerate(chunks):
        episode_number = next_episode_id + episode_index
        title = f"Episode {episode_number}: {_headline(chunk[0].text, rules.title_headline_words)}"
        draft = EpisodeDraft(title=title)
        page: PageDraft | None = None
        for index, scene in enumerate(chunk):
            if page is None or (index > 0 and index % rules.panels_per_page == 0):
                page = PageDraft(page_number=len(draft.pages) + 1)
                draft.pages.append(page)
            panel_type = rules.panel_types[index % len(rules.panel_types)]
            page.panels.append(
                PanelDraft(
                    name=f"Panel {index + 1}",
                    page_number=page.page_number,
                    panel_type=panel_type.id,
                    framing=panel_type.framing,
                    description=scene.text,
                    characters=_panel_characters(scene.text, characters),
                    scene=_panel_location(scene.text, locations),
                    props=_panel_props(scene.text, props),
                )
            )
        episodes.append(draft)

    all_panels = [panel for episode in episodes for panel in episode.panels()]
    if all_panels:
        all_panels[-1].dialogue = rules.closing_dialogue
        all_panels[0].dialogue = rules.opening_dialogue

    breakdown = Breakdown(
        episodes=episodes,
        characters=list(characters),
        locations=list(locations),
        props=list(props),
        scenes=list(scenes),
        suggested_next_episode_id=next_episode_id,
    )
    logger.info(
        "breakdown_composed",
        extra={
            "episodes": len(episodes),
            "pages": breakdown.page_count(),
            "panels": len(all_panels),
            "episode_count_hint": str(episode_count_hint),
        },
    )
    return breakdown
