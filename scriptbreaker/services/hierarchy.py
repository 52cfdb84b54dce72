"""
Production hierarchy records: Episode → Page → Panel.

Pages are not stored; they are the grouping of an episode's panels by
``page_number``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class EpisodeStatus(str, Enum):
    """Episode workflow status."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class PanelStatus(str, Enum):
    """Panel production status."""

    QUEUED = "queued"
    DRAWING = "drawing"
    REVIEW = "review"
    APPROVED = "approved"
    REDO = "redo"


class PanelVisibility(str, Enum):
    """Panel Manager triage flag."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    TRASH = "trash"


@dataclass
class Panel:
    id: int
    name: str
    page_number: int
    panel_type: str
    description: str
    framing: str = ""
    dialogue: str = ""
    characters: list[str] = field(default_factory=list)
    scene: str = ""
    props: list[str] = field(default_factory=list)
    status: PanelStatus = PanelStatus.QUEUED
    visibility: PanelVisibility = PanelVisibility.ACTIVE


@dataclass
class Page:
    page_number: int
    panels: list[Panel] = field(default_factory=list)


@dataclass
class Episode:
    id: int
    title: str
    arc: str = ""
    status: EpisodeStatus = EpisodeStatus.TODO
    summary: str = ""
    page_count: int = 0
    panels: list[Panel] = field(default_factory=list)

    def pages(self) -> list[Page]:
        """Group panels by page number, keeping insertion order."""
        pages: dict[int, Page] = {}
        for panel in self.panels:
            page = pages.get(panel.page_number)
            if page is None:
                page = pages[panel.page_number] = Page(page_number=panel.page_number)
            page.panels.append(panel)
        return list(pages.values())

    def distinct_page_numbers(self) -> set[int]:
        return {panel.page_number for panel in self.panels}

    def max_page_number(self) -> int:
        return max((panel.page_number for panel in self.panels), default=0)


def find_episode(episodes: list[Episode], episode_id: int) -> Episode | None:
    for episode in episodes:
        if episode.id == episode_id:
            return episode
    return None


def find_panel(episodes: list[Episode], panel_id: int) -> tuple[Episode, Panel] | None:
    for episode in episodes:
        for panel in episode.panels:
            if panel.id == panel_id:
                return episode, panel
    return None
