"""
Production store collaborators.

The merge engine and the workflow tracker only see the ``EpisodeStore``
protocol. Two implementations ship with the service: an in-process store
and a SQLAlchemy store. Both hand out copies, so callers can never mutate
stored state without going through ``save_episodes``.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from scriptbreaker.core.exceptions import ConfigurationError
from scriptbreaker.core.settings import settings
from scriptbreaker.db.models import EpisodeRecord, PanelRecord
from scriptbreaker.db.session import session_scope
from scriptbreaker.services.hierarchy import (
    Episode,
    EpisodeStatus,
    Panel,
    PanelStatus,
    PanelVisibility,
)

logger = logging.getLogger(__name__)


class EpisodeStore(Protocol):
    # Held for the full duration of any read-modify-write against the store.
    lock: threading.Lock

    def get_all_episodes(self) -> list[Episode]: ...

    def get_max_panel_id(self) -> int: ...

    def get_max_episode_id(self) -> int: ...

    def save_episodes(self, episodes: list[Episode]) -> None: ...


class InMemoryEpisodeStore:
    """Episodes kept in a dict, keyed by id, in insertion order."""

    def __init__(self, episodes: list[Episode] | None = None) -> None:
        self.lock = threading.Lock()
        self._episodes: dict[int, Episode] = {}
        # High-water marks survive external deletions so IDs are never reused.
        self._max_episode_id = 0
        self._max_panel_id = 0
        if episodes:
            self.save_episodes(episodes)

    def get_all_episodes(self) -> list[Episode]:
        return copy.deepcopy(list(self._episodes.values()))

    def get_max_panel_id(self) -> int:
        return self._max_panel_id

    def get_max_episode_id(self) -> int:
        return self._max_episode_id

    def save_episodes(self, episodes: list[Episode]) -> None:
        for episode in episodes:
            self._episodes[episode.id] = copy.deepcopy(episode)
            self._max_episode_id = max(self._max_episode_id, episode.id)
            for panel in episode.panels:
                self._max_panel_id = max(self._max_panel_id, panel.id)

    def delete_episode(self, episode_id: int) -> None:
        """Remove an episode the way an external deletion would; IDs stay reserved."""
        self._episodes.pop(episode_id, None)


def _panel_from_record(row: PanelRecord) -> Panel:
    return Panel(
        id=row.panel_id,
        name=row.name,
        page_number=row.page_number,
        panel_type=row.panel_type,
        framing=row.framing,
        description=row.description,
        dialogue=row.dialogue,
        characters=list(row.characters or []),
        scene=row.scene,
        props=list(row.props or []),
        status=PanelStatus(row.status),
        visibility=PanelVisibility(row.visibility),
    )


def _episode_from_record(row: EpisodeRecord) -> Episode:
    return Episode(
        id=row.episode_id,
        title=row.title,
        arc=row.arc,
        status=EpisodeStatus(row.status),
        summary=row.summary,
        page_count=row.page_count,
        panels=[_panel_from_record(panel) for panel in row.panels],
    )


def _apply_panel(row: PanelRecord, panel: Panel, position: int) -> None:
    row.position = position
    row.name = panel.name
    row.page_number = panel.page_number
    row.panel_type = panel.panel_type
    row.framing = panel.framing
    row.description = panel.description
    row.dialogue = panel.dialogue
    row.characters = list(panel.characters)
    row.scene = panel.scene
    row.props = list(panel.props)
    row.status = panel.status.value
    row.visibility = panel.visibility.value


class SqlEpisodeStore:
    """SQLAlchemy-backed store; each ``save_episodes`` call is one transaction."""

    # One lock for every instance: all instances share the same database.
    lock = threading.Lock()

    def get_all_episodes(self) -> list[Episode]:
        with session_scope() as db:
            rows = (
                db.execute(
                    select(EpisodeRecord)
                    .options(selectinload(EpisodeRecord.panels))
                    .order_by(EpisodeRecord.episode_id.asc())
                )
                .scalars()
                .all()
            )
            return [_episode_from_record(row) for row in rows]

    def get_max_panel_id(self) -> int:
        with session_scope() as db:
            return db.execute(select(func.max(PanelRecord.panel_id))).scalar() or 0

    def get_max_episode_id(self) -> int:
        with session_scope() as db:
            return db.execute(select(func.max(EpisodeRecord.episode_id))).scalar() or 0

    def save_episodes(self, episodes: list[Episode]) -> None:
        with session_scope() as db:
            for episode in episodes:
                row = db.get(EpisodeRecord, episode.id, options=[selectinload(EpisodeRecord.panels)])
                if row is None:
                    row = EpisodeRecord(episode_id=episode.id)
                    db.add(row)
                row.title = episode.title
                row.arc = episode.arc
                row.status = episode.status.value
                row.summary = episode.summary
                row.page_count = episode.page_count

                existing = {panel.panel_id: panel for panel in row.panels}
                kept: list[PanelRecord] = []
                for position, panel in enumerate(episode.panels):
                    panel_row = existing.get(panel.id)
                    if panel_row is None:
                        panel_row = PanelRecord(panel_id=panel.id)
                    _apply_panel(panel_row, panel, position)
                    kept.append(panel_row)
                row.panels = kept
        logger.debug("episodes_saved", extra={"count": len(episodes)})


_store: EpisodeStore | None = None


def build_episode_store(backend: str) -> EpisodeStore:
    if backend == "sql":
        return SqlEpisodeStore()
    if backend == "memory":
        return InMemoryEpisodeStore()
    raise ConfigurationError(f"unknown episode store backend: {backend}")


def get_episode_store() -> EpisodeStore:
    global _store
    if _store is None:
        _store = build_episode_store(settings.episode_store_backend)
    return _store


def reset_episode_store(store: EpisodeStore | None = None) -> None:
    """Swap the process-wide store (tests, backend changes)."""
    global _store
    _store = store
