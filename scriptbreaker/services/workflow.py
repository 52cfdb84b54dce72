"""
Workflow state tracking for episodes and panels.

Status transitions are permissive by default: any status can move to any
other by explicit user action. A ``TransitionPolicy`` can be installed to
refuse specific moves without changing any caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace

from scriptbreaker.core.exceptions import EntityNotFoundError, TransitionRejectedError
from scriptbreaker.core.metrics import record_status_change
from scriptbreaker.core.request_context import log_context
from scriptbreaker.services.episode_store import EpisodeStore
from scriptbreaker.services.hierarchy import (
    Episode,
    EpisodeStatus,
    Panel,
    PanelStatus,
    PanelVisibility,
    find_episode,
    find_panel,
)

logger = logging.getLogger(__name__)

# (current, requested) -> allowed
TransitionPolicy = Callable[[str, str], bool]

ALL_FILTER = "all"
ACTIVE_FILTER = "active"
_INACTIVE_EPISODE_STATUSES = {EpisodeStatus.ARCHIVED, EpisodeStatus.COMPLETED}


def allow_all(current: str, requested: str) -> bool:
    return True


_episode_policy: TransitionPolicy = allow_all
_panel_policy: TransitionPolicy = allow_all


def set_transition_policies(
    episode_policy: TransitionPolicy | None = None,
    panel_policy: TransitionPolicy | None = None,
) -> None:
    """Install transition policies; ``None`` restores the permissive default."""
    global _episode_policy, _panel_policy
    _episode_policy = episode_policy or allow_all
    _panel_policy = panel_policy or allow_all


# ============================================================================
# Derived metrics
# ============================================================================


def completion_pct(episode: Episode) -> int:
    total = len(episode.panels)
    if total == 0:
        return 0
    approved = sum(1 for panel in episode.panels if panel.status == PanelStatus.APPROVED)
    return round(100 * approved / total)


def panel_progress(episodes: Iterable[Episode]) -> tuple[int, int]:
    """``(approved, active)`` over active panels, as shown in the Panel Manager."""
    active = [
        panel
        for episode in episodes
        for panel in episode.panels
        if panel.visibility == PanelVisibility.ACTIVE
    ]
    approved = sum(1 for panel in active if panel.status == PanelStatus.APPROVED)
    return approved, len(active)


# ============================================================================
# Filtering and search
# ============================================================================


def filter_episodes(episodes: list[Episode], name: str = ALL_FILTER) -> list[Episode]:
    if name == ALL_FILTER:
        return list(episodes)
    if name == ACTIVE_FILTER:
        return [e for e in episodes if e.status not in _INACTIVE_EPISODE_STATUSES]
    try:
        status = EpisodeStatus(name)
    except ValueError:
        raise ValueError(f"unknown episode filter: {name}") from None
    return [e for e in episodes if e.status == status]


def _episode_matches(episode: Episode, needle: str) -> bool:
    if needle in episode.title.lower() or needle in episode.summary.lower():
        return True
    return any(
        needle in panel.description.lower() or needle in panel.panel_type.lower()
        for panel in episode.panels
    )


def search_episodes(episodes: list[Episode], query: str) -> list[Episode]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(episodes)
    return [e for e in episodes if _episode_matches(e, needle)]


def filter_panels(
    episodes: list[Episode],
    *,
    episode_id: int | None = None,
    status: str = ALL_FILTER,
    visibility: str = ACTIVE_FILTER,
    query: str = "",
) -> list[tuple[Episode, Panel]]:
    """Panel Manager view: panels with their episode, narrowed by each filter."""
    status_filter = None if status == ALL_FILTER else PanelStatus(status)
    visibility_filter = None if visibility == ALL_FILTER else PanelVisibility(visibility)
    needle = (query or "").strip().lower()

    matches: list[tuple[Episode, Panel]] = []
    for episode in episodes:
        if episode_id is not None and episode.id != episode_id:
            continue
        for panel in episode.panels:
            if visibility_filter is not None and panel.visibility != visibility_filter:
                continue
            if status_filter is not None and panel.status != status_filter:
                continue
            if needle and needle not in panel.description.lower() and needle not in panel.name.lower():
                continue
            matches.append((episode, panel))
    return matches


# ============================================================================
# Status mutations
# ============================================================================


def set_episode_status(store: EpisodeStore, episode_id: int, status: EpisodeStatus) -> Episode:
    status = EpisodeStatus(status)
    with store.lock, log_context(episode_id=episode_id):
        episode = find_episode(store.get_all_episodes(), episode_id)
        if episode is None:
            raise EntityNotFoundError("Episode", episode_id)
        if not _episode_policy(episode.status.value, status.value):
            raise TransitionRejectedError("episode", episode.status.value, status.value)
        previous = episode.status
        updated = replace(episode, status=status)
        store.save_episodes([updated])
    logger.info(
        "episode_status_changed",
        extra={"episode_id": episode_id, "from_status": previous.value, "to_status": status.value},
    )
    record_status_change("episode", status.value)
    return updated


def _update_panel(store: EpisodeStore, panel_id: int, change: Callable[[Panel], Panel]) -> Panel:
    with store.lock:
        found = find_panel(store.get_all_episodes(), panel_id)
        if found is None:
            raise EntityNotFoundError("Panel", panel_id)
        episode, panel = found
        updated_panel = change(panel)
        panels = [updated_panel if p.id == panel_id else p for p in episode.panels]
        store.save_episodes([replace(episode, panels=panels)])
    return updated_panel


def set_panel_status(store: EpisodeStore, panel_id: int, status: PanelStatus) -> Panel:
    status = PanelStatus(status)
    previous: list[PanelStatus] = []

    def change(panel: Panel) -> Panel:
        if not _panel_policy(panel.status.value, status.value):
            raise TransitionRejectedError("panel", panel.status.value, status.value)
        previous.append(panel.status)
        return replace(panel, status=status)

    updated = _update_panel(store, panel_id, change)
    logger.info(
        "panel_status_changed",
        extra={"panel_id": panel_id, "from_status": previous[0].value, "to_status": status.value},
    )
    record_status_change("panel", status.value)
    return updated


def approve_panel(store: EpisodeStore, panel_id: int) -> Panel:
    return set_panel_status(store, panel_id, PanelStatus.APPROVED)


def request_redo(store: EpisodeStore, panel_id: int) -> Panel:
    return set_panel_status(store, panel_id, PanelStatus.REDO)


def regenerate_panel(store: EpisodeStore, panel_id: int) -> Panel:
    # The drawing backend moves the panel on to review when it finishes.
    return set_panel_status(store, panel_id, PanelStatus.DRAWING)


def set_panel_visibility(store: EpisodeStore, panel_id: int, visibility: PanelVisibility) -> Panel:
    visibility = PanelVisibility(visibility)
    updated = _update_panel(store, panel_id, lambda panel: replace(panel, visibility=visibility))
    logger.info("panel_visibility_changed", extra={"panel_id": panel_id, "visibility": visibility.value})
    return updated


def toggle_panel_visibility(store: EpisodeStore, panel_id: int) -> Panel:
    def change(panel: Panel) -> Panel:
        if panel.visibility == PanelVisibility.ACTIVE:
            return replace(panel, visibility=PanelVisibility.INACTIVE)
        return replace(panel, visibility=PanelVisibility.ACTIVE)

    updated = _update_panel(store, panel_id, change)
    logger.info("panel_visibility_changed", extra={"panel_id": panel_id, "visibility": updated.visibility.value})
    return updated


def trash_panel(store: EpisodeStore, panel_id: int) -> Panel:
    return set_panel_visibility(store, panel_id, PanelVisibility.TRASH)
