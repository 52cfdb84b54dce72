"""
Hierarchy merge engine.

Commits a composed ``Breakdown`` into the production store, either as new
episodes (``apply_create``) or appended onto an existing episode
(``apply_append``).

Both operations derive the next IDs by scanning the store's current maxima,
so they run under ``store.lock``. Every new record is built before anything
is written, and the store receives one ``save_episodes`` call, so a rejected
or failed merge leaves the store untouched. Rejections come back as
``MergeResult`` values, not exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from scriptbreaker.config import loaders
from scriptbreaker.core.metrics import record_merge
from scriptbreaker.core.request_context import log_context
from scriptbreaker.services.breakdown_composer import Breakdown, PanelDraft
from scriptbreaker.services.episode_store import EpisodeStore
from scriptbreaker.services.hierarchy import Episode, EpisodeStatus, Panel, find_episode

logger = logging.getLogger(__name__)


class MergeStrategy(str, Enum):
    APPEND = "append"
    CREATE = "create"


class MergeError(str, Enum):
    EPISODE_NOT_FOUND = "episode_not_found"
    EMPTY_BREAKDOWN = "empty_breakdown"


@dataclass
class MergeResult:
    strategy: MergeStrategy
    error: MergeError | None = None
    selected_episode_id: int | None = None
    created_episode_ids: list[int] = field(default_factory=list)
    created_panel_ids: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def _panel_from_draft(draft: PanelDraft, panel_id: int, page_number: int) -> Panel:
    return Panel(
        id=panel_id,
        name=draft.name,
        page_number=page_number,
        panel_type=draft.panel_type,
        framing=draft.framing,
        description=draft.description,
        dialogue=draft.dialogue,
        characters=list(draft.characters),
        scene=draft.scene,
        props=list(draft.props),
    )


def _summarize(panels: list[Panel], max_chars: int) -> str:
    text = " ".join(panel.description for panel in panels if panel.description)
    return text[:max_chars] + "..."


def _rejected(strategy: MergeStrategy, error: MergeError, **log_extra) -> MergeResult:
    logger.warning("merge_rejected", extra={"strategy": strategy.value, "reason": error.value, **log_extra})
    record_merge(strategy.value, error.value)
    return MergeResult(strategy=strategy, error=error)


def apply_append(store: EpisodeStore, target_episode_id: int, breakdown: Breakdown) -> MergeResult:
    """Append every panel of ``breakdown`` to an existing episode.

    New pages are numbered after the target's highest page, one new page per
    ``(breakdown episode, page)`` pair, so page numbers keep rising.
    """
    strategy = MergeStrategy.APPEND
    with store.lock, log_context(episode_id=target_episode_id):
        target = find_episode(store.get_all_episodes(), target_episode_id)
        if target is None:
            return _rejected(strategy, MergeError.EPISODE_NOT_FOUND)
        if breakdown.panel_count() == 0:
            return _rejected(strategy, MergeError.EMPTY_BREAKDOWN)

        next_panel_id = store.get_max_panel_id() + 1
        next_page_number = target.max_page_number() + 1
        new_panels: list[Panel] = []
        new_pages = 0
        for episode_draft in breakdown.episodes:
            for page in episode_draft.pages:
                if not page.panels:
                    continue
                for draft in page.panels:
                    new_panels.append(_panel_from_draft(draft, next_panel_id, next_page_number))
                    next_panel_id += 1
                next_page_number += 1
                new_pages += 1

        updated = replace(
            target,
            panels=[*target.panels, *new_panels],
            page_count=target.page_count + new_pages,
        )
        store.save_episodes([updated])

        created_panel_ids = [panel.id for panel in new_panels]
        logger.info(
            "merge_applied",
            extra={"strategy": strategy.value, "panels_created": len(new_panels), "pages_created": new_pages},
        )
        record_merge(strategy.value, "success", panels_created=len(new_panels))
        return MergeResult(
            strategy=strategy,
            selected_episode_id=target.id,
            created_panel_ids=created_panel_ids,
        )


def apply_create(store: EpisodeStore, breakdown: Breakdown) -> MergeResult:
    """Create one new episode per breakdown episode, sharing one panel-id counter."""
    strategy = MergeStrategy.CREATE
    rules = loaders.load_breakdown_rules_v1()
    with store.lock:
        if not breakdown.episodes or breakdown.panel_count() == 0:
            return _rejected(strategy, MergeError.EMPTY_BREAKDOWN)

        next_episode_id = store.get_max_episode_id() + 1
        next_panel_id = store.get_max_panel_id() + 1
        created: list[Episode] = []
        for episode_draft in breakdown.episodes:
            panels: list[Panel] = []
            for draft in episode_draft.panels():
                panels.append(_panel_from_draft(draft, next_panel_id, draft.page_number))
                next_panel_id += 1
            episode = Episode(
                id=next_episode_id,
                title=episode_draft.title,
                arc=rules.created_episode_arc,
                status=EpisodeStatus.TODO,
                summary=_summarize(panels, rules.summary_max_chars),
                panels=panels,
            )
            episode.page_count = len(episode.distinct_page_numbers())
            created.append(episode)
            next_episode_id += 1

        store.save_episodes(created)

        created_panel_ids = [panel.id for episode in created for panel in episode.panels]
        logger.info(
            "merge_applied",
            extra={
                "strategy": strategy.value,
                "episodes_created": len(created),
                "panels_created": len(created_panel_ids),
            },
        )
        record_merge(strategy.value, "success", panels_created=len(created_panel_ids))
        return MergeResult(
            strategy=strategy,
            selected_episode_id=created[0].id,
            created_episode_ids=[episode.id for episode in created],
            created_panel_ids=created_panel_ids,
        )
