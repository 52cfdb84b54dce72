"""
Script breakdown pipeline: analyze text, then commit the result.

``analyze`` runs extraction and segmentation (independent, pure), composes
the candidate tree and registers it as pending. ``commit`` merges a pending
breakdown into the store. A successful commit releases the pending entry; a
rejected one keeps it untouched so the caller can retarget.
"""

from __future__ import annotations

import logging
import uuid
from typing import Literal

from scriptbreaker.core.metrics import record_breakdown_composed, track_compose
from scriptbreaker.core.request_context import log_context
from scriptbreaker.services import pending
from scriptbreaker.services.breakdown_composer import Breakdown, EpisodeCountHint, compose
from scriptbreaker.services.entity_extraction import extract
from scriptbreaker.services.episode_store import EpisodeStore
from scriptbreaker.services.hierarchy_merge import MergeResult, apply_append, apply_create
from scriptbreaker.services.scene_segmentation import segment

logger = logging.getLogger(__name__)

NEW_EPISODE_TARGET = "new"
Target = int | Literal["new"]


def build_breakdown(
    text: str,
    episode_count_hint: EpisodeCountHint = "auto",
    next_episode_id: int = 1,
) -> Breakdown:
    with track_compose():
        entities = extract(text)
        scenes = segment(text)
        breakdown = compose(
            scenes,
            entities.characters,
            entities.locations,
            entities.props,
            episode_count_hint=episode_count_hint,
            next_episode_id=next_episode_id,
        )
    record_breakdown_composed("auto" if episode_count_hint == "auto" else "explicit")
    return breakdown


def analyze(
    store: EpisodeStore,
    text: str,
    episode_count_hint: EpisodeCountHint = "auto",
) -> pending.PendingBreakdown:
    next_episode_id = store.get_max_episode_id() + 1
    breakdown = build_breakdown(text, episode_count_hint, next_episode_id)
    entry = pending.register(breakdown, text)
    with log_context(breakdown_id=entry.breakdown_id):
        logger.info("breakdown_registered", extra={"panels": breakdown.panel_count()})
    return entry


def merge(store: EpisodeStore, breakdown: Breakdown, target: Target) -> MergeResult:
    if target == NEW_EPISODE_TARGET:
        return apply_create(store, breakdown)
    return apply_append(store, int(target), breakdown)


def commit(
    store: EpisodeStore,
    breakdown_id: uuid.UUID,
    target: Target,
) -> tuple[MergeResult, pending.PendingBreakdown]:
    """Merge a pending breakdown; returns the result and the claimed entry."""
    entry = pending.claim(breakdown_id)
    with log_context(breakdown_id=breakdown_id):
        try:
            result = merge(store, entry.breakdown, target)
        except Exception:
            pending.restore(entry)
            raise
        if result.ok:
            pending.release(breakdown_id)
            logger.info("breakdown_committed", extra={"selected_episode_id": result.selected_episode_id})
        else:
            pending.restore(entry)
            logger.info("breakdown_kept_pending", extra={"reason": result.error.value})
    return result, entry
