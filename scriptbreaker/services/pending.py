"""In-process registry of breakdowns awaiting a commit decision.

A commit ``claim``s an entry for the duration of the merge. A claimed entry
stays visible to ``get``; a ``discard`` that arrives meanwhile is honoured
when the commit ends, whatever its outcome.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from scriptbreaker.core.exceptions import BreakdownNotFoundError
from scriptbreaker.services.breakdown_composer import Breakdown


@dataclass
class PendingBreakdown:
    breakdown_id: uuid.UUID
    breakdown: Breakdown
    source_text: str
    created_at: datetime


_pending: dict[uuid.UUID, PendingBreakdown] = {}
_claimed: set[uuid.UUID] = set()
_discarded: set[uuid.UUID] = set()
_pending_lock = threading.Lock()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def register(breakdown: Breakdown, source_text: str) -> PendingBreakdown:
    entry = PendingBreakdown(
        breakdown_id=uuid.uuid4(),
        breakdown=breakdown,
        source_text=source_text,
        created_at=_utcnow(),
    )
    with _pending_lock:
        _pending[entry.breakdown_id] = entry
    return entry


def get(breakdown_id: uuid.UUID) -> PendingBreakdown:
    with _pending_lock:
        entry = _pending.get(breakdown_id)
        if breakdown_id in _discarded:
            entry = None
    if entry is None:
        raise BreakdownNotFoundError(breakdown_id)
    return entry


def discard(breakdown_id: uuid.UUID) -> None:
    with _pending_lock:
        if breakdown_id not in _pending or breakdown_id in _discarded:
            raise BreakdownNotFoundError(breakdown_id)
        if breakdown_id in _claimed:
            _discarded.add(breakdown_id)
        else:
            del _pending[breakdown_id]


def claim(breakdown_id: uuid.UUID) -> PendingBreakdown:
    """Reserve an entry so only one caller can commit it."""
    with _pending_lock:
        entry = _pending.get(breakdown_id)
        if entry is None or breakdown_id in _claimed or breakdown_id in _discarded:
            raise BreakdownNotFoundError(breakdown_id)
        _claimed.add(breakdown_id)
    return entry


def release(breakdown_id: uuid.UUID) -> None:
    """End a successful commit: the entry is gone for good."""
    with _pending_lock:
        _claimed.discard(breakdown_id)
        _discarded.discard(breakdown_id)
        _pending.pop(breakdown_id, None)


def restore(entry: PendingBreakdown) -> None:
    """End a rejected or failed commit: the entry is pending again unless discarded meanwhile."""
    with _pending_lock:
        _claimed.discard(entry.breakdown_id)
        if entry.breakdown_id in _discarded:
            _discarded.discard(entry.breakdown_id)
            _pending.pop(entry.breakdown_id, None)


def clear() -> None:
    with _pending_lock:
        _pending.clear()
        _claimed.clear()
        _discarded.clear()
