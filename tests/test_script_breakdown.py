import uuid

import pytest

from scriptbreaker.core.exceptions import BreakdownNotFoundError
from scriptbreaker.services import pending, script_breakdown
from scriptbreaker.services.hierarchy_merge import MergeError


@pytest.fixture(autouse=True)
def _clear_pending():
    pending.clear()
    yield
    pending.clear()


COURT_SCRIPT = "Kaito walks onto the court. Ryu dunks the ball. Coach watches from the sideline."


def test_analyze_registers_pending_breakdown(memory_store):
    entry = script_breakdown.analyze(memory_store, COURT_SCRIPT)
    assert pending.get(entry.breakdown_id) is entry
    assert entry.source_text == COURT_SCRIPT
    assert entry.breakdown.suggested_next_episode_id == 3
    assert entry.breakdown.episodes[0].title.startswith("Episode 3:")


def test_analyze_does_not_touch_store(memory_store):
    before = memory_store.get_all_episodes()
    script_breakdown.analyze(memory_store, COURT_SCRIPT)
    assert memory_store.get_all_episodes() == before


def test_commit_new_discards_pending(memory_store):
    entry = script_breakdown.analyze(memory_store, COURT_SCRIPT)
    result, _ = script_breakdown.commit(memory_store, entry.breakdown_id, "new")

    assert result.ok
    assert result.created_episode_ids == [3]
    with pytest.raises(BreakdownNotFoundError):
        pending.get(entry.breakdown_id)


def test_commit_append(memory_store):
    entry = script_breakdown.analyze(memory_store, COURT_SCRIPT)
    result, _ = script_breakdown.commit(memory_store, entry.breakdown_id, 2)
    assert result.selected_episode_id == 2
    assert result.created_panel_ids == [6, 7, 8]


def test_rejected_commit_keeps_pending(memory_store):
    entry = script_breakdown.analyze(memory_store, COURT_SCRIPT)
    result, claimed = script_breakdown.commit(memory_store, entry.breakdown_id, 77)

    assert result.error == MergeError.EPISODE_NOT_FOUND
    assert claimed is entry
    assert pending.get(entry.breakdown_id) is entry

    retry, _ = script_breakdown.commit(memory_store, entry.breakdown_id, 1)
    assert retry.ok


def test_failed_commit_keeps_pending(memory_store, monkeypatch):
    entry = script_breakdown.analyze(memory_store, COURT_SCRIPT)

    def boom(episodes):
        raise RuntimeError("disk full")

    monkeypatch.setattr(memory_store, "save_episodes", boom)
    with pytest.raises(RuntimeError):
        script_breakdown.commit(memory_store, entry.breakdown_id, "new")
    assert pending.get(entry.breakdown_id) is entry


def test_commit_unknown_breakdown(memory_store):
    with pytest.raises(BreakdownNotFoundError):
        script_breakdown.commit(memory_store, uuid.uuid4(), "new")


def test_breakdown_commits_only_once(memory_store):
    entry = script_breakdown.analyze(memory_store, COURT_SCRIPT)
    script_breakdown.commit(memory_store, entry.breakdown_id, "new")
    with pytest.raises(BreakdownNotFoundError):
        script_breakdown.commit(memory_store, entry.breakdown_id, "new")


def test_discard(memory_store):
    entry = script_breakdown.analyze(memory_store, COURT_SCRIPT)
    pending.discard(entry.breakdown_id)
    with pytest.raises(BreakdownNotFoundError):
        pending.get(entry.breakdown_id)


def test_discard_during_rejected_commit_sticks(memory_store, monkeypatch):
    entry = script_breakdown.analyze(memory_store, COURT_SCRIPT)
    real_merge = script_breakdown.merge

    def merge_with_concurrent_discard(store, breakdown, target):
        pending.discard(entry.breakdown_id)
        return real_merge(store, breakdown, target)

    monkeypatch.setattr(script_breakdown, "merge", merge_with_concurrent_discard)
    result, claimed = script_breakdown.commit(memory_store, entry.breakdown_id, 77)

    assert result.error == MergeError.EPISODE_NOT_FOUND
    assert claimed is entry
    with pytest.raises(BreakdownNotFoundError):
        pending.get(entry.breakdown_id)


def test_claimed_breakdown_stays_visible_but_not_claimable(memory_store):
    entry = script_breakdown.analyze(memory_store, COURT_SCRIPT)
    pending.claim(entry.breakdown_id)

    assert pending.get(entry.breakdown_id) is entry
    with pytest.raises(BreakdownNotFoundError):
        pending.claim(entry.breakdown_id)

    pending.restore(entry)
    assert pending.claim(entry.breakdown_id) is entry
