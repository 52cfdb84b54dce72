import uuid

import pytest

COURT_SCRIPT = "Kaito walks onto the court. Ryu dunks the ball. Coach watches from the sideline."


async def _analyze(client, text=COURT_SCRIPT, **extra):
    resp = await client.post("/v1/breakdowns", json={"text": text, **extra})
    assert resp.status_code == 200
    return resp.json()


@pytest.mark.anyio
async def test_create_breakdown(client):
    body = await _analyze(client)
    breakdown = body["breakdown"]

    assert uuid.UUID(body["breakdown_id"])
    assert [c["name"] for c in breakdown["characters"]] == ["Kaito", "Ryu", "Coach"]
    assert len(breakdown["scenes"]) == 3
    assert breakdown["scenes"][0]["tags"] == ["Opening", "Establishing"]
    assert breakdown["suggested_next_episode_id"] == 1

    (episode,) = breakdown["episodes"]
    assert episode["title"] == "Episode 1: Kaito walks onto the court"
    assert [len(page["panels"]) for page in episode["pages"]] == [2, 1]


@pytest.mark.anyio
async def test_empty_text_is_accepted(client):
    body = await _analyze(client, text="")
    assert body["breakdown"]["characters"][0]["name"] == "Character A"
    assert len(body["breakdown"]["episodes"][0]["pages"][0]["panels"]) == 2


@pytest.mark.anyio
async def test_explicit_episode_count(client):
    text = " ".join(f"Scene sentence number {i}." for i in range(6))
    body = await _analyze(client, text=text, episode_count=3)
    assert len(body["breakdown"]["episodes"]) == 3


@pytest.mark.anyio
async def test_invalid_episode_count(client):
    resp = await client.post("/v1/breakdowns", json={"text": "x", "episode_count": 0})
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_get_and_discard_breakdown(client):
    body = await _analyze(client)
    breakdown_id = body["breakdown_id"]

    fetched = await client.get(f"/v1/breakdowns/{breakdown_id}")
    assert fetched.status_code == 200
    assert fetched.json()["breakdown"] == body["breakdown"]

    discarded = await client.delete(f"/v1/breakdowns/{breakdown_id}")
    assert discarded.json() == {"status": "discarded"}

    missing = await client.get(f"/v1/breakdowns/{breakdown_id}")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Breakdown not found"


@pytest.mark.anyio
async def test_commit_as_new_episode(client):
    body = await _analyze(client)
    resp = await client.post(f"/v1/breakdowns/{body['breakdown_id']}/commit", json={"target_episode": "new"})
    assert resp.status_code == 200
    assert resp.json() == {
        "strategy": "create",
        "selected_episode_id": 1,
        "created_episode_ids": [1],
        "created_panel_ids": [1, 2, 3],
    }

    episode = (await client.get("/v1/episodes/1")).json()
    assert episode["arc"] == "From Script"
    assert episode["status"] == "todo"
    assert episode["page_count"] == 2
    assert episode["panel_count"] == 3

    gone = await client.get(f"/v1/breakdowns/{body['breakdown_id']}")
    assert gone.status_code == 404


@pytest.mark.anyio
async def test_commit_append_to_existing_episode(client):
    first = await _analyze(client)
    await client.post(f"/v1/breakdowns/{first['breakdown_id']}/commit", json={"target_episode": "new"})

    second = await _analyze(client, text="Yuki keeps score. Coach blows the whistle.")
    resp = await client.post(f"/v1/breakdowns/{second['breakdown_id']}/commit", json={"target_episode": 1})
    assert resp.status_code == 200
    assert resp.json()["strategy"] == "append"
    assert resp.json()["created_panel_ids"] == [4, 5]

    episode = (await client.get("/v1/episodes/1")).json()
    assert [page["page_number"] for page in episode["pages"]] == [1, 2, 3]
    assert [p["id"] for p in episode["pages"][2]["panels"]] == [4, 5]
    assert episode["page_count"] == 3


@pytest.mark.anyio
async def test_commit_to_missing_episode_keeps_breakdown(client):
    body = await _analyze(client)
    resp = await client.post(
        f"/v1/breakdowns/{body['breakdown_id']}/commit",
        json={"target_episode": 42},
        headers={"x-request-id": "commit-1"},
    )
    assert resp.status_code == 404
    rejected = resp.json()
    assert rejected["error"] == "episode_not_found"
    assert rejected["request_id"] == "commit-1"
    assert rejected["breakdown"] == body["breakdown"]

    episodes = (await client.get("/v1/episodes")).json()
    assert episodes == []

    retry = await client.post(f"/v1/breakdowns/{body['breakdown_id']}/commit", json={"target_episode": "new"})
    assert retry.status_code == 200


@pytest.mark.anyio
async def test_commit_unknown_breakdown(client):
    resp = await client.post(f"/v1/breakdowns/{uuid.uuid4()}/commit", json={"target_episode": "new"})
    assert resp.status_code == 404
