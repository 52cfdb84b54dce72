import pytest

from scriptbreaker.services import workflow


async def _seed(client, text):
    created = (await client.post("/v1/breakdowns", json={"text": text})).json()
    resp = await client.post(f"/v1/breakdowns/{created['breakdown_id']}/commit", json={"target_episode": "new"})
    return resp.json()["selected_episode_id"]


@pytest.fixture()
def reset_policies():
    yield
    workflow.set_transition_policies()


@pytest.mark.anyio
async def test_list_episodes(client):
    await _seed(client, "Kaito trains on the rooftop. Yuki brings a water bottle.")
    await _seed(client, "Ryu arrives at the arena. The crowd goes silent.")

    episodes = (await client.get("/v1/episodes")).json()
    assert [e["id"] for e in episodes] == [1, 2]
    assert episodes[0]["completion_pct"] == 0
    assert episodes[0]["summary"].endswith("...")


@pytest.mark.anyio
async def test_filter_and_search(client):
    first = await _seed(client, "Kaito trains on the rooftop. Yuki brings a water bottle.")
    second = await _seed(client, "Ryu arrives at the arena. The crowd goes silent.")
    await client.post(f"/v1/episodes/{second}/status", json={"status": "archived"})

    active = (await client.get("/v1/episodes", params={"filter": "active"})).json()
    assert [e["id"] for e in active] == [first]

    archived = (await client.get("/v1/episodes", params={"filter": "archived"})).json()
    assert [e["id"] for e in archived] == [second]

    found = (await client.get("/v1/episodes", params={"q": "ARENA"})).json()
    assert [e["id"] for e in found] == [second]


@pytest.mark.anyio
async def test_unknown_filter(client):
    resp = await client.get("/v1/episodes", params={"filter": "later"})
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_episode_detail_groups_pages(client):
    episode_id = await _seed(client, "Kaito walks onto the court. Ryu dunks the ball. Coach watches from the sideline.")
    detail = (await client.get(f"/v1/episodes/{episode_id}")).json()
    assert [len(page["panels"]) for page in detail["pages"]] == [2, 1]
    assert detail["pages"][0]["panels"][0]["framing"] == "Wide"


@pytest.mark.anyio
async def test_missing_episode(client):
    resp = await client.get("/v1/episodes/99", headers={"x-request-id": "ep-404"})
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Episode not found", "request_id": "ep-404"}


@pytest.mark.anyio
async def test_set_status(client):
    episode_id = await _seed(client, "Kaito trains on the rooftop. Yuki brings a water bottle.")
    resp = await client.post(f"/v1/episodes/{episode_id}/status", json={"status": "review"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "review"


@pytest.mark.anyio
async def test_set_status_on_missing_episode(client):
    resp = await client.post("/v1/episodes/99/status", json={"status": "review"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Episode not found"


@pytest.mark.anyio
async def test_invalid_status(client):
    episode_id = await _seed(client, "Kaito trains on the rooftop. Yuki brings a water bottle.")
    resp = await client.post(f"/v1/episodes/{episode_id}/status", json={"status": "paused"})
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_rejected_transition(client, reset_policies):
    episode_id = await _seed(client, "Kaito trains on the rooftop. Yuki brings a water bottle.")
    workflow.set_transition_policies(episode_policy=lambda current, requested: requested != "completed")
    resp = await client.post(f"/v1/episodes/{episode_id}/status", json={"status": "completed"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "cannot move episode from todo to completed"
