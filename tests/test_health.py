import pytest


@pytest.mark.anyio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.anyio
async def test_request_id_is_echoed(client):
    resp = await client.get("/health", headers={"x-request-id": "req-123"})
    assert resp.headers["x-request-id"] == "req-123"


@pytest.mark.anyio
async def test_request_id_is_generated(client):
    resp = await client.get("/health")
    assert resp.headers["x-request-id"]


@pytest.mark.anyio
async def test_metrics_exposed(client):
    await client.post("/v1/breakdowns", json={"text": "Kaito runs the drill. Ryu watches closely."})
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "scriptbreaker_breakdowns_composed_total" in resp.text
    assert "scriptbreaker_compose_duration_seconds" in resp.text


@pytest.mark.anyio
async def test_unknown_route_carries_request_id(client):
    resp = await client.get("/v1/nowhere", headers={"x-request-id": "req-404"})
    assert resp.status_code == 404
    assert resp.json()["request_id"] == "req-404"


@pytest.mark.anyio
async def test_validation_error_carries_request_id(client):
    resp = await client.post(
        "/v1/breakdowns",
        json={"text": "x", "episode_count": 0},
        headers={"x-request-id": "req-422"},
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["request_id"] == "req-422"
    assert body["detail"][0]["loc"][-1] == "episode_count"
