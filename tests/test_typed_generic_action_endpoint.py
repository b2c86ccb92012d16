from __future__ import annotations

from collections.abc import Callable

from fastapi.testclient import TestClient


def test_typed_actions_endpoint_drives_a_full_journey(client: TestClient, script_draws: Callable[..., object]) -> None:
    script_draws(0.99)
    jid = client.post("/journey").json()["journey_id"]

    for body in (
        {"action": "start"},
        {"action": "select", "route_type": "local"},
        {"action": "confirm"},
        {"action": "advance"},
        {"action": "exit"},
    ):
        resp = client.post(f"/journeys/{jid}/actions", json=body)
        assert resp.status_code == 200, resp.text

    data = resp.json()
    assert data["event"] == "EXITED"
    assert data["snapshot"]["phase"] == "ended"
    assert data["snapshot"]["route_type"] == "local"
    assert data["snapshot"]["visited_stations"] == ["Philadelphia", "Cornwells Heights"]


def test_typed_actions_endpoint_rejects_missing_fields(client: TestClient) -> None:
    jid = client.post("/journey").json()["journey_id"]
    client.post(f"/journeys/{jid}/actions", json={"action": "start"})

    # Missing route_type for select
    resp = client.post(f"/journeys/{jid}/actions", json={"action": "select"})
    assert resp.status_code == 422


def test_typed_actions_endpoint_rejects_unknown_action(client: TestClient) -> None:
    jid = client.post("/journey").json()["journey_id"]
    resp = client.post(f"/journeys/{jid}/actions", json={"action": "teleport"})
    assert resp.status_code == 422
