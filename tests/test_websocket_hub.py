from __future__ import annotations

import pytest

from train_journey.api.models import JourneyState
from train_journey.controller import build_snapshot
from train_journey.websocket_hub import JourneyWebSocketHub, journey_updated_payload


class _FakeSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.sent: list[dict[str, object]] = []
        self.broken = broken

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, payload: dict[str, object]) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


@pytest.mark.asyncio
async def test_broadcast_reaches_only_subscribers_of_that_journey() -> None:
    hub = JourneyWebSocketHub()
    a, b = _FakeSocket(), _FakeSocket()
    await hub.connect("j1", a)  # type: ignore[arg-type]
    await hub.connect("j2", b)  # type: ignore[arg-type]

    sent = await hub.broadcast("j1", {"type": "journey_updated"})

    assert sent == 1
    assert a.accepted
    assert a.sent == [{"type": "journey_updated"}]
    assert b.sent == []


@pytest.mark.asyncio
async def test_dead_sockets_are_dropped() -> None:
    hub = JourneyWebSocketHub()
    ok, dead = _FakeSocket(), _FakeSocket(broken=True)
    await hub.connect("j", ok)  # type: ignore[arg-type]
    await hub.connect("j", dead)  # type: ignore[arg-type]
    assert hub.connection_count("j") == 2

    assert await hub.broadcast("j", {"type": "x"}) == 1
    assert hub.connection_count("j") == 1

    await hub.disconnect("j", ok)  # type: ignore[arg-type]
    assert hub.connection_count("j") == 0


def test_journey_updated_payload_is_json_ready() -> None:
    payload = journey_updated_payload(journey_id="abc", snapshot=build_snapshot(JourneyState()))
    assert payload["type"] == "journey_updated"
    assert payload["phase"] == "intro"
    assert isinstance(payload["snapshot"], dict)
