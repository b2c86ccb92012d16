from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from uuid import UUID

from fastapi import WebSocket

from train_journey.api.models import JourneySnapshot

logger = logging.getLogger(__name__)


def journey_updated_payload(*, journey_id: UUID | str, snapshot: JourneySnapshot) -> dict[str, object]:
    """The message renderers receive after every accepted operation."""

    return {
        "type": "journey_updated",
        "journey_id": str(journey_id),
        "phase": snapshot.phase.value,
        "snapshot": snapshot.model_dump(mode="json"),
    }


class JourneyWebSocketHub:
    """In-process fan-out of journey updates to subscribed renderers.

    Each journey id has its own set of sockets; a renderer only ever hears
    about the journey it subscribed to. Sockets that fail on send are dropped.
    """

    def __init__(self) -> None:
        self._by_journey: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, journey_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._by_journey[journey_id].add(websocket)

    async def disconnect(self, journey_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self._by_journey.get(journey_id)
            if not conns:
                return
            conns.discard(websocket)
            if not conns:
                self._by_journey.pop(journey_id, None)

    def connection_count(self, journey_id: str) -> int:
        return len(self._by_journey.get(journey_id, ()))

    async def broadcast(self, journey_id: str, payload: dict[str, object]) -> int:
        """Send `payload` to every subscriber; returns how many received it."""

        async with self._lock:
            conns = list(self._by_journey.get(journey_id, set()))

        sent = 0
        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
                sent += 1
            except Exception:
                dead.append(ws)

        if dead:
            logger.debug("dropping %d dead socket(s) for journey %s", len(dead), journey_id)
            for ws in dead:
                await self.disconnect(journey_id, ws)
        return sent


hub = JourneyWebSocketHub()
