from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "JOURNEY_STARTED",
    "ROUTE_SELECTED",
    "SELECTION_CONFIRMED",
    "STATION_REACHED",
    "ARRIVED",
    "OUT_OF_SERVICE",
    "EXITED",
    "RESTARTED",
]


@dataclass(frozen=True, slots=True)
class JourneyEvent:
    type: EventType
    station_index: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, station_index: int, payload: dict[str, Any]) -> "JourneyEvent":
        return JourneyEvent(type=type, station_index=station_index, payload=payload, ts=datetime.now(timezone.utc))

    def to_fields(self) -> dict[str, str]:
        """Flatten into string fields for a Redis Stream entry."""

        fields = {
            "type": self.type,
            "station_index": str(self.station_index),
            "ts": self.ts.isoformat(),
        }
        for k, v in self.payload.items():
            fields[str(k)] = "" if v is None else str(v)
        return fields
