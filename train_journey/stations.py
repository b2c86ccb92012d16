from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from train_journey.api.models import RouteType


FINAL_DESTINATION = "Final Destination"


STOP_SEQUENCES: Mapping[RouteType, tuple[str, ...]] = MappingProxyType(
    {
        RouteType.express: ("Philadelphia", "Trenton", "Newark", "New York City"),
        RouteType.local: (
            "Philadelphia",
            "Cornwells Heights",
            "Trenton",
            "Princeton Junction",
            "New Brunswick",
            "Metropark",
            "Newark",
            "New York City",
        ),
    }
)


def stop_sequence(route_type: RouteType) -> tuple[str, ...]:
    try:
        return STOP_SEQUENCES[route_type]
    except KeyError as e:
        raise ValueError(f"Unknown route type: {route_type}") from e


def first_station(route_type: RouteType) -> str:
    return stop_sequence(route_type)[0]


def last_index(route_type: RouteType) -> int:
    return len(stop_sequence(route_type)) - 1
