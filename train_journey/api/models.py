from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field, RootModel


class RouteType(StrEnum):
    express = "express"
    local = "local"


class GamePhase(StrEnum):
    intro = "intro"
    selecting = "selecting"
    journey = "journey"
    ended = "ended"


class JourneyOutcome(StrEnum):
    out_of_service = "out_of_service"
    arrived = "arrived"
    exited_early = "exited_early"


class JourneyState(BaseModel):
    """The mutable journey aggregate.

    Only `GameController` mutates it. A fresh instance is the INTRO state.
    """

    phase: GamePhase = GamePhase.intro

    # Committed once at confirmation; None before that.
    route_type: RouteType | None = None

    # Uncommitted choice while selecting.
    pending_route: RouteType | None = None

    current_index: int = Field(default=0, ge=0)
    out_of_service: bool = False
    visited_stations: list[str] = Field(default_factory=list)


class JourneySnapshot(BaseModel):
    """Read-only view handed to renderers."""

    phase: GamePhase
    route_type: RouteType | None
    pending_route: RouteType | None
    current_index: int
    current_station_name: str | None
    next_station_name: str | None
    out_of_service: bool
    visited_stations: list[str]
    progress_fraction: float
    can_exit_now: bool
    reached_destination: bool
    outcome: JourneyOutcome | None
    stations: list[str] = Field(default_factory=list)


class StoredJourney(BaseModel):
    journey_id: UUID
    created_at: datetime
    last_updated_at: datetime

    # Draws are replayed from the seed so a journey is reproducible across requests.
    seed: int
    draw_count: int = 0

    state: JourneyState = Field(default_factory=JourneyState)


class JourneyResponse(BaseModel):
    journey_id: UUID
    snapshot: JourneySnapshot

    # Type of the transition event that produced this snapshot, if any.
    event: str | None = None


class JourneyListResponse(BaseModel):
    journeys: list[JourneyResponse]


class SelectRouteRequest(BaseModel):
    route_type: RouteType


class StartAction(BaseModel):
    action: Literal["start"]


class SelectAction(BaseModel):
    action: Literal["select"]
    route_type: RouteType


class ConfirmAction(BaseModel):
    action: Literal["confirm"]


class AdvanceAction(BaseModel):
    action: Literal["advance"]


class ExitAction(BaseModel):
    action: Literal["exit"]


class RestartAction(BaseModel):
    action: Literal["restart"]


JourneyAction = Annotated[
    StartAction | SelectAction | ConfirmAction | AdvanceAction | ExitAction | RestartAction,
    Field(discriminator="action"),
]


class JourneyActionRequest(RootModel[JourneyAction]):
    """Body of the generic actions endpoint, tagged by `action`."""
