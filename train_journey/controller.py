from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from statemachine.exceptions import TransitionNotAllowed

from train_journey.api.models import (
    GamePhase,
    JourneyOutcome,
    JourneySnapshot,
    JourneyState,
    RouteType,
)
from train_journey.core.errors import InvalidTransition
from train_journey.core.events import EventType, JourneyEvent
from train_journey.core.policy import ControllerPolicy, exit_permitted
from train_journey.core.random_source import RandomSource, SystemRandomSource
from train_journey.fsm import JourneyFSM
from train_journey.guards.validators import ValidationContext, pipeline_for_operation
from train_journey.stations import FINAL_DESTINATION, first_station, stop_sequence

logger = logging.getLogger(__name__)


class AdvanceOutcome(StrEnum):
    moved = "moved"
    arrived = "arrived"
    out_of_service = "out_of_service"


@dataclass(frozen=True, slots=True)
class AdvanceResult:
    outcome: AdvanceOutcome
    failure_probability: float
    draw: float
    event: JourneyEvent


class GameController:
    """Owns one JourneyState and is the only thing allowed to mutate it.

    Every operation validates first (raising `InvalidTransition` without
    touching state), then mutates fields and fires the matching FSM event.
    """

    def __init__(
        self,
        state: JourneyState | None = None,
        *,
        policy: ControllerPolicy | None = None,
        random_source: RandomSource | None = None,
    ) -> None:
        self.state = state if state is not None else JourneyState()
        self.policy = policy or ControllerPolicy()
        self.random_source = random_source or SystemRandomSource()

    def start_journey(self) -> JourneyEvent:
        self._validate("start")
        self._fire("start", "begin")
        return self._event("JOURNEY_STARTED")

    def select_route(self, route_type: RouteType) -> JourneyEvent:
        self._validate("select")
        self.state.pending_route = RouteType(route_type)
        return self._event("ROUTE_SELECTED", route_type=self.state.pending_route.value)

    def confirm_selection(self) -> JourneyEvent:
        self._validate("confirm")
        route = self.state.pending_route
        if route is None:
            raise InvalidTransition("confirm", self.state.phase.value, "No route selected")
        self._fire("confirm", "confirm")
        self.state.route_type = route
        self.state.pending_route = None
        self.state.current_index = 0
        self.state.visited_stations = [first_station(route)]
        return self._event("SELECTION_CONFIRMED", route_type=route.value, station=self.state.visited_stations[0])

    def advance(self) -> AdvanceResult:
        self._validate("advance")
        route = self.state.route_type
        if route is None:
            raise InvalidTransition("advance", self.state.phase.value, "No route confirmed")
        sequence = stop_sequence(route)
        new_index = self.state.current_index + 1

        probability = self.policy.failure_formula.probability(route_type=route, k=new_index)
        draw = self.random_source.random()
        logger.debug("advance draw=%.6f p=%.4f route=%s k=%d", draw, probability, route.value, new_index)

        if draw < probability:
            self._fire("advance", "break_down")
            self.state.out_of_service = True
            event = self._event(
                "OUT_OF_SERVICE",
                station=sequence[new_index],
                failure_probability=probability,
                draw=draw,
            )
            return AdvanceResult(AdvanceOutcome.out_of_service, probability, draw, event)

        self.state.current_index = new_index
        self.state.visited_stations.append(sequence[new_index])

        if new_index == len(sequence) - 1:
            self._fire("advance", "arrive")
            event = self._event("ARRIVED", station=sequence[new_index], failure_probability=probability, draw=draw)
            return AdvanceResult(AdvanceOutcome.arrived, probability, draw, event)

        event = self._event("STATION_REACHED", station=sequence[new_index], failure_probability=probability, draw=draw)
        return AdvanceResult(AdvanceOutcome.moved, probability, draw, event)

    def exit_early(self) -> JourneyEvent:
        self._validate("exit")
        self._fire("exit", "disembark")
        return self._event("EXITED", station=self.state.visited_stations[-1])

    def restart(self) -> JourneyEvent:
        self._validate("restart")
        self._fire("restart", "restart")
        # Reset in place so holders of `self.state` see it; no field survives.
        fresh = JourneyState()
        for name in JourneyState.model_fields:
            setattr(self.state, name, getattr(fresh, name))
        return self._event("RESTARTED")

    def snapshot(self) -> JourneySnapshot:
        return build_snapshot(self.state, self.policy)

    def _validate(self, operation: str) -> None:
        ctx = ValidationContext(operation=operation, policy=self.policy)
        try:
            pipeline_for_operation(operation).validate(ctx=ctx, state=self.state)
        except InvalidTransition as e:
            logger.warning("rejected %s: %s", operation, e)
            raise

    def _fire(self, operation: str, event: str) -> None:
        fsm = JourneyFSM(self.state, self.policy)
        try:
            fsm.send(event)
        except TransitionNotAllowed as e:
            raise InvalidTransition(operation, self.state.phase.value) from e
        fsm.sync_phase_to_model()
        logger.info("journey %s -> %s", event, self.state.phase.value)

    def _event(self, type_: EventType, **payload: Any) -> JourneyEvent:
        return JourneyEvent.now(type=type_, station_index=self.state.current_index, payload=payload)


def build_snapshot(state: JourneyState, policy: ControllerPolicy | None = None) -> JourneySnapshot:
    policy = policy or ControllerPolicy()
    route = state.route_type
    stations = list(stop_sequence(route)) if route is not None else []

    current_name: str | None = None
    next_name: str | None = None
    progress = 0.0
    if stations:
        current_name = stations[state.current_index]
        nxt = state.current_index + 1
        next_name = stations[nxt] if nxt < len(stations) else FINAL_DESTINATION
        progress = (state.current_index + 1) / len(stations)

    reached = bool(stations) and bool(state.visited_stations) and state.visited_stations[-1] == stations[-1]

    outcome: JourneyOutcome | None = None
    if state.phase == GamePhase.ended:
        if state.out_of_service:
            outcome = JourneyOutcome.out_of_service
        elif reached:
            outcome = JourneyOutcome.arrived
        else:
            outcome = JourneyOutcome.exited_early

    return JourneySnapshot(
        phase=state.phase,
        route_type=route,
        pending_route=state.pending_route,
        current_index=state.current_index,
        current_station_name=current_name,
        next_station_name=next_name,
        out_of_service=state.out_of_service,
        visited_stations=list(state.visited_stations),
        progress_fraction=progress,
        can_exit_now=exit_permitted(state, policy),
        reached_destination=reached,
        outcome=outcome,
        stations=stations,
    )
