from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from train_journey.api.models import GamePhase, JourneyState, RouteType
from train_journey.fsm import JourneyFSM


def _journey_state(route: RouteType, index: int) -> JourneyState:
    return JourneyState(
        phase=GamePhase.journey,
        route_type=route,
        current_index=index,
        visited_stations=["x"] * (index + 1),
    )


def test_fsm_starts_from_model_phase() -> None:
    fsm = JourneyFSM(JourneyState(phase=GamePhase.selecting))
    assert fsm.current_state == fsm.selecting


def test_begin_then_sync() -> None:
    state = JourneyState()
    fsm = JourneyFSM(state)
    fsm.send("begin")
    fsm.sync_phase_to_model()
    assert state.phase == GamePhase.selecting


def test_confirm_requires_pending_route() -> None:
    state = JourneyState(phase=GamePhase.selecting)
    with pytest.raises(TransitionNotAllowed):
        JourneyFSM(state).send("confirm")

    state.pending_route = RouteType.local
    fsm = JourneyFSM(state)
    fsm.send("confirm")
    assert fsm.current_state == fsm.journey


def test_arrive_requires_final_stop() -> None:
    with pytest.raises(TransitionNotAllowed):
        JourneyFSM(_journey_state(RouteType.express, 2)).send("arrive")

    fsm = JourneyFSM(_journey_state(RouteType.express, 3))
    fsm.send("arrive")
    assert fsm.current_state == fsm.ended


def test_disembark_follows_exit_policy() -> None:
    with pytest.raises(TransitionNotAllowed):
        JourneyFSM(_journey_state(RouteType.express, 1)).send("disembark")

    fsm = JourneyFSM(_journey_state(RouteType.local, 1))
    fsm.send("disembark")
    assert fsm.current_state == fsm.ended


def test_break_down_only_from_journey() -> None:
    with pytest.raises(TransitionNotAllowed):
        JourneyFSM(JourneyState()).send("break_down")


@pytest.mark.parametrize("phase", list(GamePhase))
def test_restart_from_every_phase(phase: GamePhase) -> None:
    fsm = JourneyFSM(JourneyState(phase=phase))
    fsm.send("restart")
    assert fsm.current_state == fsm.intro
