from __future__ import annotations

from statemachine import State, StateMachine

from train_journey.api.models import GamePhase, JourneyState
from train_journey.core import policy as journey_policy
from train_journey.core.policy import ControllerPolicy


class JourneyFSM(StateMachine):
    """FSM wrapper around JourneyState.

    - phases: intro -> selecting -> journey -> ended, and back to intro on restart
    - the controller mutates fields; the FSM only guards which phase comes next.
    """

    intro = State(GamePhase.intro.value, value=GamePhase.intro.value, initial=True)
    selecting = State(GamePhase.selecting.value, value=GamePhase.selecting.value)
    journey = State(GamePhase.journey.value, value=GamePhase.journey.value)
    ended = State(GamePhase.ended.value, value=GamePhase.ended.value)

    begin = intro.to(selecting)
    confirm = selecting.to(journey, cond="route_pending")
    arrive = journey.to(ended, cond="at_final_stop")
    break_down = journey.to(ended)
    disembark = journey.to(ended, cond="exit_permitted")
    restart = ended.to(intro) | journey.to(intro) | selecting.to(intro) | intro.to(intro)

    def __init__(self, state: JourneyState, policy: ControllerPolicy | None = None):
        self.journey_state = state
        self.policy = policy or ControllerPolicy()
        super().__init__(start_value=state.phase.value)

    def route_pending(self) -> bool:
        return self.journey_state.pending_route is not None

    def at_final_stop(self) -> bool:
        return journey_policy.at_final_stop(self.journey_state)

    def exit_permitted(self) -> bool:
        return journey_policy.exit_permitted(self.journey_state, self.policy)

    def sync_phase_to_model(self) -> None:
        self.journey_state.phase = GamePhase(str(self.current_state.value))
