from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from train_journey.api.models import GamePhase, JourneyState, RouteType
from train_journey.core.failure import FailureFormula, ProgressiveFailureFormula
from train_journey.stations import last_index


class ExpressExitPolicy(StrEnum):
    at_final_stop = "at_final_stop"
    never = "never"


@dataclass(frozen=True, slots=True)
class ControllerPolicy:
    """Product rules that vary between deployments."""

    failure_formula: FailureFormula = field(default_factory=ProgressiveFailureFormula)
    express_exit: ExpressExitPolicy = ExpressExitPolicy.at_final_stop


def at_final_stop(state: JourneyState) -> bool:
    if state.route_type is None:
        return False
    return state.current_index == last_index(state.route_type)


def exit_permitted(state: JourneyState, policy: ControllerPolicy) -> bool:
    """Whether `exit_early` would be accepted right now."""

    if state.phase != GamePhase.journey or state.route_type is None:
        return False
    if state.route_type == RouteType.local:
        return True
    if policy.express_exit == ExpressExitPolicy.never:
        return False
    return at_final_stop(state)
