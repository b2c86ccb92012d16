from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from train_journey.api.models import GamePhase, JourneyState
from train_journey.core.errors import ExitNotPermitted, InvalidTransition
from train_journey.core.policy import ControllerPolicy, ExpressExitPolicy, at_final_stop, exit_permitted


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators."""

    operation: str
    policy: ControllerPolicy = field(default_factory=ControllerPolicy)


class TransitionValidator(ABC):
    """A small, composable check run before an operation mutates anything."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, state: JourneyState) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class PhaseValidator(TransitionValidator):
    allowed_phases: frozenset[GamePhase]

    def validate(self, *, ctx: ValidationContext, state: JourneyState) -> None:
        if state.phase not in self.allowed_phases:
            allowed = ",".join(sorted(p.value for p in self.allowed_phases))
            raise InvalidTransition(
                ctx.operation,
                state.phase.value,
                f"Operation '{ctx.operation}' not allowed in phase '{state.phase.value}' (allowed: {allowed})",
            )


@dataclass(frozen=True, slots=True)
class PendingRouteValidator(TransitionValidator):
    def validate(self, *, ctx: ValidationContext, state: JourneyState) -> None:
        if state.pending_route is None:
            raise InvalidTransition(ctx.operation, state.phase.value, "No route selected")


@dataclass(frozen=True, slots=True)
class NotAtFinalStopValidator(TransitionValidator):
    def validate(self, *, ctx: ValidationContext, state: JourneyState) -> None:
        if at_final_stop(state):
            raise InvalidTransition(ctx.operation, state.phase.value, "Already at the final station")


@dataclass(frozen=True, slots=True)
class ExitPolicyValidator(TransitionValidator):
    def validate(self, *, ctx: ValidationContext, state: JourneyState) -> None:
        if not exit_permitted(state, ctx.policy):
            route = state.route_type.value if state.route_type else "none"
            if ctx.policy.express_exit == ExpressExitPolicy.never:
                message = f"Exit is not permitted on the {route} train"
            else:
                message = f"You cannot exit the {route} train until the final station"
            raise ExitNotPermitted(ctx.operation, state.phase.value, message)


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[TransitionValidator, ...]

    def validate(self, *, ctx: ValidationContext, state: JourneyState) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, state=state)


DEFAULT_OPERATION_PIPELINES: dict[str, ValidatorPipeline] = {
    "start": ValidatorPipeline(validators=(PhaseValidator(allowed_phases=frozenset({GamePhase.intro})),)),
    "select": ValidatorPipeline(validators=(PhaseValidator(allowed_phases=frozenset({GamePhase.selecting})),)),
    "confirm": ValidatorPipeline(
        validators=(
            PhaseValidator(allowed_phases=frozenset({GamePhase.selecting})),
            PendingRouteValidator(),
        )
    ),
    "advance": ValidatorPipeline(
        validators=(
            PhaseValidator(allowed_phases=frozenset({GamePhase.journey})),
            NotAtFinalStopValidator(),
        )
    ),
    "exit": ValidatorPipeline(
        validators=(
            PhaseValidator(allowed_phases=frozenset({GamePhase.journey})),
            ExitPolicyValidator(),
        )
    ),
    # Restart is accepted from every phase.
    "restart": ValidatorPipeline(validators=()),
}


def pipeline_for_operation(operation: str) -> ValidatorPipeline:
    pipe = DEFAULT_OPERATION_PIPELINES.get(operation)
    if pipe is None:
        raise ValueError(f"Unknown operation: {operation}")
    return pipe
