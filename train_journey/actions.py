from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal
from uuid import UUID

import redis

from train_journey.api.models import JourneySnapshot, RouteType, StoredJourney
from train_journey.controller import AdvanceResult, GameController
from train_journey.core.events import JourneyEvent
from train_journey.core.policy import ControllerPolicy
from train_journey.core.random_source import RandomSource, SeededRandomSource
from train_journey.journey_store import DEFAULT_TTL_SECONDS, require_journey, save_journey
from train_journey.lock import journey_lock
from train_journey.streams import EventLog, publish_event

logger = logging.getLogger(__name__)


OperationName = Literal["start", "select", "confirm", "advance", "exit", "restart"]

OPERATIONS: frozenset[str] = frozenset({"start", "select", "confirm", "advance", "exit", "restart"})


@dataclass(frozen=True, slots=True)
class OperationResult:
    journey: StoredJourney
    snapshot: JourneySnapshot
    event: JourneyEvent
    event_ids: list[str]
    advance: AdvanceResult | None = None


def _apply(*, controller: GameController, operation: str, payload: dict[str, Any]) -> tuple[JourneyEvent, AdvanceResult | None]:
    if operation == "start":
        return controller.start_journey(), None
    if operation == "select":
        route = payload.get("route_type")
        if route is None:
            raise ValueError("route_type is required")
        return controller.select_route(RouteType(str(route))), None
    if operation == "confirm":
        return controller.confirm_selection(), None
    if operation == "advance":
        result = controller.advance()
        return result.event, result
    if operation == "exit":
        return controller.exit_early(), None
    if operation == "restart":
        return controller.restart(), None
    raise ValueError(f"Unknown operation: {operation}")


def dispatch_operation(
    *,
    r: redis.Redis,
    journey_id: UUID,
    operation: OperationName,
    payload: dict[str, Any] | None = None,
    policy: ControllerPolicy | None = None,
    random_source: RandomSource | None = None,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
) -> OperationResult:
    """Entry point for every renderer.

    Applies an operation by:
    - acquiring the per-journey lock
    - loading the stored journey
    - running the controller operation (which validates before mutating)
    - persisting the journey
    - appending the transition to the journey's event stream

    A rejected operation raises before anything is saved or published.
    Without an explicit `random_source`, draws replay from the journey's seed.
    """

    if operation not in OPERATIONS:
        raise ValueError(f"Unknown operation: {operation}")

    jid = str(journey_id)

    with journey_lock(r=r, journey_id=jid):
        journey = require_journey(r=r, journey_id=journey_id)

        source = random_source or SeededRandomSource(journey.seed, skip=journey.draw_count)
        controller = GameController(journey.state, policy=policy, random_source=source)

        event, advance = _apply(controller=controller, operation=operation, payload=payload or {})
        if advance is not None:
            journey.draw_count += 1

        save_journey(r=r, journey=journey, ttl_seconds=ttl_seconds)

        event_id = publish_event(r=r, log=EventLog(journey_id=jid), fields=event.to_fields(), ttl_seconds=ttl_seconds)

    logger.info("journey %s: %s -> %s (%s)", jid, operation, journey.state.phase.value, event.type)
    return OperationResult(
        journey=journey,
        snapshot=controller.snapshot(),
        event=event,
        event_ids=[event_id],
        advance=advance,
    )
