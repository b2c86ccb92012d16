from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

import redis
from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status

from train_journey.actions import OperationName, dispatch_operation
from train_journey.api.deps import get_policy, get_random_source, get_redis, get_session_ttl
from train_journey.api.models import (
    JourneyActionRequest,
    JourneyListResponse,
    JourneyResponse,
    SelectRouteRequest,
    StoredJourney,
)
from train_journey.controller import build_snapshot
from train_journey.core.errors import ExitNotPermitted, InvalidTransition, JourneyBusy, JourneyNotFound
from train_journey.core.policy import ControllerPolicy
from train_journey.core.random_source import RandomSource
from train_journey.journey_store import create_journey, delete_journey, get_journey, list_journeys
from train_journey.streams import EventLog, read_events
from train_journey.websocket_hub import hub, journey_updated_payload

router = APIRouter()


def _raise_http(e: ValueError) -> NoReturn:
    if isinstance(e, ExitNotPermitted):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    if isinstance(e, InvalidTransition):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    if isinstance(e, JourneyNotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    if isinstance(e, JourneyBusy):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


def _response(journey: StoredJourney, policy: ControllerPolicy, event: str | None = None) -> JourneyResponse:
    return JourneyResponse(
        journey_id=journey.journey_id,
        snapshot=build_snapshot(journey.state, policy),
        event=event,
    )


async def _run_operation(
    *,
    r: redis.Redis,
    journey_id: UUID,
    operation: OperationName,
    payload: dict[str, Any] | None,
    policy: ControllerPolicy,
    random_source: RandomSource | None,
    ttl_seconds: int,
) -> JourneyResponse:
    try:
        result = dispatch_operation(
            r=r,
            journey_id=journey_id,
            operation=operation,
            payload=payload,
            policy=policy,
            random_source=random_source,
            ttl_seconds=ttl_seconds,
        )
    except ValueError as e:
        _raise_http(e)

    await hub.broadcast(str(journey_id), journey_updated_payload(journey_id=journey_id, snapshot=result.snapshot))
    return JourneyResponse(journey_id=journey_id, snapshot=result.snapshot, event=result.event.type)


@router.websocket("/ws/journey/{journey_id}")
async def journey_updates_ws(websocket: WebSocket, journey_id: UUID) -> None:
    jid = str(journey_id)
    await hub.connect(jid, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(jid, websocket)
    except Exception:
        await hub.disconnect(jid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/journey", response_model=JourneyResponse, status_code=status.HTTP_201_CREATED)
async def create_journey_route(
    seed: int | None = None,
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
    ttl_seconds: int = Depends(get_session_ttl),
) -> JourneyResponse:
    journey = create_journey(r=r, seed=seed, ttl_seconds=ttl_seconds)
    return _response(journey, policy)


@router.get("/journey", response_model=JourneyListResponse)
async def list_journeys_route(
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
) -> JourneyListResponse:
    return JourneyListResponse(journeys=[_response(j, policy) for j in list_journeys(r=r)])


@router.get("/journey/{journey_id}", response_model=JourneyResponse)
async def get_journey_route(
    journey_id: UUID,
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
) -> JourneyResponse:
    journey = get_journey(r=r, journey_id=journey_id)
    if journey is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journey not found")
    return _response(journey, policy)


@router.delete("/journey/{journey_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_journey_route(journey_id: UUID, r: redis.Redis = Depends(get_redis)) -> Response:
    if not delete_journey(r=r, journey_id=journey_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journey not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/journey/{journey_id}/start", response_model=JourneyResponse)
async def start_route(
    journey_id: UUID,
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
    random_source: RandomSource | None = Depends(get_random_source),
    ttl_seconds: int = Depends(get_session_ttl),
) -> JourneyResponse:
    return await _run_operation(
        r=r,
        journey_id=journey_id,
        operation="start",
        payload=None,
        policy=policy,
        random_source=random_source,
        ttl_seconds=ttl_seconds,
    )


@router.post("/journey/{journey_id}/select", response_model=JourneyResponse)
async def select_route(
    journey_id: UUID,
    payload: SelectRouteRequest,
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
    random_source: RandomSource | None = Depends(get_random_source),
    ttl_seconds: int = Depends(get_session_ttl),
) -> JourneyResponse:
    return await _run_operation(
        r=r,
        journey_id=journey_id,
        operation="select",
        payload={"route_type": payload.route_type.value},
        policy=policy,
        random_source=random_source,
        ttl_seconds=ttl_seconds,
    )


@router.post("/journey/{journey_id}/confirm", response_model=JourneyResponse)
async def confirm_route(
    journey_id: UUID,
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
    random_source: RandomSource | None = Depends(get_random_source),
    ttl_seconds: int = Depends(get_session_ttl),
) -> JourneyResponse:
    return await _run_operation(
        r=r,
        journey_id=journey_id,
        operation="confirm",
        payload=None,
        policy=policy,
        random_source=random_source,
        ttl_seconds=ttl_seconds,
    )


@router.post("/journey/{journey_id}/advance", response_model=JourneyResponse)
async def advance_route(
    journey_id: UUID,
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
    random_source: RandomSource | None = Depends(get_random_source),
    ttl_seconds: int = Depends(get_session_ttl),
) -> JourneyResponse:
    return await _run_operation(
        r=r,
        journey_id=journey_id,
        operation="advance",
        payload=None,
        policy=policy,
        random_source=random_source,
        ttl_seconds=ttl_seconds,
    )


@router.post("/journey/{journey_id}/exit", response_model=JourneyResponse)
async def exit_route(
    journey_id: UUID,
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
    random_source: RandomSource | None = Depends(get_random_source),
    ttl_seconds: int = Depends(get_session_ttl),
) -> JourneyResponse:
    return await _run_operation(
        r=r,
        journey_id=journey_id,
        operation="exit",
        payload=None,
        policy=policy,
        random_source=random_source,
        ttl_seconds=ttl_seconds,
    )


@router.post("/journey/{journey_id}/restart", response_model=JourneyResponse)
async def restart_route(
    journey_id: UUID,
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
    random_source: RandomSource | None = Depends(get_random_source),
    ttl_seconds: int = Depends(get_session_ttl),
) -> JourneyResponse:
    return await _run_operation(
        r=r,
        journey_id=journey_id,
        operation="restart",
        payload=None,
        policy=policy,
        random_source=random_source,
        ttl_seconds=ttl_seconds,
    )


@router.post("/journeys/{journey_id}/actions", response_model=JourneyResponse)
async def generic_action_route(
    journey_id: UUID,
    body: JourneyActionRequest,
    r: redis.Redis = Depends(get_redis),
    policy: ControllerPolicy = Depends(get_policy),
    random_source: RandomSource | None = Depends(get_random_source),
    ttl_seconds: int = Depends(get_session_ttl),
) -> JourneyResponse:
    return await _run_operation(
        r=r,
        journey_id=journey_id,
        operation=body.root.action,
        payload=body.root.model_dump(mode="json", exclude={"action"}),
        policy=policy,
        random_source=random_source,
        ttl_seconds=ttl_seconds,
    )


@router.get("/journeys/{journey_id}/events")
async def get_journey_events_route(
    journey_id: UUID,
    count: int = 50,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    """Debug endpoint: read a journey's transition event stream."""

    if count < 1 or count > 500:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 500")

    log = EventLog(journey_id=str(journey_id))
    try:
        entries = read_events(r=r, log=log, start=start, end=end, count=count)
    except redis.ResponseError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    events = [{"id": eid, "fields": fields} for eid, fields in entries]
    return {"journey_id": str(journey_id), "stream": log.key, "events": events}
