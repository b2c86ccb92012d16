from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID, uuid4

import redis

from train_journey.api.models import JourneyState, StoredJourney
from train_journey.core.errors import JourneyNotFound
from train_journey.core.random_source import new_seed
from train_journey.streams import EventLog, delete_events


JOURNEYS_SET_KEY = "train_journey:journeys"
JOURNEY_KEY_PREFIX = "train_journey:journey:"  # + {uuid}

DEFAULT_TTL_SECONDS = 3600

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _journey_key(journey_id: UUID) -> str:
    return f"{JOURNEY_KEY_PREFIX}{journey_id}"


def save_journey(*, r: redis.Redis, journey: StoredJourney, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
    # Every write refreshes the TTL: a session lives while it is being played.
    journey.last_updated_at = _now()
    r.set(_journey_key(journey.journey_id), journey.model_dump_json(), ex=ttl_seconds)


def get_journey(*, r: redis.Redis, journey_id: UUID) -> StoredJourney | None:
    raw = r.get(_journey_key(journey_id))
    if not raw:
        return None
    return StoredJourney.model_validate_json(raw)


def require_journey(*, r: redis.Redis, journey_id: UUID) -> StoredJourney:
    journey = get_journey(r=r, journey_id=journey_id)
    if journey is None:
        raise JourneyNotFound()
    return journey


def create_journey(*, r: redis.Redis, seed: int | None = None, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> StoredJourney:
    now = _now()
    journey = StoredJourney(
        journey_id=uuid4(),
        created_at=now,
        last_updated_at=now,
        seed=seed if seed is not None else new_seed(),
        draw_count=0,
        state=JourneyState(),
    )

    r.set(_journey_key(journey.journey_id), journey.model_dump_json(), ex=ttl_seconds)
    r.sadd(JOURNEYS_SET_KEY, str(journey.journey_id))
    logger.info("created journey %s (seed=%d)", journey.journey_id, journey.seed)
    return journey


def delete_journey(*, r: redis.Redis, journey_id: UUID) -> bool:
    removed = r.delete(_journey_key(journey_id))
    r.srem(JOURNEYS_SET_KEY, str(journey_id))
    delete_events(r=r, log=EventLog(journey_id=str(journey_id)))
    return bool(removed)


def list_journeys(*, r: redis.Redis) -> list[StoredJourney]:
    ids = sorted(r.smembers(JOURNEYS_SET_KEY))
    out: list[StoredJourney] = []
    for sid in ids:
        try:
            jid = UUID(sid)
        except ValueError:
            continue
        journey = get_journey(r=r, journey_id=jid)
        if journey is None:
            # Expired session; drop the dangling index entry.
            r.srem(JOURNEYS_SET_KEY, sid)
            continue
        out.append(journey)
    out.sort(key=lambda j: j.created_at, reverse=True)
    return out
