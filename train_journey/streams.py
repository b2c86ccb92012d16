from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, cast

import redis


@dataclass(frozen=True, slots=True)
class EventLog:
    journey_id: str

    @property
    def key(self) -> str:
        return f"journey_events:{self.journey_id}"


def publish_event(*, r: redis.Redis, log: EventLog, fields: Mapping[str, str], ttl_seconds: int | None = None) -> str:
    """Append an entry to a journey's event stream.

    With `ttl_seconds` the stream expires alongside its session document.
    """

    # redis-py stubs expect field/value unions; we only use string fields/values.
    stream_id = r.xadd(log.key, {str(k): str(v) for k, v in fields.items()})
    if ttl_seconds is not None:
        r.expire(log.key, ttl_seconds)
    return cast(str, stream_id)


def delete_events(*, r: redis.Redis, log: EventLog) -> None:
    r.delete(log.key)


def read_events(
    *,
    r: redis.Redis,
    log: EventLog,
    start: str = "-",
    end: str = "+",
    count: int | None = None,
) -> list[tuple[str, dict[str, str]]]:
    return cast(list[tuple[str, dict[str, str]]], r.xrange(log.key, min=start, max=end, count=count))
