from __future__ import annotations

from collections.abc import Generator

import redis

from train_journey.core.policy import ControllerPolicy
from train_journey.core.random_source import RandomSource
from train_journey.infra import settings
from train_journey.infra.redis_client import create_redis


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis()
    try:
        yield client
    finally:
        client.close()


def get_policy() -> ControllerPolicy:
    return settings.get_policy()


def get_session_ttl() -> int:
    return settings.get_session_ttl_seconds()


def get_random_source() -> RandomSource | None:
    """None means "replay from the journey's stored seed".

    Override in tests (or demos) to script the draws.
    """

    return None
