from __future__ import annotations

from collections.abc import Callable, Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient

from train_journey.api.deps import get_random_source, get_redis
from train_journey.core.random_source import FixedRandomSource
from train_journey.main import app


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """FastAPI TestClient wired to a fresh fakeredis instance."""

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()


@pytest.fixture()
def client(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> TestClient:
    return client_and_redis[0]


@pytest.fixture()
def script_draws() -> Callable[..., FixedRandomSource]:
    """Make every request draw from a fixed cycle of values.

    The source is shared across requests so a scripted sequence advances.
    """

    def _script(*values: float) -> FixedRandomSource:
        source = FixedRandomSource(*values)
        app.dependency_overrides[get_random_source] = lambda: source
        return source

    return _script
