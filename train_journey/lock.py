from __future__ import annotations

import time
from contextlib import contextmanager

import redis

from train_journey.core.errors import JourneyBusy


@contextmanager
def journey_lock(*, r: redis.Redis, journey_id: str, ttl_ms: int = 5_000):
    """Best-effort per-journey lock.

    Operations on one journey must not overlap; a second caller fails fast
    instead of waiting. Single-holder only (no lock tokens).
    """

    key = f"lock:journey:{journey_id}"
    acquired = r.set(key, "1", nx=True, px=ttl_ms)
    if not acquired:
        raise JourneyBusy()
    try:
        yield
    finally:
        r.delete(key)
        # small yield to avoid tight contention in tests
        time.sleep(0)
