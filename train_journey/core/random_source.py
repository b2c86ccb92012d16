from __future__ import annotations

import random
from itertools import cycle
from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    def random(self) -> float:
        """Return a uniform float in [0, 1)."""
        ...


class SeededRandomSource:
    """Deterministic draws from `random.Random(seed)`.

    `skip` fast-forwards past draws already consumed, so a journey reloaded
    from storage continues the same sequence.
    """

    def __init__(self, seed: int, *, skip: int = 0) -> None:
        if skip < 0:
            raise ValueError("skip must be >= 0")
        self.seed = seed
        self._rng = random.Random(seed)
        self.draws = 0
        for _ in range(skip):
            self.random()

    def random(self) -> float:
        self.draws += 1
        return self._rng.random()


class SystemRandomSource:
    def __init__(self) -> None:
        self._rng = random.SystemRandom()

    def random(self) -> float:
        return self._rng.random()


class FixedRandomSource:
    """Cycles through the given values forever."""

    def __init__(self, *values: float) -> None:
        if not values:
            raise ValueError("At least one value is required")
        for v in values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"Random values must be in [0, 1) (got {v})")
        self.values = values
        self._it = cycle(values)

    def random(self) -> float:
        return next(self._it)


def new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)
