from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from train_journey.api.models import RouteType


def clamp_probability(p: float) -> float:
    return min(1.0, max(0.0, p))


class FailureFormula(ABC):
    """Chance that a train goes out of service on the way to stop `k`.

    `k` is the index being advanced into (1 for the first advance).
    """

    name: str

    @abstractmethod
    def raw_probability(self, *, route_type: RouteType, k: int) -> float:
        raise NotImplementedError

    def probability(self, *, route_type: RouteType, k: int) -> float:
        if k < 1:
            raise ValueError(f"k must be >= 1 (got {k})")
        return clamp_probability(self.raw_probability(route_type=route_type, k=k))


@dataclass(frozen=True, slots=True)
class ProgressiveFailureFormula(FailureFormula):
    """`base + k * increment`, express riskier than local."""

    base: Mapping[RouteType, float] = field(
        default_factory=lambda: MappingProxyType({RouteType.express: 0.15, RouteType.local: 0.10})
    )
    increment: Mapping[RouteType, float] = field(
        default_factory=lambda: MappingProxyType({RouteType.express: 0.05, RouteType.local: 0.03})
    )
    name: str = "progressive"

    def raw_probability(self, *, route_type: RouteType, k: int) -> float:
        return self.base[route_type] + k * self.increment[route_type]


@dataclass(frozen=True, slots=True)
class FlatFailureFormula(FailureFormula):
    p: float = 0.75
    name: str = "flat"

    def raw_probability(self, *, route_type: RouteType, k: int) -> float:
        return self.p


FAILURE_FORMULAS: dict[str, type[FailureFormula]] = {
    "progressive": ProgressiveFailureFormula,
    "flat": FlatFailureFormula,
}


def formula_by_name(name: str) -> FailureFormula:
    cls = FAILURE_FORMULAS.get(name.strip().casefold())
    if cls is None:
        allowed = ",".join(sorted(FAILURE_FORMULAS))
        raise ValueError(f"Unknown failure formula: {name} (allowed: {allowed})")
    return cls()
