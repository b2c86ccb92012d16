from __future__ import annotations

import pytest

from train_journey.api.models import RouteType
from train_journey.core.failure import (
    FlatFailureFormula,
    ProgressiveFailureFormula,
    clamp_probability,
    formula_by_name,
)
from train_journey.stations import STOP_SEQUENCES, first_station, last_index, stop_sequence


@pytest.mark.parametrize("route", list(RouteType))
def test_every_route_has_a_non_empty_sequence(route: RouteType) -> None:
    seq = stop_sequence(route)
    assert len(seq) > 0
    assert first_station(route) == seq[0]
    assert last_index(route) == len(seq) - 1


def test_sequences_run_philadelphia_to_new_york() -> None:
    assert stop_sequence(RouteType.express) == ("Philadelphia", "Trenton", "Newark", "New York City")
    local = stop_sequence(RouteType.local)
    assert len(local) == 8
    assert local[0] == "Philadelphia"
    assert local[-1] == "New York City"


def test_sequences_are_immutable() -> None:
    with pytest.raises(TypeError):
        STOP_SEQUENCES[RouteType.express] = ("Nowhere",)  # type: ignore[index]


def test_progressive_formula_constants() -> None:
    f = ProgressiveFailureFormula()
    assert f.probability(route_type=RouteType.express, k=1) == pytest.approx(0.20)
    assert f.probability(route_type=RouteType.express, k=3) == pytest.approx(0.30)
    assert f.probability(route_type=RouteType.local, k=1) == pytest.approx(0.13)
    assert f.probability(route_type=RouteType.local, k=7) == pytest.approx(0.31)


def test_express_is_riskier_than_local_at_every_step() -> None:
    f = ProgressiveFailureFormula()
    for k in range(1, len(stop_sequence(RouteType.express))):
        assert f.probability(route_type=RouteType.express, k=k) > f.probability(route_type=RouteType.local, k=k)


def test_probability_stays_within_unit_interval_at_every_reachable_k() -> None:
    for formula in (ProgressiveFailureFormula(), FlatFailureFormula()):
        for route in RouteType:
            for k in range(1, len(stop_sequence(route))):
                assert 0.0 <= formula.probability(route_type=route, k=k) <= 1.0


def test_formula_clamps_out_of_range_values() -> None:
    steep = ProgressiveFailureFormula(
        base={RouteType.express: 0.9, RouteType.local: -0.5},
        increment={RouteType.express: 0.5, RouteType.local: 0.0},
    )
    assert steep.probability(route_type=RouteType.express, k=3) == 1.0
    assert steep.probability(route_type=RouteType.local, k=3) == 0.0
    assert clamp_probability(1.5) == 1.0
    assert clamp_probability(-0.1) == 0.0


def test_flat_formula_ignores_route_and_position() -> None:
    f = FlatFailureFormula()
    assert {f.probability(route_type=r, k=k) for r in RouteType for k in (1, 2, 3)} == {0.75}


def test_k_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ProgressiveFailureFormula().probability(route_type=RouteType.local, k=0)


def test_formula_by_name() -> None:
    assert isinstance(formula_by_name("progressive"), ProgressiveFailureFormula)
    assert isinstance(formula_by_name(" Flat "), FlatFailureFormula)
    with pytest.raises(ValueError) as e:
        formula_by_name("exponential")
    assert "Unknown failure formula" in str(e.value)
