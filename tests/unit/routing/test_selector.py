"""Tests for best-route selection."""

import itertools
from decimal import Decimal

import pytest

from aggregator.pools.types import DexType
from aggregator.routing.selector import RouteSelector
from aggregator.routing.types import Route, RouteStep
from tests.helpers import APT, USDC

_counter = 0


def make_route(amount_out: str | int, price_impact: int) -> Route:
    """Single-hop APT -> USDC route with the given output and impact."""
    global _counter
    _counter += 1
    step = RouteStep(
        dex_type=DexType.CETUS,
        coin_in=APT,
        coin_out=USDC,
        pool_address=f"0x{_counter}::pool::P",
        amount_in=Decimal(100_000_000),
        amount_out=Decimal(amount_out),
        fee_rate=30,
        price_impact=price_impact,
    )
    return Route.from_steps([step])


class TestRouteSelector:
    def test_highest_output_wins(self):
        low = make_route(1000, 10)
        high = make_route(1001, 50)

        ranked = RouteSelector().select([low, high])

        assert ranked is not None
        assert ranked.best is high
        assert ranked.alternatives == (low,)

    def test_near_equal_outputs_tie_break_on_price_impact(self):
        """Outputs within epsilon are ordered by ascending price impact."""
        slightly_more = make_route("1000.0005", 50)
        less_impact = make_route("1000", 10)

        ranked = RouteSelector().select([slightly_more, less_impact])

        assert ranked is not None
        assert ranked.best is less_impact
        assert ranked.alternatives == (slightly_more,)

    def test_tie_group_measured_from_top_output(self):
        first = make_route("1000", 0)
        middle = make_route("1000.0008", 50)
        top = make_route("1000.0016", 100)

        # middle is within epsilon of top; first is not
        for order in itertools.permutations([first, middle, top]):
            assert RouteSelector().rank(list(order)) == [middle, top, first]

    def test_custom_epsilon(self):
        a = make_route(1000, 50)
        b = make_route(1004, 90)
        c = make_route(1003, 10)

        assert RouteSelector(epsilon=Decimal(5)).rank([a, b, c]) == [c, a, b]
        assert RouteSelector(epsilon=Decimal(0)).rank([a, b, c]) == [b, c, a]

    def test_alternatives_are_capped(self):
        routes = [make_route(1000 + i, 0) for i in range(8)]

        ranked = RouteSelector().select(routes)

        assert ranked is not None
        assert ranked.best.amount_out == 1007
        assert [r.amount_out for r in ranked.alternatives] == [1006, 1005, 1004, 1003, 1002]

    def test_max_alternatives_configurable(self):
        routes = [make_route(1000 + i, 0) for i in range(4)]
        ranked = RouteSelector(max_alternatives=1).select(routes)
        assert ranked is not None
        assert len(ranked.alternatives) == 1

    def test_empty_candidates_is_no_route(self):
        assert RouteSelector().select([]) is None

    def test_rank_does_not_mutate_input(self):
        routes = [make_route(1, 0), make_route(2, 0)]
        RouteSelector().rank(routes)
        assert [r.amount_out for r in routes] == [1, 2]

    def test_negative_settings_rejected(self):
        with pytest.raises(ValueError):
            RouteSelector(epsilon=Decimal(-1))
        with pytest.raises(ValueError):
            RouteSelector(max_alternatives=-1)
