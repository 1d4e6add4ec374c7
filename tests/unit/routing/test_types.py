"""Tests for route types and leg pricing."""

from decimal import Decimal

import pytest

from aggregator.amm.math import calculate_fee
from aggregator.errors import InvalidAmountError
from aggregator.pools.types import DexType
from aggregator.routing.pricing import price_path, price_step
from aggregator.routing.types import QuoteResult, Route, estimate_gas
from tests.helpers import APT, USDC, USDT, WETH, make_pool


class TestPriceStep:
    def test_prices_one_leg(self, cetus_apt_usdc):
        step = price_step(cetus_apt_usdc, APT, 100_000_000)

        assert step.dex_type == DexType.CETUS
        assert step.coin_in == APT
        assert step.coin_out == USDC
        assert step.pool_address == cetus_apt_usdc.address
        assert step.amount_in == 100_000_000
        assert int(step.amount_out) == 9_969_006
        assert step.fee_rate == 30
        # 0.3% fee plus ~0.01% slippage
        assert step.price_impact == 30

    def test_foreign_coin_raises(self, cetus_apt_usdc):
        with pytest.raises(InvalidAmountError):
            price_step(cetus_apt_usdc, WETH, 100)

    def test_depleted_pool_raises(self):
        with pytest.raises(InvalidAmountError):
            price_step(make_pool(reserve_b=0), APT, 100)


class TestRoute:
    def test_aggregates_steps(self, liquidswap_apt_usdt, pancake_usdt_usdc):
        route = price_path([liquidswap_apt_usdt, pancake_usdt_usdc], APT, 100_000_000)

        first, second = route.steps
        assert route.amount_in == 100_000_000
        assert route.amount_out == second.amount_out
        assert route.price_impact == first.price_impact + second.price_impact
        # Fees are summed per step on each step's own input
        expected_fee = Decimal(300_000) + calculate_fee(second.amount_in, 25)
        assert abs(route.fee - expected_fee) < Decimal("1e-9")
        assert route.path == [APT, USDT, USDC]
        assert route.coin_in == APT and route.coin_out == USDC
        assert route.hop_count == 2

    def test_steps_must_be_contiguous(self, cetus_apt_usdc, pancake_usdt_usdc):
        a = price_step(cetus_apt_usdc, APT, 10**8)
        b = price_step(pancake_usdt_usdc, USDT, 10**6)
        with pytest.raises(ValueError, match="contiguous"):
            Route.from_steps([a, b])

    def test_route_needs_a_step(self):
        with pytest.raises(ValueError):
            Route.from_steps([])

    def test_gas_estimate(self):
        assert estimate_gas(1) == 5_000
        assert estimate_gas(2) == 8_000
        assert estimate_gas(3) == 11_000


class TestQuoteResult:
    def test_no_route(self):
        result = QuoteResult.no_route(candidate_count=0)
        assert not result.found
        assert result.route is None
        assert result.alternatives == ()
