"""Tests for the quote pipeline."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from aggregator.errors import QuoteValidationError
from aggregator.pools.snapshot import PoolSnapshot
from aggregator.pools.types import DexType
from aggregator.routing.pathfinding import PathFinder
from aggregator.routing.quoter import Quoter, build_quote_request
from aggregator.routing.selector import RouteSelector
from tests.conftest import SnapshotCache
from tests.helpers import APT, GUI, USDC, USDT, make_request


class CountingCache:
    """Counts snapshot reads."""

    def __init__(self, snapshot: PoolSnapshot) -> None:
        self._snapshot = snapshot
        self.reads = 0

    @property
    def snapshot(self) -> PoolSnapshot:
        self.reads += 1
        return self._snapshot


class TestQuoteValidation:
    def test_same_coin_rejected_before_search(self, snapshot):
        finder = MagicMock(spec=PathFinder)
        quoter = Quoter(SnapshotCache(snapshot), finder, RouteSelector())  # type: ignore[arg-type]

        with pytest.raises(QuoteValidationError, match="must be different"):
            quoter.quote(make_request(APT, APT))

        finder.find_routes.assert_not_called()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"coin_in": "not-a-coin"},
            {"coin_out": "0x1::aptos_coin"},
            {"amount_in": 0},
            {"amount_in": -5},
            {"max_hops": 0},
            {"max_hops": 4},
            {"slippage_tolerance_bp": 0},
            {"slippage_tolerance_bp": 10_001},
        ],
    )
    def test_invalid_requests_raise(self, quoter, overrides):
        with pytest.raises(QuoteValidationError):
            quoter.quote(make_request(**overrides))


class TestQuote:
    def test_best_route_with_slippage_floor(self, quoter):
        result = quoter.quote(make_request(amount_in=100_000_000, slippage_tolerance_bp=50))

        assert result.found
        assert result.route is not None
        # The PancakeSwap pool has the lower fee and wins for 1 APT
        assert result.route.steps[0].pool_address == "0x2::pancake::APT_USDC"
        assert result.min_amount_out == result.route.amount_out * Decimal("0.995")
        assert result.min_amount_out <= result.route.amount_out

    def test_alternatives_exclude_best(self, quoter):
        result = quoter.quote(make_request())

        assert result.candidate_count == 3
        assert len(result.alternatives) == 2
        assert result.route not in result.alternatives

    def test_disconnected_coins_return_no_route(self, quoter):
        result = quoter.quote(make_request(APT, GUI))

        assert not result.found
        assert result.route is None
        assert result.min_amount_out is None
        assert result.alternatives == ()

    def test_excluding_every_dex_returns_no_route(self, quoter):
        request = make_request(exclude_dexes={DexType.CETUS, DexType.PANCAKE, DexType.LIQUIDSWAP})

        result = quoter.quote(request)

        assert not result.found

    def test_single_hop_limit_ignores_multihop_routes(self, quoter):
        result = quoter.quote(make_request(APT, USDT, max_hops=1))

        assert result.found
        assert result.route is not None
        assert result.route.hop_count == 1
        assert result.candidate_count == 1

    def test_snapshot_read_once_per_quote(self, snapshot):
        cache = CountingCache(snapshot)
        quoter = Quoter(cache)  # type: ignore[arg-type]

        quoter.quote(make_request())

        assert cache.reads == 1


class TestBuildQuoteRequest:
    def test_parses_wire_values(self):
        request = build_quote_request(
            coin_in=APT,
            coin_out=USDC,
            amount_in="100000000",
            slippage_tolerance_bp=100,
            exclude_dexes=["cetus", "PANCAKE"],
            max_hops=2,
        )

        assert request.amount_in == 100_000_000
        assert request.exclude_dexes == frozenset({DexType.CETUS, DexType.PANCAKE})
        assert request.slippage_tolerance_bp == 100
        assert request.max_hops == 2

    def test_unknown_dex_tag_rejected(self):
        with pytest.raises(QuoteValidationError):
            build_quote_request(APT, USDC, "100", exclude_dexes=["uniswap"])

    @pytest.mark.parametrize("amount", ["1.5", "-1", "1e8", "abc", "", "\u00b2", "\u0663"])
    def test_non_integer_amount_rejected(self, amount):
        with pytest.raises(QuoteValidationError):
            build_quote_request(APT, USDC, amount)

    def test_zero_amount_rejected(self):
        with pytest.raises(QuoteValidationError, match="positive"):
            build_quote_request(APT, USDC, "0")
