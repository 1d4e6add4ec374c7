"""Pytest configuration and fixtures."""

import asyncio

import pytest

from aggregator.pools.snapshot import PoolSnapshot
from aggregator.pools.types import DexType, Pool
from aggregator.routing.pathfinding import PathFinder
from aggregator.routing.quoter import Quoter
from aggregator.routing.selector import RouteSelector
from tests.helpers import APT, GUI, ISLAND, USDC, USDT, make_pool


class FakeClock:
    """Controllable time source for cache and provider tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MockProvider:
    """Provider returning a fixed pool list and counting its calls."""

    def __init__(self, dex_type: DexType, pools: list[Pool], name: str | None = None) -> None:
        self.dex_type = dex_type
        self.name = name or f"mock:{dex_type.value}"
        self.pools = pools
        self.calls = 0

    async def fetch_pools(self) -> list[Pool]:
        self.calls += 1
        return list(self.pools)


class FailingProvider:
    """Provider whose fetch always raises."""

    def __init__(self, dex_type: DexType, error: Exception | None = None) -> None:
        self.dex_type = dex_type
        self.name = f"failing:{dex_type.value}"
        self.error = error or ConnectionError("fullnode unreachable")
        self.calls = 0

    async def fetch_pools(self) -> list[Pool]:
        self.calls += 1
        raise self.error


class SlowProvider:
    """Provider that sleeps before returning its pools."""

    def __init__(self, dex_type: DexType, pools: list[Pool], delay: float = 0.05) -> None:
        self.dex_type = dex_type
        self.name = f"slow:{dex_type.value}"
        self.pools = pools
        self.delay = delay
        self.active = 0
        self.max_active = 0

    async def fetch_pools(self) -> list[Pool]:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            return list(self.pools)
        finally:
            self.active -= 1


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cetus_apt_usdc() -> Pool:
    """10,000 APT / 100,000 USDC on Cetus at 0.3%."""
    return make_pool(
        APT,
        USDC,
        reserve_a=1_000_000_000_000,
        reserve_b=100_000_000_000,
        dex_type=DexType.CETUS,
        fee_rate=30,
        address="0x1::cetus::APT_USDC",
    )


@pytest.fixture
def pancake_apt_usdc() -> Pool:
    """5,000 APT / 50,000 USDC on PancakeSwap at 0.25%."""
    return make_pool(
        APT,
        USDC,
        reserve_a=500_000_000_000,
        reserve_b=50_000_000_000,
        dex_type=DexType.PANCAKE,
        fee_rate=25,
        address="0x2::pancake::APT_USDC",
    )


@pytest.fixture
def liquidswap_apt_usdt() -> Pool:
    return make_pool(
        APT,
        USDT,
        reserve_a=1_000_000_000_000,
        reserve_b=100_000_000_000,
        dex_type=DexType.LIQUIDSWAP,
        fee_rate=30,
        address="0x3::liquidswap::APT_USDT",
    )


@pytest.fixture
def pancake_usdt_usdc() -> Pool:
    """Deep stable pool, 1:1."""
    return make_pool(
        USDT,
        USDC,
        reserve_a=1_000_000_000_000,
        reserve_b=1_000_000_000_000,
        dex_type=DexType.PANCAKE,
        fee_rate=25,
        address="0x2::pancake::USDT_USDC",
    )


@pytest.fixture
def island_pool() -> Pool:
    """Pool in a component disconnected from every other test pool."""
    return make_pool(
        ISLAND,
        GUI,
        reserve_a=10**12,
        reserve_b=10**12,
        dex_type=DexType.CETUS,
        fee_rate=30,
        address="0x1::cetus::ISLAND_GUI",
    )


@pytest.fixture
def market_pools(
    cetus_apt_usdc: Pool,
    pancake_apt_usdc: Pool,
    liquidswap_apt_usdt: Pool,
    pancake_usdt_usdc: Pool,
    island_pool: Pool,
) -> list[Pool]:
    return [cetus_apt_usdc, pancake_apt_usdc, liquidswap_apt_usdt, pancake_usdt_usdc, island_pool]


@pytest.fixture
def snapshot(market_pools: list[Pool]) -> PoolSnapshot:
    return PoolSnapshot(market_pools, updated_at=1_700_000_000.0)


class SnapshotCache:
    """Minimal stand-in for PoolCache exposing a fixed snapshot."""

    def __init__(self, snapshot: PoolSnapshot) -> None:
        self.snapshot = snapshot


@pytest.fixture
def quoter(snapshot: PoolSnapshot) -> Quoter:
    return Quoter(SnapshotCache(snapshot), PathFinder(), RouteSelector())  # type: ignore[arg-type]
