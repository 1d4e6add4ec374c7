"""Pool cache: the live liquidity snapshot.

The cache owns the only mutable shared state of the quoter: a reference to
the current PoolSnapshot. Refreshes fetch every provider concurrently, build
a complete new snapshot from the providers that succeeded and publish it by
swapping the reference. Readers always see either the old or the new
snapshot, never a partial one, and never wait on a refresh.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass

import structlog

from aggregator.amm.math import Numeric
from aggregator.constants import DEFAULT_STALE_AFTER, READINESS_MAX_AGE
from aggregator.pools.providers import PoolProvider
from aggregator.pools.snapshot import PoolSnapshot
from aggregator.pools.types import CoinInfo, DexType, Pool

logger = structlog.get_logger()


@dataclass(frozen=True)
class RefreshReport:
    """Outcome of one refresh cycle."""

    pool_count: int
    succeeded: tuple[str, ...]
    failed: tuple[str, ...]
    duration_ms: float
    updated_at: float


@dataclass(frozen=True)
class HealthStatus:
    """Freshness of the cached snapshot."""

    status: str  # "healthy" or "stale"
    pool_count: int
    last_update: float
    time_since_update: float

    @property
    def is_healthy(self) -> bool:
        return self.status == "healthy"


class PoolCache:
    """Holds the current pool snapshot and refreshes it from providers."""

    def __init__(
        self,
        providers: Sequence[PoolProvider],
        stale_after: float = DEFAULT_STALE_AFTER,
        provider_timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize an empty cache.

        Args:
            providers: One provider per integrated exchange
            stale_after: Seconds after which health reports "stale"
            provider_timeout: Seconds allowed for each provider fetch
            clock: Time source (epoch seconds)
        """
        self._providers = tuple(providers)
        self._stale_after = stale_after
        self._provider_timeout = provider_timeout
        self._clock = clock
        self._snapshot = PoolSnapshot.empty()
        self._refresh_lock = asyncio.Lock()

    @property
    def snapshot(self) -> PoolSnapshot:
        """The current snapshot. Capture once per request for consistent reads."""
        return self._snapshot

    @property
    def providers(self) -> tuple[PoolProvider, ...]:
        return self._providers

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_lock.locked()

    async def _fetch(self, provider: PoolProvider) -> list[Pool]:
        return await asyncio.wait_for(provider.fetch_pools(), timeout=self._provider_timeout)

    async def refresh_all(self) -> RefreshReport:
        """Fetch all providers and publish a new snapshot.

        A provider that raises or times out is logged and left out of this
        cycle; the others still publish. Concurrent calls are serialized so
        at most one refresh is in flight.

        Returns:
            RefreshReport describing the published snapshot
        """
        async with self._refresh_lock:
            started = time.perf_counter()
            logger.info("pool_refresh_started", provider_count=len(self._providers))

            results = await asyncio.gather(
                *(self._fetch(provider) for provider in self._providers),
                return_exceptions=True,
            )

            pools: list[Pool] = []
            succeeded: list[str] = []
            failed: list[str] = []
            for provider, result in zip(self._providers, results, strict=True):
                if isinstance(result, BaseException):
                    if not isinstance(result, Exception):
                        raise result
                    failed.append(provider.name)
                    logger.error(
                        "provider_fetch_failed",
                        provider=provider.name,
                        dex_type=provider.dex_type.value,
                        error=str(result) or type(result).__name__,
                    )
                    continue
                succeeded.append(provider.name)
                pools.extend(result)

            updated_at = self._clock()
            snapshot = PoolSnapshot(pools, updated_at=updated_at)
            self._snapshot = snapshot

            duration_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "pool_refresh_completed",
                pool_count=snapshot.pool_count,
                succeeded=succeeded,
                failed=failed,
                duration_ms=round(duration_ms, 2),
            )
            return RefreshReport(
                pool_count=snapshot.pool_count,
                succeeded=tuple(succeeded),
                failed=tuple(failed),
                duration_ms=duration_ms,
                updated_at=updated_at,
            )

    def get_all_pools(self) -> list[Pool]:
        return self._snapshot.get_all_pools()

    def get_pools_for_pair(self, coin_a: str, coin_b: str) -> list[Pool]:
        return self._snapshot.get_pools_for_pair(coin_a, coin_b)

    def get_pool(self, address: str) -> Pool:
        """Look up a pool by address.

        Raises:
            PoolNotFoundError: If the current snapshot has no such pool
        """
        return self._snapshot.get_pool(address)

    def get_pools_by_dex(self, dex_type: DexType) -> list[Pool]:
        return self._snapshot.get_pools_by_dex(dex_type)

    def get_best_pool_for_pair(
        self,
        coin_in: str,
        coin_out: str,
        amount_in: Numeric,
        exclude_dexes: Collection[DexType] = (),
    ) -> Pool | None:
        return self._snapshot.get_best_pool_for_pair(coin_in, coin_out, amount_in, exclude_dexes)

    def get_supported_coins(self) -> list[CoinInfo]:
        return self._snapshot.get_coins()

    @property
    def pool_count(self) -> int:
        return self._snapshot.pool_count

    @property
    def last_update_time(self) -> float:
        """Epoch seconds of the last published refresh (0 if none)."""
        return self._snapshot.updated_at

    def get_health_status(self) -> HealthStatus:
        """Report pool count and data age.

        Staleness never blocks reads; it is only reported here.
        """
        snapshot = self._snapshot
        time_since_update = self._clock() - snapshot.updated_at
        healthy = snapshot.updated_at > 0 and time_since_update < self._stale_after
        return HealthStatus(
            status="healthy" if healthy else "stale",
            pool_count=snapshot.pool_count,
            last_update=snapshot.updated_at,
            time_since_update=time_since_update,
        )

    def is_ready(self, max_age: float = READINESS_MAX_AGE) -> bool:
        """Ready to serve quotes: pools loaded and not older than max_age."""
        health = self.get_health_status()
        return health.pool_count > 0 and health.time_since_update < max_age


__all__ = ["HealthStatus", "PoolCache", "RefreshReport"]
