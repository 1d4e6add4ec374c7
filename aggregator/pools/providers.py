"""Pool-data providers.

A provider supplies the current pools of one exchange as uniform Pool
records, or fails. The cache knows nothing about how a provider fetches.
"""

from __future__ import annotations

import dataclasses
import time
from collections.abc import Callable, Sequence
from typing import Any, Protocol, runtime_checkable

import httpx
import structlog

from aggregator.errors import ProviderError
from aggregator.pools.parsing import ResourceParser
from aggregator.pools.types import DexType, Pool

logger = structlog.get_logger()

# Fullnode page size for account resources
RESOURCES_PAGE_LIMIT = 9999
APTOS_CURSOR_HEADER = "x-aptos-cursor"


@runtime_checkable
class PoolProvider(Protocol):
    """Protocol for per-exchange pool sources."""

    name: str
    dex_type: DexType

    async def fetch_pools(self) -> list[Pool]:
        """Fetch the exchange's current pools.

        Raises:
            Exception: Any failure; the caller drops this provider's
                contribution for the cycle.
        """
        ...


class StaticPoolProvider:
    """Serves a fixed list of pools, stamped with the fetch time.

    Used for seed data in development and for tests.
    """

    def __init__(
        self,
        dex_type: DexType,
        pools: Sequence[Pool] = (),
        name: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.dex_type = dex_type
        self.name = name or f"static:{dex_type.value}"
        self._pools = tuple(pools)
        self._clock = clock

    async def fetch_pools(self) -> list[Pool]:
        now = self._clock()
        return [dataclasses.replace(pool, last_updated=now) for pool in self._pools]


class FullnodePoolProvider:
    """Reads an exchange's pool resources from an Aptos fullnode.

    Lists every resource under the exchange's pool account (following the
    fullnode's pagination cursor) and keeps those the DEX parser recognises.
    """

    def __init__(
        self,
        dex_type: DexType,
        client: httpx.AsyncClient,
        account: str,
        parser: ResourceParser,
        default_fee_rate: int,
        name: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the provider.

        Args:
            dex_type: Exchange this provider serves
            client: HTTP client whose base_url is the fullnode REST root
                (e.g. https://fullnode.mainnet.aptoslabs.com/v1)
            account: Account holding the exchange's pool resources
            parser: Converts one resource into a Pool (or None to skip it)
            default_fee_rate: Fee in bp for pools whose resource carries none
            name: Provider name for logs (default "fullnode:<DEX>")
            clock: Time source for last_updated stamps
        """
        self.dex_type = dex_type
        self.name = name or f"fullnode:{dex_type.value}"
        self._client = client
        self._account = account
        self._parser = parser
        self._default_fee_rate = default_fee_rate
        self._clock = clock

    async def _fetch_resources(self) -> list[dict[str, Any]]:
        resources: list[dict[str, Any]] = []
        params: dict[str, str | int] = {"limit": RESOURCES_PAGE_LIMIT}
        while True:
            try:
                response = await self._client.get(
                    f"/accounts/{self._account}/resources", params=params
                )
                response.raise_for_status()
            except httpx.HTTPError as err:
                raise ProviderError(f"{self.name}: resource fetch failed: {err}") from err

            page = response.json()
            if not isinstance(page, list):
                raise ProviderError(f"{self.name}: unexpected resources payload")
            resources.extend(page)

            cursor = response.headers.get(APTOS_CURSOR_HEADER)
            if not cursor:
                return resources
            params = {"limit": RESOURCES_PAGE_LIMIT, "start": cursor}

    async def fetch_pools(self) -> list[Pool]:
        resources = await self._fetch_resources()
        fetched_at = self._clock()

        pools: list[Pool] = []
        for resource in resources:
            try:
                pool = self._parser(resource, fetched_at, self._default_fee_rate)
            except ValueError as err:
                logger.warning(
                    "pool_resource_parse_failed",
                    provider=self.name,
                    resource_type=resource.get("type"),
                    error=str(err),
                )
                continue
            if pool is not None:
                pools.append(pool)

        logger.debug(
            "fullnode_pools_fetched",
            provider=self.name,
            resource_count=len(resources),
            pool_count=len(pools),
        )
        return pools


__all__ = ["FullnodePoolProvider", "PoolProvider", "StaticPoolProvider"]
