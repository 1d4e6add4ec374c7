"""Immutable pool snapshots.

A snapshot indexes one refresh cycle's pools by address, by canonical pair
key and as a coin adjacency graph. It is fully built in the constructor and
never modified afterwards, so any number of readers can share it while the
cache builds the next one.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from decimal import Decimal
from types import MappingProxyType

import structlog

from aggregator.amm.math import Numeric, get_amount_out
from aggregator.errors import InvalidAmountError, PoolNotFoundError
from aggregator.pools.types import CoinInfo, DexType, Pool, pair_key

logger = structlog.get_logger()


def calculate_output(pool: Pool, coin_in: str, amount_in: Numeric) -> Decimal:
    """Output of swapping amount_in of coin_in through a pool.

    Raises:
        InvalidAmountError: If the pool cannot price the swap (empty reserve,
            non-positive amount) or does not hold coin_in
    """
    try:
        reserve_in, reserve_out = pool.get_reserves(coin_in)
    except ValueError as err:
        raise InvalidAmountError(str(err)) from err
    return get_amount_out(amount_in, reserve_in, reserve_out, pool.fee_rate)


class PoolSnapshot:
    """The complete, immutable set of pools valid as of one refresh cycle."""

    def __init__(self, pools: Iterable[Pool] = (), updated_at: float = 0.0) -> None:
        """Index pools.

        Args:
            pools: Pools from all providers. When two pools share an address,
                the later one wins.
            updated_at: Epoch seconds at which the pools were fetched
                (0 for a snapshot that was never refreshed)
        """
        by_address: dict[str, Pool] = {}
        for pool in pools:
            if pool.address in by_address:
                logger.warning(
                    "duplicate_pool_address",
                    pool=pool.address,
                    dex_type=pool.dex_type.value,
                    replaced_dex_type=by_address[pool.address].dex_type.value,
                )
            by_address[pool.address] = pool

        by_pair: dict[tuple[str, str], list[Pool]] = {}
        adjacency: dict[str, set[str]] = {}
        for pool in by_address.values():
            by_pair.setdefault(pool.pair_key, []).append(pool)
            adjacency.setdefault(pool.coin_a.type, set()).add(pool.coin_b.type)
            adjacency.setdefault(pool.coin_b.type, set()).add(pool.coin_a.type)

        self._pools = tuple(by_address.values())
        self._by_address = MappingProxyType(by_address)
        self._by_pair = MappingProxyType({key: tuple(group) for key, group in by_pair.items()})
        self._adjacency = MappingProxyType(
            {coin: frozenset(neighbors) for coin, neighbors in adjacency.items()}
        )
        self.updated_at = updated_at

    @classmethod
    def empty(cls) -> PoolSnapshot:
        return cls()

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    @property
    def coin_count(self) -> int:
        return len(self._adjacency)

    def get_all_pools(self) -> list[Pool]:
        """Return all pools in the snapshot."""
        return list(self._pools)

    def get_pools_for_pair(self, coin_a: str, coin_b: str) -> list[Pool]:
        """Get pools for a coin pair (order independent)."""
        return list(self._by_pair.get(pair_key(coin_a, coin_b), ()))

    def get_pool(self, address: str) -> Pool:
        """Look up a pool by address.

        Raises:
            PoolNotFoundError: If no pool has this address
        """
        try:
            return self._by_address[address]
        except KeyError:
            raise PoolNotFoundError(address) from None

    def get_pools_by_dex(self, dex_type: DexType) -> list[Pool]:
        return [pool for pool in self._pools if pool.dex_type == dex_type]

    def get_best_pool_for_pair(
        self,
        coin_in: str,
        coin_out: str,
        amount_in: Numeric,
        exclude_dexes: Collection[DexType] = (),
    ) -> Pool | None:
        """Find the pool giving the most coin_out for amount_in of coin_in.

        Pools that cannot price the swap (e.g. zero reserves) are skipped.

        Args:
            coin_in: Coin being sold
            coin_out: Coin being bought
            amount_in: Amount of coin_in
            exclude_dexes: DEX types whose pools are not considered

        Returns:
            The best pool, or None if no pool exists or none can be priced
        """
        best_pool: Pool | None = None
        best_output = Decimal(0)

        for pool in self._by_pair.get(pair_key(coin_in, coin_out), ()):
            if pool.dex_type in exclude_dexes:
                continue
            try:
                output = calculate_output(pool, coin_in, amount_in)
            except InvalidAmountError:
                continue
            if output > best_output:
                best_output = output
                best_pool = pool

        return best_pool

    def neighbors(self, coin: str) -> frozenset[str]:
        """Coins directly tradeable with the given coin."""
        return self._adjacency.get(coin, frozenset())

    def has_coin(self, coin: str) -> bool:
        return coin in self._adjacency

    def get_coins(self) -> list[CoinInfo]:
        """Distinct coins across all pools, in first-seen order."""
        coins: dict[str, CoinInfo] = {}
        for pool in self._pools:
            coins.setdefault(pool.coin_a.type, pool.coin_a)
            coins.setdefault(pool.coin_b.type, pool.coin_b)
        return list(coins.values())

    def count_by_dex(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for pool in self._pools:
            counts[pool.dex_type.value] = counts.get(pool.dex_type.value, 0) + 1
        return counts


__all__ = ["PoolSnapshot", "calculate_output"]
