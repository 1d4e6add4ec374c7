"""Pool type definitions.

Provides the Pool record every provider produces and the DexType tag set.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from aggregator.constants import BASIS_POINTS, KNOWN_COINS


class DexType(str, Enum):
    """Exchanges whose pools the quoter can route through."""

    CETUS = "CETUS"
    PANCAKE = "PANCAKE"
    LIQUIDSWAP = "LIQUIDSWAP"

    @classmethod
    def parse(cls, tag: str) -> DexType:
        """Parse a DEX tag case-insensitively.

        Raises:
            ValueError: If the tag names no supported DEX
        """
        try:
            return cls(tag.upper())
        except ValueError as err:
            supported = ", ".join(d.value for d in cls)
            raise ValueError(f"Unknown DEX type '{tag}' (supported: {supported})") from err


@dataclass(frozen=True)
class CoinInfo:
    """Metadata for one side of a pool."""

    type: str
    name: str
    symbol: str
    decimals: int
    logo_url: str | None = None

    @classmethod
    def from_type(cls, coin_type: str) -> CoinInfo:
        """Build coin info from a coin type, using known metadata when available.

        Unknown coins take their struct name as symbol and Aptos' default of
        8 decimals.
        """
        known = KNOWN_COINS.get(coin_type)
        if known is not None:
            name, symbol, decimals = known
            return cls(type=coin_type, name=name, symbol=symbol, decimals=decimals)
        symbol = coin_type.rsplit("::", 1)[-1]
        return cls(type=coin_type, name=symbol, symbol=symbol, decimals=8)


def pair_key(coin_a: str, coin_b: str) -> tuple[str, str]:
    """Canonical, order-independent key for a coin pair (smaller first)."""
    return (coin_a, coin_b) if coin_a <= coin_b else (coin_b, coin_a)


@dataclass(frozen=True)
class Pool:
    """One on-chain constant-product liquidity pair.

    Pools are owned by the pool cache and replaced wholesale on every
    refresh; readers never mutate them.
    """

    address: str
    coin_a: CoinInfo
    coin_b: CoinInfo
    dex_type: DexType
    reserve_a: int
    reserve_b: int
    # Fee in basis points (30 = 0.3%)
    fee_rate: int
    last_updated: float
    tvl: str | None = None
    volume_24h: str | None = None

    def __post_init__(self) -> None:
        if self.reserve_a < 0 or self.reserve_b < 0:
            raise ValueError(
                f"Pool {self.address} has negative reserves "
                f"({self.reserve_a}, {self.reserve_b})"
            )
        if not 0 <= self.fee_rate < BASIS_POINTS:
            raise ValueError(f"Pool {self.address} fee rate out of range: {self.fee_rate}")
        if self.coin_a.type == self.coin_b.type:
            raise ValueError(f"Pool {self.address} pairs {self.coin_a.type} with itself")

    @property
    def pair_key(self) -> tuple[str, str]:
        return pair_key(self.coin_a.type, self.coin_b.type)

    def has_coin(self, coin: str) -> bool:
        return coin == self.coin_a.type or coin == self.coin_b.type

    def get_reserves(self, coin_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if coin_in == self.coin_a.type:
            return self.reserve_a, self.reserve_b
        if coin_in == self.coin_b.type:
            return self.reserve_b, self.reserve_a
        raise ValueError(f"Coin {coin_in} not in pool {self.address}")

    def get_coin_out(self, coin_in: str) -> str:
        """Get the output coin for a given input coin."""
        if coin_in == self.coin_a.type:
            return self.coin_b.type
        if coin_in == self.coin_b.type:
            return self.coin_a.type
        raise ValueError(f"Coin {coin_in} not in pool {self.address}")


__all__ = ["CoinInfo", "DexType", "Pool", "pair_key"]
