"""Static registration table of supported exchanges.

Every DexType has exactly one entry, built once at import time. Adding an
exchange means adding a DexType member, its resource parser and an entry
here; nothing registers providers at runtime.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

import httpx
import structlog

from aggregator.config import AggregatorConfig
from aggregator.constants import APT, USDC
from aggregator.pools.parsing import (
    ResourceParser,
    parse_cetus_resource,
    parse_liquidswap_resource,
    parse_pancake_resource,
    pool_from_dict,
)
from aggregator.pools.providers import FullnodePoolProvider, PoolProvider, StaticPoolProvider
from aggregator.pools.types import CoinInfo, DexType, Pool

logger = structlog.get_logger()


@dataclass(frozen=True)
class DexSpec:
    """How to read one exchange's pools."""

    dex_type: DexType
    display_name: str
    # Fee in bp applied when a pool resource carries none
    default_fee_rate: int
    parser: ResourceParser


DEX_REGISTRY: MappingProxyType[DexType, DexSpec] = MappingProxyType(
    {
        DexType.CETUS: DexSpec(DexType.CETUS, "Cetus", 30, parse_cetus_resource),
        DexType.PANCAKE: DexSpec(DexType.PANCAKE, "PancakeSwap", 25, parse_pancake_resource),
        DexType.LIQUIDSWAP: DexSpec(
            DexType.LIQUIDSWAP, "LiquidSwap", 30, parse_liquidswap_resource
        ),
    }
)


def get_dex_fee_rate(dex_type: DexType) -> int:
    """Default fee rate of an exchange in basis points."""
    return DEX_REGISTRY[dex_type].default_fee_rate


def default_seed_pools() -> list[Pool]:
    """Built-in development liquidity: one APT/USDC pool on Cetus."""
    return [
        Pool(
            address="0x1::mock::pool_apt_usdc",
            coin_a=CoinInfo.from_type(APT),
            coin_b=CoinInfo.from_type(USDC),
            dex_type=DexType.CETUS,
            reserve_a=1_000_000_000_000,  # 10,000 APT
            reserve_b=100_000_000_000,  # 100,000 USDC
            fee_rate=30,
            last_updated=0.0,
            tvl="200000000000",
            volume_24h="50000000000",
        )
    ]


def load_seed_pools(path: Path) -> list[Pool]:
    """Load seed pools from a JSON file.

    The file holds either a list of pool objects or {"pools": [...]}, in the
    same shape GET /v1/pools returns.

    Raises:
        ValueError: If the file is not valid JSON or an entry is malformed
    """
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as err:
            raise ValueError(f"Seed file {path} is not valid JSON: {err}") from err
    entries = data["pools"] if isinstance(data, dict) else data
    return [pool_from_dict(entry, fetched_at=0.0) for entry in entries]


def build_providers(
    config: AggregatorConfig,
    client: httpx.AsyncClient | None = None,
    clock: Callable[[], float] = time.time,
) -> list[PoolProvider]:
    """Build one provider per enabled exchange.

    Args:
        config: Quoter configuration
        client: HTTP client for the fullnode source. Required when
            config.pool_source is "fullnode".
        clock: Time source for pool timestamps

    Returns:
        Providers in DexType declaration order

    Raises:
        ValueError: If the fullnode source is configured without a client
    """
    enabled = [dex for dex in DexType if dex in config.enabled_dexes]

    if config.pool_source == "static":
        seed = load_seed_pools(config.seed_file) if config.seed_file else default_seed_pools()
        return [
            StaticPoolProvider(
                dex, [pool for pool in seed if pool.dex_type == dex], clock=clock
            )
            for dex in enabled
        ]

    if client is None:
        raise ValueError("The fullnode pool source needs an HTTP client")

    providers: list[PoolProvider] = []
    for dex in enabled:
        account = config.dex_accounts.get(dex)
        if account is None:
            logger.warning("dex_account_not_configured", dex_type=dex.value)
            continue
        spec = DEX_REGISTRY[dex]
        providers.append(
            FullnodePoolProvider(
                dex,
                client,
                account,
                spec.parser,
                spec.default_fee_rate,
                clock=clock,
            )
        )
    return providers


__all__ = [
    "DEX_REGISTRY",
    "DexSpec",
    "build_providers",
    "default_seed_pools",
    "get_dex_fee_rate",
    "load_seed_pools",
]
