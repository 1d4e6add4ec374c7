"""Configuration for the route quoter."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from aggregator.constants import (
    DEFAULT_MAX_ALTERNATIVES,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_STALE_AFTER,
    NETWORK_NODE_URLS,
)
from aggregator.pools.types import DexType
from aggregator.routing.types import PathStrategy

ENV_PREFIX = "AGGREGATOR_"

POOL_SOURCES = {"static", "fullnode"}


@dataclass(frozen=True)
class AggregatorConfig:
    """Centralized configuration for pool caching and quoting.

    Attributes:
        network: Aptos network name, selects the default fullnode URL
        node_url: Fullnode REST root; overrides the network default
        pool_source: "static" serves seed pools, "fullnode" reads chain state
        seed_file: JSON file of pools for the static source (default: built-in seed)
        dex_accounts: Pool resource account per DEX for the fullnode source
        enabled_dexes: DEXes whose providers are built
        refresh_interval: Seconds between scheduled refreshes
        stale_after: Seconds after which the snapshot is reported stale
        provider_timeout: Seconds allowed for one provider fetch
        path_strategy: Multi-hop pool selection strategy
        max_candidates: Cap on candidate routes per quote (exhaustive strategy)
        max_alternatives: Alternatives returned next to the best route
        tie_epsilon: Output difference (raw units) under which routes tie
    """

    network: str = "testnet"
    node_url: str | None = None
    pool_source: str = "static"
    seed_file: Path | None = None
    dex_accounts: Mapping[DexType, str] = field(default_factory=dict)
    enabled_dexes: frozenset[DexType] = frozenset(DexType)
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    stale_after: float = DEFAULT_STALE_AFTER
    provider_timeout: float = 10.0
    path_strategy: PathStrategy = PathStrategy.GREEDY
    max_candidates: int = 50
    max_alternatives: int = DEFAULT_MAX_ALTERNATIVES
    tie_epsilon: Decimal = Decimal("0.001")

    def __post_init__(self) -> None:
        if self.pool_source not in POOL_SOURCES:
            raise ValueError(
                f"Unknown pool source '{self.pool_source}' (expected one of {sorted(POOL_SOURCES)})"
            )
        if self.node_url is None and self.network not in NETWORK_NODE_URLS:
            raise ValueError(f"Unknown network '{self.network}' and no node URL configured")
        if self.refresh_interval <= 0 or self.stale_after <= 0 or self.provider_timeout <= 0:
            raise ValueError("Intervals and timeouts must be positive")
        if self.max_candidates < 1 or self.max_alternatives < 0:
            raise ValueError("max_candidates must be >= 1 and max_alternatives >= 0")

    @property
    def resolved_node_url(self) -> str:
        return self.node_url or NETWORK_NODE_URLS[self.network]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AggregatorConfig:
        """Build configuration from AGGREGATOR_* environment variables.

        Unset variables keep their defaults. DEX accounts are read from
        AGGREGATOR_<DEX>_ACCOUNT (e.g. AGGREGATOR_LIQUIDSWAP_ACCOUNT).

        Raises:
            ValueError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value is not None and value.strip() else None

        kwargs: dict[str, object] = {}
        env_fields = {
            "NETWORK": ("network", str.lower),
            "NODE_URL": ("node_url", str),
            "POOL_SOURCE": ("pool_source", str.lower),
            "SEED_FILE": ("seed_file", Path),
            "REFRESH_INTERVAL": ("refresh_interval", float),
            "STALE_AFTER": ("stale_after", float),
            "PROVIDER_TIMEOUT": ("provider_timeout", float),
            "MAX_CANDIDATES": ("max_candidates", int),
            "MAX_ALTERNATIVES": ("max_alternatives", int),
            "PATH_STRATEGY": ("path_strategy", lambda raw: PathStrategy(raw.lower())),
            "TIE_EPSILON": ("tie_epsilon", Decimal),
        }
        for env_name, (field_name, cast) in env_fields.items():
            raw = get(env_name)
            if raw is None:
                continue
            try:
                kwargs[field_name] = cast(raw)
            except (ValueError, InvalidOperation) as err:
                raise ValueError(f"Invalid {ENV_PREFIX}{env_name}: {raw!r}") from err

        enabled = get("ENABLED_DEXES")
        if enabled is not None:
            kwargs["enabled_dexes"] = frozenset(
                DexType.parse(tag.strip()) for tag in enabled.split(",") if tag.strip()
            )

        dex_accounts = {}
        for dex in DexType:
            account = get(f"{dex.value}_ACCOUNT")
            if account is not None:
                dex_accounts[dex] = account
        if dex_accounts:
            kwargs["dex_accounts"] = dex_accounts

        return cls(**kwargs)  # type: ignore[arg-type]


# Default configuration instance
DEFAULT_CONFIG = AggregatorConfig()
