"""Pool management package.

Provides the pool types, immutable snapshots, providers and the PoolCache
that publishes snapshots. Provider construction from configuration lives in
aggregator.pools.registry.
"""

from .cache import HealthStatus, PoolCache, RefreshReport
from .providers import FullnodePoolProvider, PoolProvider, StaticPoolProvider
from .scheduler import RefreshScheduler
from .snapshot import PoolSnapshot
from .types import CoinInfo, DexType, Pool, pair_key

__all__ = [
    "PoolCache",
    "PoolSnapshot",
    "HealthStatus",
    "RefreshReport",
    "RefreshScheduler",
    "PoolProvider",
    "StaticPoolProvider",
    "FullnodePoolProvider",
    "CoinInfo",
    "DexType",
    "Pool",
    "pair_key",
]
