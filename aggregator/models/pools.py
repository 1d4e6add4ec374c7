"""Pydantic models for pool, token and DEX listings."""

from __future__ import annotations

from pydantic import BaseModel, Field

from aggregator.pools.types import CoinInfo, Pool


class CoinInfoModel(BaseModel):
    type: str
    name: str
    symbol: str
    decimals: int
    logo_url: str | None = None

    @classmethod
    def from_coin(cls, coin: CoinInfo) -> CoinInfoModel:
        return cls(
            type=coin.type,
            name=coin.name,
            symbol=coin.symbol,
            decimals=coin.decimals,
            logo_url=coin.logo_url,
        )


class PoolModel(BaseModel):
    """A pool as served by the pools endpoints and read from seed files."""

    pool_address: str
    coin_a: CoinInfoModel
    coin_b: CoinInfoModel
    dex_type: str
    reserve_a: str
    reserve_b: str
    fee_rate: int = Field(description="Fee in basis points")
    tvl: str | None = None
    volume_24h: str | None = None
    last_updated: float

    @classmethod
    def from_pool(cls, pool: Pool) -> PoolModel:
        return cls(
            pool_address=pool.address,
            coin_a=CoinInfoModel.from_coin(pool.coin_a),
            coin_b=CoinInfoModel.from_coin(pool.coin_b),
            dex_type=pool.dex_type.value,
            reserve_a=str(pool.reserve_a),
            reserve_b=str(pool.reserve_b),
            fee_rate=pool.fee_rate,
            tvl=pool.tvl,
            volume_24h=pool.volume_24h,
            last_updated=pool.last_updated,
        )


class PoolListResponse(BaseModel):
    pools: list[PoolModel]
    total_count: int
    last_update: float


class PoolStatsResponse(BaseModel):
    total_pools: int
    pools_by_dex: dict[str, int]
    total_tvl: str
    total_volume_24h: str
    last_update: float


class RefreshResponse(BaseModel):
    message: str
    duration_ms: float
    pool_count: int
    succeeded: list[str]
    failed: list[str]
    timestamp: float


class TokenListResponse(BaseModel):
    tokens: list[CoinInfoModel]
    total_count: int


class DexInfoModel(BaseModel):
    name: str
    display_name: str
    pool_count: int
    enabled: bool
    fee_rate: int


class DexListResponse(BaseModel):
    dexes: list[DexInfoModel]


class RouterInfoResponse(BaseModel):
    pool_count: int
    pools_by_dex: dict[str, int]
    supported_tokens_count: int
    supported_dexes: list[str]
    max_hops: int
    default_slippage_tolerance: int
    path_strategy: str
    last_update: float
