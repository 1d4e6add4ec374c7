"""API endpoints for the route quoter."""

from __future__ import annotations

import asyncio
import time
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from aggregator import __version__
from aggregator.constants import DEFAULT_SLIPPAGE_TOLERANCE_BP, MAX_HOPS_LIMIT
from aggregator.models.pools import (
    CoinInfoModel,
    DexInfoModel,
    DexListResponse,
    PoolListResponse,
    PoolModel,
    PoolStatsResponse,
    RefreshResponse,
    RouterInfoResponse,
    TokenListResponse,
)
from aggregator.models.quote import QuoteRequestBody, QuoteResponse, RouteModel, format_raw_amount
from aggregator.pools.cache import PoolCache
from aggregator.pools.registry import DEX_REGISTRY
from aggregator.pools.types import DexType, Pool
from aggregator.routing.quoter import Quoter, build_quote_request

logger = structlog.get_logger()

router_routes = APIRouter(prefix="/v1/router", tags=["router"])
pool_routes = APIRouter(prefix="/v1/pools", tags=["pools"])
health_routes = APIRouter(prefix="/v1/health", tags=["health"])

STARTED_AT = time.time()


def get_pool_cache(request: Request) -> PoolCache:
    """Dependency provider for the pool cache.

    The cache is created once in the application lifespan. Override this in
    tests to inject a prepared cache:
        app.dependency_overrides[get_pool_cache] = lambda: cache
    """
    return request.app.state.pool_cache  # type: ignore[no-any-return]


def get_quoter(request: Request) -> Quoter:
    """Dependency provider for the quoter (see get_pool_cache)."""
    return request.app.state.quoter  # type: ignore[no-any-return]


# Router


@router_routes.post("/quote")
async def quote(
    body: QuoteRequestBody,
    response: Response,
    quoter: Quoter = Depends(get_quoter),
) -> QuoteResponse:
    """Quote a swap.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - Invalid coin type, identical coins, unknown DEX, zero amount: 400
        - No route between the coins: 404 with a null route
    """
    request = build_quote_request(
        coin_in=body.coin_in,
        coin_out=body.coin_out,
        amount_in=body.amount_in,
        slippage_tolerance_bp=body.slippage_tolerance_bp,
        exclude_dexes=body.exclude_dexes,
        max_hops=body.max_hops,
    )

    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, quoter.quote, request)

    if result.route is None or result.min_amount_out is None:
        response.status_code = 404
        return QuoteResponse(
            route=None,
            message=f"No liquidity available for {request.coin_in} -> {request.coin_out}",
        )

    return QuoteResponse(
        route=RouteModel.from_route(result.route),
        min_amount_out=format_raw_amount(result.min_amount_out),
        routes=[RouteModel.from_route(route) for route in result.alternatives],
    )


@router_routes.get("/info")
async def router_info(
    cache: PoolCache = Depends(get_pool_cache),
    quoter: Quoter = Depends(get_quoter),
) -> RouterInfoResponse:
    """Router capabilities and current pool statistics."""
    snapshot = cache.snapshot
    return RouterInfoResponse(
        pool_count=snapshot.pool_count,
        pools_by_dex=snapshot.count_by_dex(),
        supported_tokens_count=snapshot.coin_count,
        supported_dexes=[dex.value for dex in DexType],
        max_hops=MAX_HOPS_LIMIT,
        default_slippage_tolerance=DEFAULT_SLIPPAGE_TOLERANCE_BP,
        path_strategy=quoter.path_finder.strategy.value,
        last_update=snapshot.updated_at,
    )


@router_routes.get("/tokens")
async def list_tokens(cache: PoolCache = Depends(get_pool_cache)) -> TokenListResponse:
    coins = cache.get_supported_coins()
    return TokenListResponse(
        tokens=[CoinInfoModel.from_coin(coin) for coin in coins],
        total_count=len(coins),
    )


@router_routes.get("/dexes")
async def list_dexes(cache: PoolCache = Depends(get_pool_cache)) -> DexListResponse:
    """Supported DEXes with their pool counts and default fee rates."""
    counts = cache.snapshot.count_by_dex()
    enabled = {provider.dex_type for provider in cache.providers}
    return DexListResponse(
        dexes=[
            DexInfoModel(
                name=spec.dex_type.value,
                display_name=spec.display_name,
                pool_count=counts.get(spec.dex_type.value, 0),
                enabled=spec.dex_type in enabled,
                fee_rate=spec.default_fee_rate,
            )
            for spec in DEX_REGISTRY.values()
        ]
    )


# Pools


def _sum_amounts(values: list[str | None]) -> str:
    total = Decimal(0)
    for value in values:
        if value is None:
            continue
        try:
            total += Decimal(value)
        except InvalidOperation:
            logger.warning("unparseable_pool_metric", value=value)
    return str(total)


@pool_routes.get("")
async def list_pools(
    dex_type: str | None = Query(default=None),
    coin_a: str | None = Query(default=None),
    coin_b: str | None = Query(default=None),
    cache: PoolCache = Depends(get_pool_cache),
) -> PoolListResponse:
    """List pools, optionally filtered by DEX and/or coin pair."""
    snapshot = cache.snapshot

    pools: list[Pool]
    if coin_a and coin_b:
        pools = snapshot.get_pools_for_pair(coin_a, coin_b)
    else:
        pools = snapshot.get_all_pools()

    if dex_type:
        try:
            dex = DexType.parse(dex_type)
        except ValueError as err:
            raise HTTPException(status_code=400, detail=str(err)) from err
        pools = [pool for pool in pools if pool.dex_type == dex]

    return PoolListResponse(
        pools=[PoolModel.from_pool(pool) for pool in pools],
        total_count=len(pools),
        last_update=snapshot.updated_at,
    )


@pool_routes.get("/stats")
async def pool_stats(cache: PoolCache = Depends(get_pool_cache)) -> PoolStatsResponse:
    snapshot = cache.snapshot
    pools = snapshot.get_all_pools()
    return PoolStatsResponse(
        total_pools=len(pools),
        pools_by_dex=snapshot.count_by_dex(),
        total_tvl=_sum_amounts([pool.tvl for pool in pools]),
        total_volume_24h=_sum_amounts([pool.volume_24h for pool in pools]),
        last_update=snapshot.updated_at,
    )


@pool_routes.post("/refresh")
async def refresh_pools(cache: PoolCache = Depends(get_pool_cache)) -> RefreshResponse:
    """Refresh all providers now. Waits for any refresh already in flight."""
    report = await cache.refresh_all()
    return RefreshResponse(
        message="Pools refreshed successfully",
        duration_ms=round(report.duration_ms, 2),
        pool_count=report.pool_count,
        succeeded=list(report.succeeded),
        failed=list(report.failed),
        timestamp=report.updated_at,
    )


@pool_routes.get("/{address:path}")
async def get_pool(address: str, cache: PoolCache = Depends(get_pool_cache)) -> PoolModel:
    """Pool details. Unknown addresses answer 404."""
    return PoolModel.from_pool(cache.get_pool(address))


# Health


@health_routes.get("")
async def health(
    response: Response,
    cache: PoolCache = Depends(get_pool_cache),
) -> dict[str, object]:
    """Overall health: 200 while pool data is fresh, 503 once stale."""
    pool_health = cache.get_health_status()
    if not pool_health.is_healthy:
        response.status_code = 503
    return {
        "status": "healthy" if pool_health.is_healthy else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime": time.time() - STARTED_AT,
        "version": __version__,
        "services": {
            "pool_cache": {
                "status": pool_health.status,
                "pool_count": pool_health.pool_count,
                "last_update": pool_health.last_update,
                "time_since_update": pool_health.time_since_update,
                "refreshing": cache.is_refreshing,
            },
            "router": {"status": "healthy"},
        },
    }


@health_routes.get("/ready")
async def ready(
    response: Response,
    cache: PoolCache = Depends(get_pool_cache),
) -> dict[str, object]:
    """Readiness: pools loaded and younger than five minutes."""
    pool_health = cache.get_health_status()
    if cache.is_ready():
        return {
            "status": "ready",
            "pool_count": pool_health.pool_count,
            "last_update": pool_health.last_update,
        }

    response.status_code = 503
    return {
        "status": "not_ready",
        "reason": "No pools loaded" if pool_health.pool_count == 0 else "Pool data is stale",
        "pool_count": pool_health.pool_count,
        "time_since_update": pool_health.time_since_update,
    }


@health_routes.get("/live")
async def live() -> dict[str, object]:
    return {
        "status": "alive",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime": time.time() - STARTED_AT,
    }
