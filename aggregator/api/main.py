"""FastAPI application for the route quoter.

The pool cache, quoter and refresh scheduler are built once in the
application lifespan from AggregatorConfig.from_env() and handed to the
endpoints through FastAPI dependencies.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from aggregator import __version__
from aggregator.api.endpoints import health_routes, pool_routes, router_routes
from aggregator.config import AggregatorConfig
from aggregator.errors import PoolNotFoundError, QuoteValidationError
from aggregator.pools.cache import PoolCache
from aggregator.pools.registry import build_providers
from aggregator.pools.scheduler import RefreshScheduler
from aggregator.routing.pathfinding import PathFinder
from aggregator.routing.quoter import Quoter
from aggregator.routing.selector import RouteSelector

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AGGREGATOR_HOST", "0.0.0.0")
PORT = int(os.environ.get("AGGREGATOR_PORT", "3001"))
DEBUG = os.environ.get("AGGREGATOR_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024


def build_quoter(config: AggregatorConfig, cache: PoolCache) -> Quoter:
    """Wire the quote pipeline from configuration."""
    return Quoter(
        cache,
        PathFinder(config.path_strategy, config.max_candidates),
        RouteSelector(config.tie_epsilon, config.max_alternatives),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    config = AggregatorConfig.from_env()
    async with httpx.AsyncClient(
        base_url=config.resolved_node_url, timeout=config.provider_timeout
    ) as client:
        cache = PoolCache(
            build_providers(config, client),
            stale_after=config.stale_after,
            provider_timeout=config.provider_timeout,
        )
        app.state.config = config
        app.state.pool_cache = cache
        app.state.quoter = build_quoter(config, cache)

        logger.info(
            "aggregator_starting",
            network=config.network,
            pool_source=config.pool_source,
            providers=[provider.name for provider in cache.providers],
            path_strategy=config.path_strategy.value,
        )
        await cache.refresh_all()

        scheduler = RefreshScheduler(cache, config.refresh_interval)
        scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            logger.info("aggregator_stopped")


app = FastAPI(
    title="Aptos Route Quoter",
    description="Best-route quotes across Aptos constant-product DEX pools",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(QuoteValidationError)
async def handle_validation_error(request: Request, exc: QuoteValidationError) -> JSONResponse:
    logger.info("quote_rejected", path=request.url.path, reason=str(exc))
    return JSONResponse(
        status_code=400,
        content={"error": "Validation error", "message": str(exc)},
    )


@app.exception_handler(PoolNotFoundError)
async def handle_pool_not_found(request: Request, exc: PoolNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": "Pool not found", "pool_address": exc.address},
    )


app.include_router(router_routes)
app.include_router(pool_routes)
app.include_router(health_routes)


def run() -> None:
    """Run the quoter API server.

    Configuration via environment variables:
    - AGGREGATOR_HOST: Host to bind to (default: 0.0.0.0)
    - AGGREGATOR_PORT: Port to bind to (default: 3001)
    - AGGREGATOR_DEBUG: Enable debug/reload mode (default: false)

    Pool sources, DEX accounts and routing options are read by
    AggregatorConfig.from_env() at startup.
    """
    uvicorn.run(
        "aggregator.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
