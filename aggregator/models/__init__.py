"""Pydantic models for the HTTP API."""

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
from aggregator.models.quote import QuoteRequestBody, QuoteResponse, RouteModel, RouteStepModel
from aggregator.models.types import CoinIdentifier, RawAmount

__all__ = [
    # Types
    "CoinIdentifier",
    "RawAmount",
    # Quote models
    "QuoteRequestBody",
    "QuoteResponse",
    "RouteModel",
    "RouteStepModel",
    # Pool models
    "CoinInfoModel",
    "PoolModel",
    "PoolListResponse",
    "PoolStatsResponse",
    "RefreshResponse",
    "TokenListResponse",
    "DexInfoModel",
    "DexListResponse",
    "RouterInfoResponse",
]
