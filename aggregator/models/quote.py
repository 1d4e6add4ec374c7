"""Pydantic models for the quote endpoint."""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal

from pydantic import BaseModel, Field

from aggregator.constants import DEFAULT_MAX_HOPS, DEFAULT_SLIPPAGE_TOLERANCE_BP, MAX_HOPS_LIMIT
from aggregator.models.types import CoinIdentifier, RawAmount
from aggregator.routing.types import Route, RouteStep


def format_raw_amount(amount: Decimal) -> str:
    """Render an amount as whole raw units, rounding down."""
    return str(amount.quantize(Decimal(1), rounding=ROUND_DOWN))


class QuoteRequestBody(BaseModel):
    """Body of POST /v1/router/quote."""

    coin_in: CoinIdentifier = Field(description="Coin type being sold")
    coin_out: CoinIdentifier = Field(description="Coin type being bought")
    amount_in: RawAmount
    slippage_tolerance_bp: int = Field(
        default=DEFAULT_SLIPPAGE_TOLERANCE_BP,
        ge=1,
        le=10_000,
        alias="slippage_tolerance",
        description="Slippage tolerance in basis points (50 = 0.5%)",
    )
    exclude_dexes: list[str] = Field(default_factory=list)
    max_hops: int = Field(default=DEFAULT_MAX_HOPS, ge=1, le=MAX_HOPS_LIMIT)

    model_config = {"populate_by_name": True}


class RouteStepModel(BaseModel):
    """One swap of a quoted route."""

    dex_type: str
    coin_in: str
    coin_out: str
    pool_address: str
    amount_in: str
    amount_out: str
    fee_rate: int
    price_impact: int

    @classmethod
    def from_step(cls, step: RouteStep) -> RouteStepModel:
        return cls(
            dex_type=step.dex_type.value,
            coin_in=step.coin_in,
            coin_out=step.coin_out,
            pool_address=step.pool_address,
            amount_in=format_raw_amount(step.amount_in),
            amount_out=format_raw_amount(step.amount_out),
            fee_rate=step.fee_rate,
            price_impact=step.price_impact,
        )


class RouteModel(BaseModel):
    """A quoted route with its aggregate amounts."""

    steps: list[RouteStepModel]
    amount_in: str
    amount_out: str
    price_impact: int = Field(description="Sum of step price impacts, basis points")
    fee: str
    estimated_gas: int

    @classmethod
    def from_route(cls, route: Route) -> RouteModel:
        return cls(
            steps=[RouteStepModel.from_step(step) for step in route.steps],
            amount_in=format_raw_amount(route.amount_in),
            amount_out=format_raw_amount(route.amount_out),
            price_impact=route.price_impact,
            fee=format_raw_amount(route.fee),
            estimated_gas=route.estimated_gas,
        )


class QuoteResponse(BaseModel):
    """Best route, its slippage floor and ranked alternatives.

    `route` is null when no pool combination connects the two coins.
    """

    route: RouteModel | None
    min_amount_out: str | None = None
    routes: list[RouteModel] = Field(default_factory=list)
    message: str | None = None
