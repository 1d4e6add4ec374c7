"""Type definitions for routing module."""

from __future__ import annotations

import decimal
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from aggregator.amm.math import DECIMAL_HIGH_PREC_CONTEXT, calculate_fee
from aggregator.constants import (
    DEFAULT_MAX_HOPS,
    DEFAULT_SLIPPAGE_TOLERANCE_BP,
    EXTRA_HOP_GAS,
    SINGLE_HOP_GAS,
)
from aggregator.pools.types import DexType


class PathStrategy(str, Enum):
    """How multi-hop legs choose their pools."""

    # Best pool per leg for the amount arriving at that leg
    GREEDY = "greedy"
    # Every eligible pool on every leg, bounded by a candidate cap
    EXHAUSTIVE = "exhaustive"


@dataclass(frozen=True)
class RouteStep:
    """One leg of a route: a swap through a single pool."""

    dex_type: DexType
    coin_in: str
    coin_out: str
    pool_address: str
    amount_in: Decimal
    amount_out: Decimal
    fee_rate: int
    # Basis points
    price_impact: int


def estimate_gas(hop_count: int) -> int:
    """Gas estimate for a route with the given number of hops."""
    return SINGLE_HOP_GAS + EXTRA_HOP_GAS * (hop_count - 1)


@dataclass(frozen=True)
class Route:
    """An ordered, contiguous sequence of swaps from one coin to another."""

    steps: tuple[RouteStep, ...]
    amount_in: Decimal
    amount_out: Decimal
    price_impact: int
    fee: Decimal
    estimated_gas: int

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError("Route must have at least one step")
        for prev, nxt in zip(self.steps, self.steps[1:], strict=False):
            if prev.coin_out != nxt.coin_in:
                raise ValueError(
                    f"Route steps are not contiguous: {prev.coin_out} -> {nxt.coin_in}"
                )

    @classmethod
    def from_steps(cls, steps: list[RouteStep] | tuple[RouteStep, ...]) -> Route:
        """Aggregate priced steps into a route.

        Price impact is the sum of the step impacts; fee is the sum of each
        step's fee on its own input amount.
        """
        steps = tuple(steps)
        if not steps:
            raise ValueError("Route must have at least one step")
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            fee = sum(
                (calculate_fee(step.amount_in, step.fee_rate) for step in steps),
                Decimal(0),
            )
        return cls(
            steps=steps,
            amount_in=steps[0].amount_in,
            amount_out=steps[-1].amount_out,
            price_impact=sum(step.price_impact for step in steps),
            fee=fee,
            estimated_gas=estimate_gas(len(steps)),
        )

    @property
    def coin_in(self) -> str:
        return self.steps[0].coin_in

    @property
    def coin_out(self) -> str:
        return self.steps[-1].coin_out

    @property
    def hop_count(self) -> int:
        return len(self.steps)

    @property
    def is_multihop(self) -> bool:
        """Check if this is a multi-hop route."""
        return len(self.steps) > 1

    @property
    def path(self) -> list[str]:
        """Coins visited, from input to output."""
        return [self.steps[0].coin_in] + [step.coin_out for step in self.steps]


@dataclass(frozen=True)
class QuoteRequest:
    """A validated request to quote a swap."""

    coin_in: str
    coin_out: str
    amount_in: int
    slippage_tolerance_bp: int = DEFAULT_SLIPPAGE_TOLERANCE_BP
    exclude_dexes: frozenset[DexType] = field(default_factory=frozenset)
    max_hops: int = DEFAULT_MAX_HOPS


@dataclass(frozen=True)
class QuoteResult:
    """Outcome of a quote: the best route and its alternatives, or no route."""

    route: Route | None
    min_amount_out: Decimal | None = None
    alternatives: tuple[Route, ...] = ()
    candidate_count: int = 0

    @classmethod
    def no_route(cls, candidate_count: int = 0) -> QuoteResult:
        """Result for a request no pool combination can serve."""
        return cls(route=None, candidate_count=candidate_count)

    @property
    def found(self) -> bool:
        return self.route is not None


__all__ = ["PathStrategy", "QuoteRequest", "QuoteResult", "Route", "RouteStep", "estimate_gas"]
