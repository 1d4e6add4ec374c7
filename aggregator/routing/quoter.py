"""Quote pipeline: validation, path search, selection, slippage.

Quoter is created once at startup with explicit collaborators and shared by
all requests. Each quote reads a single snapshot captured at the start, so
a refresh published mid-request never mixes into its result.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from aggregator.amm.math import calculate_min_output
from aggregator.constants import (
    BASIS_POINTS,
    DEFAULT_MAX_HOPS,
    DEFAULT_SLIPPAGE_TOLERANCE_BP,
    MAX_HOPS_LIMIT,
    is_valid_coin_type,
)
from aggregator.errors import QuoteValidationError
from aggregator.pools.cache import PoolCache
from aggregator.pools.types import DexType
from aggregator.routing.pathfinding import PathFinder
from aggregator.routing.selector import RouteSelector
from aggregator.routing.types import QuoteRequest, QuoteResult

logger = structlog.get_logger()


def validate_quote_request(request: QuoteRequest) -> None:
    """Reject requests no search should run for.

    Raises:
        QuoteValidationError: On a malformed coin type, identical coins,
            non-positive amount, or slippage/hop bound out of range
    """
    for field_name, coin in (("coin_in", request.coin_in), ("coin_out", request.coin_out)):
        if not is_valid_coin_type(coin):
            raise QuoteValidationError(f"Invalid {field_name} coin type: '{coin}'")
    if request.coin_in == request.coin_out:
        raise QuoteValidationError("coin_in and coin_out must be different")
    if request.amount_in <= 0:
        raise QuoteValidationError("amount_in must be positive")
    if not 1 <= request.slippage_tolerance_bp <= BASIS_POINTS:
        raise QuoteValidationError(
            f"slippage_tolerance_bp must be in [1, {BASIS_POINTS}], "
            f"got {request.slippage_tolerance_bp}"
        )
    if not 1 <= request.max_hops <= MAX_HOPS_LIMIT:
        raise QuoteValidationError(
            f"max_hops must be in [1, {MAX_HOPS_LIMIT}], got {request.max_hops}"
        )


def build_quote_request(
    coin_in: str,
    coin_out: str,
    amount_in: str | int,
    slippage_tolerance_bp: int = DEFAULT_SLIPPAGE_TOLERANCE_BP,
    exclude_dexes: Iterable[str] = (),
    max_hops: int = DEFAULT_MAX_HOPS,
) -> QuoteRequest:
    """Build and validate a QuoteRequest from wire values.

    Args:
        coin_in: Coin type being sold
        coin_out: Coin type being bought
        amount_in: Raw amount as decimal string or int
        slippage_tolerance_bp: Slippage tolerance in basis points
        exclude_dexes: DEX tags whose pools must not be used
        max_hops: Maximum number of legs

    Returns:
        Validated QuoteRequest

    Raises:
        QuoteValidationError: If any value is invalid
    """
    if isinstance(amount_in, str):
        if not (amount_in.isascii() and amount_in.isdigit()):
            raise QuoteValidationError(f"amount_in must be a decimal integer: '{amount_in}'")
        amount = int(amount_in)
    else:
        amount = amount_in

    excluded: set[DexType] = set()
    for tag in exclude_dexes:
        try:
            excluded.add(DexType.parse(tag))
        except ValueError as err:
            raise QuoteValidationError(str(err)) from err

    request = QuoteRequest(
        coin_in=coin_in,
        coin_out=coin_out,
        amount_in=amount,
        slippage_tolerance_bp=slippage_tolerance_bp,
        exclude_dexes=frozenset(excluded),
        max_hops=max_hops,
    )
    validate_quote_request(request)
    return request


class Quoter:
    """Turns quote requests into ranked, slippage-adjusted routes."""

    def __init__(
        self,
        cache: PoolCache,
        path_finder: PathFinder | None = None,
        selector: RouteSelector | None = None,
    ) -> None:
        self.cache = cache
        self.path_finder = path_finder or PathFinder()
        self.selector = selector or RouteSelector()

    def quote(self, request: QuoteRequest) -> QuoteResult:
        """Quote a swap.

        Args:
            request: Swap to quote

        Returns:
            QuoteResult with the best route, min_amount_out and alternatives,
            or QuoteResult.no_route() when no pool combination connects the
            coins

        Raises:
            QuoteValidationError: If the request is invalid; raised before
                any path search
        """
        validate_quote_request(request)

        snapshot = self.cache.snapshot
        candidates = self.path_finder.find_routes(snapshot, request)
        ranked = self.selector.select(candidates)

        if ranked is None:
            logger.info(
                "no_route_found",
                coin_in=request.coin_in,
                coin_out=request.coin_out,
                amount_in=str(request.amount_in),
                pool_count=snapshot.pool_count,
            )
            return QuoteResult.no_route(candidate_count=len(candidates))

        best = ranked.best
        min_amount_out = calculate_min_output(best.amount_out, request.slippage_tolerance_bp)
        logger.info(
            "quote_computed",
            coin_in=request.coin_in,
            coin_out=request.coin_out,
            amount_in=str(request.amount_in),
            amount_out=str(best.amount_out),
            hops=best.hop_count,
            candidate_count=len(candidates),
        )
        return QuoteResult(
            route=best,
            min_amount_out=min_amount_out,
            alternatives=ranked.alternatives,
            candidate_count=len(candidates),
        )


__all__ = ["Quoter", "build_quote_request", "validate_quote_request"]
