"""Candidate route discovery over a pool snapshot.

Routes are found by a depth-first walk of the snapshot's coin graph, bounded
by the request's hop limit. Every direct pool between the two coins is a
candidate. For multi-hop legs the strategy decides which pools are tried:

- GREEDY picks the single best-output pool per leg for the amount arriving
  at that leg, giving one candidate per chain of intermediate coins. The
  number of chains is bounded by max_hops, so greedy search is not capped.
- EXHAUSTIVE tries every eligible pool on every leg, stopping once
  max_candidates routes have been produced.

The visited set is path-local: each branch extends its own frozenset, so a
coin can appear on sibling branches but never twice on one route.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from aggregator.errors import InvalidAmountError
from aggregator.pools.snapshot import PoolSnapshot
from aggregator.pools.types import Pool
from aggregator.routing.pricing import price_step
from aggregator.routing.types import PathStrategy, QuoteRequest, Route, RouteStep

logger = structlog.get_logger()


class PathFinder:
    """Enumerates priced candidate routes for a quote request.

    Usage:
        finder = PathFinder(PathStrategy.GREEDY)
        routes = finder.find_routes(cache.snapshot, request)
    """

    def __init__(
        self,
        strategy: PathStrategy = PathStrategy.GREEDY,
        max_candidates: int = 50,
    ) -> None:
        """Initialize the path finder.

        Args:
            strategy: How multi-hop legs choose pools
            max_candidates: Stop an exhaustive search once this many routes
                were found
        """
        if max_candidates < 1:
            raise ValueError("max_candidates must be at least 1")
        self.strategy = strategy
        self.max_candidates = max_candidates

    def find_routes(self, snapshot: PoolSnapshot, request: QuoteRequest) -> list[Route]:
        """Find candidate routes from request.coin_in to request.coin_out.

        Args:
            snapshot: Pool snapshot captured once for this request
            request: Validated quote request

        Returns:
            Priced routes in discovery order (direct routes first); empty when
            the coins are not connected within max_hops
        """
        if request.coin_in == request.coin_out:
            return []
        if not snapshot.has_coin(request.coin_in) or not snapshot.has_coin(request.coin_out):
            return []

        routes: list[Route] = []
        self._search(
            snapshot,
            request,
            coin=request.coin_in,
            amount=Decimal(request.amount_in),
            steps=(),
            visited=frozenset({request.coin_in}),
            routes=routes,
        )
        logger.debug(
            "candidate_routes_found",
            coin_in=request.coin_in,
            coin_out=request.coin_out,
            strategy=self.strategy.value,
            candidate_count=len(routes),
        )
        return routes

    def _search(
        self,
        snapshot: PoolSnapshot,
        request: QuoteRequest,
        coin: str,
        amount: Decimal,
        steps: tuple[RouteStep, ...],
        visited: frozenset[str],
        routes: list[Route],
    ) -> None:
        depth = len(steps)

        # Close the path at the destination
        for pool in self._leg_pools(snapshot, request, coin, request.coin_out, amount, depth):
            if self._is_full(routes):
                return
            step = self._try_price(pool, coin, amount)
            if step is not None:
                routes.append(Route.from_steps(steps + (step,)))

        # Extend through an intermediate coin only if a final leg still fits
        if depth + 2 > request.max_hops:
            return

        for neighbor in sorted(snapshot.neighbors(coin)):
            if neighbor == request.coin_out or neighbor in visited:
                continue
            for pool in self._leg_pools(snapshot, request, coin, neighbor, amount, depth):
                if self._is_full(routes):
                    return
                step = self._try_price(pool, coin, amount)
                if step is None:
                    continue
                self._search(
                    snapshot,
                    request,
                    coin=neighbor,
                    amount=step.amount_out,
                    steps=steps + (step,),
                    visited=visited | {neighbor},
                    routes=routes,
                )

    def _is_full(self, routes: list[Route]) -> bool:
        return self.strategy == PathStrategy.EXHAUSTIVE and len(routes) >= self.max_candidates

    def _leg_pools(
        self,
        snapshot: PoolSnapshot,
        request: QuoteRequest,
        coin_in: str,
        coin_out: str,
        amount: Decimal,
        depth: int,
    ) -> list[Pool]:
        """Pools to try for one leg.

        The direct hop keeps every eligible pool so the selector can compare
        them. Every leg of a multi-hop path follows the strategy.
        """
        is_direct = depth == 0 and coin_out == request.coin_out
        if is_direct or self.strategy == PathStrategy.EXHAUSTIVE:
            return [
                pool
                for pool in snapshot.get_pools_for_pair(coin_in, coin_out)
                if pool.dex_type not in request.exclude_dexes
            ]

        best = snapshot.get_best_pool_for_pair(coin_in, coin_out, amount, request.exclude_dexes)
        return [best] if best is not None else []

    @staticmethod
    def _try_price(pool: Pool, coin_in: str, amount: Decimal) -> RouteStep | None:
        try:
            return price_step(pool, coin_in, amount)
        except InvalidAmountError as err:
            logger.debug(
                "route_leg_unpriceable",
                pool=pool.address,
                coin_in=coin_in,
                error=str(err),
            )
            return None


__all__ = ["PathFinder"]
