"""Best-route selection."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from aggregator.constants import DEFAULT_MAX_ALTERNATIVES
from aggregator.routing.types import Route

# Output difference (raw units) below which two routes count as tied
DEFAULT_TIE_EPSILON = Decimal("0.001")


@dataclass(frozen=True)
class RankedRoutes:
    """Best route plus ranked alternatives."""

    best: Route
    alternatives: tuple[Route, ...] = ()


class RouteSelector:
    """Ranks candidate routes by output, breaking ties on price impact.

    Routes whose output is within `epsilon` of the top output form the
    leading group and are ordered by ascending price impact. The rest follow
    by descending output. Ties are measured against the top output only, so
    the ranking does not depend on the order candidates arrive in.
    """

    def __init__(
        self,
        epsilon: Decimal = DEFAULT_TIE_EPSILON,
        max_alternatives: int = DEFAULT_MAX_ALTERNATIVES,
    ) -> None:
        if epsilon < 0:
            raise ValueError("epsilon must be non-negative")
        if max_alternatives < 0:
            raise ValueError("max_alternatives must be non-negative")
        self.epsilon = epsilon
        self.max_alternatives = max_alternatives

    def rank(self, routes: Sequence[Route]) -> list[Route]:
        """Return routes sorted best first. The input is left untouched."""
        if not routes:
            return []
        top = max(route.amount_out for route in routes)

        def sort_key(route: Route) -> tuple:
            pools = tuple(step.pool_address for step in route.steps)
            if route.amount_out == top or top - route.amount_out < self.epsilon:
                return (0, route.price_impact, -route.amount_out, pools)
            return (1, -route.amount_out, route.price_impact, pools)

        return sorted(routes, key=sort_key)

    def select(self, routes: Sequence[Route]) -> RankedRoutes | None:
        """Pick the best route and up to max_alternatives runners-up.

        Returns:
            RankedRoutes, or None when there are no candidates
        """
        if not routes:
            return None
        ranked = self.rank(routes)
        return RankedRoutes(
            best=ranked[0],
            alternatives=tuple(ranked[1 : 1 + self.max_alternatives]),
        )


__all__ = ["DEFAULT_TIE_EPSILON", "RankedRoutes", "RouteSelector"]
