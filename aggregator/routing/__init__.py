"""Route finding and quoting.

Module structure:
- types.py: RouteStep, Route, QuoteRequest and QuoteResult
- pricing.py: AMM pricing of single legs and fixed paths
- pathfinding.py: PathFinder, candidate route discovery
- selector.py: RouteSelector, best-route ranking
- quoter.py: Quoter, the validation-to-result pipeline
"""

from aggregator.routing.pathfinding import PathFinder
from aggregator.routing.pricing import price_path, price_step
from aggregator.routing.quoter import Quoter, build_quote_request, validate_quote_request
from aggregator.routing.selector import RankedRoutes, RouteSelector
from aggregator.routing.types import PathStrategy, QuoteRequest, QuoteResult, Route, RouteStep

__all__ = [
    "PathFinder",
    "PathStrategy",
    "QuoteRequest",
    "QuoteResult",
    "Quoter",
    "RankedRoutes",
    "Route",
    "RouteSelector",
    "RouteStep",
    "build_quote_request",
    "price_path",
    "price_step",
    "validate_quote_request",
]
