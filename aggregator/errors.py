"""Error classes for the route quoter.

Validation errors are client faults and reach the caller. Math and provider
errors are handled close to their source.
"""


class AggregatorError(Exception):
    """Base error for quoter operations."""

    pass


class QuoteValidationError(AggregatorError):
    """Quote request rejected before any search began."""

    pass


class InvalidAmountError(AggregatorError, ValueError):
    """Amount, reserve or rate outside the range an AMM formula accepts."""

    pass


class PoolNotFoundError(AggregatorError, LookupError):
    """No pool with the requested address in the current snapshot."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Pool not found: {address}")
        self.address = address


class ProviderError(AggregatorError):
    """A pool-data provider could not produce its pool list."""

    pass
