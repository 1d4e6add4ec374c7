"""Leg pricing: one swap through one pool."""

from __future__ import annotations

from collections.abc import Sequence

from aggregator.amm.math import Numeric, calculate_price_impact, get_amount_out, to_decimal
from aggregator.errors import InvalidAmountError
from aggregator.pools.types import Pool
from aggregator.routing.types import Route, RouteStep


def price_step(pool: Pool, coin_in: str, amount_in: Numeric) -> RouteStep:
    """Price a swap of amount_in of coin_in through pool.

    Args:
        pool: Pool holding coin_in
        coin_in: Coin being sold
        amount_in: Raw amount of coin_in

    Returns:
        RouteStep with the AMM output and the step's price impact

    Raises:
        InvalidAmountError: If the pool does not hold coin_in or cannot price
            the swap (empty reserve, non-positive amount)
    """
    try:
        reserve_in, reserve_out = pool.get_reserves(coin_in)
        coin_out = pool.get_coin_out(coin_in)
    except ValueError as err:
        raise InvalidAmountError(str(err)) from err

    amount = to_decimal(amount_in)
    amount_out = get_amount_out(amount, reserve_in, reserve_out, pool.fee_rate)
    return RouteStep(
        dex_type=pool.dex_type,
        coin_in=coin_in,
        coin_out=coin_out,
        pool_address=pool.address,
        amount_in=amount,
        amount_out=amount_out,
        fee_rate=pool.fee_rate,
        price_impact=calculate_price_impact(amount, amount_out, reserve_in, reserve_out),
    )


def price_path(pools: Sequence[Pool], coin_in: str, amount_in: Numeric) -> Route:
    """Price a fixed sequence of pools, feeding each leg's output into the next.

    Raises:
        InvalidAmountError: If any leg cannot be priced
    """
    if not pools:
        raise ValueError("Path must contain at least one pool")
    steps: list[RouteStep] = []
    current_coin = coin_in
    current_amount = to_decimal(amount_in)
    for pool in pools:
        step = price_step(pool, current_coin, current_amount)
        steps.append(step)
        current_coin = step.coin_out
        current_amount = step.amount_out
    return Route.from_steps(steps)


__all__ = ["price_path", "price_step"]
