"""Constant-product AMM pricing functions."""

from aggregator.amm.math import (
    amount_after_fee,
    calculate_fee,
    calculate_max_input,
    calculate_min_output,
    calculate_price_impact,
    get_amount_in,
    get_amount_out,
)

__all__ = [
    "amount_after_fee",
    "calculate_fee",
    "calculate_max_input",
    "calculate_min_output",
    "calculate_price_impact",
    "get_amount_in",
    "get_amount_out",
]
