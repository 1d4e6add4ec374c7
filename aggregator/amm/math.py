"""Constant-product AMM math.

Pools hold reserves x and y with x * y = k (pre-fee). A trade of dx pays the
fee on the input, and the pool pays out

    dy = dx_after_fee * y / (x + dx_after_fee)

All amounts are raw integer units of the coin's smallest denomination. The
functions here accept ints, Decimals or numeric strings and compute in a
78-digit Decimal context, so no precision below one raw unit is lost. Inputs
outside the range a formula accepts raise InvalidAmountError; nothing is
silently clamped.
"""

from __future__ import annotations

import decimal
from decimal import ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

from aggregator.constants import BASIS_POINTS
from aggregator.errors import InvalidAmountError

# 78 digits of precision: enough for u128 reserves multiplied together
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)

Numeric = int | str | Decimal

_BP = Decimal(BASIS_POINTS)


def to_decimal(value: Numeric) -> Decimal:
    """Convert an amount to Decimal.

    Floats are converted through their string form to avoid binary precision
    artifacts.

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as err:
            raise InvalidAmountError(f"Not a number: {value!r}") from err
    if not result.is_finite():
        raise InvalidAmountError(f"Not a finite number: {value!r}")
    return result


def _check_fee_rate(fee_bp: int) -> None:
    if not 0 <= fee_bp < BASIS_POINTS:
        raise InvalidAmountError(f"Fee rate must be in [0, {BASIS_POINTS}) bp, got {fee_bp}")


def _check_tolerance(tolerance_bp: int) -> None:
    if not 0 <= tolerance_bp <= BASIS_POINTS:
        raise InvalidAmountError(
            f"Slippage tolerance must be in [0, {BASIS_POINTS}] bp, got {tolerance_bp}"
        )


def calculate_fee(amount: Numeric, fee_bp: int) -> Decimal:
    """Fee charged on an amount: amount * fee_bp / 10000."""
    _check_fee_rate(fee_bp)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return to_decimal(amount) * Decimal(fee_bp) / _BP


def amount_after_fee(amount: Numeric, fee_bp: int) -> Decimal:
    """Amount left after deducting the fee: amount * (1 - fee_bp / 10000)."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return to_decimal(amount) - calculate_fee(amount, fee_bp)


def get_amount_out(
    amount_in: Numeric,
    reserve_in: Numeric,
    reserve_out: Numeric,
    fee_bp: int = 30,
) -> Decimal:
    """Calculate output amount using the constant product formula.

    Formula: amount_out = in_after_fee * res_out / (res_in + in_after_fee)

    The result is strictly below reserve_out and strictly increasing in
    amount_in.

    Args:
        amount_in: Input coin amount
        reserve_in: Reserve of input coin in pool
        reserve_out: Reserve of output coin in pool
        fee_bp: Pool fee in basis points (default 30 = 0.3%)

    Returns:
        Output coin amount (not truncated to whole units)

    Raises:
        InvalidAmountError: If amount_in or either reserve is not positive
    """
    amount = to_decimal(amount_in)
    r_in = to_decimal(reserve_in)
    r_out = to_decimal(reserve_out)
    if amount <= 0 or r_in <= 0 or r_out <= 0:
        raise InvalidAmountError(
            f"Invalid amounts or reserves: amount_in={amount}, "
            f"reserve_in={r_in}, reserve_out={r_out}"
        )

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        amount_in_with_fee = amount_after_fee(amount, fee_bp)
        numerator = amount_in_with_fee * r_out
        denominator = r_in + amount_in_with_fee
        return numerator / denominator


def get_amount_in(
    amount_out: Numeric,
    reserve_in: Numeric,
    reserve_out: Numeric,
    fee_bp: int = 30,
) -> Decimal:
    """Calculate required input for a desired output.

    Inverts the product formula, adds one raw unit against truncation, then
    grosses up for the fee. Never under-quotes: feeding the result back into
    get_amount_out yields at least amount_out.

    Args:
        amount_out: Desired output coin amount
        reserve_in: Reserve of input coin in pool
        reserve_out: Reserve of output coin in pool
        fee_bp: Pool fee in basis points (default 30 = 0.3%)

    Returns:
        Required input coin amount

    Raises:
        InvalidAmountError: If any value is not positive, or amount_out would
            drain the pool (amount_out >= reserve_out)
    """
    _check_fee_rate(fee_bp)
    amount = to_decimal(amount_out)
    r_in = to_decimal(reserve_in)
    r_out = to_decimal(reserve_out)
    if amount <= 0 or r_in <= 0 or r_out <= 0:
        raise InvalidAmountError(
            f"Invalid amounts or reserves: amount_out={amount}, "
            f"reserve_in={r_in}, reserve_out={r_out}"
        )
    if amount >= r_out:
        raise InvalidAmountError(f"Amount out {amount} exceeds reserve {r_out}")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        numerator = r_in * amount
        denominator = r_out - amount
        amount_in = numerator / denominator + 1
        return amount_in * _BP / (_BP - Decimal(fee_bp))


def calculate_price_impact(
    amount_in: Numeric,
    amount_out: Numeric,
    reserve_in: Numeric,
    reserve_out: Numeric,
) -> int:
    """Calculate price impact in basis points.

    Compares the execution price (amount_out / amount_in) against the pool's
    pre-trade spot price (reserve_out / reserve_in).

    Returns:
        Impact in bp, floored and within [0, 10000]. 10000 when the pool has
        no liquidity on either side; 0 when execution is at or above spot.

    Raises:
        InvalidAmountError: If amount_in is not positive
    """
    r_in = to_decimal(reserve_in)
    r_out = to_decimal(reserve_out)
    if r_in <= 0 or r_out <= 0:
        return BASIS_POINTS

    amount = to_decimal(amount_in)
    if amount <= 0:
        raise InvalidAmountError(f"Amount in must be positive, got {amount}")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        spot_price = r_out / r_in
        execution_price = to_decimal(amount_out) / amount
        if execution_price >= spot_price:
            return 0
        impact = (spot_price - execution_price) / spot_price * _BP
        impact_bp = int(impact.to_integral_value(rounding=ROUND_FLOOR))

    return max(0, min(impact_bp, BASIS_POINTS))


def calculate_min_output(amount: Numeric, slippage_tolerance_bp: int) -> Decimal:
    """Minimum acceptable output after slippage: amount * (1 - tol / 10000).

    Raises:
        InvalidAmountError: If the tolerance exceeds 10000 bp or the minimum
            would be negative
    """
    _check_tolerance(slippage_tolerance_bp)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        value = to_decimal(amount)
        result = value - value * Decimal(slippage_tolerance_bp) / _BP
    if result < 0:
        raise InvalidAmountError(f"Minimum output would be negative: {result}")
    return result


def calculate_max_input(amount: Numeric, slippage_tolerance_bp: int) -> Decimal:
    """Maximum input to spend after slippage: amount * (1 + tol / 10000)."""
    _check_tolerance(slippage_tolerance_bp)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        value = to_decimal(amount)
        if value < 0:
            raise InvalidAmountError(f"Amount cannot be negative: {value}")
        return value + value * Decimal(slippage_tolerance_bp) / _BP


def is_within_tolerance(amount1: Numeric, amount2: Numeric, tolerance_bp: int) -> bool:
    """Check whether two amounts differ by at most tolerance_bp of the larger."""
    a = to_decimal(amount1)
    b = to_decimal(amount2)
    if a == b:
        return True
    larger = max(a, b)
    smaller = min(a, b)
    if larger <= 0:
        return False
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        diff_bp = (larger - smaller) / larger * _BP
    return diff_bp <= tolerance_bp


def format_amount(amount: Numeric, decimals: int) -> str:
    """Convert raw units to a display string (e.g. 150000000, 8 -> "1.5")."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        value = to_decimal(amount).scaleb(-decimals)
    return format(value.normalize(), "f")


def parse_amount(amount: Numeric, decimals: int) -> int:
    """Convert a display amount to raw units, rounding down."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        value = to_decimal(amount).scaleb(decimals)
        return int(value.to_integral_value(rounding=ROUND_DOWN))


def bp_to_percentage(basis_points: int) -> str:
    """Render basis points as a percentage string (30 -> "0.30%")."""
    percentage = (Decimal(basis_points) / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{percentage}%"


def percentage_to_bp(percentage: Numeric) -> int:
    """Convert a percentage to basis points (0.3 -> 30)."""
    value = to_decimal(percentage) * 100
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "Numeric",
    "amount_after_fee",
    "bp_to_percentage",
    "calculate_fee",
    "calculate_max_input",
    "calculate_min_output",
    "calculate_price_impact",
    "format_amount",
    "get_amount_in",
    "get_amount_out",
    "is_within_tolerance",
    "parse_amount",
    "percentage_to_bp",
    "to_decimal",
]
