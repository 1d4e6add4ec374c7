"""Shared type definitions for quoter wire models."""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

# Reserves on Aptos are u128
U128_MAX = 2**128 - 1


def validate_raw_amount(value: Any) -> str:
    """Validate that a value is a non-negative decimal integer string.

    Args:
        value: Value to validate (string or int)

    Returns:
        The amount as a decimal string

    Raises:
        ValueError: If value is not a non-negative integer within u128 range
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a decimal integer string, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise ValueError(f"Amount must be a decimal integer string: '{value}'")
        int_value = int(value)
    else:
        raise ValueError(f"Amount must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Amount cannot be negative: {value}")
    if int_value > U128_MAX:
        raise ValueError(f"Amount overflow: {value} > 2^128-1")

    return str(int_value)


# Raw coin amount as decimal string (validated)
RawAmount = Annotated[
    str,
    BeforeValidator(validate_raw_amount),
    Field(description="Non-negative integer amount in the coin's smallest unit"),
]

# Loose coin identifier accepted on input; format errors are reported by the core
CoinIdentifier = Annotated[str, Field(min_length=10)]
