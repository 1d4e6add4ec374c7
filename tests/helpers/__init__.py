"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Coin types and common amounts
- factories: Pool and quote request factory functions
"""

from tests.helpers.constants import (
    APT,
    DAI,
    GUI,
    ISLAND,
    MOJO,
    ONE_APT,
    ONE_USDC,
    USDC,
    USDT,
    WBTC,
    WETH,
)
from tests.helpers.factories import make_pool, make_request

__all__ = [
    # Constants
    "APT",
    "USDC",
    "USDT",
    "WETH",
    "WBTC",
    "DAI",
    "MOJO",
    "GUI",
    "ISLAND",
    "ONE_APT",
    "ONE_USDC",
    # Factories
    "make_pool",
    "make_request",
]
