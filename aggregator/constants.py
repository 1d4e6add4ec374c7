"""Protocol constants for the route quoter.

Centralizes well-known coin types and routing parameters.
"""

import re

# Basis points denominator (100 bp = 1%)
BASIS_POINTS = 10_000

# Aptos coin type: <address>::<module>::<struct>
COIN_TYPE_PATTERN = re.compile(r"^0x[a-fA-F0-9]+::[a-zA-Z_][a-zA-Z0-9_]*::[a-zA-Z_][a-zA-Z0-9_]*$")


def is_valid_coin_type(coin_type: str) -> bool:
    """Check if a string is a well-formed Aptos coin type."""
    if not isinstance(coin_type, str):
        return False
    return COIN_TYPE_PATTERN.match(coin_type) is not None


def _validate_coin_type(name: str, coin_type: str) -> str:
    """Validate and return a coin type.

    Raises:
        ValueError: If the coin type is malformed
    """
    if not is_valid_coin_type(coin_type):
        raise ValueError(f"Invalid {name} coin type: {coin_type}")
    return coin_type


# Quote defaults
DEFAULT_SLIPPAGE_TOLERANCE_BP = 50  # 0.5%
DEFAULT_MAX_HOPS = 3
MAX_HOPS_LIMIT = 3
DEFAULT_MAX_ALTERNATIVES = 5

# Gas estimation (Aptos gas units)
SINGLE_HOP_GAS = 5_000
EXTRA_HOP_GAS = 3_000

# Cache timing (seconds)
DEFAULT_REFRESH_INTERVAL = 30.0
DEFAULT_STALE_AFTER = 60.0
READINESS_MAX_AGE = 300.0

# Well-known coin types on Aptos
# All coin types are validated at import time to catch typos early
APT = _validate_coin_type("APT", "0x1::aptos_coin::AptosCoin")
_BRIDGE = "0xf22bede237a07e121b56d91a491eb7bcdfd1f5907926a9e58338f964a01b17fa"
USDC = _validate_coin_type("USDC", f"{_BRIDGE}::asset::USDC")
USDT = _validate_coin_type("USDT", f"{_BRIDGE}::asset::USDT")
WETH = _validate_coin_type("WETH", f"{_BRIDGE}::asset::WETH")
WBTC = _validate_coin_type("WBTC", f"{_BRIDGE}::asset::WBTC")
DAI = _validate_coin_type("DAI", f"{_BRIDGE}::asset::DAI")

# (name, symbol, decimals) for coins whose metadata is not carried by pool resources
KNOWN_COINS: dict[str, tuple[str, str, int]] = {
    APT: ("Aptos Coin", "APT", 8),
    USDC: ("USD Coin", "USDC", 6),
    USDT: ("Tether USD", "USDT", 6),
    WETH: ("Wrapped Ether", "WETH", 8),
    WBTC: ("Wrapped Bitcoin", "WBTC", 8),
    DAI: ("Dai Stablecoin", "DAI", 8),
}

# Fullnode endpoints per network
NETWORK_NODE_URLS = {
    "mainnet": "https://fullnode.mainnet.aptoslabs.com/v1",
    "testnet": "https://fullnode.testnet.aptoslabs.com/v1",
    "devnet": "https://fullnode.devnet.aptoslabs.com/v1",
    "local": "http://localhost:8080/v1",
}
