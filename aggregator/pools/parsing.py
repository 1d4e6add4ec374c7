"""Parsing of Aptos fullnode pool resources into Pool records.

Each supported DEX stores its pools as Move resources under one account. The
resource type carries the coin types as generic arguments, and the resource
data carries the reserves:

    0x...::liquidity_pool::LiquidityPool<CoinX, CoinY, Curve>
        {"coin_x_reserve": {"value": "..."}, "coin_y_reserve": {"value": "..."}, "fee": "30"}

Parsers return None for resources that are not constant-product pools of
their DEX, and raise ValueError for pool resources with malformed data.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

import structlog

from aggregator.constants import BASIS_POINTS
from aggregator.pools.types import CoinInfo, DexType, Pool

logger = structlog.get_logger()

# (resource, fetched_at, default_fee_rate) -> Pool | None
ResourceParser = Callable[[dict[str, Any], float, int], Pool | None]


def split_type_tag(type_tag: str) -> tuple[str, list[str]]:
    """Split a Move type tag into its struct path and generic arguments.

    Nested generics are kept intact:

        "0x1::m::S<0x1::a::A, 0x2::b::B<0x3::c::C>>"
        -> ("0x1::m::S", ["0x1::a::A", "0x2::b::B<0x3::c::C>"])

    Raises:
        ValueError: If angle brackets are unbalanced
    """
    type_tag = type_tag.strip()
    start = type_tag.find("<")
    if start == -1:
        return type_tag, []
    if not type_tag.endswith(">"):
        raise ValueError(f"Malformed type tag: {type_tag}")

    base = type_tag[:start]
    inner = type_tag[start + 1 : -1]
    args: list[str] = []
    depth = 0
    current: list[str] = []
    for char in inner:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
            if depth < 0:
                raise ValueError(f"Malformed type tag: {type_tag}")
        if char == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise ValueError(f"Malformed type tag: {type_tag}")
    if current:
        args.append("".join(current).strip())
    return base, args


def _struct_suffix(base: str) -> str:
    """Module and struct name of a struct path ("0x1::m::S" -> "m::S")."""
    parts = base.split("::")
    return "::".join(parts[-2:])


def _reserve(data: dict[str, Any], *keys: str) -> int:
    """Read a reserve from nested resource data (values are u64/u128 strings)."""
    value: Any = data
    for key in keys:
        if not isinstance(value, dict) or key not in value:
            raise ValueError(f"Missing field {'.'.join(keys)}")
        value = value[key]
    try:
        return int(value)
    except (TypeError, ValueError) as err:
        raise ValueError(f"Invalid reserve {'.'.join(keys)}: {value!r}") from err


def _fee_from_ratio(numerator: Any, denominator: Any) -> int:
    """Convert a fee fraction to basis points, rounding half up."""
    try:
        ratio = Decimal(str(numerator)) / Decimal(str(denominator))
    except (InvalidOperation, ZeroDivisionError) as err:
        raise ValueError(f"Invalid fee ratio {numerator}/{denominator}") from err
    return int((ratio * BASIS_POINTS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _make_pool(
    resource_type: str,
    dex_type: DexType,
    coin_a: str,
    coin_b: str,
    reserve_a: int,
    reserve_b: int,
    fee_rate: int,
    fetched_at: float,
) -> Pool:
    return Pool(
        address=resource_type,
        coin_a=CoinInfo.from_type(coin_a),
        coin_b=CoinInfo.from_type(coin_b),
        dex_type=dex_type,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        fee_rate=fee_rate,
        last_updated=fetched_at,
    )


def parse_liquidswap_resource(
    resource: dict[str, Any], fetched_at: float, default_fee_rate: int
) -> Pool | None:
    """Parse a LiquidSwap LiquidityPool<X, Y, Curve> resource.

    Only pools on the uncorrelated (constant product) curve are returned;
    stable-curve pools price with a different invariant.
    """
    base, args = split_type_tag(resource.get("type", ""))
    if _struct_suffix(base) != "liquidity_pool::LiquidityPool" or len(args) != 3:
        return None
    if not args[2].endswith("::Uncorrelated"):
        return None

    data = resource.get("data", {})
    fee_rate = default_fee_rate
    if "fee" in data:
        try:
            fee_rate = int(data["fee"])
        except (TypeError, ValueError):
            logger.warning(
                "fee_parse_failed",
                pool=resource["type"],
                raw_fee=data["fee"],
                using_default=default_fee_rate,
            )

    return _make_pool(
        resource["type"],
        DexType.LIQUIDSWAP,
        args[0],
        args[1],
        _reserve(data, "coin_x_reserve", "value"),
        _reserve(data, "coin_y_reserve", "value"),
        fee_rate,
        fetched_at,
    )


def parse_pancake_resource(
    resource: dict[str, Any], fetched_at: float, default_fee_rate: int
) -> Pool | None:
    """Parse a PancakeSwap TokenPairReserve<X, Y> resource (fixed fee)."""
    base, args = split_type_tag(resource.get("type", ""))
    if _struct_suffix(base) != "swap::TokenPairReserve" or len(args) != 2:
        return None

    data = resource.get("data", {})
    return _make_pool(
        resource["type"],
        DexType.PANCAKE,
        args[0],
        args[1],
        _reserve(data, "reserve_x"),
        _reserve(data, "reserve_y"),
        default_fee_rate,
        fetched_at,
    )


def parse_cetus_resource(
    resource: dict[str, Any], fetched_at: float, default_fee_rate: int
) -> Pool | None:
    """Parse a Cetus AMM Pool<A, B> resource."""
    base, args = split_type_tag(resource.get("type", ""))
    if _struct_suffix(base) != "amm_swap::Pool" or len(args) != 2:
        return None

    data = resource.get("data", {})
    fee_rate = default_fee_rate
    if "trade_fee_numerator" in data and "trade_fee_denominator" in data:
        fee_rate = _fee_from_ratio(data["trade_fee_numerator"], data["trade_fee_denominator"])

    return _make_pool(
        resource["type"],
        DexType.CETUS,
        args[0],
        args[1],
        _reserve(data, "coin_a", "value"),
        _reserve(data, "coin_b", "value"),
        fee_rate,
        fetched_at,
    )


def pool_from_dict(data: dict[str, Any], fetched_at: float) -> Pool:
    """Build a Pool from its JSON form (as served by GET /v1/pools).

    Coin metadata may be given as an object or as a bare coin type.

    Raises:
        ValueError: If a required field is missing or invalid
    """

    def coin(value: Any) -> CoinInfo:
        if isinstance(value, str):
            return CoinInfo.from_type(value)
        return CoinInfo(
            type=value["type"],
            name=value.get("name", value["type"].rsplit("::", 1)[-1]),
            symbol=value.get("symbol", value["type"].rsplit("::", 1)[-1]),
            decimals=int(value.get("decimals", 8)),
            logo_url=value.get("logo_url"),
        )

    try:
        return Pool(
            address=data["pool_address"],
            coin_a=coin(data["coin_a"]),
            coin_b=coin(data["coin_b"]),
            dex_type=DexType.parse(data["dex_type"]),
            reserve_a=int(data["reserve_a"]),
            reserve_b=int(data["reserve_b"]),
            fee_rate=int(data["fee_rate"]),
            last_updated=fetched_at,
            tvl=data.get("tvl"),
            volume_24h=data.get("volume_24h"),
        )
    except KeyError as err:
        raise ValueError(f"Pool entry missing field {err}") from err


__all__ = [
    "ResourceParser",
    "parse_cetus_resource",
    "parse_liquidswap_resource",
    "parse_pancake_resource",
    "pool_from_dict",
    "split_type_tag",
]
