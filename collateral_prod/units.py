"""
18-decimal fixed point helpers matching the contracts' SafeDecimalMath.

All values are plain ints in wei-style units. Rounding helpers follow the
contracts: compute one extra digit of precision, then round half up.
"""
from decimal import Decimal
from typing import Union

from eth_utils import from_wei, to_wei

from collateral_prod.constants import UNIT

Number = Union[int, float, str, Decimal]


def to_unit(amount: Number) -> int:
    if isinstance(amount, float):
        # str() keeps the literal the caller wrote, 0.1 stays 0.1
        amount = str(amount)
    return to_wei(Decimal(amount), "ether")


def from_unit(amount: int) -> Decimal:
    return from_wei(amount, "ether")


def multiply_decimal(x: int, y: int) -> int:
    return x * y // UNIT


def multiply_decimal_round(x: int, y: int) -> int:
    result = x * y // (UNIT // 10)
    if result % 10 >= 5:
        result += 10
    return result // 10


def to_bytes32(key: str) -> bytes:
    raw = key.encode("ascii")
    if len(raw) > 32:
        raise ValueError(f"{key!r} does not fit in bytes32")
    return raw.ljust(32, b"\x00")
