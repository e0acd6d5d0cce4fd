"""
Fixed-point helpers for converting on-chain mantissa integers into decimal amounts.

Contract values are integers scaled by a power of ten. All conversions and arithmetic are performed
with `decimal.Decimal` in a context wide enough to hold any uint256 value with its fractional part,
so no intermediate result is rounded. Results are only ever reduced by `truncate`, which rounds
toward zero.
"""

import functools
from decimal import ROUND_DOWN, Context, Decimal

from birdindexer.constants import BIRD_PLUS_DECIMALS, BTOKEN_DECIMALS, MANTISSA_DECIMALS
from birdindexer.exceptions import BirdIndexerValueError

# uint256 has 78 digits, a second uint256-sized fractional part still fits
DECIMAL_CONTEXT = Context(prec=160)

ZERO_BD = Decimal(0)
_TEN = Decimal(10)


@functools.lru_cache
def scale(decimals: int) -> Decimal:
    """
    Return 10**decimals as a Decimal, built by repeated multiplication.
    """

    if decimals < 0:
        raise BirdIndexerValueError(message=f"Invalid decimal count {decimals}")

    result = Decimal(1)
    for _ in range(decimals):
        result = DECIMAL_CONTEXT.multiply(result, _TEN)
    return result


MANTISSA_FACTOR_BD = scale(MANTISSA_DECIMALS)
BTOKEN_DECIMALS_BD = scale(BTOKEN_DECIMALS)
BIRD_PLUS_DECIMALS_BD = scale(BIRD_PLUS_DECIMALS)


def truncate(value: Decimal, decimals: int) -> Decimal:
    """
    Drop all fractional digits past `decimals`, rounding toward zero.
    """

    if decimals < 0:
        raise BirdIndexerValueError(message=f"Invalid decimal count {decimals}")

    return value.quantize(
        Decimal(1).scaleb(-decimals),
        rounding=ROUND_DOWN,
        context=DECIMAL_CONTEXT,
    )


def from_mantissa(raw: int, decimals: int) -> Decimal:
    """
    Convert a raw integer scaled by 10**decimals into its decimal value, without truncation.
    """

    return DECIMAL_CONTEXT.divide(Decimal(raw), scale(decimals))


def add(a: Decimal, b: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.add(a, b)


def subtract(a: Decimal, b: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.subtract(a, b)


def multiply(a: Decimal, b: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.multiply(a, b)


def divide(a: Decimal, b: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.divide(a, b)
