from decimal import Decimal

import hypothesis
import hypothesis.strategies
import pytest

from birdindexer.constants import MAX_UINT256, MIN_UINT256
from birdindexer.exceptions import BirdIndexerValueError
from birdindexer.numeric import (
    BIRD_PLUS_DECIMALS_BD,
    BTOKEN_DECIMALS_BD,
    MANTISSA_FACTOR_BD,
    ZERO_BD,
    add,
    divide,
    from_mantissa,
    multiply,
    scale,
    subtract,
    truncate,
)


def test_constants() -> None:
    assert MANTISSA_FACTOR_BD == Decimal(10**18)
    assert BTOKEN_DECIMALS_BD == Decimal(10**8)
    assert BIRD_PLUS_DECIMALS_BD == Decimal(10**6)
    assert ZERO_BD == 0


def test_scale() -> None:
    assert scale(0) == 1
    assert scale(1) == 10
    assert scale(18) == Decimal("1000000000000000000")
    assert scale(78) == Decimal(10**78)


def test_scale_rejects_negative_decimals() -> None:
    with pytest.raises(BirdIndexerValueError):
        scale(-1)


def test_truncate_rounds_toward_zero() -> None:
    assert truncate(Decimal("1.999999"), 2) == Decimal("1.99")
    assert truncate(Decimal("1.999999"), 2) != Decimal("2.00")
    assert truncate(Decimal("-1.999999"), 2) == Decimal("-1.99")
    assert truncate(Decimal("0.123456789"), 8) == Decimal("0.12345678")
    assert truncate(Decimal("5"), 0) == Decimal("5")
    assert truncate(Decimal("5.9"), 0) == Decimal("5")


def test_truncate_keeps_exact_values() -> None:
    assert truncate(Decimal("1.5"), 8) == Decimal("1.5")
    assert str(truncate(Decimal("1.5"), 8)) == "1.50000000"


def test_truncate_rejects_negative_decimals() -> None:
    with pytest.raises(BirdIndexerValueError):
        truncate(Decimal(1), -1)


def test_from_mantissa() -> None:
    assert from_mantissa(1, 18) == Decimal("0.000000000000000001")
    assert from_mantissa(15 * 10**17, 18) == Decimal("1.5")
    assert from_mantissa(123, 0) == Decimal(123)


def test_from_mantissa_does_not_lose_precision_for_large_values() -> None:
    value = from_mantissa(MAX_UINT256, 18)
    assert multiply(value, MANTISSA_FACTOR_BD) == Decimal(MAX_UINT256)


def test_arithmetic_helpers_use_wide_context() -> None:
    large = Decimal(MAX_UINT256)
    tiny = Decimal("0.000000000000000001")

    # The default 28-digit context would drop the fractional part
    assert subtract(add(large, tiny), large) == tiny
    assert divide(multiply(large, Decimal(3)), Decimal(3)) == large


@hypothesis.given(
    value=hypothesis.strategies.integers(min_value=MIN_UINT256, max_value=MAX_UINT256),
    decimals=hypothesis.strategies.integers(min_value=0, max_value=36),
)
def test_truncate_after_scaling_reproduces_input(value: int, decimals: int) -> None:
    scaled = from_mantissa(value, decimals)
    assert multiply(truncate(scaled, decimals), scale(decimals)) == Decimal(value)


@hypothesis.given(
    value=hypothesis.strategies.decimals(
        min_value=Decimal(-(10**30)),
        max_value=Decimal(10**30),
        allow_nan=False,
        allow_infinity=False,
        places=24,
    ),
    decimals=hypothesis.strategies.integers(min_value=0, max_value=18),
)
def test_truncate_never_increases_magnitude(value: Decimal, decimals: int) -> None:
    truncated = truncate(value, decimals)
    assert truncated.copy_abs() <= value.copy_abs()
    assert subtract(value, truncated).copy_abs() < Decimal(1).scaleb(-decimals)
