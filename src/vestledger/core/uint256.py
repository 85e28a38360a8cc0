"""
Checked unsigned 256-bit arithmetic.

Python integers never wrap, so these helpers enforce the uint256 range
explicitly: any result outside ``[0, UINT256_MAX]`` raises
ArithmeticOverflowError instead of silently producing a value that the
original 256-bit ledger could not have held.
"""

from __future__ import annotations

from typing import Type

from .vesting_exceptions import ArithmeticOverflowError, VestingError

UINT256_MAX: int = 2**256 - 1


def to_uint256(
    value: object,
    field: str,
    error_cls: Type[VestingError] = VestingError,
) -> int:
    """
    Validate that ``value`` is a uint256 and return it.

    Args:
        value: Candidate value
        field: Name used in the error message
        error_cls: Exception raised for non-integers and negatives

    Returns:
        The value, unchanged

    Raises:
        error_cls: If value is not an int (bools excluded) or is negative
        ArithmeticOverflowError: If value exceeds UINT256_MAX
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise error_cls(
            f"{field} must be an integer, got {type(value).__name__}",
            details={"field": field},
        )
    if value < 0:
        raise error_cls(f"{field} cannot be negative", details={"field": field, "value": value})
    if value > UINT256_MAX:
        raise ArithmeticOverflowError(
            f"{field} exceeds uint256", details={"field": field, "value": value}
        )
    return value


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError("uint256 addition overflow", details={"a": a, "b": b})
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticOverflowError("uint256 subtraction underflow", details={"a": a, "b": b})
    return a - b


def checked_mul(a: int, b: int) -> int:
    result = a * b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError("uint256 multiplication overflow", details={"a": a, "b": b})
    return result


def checked_div(a: int, b: int) -> int:
    """Integer division truncated toward zero (operands are unsigned)."""
    if b == 0:
        raise ArithmeticOverflowError("uint256 division by zero", details={"a": a})
    return a // b
