"""
Tests for checked uint256 arithmetic.
"""

import pytest

from vestledger.core.uint256 import (
    UINT256_MAX,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    to_uint256,
)
from vestledger.core.vesting_exceptions import (
    ArithmeticOverflowError,
    InvalidScheduleError,
    VestingError,
)


def test_to_uint256_accepts_range_bounds():
    assert to_uint256(0, "x") == 0
    assert to_uint256(UINT256_MAX, "x") == UINT256_MAX


def test_to_uint256_rejects_with_requested_error():
    with pytest.raises(InvalidScheduleError) as exc_info:
        to_uint256(-1, "total_amount", InvalidScheduleError)
    assert exc_info.value.details["field"] == "total_amount"

    with pytest.raises(VestingError):
        to_uint256(1.0, "x")
    with pytest.raises(VestingError):
        to_uint256(False, "x")


def test_to_uint256_overflow():
    with pytest.raises(ArithmeticOverflowError):
        to_uint256(UINT256_MAX + 1, "x", InvalidScheduleError)


def test_checked_operations():
    assert checked_add(UINT256_MAX - 1, 1) == UINT256_MAX
    assert checked_sub(5, 5) == 0
    assert checked_mul(2**128, 2**127) == 2**255
    assert checked_div(7, 2) == 3

    with pytest.raises(ArithmeticOverflowError):
        checked_add(UINT256_MAX, 1)
    with pytest.raises(ArithmeticOverflowError):
        checked_sub(1, 2)
    with pytest.raises(ArithmeticOverflowError):
        checked_mul(2**128, 2**128)
    with pytest.raises(ArithmeticOverflowError):
        checked_div(1, 0)
