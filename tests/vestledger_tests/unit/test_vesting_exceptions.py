"""
Tests for the vesting exception hierarchy.
"""

import pytest

from vestledger.core import vesting_exceptions as errors


@pytest.mark.parametrize(
    "cls",
    [
        errors.UnauthorizedError,
        errors.AlreadyExistsError,
        errors.ArityMismatchError,
        errors.SupplyExceededError,
        errors.NoScheduleError,
        errors.ExceedsReleasableError,
        errors.ArithmeticOverflowError,
        errors.InvalidScheduleError,
        errors.InvalidAmountError,
        errors.CreditFailedError,
        errors.TokenAccountError,
        errors.ConfigurationError,
    ],
)
def test_every_error_is_a_vesting_error(cls):
    exc = cls("boom", details={"a": 1})
    assert isinstance(exc, errors.VestingError)
    assert exc.message == "boom"
    assert exc.details == {"a": 1}


def test_kind_and_recoverable():
    assert errors.SupplyExceededError("x").kind == "SupplyExceeded"
    assert errors.ExceedsReleasableError("x").recoverable is True
    assert errors.NoScheduleError("x").recoverable is False
    assert errors.NoScheduleError("x", recoverable=True).recoverable is True
    assert errors.NoScheduleError("x").details == {}
