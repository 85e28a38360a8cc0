"""
Vesting-specific exception hierarchy for vestledger.

Every rejected call on the vesting ledger or the token account raises one
of these typed exceptions. They are raised before any state is mutated,
so catching one means the ledger is exactly as it was before the call.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class VestingError(Exception):
    """Base exception for all vesting-related errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error (offending values)
        recoverable: Whether the same call may succeed if retried later
    """

    recoverable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if recoverable is not None:
            self.recoverable = recoverable

    @property
    def kind(self) -> str:
        """Short error kind used for metrics labels and log fields."""
        return type(self).__name__.replace("Error", "")


# ==================== Authorization Errors ====================


class UnauthorizedError(VestingError):
    """Raised when the caller lacks administrator rights for a creation call."""
    pass


# ==================== Creation Errors ====================


class AlreadyExistsError(VestingError):
    """Raised on a second creation attempt for an address that has a schedule."""
    pass


class ArityMismatchError(VestingError):
    """Raised when batch creation sequences have unequal lengths."""
    pass


class SupplyExceededError(VestingError):
    """Raised when a creation would push total allocation past the supply cap."""
    pass


class InvalidScheduleError(VestingError):
    """Raised when schedule parameters are malformed.

    Examples: zero total amount, first benefit above total amount,
    negative durations, empty or zero address.
    """
    pass


class ArithmeticOverflowError(VestingError):
    """Raised when a value does not fit in an unsigned 256-bit integer."""
    pass


# ==================== Release Errors ====================


class NoScheduleError(VestingError):
    """Raised when an address without a schedule releases or is queried."""
    pass


class ExceedsReleasableError(VestingError):
    """Raised when a release asks for more than the vested, unreleased balance.

    Recoverable: the same amount may become releasable once more time passes.
    """
    recoverable = True


class InvalidAmountError(VestingError):
    """Raised when a release amount is negative or not an integer."""
    pass


class CreditFailedError(VestingError):
    """Raised when the token account refuses a credit; the release is rolled back."""
    pass


# ==================== Token Account Errors ====================


class TokenAccountError(VestingError):
    """Raised by the token account for balance, authority or supply violations."""
    pass


# ==================== Configuration Errors ====================


class ConfigurationError(VestingError):
    """Raised when required configuration is missing or invalid."""
    pass
