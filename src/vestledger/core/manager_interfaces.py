"""
Collaborator Protocol Interfaces - decoupling the vesting ledger from the token.

The vesting ledger never imports a concrete token implementation. It
depends only on the narrow credit boundary described here, so any ledger
that can mint or transfer into a beneficiary balance can be plugged in.

Usage:
    class MyToken:
        def credit(self, address: str, amount: int, minter: str | None = None) -> bool: ...
        def balance_of(self, address: str) -> int: ...

    assert isinstance(MyToken(), CreditTarget)
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class CreditTarget(Protocol):
    """
    Protocol for the fungible-token ledger credited on release.

    ``credit`` is called exactly once per successful non-zero release,
    after the vesting ledger has validated the request. It must either
    return a truthy value or raise; a falsy return or an exception aborts
    the release.
    """

    def credit(self, address: str, amount: int, minter: Optional[str] = None) -> bool:
        """Mint or move ``amount`` into the spendable balance of ``address``."""
        ...

    def balance_of(self, address: str) -> int:
        """Read-only balance lookup, used by inspection code only."""
        ...
