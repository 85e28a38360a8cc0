"""
Fungible token account credited by the vesting ledger.

A minimal ERC20-style balance ledger:
- Balances and total supply in base units (256-bit checked)
- Transfers between holders
- Minting restricted to a single vesting address set by the owner
- Optional supply cap (0 = unlimited)
- Transfer events

The vesting ledger only ever calls ``credit``; everything else exists for
holders and inspection.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional

from vestledger.core.logging_config import truncate_address
from vestledger.core.uint256 import UINT256_MAX
from vestledger.core.vesting_exceptions import TokenAccountError

if TYPE_CHECKING:
    from vestledger.core.config_manager import TokenConfig

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40


@dataclass
class TokenEvent:
    """Represents a token event."""

    event_type: str  # "Transfer" or "VestingAddressSet"
    from_address: str
    to_address: str
    value: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class TokenAccount:
    """
    Balance ledger exposing the credit boundary used by the vesting ledger.

    Security considerations:
    - Only the configured vesting address may credit (mint)
    - Uses 256-bit arithmetic with overflow checks
    - Zero address checks on all recipients
    """

    # Token metadata
    name: str
    symbol: str
    decimals: int = 18

    # Owner (may designate the vesting address)
    owner: str = ""

    # Supply cap (0 = unlimited)
    max_supply: int = 0

    # Contract address
    address: str = ""

    # State
    total_supply: int = 0
    vesting_address: str = ""
    balances: Dict[str, int] = field(default_factory=dict)
    events: list[TokenEvent] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.address:
            addr_input = f"{self.name}{self.symbol}{time.time()}".encode()
            addr_hash = hashlib.sha3_256(addr_input).digest()
            self.address = f"0x{addr_hash[-20:].hex()}"
        self.owner = self._normalize(self.owner)
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: "TokenConfig", owner: str) -> "TokenAccount":
        """Build a token account from the ``token`` configuration section."""
        return cls(
            name=config.name,
            symbol=config.symbol,
            decimals=config.decimals,
            owner=owner,
            max_supply=config.max_supply,
        )

    # ==================== View Functions ====================

    def balance_of(self, account: str) -> int:
        """
        Get the token balance of an account.

        Args:
            account: Address to check

        Returns:
            Token balance in base units
        """
        with self._lock:
            return self.balances.get(self._normalize(account), 0)

    # ==================== State-Changing Functions ====================

    def set_vesting_address(self, caller: str, vesting_address: str) -> bool:
        """
        Designate the only address allowed to credit (owner only).

        Raises:
            TokenAccountError: If caller is not the owner or address is zero
        """
        with self._lock:
            self._require_owner(caller)
            vesting_norm = self._normalize(vesting_address)
            self._validate_address(vesting_norm, "vesting address")
            self.vesting_address = vesting_norm
            self.events.append(
                TokenEvent(
                    event_type="VestingAddressSet",
                    from_address=self.owner,
                    to_address=vesting_norm,
                    value=0,
                )
            )
        logger.info(
            "Vesting address set for %s",
            self.symbol,
            extra={"event": "token.vesting_address_set", "vesting": truncate_address(vesting_norm)},
        )
        return True

    def credit(self, address: str, amount: int, minter: Optional[str] = None) -> bool:
        """
        Mint ``amount`` into the spendable balance of ``address``.

        Args:
            address: Recipient of the credit
            amount: Amount to credit (0 is accepted)
            minter: Identity performing the credit; must be the vesting address

        Returns:
            True if successful

        Raises:
            TokenAccountError: If the credit is refused
        """
        with self._lock:
            if not self.vesting_address:
                raise TokenAccountError("Token: vesting address not set")
            if minter is None or self._normalize(minter) != self.vesting_address:
                raise TokenAccountError(
                    "Token: caller is not the vesting address",
                    details={"minter": minter},
                )

            to_norm = self._normalize(address)
            self._validate_address(to_norm, "recipient")
            self._validate_amount(amount)

            new_supply = self.total_supply + amount
            if new_supply > UINT256_MAX:
                raise TokenAccountError("Token: total supply exceeds uint256")
            if self.max_supply > 0 and new_supply > self.max_supply:
                raise TokenAccountError(
                    f"Token: credit would exceed max supply ({new_supply} > {self.max_supply})",
                    details={"amount": amount, "max_supply": self.max_supply},
                )

            self.total_supply = new_supply
            self.balances[to_norm] = self.balances.get(to_norm, 0) + amount
            self._emit_transfer(ZERO_ADDRESS, to_norm, amount)

        logger.info(
            "Credited %s %s",
            amount,
            self.symbol,
            extra={
                "event": "token.credit",
                "to": truncate_address(to_norm),
                "amount": amount,
                "new_supply": new_supply,
            },
        )
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Transfer tokens from sender to recipient.

        Raises:
            TokenAccountError: If the sender balance is insufficient
        """
        with self._lock:
            sender_norm = self._normalize(sender)
            recipient_norm = self._normalize(recipient)

            self._validate_address(recipient_norm, "recipient")
            self._validate_amount(amount)

            sender_balance = self.balances.get(sender_norm, 0)
            if sender_balance < amount:
                raise TokenAccountError(
                    f"Token: transfer amount exceeds balance ({amount} > {sender_balance})",
                    details={"amount": amount, "balance": sender_balance},
                )

            self.balances[sender_norm] = sender_balance - amount
            self.balances[recipient_norm] = self.balances.get(recipient_norm, 0) + amount
            self._emit_transfer(sender_norm, recipient_norm, amount)

        logger.debug(
            "Token transfer",
            extra={
                "event": "token.transfer",
                "from": truncate_address(sender_norm),
                "to": truncate_address(recipient_norm),
                "amount": amount,
            },
        )
        return True

    # ==================== Helpers ====================

    def _normalize(self, address: str) -> str:
        """Normalize address to lowercase."""
        return address.lower() if address else ""

    def _validate_address(self, address: str, field: str) -> None:
        if address == ZERO_ADDRESS or not address:
            raise TokenAccountError(f"Token: {field} is zero address")

    def _validate_amount(self, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TokenAccountError("Token: amount must be an integer")
        if amount < 0:
            raise TokenAccountError("Token: amount cannot be negative")
        if amount > UINT256_MAX:
            raise TokenAccountError("Token: amount exceeds uint256")

    def _require_owner(self, caller: str) -> None:
        if not self.owner or self._normalize(caller) != self.owner:
            raise TokenAccountError("Token: caller is not owner")

    def _emit_transfer(self, from_addr: str, to_addr: str, amount: int) -> None:
        self.events.append(
            TokenEvent(
                event_type="Transfer",
                from_address=from_addr,
                to_address=to_addr,
                value=amount,
            )
        )

    # ==================== Serialization ====================

    def to_dict(self) -> Dict:
        """Serialize token state to dictionary."""
        with self._lock:
            return {
                "name": self.name,
                "symbol": self.symbol,
                "decimals": self.decimals,
                "total_supply": self.total_supply,
                "address": self.address,
                "owner": self.owner,
                "vesting_address": self.vesting_address,
                "balances": dict(self.balances),
                "max_supply": self.max_supply,
            }
