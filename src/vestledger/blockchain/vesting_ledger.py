from __future__ import annotations

import hashlib
import logging
import threading
import time
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from vestledger.blockchain.beneficiary_schedule import BeneficiarySchedule, compute_releasable
from vestledger.core import vesting_metrics
from vestledger.core.config_manager import MAX_SUPPLY, SECONDS_PER_DAY
from vestledger.core.logging_config import truncate_address
from vestledger.core.manager_interfaces import CreditTarget
from vestledger.core.uint256 import UINT256_MAX, checked_add, checked_mul, to_uint256
from vestledger.core.vesting_exceptions import (
    AlreadyExistsError,
    ArityMismatchError,
    ConfigurationError,
    CreditFailedError,
    ExceedsReleasableError,
    InvalidAmountError,
    InvalidScheduleError,
    NoScheduleError,
    SupplyExceededError,
    UnauthorizedError,
    VestingError,
)

if TYPE_CHECKING:
    from vestledger.core.config_manager import MetricsConfig, VestingConfig

logger = logging.getLogger("vestledger.blockchain.vesting_ledger")

ZERO_ADDRESS = "0x" + "0" * 40


def _normalize_address(address: Any, error_cls: type[VestingError], field: str = "address") -> str:
    if not isinstance(address, str) or not address.strip():
        raise error_cls(f"{field} cannot be empty.", details={field: address})
    normalized = address.strip().lower()
    if normalized == ZERO_ADDRESS:
        raise error_cls(f"{field} cannot be the zero address.", details={field: address})
    return normalized


class VestingLedger:
    """
    Time-based vesting engine with a global allocation cap.

    Holds one BeneficiarySchedule per address, the epoch ``started_time``
    read from the clock at construction, and the running ``total_allocated``.
    Creation is administrator-only; release is performed by the beneficiary
    itself and credits the token account.

    Every mutating call validates fully before touching state. Creation
    calls serialize on the ledger lock; releases serialize per beneficiary
    so unrelated beneficiaries never block each other.
    """

    def __init__(
        self,
        token_account: CreditTarget,
        admin: str,
        seconds_per_day: int = SECONDS_PER_DAY,
        max_supply: int = MAX_SUPPLY,
        time_provider: Callable[[], int] | None = None,
        address: str = "",
        metrics_enabled: bool = True,
    ):
        if token_account is None:
            raise ConfigurationError("token_account is required.")
        if isinstance(seconds_per_day, bool) or not isinstance(seconds_per_day, int) or seconds_per_day <= 0:
            raise ConfigurationError("seconds_per_day must be a positive integer.")
        if isinstance(max_supply, bool) or not isinstance(max_supply, int) or not (0 < max_supply <= UINT256_MAX):
            raise ConfigurationError("max_supply must be a positive uint256.")

        self.token_account = token_account
        self._admin = _normalize_address(admin, ConfigurationError, "admin")
        self._seconds_per_day = seconds_per_day
        self._max_supply = max_supply
        self._time_provider = time_provider or (lambda: int(time.time()))
        self.metrics_enabled = metrics_enabled

        self._lock = threading.RLock()
        self._schedules: dict[str, BeneficiarySchedule] = {}
        self._schedule_locks: dict[str, threading.Lock] = {}
        self._total_allocated = 0

        self._started_time = self._current_time()
        self.address = address.lower() if address else self._derive_address()

        logger.info(
            "VestingLedger initialized at %s (one day = %s seconds)",
            self._started_time,
            seconds_per_day,
            extra={
                "event": "vesting.initialized",
                "admin": truncate_address(self._admin),
                "max_supply": max_supply,
                "deterministic_clock": bool(time_provider),
            },
        )

    @classmethod
    def from_config(
        cls,
        config: "VestingConfig",
        token_account: CreditTarget,
        admin: Optional[str] = None,
        time_provider: Callable[[], int] | None = None,
        metrics_config: Optional["MetricsConfig"] = None,
    ) -> "VestingLedger":
        """Build a ledger from the ``vesting`` and ``metrics`` configuration sections."""
        config.validate()
        if metrics_config is not None:
            metrics_config.validate()
        admin = admin or config.admin
        if not admin:
            raise ConfigurationError("An administrator address is required (vesting.admin).")
        return cls(
            token_account=token_account,
            admin=admin,
            seconds_per_day=config.seconds_per_day,
            max_supply=config.max_supply,
            time_provider=time_provider,
            metrics_enabled=metrics_config.enabled if metrics_config is not None else True,
        )

    # ==================== Properties ====================

    @property
    def admin(self) -> str:
        return self._admin

    @property
    def started_time(self) -> int:
        return self._started_time

    @property
    def seconds_per_day(self) -> int:
        return self._seconds_per_day

    @property
    def max_supply(self) -> int:
        return self._max_supply

    @property
    def total_allocated(self) -> int:
        with self._lock:
            return self._total_allocated

    @property
    def remaining_supply(self) -> int:
        with self._lock:
            return self._max_supply - self._total_allocated

    def _current_time(self) -> int:
        timestamp = self._time_provider()
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                "time_provider must return an integer timestamp.", details={"timestamp": timestamp}
            ) from exc

    def _derive_address(self) -> str:
        digest = hashlib.sha3_256(f"vesting:{self._admin}:{self._started_time}:{id(self)}".encode()).digest()
        return f"0x{digest[-20:].hex()}"

    # ==================== Creation ====================

    def create_beneficiary(
        self,
        caller: str,
        address: str,
        total_amount: int,
        first_benefit: int,
        cliff_days: int,
        duration_days: int,
    ) -> BeneficiarySchedule:
        """
        Register a vesting schedule for ``address``.

        Args:
            caller: Identity performing the call (must be the administrator)
            address: Beneficiary address
            total_amount: Total base units vested
            first_benefit: Base units releasable from the start
            cliff_days: Days after ``started_time`` before the ramp begins
            duration_days: Length of the linear ramp in days (may be 0)

        Returns:
            Snapshot of the created schedule

        Raises:
            UnauthorizedError, InvalidScheduleError, ArithmeticOverflowError,
            AlreadyExistsError, SupplyExceededError
        """
        created = self._create(
            caller,
            [(address, total_amount, first_benefit, cliff_days, duration_days)],
            mode="single",
        )
        return created[0]

    def create_beneficiary_batch(
        self,
        caller: str,
        addresses: Sequence[str],
        amounts: Sequence[int],
        first_benefits: Sequence[int],
        cliff_days: Sequence[int],
        duration_days: Sequence[int],
    ) -> list[BeneficiarySchedule]:
        """
        Register several schedules atomically.

        Entries are checked in order against a running allocation total, so
        an entry near the cap sees earlier entries of the same batch. If any
        entry fails nothing is committed; the raised error carries the
        failing ``index`` in its details.
        """
        arguments = {
            "addresses": addresses,
            "amounts": amounts,
            "first_benefits": first_benefits,
            "cliff_days": cliff_days,
            "duration_days": duration_days,
        }
        try:
            self._require_admin(caller)
            for name, column in arguments.items():
                if isinstance(column, (str, bytes)) or not isinstance(column, Sequence):
                    raise InvalidScheduleError(
                        f"{name} must be a sequence.", details={name: column}
                    )
            columns = [list(column) for column in arguments.values()]
            lengths = [len(column) for column in columns]
            if len(set(lengths)) != 1:
                raise ArityMismatchError(
                    "Batch sequences must have equal length.", details={"lengths": lengths}
                )
        except VestingError as exc:
            self._record_rejection("create_batch", exc)
            raise

        return self._create(caller, list(zip(*columns)), mode="batch")

    def _create(self, caller: str, entries: list[tuple], mode: str) -> list[BeneficiarySchedule]:
        operation = "create" if mode == "single" else "create_batch"
        try:
            self._require_admin(caller)
            with self._lock:
                pending = self._validate_entries(entries, indexed=mode == "batch")
                self._commit(pending)
                total_allocated = self._total_allocated
        except VestingError as exc:
            self._record_rejection(operation, exc)
            raise

        for schedule in pending:
            logger.info(
                "Beneficiary %s scheduled for %s",
                truncate_address(schedule.address),
                schedule.total_amount,
                extra={
                    "event": "vesting.beneficiary_created",
                    "mode": mode,
                    "first_benefit": schedule.first_benefit,
                    "cliff_seconds": schedule.cliff_seconds,
                    "duration_seconds": schedule.duration_seconds,
                },
            )
        if self.metrics_enabled:
            vesting_metrics.record_creation(
                self.address, len(pending), mode, total_allocated, self._max_supply
            )
        return [schedule.snapshot() for schedule in pending]

    def _require_admin(self, caller: str) -> None:
        if not isinstance(caller, str) or caller.strip().lower() != self._admin:
            raise UnauthorizedError(
                "Only the administrator can create beneficiaries.",
                details={"caller": caller},
            )

    def _validate_entries(self, entries: list[tuple], indexed: bool = False) -> list[BeneficiarySchedule]:
        """Check every entry against a simulated running total. Caller holds the lock."""
        pending: list[BeneficiarySchedule] = []
        seen: set[str] = set()
        running_total = self._total_allocated

        for index, entry in enumerate(entries):
            try:
                schedule = self._build_schedule(*entry)
                if schedule.address in self._schedules or schedule.address in seen:
                    raise AlreadyExistsError(
                        f"Beneficiary {schedule.address} already has a schedule.",
                        details={"address": schedule.address},
                    )
                if running_total + schedule.total_amount > self._max_supply:
                    raise SupplyExceededError(
                        f"Allocating {schedule.total_amount} exceeds the supply cap of {self._max_supply}. "
                        f"Allocated: {running_total}, available: {self._max_supply - running_total}",
                        details={
                            "amount": schedule.total_amount,
                            "total_allocated": running_total,
                            "max_supply": self._max_supply,
                        },
                    )
            except VestingError as exc:
                if indexed:
                    exc.details.setdefault("index", index)
                raise

            running_total += schedule.total_amount
            seen.add(schedule.address)
            pending.append(schedule)

        return pending

    def _build_schedule(
        self,
        address: str,
        total_amount: int,
        first_benefit: int,
        cliff_days: int,
        duration_days: int,
    ) -> BeneficiarySchedule:
        address = _normalize_address(address, InvalidScheduleError)
        total_amount = to_uint256(total_amount, "total_amount", InvalidScheduleError)
        first_benefit = to_uint256(first_benefit, "first_benefit", InvalidScheduleError)
        cliff_days = to_uint256(cliff_days, "cliff_days", InvalidScheduleError)
        duration_days = to_uint256(duration_days, "duration_days", InvalidScheduleError)

        if total_amount == 0:
            raise InvalidScheduleError("Total amount must be positive.", details={"address": address})
        if first_benefit > total_amount:
            raise InvalidScheduleError(
                "First benefit cannot exceed total amount.",
                details={"address": address, "first_benefit": first_benefit, "total_amount": total_amount},
            )

        cliff_seconds = checked_mul(cliff_days, self._seconds_per_day)
        duration_seconds = checked_mul(duration_days, self._seconds_per_day)
        # cliff and vest end must be representable so that queries never overflow
        checked_add(checked_add(self._started_time, cliff_seconds), duration_seconds)

        return BeneficiarySchedule(
            address=address,
            total_amount=total_amount,
            first_benefit=first_benefit,
            cliff_seconds=cliff_seconds,
            duration_seconds=duration_seconds,
        )

    def _commit(self, pending: list[BeneficiarySchedule]) -> None:
        for schedule in pending:
            self._schedules[schedule.address] = schedule
            self._schedule_locks[schedule.address] = threading.Lock()
            self._total_allocated += schedule.total_amount

    # ==================== Release ====================

    def release(self, caller: str, amount: int) -> int:
        """
        Release ``amount`` of the caller's vested, unreleased balance.

        The schedule is updated first and then the token account is
        credited; if the credit fails the update is rolled back and
        CreditFailedError is raised. A zero amount is accepted and does
        not call the token account.

        Returns:
            The caller's new cumulative released amount

        Raises:
            NoScheduleError, InvalidAmountError, ExceedsReleasableError,
            CreditFailedError
        """
        try:
            address, schedule, schedule_lock = self._lookup(caller)
            amount = to_uint256(amount, "amount", InvalidAmountError)

            with schedule_lock:
                now = self._current_time()
                vested = compute_releasable(schedule, self._started_time, now)
                releasable = max(vested - schedule.released_amount, 0)
                if amount > releasable:
                    raise ExceedsReleasableError(
                        f"Cannot release {amount}: only {releasable} releasable.",
                        details={"amount": amount, "releasable": releasable, "timestamp": now},
                    )

                if amount == 0:
                    released = schedule.released_amount
                else:
                    previous = schedule.released_amount
                    schedule.released_amount = previous + amount
                    try:
                        credited = self.token_account.credit(address, amount, minter=self.address)
                    except Exception as exc:
                        schedule.released_amount = previous
                        raise CreditFailedError(
                            f"Token account refused credit of {amount}: {exc}",
                            details={"address": address, "amount": amount},
                        ) from exc
                    if not credited:
                        schedule.released_amount = previous
                        raise CreditFailedError(
                            f"Token account refused credit of {amount}.",
                            details={"address": address, "amount": amount},
                        )
                    released = schedule.released_amount
        except VestingError as exc:
            self._record_rejection("release", exc)
            raise

        logger.info(
            "Released %s to %s",
            amount,
            truncate_address(address),
            extra={
                "event": "vesting.release",
                "released_amount": released,
                "releasable_before": releasable,
                "timestamp": now,
            },
        )
        if self.metrics_enabled:
            vesting_metrics.record_release(amount)
        return released

    def _lookup(self, address: str) -> tuple[str, BeneficiarySchedule, threading.Lock]:
        normalized = _normalize_address(address, NoScheduleError)
        with self._lock:
            schedule = self._schedules.get(normalized)
            if schedule is None:
                raise NoScheduleError(
                    f"No vesting schedule for {normalized}.", details={"address": normalized}
                )
            return normalized, schedule, self._schedule_locks[normalized]

    def _record_rejection(self, operation: str, exc: VestingError) -> None:
        logger.warning(
            "%s rejected: %s",
            operation,
            exc.message,
            extra={"event": f"vesting.{operation}_rejected", "kind": exc.kind, "details": exc.details},
        )
        if self.metrics_enabled:
            vesting_metrics.record_rejection(operation, exc.kind)

    # ==================== Queries ====================

    def _snapshot(self, address: str) -> BeneficiarySchedule:
        _, schedule, schedule_lock = self._lookup(address)
        with schedule_lock:
            return schedule.snapshot()

    def _query_time(self, timestamp: Optional[int]) -> int:
        if timestamp is None:
            return self._current_time()
        return to_uint256(timestamp, "timestamp")

    def get_amount_releasable(self, address: str, timestamp: Optional[int] = None) -> int:
        """
        Cumulative amount vested for ``address`` at ``timestamp`` (default: now).

        Already released tokens are not subtracted.
        """
        schedule = self._snapshot(address)
        return compute_releasable(schedule, self._started_time, self._query_time(timestamp))

    def get_releasable_balance(self, address: str, timestamp: Optional[int] = None) -> int:
        """Vested amount minus what has already been released."""
        schedule = self._snapshot(address)
        vested = compute_releasable(schedule, self._started_time, self._query_time(timestamp))
        return max(vested - schedule.released_amount, 0)

    def get_schedule(self, address: str) -> BeneficiarySchedule:
        return self._snapshot(address)

    def has_schedule(self, address: str) -> bool:
        if not isinstance(address, str):
            return False
        with self._lock:
            return address.strip().lower() in self._schedules

    def beneficiaries(self) -> list[str]:
        with self._lock:
            return list(self._schedules)

    def get_vesting_status(self, address: str, timestamp: Optional[int] = None) -> dict[str, Any]:
        """
        Full status of a beneficiary at ``timestamp`` (default: now).
        """
        schedule = self._snapshot(address)
        at = self._query_time(timestamp)
        vested = compute_releasable(schedule, self._started_time, at)
        status = schedule.to_dict()
        status.update(
            {
                "timestamp": at,
                "started_time": self._started_time,
                "cliff_end": schedule.cliff_end(self._started_time),
                "vest_end": schedule.vest_end(self._started_time),
                "vested_amount": vested,
                "releasable_amount": max(vested - schedule.released_amount, 0),
            }
        )
        return status

    def to_dict(self) -> dict[str, Any]:
        """Export ledger state for inspection."""
        with self._lock:
            addresses = list(self._schedules)
            total_allocated = self._total_allocated
        return {
            "address": self.address,
            "admin": self._admin,
            "started_time": self._started_time,
            "seconds_per_day": self._seconds_per_day,
            "max_supply": self._max_supply,
            "total_allocated": total_allocated,
            "schedules": {address: self._snapshot(address).to_dict() for address in addresses},
        }
