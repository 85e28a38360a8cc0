"""
vestledger - Time-Based Token Vesting Ledger

Tracks per-beneficiary vesting schedules (total amount, upfront first
benefit, cliff and linear duration), computes releasable amounts with
bit-exact truncating integer arithmetic, and releases vested tokens into
a token account while keeping total allocation under a fixed supply cap.

Main Components:
- blockchain.vesting_ledger: VestingLedger, creation and release
- blockchain.beneficiary_schedule: schedule model and releasable formula
- contracts.token_account: TokenAccount credited on release
- core: exceptions, checked uint256 arithmetic, configuration, logging, metrics
"""

from vestledger.blockchain.beneficiary_schedule import (
    BeneficiarySchedule,
    ScheduleState,
    compute_releasable,
)
from vestledger.blockchain.vesting_ledger import VestingLedger
from vestledger.contracts.token_account import TokenAccount

__version__ = "0.1.0"
__author__ = "vestledger Development Team"

__all__ = [
    "BeneficiarySchedule",
    "ScheduleState",
    "TokenAccount",
    "VestingLedger",
    "compute_releasable",
]
