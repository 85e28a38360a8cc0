"""
Vesting schedules and the ledger that creates and releases them.
"""

from .beneficiary_schedule import BeneficiarySchedule, ScheduleState, compute_releasable
from .vesting_ledger import VestingLedger

__all__ = ["BeneficiarySchedule", "ScheduleState", "VestingLedger", "compute_releasable"]
