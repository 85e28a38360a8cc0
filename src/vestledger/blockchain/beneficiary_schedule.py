from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any

from vestledger.core.uint256 import checked_add, checked_div, checked_mul, checked_sub


class ScheduleState(Enum):
    SCHEDULED = "scheduled"
    PARTIALLY_RELEASED = "partially_released"
    FULLY_RELEASED = "fully_released"


@dataclass
class BeneficiarySchedule:
    """
    Vesting allocation of a single beneficiary.

    ``first_benefit`` is releasable from the start; the remainder vests
    linearly over ``duration_seconds`` once ``cliff_seconds`` have elapsed
    since the ledger epoch. Only ``released_amount`` changes after creation.
    """

    address: str
    total_amount: int
    first_benefit: int
    cliff_seconds: int
    duration_seconds: int
    released_amount: int = 0

    @property
    def state(self) -> ScheduleState:
        if self.released_amount == 0:
            return ScheduleState.SCHEDULED
        if self.released_amount < self.total_amount:
            return ScheduleState.PARTIALLY_RELEASED
        return ScheduleState.FULLY_RELEASED

    def cliff_end(self, started_time: int) -> int:
        return checked_add(started_time, self.cliff_seconds)

    def vest_end(self, started_time: int) -> int:
        return checked_add(self.cliff_end(started_time), self.duration_seconds)

    def snapshot(self) -> "BeneficiarySchedule":
        """Detached copy safe to hand to callers."""
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["state"] = self.state.value
        return data


def compute_releasable(schedule: BeneficiarySchedule, started_time: int, timestamp: int) -> int:
    """
    Cumulative amount vested for ``schedule`` at ``timestamp``.

    Already released tokens are not subtracted. The per-second rate is
    truncated before it is multiplied by the elapsed time, so inside the
    ramp the result is ``first_benefit + elapsed * (remainder // duration)``
    and never ``first_benefit + (elapsed * remainder) // duration``.
    """
    cliff_end = schedule.cliff_end(started_time)
    vest_end = checked_add(cliff_end, schedule.duration_seconds)

    if timestamp < cliff_end:
        return schedule.first_benefit
    if timestamp >= vest_end:
        return schedule.total_amount

    # cliff_end <= timestamp < vest_end implies duration_seconds > 0
    remainder = checked_sub(schedule.total_amount, schedule.first_benefit)
    rate = checked_div(remainder, schedule.duration_seconds)
    elapsed = timestamp - cliff_end
    return checked_add(schedule.first_benefit, checked_mul(elapsed, rate))
