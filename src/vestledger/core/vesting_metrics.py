"""
Vesting ledger instrumentation.

Provides Prometheus metrics that track how many beneficiaries have been
scheduled, how much has been allocated against the supply cap and how
much has been released, with helper functions that are safe to call
from the mutation path.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

beneficiaries_created_counter = Counter(
    "vestledger_beneficiaries_created_total",
    "Total number of beneficiary schedules created",
    ["mode"],
)

tokens_released_counter = Counter(
    "vestledger_tokens_released_total", "Total base units released to beneficiaries"
)

release_calls_counter = Counter(
    "vestledger_release_calls_total", "Release calls by outcome", ["outcome"]
)

rejected_calls_counter = Counter(
    "vestledger_rejected_calls_total", "Rejected ledger calls by error kind", ["operation", "kind"]
)

total_allocated_gauge = Gauge(
    "vestledger_total_allocated", "Sum of total amounts over all schedules", ["address"]
)

supply_remaining_gauge = Gauge(
    "vestledger_supply_remaining", "Allocation headroom left under the supply cap", ["address"]
)


def record_creation(address: str, count: int, mode: str, total_allocated: int, max_supply: int) -> None:
    """Record committed schedule creations and refresh the allocation gauges of ledger ``address``."""
    if count <= 0:
        return

    beneficiaries_created_counter.labels(mode=mode).inc(count)
    total_allocated_gauge.labels(address=address).set(total_allocated)
    supply_remaining_gauge.labels(address=address).set(max_supply - total_allocated)


def record_release(amount: int) -> None:
    release_calls_counter.labels(outcome="released" if amount > 0 else "noop").inc()
    if amount > 0:
        tokens_released_counter.inc(amount)


def record_rejection(operation: str, kind: str) -> None:
    rejected_calls_counter.labels(operation=operation, kind=kind).inc()
