"""
Module: schedule_engines.percent_complete
Responsibility:
    Resolve a task's percent complete by one of three interchangeable
    measurement methods and derive the status transition it implies.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Result is always within [0, 100], rounded half-up to 2 places.
    - cost  = actual_cost / budget_cost * 100, 0 when budget_cost <= 0.
    - units = actual_hours / budget_hours * 100, 0 when budget_hours <= 0.
    - manual = caller value clamped to [0, 100] (None counts as 0).
    - percent >= 100 -> completed; percent > 0 on a not_started task ->
      in_progress; otherwise the status is untouched.

Failure modes:
    - InvalidPercentCompleteMethodError for an unknown method string.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from schedule_engines.tracer import traced_engine
from schedule_kernel.domain.numeric import HUNDRED, ZERO, round2, to_decimal
from schedule_kernel.exceptions import InvalidPercentCompleteMethodError


class TaskStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELAYED = "delayed"


class PercentCompleteMethod(str, Enum):
    COST = "cost"
    UNITS = "units"
    MANUAL = "manual"

    @classmethod
    def coerce(cls, method: "PercentCompleteMethod | str") -> "PercentCompleteMethod":
        """Accept an enum member or its string value."""
        if isinstance(method, cls):
            return method
        try:
            return cls(method)
        except ValueError:
            raise InvalidPercentCompleteMethodError(str(method)) from None


@dataclass(frozen=True)
class PercentCompleteResult:
    """New percent complete and the status it implies."""

    method: PercentCompleteMethod
    percent_complete: Decimal
    status: TaskStatus
    previous_status: TaskStatus

    @property
    def status_changed(self) -> bool:
        return self.status != self.previous_status


def _clamp(value: Decimal) -> Decimal:
    return min(HUNDRED, max(ZERO, value))


def _ratio_percent(actual: Decimal, budget: Decimal) -> Decimal:
    if budget <= 0:
        return ZERO
    return _clamp(round2(actual / budget * HUNDRED))


def next_status(percent: Decimal, current: TaskStatus) -> TaskStatus:
    """Status implied by a new percent complete."""
    if percent >= HUNDRED:
        return TaskStatus.COMPLETED
    if percent > 0 and current == TaskStatus.NOT_STARTED:
        return TaskStatus.IN_PROGRESS
    return current


@traced_engine("percent_complete", "1.0", fingerprint_fields=("method", "manual_value"))
def resolve_percent_complete(
    *,
    method: PercentCompleteMethod | str,
    current_status: TaskStatus | str,
    budget_cost: Decimal | int | str | None = None,
    actual_cost: Decimal | int | str | None = None,
    budget_hours: Decimal | int | str | None = None,
    actual_hours: Decimal | int | str | None = None,
    manual_value: Decimal | int | float | str | None = None,
) -> PercentCompleteResult:
    """
    Compute percent complete for one task.

    Budget/actual inputs are only consulted by the method that needs them;
    ``manual_value`` is only consulted by the manual method.
    """
    resolved = PercentCompleteMethod.coerce(method)
    status = TaskStatus(current_status)

    if resolved is PercentCompleteMethod.MANUAL:
        pct = _clamp(to_decimal(manual_value))
    elif resolved is PercentCompleteMethod.COST:
        pct = _ratio_percent(to_decimal(actual_cost), to_decimal(budget_cost))
    else:
        pct = _ratio_percent(to_decimal(actual_hours), to_decimal(budget_hours))

    pct = round2(pct)
    return PercentCompleteResult(
        method=resolved,
        percent_complete=pct,
        status=next_status(pct, status),
        previous_status=status,
    )
