"""
Earned Value Management (EVM) Calculations -- Pure Functions.

All functions are pure: no I/O, no side effects, no database, no clock.
They compute EVM metrics from task cost fields and an explicit as-of date.
Every monetary result and both indices are rounded half-up to cents.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Protocol

from schedule_kernel.domain.dates import days_between
from schedule_kernel.domain.numeric import HUNDRED, ZERO, round2, to_decimal


class CostedTask(Protocol):
    @property
    def budget_cost(self) -> Decimal: ...

    @property
    def actual_cost(self) -> Decimal: ...

    @property
    def percent_complete(self) -> Decimal: ...

    @property
    def start_date(self) -> date | None: ...

    @property
    def end_date(self) -> date | None: ...


def calculate_task_bcws(
    budget_cost: Decimal,
    start_date: date | None,
    end_date: date | None,
    as_of: date,
) -> Decimal:
    """
    Planned value of one task at ``as_of``.

    Full budget once the planned end has passed; a linear share of it while
    the task is in its planned window; nothing before it starts or when its
    planned span is zero days long.
    """
    budget = to_decimal(budget_cost)
    if end_date is not None and end_date <= as_of:
        return round2(budget)
    if start_date is not None and end_date is not None and start_date <= as_of:
        total = days_between(start_date, end_date)
        if total > 0:
            elapsed = Decimal(days_between(start_date, as_of))
            return round2(budget * min(Decimal("1"), elapsed / total))
    return ZERO


def calculate_bcws(tasks: Sequence[CostedTask], as_of: date) -> Decimal:
    """Budgeted Cost of Work Scheduled (Planned Value)."""
    return round2(sum(
        (calculate_task_bcws(t.budget_cost, t.start_date, t.end_date, as_of) for t in tasks),
        ZERO,
    ))


def calculate_task_bcwp(budget_cost: Decimal, percent_complete: Decimal) -> Decimal:
    return round2(to_decimal(budget_cost) * to_decimal(percent_complete) / HUNDRED)


def calculate_bcwp(tasks: Sequence[CostedTask]) -> Decimal:
    """Budgeted Cost of Work Performed (Earned Value)."""
    return round2(sum(
        (calculate_task_bcwp(t.budget_cost, t.percent_complete) for t in tasks),
        ZERO,
    ))


def calculate_acwp(tasks: Sequence[CostedTask]) -> Decimal:
    """Actual Cost of Work Performed."""
    return round2(sum((to_decimal(t.actual_cost) for t in tasks), ZERO))


def calculate_cpi(
    bcwp: Decimal,
    acwp: Decimal,
) -> Decimal:
    """Cost Performance Index = EV / AC. >1 = under budget."""
    if acwp <= 0:
        return ZERO
    return round2(bcwp / acwp)


def calculate_spi(
    bcwp: Decimal,
    bcws: Decimal,
) -> Decimal:
    """Schedule Performance Index = EV / PV. >1 = ahead of schedule."""
    if bcws <= 0:
        return ZERO
    return round2(bcwp / bcws)


def calculate_eac(
    bac: Decimal,
    cpi: Decimal,
) -> Decimal:
    """Estimate at Completion = BAC / CPI."""
    if cpi <= 0:
        return ZERO
    return round2(bac / cpi)


def calculate_etc(
    eac: Decimal,
    acwp: Decimal,
) -> Decimal:
    """Estimate to Complete = EAC - AC, never negative."""
    return round2(max(ZERO, eac - acwp))


def calculate_vac(
    bac: Decimal,
    eac: Decimal,
) -> Decimal:
    """Variance at Completion = BAC - EAC."""
    return round2(bac - eac)


def calculate_cv(bcwp: Decimal, acwp: Decimal) -> Decimal:
    """Cost Variance = EV - AC."""
    return round2(bcwp - acwp)


def calculate_sv(bcwp: Decimal, bcws: Decimal) -> Decimal:
    """Schedule Variance = EV - PV."""
    return round2(bcwp - bcws)
