"""
Module: schedule_engines.resource_loading
Responsibility:
    Spread coarse resource allocations (N hours over a date window) into a
    daily labor/equipment time series over a requested date range.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - One row per calendar day of the requested range, sorted by date,
      zero-filled where nothing is allocated.
    - Open-ended allocation windows default to the requested range bounds.
    - Allocations entirely outside the range contribute nothing.
    - The allocation's full hours are divided by the clipped, inclusive day
      count (minimum 1).  Clipping shrinks the denominator only, so an
      allocation that straddles the range places more than its in-range
      share inside it.
    - Hours per day are rounded to cents before accumulation.

Failure modes:
    - InvalidDateRangeError when ``start`` is after ``end``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Protocol

from schedule_engines.tracer import traced_engine
from schedule_kernel.domain.dates import days_between, iter_days
from schedule_kernel.domain.numeric import ZERO, round2, to_decimal
from schedule_kernel.exceptions import InvalidDateRangeError


class ResourceCategory(str, Enum):
    """Closed set of allocatable resource kinds."""

    LABOR = "labor"
    EQUIPMENT = "equipment"


class Allocation(Protocol):
    @property
    def resource_category(self) -> ResourceCategory | str: ...

    @property
    def hours(self) -> Decimal: ...

    @property
    def start_date(self) -> date | None: ...

    @property
    def end_date(self) -> date | None: ...


@dataclass(frozen=True)
class ResourceLoadingRow:
    day: date
    labor_hours: Decimal
    equipment_hours: Decimal
    total_hours: Decimal

    @classmethod
    def from_bucket(cls, day: date, bucket: dict[ResourceCategory, Decimal]) -> "ResourceLoadingRow":
        labor = bucket[ResourceCategory.LABOR]
        equipment = bucket[ResourceCategory.EQUIPMENT]
        return cls(
            day=day,
            labor_hours=labor,
            equipment_hours=equipment,
            total_hours=round2(labor + equipment),
        )


@traced_engine("resource_loading", "1.0", fingerprint_fields=("start", "end"))
def project_resource_loading(
    allocations: Sequence[Allocation],
    *,
    start: date,
    end: date,
) -> list[ResourceLoadingRow]:
    if start > end:
        raise InvalidDateRangeError(start.isoformat(), end.isoformat())

    buckets: dict[date, dict[ResourceCategory, Decimal]] = {
        day: {category: ZERO for category in ResourceCategory}
        for day in iter_days(start, end)
    }

    for alloc in allocations:
        alloc_start = alloc.start_date or start
        alloc_end = alloc.end_date or end
        if alloc_end < start or alloc_start > end:
            continue

        clipped_start = max(alloc_start, start)
        clipped_end = min(alloc_end, end)
        day_count = max(1, days_between(clipped_start, clipped_end) + 1)
        per_day = round2(to_decimal(alloc.hours) / day_count)
        category = ResourceCategory(alloc.resource_category)

        for day in iter_days(clipped_start, clipped_end):
            buckets[day][category] += per_day

    return [ResourceLoadingRow.from_bucket(day, buckets[day]) for day in sorted(buckets)]
