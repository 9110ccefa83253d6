"""
Module: schedule_engines.schedule_variance
Responsibility:
    Baseline-versus-actual comparison, one row per task.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - planned_duration = baseline end - baseline start when both exist,
      else the task's duration field.
    - actual start/end fall back to planned start/end.
    - actual_duration = actual end - actual start when both exist, else 0.
    - Durations never go negative.
    - variance_days = actual end - baseline end (signed; positive = late),
      0 when either is missing.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from schedule_engines.tracer import traced_engine
from schedule_kernel.domain.dates import days_between, signed_days_between


class BaselinedTask(Protocol):
    @property
    def id(self) -> Hashable: ...

    @property
    def name(self) -> str: ...

    @property
    def duration(self) -> int: ...

    @property
    def start_date(self) -> date | None: ...

    @property
    def end_date(self) -> date | None: ...

    @property
    def baseline_start(self) -> date | None: ...

    @property
    def baseline_end(self) -> date | None: ...

    @property
    def actual_start(self) -> date | None: ...

    @property
    def actual_end(self) -> date | None: ...


@dataclass(frozen=True)
class ScheduleVarianceRow:
    task_id: Hashable
    task_name: str
    baseline_start: date | None
    baseline_end: date | None
    actual_start: date | None
    actual_end: date | None
    planned_duration: int
    actual_duration: int
    variance_days: int

    @property
    def is_late(self) -> bool:
        return self.variance_days > 0

    @property
    def is_early(self) -> bool:
        return self.variance_days < 0


def variance_row(task: BaselinedTask) -> ScheduleVarianceRow:
    baseline_start = task.baseline_start
    baseline_end = task.baseline_end
    actual_start = task.actual_start or task.start_date
    actual_end = task.actual_end or task.end_date

    if baseline_start and baseline_end:
        planned_duration = days_between(baseline_start, baseline_end)
    else:
        planned_duration = task.duration or 0

    actual_duration = (
        days_between(actual_start, actual_end) if actual_start and actual_end else 0
    )

    variance_days = (
        signed_days_between(baseline_end, actual_end) if baseline_end and actual_end else 0
    )

    return ScheduleVarianceRow(
        task_id=task.id,
        task_name=task.name,
        baseline_start=baseline_start,
        baseline_end=baseline_end,
        actual_start=actual_start,
        actual_end=actual_end,
        planned_duration=planned_duration,
        actual_duration=actual_duration,
        variance_days=variance_days,
    )


@traced_engine("schedule_variance", "1.0")
def compute_schedule_variance(tasks: Sequence[BaselinedTask]) -> list[ScheduleVarianceRow]:
    return [variance_row(task) for task in tasks]
