"""
Module: schedule_engines.look_ahead
Responsibility:
    Select the tasks whose date span overlaps a forward-looking window of
    ``weeks`` weeks starting at an explicit as-of date.

Architecture position:
    Engines -- pure calculation layer, zero I/O, no clock.

Invariants enforced:
    - Window is [as_of, as_of + weeks * 7] inclusive at both ends.
    - A task's start is its planned start, else its actual start; tasks
      with neither are excluded.
    - A task's end is its planned end, else its actual end, else its start.
    - Included iff start <= window end and end >= as_of.
    - Input order is preserved.

Failure modes:
    - InvalidLookAheadWindowError for negative ``weeks``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol, TypeVar

from schedule_engines.tracer import traced_engine
from schedule_kernel.domain.dates import add_days
from schedule_kernel.exceptions import InvalidLookAheadWindowError


class DatedTask(Protocol):
    @property
    def start_date(self) -> date | None: ...

    @property
    def end_date(self) -> date | None: ...

    @property
    def actual_start(self) -> date | None: ...

    @property
    def actual_end(self) -> date | None: ...


T = TypeVar("T", bound=DatedTask)


@dataclass(frozen=True)
class LookAheadWindow:
    start: date
    end: date
    weeks: int

    @classmethod
    def from_as_of(cls, as_of: date, weeks: int) -> "LookAheadWindow":
        if weeks < 0:
            raise InvalidLookAheadWindowError(weeks)
        return cls(start=as_of, end=add_days(as_of, weeks * 7), weeks=weeks)

    def overlaps(self, task: DatedTask) -> bool:
        task_start = task.start_date or task.actual_start
        if task_start is None:
            return False
        task_end = task.end_date or task.actual_end or task_start
        return task_start <= self.end and task_end >= self.start


@traced_engine("look_ahead", "1.0", fingerprint_fields=("as_of", "weeks"))
def select_look_ahead(tasks: Sequence[T], *, as_of: date, weeks: int) -> list[T]:
    """Tasks overlapping the look-ahead window, in input order."""
    window = LookAheadWindow.from_as_of(as_of, weeks)
    return [task for task in tasks if window.overlaps(task)]
