"""
Project Scheduling Domain Models (``schedule_modules.project.models``).

Responsibility
--------------
Frozen dataclass value objects representing the nouns of project
scheduling: projects, milestones, tasks, task dependencies, weather delays,
resource allocations, and earned-value (EVM) snapshots.  Engine result
types (variance rows, delay impact, loading rows, CPM results) are
re-exported so callers import every scheduling noun from one place.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Returned by
``ProjectScheduleService``; satisfy the engines' input protocols directly.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* Costs, hours and percentages are ``Decimal``; durations and lags are
  whole days (``int``).
* Task duration >= 0 and 0 <= percent_complete <= 100.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from schedule_engines.cpm import CriticalPathResult, TaskSchedule
from schedule_engines.delay_impact import DelayImpact, WeatherType
from schedule_engines.percent_complete import PercentCompleteMethod, TaskStatus
from schedule_engines.resource_loading import ResourceCategory, ResourceLoadingRow
from schedule_engines.schedule_variance import ScheduleVarianceRow
from schedule_engines.task_graph import DependencyType


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    LATE = "late"


@dataclass(frozen=True)
class Project:
    """Scheduling root.  Cost fields are maintained by callers and read by EVM."""
    id: UUID
    name: str
    status: ProjectStatus = ProjectStatus.PLANNING
    job_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    baseline_start_date: date | None = None
    baseline_end_date: date | None = None
    manager: str | None = None
    percent_complete: Decimal = Decimal("0")
    percent_complete_method: PercentCompleteMethod = PercentCompleteMethod.MANUAL
    budgeted_cost: Decimal = Decimal("0")
    actual_cost: Decimal = Decimal("0")
    earned_value: Decimal = Decimal("0")
    description: str | None = None


@dataclass(frozen=True)
class Milestone:
    id: UUID
    project_id: UUID
    name: str
    due_date: date | None = None
    actual_date: date | None = None
    status: MilestoneStatus = MilestoneStatus.PENDING
    is_critical: bool = False
    description: str | None = None


@dataclass(frozen=True)
class Task:
    """
    Atomic schedulable unit.

    ``is_critical_path`` is derived by the CPM run and only as fresh as the
    last run; ``sort_order`` is display ordering.
    """
    id: UUID
    project_id: UUID
    name: str
    milestone_id: UUID | None = None
    description: str | None = None
    assignee: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    baseline_start: date | None = None
    baseline_end: date | None = None
    duration: int = 0
    actual_start: date | None = None
    actual_end: date | None = None
    percent_complete: Decimal = Decimal("0")
    status: TaskStatus = TaskStatus.NOT_STARTED
    is_critical_path: bool = False
    budget_hours: Decimal = Decimal("0")
    actual_hours: Decimal = Decimal("0")
    budget_cost: Decimal = Decimal("0")
    actual_cost: Decimal = Decimal("0")
    sort_order: int = 0

    def __post_init__(self) -> None:
        if self.duration < 0:
            raise ValueError(f"Task duration cannot be negative: {self.duration}")
        if not Decimal("0") <= self.percent_complete <= Decimal("100"):
            raise ValueError(
                f"percent_complete must be within [0, 100]: {self.percent_complete}"
            )


@dataclass(frozen=True)
class TaskDependency:
    """``task_id`` depends on ``predecessor_id``; negative lag is a lead."""
    id: UUID
    task_id: UUID
    predecessor_id: UUID
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag: int = 0


@dataclass(frozen=True)
class WeatherDelay:
    id: UUID
    project_id: UUID
    delay_date: date
    weather_type: WeatherType
    hours_lost: Decimal
    description: str | None = None
    impacted_task_ids: tuple[UUID, ...] = ()


@dataclass(frozen=True)
class ResourceAllocation:
    """Flat quantity of hours spread evenly over an optional date window."""
    id: UUID
    project_id: UUID
    resource_category: ResourceCategory
    hours: Decimal
    task_id: UUID | None = None
    resource_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    @property
    def is_project_level(self) -> bool:
        return self.task_id is None


@dataclass(frozen=True)
class EVMSnapshot:
    """Earned Value Management snapshot at a point in time."""
    project_id: UUID
    as_of_date: date
    bcws: Decimal  # Budgeted Cost of Work Scheduled (Planned Value)
    bcwp: Decimal  # Budgeted Cost of Work Performed (Earned Value)
    acwp: Decimal  # Actual Cost of Work Performed
    bac: Decimal   # Budget at Completion (project budgeted cost)
    cpi: Decimal = Decimal("0")   # Cost Performance Index
    spi: Decimal = Decimal("0")   # Schedule Performance Index
    eac: Decimal = Decimal("0")   # Estimate at Completion
    etc: Decimal = Decimal("0")   # Estimate to Complete
    vac: Decimal = Decimal("0")   # Variance at Completion
    cv: Decimal = Decimal("0")    # Cost Variance
    sv: Decimal = Decimal("0")    # Schedule Variance


__all__ = [
    "CriticalPathResult",
    "DelayImpact",
    "DependencyType",
    "EVMSnapshot",
    "Milestone",
    "MilestoneStatus",
    "PercentCompleteMethod",
    "Project",
    "ProjectStatus",
    "ResourceAllocation",
    "ResourceCategory",
    "ResourceLoadingRow",
    "ScheduleVarianceRow",
    "Task",
    "TaskDependency",
    "TaskSchedule",
    "TaskStatus",
    "WeatherDelay",
    "WeatherType",
]
