"""
SQLAlchemy ORM persistence models for the Project Scheduling module.

Responsibility
--------------
Provide database-backed persistence for scheduling entities: projects,
milestones, tasks, task dependencies, weather delays, and resource
allocations.  Transient computation results (``EVMSnapshot``, CPM
schedules, variance rows, loading rows) are derived on demand and do not
require ORM persistence.

Architecture position
---------------------
**Modules layer** -- ORM models consumed by ``ProjectScheduleService`` for
persistence.  Inherits from ``TrackedBase`` (kernel db layer).

Invariants enforced
-------------------
* Costs, hours and percentages use ``Decimal`` (Numeric(18,4)) -- NEVER float.
* Enum fields stored as String(50) for readability and portability.
* ``TaskDependencyModel`` rows are unique per (task_id, predecessor_id).
* ``WeatherDelayModel.impacted_task_ids`` is a JSON list of task id strings;
  the ids are not foreign keys and may reference deleted tasks.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from schedule_kernel.db.base import TrackedBase

# ---------------------------------------------------------------------------
# ProjectModel
# ---------------------------------------------------------------------------


class ProjectModel(TrackedBase):
    """
    A scheduled project.

    Maps to the ``Project`` DTO in ``schedule_modules.project.models``.

    Guarantees:
        - ``status`` follows the lifecycle in ``PROJECT_WORKFLOW``.
        - ``budgeted_cost`` is the BAC used by EVM.
    """

    __tablename__ = "schedule_projects"

    __table_args__ = (
        Index("idx_schedule_project_status", "status"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    job_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="planning")
    start_date: Mapped[date | None] = mapped_column(nullable=True)
    end_date: Mapped[date | None] = mapped_column(nullable=True)
    baseline_start_date: Mapped[date | None] = mapped_column(nullable=True)
    baseline_end_date: Mapped[date | None] = mapped_column(nullable=True)
    manager: Mapped[str | None] = mapped_column(String(255), nullable=True)
    percent_complete: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    percent_complete_method: Mapped[str] = mapped_column(
        String(50), nullable=False, default="manual"
    )
    budgeted_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    actual_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    earned_value: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self):
        from schedule_modules.project.models import (
            PercentCompleteMethod,
            Project,
            ProjectStatus,
        )

        return Project(
            id=self.id,
            name=self.name,
            status=ProjectStatus(self.status),
            job_id=self.job_id,
            start_date=self.start_date,
            end_date=self.end_date,
            baseline_start_date=self.baseline_start_date,
            baseline_end_date=self.baseline_end_date,
            manager=self.manager,
            percent_complete=self.percent_complete,
            percent_complete_method=PercentCompleteMethod(self.percent_complete_method),
            budgeted_cost=self.budgeted_cost,
            actual_cost=self.actual_cost,
            earned_value=self.earned_value,
            description=self.description,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ProjectModel":
        return cls(
            id=dto.id,
            name=dto.name,
            status=dto.status.value,
            job_id=dto.job_id,
            start_date=dto.start_date,
            end_date=dto.end_date,
            baseline_start_date=dto.baseline_start_date,
            baseline_end_date=dto.baseline_end_date,
            manager=dto.manager,
            percent_complete=dto.percent_complete,
            percent_complete_method=dto.percent_complete_method.value,
            budgeted_cost=dto.budgeted_cost,
            actual_cost=dto.actual_cost,
            earned_value=dto.earned_value,
            description=dto.description,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ProjectModel {self.name} [{self.status}]>"


# ---------------------------------------------------------------------------
# MilestoneModel
# ---------------------------------------------------------------------------


class MilestoneModel(TrackedBase):
    """
    A dated checkpoint within a project.

    Maps to the ``Milestone`` DTO in ``schedule_modules.project.models``.
    """

    __tablename__ = "schedule_milestones"

    __table_args__ = (
        Index("idx_schedule_milestone_project", "project_id"),
    )

    project_id: Mapped[UUID] = mapped_column(ForeignKey("schedule_projects.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    due_date: Mapped[date | None] = mapped_column(nullable=True)
    actual_date: Mapped[date | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    is_critical: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self):
        from schedule_modules.project.models import Milestone, MilestoneStatus

        return Milestone(
            id=self.id,
            project_id=self.project_id,
            name=self.name,
            due_date=self.due_date,
            actual_date=self.actual_date,
            status=MilestoneStatus(self.status),
            is_critical=self.is_critical,
            description=self.description,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "MilestoneModel":
        return cls(
            id=dto.id,
            project_id=dto.project_id,
            name=dto.name,
            due_date=dto.due_date,
            actual_date=dto.actual_date,
            status=dto.status.value,
            is_critical=dto.is_critical,
            description=dto.description,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<MilestoneModel {self.name} [{self.status}]>"


# ---------------------------------------------------------------------------
# TaskModel
# ---------------------------------------------------------------------------


class TaskModel(TrackedBase):
    """
    A schedulable unit of work.

    Maps to the ``Task`` DTO in ``schedule_modules.project.models``.

    Guarantees:
        - Belongs to exactly one ``ProjectModel``.
        - ``is_critical_path`` is written only by the CPM run.
    """

    __tablename__ = "schedule_tasks"

    __table_args__ = (
        Index("idx_schedule_task_project", "project_id"),
        Index("idx_schedule_task_project_order", "project_id", "sort_order"),
        Index("idx_schedule_task_milestone", "milestone_id"),
    )

    project_id: Mapped[UUID] = mapped_column(ForeignKey("schedule_projects.id"), nullable=False)
    milestone_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("schedule_milestones.id"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    assignee: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_date: Mapped[date | None] = mapped_column(nullable=True)
    end_date: Mapped[date | None] = mapped_column(nullable=True)
    baseline_start: Mapped[date | None] = mapped_column(nullable=True)
    baseline_end: Mapped[date | None] = mapped_column(nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    actual_start: Mapped[date | None] = mapped_column(nullable=True)
    actual_end: Mapped[date | None] = mapped_column(nullable=True)
    percent_complete: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="not_started")
    is_critical_path: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    budget_hours: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    actual_hours: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    budget_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    actual_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def to_dto(self):
        from schedule_modules.project.models import Task, TaskStatus

        return Task(
            id=self.id,
            project_id=self.project_id,
            name=self.name,
            milestone_id=self.milestone_id,
            description=self.description,
            assignee=self.assignee,
            start_date=self.start_date,
            end_date=self.end_date,
            baseline_start=self.baseline_start,
            baseline_end=self.baseline_end,
            duration=self.duration,
            actual_start=self.actual_start,
            actual_end=self.actual_end,
            percent_complete=self.percent_complete,
            status=TaskStatus(self.status),
            is_critical_path=self.is_critical_path,
            budget_hours=self.budget_hours,
            actual_hours=self.actual_hours,
            budget_cost=self.budget_cost,
            actual_cost=self.actual_cost,
            sort_order=self.sort_order,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "TaskModel":
        return cls(
            id=dto.id,
            project_id=dto.project_id,
            milestone_id=dto.milestone_id,
            name=dto.name,
            description=dto.description,
            assignee=dto.assignee,
            start_date=dto.start_date,
            end_date=dto.end_date,
            baseline_start=dto.baseline_start,
            baseline_end=dto.baseline_end,
            duration=dto.duration,
            actual_start=dto.actual_start,
            actual_end=dto.actual_end,
            percent_complete=dto.percent_complete,
            status=dto.status.value,
            is_critical_path=dto.is_critical_path,
            budget_hours=dto.budget_hours,
            actual_hours=dto.actual_hours,
            budget_cost=dto.budget_cost,
            actual_cost=dto.actual_cost,
            sort_order=dto.sort_order,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<TaskModel {self.name} [{self.status}] {self.percent_complete}%>"


# ---------------------------------------------------------------------------
# TaskDependencyModel
# ---------------------------------------------------------------------------


class TaskDependencyModel(TrackedBase):
    """
    Directed edge ``predecessor_id -> task_id``.

    Maps to the ``TaskDependency`` DTO in ``schedule_modules.project.models``.

    Guarantees:
        - (task_id, predecessor_id) is unique.
        - Both ends belong to the same project (enforced by the service).
    """

    __tablename__ = "schedule_task_dependencies"

    __table_args__ = (
        UniqueConstraint("task_id", "predecessor_id", name="uq_schedule_dependency_pair"),
        Index("idx_schedule_dependency_task", "task_id"),
        Index("idx_schedule_dependency_predecessor", "predecessor_id"),
    )

    task_id: Mapped[UUID] = mapped_column(ForeignKey("schedule_tasks.id"), nullable=False)
    predecessor_id: Mapped[UUID] = mapped_column(ForeignKey("schedule_tasks.id"), nullable=False)
    dependency_type: Mapped[str] = mapped_column(String(10), nullable=False, default="FS")
    lag: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def to_dto(self):
        from schedule_modules.project.models import DependencyType, TaskDependency

        return TaskDependency(
            id=self.id,
            task_id=self.task_id,
            predecessor_id=self.predecessor_id,
            dependency_type=DependencyType(self.dependency_type),
            lag=self.lag,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "TaskDependencyModel":
        return cls(
            id=dto.id,
            task_id=dto.task_id,
            predecessor_id=dto.predecessor_id,
            dependency_type=dto.dependency_type.value,
            lag=dto.lag,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<TaskDependencyModel {self.predecessor_id} -> {self.task_id} "
            f"[{self.dependency_type}{self.lag:+d}]>"
        )


# ---------------------------------------------------------------------------
# WeatherDelayModel
# ---------------------------------------------------------------------------


class WeatherDelayModel(TrackedBase):
    """
    Hours lost to weather on one day.

    Maps to the ``WeatherDelay`` DTO in ``schedule_modules.project.models``.
    """

    __tablename__ = "schedule_weather_delays"

    __table_args__ = (
        Index("idx_schedule_weather_project_date", "project_id", "delay_date"),
    )

    project_id: Mapped[UUID] = mapped_column(ForeignKey("schedule_projects.id"), nullable=False)
    delay_date: Mapped[date] = mapped_column(nullable=False)
    weather_type: Mapped[str] = mapped_column(String(50), nullable=False)
    hours_lost: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    impacted_task_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def to_dto(self):
        from schedule_modules.project.models import WeatherDelay, WeatherType

        return WeatherDelay(
            id=self.id,
            project_id=self.project_id,
            delay_date=self.delay_date,
            weather_type=WeatherType(self.weather_type),
            hours_lost=self.hours_lost,
            description=self.description,
            impacted_task_ids=tuple(UUID(tid) for tid in self.impacted_task_ids or ()),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "WeatherDelayModel":
        return cls(
            id=dto.id,
            project_id=dto.project_id,
            delay_date=dto.delay_date,
            weather_type=dto.weather_type.value,
            hours_lost=dto.hours_lost,
            description=dto.description,
            impacted_task_ids=[str(tid) for tid in dto.impacted_task_ids],
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<WeatherDelayModel {self.delay_date} {self.weather_type} {self.hours_lost}h>"


# ---------------------------------------------------------------------------
# ResourceAllocationModel
# ---------------------------------------------------------------------------


class ResourceAllocationModel(TrackedBase):
    """
    Hours of a labor or equipment resource over an optional date window.

    Maps to the ``ResourceAllocation`` DTO in ``schedule_modules.project.models``.

    Guarantees:
        - ``task_id`` is NULL for project-level allocations.
    """

    __tablename__ = "schedule_resource_allocations"

    __table_args__ = (
        Index("idx_schedule_allocation_project", "project_id"),
        Index("idx_schedule_allocation_task", "task_id"),
    )

    project_id: Mapped[UUID] = mapped_column(ForeignKey("schedule_projects.id"), nullable=False)
    task_id: Mapped[UUID | None] = mapped_column(ForeignKey("schedule_tasks.id"), nullable=True)
    resource_category: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    hours: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    start_date: Mapped[date | None] = mapped_column(nullable=True)
    end_date: Mapped[date | None] = mapped_column(nullable=True)

    def to_dto(self):
        from schedule_modules.project.models import ResourceAllocation, ResourceCategory

        return ResourceAllocation(
            id=self.id,
            project_id=self.project_id,
            resource_category=ResourceCategory(self.resource_category),
            hours=self.hours,
            task_id=self.task_id,
            resource_id=self.resource_id,
            start_date=self.start_date,
            end_date=self.end_date,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ResourceAllocationModel":
        return cls(
            id=dto.id,
            project_id=dto.project_id,
            task_id=dto.task_id,
            resource_category=dto.resource_category.value,
            resource_id=dto.resource_id,
            hours=dto.hours,
            start_date=dto.start_date,
            end_date=dto.end_date,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ResourceAllocationModel {self.resource_category} {self.hours}h>"
