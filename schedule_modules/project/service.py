"""
Project Scheduling Module Service (``schedule_modules.project.service``).

Responsibility
--------------
Orchestrates project scheduling operations -- record management for
projects, milestones, tasks, dependencies, weather delays and resource
allocations; the Critical Path Method (CPM) run and its flag
reconciliation; percent-complete updates; Earned Value Management (EVM)
snapshots; and the look-ahead, schedule-variance, delay-impact and
resource-loading reports -- by delegating pure computation to
``schedule_engines`` and ``evm.py`` and persistence to the ORM models.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ProjectScheduleService`` is the sole
public entry point for scheduling operations.  It loads records through
the SQLAlchemy ``Session``, hands plain DTOs to the engines, and writes
the results back.

Invariants enforced
-------------------
* Each public write method owns the transaction boundary
  (``commit`` on success, ``rollback`` on failure or exception).
* Every project-keyed or task-keyed operation resolves its root record
  first and raises the matching not-found error before computing.
* All reads of an operation happen before any of its writes.
* A dependency that would close a cycle is rejected before insert.
* The CPM run writes only tasks whose critical flag changed, in a single
  UPDATE statement; an unchanged re-run issues no writes.
* "Today" comes from the injected ``Clock``; every time-sensitive method
  also accepts an explicit ``as_of`` date.

Failure modes
-------------
* ``NotFoundError`` subclasses for unknown project/task/milestone/dependency.
* ``InvalidInputError`` subclasses for self, cross-project and duplicate
  dependencies, allocations against another project's task, impacted task
  ids that are not UUIDs, unknown percent-complete methods, negative
  look-ahead windows, inverted date ranges, and disallowed status
  transitions.
* ``DependencyCycleError`` at dependency creation, ``ScheduleCycleError``
  when a stored graph is cyclic during CPM.
* Store errors: session rolled back, exception re-raised.

Audit relevance
---------------
Structured log events emitted at operation start and commit for every
public write method, carrying project and task ids.  Domain events are
published after commit through ``EventNotifier``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from schedule_config.schema import SchedulingConfig
from schedule_engines.cpm import CriticalPathCalculator, CriticalPathResult
from schedule_engines.delay_impact import DelayImpact, calculate_delay_impact
from schedule_engines.look_ahead import select_look_ahead
from schedule_engines.percent_complete import (
    PercentCompleteMethod,
    TaskStatus,
    resolve_percent_complete,
)
from schedule_engines.resource_loading import ResourceLoadingRow, project_resource_loading
from schedule_engines.schedule_variance import ScheduleVarianceRow, compute_schedule_variance
from schedule_engines.task_graph import DependencyEdge, DependencyType, TaskGraph, TaskNode
from schedule_kernel.domain.clock import Clock, SystemClock
from schedule_kernel.domain.dates import parse_date
from schedule_kernel.domain.numeric import HUNDRED, ZERO, to_decimal
from schedule_kernel.events import EventNotifier
from schedule_kernel.exceptions import (
    CrossProjectDependencyError,
    DependencyCycleError,
    DependencyNotFoundError,
    DuplicateDependencyError,
    InvalidDateRangeError,
    InvalidStatusTransitionError,
    InvalidTaskReferenceError,
    MilestoneNotFoundError,
    ProjectNotFoundError,
    SelfDependencyError,
    TaskNotFoundError,
    TaskProjectMismatchError,
)
from schedule_kernel.logging_config import LogContext, get_logger
from schedule_modules.project.config import ProjectScheduleConfig
from schedule_modules.project.evm import (
    calculate_acwp,
    calculate_bcwp,
    calculate_bcws,
    calculate_cpi,
    calculate_cv,
    calculate_eac,
    calculate_etc,
    calculate_spi,
    calculate_sv,
    calculate_vac,
)
from schedule_modules.project.models import (
    EVMSnapshot,
    Milestone,
    MilestoneStatus,
    Project,
    ProjectStatus,
    ResourceAllocation,
    ResourceCategory,
    Task,
    TaskDependency,
    WeatherDelay,
    WeatherType,
)
from schedule_modules.project.orm import (
    MilestoneModel,
    ProjectModel,
    ResourceAllocationModel,
    TaskDependencyModel,
    TaskModel,
    WeatherDelayModel,
)
from schedule_modules.project.workflows import PROJECT_WORKFLOW, can_transition

logger = get_logger("modules.project.service")

SYSTEM_ACTOR_ID = UUID(int=0)

_DATE_FIELDS = frozenset({
    "start_date",
    "end_date",
    "baseline_start_date",
    "baseline_end_date",
    "baseline_start",
    "baseline_end",
    "actual_start",
    "actual_end",
    "due_date",
    "actual_date",
})

_DECIMAL_FIELDS = frozenset({
    "budgeted_cost",
    "actual_cost",
    "earned_value",
    "budget_hours",
    "actual_hours",
    "budget_cost",
})

# Status, percent complete and the critical flag have dedicated operations.
_PROJECT_EDITABLE_FIELDS = frozenset({
    "name",
    "job_id",
    "start_date",
    "end_date",
    "baseline_start_date",
    "baseline_end_date",
    "manager",
    "budgeted_cost",
    "actual_cost",
    "earned_value",
    "description",
})

_MILESTONE_EDITABLE_FIELDS = frozenset({
    "name",
    "due_date",
    "actual_date",
    "is_critical",
    "description",
})

_TASK_EDITABLE_FIELDS = frozenset({
    "name",
    "milestone_id",
    "description",
    "assignee",
    "start_date",
    "end_date",
    "baseline_start",
    "baseline_end",
    "duration",
    "actual_start",
    "actual_end",
    "budget_hours",
    "actual_hours",
    "budget_cost",
    "actual_cost",
    "sort_order",
})


def _normalise_changes(changes: dict[str, Any], allowed: frozenset[str], entity: str) -> dict[str, Any]:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValueError(f"Cannot update {entity} field(s): {', '.join(unknown)}")
    normalised: dict[str, Any] = {}
    for key, value in changes.items():
        if key in _DATE_FIELDS:
            value = parse_date(value)
        elif key in _DECIMAL_FIELDS:
            value = to_decimal(value)
        normalised[key] = value
    return normalised


def _task_reference(value: UUID | str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidTaskReferenceError(str(value)) from None


class ProjectScheduleService:
    """
    Orchestrates project scheduling through the pure engines and the ORM.

    Contract
    --------
    * Write methods return the updated DTO (or list of DTOs) after commit.
    * Report methods (``calculate_evm``, ``get_look_ahead``,
      ``get_schedule_variance``, ``calculate_delay_impact``,
      ``get_resource_loading``, ``compute_schedule``) never write.

    Guarantees
    ----------
    * Session is committed only after every validation has passed.
    * Clock is injectable for deterministic testing.
    * All cost, hour and percentage arithmetic uses ``Decimal``.

    Non-goals
    ---------
    * Does NOT maintain project-level cost totals (``budgeted_cost``,
      ``actual_cost``, ``earned_value``); callers set them.
    * Does NOT delete projects or cascade deletions.
    * Does NOT lock; concurrent CPM runs on one project are last-writer-wins.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        notifier: EventNotifier | None = None,
        config: ProjectScheduleConfig | SchedulingConfig | None = None,
    ):
        if isinstance(config, SchedulingConfig):
            config = ProjectScheduleConfig.from_scheduling_config(config)
        self._session = session
        self._clock = clock or SystemClock()
        self._notifier = notifier or EventNotifier()
        self._config = config or ProjectScheduleConfig()
        self._cpm = CriticalPathCalculator(self._config.critical_float_tolerance)

    @property
    def config(self) -> ProjectScheduleConfig:
        return self._config

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _today(self, as_of: date | str | None = None) -> date:
        return parse_date(as_of) or self._clock.today()

    def _publish(self, event_type: str, payload: dict[str, Any]) -> None:
        if self._config.publish_events:
            self._notifier.publish(event_type, payload)

    def _require_project(self, project_id: UUID) -> ProjectModel:
        row = self._session.get(ProjectModel, project_id)
        if row is None:
            raise ProjectNotFoundError(str(project_id))
        return row

    def _require_task(self, task_id: UUID, role: str = "task") -> TaskModel:
        row = self._session.get(TaskModel, task_id)
        if row is None:
            raise TaskNotFoundError(str(task_id), role=role)
        return row

    def _require_milestone(self, milestone_id: UUID) -> MilestoneModel:
        row = self._session.get(MilestoneModel, milestone_id)
        if row is None:
            raise MilestoneNotFoundError(str(milestone_id))
        return row

    def _task_rows(self, project_id: UUID) -> list[TaskModel]:
        stmt = (
            select(TaskModel)
            .where(TaskModel.project_id == project_id)
            .order_by(TaskModel.sort_order, TaskModel.name, TaskModel.id)
            .execution_options(populate_existing=True)
        )
        return list(self._session.scalars(stmt))

    def _dependency_rows(self, project_id: UUID) -> list[TaskDependencyModel]:
        """Dependencies whose dependent task belongs to ``project_id``."""
        stmt = (
            select(TaskDependencyModel)
            .join(TaskModel, TaskModel.id == TaskDependencyModel.task_id)
            .where(TaskModel.project_id == project_id)
            .order_by(TaskDependencyModel.created_at, TaskDependencyModel.id)
        )
        return list(self._session.scalars(stmt))

    def _tasks(self, project_id: UUID) -> list[Task]:
        return [row.to_dto() for row in self._task_rows(project_id)]

    def _build_graph(self, project_id: UUID) -> TaskGraph:
        nodes = [
            TaskNode(task_id=row.id, duration=row.duration, name=row.name)
            for row in self._task_rows(project_id)
        ]
        edges = [
            DependencyEdge(
                predecessor_id=dep.predecessor_id,
                task_id=dep.task_id,
                lag=dep.lag,
                dependency_type=DependencyType(dep.dependency_type),
            )
            for dep in self._dependency_rows(project_id)
        ]
        return TaskGraph(nodes, edges)

    @staticmethod
    def _touch(row: Any, actor_id: UUID) -> None:
        row.updated_by_id = actor_id
        row.version = (row.version or 0) + 1

    # =========================================================================
    # Projects
    # =========================================================================

    def create_project(
        self,
        name: str,
        *,
        status: ProjectStatus | str = ProjectStatus.PLANNING,
        job_id: str | None = None,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        baseline_start_date: date | str | None = None,
        baseline_end_date: date | str | None = None,
        manager: str | None = None,
        percent_complete: Decimal | int | str = ZERO,
        percent_complete_method: PercentCompleteMethod | str | None = None,
        budgeted_cost: Decimal | int | str = ZERO,
        actual_cost: Decimal | int | str = ZERO,
        earned_value: Decimal | int | str = ZERO,
        description: str | None = None,
        actor_id: UUID | None = None,
    ) -> Project:
        """Create a project (setup only, no scheduling)."""
        actor = actor_id or SYSTEM_ACTOR_ID
        project = Project(
            id=uuid4(),
            name=name,
            status=ProjectStatus(status),
            job_id=job_id,
            start_date=parse_date(start_date),
            end_date=parse_date(end_date),
            baseline_start_date=parse_date(baseline_start_date),
            baseline_end_date=parse_date(baseline_end_date),
            manager=manager,
            percent_complete=to_decimal(percent_complete),
            percent_complete_method=PercentCompleteMethod.coerce(
                percent_complete_method or self._config.default_percent_complete_method
            ),
            budgeted_cost=to_decimal(budgeted_cost),
            actual_cost=to_decimal(actual_cost),
            earned_value=to_decimal(earned_value),
            description=description,
        )
        try:
            self._session.add(ProjectModel.from_dto(project, created_by_id=actor))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("project_created", extra={
            "project_id": str(project.id),
            "status": project.status.value,
        })
        self._publish("project.created", {"project_id": str(project.id), "name": project.name})
        return project

    def get_project(self, project_id: UUID) -> Project | None:
        row = self._session.get(ProjectModel, project_id)
        return row.to_dto() if row is not None else None

    def list_projects(
        self,
        status: ProjectStatus | str | None = None,
        job_id: str | None = None,
    ) -> list[Project]:
        """Projects ordered by name, optionally filtered by status and job."""
        stmt = select(ProjectModel)
        if status is not None:
            stmt = stmt.where(ProjectModel.status == ProjectStatus(status).value)
        if job_id is not None:
            stmt = stmt.where(ProjectModel.job_id == job_id)
        stmt = stmt.order_by(ProjectModel.name)
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def update_project(
        self,
        project_id: UUID,
        actor_id: UUID | None = None,
        **changes: Any,
    ) -> Project:
        """
        Update descriptive, date and cost fields of a project.

        Raises:
            ProjectNotFoundError: unknown project.
            ValueError: a field is unknown or owned by another operation.
        """
        actor = actor_id or SYSTEM_ACTOR_ID
        normalised = _normalise_changes(changes, _PROJECT_EDITABLE_FIELDS, "project")
        try:
            row = self._require_project(project_id)
            for key, value in normalised.items():
                setattr(row, key, value)
            self._touch(row, actor)
            self._session.commit()
            project = row.to_dto()
        except Exception:
            self._session.rollback()
            raise

        logger.info("project_updated", extra={
            "project_id": str(project_id),
            "fields": sorted(normalised),
        })
        self._publish("project.updated", {
            "project_id": str(project_id),
            "fields": sorted(normalised),
        })
        return project

    def change_project_status(
        self,
        project_id: UUID,
        new_status: ProjectStatus | str,
        actor_id: UUID | None = None,
    ) -> Project:
        """Move a project along its lifecycle (``PROJECT_WORKFLOW``)."""
        actor = actor_id or SYSTEM_ACTOR_ID
        target = ProjectStatus(new_status)
        try:
            row = self._require_project(project_id)
            current = row.status
            if not can_transition(PROJECT_WORKFLOW, current, target.value):
                raise InvalidStatusTransitionError(str(project_id), current, target.value)
            row.status = target.value
            self._touch(row, actor)
            self._session.commit()
            project = row.to_dto()
        except Exception:
            self._session.rollback()
            raise

        logger.info("project_status_changed", extra={
            "project_id": str(project_id),
            "from_status": current,
            "to_status": target.value,
        })
        self._publish("project.updated", {
            "project_id": str(project_id),
            "fields": ["status"],
            "from_status": current,
            "to_status": target.value,
        })
        return project

    # =========================================================================
    # Milestones
    # =========================================================================

    def create_milestone(
        self,
        project_id: UUID,
        name: str,
        *,
        due_date: date | str | None = None,
        is_critical: bool = False,
        description: str | None = None,
        actor_id: UUID | None = None,
    ) -> Milestone:
        actor = actor_id or SYSTEM_ACTOR_ID
        try:
            self._require_project(project_id)
            milestone = Milestone(
                id=uuid4(),
                project_id=project_id,
                name=name,
                due_date=parse_date(due_date),
                is_critical=is_critical,
                description=description,
            )
            self._session.add(MilestoneModel.from_dto(milestone, created_by_id=actor))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return milestone

    def complete_milestone(
        self,
        milestone_id: UUID,
        actual_date: date | str | None = None,
        actor_id: UUID | None = None,
    ) -> Milestone:
        """Mark a milestone completed; ``actual_date`` defaults to today."""
        actor = actor_id or SYSTEM_ACTOR_ID
        try:
            row = self._require_milestone(milestone_id)
            row.status = MilestoneStatus.COMPLETED.value
            row.actual_date = self._today(actual_date)
            self._touch(row, actor)
            self._session.commit()
            milestone = row.to_dto()
        except Exception:
            self._session.rollback()
            raise

        logger.info("milestone_completed", extra={
            "project_id": str(milestone.project_id),
            "milestone_id": str(milestone_id),
            "actual_date": milestone.actual_date,
        })
        self._publish("project.milestone.completed", {
            "project_id": str(milestone.project_id),
            "milestone_id": str(milestone_id),
            "actual_date": milestone.actual_date.isoformat(),
        })
        return milestone

    def update_milestone(
        self,
        milestone_id: UUID,
        actor_id: UUID | None = None,
        **changes: Any,
    ) -> Milestone:
        """
        Update name, dates, criticality, description or status of a milestone.

        Raises:
            MilestoneNotFoundError: unknown milestone.
            ValueError: unknown field or status.
        """
        actor = actor_id or SYSTEM_ACTOR_ID
        status = changes.pop("status", None)
        normalised = _normalise_changes(changes, _MILESTONE_EDITABLE_FIELDS, "milestone")
        if status is not None:
            normalised["status"] = MilestoneStatus(status).value
        try:
            row = self._require_milestone(milestone_id)
            for key, value in normalised.items():
                setattr(row, key, value)
            self._touch(row, actor)
            self._session.commit()
            milestone = row.to_dto()
        except Exception:
            self._session.rollback()
            raise

        logger.info("milestone_updated", extra={
            "project_id": str(milestone.project_id),
            "milestone_id": str(milestone_id),
            "fields": sorted(normalised),
        })
        return milestone

    def list_milestones(self, project_id: UUID) -> list[Milestone]:
        """Milestones of a project ordered by due date (undated last)."""
        self._require_project(project_id)
        stmt = (
            select(MilestoneModel)
            .where(MilestoneModel.project_id == project_id)
            .order_by(MilestoneModel.due_date.is_(None), MilestoneModel.due_date, MilestoneModel.name)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    # =========================================================================
    # Tasks
    # =========================================================================

    def create_task(
        self,
        project_id: UUID,
        name: str,
        *,
        milestone_id: UUID | None = None,
        description: str | None = None,
        assignee: str | None = None,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        baseline_start: date | str | None = None,
        baseline_end: date | str | None = None,
        duration: int = 0,
        actual_start: date | str | None = None,
        actual_end: date | str | None = None,
        percent_complete: Decimal | int | str = ZERO,
        status: TaskStatus | str = TaskStatus.NOT_STARTED,
        budget_hours: Decimal | int | str = ZERO,
        actual_hours: Decimal | int | str = ZERO,
        budget_cost: Decimal | int | str = ZERO,
        actual_cost: Decimal | int | str = ZERO,
        sort_order: int = 0,
        actor_id: UUID | None = None,
    ) -> Task:
        """
        Create a task under a project.

        Raises:
            ProjectNotFoundError: unknown project.
            MilestoneNotFoundError: ``milestone_id`` given but unknown.
            ValueError: negative duration or percent outside [0, 100].
        """
        actor = actor_id or SYSTEM_ACTOR_ID
        try:
            self._require_project(project_id)
            if milestone_id is not None:
                self._require_milestone(milestone_id)
            task = Task(
                id=uuid4(),
                project_id=project_id,
                name=name,
                milestone_id=milestone_id,
                description=description,
                assignee=assignee,
                start_date=parse_date(start_date),
                end_date=parse_date(end_date),
                baseline_start=parse_date(baseline_start),
                baseline_end=parse_date(baseline_end),
                duration=duration,
                actual_start=parse_date(actual_start),
                actual_end=parse_date(actual_end),
                percent_complete=to_decimal(percent_complete),
                status=TaskStatus(status),
                budget_hours=to_decimal(budget_hours),
                actual_hours=to_decimal(actual_hours),
                budget_cost=to_decimal(budget_cost),
                actual_cost=to_decimal(actual_cost),
                sort_order=sort_order,
            )
            self._session.add(TaskModel.from_dto(task, created_by_id=actor))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("task_created", extra={
            "project_id": str(project_id),
            "task_id": str(task.id),
            "duration": task.duration,
        })
        self._publish("project.task.created", {
            "project_id": str(project_id),
            "task_id": str(task.id),
            "name": task.name,
        })
        return task

    def get_task(self, task_id: UUID) -> Task | None:
        row = self._session.get(TaskModel, task_id)
        return row.to_dto() if row is not None else None

    def list_tasks(self, project_id: UUID, milestone_id: UUID | None = None) -> list[Task]:
        """Tasks of a project ordered by sort order, optionally for one milestone."""
        self._require_project(project_id)
        tasks = self._tasks(project_id)
        if milestone_id is not None:
            tasks = [t for t in tasks if t.milestone_id == milestone_id]
        return tasks

    def update_task(
        self,
        task_id: UUID,
        actor_id: UUID | None = None,
        **changes: Any,
    ) -> Task:
        """
        Update planning, actual and cost fields of a task.

        Percent complete and status go through ``update_percent_complete``
        or ``complete_task``; the critical flag through the CPM run.

        Raises:
            TaskNotFoundError: unknown task.
            MilestoneNotFoundError: ``milestone_id`` changed to an unknown id.
            ValueError: a field is unknown, owned elsewhere, or invalid.
        """
        actor = actor_id or SYSTEM_ACTOR_ID
        normalised = _normalise_changes(changes, _TASK_EDITABLE_FIELDS, "task")
        try:
            row = self._require_task(task_id)
            if normalised.get("milestone_id") is not None:
                self._require_milestone(normalised["milestone_id"])
            task = replace(row.to_dto(), **normalised)
            for key in normalised:
                setattr(row, key, getattr(task, key))
            self._touch(row, actor)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("task_updated", extra={
            "project_id": str(task.project_id),
            "task_id": str(task_id),
            "fields": sorted(normalised),
        })
        return task

    def complete_task(
        self,
        task_id: UUID,
        actual_end: date | str | None = None,
        actor_id: UUID | None = None,
    ) -> Task:
        """Set status completed and percent 100; ``actual_end`` defaults to today."""
        actor = actor_id or SYSTEM_ACTOR_ID
        try:
            row = self._require_task(task_id)
            row.status = TaskStatus.COMPLETED.value
            row.percent_complete = HUNDRED
            row.actual_end = self._today(actual_end)
            self._touch(row, actor)
            self._session.commit()
            task = row.to_dto()
        except Exception:
            self._session.rollback()
            raise

        logger.info("task_completed", extra={
            "project_id": str(task.project_id),
            "task_id": str(task_id),
            "actual_end": task.actual_end,
        })
        self._publish("project.task.completed", {
            "project_id": str(task.project_id),
            "task_id": str(task_id),
            "actual_end": task.actual_end.isoformat(),
        })
        return task

    # =========================================================================
    # Dependencies
    # =========================================================================

    def add_dependency(
        self,
        task_id: UUID,
        predecessor_id: UUID,
        dependency_type: DependencyType | str | None = None,
        lag: int = 0,
        actor_id: UUID | None = None,
    ) -> TaskDependency:
        """
        Make ``task_id`` depend on ``predecessor_id``.

        Raises:
            TaskNotFoundError: either task is unknown.
            SelfDependencyError: ``task_id == predecessor_id``.
            CrossProjectDependencyError: the tasks are in different projects.
            DuplicateDependencyError: the same link is already stored.
            DependencyCycleError: the new edge would close a cycle.
        """
        actor = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(task_id=str(task_id), actor_id=str(actor)):
            try:
                task = self._require_task(task_id)
                predecessor = self._require_task(predecessor_id, role="predecessor")
                if task_id == predecessor_id:
                    raise SelfDependencyError(str(task_id))
                if task.project_id != predecessor.project_id:
                    raise CrossProjectDependencyError(
                        str(task_id),
                        str(predecessor_id),
                        str(task.project_id),
                        str(predecessor.project_id),
                    )

                existing = self._session.scalars(
                    select(TaskDependencyModel.id).where(
                        TaskDependencyModel.task_id == task_id,
                        TaskDependencyModel.predecessor_id == predecessor_id,
                    )
                ).first()
                if existing is not None:
                    raise DuplicateDependencyError(str(task_id), str(predecessor_id), str(existing))

                graph = self._build_graph(task.project_id)
                cycle = graph.cycle_if_added(predecessor_id, task_id)
                if cycle is not None:
                    raise DependencyCycleError(
                        str(task_id), str(predecessor_id), [str(tid) for tid in cycle]
                    )

                dependency = TaskDependency(
                    id=uuid4(),
                    task_id=task_id,
                    predecessor_id=predecessor_id,
                    dependency_type=DependencyType(
                        dependency_type or self._config.default_dependency_type
                    ),
                    lag=lag,
                )
                self._session.add(TaskDependencyModel.from_dto(dependency, created_by_id=actor))
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info("dependency_added", extra={
                "project_id": str(task.project_id),
                "predecessor_id": str(predecessor_id),
                "dependency_type": dependency.dependency_type.value,
                "lag": lag,
            })
        return dependency

    def remove_dependency(self, dependency_id: UUID) -> None:
        try:
            row = self._session.get(TaskDependencyModel, dependency_id)
            if row is None:
                raise DependencyNotFoundError(str(dependency_id))
            self._session.delete(row)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("dependency_removed", extra={"dependency_id": str(dependency_id)})

    def list_project_dependencies(self, project_id: UUID) -> list[TaskDependency]:
        self._require_project(project_id)
        return [row.to_dto() for row in self._dependency_rows(project_id)]

    def list_task_dependencies(self, task_id: UUID) -> list[TaskDependency]:
        """Dependencies in which ``task_id`` is the dependent task."""
        self._require_task(task_id)
        stmt = (
            select(TaskDependencyModel)
            .where(TaskDependencyModel.task_id == task_id)
            .order_by(TaskDependencyModel.created_at, TaskDependencyModel.id)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    # =========================================================================
    # Critical Path
    # =========================================================================

    def compute_schedule(self, project_id: UUID) -> CriticalPathResult:
        """Run CPM for a project without touching the stored flags."""
        self._require_project(project_id)
        return self._cpm.calculate(self._build_graph(project_id))

    def calculate_critical_path(
        self,
        project_id: UUID,
        actor_id: UUID | None = None,
    ) -> list[Task]:
        """
        Run CPM, reconcile the stored critical flags, return critical tasks.

        Only tasks whose flag differs from the computed criticality are
        written, all in one UPDATE and one commit.  Critical tasks are
        returned in topological order.

        Raises:
            ProjectNotFoundError: unknown project.
            ScheduleCycleError: the stored dependencies contain a cycle.
        """
        actor = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(project_id=str(project_id), actor_id=str(actor)):
            logger.info("critical_path_started")
            try:
                self._require_project(project_id)
                tasks = {task.id: task for task in self._tasks(project_id)}
                result = self._cpm.calculate(self._build_graph(project_id))

                critical = set(result.critical_task_ids)
                changed = [
                    tid for tid, task in tasks.items()
                    if task.is_critical_path != (tid in critical)
                ]
                newly_critical = [tid for tid in changed if tid in critical]

                if changed:
                    stmt = (
                        update(TaskModel)
                        .where(TaskModel.id.in_(changed))
                        .values(
                            is_critical_path=case(
                                (TaskModel.id.in_(newly_critical), True),
                                else_=False,
                            ),
                            updated_by_id=actor,
                            version=TaskModel.version + 1,
                        )
                        .execution_options(synchronize_session="fetch")
                    )
                    self._session.execute(stmt)
                    self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info("critical_path_committed", extra={
                "project_duration": result.project_duration,
                "task_count": len(tasks),
                "critical_count": len(critical),
                "flags_changed": len(changed),
            })

        if changed:
            self._publish("project.critical_path.updated", {
                "project_id": str(project_id),
                "project_duration": result.project_duration,
                "critical_task_ids": [str(tid) for tid in result.critical_task_ids],
                "changed_task_ids": [str(tid) for tid in changed],
            })

        return [
            replace(tasks[tid], is_critical_path=True) for tid in result.critical_task_ids
        ]

    # =========================================================================
    # Percent Complete
    # =========================================================================

    def update_percent_complete(
        self,
        task_id: UUID,
        method: PercentCompleteMethod | str | None = None,
        value: Decimal | int | float | str | None = None,
        actor_id: UUID | None = None,
    ) -> Task:
        """
        Recompute and store a task's percent complete and status.

        ``method`` defaults to the owning project's method; ``value`` is only
        read by the manual method, which requires it.

        Raises:
            TaskNotFoundError: unknown task (checked before computing).
            InvalidPercentCompleteMethodError: unknown method.
            ValueError: manual method without a value.
        """
        actor = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(task_id=str(task_id), actor_id=str(actor)):
            try:
                row = self._require_task(task_id)
                if method is None:
                    method = self._require_project(row.project_id).percent_complete_method
                if PercentCompleteMethod.coerce(method) is PercentCompleteMethod.MANUAL and value is None:
                    raise ValueError("manual percent complete requires a value")
                result = resolve_percent_complete(
                    method=method,
                    current_status=row.status,
                    budget_cost=row.budget_cost,
                    actual_cost=row.actual_cost,
                    budget_hours=row.budget_hours,
                    actual_hours=row.actual_hours,
                    manual_value=value,
                )
                row.percent_complete = result.percent_complete
                row.status = result.status.value
                self._touch(row, actor)
                self._session.commit()
                task = row.to_dto()
            except Exception:
                self._session.rollback()
                raise

            logger.info("percent_complete_updated", extra={
                "project_id": str(task.project_id),
                "method": result.method.value,
                "percent_complete": result.percent_complete,
                "status": result.status.value,
                "previous_status": result.previous_status.value,
            })

        self._publish("project.task.progress_updated", {
            "project_id": str(task.project_id),
            "task_id": str(task_id),
            "method": result.method.value,
            "percent_complete": str(result.percent_complete),
            "status": result.status.value,
            "previous_status": result.previous_status.value,
        })
        return task

    # =========================================================================
    # EVM
    # =========================================================================

    def calculate_evm(
        self,
        project_id: UUID,
        as_of: date | str | None = None,
    ) -> EVMSnapshot:
        """Earned-value snapshot of a project at ``as_of`` (default today)."""
        project = self._require_project(project_id).to_dto()
        as_of_date = self._today(as_of)
        tasks = self._tasks(project_id)

        bac = project.budgeted_cost
        bcws = calculate_bcws(tasks, as_of_date)
        bcwp = calculate_bcwp(tasks)
        acwp = calculate_acwp(tasks)
        cpi = calculate_cpi(bcwp, acwp)
        spi = calculate_spi(bcwp, bcws)
        eac = calculate_eac(bac, cpi)
        etc = calculate_etc(eac, acwp)
        vac = calculate_vac(bac, eac)

        logger.debug("evm_calculated", extra={
            "project_id": str(project_id),
            "as_of": as_of_date,
            "task_count": len(tasks),
            "cpi": cpi,
            "spi": spi,
        })

        return EVMSnapshot(
            project_id=project_id,
            as_of_date=as_of_date,
            bcws=bcws,
            bcwp=bcwp,
            acwp=acwp,
            bac=bac,
            cpi=cpi,
            spi=spi,
            eac=eac,
            etc=etc,
            vac=vac,
            cv=calculate_cv(bcwp, acwp),
            sv=calculate_sv(bcwp, bcws),
        )

    # =========================================================================
    # Reports
    # =========================================================================

    def get_look_ahead(
        self,
        project_id: UUID,
        weeks: int | None = None,
        as_of: date | str | None = None,
    ) -> list[Task]:
        """Tasks overlapping ``[as_of, as_of + weeks*7]``, in sort order."""
        self._require_project(project_id)
        window_weeks = self._config.default_look_ahead_weeks if weeks is None else weeks
        return select_look_ahead(
            self._tasks(project_id),
            as_of=self._today(as_of),
            weeks=window_weeks,
        )

    def get_schedule_variance(self, project_id: UUID) -> list[ScheduleVarianceRow]:
        self._require_project(project_id)
        return compute_schedule_variance(self._tasks(project_id))

    def calculate_delay_impact(self, project_id: UUID) -> DelayImpact:
        """Roll up every weather delay logged against a project."""
        return calculate_delay_impact(
            self.list_weather_delays(project_id),
            hours_per_day=self._config.hours_per_day,
        )

    def get_resource_loading(
        self,
        project_id: UUID,
        start: date | str,
        end: date | str,
    ) -> list[ResourceLoadingRow]:
        """Daily labor/equipment hours for every day of ``[start, end]``."""
        start_date = parse_date(start)
        end_date = parse_date(end)
        if start_date is None or end_date is None:
            raise InvalidDateRangeError(str(start), str(end))
        self._require_project(project_id)
        stmt = select(ResourceAllocationModel).where(
            ResourceAllocationModel.project_id == project_id
        )
        allocations = [row.to_dto() for row in self._session.scalars(stmt)]
        return project_resource_loading(allocations, start=start_date, end=end_date)

    # =========================================================================
    # Weather Delays
    # =========================================================================

    def log_weather_delay(
        self,
        project_id: UUID,
        delay_date: date | str,
        weather_type: WeatherType | str,
        hours_lost: Decimal | int | str,
        *,
        description: str | None = None,
        impacted_task_ids: Sequence[UUID | str] = (),
        actor_id: UUID | None = None,
    ) -> WeatherDelay:
        """
        Record hours lost to weather.

        Impacted task ids must read as UUIDs; they are not required to
        resolve to stored tasks.

        Raises:
            ProjectNotFoundError: unknown project.
            InvalidTaskReferenceError: an impacted id is not a UUID.
        """
        actor = actor_id or SYSTEM_ACTOR_ID
        parsed = parse_date(delay_date)
        if parsed is None:
            raise ValueError("delay_date is required")
        try:
            self._require_project(project_id)
            if isinstance(impacted_task_ids, (str, UUID)):
                impacted_task_ids = (impacted_task_ids,)
            impacted = tuple(_task_reference(tid) for tid in impacted_task_ids)
            delay = WeatherDelay(
                id=uuid4(),
                project_id=project_id,
                delay_date=parsed,
                weather_type=WeatherType(weather_type),
                hours_lost=to_decimal(hours_lost),
                description=description,
                impacted_task_ids=impacted,
            )
            self._session.add(WeatherDelayModel.from_dto(delay, created_by_id=actor))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("weather_delay_logged", extra={
            "project_id": str(project_id),
            "weather_type": delay.weather_type.value,
            "hours_lost": delay.hours_lost,
        })
        return delay

    def list_weather_delays(self, project_id: UUID) -> list[WeatherDelay]:
        """Weather delays of a project, newest first."""
        self._require_project(project_id)
        stmt = (
            select(WeatherDelayModel)
            .where(WeatherDelayModel.project_id == project_id)
            .order_by(WeatherDelayModel.delay_date.desc(), WeatherDelayModel.id)
        )
        return [row.to_dto() for row in self._session.scalars(stmt)]

    # =========================================================================
    # Resource Allocations
    # =========================================================================

    def allocate_resource(
        self,
        project_id: UUID,
        resource_category: ResourceCategory | str,
        hours: Decimal | int | str,
        *,
        task_id: UUID | None = None,
        resource_id: str | None = None,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        actor_id: UUID | None = None,
    ) -> ResourceAllocation:
        """
        Allocate labor or equipment hours to a project or one of its tasks.

        Raises:
            ProjectNotFoundError: unknown project.
            TaskNotFoundError: ``task_id`` given but unknown.
            TaskProjectMismatchError: ``task_id`` belongs to another project.
            InvalidDateRangeError: ``start_date`` after ``end_date``.
        """
        actor = actor_id or SYSTEM_ACTOR_ID
        window_start = parse_date(start_date)
        window_end = parse_date(end_date)
        if window_start and window_end and window_start > window_end:
            raise InvalidDateRangeError(window_start.isoformat(), window_end.isoformat())
        try:
            self._require_project(project_id)
            if task_id is not None:
                task = self._require_task(task_id)
                if task.project_id != project_id:
                    raise TaskProjectMismatchError(str(task_id), str(task.project_id), str(project_id))
            allocation = ResourceAllocation(
                id=uuid4(),
                project_id=project_id,
                resource_category=ResourceCategory(resource_category),
                hours=to_decimal(hours),
                task_id=task_id,
                resource_id=resource_id,
                start_date=window_start,
                end_date=window_end,
            )
            self._session.add(ResourceAllocationModel.from_dto(allocation, created_by_id=actor))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("resource_allocated", extra={
            "project_id": str(project_id),
            "resource_category": allocation.resource_category.value,
            "hours": allocation.hours,
        })
        return allocation
