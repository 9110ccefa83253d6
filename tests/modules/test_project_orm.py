"""ORM round-trip tests for the Project Scheduling module.

Verifies that every scheduling ORM model can be persisted and read back
through ``from_dto`` / ``to_dto``, that TrackedBase metadata is populated,
and that the dependency pair unique constraint rejects duplicates.

Models under test:
    - ProjectModel
    - MilestoneModel
    - TaskModel
    - TaskDependencyModel
    - WeatherDelayModel
    - ResourceAllocationModel
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from schedule_modules.project.models import (
    DependencyType,
    Milestone,
    MilestoneStatus,
    PercentCompleteMethod,
    Project,
    ProjectStatus,
    ResourceAllocation,
    ResourceCategory,
    Task,
    TaskDependency,
    TaskStatus,
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


# ---------------------------------------------------------------------------
# Helpers: persist valid parents for FK needs
# ---------------------------------------------------------------------------


def _make_project(session, test_actor_id, **overrides) -> Project:
    fields = dict(
        id=uuid4(),
        name="Harbor Warehouse",
        status=ProjectStatus.ACTIVE,
        start_date=date(2026, 1, 1),
        budgeted_cost=Decimal("250000.00"),
        percent_complete_method=PercentCompleteMethod.COST,
    )
    fields.update(overrides)
    project = Project(**fields)
    session.add(ProjectModel.from_dto(project, created_by_id=test_actor_id))
    session.flush()
    return project


def _make_task(session, test_actor_id, project_id, **overrides) -> Task:
    fields = dict(id=uuid4(), project_id=project_id, name="Excavate", duration=4)
    fields.update(overrides)
    task = Task(**fields)
    session.add(TaskModel.from_dto(task, created_by_id=test_actor_id))
    session.flush()
    return task


class TestProjectModelORM:
    """Round-trip persistence tests for ProjectModel."""

    def test_round_trip(self, session, test_actor_id):
        project = _make_project(
            session,
            test_actor_id,
            baseline_end_date=date(2026, 9, 30),
            manager="R. Ortiz",
            actual_cost=Decimal("1200.50"),
        )
        session.expunge_all()

        loaded = session.get(ProjectModel, project.id).to_dto()
        assert loaded == project

    def test_tracked_metadata(self, session, test_actor_id):
        project = _make_project(session, test_actor_id)
        row = session.get(ProjectModel, project.id)
        assert row.created_by_id == test_actor_id
        assert row.version == 1
        assert row.created_at is not None

    def test_repr(self, session, test_actor_id):
        project = _make_project(session, test_actor_id)
        assert repr(session.get(ProjectModel, project.id)) == "<ProjectModel Harbor Warehouse [active]>"


class TestMilestoneModelORM:

    def test_round_trip(self, session, test_actor_id):
        project = _make_project(session, test_actor_id)
        milestone = Milestone(
            id=uuid4(),
            project_id=project.id,
            name="Dry-in",
            due_date=date(2026, 4, 1),
            status=MilestoneStatus.PENDING,
            is_critical=True,
        )
        session.add(MilestoneModel.from_dto(milestone, created_by_id=test_actor_id))
        session.flush()
        session.expunge_all()

        assert session.get(MilestoneModel, milestone.id).to_dto() == milestone


class TestTaskModelORM:

    def test_round_trip(self, session, test_actor_id):
        project = _make_project(session, test_actor_id)
        task = _make_task(
            session,
            test_actor_id,
            project.id,
            start_date=date(2026, 1, 5),
            end_date=date(2026, 1, 9),
            baseline_start=date(2026, 1, 5),
            baseline_end=date(2026, 1, 8),
            percent_complete=Decimal("37.50"),
            status=TaskStatus.IN_PROGRESS,
            budget_hours=Decimal("32"),
            budget_cost=Decimal("4800.00"),
            sort_order=3,
        )
        session.expunge_all()

        loaded = session.get(TaskModel, task.id).to_dto()
        assert loaded == task
        assert loaded.status is TaskStatus.IN_PROGRESS

    def test_defaults(self, session, test_actor_id):
        project = _make_project(session, test_actor_id)
        row = TaskModel(project_id=project.id, name="Bare", created_by_id=test_actor_id)
        session.add(row)
        session.flush()

        dto = row.to_dto()
        assert dto.status is TaskStatus.NOT_STARTED
        assert dto.duration == 0
        assert dto.sort_order == 0
        assert dto.is_critical_path is False


class TestTaskDependencyModelORM:

    def test_round_trip(self, session, test_actor_id):
        project = _make_project(session, test_actor_id)
        a = _make_task(session, test_actor_id, project.id, name="A")
        b = _make_task(session, test_actor_id, project.id, name="B")
        dep = TaskDependency(
            id=uuid4(),
            task_id=b.id,
            predecessor_id=a.id,
            dependency_type=DependencyType.START_TO_START,
            lag=-2,
        )
        session.add(TaskDependencyModel.from_dto(dep, created_by_id=test_actor_id))
        session.flush()
        session.expunge_all()

        row = session.get(TaskDependencyModel, dep.id)
        assert row.to_dto() == dep
        assert "[SS-2]" in repr(row)

    def test_duplicate_pair_rejected(self, session, test_actor_id):
        project = _make_project(session, test_actor_id)
        a = _make_task(session, test_actor_id, project.id, name="A")
        b = _make_task(session, test_actor_id, project.id, name="B")
        for _ in range(2):
            session.add(
                TaskDependencyModel(task_id=b.id, predecessor_id=a.id, created_by_id=test_actor_id)
            )
        with pytest.raises(IntegrityError):
            session.flush()
        session.rollback()


class TestWeatherDelayModelORM:

    def test_impacted_ids_round_trip_as_uuids(self, session, test_actor_id):
        project = _make_project(session, test_actor_id)
        impacted = (uuid4(), uuid4())
        delay = WeatherDelay(
            id=uuid4(),
            project_id=project.id,
            delay_date=date(2026, 1, 12),
            weather_type=WeatherType.RAIN,
            hours_lost=Decimal("6"),
            description="Site flooded",
            impacted_task_ids=impacted,
        )
        session.add(WeatherDelayModel.from_dto(delay, created_by_id=test_actor_id))
        session.flush()
        session.expunge_all()

        row = session.get(WeatherDelayModel, delay.id)
        assert row.impacted_task_ids == [str(i) for i in impacted]
        assert row.to_dto() == delay


class TestResourceAllocationModelORM:

    def test_project_level_allocation(self, session, test_actor_id):
        project = _make_project(session, test_actor_id)
        alloc = ResourceAllocation(
            id=uuid4(),
            project_id=project.id,
            resource_category=ResourceCategory.EQUIPMENT,
            hours=Decimal("40"),
            resource_id="EXC-220",
            start_date=date(2026, 1, 5),
            end_date=date(2026, 1, 9),
        )
        session.add(ResourceAllocationModel.from_dto(alloc, created_by_id=test_actor_id))
        session.flush()
        session.expunge_all()

        loaded = session.get(ResourceAllocationModel, alloc.id).to_dto()
        assert loaded == alloc
        assert loaded.is_project_level
