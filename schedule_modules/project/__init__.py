"""
Project Scheduling Module (``schedule_modules.project``).

Responsibility
--------------
Thin glue for construction project scheduling: project, milestone and task
records, task dependencies, the Critical Path Method (CPM) run, percent
complete tracking, Earned Value Management (EVM) metrics (CPI, SPI, EAC,
ETC, VAC), look-ahead windows, baseline variance, weather-delay impact and
daily resource loading.

Architecture position
---------------------
**Modules layer** -- DTOs, ORM models, pure EVM functions, lifecycle
workflow and a service facade that delegates all scheduling arithmetic to
``schedule_engines``.

Invariants enforced
-------------------
* Transaction boundary owned by ``ProjectScheduleService``.
* Dependencies never span projects and never close a cycle.
* Every as-of date is explicit or comes from the injected clock.

Failure modes
-------------
* Typed ``schedule_kernel.exceptions`` errors for unknown records, invalid
  input and dependency cycles.
* Missing dates, zero budgets and empty projects degrade to zero metrics.
"""

from schedule_modules.project.config import ProjectScheduleConfig
from schedule_modules.project.models import (
    EVMSnapshot,
    Milestone,
    MilestoneStatus,
    Project,
    ProjectStatus,
    ResourceAllocation,
    Task,
    TaskDependency,
    WeatherDelay,
)
from schedule_modules.project.service import ProjectScheduleService

__all__ = [
    "EVMSnapshot",
    "Milestone",
    "MilestoneStatus",
    "Project",
    "ProjectScheduleConfig",
    "ProjectScheduleService",
    "ProjectStatus",
    "ResourceAllocation",
    "Task",
    "TaskDependency",
    "WeatherDelay",
]
