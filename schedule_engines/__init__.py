"""
Module: schedule_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    scheduling engines.  The canonical import surface for schedule_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import schedule_kernel (domain, exceptions, logging).
    MUST NOT import schedule_modules or schedule_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      As-of dates are explicit parameters supplied by the service.
    - Decimal-only arithmetic for costs, hours and percentages.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from schedule_engines.task_graph import TaskGraph, TaskNode, DependencyEdge
    from schedule_engines.cpm import CriticalPathCalculator
    from schedule_engines.resource_loading import project_resource_loading
"""

from schedule_engines.cpm import (
    CriticalPathCalculator,
    CriticalPathResult,
    TaskSchedule,
)
from schedule_engines.delay_impact import DelayImpact, WeatherType, calculate_delay_impact
from schedule_engines.look_ahead import LookAheadWindow, select_look_ahead
from schedule_engines.percent_complete import (
    PercentCompleteMethod,
    PercentCompleteResult,
    TaskStatus,
    resolve_percent_complete,
)
from schedule_engines.resource_loading import (
    ResourceCategory,
    ResourceLoadingRow,
    project_resource_loading,
)
from schedule_engines.schedule_variance import ScheduleVarianceRow, compute_schedule_variance
from schedule_engines.task_graph import DependencyEdge, DependencyType, TaskGraph, TaskNode

__all__ = [
    "CriticalPathCalculator",
    "CriticalPathResult",
    "DelayImpact",
    "DependencyEdge",
    "DependencyType",
    "LookAheadWindow",
    "PercentCompleteMethod",
    "PercentCompleteResult",
    "ResourceCategory",
    "ResourceLoadingRow",
    "ScheduleVarianceRow",
    "TaskGraph",
    "TaskNode",
    "TaskSchedule",
    "TaskStatus",
    "WeatherType",
    "calculate_delay_impact",
    "compute_schedule_variance",
    "project_resource_loading",
    "resolve_percent_complete",
    "select_look_ahead",
]
