"""Project Scheduling Configuration."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from schedule_config.schema import SchedulingConfig
from schedule_engines.percent_complete import PercentCompleteMethod
from schedule_engines.task_graph import DependencyType


@dataclass(frozen=True)
class ProjectScheduleConfig:
    """Configuration for project scheduling."""
    hours_per_day: Decimal = Decimal("8")
    critical_float_tolerance: float = 0.001
    default_look_ahead_weeks: int = 3
    default_dependency_type: DependencyType = DependencyType.FINISH_TO_START
    default_percent_complete_method: PercentCompleteMethod = PercentCompleteMethod.MANUAL
    publish_events: bool = True

    @classmethod
    def from_scheduling_config(cls, config: SchedulingConfig) -> "ProjectScheduleConfig":
        return cls(
            hours_per_day=config.hours_per_day,
            critical_float_tolerance=config.critical_float_tolerance,
            default_look_ahead_weeks=config.default_look_ahead_weeks,
            default_dependency_type=DependencyType(config.default_dependency_type),
            default_percent_complete_method=PercentCompleteMethod(
                config.default_percent_complete_method
            ),
        )
