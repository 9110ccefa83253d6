"""
Scheduling configuration schema (``schedule_config.schema``).

Frozen dataclasses describing the tunables of the scheduling engine.  The
loader fills them from YAML; nothing else constructs them from raw data.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class SchedulingConfig:
    """Engine-wide scheduling parameters."""

    hours_per_day: Decimal = Decimal("8")
    critical_float_tolerance: float = 0.001
    default_look_ahead_weeks: int = 3
    default_dependency_type: str = "FS"
    default_percent_complete_method: str = "manual"
    checksum: str = ""

    def __post_init__(self) -> None:
        if self.hours_per_day <= 0:
            raise ValueError("hours_per_day must be positive")
        if self.critical_float_tolerance < 0:
            raise ValueError("critical_float_tolerance cannot be negative")
        if self.default_look_ahead_weeks < 0:
            raise ValueError("default_look_ahead_weeks cannot be negative")
        if self.default_dependency_type not in ("FS", "FF", "SS", "SF"):
            raise ValueError(
                f"Unknown default_dependency_type: {self.default_dependency_type!r}"
            )
        if self.default_percent_complete_method not in ("cost", "units", "manual"):
            raise ValueError(
                "Unknown default_percent_complete_method: "
                f"{self.default_percent_complete_method!r}"
            )
