"""
Module: schedule_engines.delay_impact
Responsibility:
    Roll weather-delay records up into total hours and days lost, hours
    per weather category, and the number of distinct impacted tasks.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - total_days_lost = total_hours_lost / hours_per_day, rounded to cents.
    - Impacted tasks are counted once no matter how many delays list them;
      ids are not checked against the task table.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Protocol

from schedule_engines.tracer import traced_engine
from schedule_kernel.domain.numeric import ZERO, round2, to_decimal

DEFAULT_HOURS_PER_DAY = Decimal("8")


class WeatherType(str, Enum):
    RAIN = "rain"
    SNOW = "snow"
    WIND = "wind"
    EXTREME_HEAT = "extreme_heat"
    EXTREME_COLD = "extreme_cold"
    OTHER = "other"


class DelayRecord(Protocol):
    @property
    def weather_type(self) -> WeatherType | str: ...

    @property
    def hours_lost(self) -> Decimal: ...

    @property
    def impacted_task_ids(self) -> Sequence[Hashable]: ...


@dataclass(frozen=True)
class DelayImpact:
    total_hours_lost: Decimal
    total_days_lost: Decimal
    delays_by_type: dict[str, Decimal] = field(default_factory=dict)
    impacted_task_count: int = 0
    delay_count: int = 0


@traced_engine("delay_impact", "1.0", fingerprint_fields=("hours_per_day",))
def calculate_delay_impact(
    delays: Sequence[DelayRecord],
    *,
    hours_per_day: Decimal = DEFAULT_HOURS_PER_DAY,
) -> DelayImpact:
    if hours_per_day <= 0:
        raise ValueError("hours_per_day must be positive")

    total = ZERO
    by_type: dict[str, Decimal] = {}
    impacted: set[str] = set()

    for delay in delays:
        hours = to_decimal(delay.hours_lost)
        total += hours
        key = WeatherType(delay.weather_type).value
        by_type[key] = by_type.get(key, ZERO) + hours
        impacted.update(str(tid) for tid in delay.impacted_task_ids or ())

    return DelayImpact(
        total_hours_lost=round2(total),
        total_days_lost=round2(total / hours_per_day),
        delays_by_type={k: round2(v) for k, v in by_type.items()},
        impacted_task_count=len(impacted),
        delay_count=len(delays),
    )
