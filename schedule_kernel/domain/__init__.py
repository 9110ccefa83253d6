"""
Pure domain layer.

Date arithmetic, numeric rounding and the clock abstraction.  Nothing in
this package touches the ORM, the database or the wall clock (except
``SystemClock``, the one sanctioned time boundary).
"""

from schedule_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from schedule_kernel.domain.dates import (
    add_days,
    days_between,
    iter_days,
    parse_date,
    signed_days_between,
)
from schedule_kernel.domain.numeric import CENT, HUNDRED, ZERO, round2, to_decimal

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CENT",
    "HUNDRED",
    "ZERO",
    "add_days",
    "days_between",
    "iter_days",
    "parse_date",
    "round2",
    "signed_days_between",
    "to_decimal",
]
