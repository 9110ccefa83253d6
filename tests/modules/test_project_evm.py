"""
Tests for the pure EVM functions.

Validates:
- calculate_task_bcws pro-ration and boundaries
- calculate_bcws, calculate_bcwp, calculate_acwp aggregation
- calculate_cpi, calculate_spi zero guards and rounding
- calculate_eac, calculate_etc, calculate_vac, calculate_cv, calculate_sv
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

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
    calculate_task_bcws,
    calculate_vac,
)

AS_OF = date(2026, 1, 15)


@dataclass(frozen=True)
class _Task:
    budget_cost: Decimal = Decimal("0")
    actual_cost: Decimal = Decimal("0")
    percent_complete: Decimal = Decimal("0")
    start_date: date | None = None
    end_date: date | None = None


class TestTaskBCWS:

    def test_finished_window_earns_full_budget(self):
        assert calculate_task_bcws(Decimal("1000"), date(2026, 1, 1), date(2026, 1, 10), AS_OF) == Decimal("1000.00")

    def test_end_on_as_of_counts_full(self):
        assert calculate_task_bcws(Decimal("500"), date(2026, 1, 1), AS_OF, AS_OF) == Decimal("500.00")

    def test_linear_proration(self):
        # 14 of 20 days elapsed
        assert calculate_task_bcws(Decimal("1000"), date(2026, 1, 1), date(2026, 1, 21), AS_OF) == Decimal("700.00")

    def test_prorated_share_rounded(self):
        # 1 of 3 days elapsed
        assert calculate_task_bcws(Decimal("100"), date(2026, 1, 14), date(2026, 1, 17), AS_OF) == Decimal("33.33")

    def test_not_started(self):
        assert calculate_task_bcws(Decimal("1000"), date(2026, 2, 1), date(2026, 3, 1), AS_OF) == Decimal("0")

    def test_open_ended(self):
        assert calculate_task_bcws(Decimal("1000"), date(2026, 1, 1), None, AS_OF) == Decimal("0")

    def test_no_dates(self):
        assert calculate_task_bcws(Decimal("1000"), None, None, AS_OF) == Decimal("0")

    def test_end_only_in_past(self):
        assert calculate_task_bcws(Decimal("250"), None, date(2026, 1, 2), AS_OF) == Decimal("250.00")


class TestAggregates:

    def setup_method(self):
        self.tasks = [
            _Task(Decimal("1000"), Decimal("600"), Decimal("50"), date(2026, 1, 1), date(2026, 1, 11)),
            _Task(Decimal("2000"), Decimal("100"), Decimal("10"), date(2026, 1, 5), date(2026, 2, 4)),
            _Task(Decimal("3000"), Decimal("0"), Decimal("0"), date(2026, 3, 1), date(2026, 4, 1)),
        ]

    def test_bcws(self):
        # 1000 + 2000 * 10/30 = 1666.67
        assert calculate_bcws(self.tasks, AS_OF) == Decimal("1666.67")

    def test_bcwp(self):
        assert calculate_bcwp(self.tasks) == Decimal("700.00")

    def test_acwp(self):
        assert calculate_acwp(self.tasks) == Decimal("700.00")

    def test_empty(self):
        assert calculate_bcws([], AS_OF) == Decimal("0")
        assert calculate_bcwp([]) == Decimal("0")
        assert calculate_acwp([]) == Decimal("0")


class TestIndices:

    def test_cpi(self):
        assert calculate_cpi(Decimal("900"), Decimal("1000")) == Decimal("0.90")

    def test_cpi_zero_acwp(self):
        assert calculate_cpi(Decimal("500"), Decimal("0")) == Decimal("0")

    def test_spi_rounded(self):
        assert calculate_spi(Decimal("700"), Decimal("1666.67")) == Decimal("0.42")

    def test_spi_zero_bcws(self):
        assert calculate_spi(Decimal("500"), Decimal("0")) == Decimal("0")


class TestForecasts:

    def test_eac(self):
        assert calculate_eac(Decimal("10000"), Decimal("0.80")) == Decimal("12500.00")

    def test_eac_zero_cpi(self):
        assert calculate_eac(Decimal("10000"), Decimal("0")) == Decimal("0")

    def test_etc(self):
        assert calculate_etc(Decimal("12500"), Decimal("4000")) == Decimal("8500.00")

    def test_etc_never_negative(self):
        assert calculate_etc(Decimal("1000"), Decimal("4000")) == Decimal("0.00")

    def test_vac(self):
        assert calculate_vac(Decimal("10000"), Decimal("12500")) == Decimal("-2500.00")

    def test_cv_and_sv(self):
        assert calculate_cv(Decimal("700"), Decimal("800")) == Decimal("-100.00")
        assert calculate_sv(Decimal("700"), Decimal("600")) == Decimal("100.00")
