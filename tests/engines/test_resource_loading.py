"""
Tests for the daily resource-loading projector.

Covers:
- Zero-filled, date-sorted rows for every day of the range
- Conservation for allocations inside the range
- Clipping behaviour (denominator shrinks, numerator does not)
- Open-ended windows and out-of-range allocations
- Inverted range rejection
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import pytest

from schedule_engines.resource_loading import ResourceCategory, project_resource_loading
from schedule_kernel.exceptions import InvalidDateRangeError


@dataclass(frozen=True)
class _Alloc:
    resource_category: ResourceCategory
    hours: Decimal
    start_date: date | None = None
    end_date: date | None = None


LABOR = ResourceCategory.LABOR
EQUIPMENT = ResourceCategory.EQUIPMENT


class TestShape:

    def test_one_row_per_day_zero_filled(self):
        rows = project_resource_loading([], start=date(2026, 1, 1), end=date(2026, 1, 3))
        assert [r.day for r in rows] == [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3)]
        assert all(r.total_hours == Decimal("0") for r in rows)

    def test_inverted_range_rejected(self):
        with pytest.raises(InvalidDateRangeError):
            project_resource_loading([], start=date(2026, 1, 5), end=date(2026, 1, 1))


class TestSpreading:

    def test_allocation_inside_range_conserves_hours(self):
        alloc = _Alloc(LABOR, Decimal("40"), date(2026, 1, 5), date(2026, 1, 9))
        rows = project_resource_loading([alloc], start=date(2026, 1, 1), end=date(2026, 1, 31))

        assert sum(r.labor_hours for r in rows) == Decimal("40")
        loaded = [r for r in rows if r.labor_hours]
        assert [r.day for r in loaded] == [date(2026, 1, d) for d in range(5, 10)]
        assert all(r.labor_hours == Decimal("8.00") for r in loaded)

    def test_conservation_within_rounding(self):
        alloc = _Alloc(EQUIPMENT, Decimal("10"), date(2026, 1, 1), date(2026, 1, 3))
        rows = project_resource_loading([alloc], start=date(2026, 1, 1), end=date(2026, 1, 3))
        total = sum(r.equipment_hours for r in rows)
        assert abs(total - Decimal("10")) <= Decimal("0.01") * len(rows)
        assert rows[0].equipment_hours == Decimal("3.33")

    def test_categories_kept_separate(self):
        allocs = [
            _Alloc(LABOR, Decimal("16"), date(2026, 1, 1), date(2026, 1, 2)),
            _Alloc(EQUIPMENT, Decimal("4"), date(2026, 1, 2), date(2026, 1, 2)),
        ]
        rows = project_resource_loading(allocs, start=date(2026, 1, 1), end=date(2026, 1, 2))
        second = rows[1]
        assert (second.labor_hours, second.equipment_hours, second.total_hours) == (
            Decimal("8.00"),
            Decimal("4.00"),
            Decimal("12.00"),
        )

    def test_clipped_window_spreads_full_total(self):
        # 30 hours over Jan 1-10, asked for Jan 8-12: all 30 land on Jan 8-10
        alloc = _Alloc(LABOR, Decimal("30"), date(2026, 1, 1), date(2026, 1, 10))
        rows = project_resource_loading([alloc], start=date(2026, 1, 8), end=date(2026, 1, 12))
        assert [r.labor_hours for r in rows] == [
            Decimal("10.00"), Decimal("10.00"), Decimal("10.00"), Decimal("0"), Decimal("0"),
        ]

    def test_open_ended_window_uses_range_bounds(self):
        alloc = _Alloc(LABOR, Decimal("20"))
        rows = project_resource_loading([alloc], start=date(2026, 1, 1), end=date(2026, 1, 4))
        assert all(r.labor_hours == Decimal("5.00") for r in rows)

    def test_allocation_outside_range_ignored(self):
        alloc = _Alloc(LABOR, Decimal("20"), date(2026, 2, 1), date(2026, 2, 5))
        rows = project_resource_loading([alloc], start=date(2026, 1, 1), end=date(2026, 1, 31))
        assert sum(r.total_hours for r in rows) == Decimal("0")

    def test_string_category_accepted(self):
        alloc = _Alloc("equipment", Decimal("6"), date(2026, 1, 1), date(2026, 1, 1))
        rows = project_resource_loading([alloc], start=date(2026, 1, 1), end=date(2026, 1, 1))
        assert rows[0].equipment_hours == Decimal("6.00")
