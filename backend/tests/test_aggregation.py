"""
Tests for KPI aggregation and growth.
"""

import math
from datetime import date, timedelta

import pytest

from kpi_dashboard.models import Dataset, FilterCriteria, RoleAssignment
from kpi_dashboard.services.aggregation import compute_growth, compute_kpis, round_half_up
from kpi_dashboard.services.filters import apply_filters


def _daily(start: date, days: int, amount: str):
    return [
        {"Date": (start + timedelta(days=i)).isoformat(), "Sales": amount}
        for i in range(days)
    ]


def test_kpis_for_full_view(sales_dataset, sales_roles):
    """Test revenue, derived profit, orders and AOV."""
    kpis = compute_kpis(sales_dataset.full_view(), sales_roles, sales_dataset)

    assert kpis.revenue == 1350
    assert kpis.profit == 1350 - 520
    assert kpis.orders == 3
    assert kpis.aov == pytest.approx(450)


def test_empty_view_has_nan_aov(sales_dataset, sales_roles):
    """Test the zero-division guard on an empty view."""
    view = apply_filters(sales_dataset, FilterCriteria(region_value="Nowhere"), sales_roles)
    kpis = compute_kpis(view, sales_roles, sales_dataset)

    assert kpis.orders == 0
    assert kpis.revenue == 0
    assert math.isnan(kpis.aov)
    assert not math.isinf(kpis.aov)


def test_derived_profit_from_sales_minus_cost():
    """Test profit = revenue - cost when no profit column is assigned."""
    dataset = Dataset.from_records([
        {"Sales": "100", "Cost": "30"},
        {"Sales": "200", "Cost": "70"},
    ])
    roles = RoleAssignment(sales="Sales", cost="Cost")
    kpis = compute_kpis(dataset.full_view(), roles, dataset)
    assert kpis.profit == 200


def test_profit_column_takes_precedence():
    """Test that an assigned profit column is summed directly."""
    dataset = Dataset.from_records([
        {"Sales": "100", "Cost": "30", "Profit": "5"},
        {"Sales": "200", "Cost": "70", "Profit": "x"},
    ])
    roles = RoleAssignment(sales="Sales", cost="Cost", profit="Profit")
    assert compute_kpis(dataset.full_view(), roles, dataset).profit == 5


def test_unassigned_sales_gives_nan_revenue_and_profit():
    """Test that KPIs depending on sales are NaN without it."""
    dataset = Dataset.from_records([{"Cost": "10"}, {"Cost": "20"}])
    roles = RoleAssignment(cost="Cost")
    kpis = compute_kpis(dataset.full_view(), roles, dataset)

    assert math.isnan(kpis.revenue)
    assert math.isnan(kpis.profit)
    assert math.isnan(kpis.aov)
    assert kpis.orders == 2
    assert kpis.growth_pct is None


def test_unparsable_sales_count_as_zero():
    """Test that bad numeric cells contribute 0 to sums."""
    dataset = Dataset.from_records([{"Sales": "10"}, {"Sales": "oops"}, {"Sales": None}])
    roles = RoleAssignment(sales="Sales")
    kpis = compute_kpis(dataset.full_view(), roles, dataset)
    assert kpis.revenue == 10
    assert kpis.orders == 3


def test_growth_compares_trailing_windows():
    """Test growth between the last 30 days and the 30 before."""
    records = _daily(date(2024, 1, 1), 30, "100") + _daily(date(2024, 1, 31), 30, "150")
    dataset = Dataset.from_records(records)
    roles = RoleAssignment(sales="Sales", date="Date")

    assert compute_growth(dataset, roles) == 50


def test_growth_negative_and_rounded():
    """Test signed, half-up rounded growth."""
    records = _daily(date(2024, 1, 1), 30, "300") + _daily(date(2024, 1, 31), 30, "200")
    dataset = Dataset.from_records(records)
    roles = RoleAssignment(sales="Sales", date="Date")

    assert compute_growth(dataset, roles) == -33


def test_growth_unavailable_without_previous_sales():
    """Test that growth is None when the previous window has no sales."""
    dataset = Dataset.from_records(_daily(date(2024, 3, 1), 10, "50"))
    roles = RoleAssignment(sales="Sales", date="Date")
    assert compute_growth(dataset, roles) is None


def test_growth_unavailable_without_dates():
    """Test that growth needs a date role with parseable dates."""
    dataset = Dataset.from_records([{"Date": "soon", "Sales": "5"}])
    assert compute_growth(dataset, RoleAssignment(sales="Sales")) is None
    assert compute_growth(dataset, RoleAssignment(sales="Sales", date="Date")) is None


def test_growth_ignores_active_filters():
    """Test that growth is computed over the full dataset."""
    records = _daily(date(2024, 1, 1), 30, "100") + _daily(date(2024, 1, 31), 30, "150")
    for i, record in enumerate(records):
        record["Region"] = "North" if i % 2 else "South"
    dataset = Dataset.from_records(records)
    roles = RoleAssignment(sales="Sales", date="Date", region="Region")

    view = apply_filters(dataset, FilterCriteria(region_value="North", date_to="2024-01-05"), roles)
    kpis = compute_kpis(view, roles, dataset)

    assert kpis.orders == 2
    assert kpis.growth_pct == 50


def test_growth_window_is_configurable():
    """Test the window length parameter."""
    records = _daily(date(2024, 1, 1), 7, "10") + _daily(date(2024, 1, 8), 7, "20")
    dataset = Dataset.from_records(records)
    roles = RoleAssignment(sales="Sales", date="Date")
    assert compute_growth(dataset, roles, window_days=7) == 100


def test_round_half_up():
    """Test rounding of .5 towards positive infinity."""
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(-33.3) == -33
