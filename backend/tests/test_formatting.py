"""
Tests for KPI display strings.
"""

from kpi_dashboard.models import KPISet
from kpi_dashboard.services.formatting import (
    format_currency,
    format_growth,
    format_kpis,
    group_indian,
)


def test_group_indian():
    """Test lakh/crore digit grouping."""
    assert group_indian(0) == "0"
    assert group_indian(999) == "999"
    assert group_indian(1000) == "1,000"
    assert group_indian(123456) == "1,23,456"
    assert group_indian(12345678) == "1,23,45,678"
    assert group_indian(-1500) == "-1,500"


def test_format_currency_rounds_half_up():
    """Test rounding and the currency prefix."""
    assert format_currency(1234.5) == "₹1,235"
    assert format_currency(1234.4) == "₹1,234"
    assert format_currency(-1500) == "₹-1,500"
    assert format_currency(10, symbol="$") == "$10"


def test_non_finite_values_use_placeholder():
    """Test the placeholder for NaN and missing values."""
    assert format_currency(float("nan")) == "—"
    assert format_currency(float("inf")) == "—"
    assert format_currency(None) == "—"


def test_format_growth():
    """Test the direction glyphs."""
    assert format_growth(12) == "▲ 12%"
    assert format_growth(0) == "▲ 0%"
    assert format_growth(-7) == "▼ 7%"
    assert format_growth(None) == "—"


def test_format_kpis():
    """Test the card strings for one KPI set."""
    kpis = KPISet(revenue=250000.0, profit=float("nan"), orders=42, aov=5952.38, growth_pct=-3)
    assert format_kpis(kpis) == {
        "revenue": "₹2,50,000",
        "revenue_delta": "▼ 3%",
        "profit": "—",
        "orders": "42",
        "aov": "₹5,952",
    }
