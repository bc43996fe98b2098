"""
Shared pytest fixtures for the dashboard engine test suite.
"""

import io
import zipfile
from typing import Any, Callable, Dict, List

import pytest

from kpi_dashboard.models import Dataset, RoleAssignment
from kpi_dashboard.services.dashboard import DashboardSession


@pytest.fixture
def sample_sales_records() -> List[Dict[str, Any]]:
    """Provide a small sales table spanning three days and two regions."""
    return [
        {"Date": "2024-01-01", "Region": "North", "Product": "Widget", "Sales": "100", "Cost": "30"},
        {"Date": "2024-01-02", "Region": "South", "Product": "Gadget", "Sales": "250", "Cost": "90"},
        {"Date": "2024-01-03", "Region": "North", "Product": "Widget", "Sales": "₹1,000", "Cost": "400"},
    ]


@pytest.fixture
def sales_dataset(sample_sales_records: List[Dict[str, Any]]) -> Dataset:
    """Provide a Dataset built from the sample sales records."""
    return Dataset.from_records(sample_sales_records, source_name="sales.csv")


@pytest.fixture
def sales_roles() -> RoleAssignment:
    """Provide the role assignment matching the sample sales records."""
    return RoleAssignment(
        sales="Sales",
        cost="Cost",
        date="Date",
        region="Region",
        product="Product",
    )


@pytest.fixture
def sample_csv_text() -> str:
    """Provide raw CSV text with messy headers and currency cells."""
    return (
        "Order Date,Store Region,Product Name,Sales Amount (INR),Cost %\n"
        "2024-01-01,North,Widget,\"₹1,200\",300\n"
        "\n"
        "2024-01-02,South,Gadget,800,200\n"
        "2024-01-03,North,Gizmo,n/a,100\n"
    )


@pytest.fixture
def make_zip() -> Callable[[Dict[str, str]], bytes]:
    """Provide a builder for in-memory ZIP payloads (member name -> text)."""
    def _make(members: Dict[str, str]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, text in members.items():
                zf.writestr(name, text)
        return buffer.getvalue()
    return _make


@pytest.fixture
def session() -> DashboardSession:
    """Provide an empty dashboard session."""
    return DashboardSession()


@pytest.fixture
def loaded_session(session: DashboardSession, sample_sales_records) -> DashboardSession:
    """Provide a session holding the sample sales records."""
    session.load_dataset(Dataset.from_records(sample_sales_records, source_name="sales.csv"))
    return session
