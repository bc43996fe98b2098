"""KPI dashboard engine: CSV/ZIP ingestion, role inference, slicers and KPI aggregation."""

from .core.exceptions import (
    DashboardError,
    IngestionError,
    NoCsvInArchive,
    NoDatasetError,
    ParseWarning,
    RoleAssignmentError,
)
from .models import Dataset, FilterCriteria, Role, RoleAssignment
from .services.dashboard import DashboardSession

__all__ = [
    "DashboardError",
    "IngestionError",
    "NoCsvInArchive",
    "NoDatasetError",
    "ParseWarning",
    "RoleAssignmentError",
    "Dataset",
    "FilterCriteria",
    "Role",
    "RoleAssignment",
    "DashboardSession",
]
