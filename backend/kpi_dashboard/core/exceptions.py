"""
Exception hierarchy for the dashboard engine.

Only the ingestion boundary and the session's explicit user inputs can fail.
Computation degeneracies (unassigned roles, empty views, zero variance) are
reported as NaN / None / empty results, never as exceptions.
"""

from dataclasses import dataclass
from typing import Optional


class DashboardError(Exception):
    """Base class for all dashboard engine errors."""


class IngestionError(DashboardError):
    """An uploaded payload could not be turned into a dataset."""

    def __init__(self, message: str, source_name: Optional[str] = None):
        super().__init__(message)
        self.source_name = source_name


class NoCsvInArchive(IngestionError):
    """The uploaded archive contains no member ending in .csv."""


class NoDatasetError(DashboardError):
    """A render or export was requested before any successful ingestion."""


class RoleAssignmentError(DashboardError):
    """An explicit role override names an unknown role or column."""


@dataclass(frozen=True)
class ParseWarning:
    """Non-fatal problem found while tokenizing delimited text."""
    row: Optional[int]  # 0-based data row, None when not attributable
    code: str  # 'TooManyFields', 'TooFewFields'
    message: str

    def to_dict(self) -> dict:
        return {"row": self.row, "code": self.code, "message": self.message}
