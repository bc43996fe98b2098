"""
Dashboard Session — Render Orchestrator

Owns the current Dataset, RoleAssignment and FilterCriteria and recomputes
every derived output from them on each render. State is only ever replaced
wholesale: a failed ingestion leaves the previous dataset, roles and filters
in place.

Usage:
    session = DashboardSession()
    await session.ingest(payload, "sales.zip")
    session.set_roles(region="Store_Region")
    session.set_filters(FilterCriteria(region_value="North"))
    snapshot = session.render()
"""

import logging
from typing import Optional

from ..core.config import settings
from ..core.exceptions import IngestionError, NoDatasetError, RoleAssignmentError
from ..models.dataset import Dataset
from ..models.results import DashboardSnapshot
from ..models.selection import FilterCriteria, Role, RoleAssignment
from .aggregation import compute_kpis
from .category_ranking import rank_categories
from .correlation import rank_correlations
from .filters import apply_filters, slicer_options
from .formatting import format_kpis
from .ingestion import IngestionService, ingestion_service
from .schema_inference import infer_roles
from .time_bucketing import bucket_by_day

logger = logging.getLogger("kpidash.session")


class DashboardSession:
    """Single-user dashboard state plus the recompute entry point."""

    def __init__(self, ingestion: Optional[IngestionService] = None):
        self.ingestion = ingestion or ingestion_service
        self.dataset: Optional[Dataset] = None
        self.roles = RoleAssignment()
        self.filters = FilterCriteria()

    # ============ Ingestion ============

    async def ingest(self, payload: bytes, filename: str) -> Dataset:
        """Decode, parse and adopt an uploaded CSV or ZIP."""
        try:
            dataset = await self.ingestion.ingest(payload, filename)
        except IngestionError as e:
            logger.error("Ingestion of %s failed: %s", filename, e)
            raise
        self._adopt(dataset)
        return dataset

    def load_text(self, text: str, source_name: str = "upload") -> Dataset:
        """Adopt already-decoded CSV text."""
        try:
            dataset = self.ingestion.load_text(text, source_name)
        except IngestionError as e:
            logger.error("Ingestion of %s failed: %s", source_name, e)
            raise
        self._adopt(dataset)
        return dataset

    def load_dataset(self, dataset: Dataset) -> Dataset:
        """Adopt a dataset built elsewhere."""
        self._adopt(dataset)
        return dataset

    def _adopt(self, dataset: Dataset) -> None:
        roles = infer_roles(dataset.columns, dataset.frame)
        self.dataset = dataset
        self.roles = roles
        self.filters = FilterCriteria()
        logger.info("Session now holds %s (%d rows)", dataset.source_name, len(dataset))

    # ============ Selections ============

    def set_roles(self, **overrides: Optional[str]) -> RoleAssignment:
        """
        Apply explicit user role selections. None unassigns a role.

        Raises:
            RoleAssignmentError: Unknown role name or column
        """
        dataset = self._require_dataset()
        for role_name, column in overrides.items():
            try:
                Role(role_name)
            except ValueError as e:
                raise RoleAssignmentError(f"Unknown role: {role_name}") from e
            if column is not None and not dataset.has_column(column):
                raise RoleAssignmentError(f"Unknown column for {role_name}: {column}")

        self.roles = self.roles.with_overrides(overrides)
        logger.info("Roles set: %s", self.roles.as_dict())
        return self.roles

    def set_filters(self, criteria: Optional[FilterCriteria] = None, **values) -> FilterCriteria:
        """Replace the slicer state, from a FilterCriteria or keyword values."""
        self.filters = criteria if criteria is not None else FilterCriteria(**values)
        return self.filters

    def clear_filters(self) -> FilterCriteria:
        self.filters = FilterCriteria()
        return self.filters

    # ============ Render ============

    def render(self) -> DashboardSnapshot:
        """Recompute every derived output from the current state."""
        dataset = self._require_dataset()
        roles = self.roles

        view = apply_filters(dataset, self.filters, roles)
        kpis = compute_kpis(view, roles, dataset)

        snapshot = DashboardSnapshot(
            source_name=dataset.source_name,
            kpis=kpis,
            formatted_kpis=format_kpis(kpis),
            time_series=bucket_by_day(view, roles),
            top_categories=rank_categories(view, roles),
            correlations=rank_correlations(dataset, roles),
            sample_rows=view.head(settings.SAMPLE_ROWS),
            filtered_count=len(view),
            total_count=len(dataset),
            region_options=slicer_options(dataset, roles.region),
            product_options=slicer_options(dataset, roles.product),
            roles=roles.as_dict(),
            warnings=[w.to_dict() for w in dataset.warnings],
            engine_version=settings.APP_VERSION,
        )
        logger.debug("Rendered %d of %d rows", snapshot.filtered_count, snapshot.total_count)
        return snapshot

    def export_csv(self) -> str:
        """Sanitized dataset as CSV text, for download."""
        return self._require_dataset().to_csv()

    def _require_dataset(self) -> Dataset:
        if self.dataset is None:
            raise NoDatasetError("No dataset loaded; upload a CSV or ZIP first")
        return self.dataset
