"""
Filter Pipeline

Independent, conjunctive slicers over a dataset. A slicer whose role is
unassigned, or whose value is unset / "All", always passes. The result keeps
the dataset's row order and never copies or modifies rows.
"""

import logging
from typing import List, Optional

import pandas as pd

from ..core.config import settings
from ..models.dataset import Dataset, FilteredView
from ..models.selection import FilterCriteria, RoleAssignment
from .category_ranking import category_label
from .numeric import parse_date

logger = logging.getLogger("kpidash.filters")


def _date_mask(dataset: Dataset, column: str, criteria: FilterCriteria) -> pd.Series:
    """Rows whose date parses and falls inside the (inclusive) bounds."""
    dates = dataset.dates(column)
    mask = dates.notna()

    # An unparsable bound imposes no limit, but the filter stays active.
    lower = parse_date(criteria.date_from) if criteria.date_from else None
    upper = parse_date(criteria.date_to) if criteria.date_to else None
    if lower is not None:
        mask &= dates >= lower
    if upper is not None:
        mask &= dates <= upper
    return mask


def _equals_mask(dataset: Dataset, column: str, value: str) -> pd.Series:
    text = dataset.values(column).map(lambda v: None if v is None else str(v))
    return text == value


def slicer_options(
    dataset: Dataset,
    column: Optional[str],
    limit: int = settings.SLICER_OPTION_LIMIT,
) -> List[str]:
    """Distinct values of a slicer column in first-seen order; blanks read as 'Unknown'."""
    if not dataset.has_column(column):
        return []
    labels = dataset.values(column).map(category_label)
    return [str(v) for v in labels.drop_duplicates().head(limit)]


def apply_filters(
    dataset: Dataset,
    criteria: Optional[FilterCriteria],
    roles: RoleAssignment,
) -> FilteredView:
    """Apply date-range, region and product slicers."""
    if criteria is None:
        criteria = FilterCriteria()

    mask = pd.Series(True, index=dataset.frame.index)

    if dataset.has_column(roles.date) and criteria.has_date_bounds:
        mask &= _date_mask(dataset, roles.date, criteria)

    if dataset.has_column(roles.region) and FilterCriteria.slicer_active(criteria.region_value):
        mask &= _equals_mask(dataset, roles.region, criteria.region_value)

    if dataset.has_column(roles.product) and FilterCriteria.slicer_active(criteria.product_value):
        mask &= _equals_mask(dataset, roles.product, criteria.product_value)

    view = FilteredView(dataset, dataset.frame.index[mask.to_numpy(dtype=bool)])
    logger.debug("Filters kept %d of %d rows", len(view), len(dataset))
    return view
