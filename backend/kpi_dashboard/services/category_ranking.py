"""Top categories by sales for the product chart."""

from typing import List

import pandas as pd

from ..core.config import settings
from ..models.dataset import FilteredView
from ..models.results import RankedCategory
from ..models.selection import RoleAssignment

UNKNOWN_LABEL = "Unknown"


def category_label(value) -> str:
    """Display label of a category cell; missing and empty cells read as Unknown."""
    return UNKNOWN_LABEL if value is None or value == "" else str(value)


def rank_categories(
    view: FilteredView,
    roles: RoleAssignment,
    limit: int = settings.TOP_CATEGORIES,
) -> List[RankedCategory]:
    """
    Sum sales per product label, highest first.

    Missing or empty labels are grouped as "Unknown". Equal totals keep the order in
    which their labels first appear. Empty without a product role.
    """
    dataset = view.dataset
    if not dataset.has_column(roles.product):
        return []

    labels = view.values(roles.product).map(category_label)
    if dataset.has_column(roles.sales):
        sales = view.numbers(roles.sales).fillna(0.0)
    else:
        sales = pd.Series(0.0, index=labels.index)

    totals = sales.groupby(labels, sort=False).sum()

    # sorted() is stable: ties stay in first-seen order
    ranked = sorted(totals.items(), key=lambda item: -item[1])
    return [RankedCategory(label=str(label), total=float(total)) for label, total in ranked[:limit]]
