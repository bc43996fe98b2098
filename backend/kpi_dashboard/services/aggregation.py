"""
Aggregation Engine — KPI Scalars

Revenue, profit, orders and average order value are computed over the
filtered view. Growth compares the trailing window with the one before it
and always uses the full dataset, ignoring active slicers.
"""

import logging
import math
from typing import Optional

import pandas as pd

from ..core.config import settings
from ..models.dataset import Dataset, FilteredView
from ..models.results import KPISet
from ..models.selection import RoleAssignment
from .numeric import NAN

logger = logging.getLogger("kpidash.aggregation")

GROWTH_WINDOW_DAYS = settings.GROWTH_WINDOW_DAYS


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _sum(values: pd.Series) -> float:
    """Sum with unparsable cells counted as 0."""
    return float(values.fillna(0.0).sum())


def compute_growth(
    dataset: Dataset,
    roles: RoleAssignment,
    window_days: int = GROWTH_WINDOW_DAYS,
) -> Optional[int]:
    """
    Percentage change of sales between the trailing window ending at the
    latest date and the window immediately before it.

    Returns None when no date role is assigned, no date parses, or the
    previous window's sales are not positive.
    """
    if not dataset.has_column(roles.date):
        return None

    dates = dataset.dates(roles.date)
    if not dates.notna().any():
        return None

    last = dates.max()
    period_start = last - pd.Timedelta(days=window_days - 1)
    prev_end = period_start - pd.Timedelta(days=1)
    prev_start = prev_end - pd.Timedelta(days=window_days - 1)

    if dataset.has_column(roles.sales):
        sales = dataset.numbers(roles.sales).fillna(0.0)
    else:
        sales = pd.Series(0.0, index=dates.index)

    period_sum = float(sales[(dates >= period_start) & (dates <= last)].sum())
    prev_sum = float(sales[(dates >= prev_start) & (dates <= prev_end)].sum())

    logger.debug(
        "Growth windows: [%s, %s]=%.2f vs [%s, %s]=%.2f",
        period_start.date(), last.date(), period_sum,
        prev_start.date(), prev_end.date(), prev_sum,
    )

    if prev_sum > 0:
        return round_half_up((period_sum - prev_sum) / prev_sum * 100)
    return None


def compute_kpis(
    view: FilteredView,
    roles: RoleAssignment,
    dataset: Dataset,
    window_days: int = GROWTH_WINDOW_DAYS,
) -> KPISet:
    """KPI scalars for the filtered view plus dataset-wide growth."""
    has_sales = dataset.has_column(roles.sales)
    has_cost = dataset.has_column(roles.cost)
    has_profit = dataset.has_column(roles.profit)

    revenue = _sum(view.numbers(roles.sales)) if has_sales else NAN

    if has_profit:
        profit = _sum(view.numbers(roles.profit))
    elif has_sales and has_cost:
        profit = revenue - _sum(view.numbers(roles.cost))
    else:
        profit = NAN

    orders = len(view)
    aov = revenue / orders if orders > 0 else NAN

    return KPISet(
        revenue=revenue,
        profit=profit,
        orders=orders,
        aov=aov,
        growth_pct=compute_growth(dataset, roles, window_days),
    )
