"""Daily revenue / order-count buckets for the time-series chart."""

from typing import List

import pandas as pd

from ..models.dataset import FilteredView
from ..models.results import DayBucket
from ..models.selection import RoleAssignment


def bucket_by_day(view: FilteredView, roles: RoleAssignment) -> List[DayBucket]:
    """
    Group the view by UTC calendar day of the date cell.

    Rows whose date does not parse are skipped. Revenue is 0 per row when
    no sales column is assigned. Ascending by day; empty without a date role.
    """
    dataset = view.dataset
    if not dataset.has_column(roles.date):
        return []

    dates = view.dates(roles.date)
    valid = dates.notna()
    if not valid.any():
        return []

    days = dates[valid].dt.strftime("%Y-%m-%d")
    if dataset.has_column(roles.sales):
        revenue = view.numbers(roles.sales)[valid].fillna(0.0)
    else:
        revenue = pd.Series(0.0, index=days.index)

    grouped = (
        pd.DataFrame({"day": days, "revenue": revenue})
        .groupby("day", sort=True)["revenue"]
        .agg(["sum", "size"])
    )

    return [
        DayBucket(day=str(day), revenue=float(row["sum"]), orders=int(row["size"]))
        for day, row in grouped.iterrows()
    ]
