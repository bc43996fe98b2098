"""
Schema Inference — Column Role Detection

Binds logical roles (sales, cost, profit, date, region, product) to columns:
1. Header keywords, evaluated as an ordered list of (role, pattern) pairs.
   The first column (in file order) whose lower-cased name matches wins.
2. If no header looks like a date, content sniffing: the first column whose
   leading non-null values mostly parse as dates becomes the date role.

Heuristic by nature; explicit user selection overrides the result.
"""

import logging
import re
from typing import Any, List, Mapping, Optional, Pattern, Sequence, Tuple, Union

import pandas as pd

from ..core.config import settings
from ..models.selection import Role, RoleAssignment
from .numeric import parse_date

logger = logging.getLogger("kpidash.schema")


# ═══════════════════════════════════════════════════════════════════════════
# Detection Patterns
# ═══════════════════════════════════════════════════════════════════════════

ROLE_PATTERNS: List[Tuple[Role, Pattern]] = [
    (Role.SALES, re.compile(r'revenue|sales|amount|total|price|turnover')),
    (Role.COST, re.compile(r'cost|expense|cogs|costs')),
    (Role.PROFIT, re.compile(r'profit|margin')),
    (Role.DATE, re.compile(r'date|day|dt|timestamp')),
    (Role.REGION, re.compile(r'region|state|area|zone|city|location')),
    (Role.PRODUCT, re.compile(r'product|item|sku|category|cat')),
]

Rows = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and value != value)


def _leading_values(rows: Rows, column: str, limit: int) -> List[Any]:
    """Up to `limit` leading non-null cells of one column."""
    if isinstance(rows, pd.DataFrame):
        if column not in rows.columns:
            return []
        series = rows[column]
        return [v for v in series if not _is_missing(v)][:limit]

    values: List[Any] = []
    for row in rows:
        value = row.get(column)
        if _is_missing(value):
            continue
        values.append(value)
        if len(values) >= limit:
            break
    return values


def looks_like_dates(values: Sequence[Any], threshold: Optional[float] = None) -> bool:
    """True when strictly more than `threshold` of the values parse as dates."""
    if threshold is None:
        threshold = settings.DATE_SNIFF_THRESHOLD
    if not values:
        return False
    parsed = sum(1 for v in values if parse_date(v) is not None)
    return parsed / len(values) > threshold


def infer_roles(
    columns: Sequence[str],
    rows: Rows,
    sample_size: Optional[int] = None,
    threshold: Optional[float] = None,
) -> RoleAssignment:
    """
    Assign roles from headers, then sniff content for a date column.

    Args:
        columns: Column names in file order
        rows: Row mappings, or a DataFrame keyed by the same columns
        sample_size: Leading non-null values examined per column when sniffing
        threshold: Share of values that must parse as dates (strictly above)

    Returns:
        RoleAssignment with at most one column per role
    """
    if sample_size is None:
        sample_size = settings.DATE_SNIFF_SAMPLE_SIZE

    assigned = {}
    for role, pattern in ROLE_PATTERNS:
        assigned[role.value] = next(
            (col for col in columns if pattern.search(str(col).lower())),
            None,
        )

    if assigned[Role.DATE.value] is None:
        for col in columns:
            if looks_like_dates(_leading_values(rows, col, sample_size), threshold):
                logger.info("Date role sniffed from content: %s", col)
                assigned[Role.DATE.value] = col
                break

    roles = RoleAssignment(**assigned)
    logger.info("Inferred roles: %s", roles.as_dict())
    return roles
