"""
Correlation Ranking

Pearson correlation of every other column against the sales measure, over
the full dataset (slicers do not apply). Only rows where both cells parse
as numbers form a pair; columns with too few pairs are skipped.
"""

import logging
import math
from typing import List

import numpy as np

from ..core.config import settings
from ..models.dataset import Dataset
from ..models.results import Correlation
from ..models.selection import RoleAssignment

logger = logging.getLogger("kpidash.correlation")


def pearson(a: np.ndarray, b: np.ndarray) -> float:
    """
    Pearson r of two paired series.

    A zero denominator (constant series) is replaced by 1, which yields
    r = 0 rather than NaN.
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    da = a - a.mean()
    db = b - b.mean()
    num = float(np.sum(da * db))
    denominator = float(np.sum(da * da)) * float(np.sum(db * db))
    return num / math.sqrt(denominator or 1.0)


def rank_correlations(
    dataset: Dataset,
    roles: RoleAssignment,
    limit: int = settings.TOP_CORRELATIONS,
    min_pairs: int = settings.MIN_CORRELATION_PAIRS,
    max_candidates: int = settings.MAX_CORRELATION_CANDIDATES,
) -> List[Correlation]:
    """|r| against sales for the first `max_candidates` other columns, strongest first."""
    if not dataset.has_column(roles.sales):
        return []

    sales = dataset.numbers(roles.sales)
    candidates = [col for col in dataset.columns if col != roles.sales][:max_candidates]

    scored: List[Correlation] = []
    for col in candidates:
        other = dataset.numbers(col)
        paired = sales.notna() & other.notna()
        n_pairs = int(paired.sum())
        if n_pairs < min_pairs:
            continue

        r = pearson(
            sales[paired].to_numpy(dtype=float),
            other[paired].to_numpy(dtype=float),
        )
        if not math.isfinite(r):
            logger.debug("Skipping %s: non-finite correlation", col)
            continue
        scored.append(Correlation(column=col, strength=min(abs(r), 1.0)))

    scored.sort(key=lambda c: -c.strength)
    return scored[:limit]
