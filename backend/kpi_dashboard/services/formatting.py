"""
Display strings for KPI cards.

Single currency convention (configured symbol, Indian digit grouping).
Never used by the computations themselves.
"""

import math
from typing import Dict, Optional

from ..core.config import settings
from ..models.results import KPISet

PLACEHOLDER = "—"


def group_indian(value: int) -> str:
    """12345678 -> '1,23,45,678'."""
    digits = str(abs(value))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups) + "," + tail
    return ("-" if value < 0 else "") + digits


def format_currency(value: float, symbol: Optional[str] = None) -> str:
    if symbol is None:
        symbol = settings.CURRENCY_SYMBOL
    if value is None or not math.isfinite(value):
        return PLACEHOLDER
    return symbol + group_indian(int(math.floor(value + 0.5)))


def format_growth(pct: Optional[int]) -> str:
    if pct is None:
        return PLACEHOLDER
    return ("▲ " if pct >= 0 else "▼ ") + f"{abs(pct)}%"


def format_kpis(kpis: KPISet) -> Dict[str, str]:
    return {
        "revenue": format_currency(kpis.revenue),
        "revenue_delta": format_growth(kpis.growth_pct),
        "profit": format_currency(kpis.profit),
        "orders": str(kpis.orders),
        "aov": format_currency(kpis.aov),
    }
