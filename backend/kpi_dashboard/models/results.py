"""
Derived outputs of a render cycle.

Degenerate results are explicit sentinels: NaN for undefined scalars,
None for unavailable growth, empty lists for unavailable series.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _json_safe(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


@dataclass(frozen=True)
class KPISet:
    """Summary scalars for the filtered view."""
    revenue: float
    profit: float
    orders: int
    aov: float
    growth_pct: Optional[int] = None  # None when no comparison window is available

    def to_dict(self) -> Dict[str, Any]:
        return {
            "revenue": _json_safe(self.revenue),
            "profit": _json_safe(self.profit),
            "orders": self.orders,
            "aov": _json_safe(self.aov),
            "growth_pct": self.growth_pct,
        }


@dataclass(frozen=True)
class DayBucket:
    day: str  # YYYY-MM-DD, UTC
    revenue: float
    orders: int


@dataclass(frozen=True)
class RankedCategory:
    label: str
    total: float


@dataclass(frozen=True)
class Correlation:
    column: str
    strength: float  # |r|, in [0, 1]


@dataclass
class DashboardSnapshot:
    """Everything the presentation layer needs for one render."""
    source_name: str
    kpis: KPISet
    formatted_kpis: Dict[str, str]
    time_series: List[DayBucket]
    top_categories: List[RankedCategory]
    correlations: List[Correlation]
    sample_rows: List[Dict[str, Any]]
    filtered_count: int
    total_count: int
    region_options: List[str] = field(default_factory=list)
    product_options: List[str] = field(default_factory=list)
    roles: Dict[str, Optional[str]] = field(default_factory=dict)
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    engine_version: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_name": self.source_name,
            "kpis": self.kpis.to_dict(),
            "formatted_kpis": dict(self.formatted_kpis),
            "time_series": [
                {"day": b.day, "revenue": _json_safe(b.revenue), "orders": b.orders}
                for b in self.time_series
            ],
            "top_categories": [
                {"label": c.label, "total": _json_safe(c.total)}
                for c in self.top_categories
            ],
            "correlations": [
                {"column": c.column, "strength": _json_safe(c.strength)}
                for c in self.correlations
            ],
            "sample_rows": self.sample_rows,
            "filtered_count": self.filtered_count,
            "total_count": self.total_count,
            "region_options": list(self.region_options),
            "product_options": list(self.product_options),
            "roles": dict(self.roles),
            "warnings": list(self.warnings),
            "engine_version": self.engine_version,
        }
