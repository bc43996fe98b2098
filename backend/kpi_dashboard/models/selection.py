"""
User-facing selections: which column plays which role, and which slicers
are active. Both are rebuilt from control state and passed explicitly into
every computation.
"""

import enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

ALL_SENTINEL = "All"


class Role(str, enum.Enum):
    """Logical meaning a column can be bound to."""
    SALES = "sales"
    COST = "cost"
    PROFIT = "profit"
    DATE = "date"
    REGION = "region"
    PRODUCT = "product"


class RoleAssignment(BaseModel):
    """Role -> column binding. Each role maps to at most one column."""
    sales: Optional[str] = Field(None, description="Sales / revenue measure")
    cost: Optional[str] = Field(None, description="Cost / expense measure")
    profit: Optional[str] = Field(None, description="Profit measure (optional)")
    date: Optional[str] = Field(None, description="Transaction date")
    region: Optional[str] = Field(None, description="Region / segment slicer")
    product: Optional[str] = Field(None, description="Product / category slicer")

    def get(self, role: Role) -> Optional[str]:
        return getattr(self, Role(role).value)

    def with_overrides(self, overrides: Dict[str, Optional[str]]) -> "RoleAssignment":
        """Copy with explicit user selections applied; None unassigns."""
        return self.model_copy(update={Role(k).value: v for k, v in overrides.items()})

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {role.value: self.get(role) for role in Role}


class FilterCriteria(BaseModel):
    """Slicer state for one render. Empty strings mean 'not set'."""
    date_from: Optional[str] = Field(None, description="Inclusive lower date bound")
    date_to: Optional[str] = Field(None, description="Inclusive upper date bound")
    region_value: Optional[str] = Field(None, description="Exact region value, 'All' disables")
    product_value: Optional[str] = Field(None, description="Exact product value, 'All' disables")

    @field_validator("date_from", "date_to", "region_value", "product_value", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if value is None:
            return None
        value = str(value)
        return value if value.strip() else None

    @property
    def has_date_bounds(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    @staticmethod
    def slicer_active(value: Optional[str]) -> bool:
        return value is not None and value != ALL_SENTINEL
