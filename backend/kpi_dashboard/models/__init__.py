from .dataset import Dataset, FilteredView
from .results import Correlation, DashboardSnapshot, DayBucket, KPISet, RankedCategory
from .selection import ALL_SENTINEL, FilterCriteria, Role, RoleAssignment

__all__ = [
    "Dataset",
    "FilteredView",
    "Correlation",
    "DashboardSnapshot",
    "DayBucket",
    "KPISet",
    "RankedCategory",
    "ALL_SENTINEL",
    "FilterCriteria",
    "Role",
    "RoleAssignment",
]
