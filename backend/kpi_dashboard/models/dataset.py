"""
Dataset and FilteredView.

A Dataset is built wholesale from one ingestion and never mutated afterwards.
Raw cells live in an object-dtype DataFrame (None for missing). Each column's
numeric form is committed once when the dataset is built; each column's date
form is committed on first use and memoized, since most columns are never
read as dates.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from ..core.exceptions import ParseWarning
from ..services.numeric import parse_date_series, parse_num_series


def _normalize_missing(frame: pd.DataFrame) -> pd.DataFrame:
    """Object dtype throughout, with NaN/NaT replaced by None."""
    values = frame.to_numpy(dtype=object, copy=True)
    values[pd.isna(values)] = None
    return pd.DataFrame(values, columns=frame.columns, index=frame.index, dtype=object)


@dataclass(eq=False)
class Dataset:
    """Sanitized columns plus raw rows, owned by a DashboardSession."""
    columns: List[str]
    frame: pd.DataFrame
    source_name: str = "dataset"
    warnings: List[ParseWarning] = field(default_factory=list)
    _numbers: pd.DataFrame = field(init=False, repr=False)
    _dates: Dict[str, pd.Series] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self):
        frame = self.frame.reindex(columns=self.columns).reset_index(drop=True)
        self.frame = _normalize_missing(frame)
        self._numbers = pd.DataFrame(
            {col: parse_num_series(self.frame[col]) for col in self.columns},
            index=self.frame.index,
        )

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        columns: Optional[List[str]] = None,
        source_name: str = "dataset",
        warnings: Optional[List[ParseWarning]] = None,
    ) -> "Dataset":
        """Build a dataset from row mappings; absent keys become missing cells."""
        records = list(records)
        if columns is None:
            columns = []
            for record in records:
                for key in record:
                    if key not in columns:
                        columns.append(key)

        data = [[record.get(col) for col in columns] for record in records]
        frame = pd.DataFrame(data, columns=columns, dtype=object)
        return cls(
            columns=list(columns),
            frame=frame,
            source_name=source_name,
            warnings=list(warnings or []),
        )

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def rows(self) -> List[Dict[str, Any]]:
        return self.frame.to_dict("records")

    def has_column(self, column: Optional[str]) -> bool:
        return column is not None and column in self._numbers.columns

    def values(self, column: str) -> pd.Series:
        """Raw cells of one column."""
        return self.frame[column]

    def numbers(self, column: str) -> pd.Series:
        """parse_num form of one column (NaN where unparsable)."""
        return self._numbers[column]

    def dates(self, column: str) -> pd.Series:
        """parse_date form of one column (NaT where unparsable)."""
        if column not in self._dates:
            self._dates[column] = parse_date_series(self.frame[column])
        return self._dates[column]

    def full_view(self) -> "FilteredView":
        return FilteredView(self, self.frame.index)

    def to_csv(self) -> str:
        """Re-serialize the sanitized dataset, headers in original order."""
        return self.frame.to_csv(index=False, na_rep="", lineterminator="\r\n")


@dataclass(frozen=True, eq=False)
class FilteredView:
    """Order-preserving subset of a dataset's rows, addressed by position."""
    dataset: Dataset
    index: pd.Index

    def __len__(self) -> int:
        return len(self.index)

    @property
    def frame(self) -> pd.DataFrame:
        return self.dataset.frame.loc[self.index]

    @property
    def rows(self) -> List[Dict[str, Any]]:
        return self.frame.to_dict("records")

    def head(self, n: int) -> List[Dict[str, Any]]:
        return self.frame.head(n).to_dict("records")

    def values(self, column: str) -> pd.Series:
        return self.dataset.values(column).loc[self.index]

    def numbers(self, column: str) -> pd.Series:
        return self.dataset.numbers(column).loc[self.index]

    def dates(self, column: str) -> pd.Series:
        return self.dataset.dates(column).loc[self.index]
