from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Iterable

import pandas as pd


@dataclass(frozen=True, eq=False)
class DataSet:
    """Time-series data for one host.

    ``frame`` is indexed by timestamp with one column per field identifier,
    e.g. ``"CPU_ALL/User%"``.
    """

    name: str
    frame: pd.DataFrame

    def __post_init__(self) -> None:
        if not isinstance(self.frame.index, pd.DatetimeIndex):
            raise ValueError(f"dataset '{self.name}' must be indexed by timestamp")
        if not self.frame.index.is_monotonic_increasing:
            object.__setattr__(self, "frame", self.frame.sort_index())

    @property
    def fields(self) -> frozenset[str]:
        return frozenset(str(column) for column in self.frame.columns)

    @property
    def start(self) -> pd.Timestamp | None:
        if self.frame.empty:
            return None
        return self.frame.index[0]

    @property
    def end(self) -> pd.Timestamp | None:
        if self.frame.empty:
            return None
        return self.frame.index[-1]

    def has_field_matching(self, pattern: str) -> bool:
        return any(fnmatchcase(field, pattern) for field in self.fields)

    def matching_fields(self, patterns: Iterable[str]) -> list[str]:
        matched: list[str] = []
        for pattern in patterns:
            for column in self.frame.columns:
                field = str(column)
                if field not in matched and fnmatchcase(field, pattern):
                    matched.append(field)
        return matched
