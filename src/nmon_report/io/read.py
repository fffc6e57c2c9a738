from __future__ import annotations

from pathlib import Path

import pandas as pd

from nmon_report.dataset import DataSet

DEFAULT_TIMESTAMP_COLUMN = "timestamp"


def load_dataset(
    path: Path,
    name: str | None = None,
    timestamp_column: str | None = None,
) -> DataSet:
    """Load a tidy CSV export: one timestamp column plus one column per field identifier.

    The timestamp column is ``timestamp`` when present, else the first column.
    The dataset name defaults to the file stem.
    """
    # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
    df = pd.read_csv(path, encoding="utf-8-sig")
    if len(df.columns) < 2:
        raise ValueError(f"{path}: expected a timestamp column and at least one field column")

    column = timestamp_column or (
        DEFAULT_TIMESTAMP_COLUMN if DEFAULT_TIMESTAMP_COLUMN in df.columns else df.columns[0]
    )
    if column not in df.columns:
        raise ValueError(f"{path}: missing timestamp column '{column}'")

    timestamps = pd.to_datetime(df[column], errors="coerce")
    if timestamps.isna().all():
        raise ValueError(f"{path}: no valid timestamps found in column '{column}'")

    frame = df.drop(columns=[column])
    frame.index = pd.DatetimeIndex(timestamps, name=DEFAULT_TIMESTAMP_COLUMN)
    frame = frame.loc[frame.index.notna()].sort_index()
    return DataSet(name=name or path.stem, frame=frame)
