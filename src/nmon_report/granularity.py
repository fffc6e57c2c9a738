from __future__ import annotations

import logging
from typing import Iterable

import pandas as pd

from nmon_report.config import GranularityConfig
from nmon_report.dataset import DataSet
from nmon_report.interval import DEFAULT_INTERVAL, Interval

LOGGER = logging.getLogger(__name__)

STANDARD_GRANULARITY_SECONDS = [
    1,
    5,
    10,
    15,
    30,
    60,
    120,
    300,
    600,
    900,
    1800,
    3600,
    7200,
    14400,
    43200,
    86400,
]


def snap_to_standard_bucket(raw_seconds: float) -> int:
    for bucket in STANDARD_GRANULARITY_SECONDS:
        if raw_seconds <= bucket:
            return bucket
    return STANDARD_GRANULARITY_SECONDS[-1]


def _as_utc_naive(value: pd.Timestamp) -> pd.Timestamp:
    # Datasets may mix naive and timezone-aware indexes.
    return value if value.tzinfo is None else value.tz_convert(None)


class GranularityAdvisor:
    """Derives the bucket width used to aggregate samples before plotting.

    In automatic mode the span of the active interval (or of the loaded data
    when the interval is open) is divided into roughly ``target_points``
    buckets, rounded up to a standard bucket size. The value is cached until
    the next :meth:`recalculate`.
    """

    def __init__(
        self,
        datasets: Iterable[DataSet],
        config: GranularityConfig | None = None,
    ) -> None:
        self._datasets = datasets
        self._config = config or GranularityConfig()
        self._automatic = self._config.automatic
        self._fixed_seconds = int(self._config.fixed_seconds)
        self._interval = DEFAULT_INTERVAL
        self._granularity = (
            int(self._config.default_seconds) if self._automatic else self._fixed_seconds
        )

    @property
    def automatic(self) -> bool:
        return self._automatic

    @property
    def granularity(self) -> int:
        return self._granularity

    def set_automatic(self, automatic: bool) -> None:
        self._automatic = bool(automatic)

    def set_fixed(self, seconds: int) -> None:
        if int(seconds) < 1:
            raise ValueError(f"granularity must be at least 1 second, got {seconds}")
        self._fixed_seconds = int(seconds)

    def _data_span_seconds(self, interval: Interval) -> float | None:
        starts = []
        ends = []
        for dataset in self._datasets:
            clipped = interval.clip(dataset.frame)
            if clipped.empty:
                continue
            starts.append(_as_utc_naive(clipped.index[0]))
            ends.append(_as_utc_naive(clipped.index[-1]))
        if not starts:
            return None
        return (max(ends) - min(starts)).total_seconds()

    def recalculate(self, interval: Interval | None = None) -> int:
        if interval is not None:
            self._interval = interval

        if not self._automatic:
            self._granularity = self._fixed_seconds
            return self._granularity

        duration = self._interval.duration
        if duration is not None:
            span_seconds: float | None = duration.total_seconds()
        else:
            span_seconds = self._data_span_seconds(self._interval)

        if not span_seconds or span_seconds <= 0:
            self._granularity = int(self._config.default_seconds)
        else:
            raw = span_seconds / int(self._config.target_points)
            self._granularity = snap_to_standard_bucket(raw)

        LOGGER.debug(
            "granularity recalculated to %ss for interval '%s'",
            self._granularity,
            self._interval.name,
        )
        return self._granularity
