from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable

import numpy as np
import pandas as pd

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interval:
    """Time range filter; ``None`` bounds are open."""

    start: pd.Timestamp | None = None
    end: pd.Timestamp | None = None
    name: str = ""

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"interval start {self.start} is after end {self.end}")

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def duration(self) -> pd.Timedelta | None:
        if not self.is_bounded:
            return None
        return self.end - self.start

    def clip(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Return the rows of ``frame`` inside the interval, inclusive on both ends.

        Naive bounds are read in the index's timezone; aware bounds are
        converted to it.
        """
        mask = np.ones(len(frame.index), dtype=bool)
        tz = getattr(frame.index, "tz", None)
        if self.start is not None:
            mask &= frame.index >= _align_timestamp(self.start, tz)
        if self.end is not None:
            mask &= frame.index <= _align_timestamp(self.end, tz)
        return frame.loc[mask].copy()


def _align_timestamp(value: pd.Timestamp, tz: Any) -> pd.Timestamp:
    value = pd.Timestamp(value)
    if tz is None:
        return value if value.tzinfo is None else value.tz_convert(None)
    if value.tzinfo is None:
        return value.tz_localize(tz)
    return value.tz_convert(tz)


DEFAULT_INTERVAL = Interval(name="All Data")


class IntervalEventKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    RENAMED = "renamed"
    CLEARED = "cleared"
    CURRENT_CHANGED = "current_changed"


@dataclass(frozen=True)
class IntervalEvent:
    kind: IntervalEventKind
    interval: Interval | None = None


IntervalSubscriber = Callable[[IntervalEvent], None]


class IntervalManager:
    """Holds the defined intervals and the current one; publishes changes synchronously."""

    def __init__(self) -> None:
        self._intervals: list[Interval] = []
        self._current: Interval = DEFAULT_INTERVAL
        self._subscribers: list[IntervalSubscriber] = []

    @property
    def intervals(self) -> tuple[Interval, ...]:
        return tuple(self._intervals)

    @property
    def current_interval(self) -> Interval:
        return self._current

    def subscribe(self, subscriber: IntervalSubscriber) -> None:
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: IntervalSubscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    def add_interval(self, interval: Interval) -> bool:
        if interval in self._intervals:
            return False
        self._intervals.append(interval)
        self._publish(IntervalEvent(IntervalEventKind.ADDED, interval))
        return True

    def remove_interval(self, interval: Interval) -> bool:
        if interval not in self._intervals:
            return False
        self._intervals.remove(interval)
        self._publish(IntervalEvent(IntervalEventKind.REMOVED, interval))
        if interval == self._current:
            self.set_current_interval(DEFAULT_INTERVAL)
        return True

    def rename_interval(self, interval: Interval, name: str) -> Interval:
        if interval not in self._intervals:
            raise ValueError(f"unknown interval: {interval}")
        renamed = replace(interval, name=name)
        self._intervals[self._intervals.index(interval)] = renamed
        if interval == self._current:
            self._current = renamed
        self._publish(IntervalEvent(IntervalEventKind.RENAMED, renamed))
        return renamed

    def clear_intervals(self) -> None:
        self._intervals.clear()
        self._publish(IntervalEvent(IntervalEventKind.CLEARED))
        self.set_current_interval(DEFAULT_INTERVAL)

    def set_current_interval(self, interval: Interval) -> bool:
        if interval == self._current:
            return False
        self._current = interval
        LOGGER.debug("current interval is now '%s'", interval.name or interval)
        self._publish(IntervalEvent(IntervalEventKind.CURRENT_CHANGED, interval))
        return True

    def _publish(self, event: IntervalEvent) -> None:
        for subscriber in list(self._subscribers):
            subscriber(event)
