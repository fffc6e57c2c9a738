from __future__ import annotations

import pandas as pd
import pytest

from nmon_report.interval import (
    DEFAULT_INTERVAL,
    Interval,
    IntervalEvent,
    IntervalEventKind,
    IntervalManager,
)


def _frame() -> pd.DataFrame:
    index = pd.date_range("2026-02-03 10:00", periods=10, freq="1min")
    return pd.DataFrame({"CPU_ALL/User%": range(10)}, index=index)


def test_interval_clip_is_inclusive_and_does_not_mutate() -> None:
    frame = _frame()
    original = frame.copy()
    interval = Interval(
        start=pd.Timestamp("2026-02-03 10:02"),
        end=pd.Timestamp("2026-02-03 10:04"),
    )

    clipped = interval.clip(frame)

    assert clipped["CPU_ALL/User%"].tolist() == [2, 3, 4]
    pd.testing.assert_frame_equal(frame, original)


def test_open_interval_bounds() -> None:
    frame = _frame()

    assert len(DEFAULT_INTERVAL.clip(frame)) == 10
    assert len(Interval(start=pd.Timestamp("2026-02-03 10:08")).clip(frame)) == 2
    assert len(Interval(end=pd.Timestamp("2026-02-03 10:00")).clip(frame)) == 1
    assert DEFAULT_INTERVAL.duration is None
    assert not DEFAULT_INTERVAL.is_bounded


def test_interval_duration_and_validation() -> None:
    interval = Interval(
        start=pd.Timestamp("2026-02-03 10:00"),
        end=pd.Timestamp("2026-02-03 11:00"),
    )

    assert interval.duration == pd.Timedelta(hours=1)
    with pytest.raises(ValueError, match="after end"):
        Interval(start=pd.Timestamp("2026-02-03 11:00"), end=pd.Timestamp("2026-02-03 10:00"))


def test_manager_publishes_events_in_order() -> None:
    manager = IntervalManager()
    events: list[IntervalEvent] = []
    manager.subscribe(events.append)
    morning = Interval(
        start=pd.Timestamp("2026-02-03 08:00"),
        end=pd.Timestamp("2026-02-03 12:00"),
        name="morning",
    )

    assert manager.add_interval(morning) is True
    assert manager.add_interval(morning) is False
    assert manager.set_current_interval(morning) is True
    assert manager.set_current_interval(morning) is False
    renamed = manager.rename_interval(morning, "am")

    assert [event.kind for event in events] == [
        IntervalEventKind.ADDED,
        IntervalEventKind.CURRENT_CHANGED,
        IntervalEventKind.RENAMED,
    ]
    assert manager.current_interval == renamed
    assert manager.intervals == (renamed,)


def test_removing_current_interval_resets_to_default() -> None:
    manager = IntervalManager()
    interval = Interval(
        start=pd.Timestamp("2026-02-03 08:00"),
        end=pd.Timestamp("2026-02-03 09:00"),
    )
    manager.add_interval(interval)
    manager.set_current_interval(interval)
    events: list[IntervalEvent] = []
    manager.subscribe(events.append)

    assert manager.remove_interval(interval) is True

    assert [event.kind for event in events] == [
        IntervalEventKind.REMOVED,
        IntervalEventKind.CURRENT_CHANGED,
    ]
    assert events[-1].interval == DEFAULT_INTERVAL
    assert manager.current_interval == DEFAULT_INTERVAL
    assert manager.remove_interval(interval) is False


def test_clear_intervals_only_changes_current_when_needed() -> None:
    manager = IntervalManager()
    manager.add_interval(Interval(name="a", start=pd.Timestamp("2026-02-03 08:00")))
    events: list[IntervalEvent] = []
    manager.subscribe(events.append)

    manager.clear_intervals()

    assert [event.kind for event in events] == [IntervalEventKind.CLEARED]
    assert manager.intervals == ()


def test_unsubscribe_stops_delivery() -> None:
    manager = IntervalManager()
    events: list[IntervalEvent] = []
    manager.subscribe(events.append)
    manager.unsubscribe(events.append)

    manager.add_interval(Interval(name="a"))

    assert events == []


def test_rename_unknown_interval_raises() -> None:
    with pytest.raises(ValueError, match="unknown interval"):
        IntervalManager().rename_interval(Interval(name="ghost"), "x")


def test_naive_bounds_clip_timezone_aware_index() -> None:
    index = pd.date_range("2026-02-03 10:00", periods=10, freq="1min", tz="UTC")
    frame = pd.DataFrame({"CPU_ALL/User%": range(10)}, index=index)

    bounded = Interval(
        start=pd.Timestamp("2026-02-03 10:02"),
        end=pd.Timestamp("2026-02-03 10:04"),
    )
    open_ended = Interval(start=pd.Timestamp("2026-02-03 10:08"))

    assert bounded.clip(frame)["CPU_ALL/User%"].tolist() == [2, 3, 4]
    assert open_ended.clip(frame)["CPU_ALL/User%"].tolist() == [8, 9]


def test_aware_bounds_are_converted_to_index_timezone() -> None:
    index = pd.date_range("2026-02-03 10:00", periods=10, freq="1min", tz="UTC")
    frame = pd.DataFrame({"CPU_ALL/User%": range(10)}, index=index)
    berlin = Interval(start=pd.Timestamp("2026-02-03 11:08", tz="Europe/Berlin"))
    utc_end = Interval(end=pd.Timestamp("2026-02-03 10:01", tz="UTC"))

    assert berlin.clip(frame)["CPU_ALL/User%"].tolist() == [8, 9]
    assert utc_end.clip(_frame())["CPU_ALL/User%"].tolist() == [0, 1]
