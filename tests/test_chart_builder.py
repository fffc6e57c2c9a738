from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from matplotlib.figure import Figure

from nmon_report.dataset import DataSet
from nmon_report.interval import Interval
from nmon_report.report.definitions import ChartDefinition
from nmon_report.viz.builder import ChartBuilder, RenderSettings


def _dataset(name: str, columns: list[str], periods: int = 30) -> DataSet:
    index = pd.date_range("2026-02-03 10:00", periods=periods, freq="1min")
    frame = pd.DataFrame(
        {column: np.linspace(1.0, 50.0, periods) for column in columns},
        index=index,
    )
    return DataSet(name=name, frame=frame)


CPU = ChartDefinition(
    short_name="CPU",
    type="stacked_area",
    series=("CPU_ALL/User%", "CPU_ALL/Sys%"),
)
MEMORY = ChartDefinition(short_name="Memory", series=("MEM/memfree",))
DISK = ChartDefinition(short_name="Disk Busy", type="bar", series=("DISKBUSY/*",))


def test_applicable_definitions_preserves_order_and_needs_one_match() -> None:
    builder = ChartBuilder()
    group = [
        _dataset("a", ["MEM/memfree"]),
        _dataset("b", ["DISKBUSY/sda"]),
    ]

    assert builder.applicable_definitions([DISK, CPU, MEMORY], group) == [DISK, MEMORY]
    assert builder.applicable_definitions([MEMORY, DISK], group) == [MEMORY, DISK]


def test_applicable_definitions_is_idempotent_and_ignores_render_state() -> None:
    builder = ChartBuilder()
    group = [_dataset("a", ["CPU_ALL/User%", "CPU_ALL/Sys%", "MEM/memfree"])]
    definitions = [CPU, DISK, MEMORY]

    first = builder.applicable_definitions(definitions, group)
    builder.update_settings(
        interval=Interval(start=pd.Timestamp("2030-01-01")),
        granularity_seconds=3600,
    )
    second = builder.applicable_definitions(definitions, group)

    assert first == second == [CPU, MEMORY]


def test_applicable_definitions_accepts_generators() -> None:
    builder = ChartBuilder()
    datasets = [_dataset("a", ["MEM/memfree"]), _dataset("b", ["DISKBUSY/sda"])]
    group = (dataset for dataset in datasets)

    assert builder.applicable_definitions([DISK, MEMORY], group) == [DISK, MEMORY]


def test_build_line_chart_resamples_to_granularity() -> None:
    builder = ChartBuilder(RenderSettings(granularity_seconds=600))
    dataset = _dataset("a", ["MEM/memfree"])
    original = dataset.frame.copy()

    figure = builder.build(MEMORY, [dataset])
    try:
        assert isinstance(figure, Figure)
        ax = figure.axes[0]
        lines = ax.get_lines()
        assert len(lines) == 1
        assert len(lines[0].get_xdata()) == 3
        assert ax.get_title() == "Memory"
        assert [text.get_text() for text in ax.get_legend().get_texts()] == ["MEM/memfree"]
    finally:
        plt.close(figure)
    pd.testing.assert_frame_equal(dataset.frame, original)


def test_build_labels_series_by_dataset_for_groups() -> None:
    builder = ChartBuilder()
    group = [_dataset("a", ["MEM/memfree"]), _dataset("b", ["MEM/memfree"]), _dataset("c", ["X/y"])]

    figure = builder.build(MEMORY, group)
    try:
        labels = [text.get_text() for text in figure.axes[0].get_legend().get_texts()]
        assert labels == ["a: MEM/memfree", "b: MEM/memfree"]
    finally:
        plt.close(figure)


def test_build_stacked_area_and_bar_charts() -> None:
    builder = ChartBuilder()
    dataset = _dataset("a", ["CPU_ALL/User%", "CPU_ALL/Sys%", "DISKBUSY/sda", "DISKBUSY/sdb"])

    stacked = builder.build(CPU, [dataset])
    bars = builder.build(DISK, [dataset])
    try:
        assert len(stacked.axes[0].collections) == 2
        assert len(bars.axes[0].patches) == 2
        heights = [patch.get_height() for patch in bars.axes[0].patches]
        assert heights == pytest.approx([25.5, 25.5])
    finally:
        plt.close(stacked)
        plt.close(bars)


def test_build_uses_given_settings_snapshot() -> None:
    builder = ChartBuilder(RenderSettings(granularity_seconds=60))
    dataset = _dataset("a", ["MEM/memfree"])
    snapshot = RenderSettings(granularity_seconds=300)

    figure = builder.build(MEMORY, [dataset], snapshot)
    try:
        assert len(figure.axes[0].get_lines()[0].get_xdata()) == 6
    finally:
        plt.close(figure)


def test_build_outside_interval_draws_placeholder() -> None:
    interval = Interval(start=pd.Timestamp("2030-01-01"), end=pd.Timestamp("2030-01-02"))
    builder = ChartBuilder(RenderSettings(interval=interval))

    figure = builder.build(MEMORY, [_dataset("a", ["MEM/memfree"])])
    try:
        ax = figure.axes[0]
        assert len(ax.get_lines()) == 0
        assert ax.texts[0].get_text() == "No data in the selected interval"
    finally:
        plt.close(figure)


def test_update_settings_replaces_snapshot() -> None:
    builder = ChartBuilder()
    before = builder.settings
    interval = Interval(name="peak")

    builder.set_interval(interval)
    builder.set_granularity(120)

    assert before == RenderSettings()
    assert builder.settings == RenderSettings(interval=interval, granularity_seconds=120)
    assert builder.settings.resample_rule == "120s"
    with pytest.raises(ValueError):
        builder.set_granularity(0)
