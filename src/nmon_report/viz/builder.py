from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from nmon_report.config import OutputConfig
from nmon_report.dataset import DataSet
from nmon_report.interval import DEFAULT_INTERVAL, Interval
from nmon_report.report.definitions import ChartDefinition

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderSettings:
    interval: Interval = DEFAULT_INTERVAL
    granularity_seconds: int = 60

    @property
    def resample_rule(self) -> str:
        return f"{int(self.granularity_seconds)}s"


class ChartBuilder:
    """Decides which definitions apply to a dataset group and draws them.

    The current :class:`RenderSettings` are replaced as a whole on every
    update, so a caller holding a snapshot keeps a consistent interval and
    granularity pair.
    """

    def __init__(
        self,
        settings: RenderSettings | None = None,
        output: OutputConfig | None = None,
    ) -> None:
        self._settings = settings or RenderSettings()
        self._output = output or OutputConfig()

    @property
    def settings(self) -> RenderSettings:
        return self._settings

    def update_settings(
        self,
        *,
        interval: Interval | None = None,
        granularity_seconds: int | None = None,
    ) -> RenderSettings:
        changes: dict[str, object] = {}
        if interval is not None:
            changes["interval"] = interval
        if granularity_seconds is not None:
            if int(granularity_seconds) < 1:
                raise ValueError(
                    f"granularity must be at least 1 second, got {granularity_seconds}"
                )
            changes["granularity_seconds"] = int(granularity_seconds)
        self._settings = replace(self._settings, **changes)
        return self._settings

    def set_interval(self, interval: Interval) -> None:
        self.update_settings(interval=interval)

    def set_granularity(self, granularity_seconds: int) -> None:
        self.update_settings(granularity_seconds=granularity_seconds)

    def applicable_definitions(
        self,
        definitions: Iterable[ChartDefinition],
        datasets: Iterable[DataSet],
    ) -> list[ChartDefinition]:
        group = list(datasets)
        return [
            definition
            for definition in definitions
            if any(definition.applies_to(dataset) for dataset in group)
        ]

    def _collect_series(
        self,
        definition: ChartDefinition,
        datasets: Sequence[DataSet],
        interval: Interval,
    ) -> list[tuple[str, pd.Series]]:
        collected: list[tuple[str, pd.Series]] = []
        for dataset in datasets:
            if not definition.applies_to(dataset):
                continue
            fields = dataset.matching_fields(definition.series)
            if not fields:
                continue
            clipped = interval.clip(dataset.frame[fields])
            if clipped.empty:
                continue
            for field in fields:
                label = field if len(datasets) == 1 else f"{dataset.name}: {field}"
                collected.append((label, pd.to_numeric(clipped[field], errors="coerce")))
        return collected

    def build(
        self,
        definition: ChartDefinition,
        datasets: Iterable[DataSet],
        settings: RenderSettings | None = None,
    ) -> Figure:
        settings = settings or self._settings
        group = list(datasets)
        series = self._collect_series(definition, group, settings.interval)
        LOGGER.debug(
            "building chart '%s' from %d series at %ss granularity",
            definition.short_name,
            len(series),
            settings.granularity_seconds,
        )

        fig, ax = plt.subplots(
            figsize=(self._output.width / self._output.dpi, self._output.height / self._output.dpi)
        )
        try:
            if not series:
                _draw_empty(ax)
            elif definition.chart_type == "bar":
                _draw_bars(ax, series, definition.aggregate)
            elif definition.chart_type == "stacked_area":
                _draw_stacked(ax, series, definition.aggregate, settings.resample_rule)
            else:
                _draw_lines(ax, series, definition.aggregate, settings.resample_rule)

            ax.set_title(definition.title)
            if definition.y_label:
                ax.set_ylabel(definition.y_label)
            if definition.y_max is not None:
                ax.set_ylim(0, definition.y_max)
            if series and definition.chart_type != "bar":
                ax.set_xlabel("Time")
                ax.legend(loc="upper left", fontsize="small")
        except Exception:
            plt.close(fig)
            raise
        return fig


def _draw_empty(ax: Axes) -> None:
    ax.text(
        0.5,
        0.5,
        "No data in the selected interval",
        ha="center",
        va="center",
        transform=ax.transAxes,
        color="#64748b",
    )
    ax.set_xticks([])
    ax.set_yticks([])


def _draw_lines(
    ax: Axes,
    series: list[tuple[str, pd.Series]],
    aggregate: str,
    rule: str,
) -> None:
    for label, values in series:
        bucketed = values.resample(rule).agg(aggregate).dropna()
        ax.plot(bucketed.index, bucketed.to_numpy(dtype=float), linewidth=1.2, label=label)


def _draw_stacked(
    ax: Axes,
    series: list[tuple[str, pd.Series]],
    aggregate: str,
    rule: str,
) -> None:
    bucketed = pd.concat(
        [values.resample(rule).agg(aggregate).rename(label) for label, values in series],
        axis=1,
    ).dropna(how="all").fillna(0.0)
    ax.stackplot(
        bucketed.index,
        *[bucketed[column].to_numpy(dtype=float) for column in bucketed.columns],
        labels=list(bucketed.columns),
        alpha=0.85,
    )


def _draw_bars(ax: Axes, series: list[tuple[str, pd.Series]], aggregate: str) -> None:
    labels = [label for label, _ in series]
    values = [float(values.agg(aggregate)) for _, values in series]
    ax.bar(labels, values, color="#0369a1")
    ax.tick_params(axis="x", labelrotation=30)
