from __future__ import annotations

from typing import Sequence

from nmon_report.dataset import DataSet
from nmon_report.report.definitions import ChartDefinition


class ReportListener:
    """Progress hooks for definition loading and chart creation.

    Every method is a no-op; override the ones of interest. Per run the order
    is ``before_run``, zero or more ``on_chart_created``, ``after_run``.
    Exceptions raised by a hook are not caught and abort the run.
    """

    def on_definitions_added(self, key: str, source: str) -> None:
        """Called when a definition source was parsed and registered."""

    def on_definitions_failed(self, key: str, source: str, error: Exception) -> None:
        """Called when a definition source could not be parsed."""

    def before_run(self, key: str, datasets: Sequence[DataSet], output_path: str) -> None:
        """Called before charts are created for a dataset group."""

    def on_chart_created(self, definition: ChartDefinition, output_path: str) -> None:
        """Called after each chart is saved."""

    def after_run(self, key: str, datasets: Sequence[DataSet], output_path: str) -> None:
        """Called after all charts for a dataset group were attempted."""
