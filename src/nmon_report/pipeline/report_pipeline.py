from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

from nmon_report.config import OutputConfig
from nmon_report.dataset import DataSet
from nmon_report.paths import chart_file_path, dataset_chart_directory, ensure_directory
from nmon_report.report.definitions import ChartDefinition
from nmon_report.report.listener import ReportListener
from nmon_report.report.store import DefinitionStore
from nmon_report.viz.builder import ChartBuilder, RenderSettings
from nmon_report.viz.common import save_figure

LOGGER = logging.getLogger(__name__)


class ReportPipeline:
    """Creates chart PNGs for a registered definition set.

    Charts are produced either once across every loaded dataset or once per
    dataset in a subdirectory named after it. A chart that fails to build or
    write is logged and skipped; the rest of the run continues.
    """

    def __init__(
        self,
        store: DefinitionStore,
        datasets: Iterable[DataSet],
        builder: ChartBuilder,
        output: OutputConfig | None = None,
    ) -> None:
        self._store = store
        self._datasets = datasets
        self._builder = builder
        self._output = output or OutputConfig()

    def _resolve(self, key: str) -> tuple[ChartDefinition, ...] | None:
        definitions = self._store.get(key)
        if definitions is None:
            LOGGER.debug("no chart definitions registered for '%s'; nothing to create", key)
        return definitions

    def run_across_all_datasets(
        self,
        key: str,
        output_dir: Path,
        listener: ReportListener | None = None,
    ) -> list[Path]:
        """Create one set of charts covering every loaded dataset."""
        definitions = self._resolve(key)
        if definitions is None:
            return []

        listener = listener or ReportListener()
        output_dir = Path(output_dir)
        ensure_directory(output_dir)
        datasets = list(self._datasets)
        settings = self._builder.settings
        output_path = str(output_dir.absolute())

        LOGGER.debug("creating charts for '%s'", key)
        listener.before_run(key, list(datasets), output_path)
        written = self._save_charts(definitions, datasets, output_dir, settings, listener)
        listener.after_run(key, list(datasets), output_path)
        return written

    def run_per_dataset(
        self,
        key: str,
        output_dir: Path,
        listener: ReportListener | None = None,
    ) -> list[Path]:
        """Create a set of charts for each loaded dataset in ``output_dir/<dataset name>``."""
        definitions = self._resolve(key)
        if definitions is None:
            return []

        listener = listener or ReportListener()
        output_dir = Path(output_dir)
        ensure_directory(output_dir)
        settings = self._builder.settings
        output_path = str(output_dir.absolute())

        written: list[Path] = []
        for dataset in list(self._datasets):
            LOGGER.debug("creating charts for '%s' for %s", key, dataset.name)
            dataset_dir = ensure_directory(dataset_chart_directory(output_dir, dataset.name))
            group = [dataset]
            listener.before_run(key, list(group), output_path)
            written.extend(self._save_charts(definitions, group, dataset_dir, settings, listener))
            listener.after_run(key, list(group), output_path)
        return written

    def _save_charts(
        self,
        definitions: Sequence[ChartDefinition],
        datasets: Sequence[DataSet],
        directory: Path,
        settings: RenderSettings,
        listener: ReportListener,
    ) -> list[Path]:
        try:
            to_create = self._builder.applicable_definitions(definitions, datasets)
        except Exception:
            LOGGER.exception("cannot determine applicable charts for %s", directory)
            return []

        written: list[Path] = []
        for definition in to_create:
            chart_path = chart_file_path(directory, definition)
            try:
                figure = self._builder.build(definition, datasets, settings)
                save_figure(
                    figure,
                    chart_path,
                    width=self._output.width,
                    height=self._output.height,
                    dpi=self._output.dpi,
                )
            except Exception:
                LOGGER.warning("cannot create chart '%s'", chart_path.name, exc_info=True)
                continue

            absolute_path = chart_path.absolute()
            written.append(absolute_path)
            listener.on_chart_created(definition, str(absolute_path))
        return written
