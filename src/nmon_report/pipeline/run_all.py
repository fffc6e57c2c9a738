from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from nmon_report.config import AppConfig
from nmon_report.dataset import DataSet
from nmon_report.granularity import GranularityAdvisor
from nmon_report.interval import Interval, IntervalManager
from nmon_report.pipeline.report_pipeline import ReportPipeline
from nmon_report.report.listener import ReportListener
from nmon_report.report.reactor import IntervalReactor
from nmon_report.report.store import DefinitionStore
from nmon_report.viz.builder import ChartBuilder, RenderSettings


@dataclass(frozen=True)
class ReportContext:
    store: DefinitionStore
    datasets: list[DataSet]
    intervals: IntervalManager
    advisor: GranularityAdvisor
    builder: ChartBuilder
    reactor: IntervalReactor
    pipeline: ReportPipeline


def build_report_context(
    config: AppConfig,
    datasets: Iterable[DataSet],
    listener: ReportListener | None = None,
) -> ReportContext:
    store = DefinitionStore()
    for key, source in config.definitions.sources.items():
        store.add_from_source(key, source, listener)

    loaded = list(datasets)
    advisor = GranularityAdvisor(loaded, config.granularity)
    advisor.set_automatic(config.granularity.automatic)
    builder = ChartBuilder(
        RenderSettings(granularity_seconds=advisor.recalculate()),
        output=config.output,
    )

    intervals = IntervalManager()
    reactor = IntervalReactor(builder, advisor)
    reactor.subscribe(intervals)

    return ReportContext(
        store=store,
        datasets=loaded,
        intervals=intervals,
        advisor=advisor,
        builder=builder,
        reactor=reactor,
        pipeline=ReportPipeline(store, loaded, builder, config.output),
    )


def run_report(
    config: AppConfig,
    datasets: Iterable[DataSet],
    key: str,
    out_dir: Path,
    *,
    per_dataset: bool = False,
    interval: Interval | None = None,
    listener: ReportListener | None = None,
) -> list[Path]:
    context = build_report_context(config, datasets, listener)
    if interval is not None:
        context.intervals.add_interval(interval)
        context.intervals.set_current_interval(interval)

    if per_dataset:
        return context.pipeline.run_per_dataset(key, out_dir, listener)
    return context.pipeline.run_across_all_datasets(key, out_dir, listener)
