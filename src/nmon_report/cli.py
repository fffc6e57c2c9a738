from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pandas as pd
import typer

from nmon_report.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from nmon_report.dataset import DataSet
from nmon_report.interval import Interval
from nmon_report.io.read import load_dataset
from nmon_report.logging import configure_logging
from nmon_report.pipeline.run_all import build_report_context, run_report
from nmon_report.report.definitions import ChartDefinition
from nmon_report.report.listener import ReportListener
from nmon_report.report.store import SUMMARY_CHARTS_KEY

app = typer.Typer(no_args_is_help=True, add_completion=False)


class EchoListener(ReportListener):
    def on_definitions_added(self, key: str, source: str) -> None:
        typer.echo(f"Loaded chart definitions '{key}' from {source}")

    def on_definitions_failed(self, key: str, source: str, error: Exception) -> None:
        typer.echo(f"Cannot load chart definitions '{key}' from {source}: {error}", err=True)

    def before_run(self, key: str, datasets: Sequence[DataSet], output_path: str) -> None:
        names = ", ".join(dataset.name for dataset in datasets)
        typer.echo(f"Creating '{key}' charts for {names} in {output_path}")

    def on_chart_created(self, definition: ChartDefinition, output_path: str) -> None:
        typer.echo(f"- {output_path}")


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _parse_timestamp(value: str | None, option_name: str) -> pd.Timestamp | None:
    if value is None:
        return None
    try:
        return pd.Timestamp(value)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid datetime for {option_name}: {value}") from exc


def _build_interval(start: str | None, end: str | None) -> Interval | None:
    if start is None and end is None:
        return None
    try:
        return Interval(
            start=_parse_timestamp(start, "--start"),
            end=_parse_timestamp(end, "--end"),
            name="cli",
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def report(
    data: list[Path] = typer.Option(
        ...,
        "--data",
        exists=True,
        readable=True,
        resolve_path=True,
        help="Dataset CSV export; repeat for multiple datasets.",
    ),
    out: Path = typer.Option(Path("out/charts"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    key: str = typer.Option(SUMMARY_CHARTS_KEY, help="Chart definition set to render."),
    per_dataset: bool = typer.Option(
        False, help="Write one chart directory per dataset instead of combined charts."
    ),
    start: str | None = typer.Option(None, help="Interval start (ISO datetime)."),
    end: str | None = typer.Option(None, help="Interval end (ISO datetime)."),
) -> None:
    """Render the PNG charts of a definition set for the given datasets."""
    cfg = _load_app_config(config)
    configure_logging(cfg.logging.level)
    interval = _build_interval(start, end)

    datasets: list[DataSet] = []
    for path in data:
        try:
            datasets.append(load_dataset(path))
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc

    written = run_report(
        cfg,
        datasets,
        key,
        out,
        per_dataset=per_dataset,
        interval=interval,
        listener=EchoListener(),
    )
    typer.echo(f"Report complete. Charts: {len(written)}")


@app.command()
def definitions(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """List the registered chart definition sets."""
    cfg = _load_app_config(config)
    configure_logging(cfg.logging.level)
    context = build_report_context(cfg, [], listener=EchoListener())
    for name in context.store.keys():
        charts = context.store.get(name) or ()
        typer.echo(f"{name}: {len(charts)} charts")
        for definition in charts:
            typer.echo(f"  - {definition.file_stem}")


if __name__ == "__main__":
    app()
