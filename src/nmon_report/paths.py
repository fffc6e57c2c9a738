from __future__ import annotations

import logging
from pathlib import Path

from nmon_report.report.definitions import ChartDefinition

LOGGER = logging.getLogger(__name__)

CHART_SUFFIX = "png"


def ensure_directory(path: Path) -> Path:
    """Create ``path`` and its parents if absent.

    Best effort: a failure is logged and the path returned regardless; writes
    into it then fail individually.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("cannot create directory '%s': %s", path, exc)
    return path


def dataset_chart_directory(output_dir: Path, dataset_name: str) -> Path:
    return output_dir / dataset_name


def chart_file_path(directory: Path, definition: ChartDefinition) -> Path:
    return directory / f"{definition.file_stem}.{CHART_SUFFIX}"
