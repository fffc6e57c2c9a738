from __future__ import annotations

import logging
from importlib.resources import files
from pathlib import Path
from typing import Iterable

from nmon_report.io.definitions import DefinitionLoadError, load_chart_definitions
from nmon_report.report.definitions import ChartDefinition
from nmon_report.report.listener import ReportListener

LOGGER = logging.getLogger(__name__)

SUMMARY_CHARTS_KEY = "summary"
DATASET_CHARTS_KEY = "dataset"

BUILTIN_DEFINITION_RESOURCES: dict[str, str] = {
    SUMMARY_CHARTS_KEY: "summary_single_interval.yaml",
    DATASET_CHARTS_KEY: "dataset_report.yaml",
}


def builtin_resource(name: str):
    return files("nmon_report") / "resources" / name


class DefinitionStore:
    """Chart definition sets keyed by name.

    Sets are stored as tuples and replaced wholesale, so a run that fetched a
    set never observes a later registration.
    """

    def __init__(self, *, load_builtins: bool = True) -> None:
        self._sets: dict[str, tuple[ChartDefinition, ...]] = {}
        if load_builtins:
            self.load_builtins()

    def load_builtins(self) -> None:
        for key, resource_name in BUILTIN_DEFINITION_RESOURCES.items():
            try:
                with builtin_resource(resource_name).open("r", encoding="utf-8") as handle:
                    self.register(key, load_chart_definitions(handle))
            except (OSError, DefinitionLoadError):
                LOGGER.exception("cannot parse default report definitions '%s'", resource_name)

    def register(self, key: str, definitions: Iterable[ChartDefinition]) -> None:
        self._sets[key] = tuple(definitions)

    def add_from_source(
        self,
        key: str,
        source: Path | str,
        listener: ReportListener | None = None,
    ) -> bool:
        listener = listener or ReportListener()
        try:
            definitions = load_chart_definitions(source)
        except DefinitionLoadError as exc:
            LOGGER.error("cannot parse report definitions from '%s': %s", source, exc)
            listener.on_definitions_failed(key, str(source), exc)
            return False

        self.register(key, definitions)
        LOGGER.debug("loaded %d chart definitions from '%s'", len(definitions), source)
        listener.on_definitions_added(key, str(source))
        return True

    def get(self, key: str) -> tuple[ChartDefinition, ...] | None:
        return self._sets.get(key)

    def keys(self) -> list[str]:
        return list(self._sets)

    def __contains__(self, key: object) -> bool:
        return key in self._sets

    def __len__(self) -> int:
        return len(self._sets)
