from __future__ import annotations

from pathlib import Path
from typing import Any, TextIO

import yaml
from pydantic import ValidationError

from nmon_report.report.definitions import ChartDefinition


class DefinitionLoadError(ValueError):
    """A chart definition source could not be read or parsed."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


def parse_chart_definitions(data: Any, *, source: str = "<memory>") -> tuple[ChartDefinition, ...]:
    if not isinstance(data, dict) or not isinstance(data.get("charts"), list):
        raise DefinitionLoadError(source, "expected a mapping with a 'charts' list")

    definitions: list[ChartDefinition] = []
    for index, entry in enumerate(data["charts"]):
        try:
            definitions.append(ChartDefinition.model_validate(entry))
        except ValidationError as exc:
            raise DefinitionLoadError(source, f"invalid chart #{index}: {exc}") from exc
    return tuple(definitions)


def load_chart_definitions(source: Path | str | TextIO) -> tuple[ChartDefinition, ...]:
    """Load chart definitions from a YAML file path or an open text stream."""
    if hasattr(source, "read"):
        label = str(getattr(source, "name", "<stream>"))
        try:
            data = yaml.safe_load(source)
        except yaml.YAMLError as exc:
            raise DefinitionLoadError(label, f"invalid YAML: {exc}") from exc
        return parse_chart_definitions(data, source=label)

    path = Path(source)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise DefinitionLoadError(str(path), f"cannot read file: {exc}") from exc
    except yaml.YAMLError as exc:
        raise DefinitionLoadError(str(path), f"invalid YAML: {exc}") from exc
    return parse_chart_definitions(data, source=str(path))
