from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from nmon_report.dataset import DataSet

ChartType = Literal["line", "stacked_area", "bar"]
Aggregate = Literal["mean", "max", "sum"]


def sanitize_short_name(short_name: str) -> str:
    """Make a short name usable as a file name: line breaks become spaces."""
    return short_name.replace("\r", " ").replace("\n", " ")


class ChartDefinition(BaseModel):
    """One chart: which fields to plot, how, and which datasets it applies to."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    short_name: str
    title: str = ""
    chart_type: ChartType = Field(default="line", alias="type")
    y_label: str | None = None
    y_max: float | None = None
    aggregate: Aggregate = "mean"
    series: tuple[str, ...] = Field(validation_alias=AliasChoices("series", "fields"))
    requires: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        filled = dict(data)
        if not filled.get("title"):
            filled["title"] = filled.get("short_name", "")
        if not filled.get("requires"):
            filled["requires"] = filled.get("series") or filled.get("fields") or ()
        return filled

    @field_validator("short_name")
    @classmethod
    def _require_short_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("short_name must be a non-empty string")
        return value

    @field_validator("series")
    @classmethod
    def _require_series(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one series pattern is required")
        return value

    @property
    def file_stem(self) -> str:
        return sanitize_short_name(self.short_name)

    def applies_to(self, dataset: DataSet) -> bool:
        return all(dataset.has_field_matching(pattern) for pattern in self.requires)
