from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

# Half of 1920x1080; favors file size and render speed over resolution.
DEFAULT_CHART_WIDTH = 1920 // 2
DEFAULT_CHART_HEIGHT = 1080 // 2


class OutputConfig(BaseModel):
    width: int = Field(default=DEFAULT_CHART_WIDTH, ge=1)
    height: int = Field(default=DEFAULT_CHART_HEIGHT, ge=1)
    dpi: int = Field(default=100, ge=1)
    format: Literal["png"] = "png"


class GranularityConfig(BaseModel):
    automatic: bool = True
    fixed_seconds: int = Field(default=60, ge=1)
    default_seconds: int = Field(default=60, ge=1)
    target_points: int = Field(default=100, ge=1)


class DefinitionsConfig(BaseModel):
    sources: dict[str, str] = Field(default_factory=dict)


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    output: OutputConfig = Field(default_factory=OutputConfig)
    granularity: GranularityConfig = Field(default_factory=GranularityConfig)
    definitions: DefinitionsConfig = Field(default_factory=DefinitionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_path(path_value: str, base_dir: Path) -> str:
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    config.definitions.sources = {
        key: _resolve_path(source, base_dir)
        for key, source in config.definitions.sources.items()
    }
    config.logging.level = os.getenv("NMON_REPORT_LOG_LEVEL") or config.logging.level
    return config
