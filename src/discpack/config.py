"""Packing configuration and config-file loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import tomli
import yaml
from pydantic import BaseModel, Field, model_validator

from discpack.core.types import DEFAULT_BUCKET_GRANULARITY, SINGLE_LAYER_DVD_BYTES, ZIP_MAX_SIZE
from discpack.pack.mode import SplitStrategy

CONFIG_SECTION = "discpack"


class PackConfig(BaseModel):
    """Configuration for a packing run.

    Attributes
    ----------
    bucket_granularity
        Bucket width in bytes.
    target_capacity
        Capacity of each packed set in bytes (one disc).
    secondary_capacity
        Ceiling for each archive part; ``None`` disables splitting.
    split_strategy
        How sets over the secondary ceiling are split.
    max_sets
        Stop after producing this many sets; ``None`` for no limit.
    pace_interval
        Seconds to pause between packer iterations.
    log_level
        Logging level name.
    """

    bucket_granularity: int = Field(default=DEFAULT_BUCKET_GRANULARITY, gt=0)
    target_capacity: int = Field(default=SINGLE_LAYER_DVD_BYTES, gt=0)
    secondary_capacity: int | None = Field(default=ZIP_MAX_SIZE, gt=0)
    split_strategy: SplitStrategy = SplitStrategy.BISECT
    max_sets: int | None = Field(default=None, ge=1)
    pace_interval: float = Field(default=0.0, ge=0)
    log_level: str = "INFO"

    model_config = {"frozen": True, "extra": "forbid"}

    @model_validator(mode="after")
    def _check_level(self) -> PackConfig:
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {self.log_level}")
        return self


def load_config(path: Path, **overrides: Any) -> PackConfig:
    """Load a `PackConfig` from a YAML, TOML or JSON file.

    A top-level ``discpack`` section is used when present; otherwise the whole
    document is the configuration. Keyword overrides that are not ``None``
    take precedence over file values.

    Parameters
    ----------
    path
        Config file path.
    **overrides
        Field values to apply on top of the file.

    Returns
    -------
    PackConfig
        Validated configuration.

    Raises
    ------
    ValueError
        If the file cannot be read or parsed, its suffix is unsupported, or
        the values fail validation.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Failed to read config file: {path}") from e

    data = _parse(text, suffix=path.suffix, name=str(path))
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    section = data.get(CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ValueError(f"'{CONFIG_SECTION}' section must be a mapping: {path}")

    merged = {**section, **{k: v for k, v in overrides.items() if v is not None}}
    return PackConfig(**merged)


def _parse(text: str, *, suffix: str, name: str) -> Any:
    suf = suffix.lower()
    if suf in (".yml", ".yaml"):
        try:
            return yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config: {name}") from e
    if suf == ".toml":
        try:
            return tomli.loads(text)
        except tomli.TOMLDecodeError as e:
            raise ValueError(f"Failed to parse TOML config: {name}") from e
    if suf == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse JSON config: {name}") from e
    raise ValueError(f"Unsupported config type for {name}")
