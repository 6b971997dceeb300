"""Plugin options and the YAML options file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from inline_require.errors import ConfigurationError
from inline_require.grammar import SCRIPT_OUTPUT

log = logging.getLogger(__name__)


class InlineRequireOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    source_map: bool | None = None   # default: host devtool is set
    cache: bool | None = None        # default: host is in watch mode
    concurrency: int | None = Field(default=None, ge=1)  # default: cpu_count - 1
    parallel: Literal["inline", "threads", "processes"] = "threads"
    cache_max_entries: int = Field(default=1000, ge=1)
    cache_ttl: float | None = Field(default=None, gt=0)  # seconds
    test: str = SCRIPT_OUTPUT        # output file name pattern


def load_options(path: Path, **overrides) -> InlineRequireOptions:
    """Read options from a YAML file; non-None ``overrides`` win."""
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read options file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Options file {path} must contain a mapping")

    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        options = InlineRequireOptions.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid options in {path}: {exc}") from exc
    log.debug("Loaded options from %s: %s", path, options.model_dump())
    return options
