"""Shared utilities for inline-require."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, StrictBool, ValidationError

from inline_require.errors import ConfigurationError
from inline_require.host import Module
from inline_require.sources import RawSource, Source, SourceMapSource

# Maximum output file size to load (skip large binaries)
MAX_FILE_SIZE = 64 * 1024 * 1024  # 64 MB


class ModuleEntry(BaseModel):
    """One entry of the module list."""

    id: str | int | None = None
    resource: str | None = None
    ident: str | None = None
    side_effect_free: StrictBool | None = None


def discover_files(build_dir: Path) -> list[Path]:
    """Walk a build directory, skipping source maps and oversized files."""
    files: list[Path] = []
    for item in sorted(build_dir.rglob("*")):
        if item.is_dir() or item.suffix == ".map":
            continue
        try:
            if item.stat().st_size > MAX_FILE_SIZE:
                continue
        except OSError:
            continue
        files.append(item)
    return files


def load_assets(build_dir: Path) -> dict[str, Source]:
    """Load every output file as an asset keyed by its relative name.

    A ``<file>.map`` sidecar turns the asset into a SourceMapSource.
    """
    assets: dict[str, Source] = {}
    for path in discover_files(build_dir):
        name = path.relative_to(build_dir).as_posix()
        data = path.read_bytes()
        map_path = path.with_name(path.name + ".map")
        if map_path.exists():
            try:
                source_map = json.loads(map_path.read_text())
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"Malformed source map {map_path}: {exc}") from exc
            assets[name] = SourceMapSource(data, name, source_map)
        else:
            assets[name] = RawSource(data)
    return assets


def load_modules(path: Path) -> list[Module]:
    """Read module metadata: a JSON list of {id, ident, side_effect_free}."""
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read module list {path}: {exc}") from exc
    if not isinstance(data, list):
        raise ConfigurationError(f"Module list {path} must be a JSON array")

    modules: list[Module] = []
    for entry in data:
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Module entry in {path} must be an object: {entry!r}")
        try:
            parsed = ModuleEntry.model_validate(entry)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid module entry in {path}: {exc}") from exc
        modules.append(Module(
            id=parsed.id,
            resource=parsed.resource,
            ident=parsed.ident,
            side_effect_free=parsed.side_effect_free,
        ))
    return modules
