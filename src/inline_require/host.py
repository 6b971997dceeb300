"""Host build-tool model and the adapters that talk to it.

The host exposes one of two capability sets.  Newer hosts hand every output
asset to a single asset-processing hook and look module ids up in a chunk
graph; older hosts hand over chunks (each listing its files) and keep the id
on the module itself.  The adapter is chosen once, when the plugin is applied.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from inline_require.errors import ConfigurationError
from inline_require.sources import Source

log = logging.getLogger(__name__)


class AssetStore(Protocol):
    def asset_names(self) -> list[str]: ...

    def get_asset(self, name: str) -> Source | None: ...

    def update_asset(self, name: str, source: Source) -> None: ...


@dataclass
class Module:
    id: str | int | None
    resource: str | None = None           # absolute path on disk
    ident: str | None = None              # "./src/foo.js", computed if absent
    side_effect_free: bool | None = None  # declared metadata, if any


@dataclass
class Chunk:
    name: str
    files: list[str] = field(default_factory=list)


class ChunkGraph:
    """Module → id lookup owned by newer hosts."""

    def __init__(self, ids: dict[int, str | int] | None = None) -> None:
        self._ids = ids or {}

    def set_module_id(self, module: Module, module_id: str | int) -> None:
        self._ids[id(module)] = module_id

    def get_module_id(self, module: Module) -> str | int | None:
        return self._ids.get(id(module), module.id)


@dataclass
class Compilation:
    modules: list[Module] = field(default_factory=list)
    assets: dict[str, Source] = field(default_factory=dict)
    chunks: list[Chunk] = field(default_factory=list)
    chunk_graph: ChunkGraph | None = None

    def asset_names(self) -> list[str]:
        return list(self.assets)

    def get_asset(self, name: str) -> Source | None:
        return self.assets.get(name)

    def update_asset(self, name: str, source: Source) -> None:
        if name not in self.assets:
            raise ConfigurationError(f"Cannot update unknown asset {name!r}")
        self.assets[name] = source

    def additional_assets(self) -> list[str]:
        """Assets that no chunk lists as one of its files."""
        chunk_files = {f for chunk in self.chunks for f in chunk.files}
        return [name for name in self.assets if name not in chunk_files]


@dataclass
class Compiler:
    context: str | None = None
    devtool: str | bool | None = None
    watch: bool = False
    process_assets: bool = True   # newer host: single asset-processing hook


class HostAdapter(ABC):
    """Capability set of one host generation."""

    name: str = ""

    @abstractmethod
    def module_id(self, compilation: Compilation, module: Module) -> str | int | None: ...

    @abstractmethod
    def output_files(self, compilation: Compilation) -> list[str]: ...


class ProcessAssetsAdapter(HostAdapter):
    name = "process-assets"

    def module_id(self, compilation: Compilation, module: Module) -> str | int | None:
        if compilation.chunk_graph is not None:
            return compilation.chunk_graph.get_module_id(module)
        return module.id

    def output_files(self, compilation: Compilation) -> list[str]:
        return compilation.asset_names()


class ChunkAssetsAdapter(HostAdapter):
    name = "chunk-assets"

    def module_id(self, compilation: Compilation, module: Module) -> str | int | None:
        return module.id

    def output_files(self, compilation: Compilation) -> list[str]:
        files: list[str] = []
        seen: set[str] = set()
        for chunk in compilation.chunks:
            for f in chunk.files:
                if f not in seen:
                    seen.add(f)
                    files.append(f)
        for f in compilation.additional_assets():
            if f not in seen:
                seen.add(f)
                files.append(f)
        return files


def select_adapter(compiler: Compiler) -> HostAdapter:
    adapter = ProcessAssetsAdapter() if compiler.process_assets else ChunkAssetsAdapter()
    log.debug("Using %s host adapter", adapter.name)
    return adapter


def lib_ident(module: Module, context: str | None) -> str | None:
    """Context-relative identity of a module ("./src/foo.js").

    Returns None when the module has neither an ident nor a resource.
    """
    if module.ident is not None:
        return module.ident
    if module.resource is None:
        return None
    if not context:
        raise ConfigurationError("Compiler context directory is not set")
    if not Path(context).is_dir():
        raise ConfigurationError(f"Compiler context directory does not exist: {context}")

    rel = os.path.relpath(module.resource, context).replace(os.sep, "/")
    if not rel.startswith("../"):
        rel = "./" + rel
    return rel
