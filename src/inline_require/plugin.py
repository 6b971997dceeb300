"""InlineRequirePlugin: the two-phase build pass.

Usage:
    plugin = InlineRequirePlugin(InlineRequireOptions(parallel="processes"))
    plugin.apply(compiler)

    report = plugin.run(compilation)   # classify, then rewrite assets
    ...
    plugin.close()                     # end of session

Phase 1 classifies every module; phase 2 rewrites output files.  An
unclassified module reads as "has side effects", so phase 2 never starts
before phase 1 has finished.
"""

from __future__ import annotations

import logging
import os

from inline_require.cache import TransformCache
from inline_require.config import InlineRequireOptions
from inline_require.dispatcher import DispatchReport, Dispatcher
from inline_require.engine import TransformEngine
from inline_require.errors import ConfigurationError
from inline_require.host import Compilation, Compiler, HostAdapter, lib_ident, select_adapter
from inline_require.registry import SideEffectRegistry

log = logging.getLogger(__name__)

PLUGIN_NAME = "InlineRequirePlugin"


def default_concurrency() -> int:
    return max(1, (os.cpu_count() or 2) - 1)


class InlineRequirePlugin:
    def __init__(self, options: InlineRequireOptions | None = None) -> None:
        self.options = options or InlineRequireOptions()
        self.registry = SideEffectRegistry()
        self.cache: TransformCache | None = None
        self.compiler: Compiler | None = None
        self.adapter: HostAdapter | None = None
        self.source_map = False
        self._dispatcher: Dispatcher | None = None

    def apply(self, compiler: Compiler) -> None:
        """Resolve option defaults against the host and pick its adapter."""
        opts = self.options
        self.compiler = compiler
        self.adapter = select_adapter(compiler)
        self.source_map = opts.source_map if opts.source_map is not None else bool(compiler.devtool)

        use_cache = opts.cache if opts.cache is not None else compiler.watch
        self.cache = (
            TransformCache(max_entries=opts.cache_max_entries, ttl=opts.cache_ttl)
            if use_cache else None
        )

        engine = TransformEngine(self.registry, self.cache)
        self._dispatcher = Dispatcher(
            engine,
            concurrency=opts.concurrency or default_concurrency(),
            mode=opts.parallel,
            test=opts.test,
        )
        log.info(
            "%s applied (adapter=%s, source_map=%s, cache=%s, parallel=%s x%d)",
            PLUGIN_NAME, self.adapter.name, self.source_map, use_cache,
            self._dispatcher.mode, self._dispatcher.concurrency,
        )

    def collect_side_effects(self, compilation: Compilation) -> int:
        """Phase 1: classify every module with a resolved id.

        Returns the number of modules newly classified.
        """
        adapter, compiler = self._require_applied()
        before = len(self.registry)

        for module in compilation.modules:
            module_id = adapter.module_id(compilation, module)
            if module_id is None or module_id in self.registry:
                continue
            ident = lib_ident(module, compiler.context)
            if ident is None:
                continue
            self.registry.classify(module_id, module.side_effect_free, ident)

        # Computed once here so phase 2 only reads it
        self.registry.fingerprint()
        added = len(self.registry) - before
        log.info("Classified %d new modules (%d total)", added, len(self.registry))
        return added

    def process_assets(self, compilation: Compilation) -> DispatchReport:
        """Phase 2: rewrite every eligible output file."""
        adapter, _compiler = self._require_applied()
        files = adapter.output_files(compilation)
        return self._dispatcher.run(compilation, files, source_map=self.source_map)

    def run(self, compilation: Compilation) -> DispatchReport:
        self.collect_side_effects(compilation)
        return self.process_assets(compilation)

    def reset(self) -> None:
        """Forget classifications and cached output (independent session)."""
        self.registry.reset()
        if self.cache is not None:
            self.cache.clear()

    def close(self) -> None:
        if self._dispatcher is not None:
            self._dispatcher.close()

    def __enter__(self) -> InlineRequirePlugin:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require_applied(self) -> tuple[HostAdapter, Compiler]:
        if self.adapter is None or self.compiler is None:
            raise ConfigurationError(f"{PLUGIN_NAME} used before apply(compiler)")
        return self.adapter, self.compiler
