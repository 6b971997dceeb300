"""Per-file transform: cache lookup, then the unit-scoped rewrite."""

from __future__ import annotations

import logging
from typing import Callable

from inline_require.cache import TransformCache, fingerprint
from inline_require.models import TransformResult
from inline_require.registry import SideEffectRegistry
from inline_require.rewriter import transform_units

log = logging.getLogger(__name__)

TransformFn = Callable[[str, SideEffectRegistry], TransformResult]


class TransformEngine:
    """Runs the rewrite for one file's text, memoized when a cache is set."""

    def __init__(
        self,
        registry: SideEffectRegistry,
        cache: TransformCache | None = None,
        transform: TransformFn = transform_units,
    ) -> None:
        self.registry = registry
        self.cache = cache
        self._transform = transform

    def process(self, file: str, text: str) -> TransformResult:
        cached = self.cached(file, text)
        if cached is not None:
            return cached

        result = self._transform(text, self.registry)
        if result.changed:
            log.debug("Inlined %d bindings in %s", len(result.inlined), file)
        self.remember(text, result)
        return result

    def cached(self, file: str, text: str) -> TransformResult | None:
        if self.cache is None:
            return None
        result = self.cache.get(self._key(text))
        if result is not None:
            log.debug("Cache hit for %s", file)
        return result

    def remember(self, text: str, result: TransformResult) -> None:
        if self.cache is not None:
            self.cache.put(self._key(text), result)

    def _key(self, text: str) -> str:
        return fingerprint(text, self.registry.fingerprint())
