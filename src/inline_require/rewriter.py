"""Inline side-effect-free require bindings at their use sites.

For every side-effect-free binding, in discovery order:

1. the declaration is replaced by a comment marker naming the module;
2. every token-boundary use of the name becomes ``(<require-expression>)``;
3. if step 2 replaced nothing, both edits are dropped for that binding.

Bindings with side effects are never touched: removing their top-level
evaluation would change effect ordering.
"""

from __future__ import annotations

import logging

from inline_require.grammar import (
    UNIT_HEADER,
    declaration_pattern,
    inlined_marker,
    use_site_pattern,
)
from inline_require.models import RequireBinding, TransformResult
from inline_require.registry import SideEffectRegistry
from inline_require.resolver import extract_bindings

log = logging.getLogger(__name__)


def transform(original: str, bindings: dict[str, RequireBinding]) -> TransformResult:
    """Rewrite one unit given its bindings."""
    output = original
    inlined: list[str] = []

    for name, binding in bindings.items():
        if not binding.side_effect_free:
            continue

        marker = inlined_marker(binding.module_id)
        without_declaration = declaration_pattern(name).sub(
            lambda _m: marker, output, count=1,
        )

        replacement = f"({binding.expression})"
        rewritten, uses = use_site_pattern(name).subn(
            lambda _m: replacement, without_declaration,
        )

        if uses == 0:
            log.debug("Binding %s has no use sites, leaving it in place", name)
            continue

        output = rewritten
        inlined.append(name)

    if output == original:
        return TransformResult.no_change()
    return TransformResult(text=output, inlined=tuple(inlined))


def transform_units(source: str, registry: SideEffectRegistry) -> TransformResult:
    """Rewrite every bundled unit of a file independently and rejoin them.

    Aliases are never resolved across unit boundaries.
    """
    units = source.split(UNIT_HEADER)
    inlined: list[str] = []
    rewritten_units: list[str] = []

    for unit in units:
        result = transform(unit, extract_bindings(unit, registry))
        rewritten_units.append(result.text_or(unit))
        inlined.extend(result.inlined)

    output = UNIT_HEADER.join(rewritten_units)
    if output == source:
        return TransformResult.no_change()
    return TransformResult(text=output, inlined=tuple(inlined))
