"""Extract generated require bindings from one unit and resolve aliases."""

from __future__ import annotations

import logging

from inline_require.grammar import BINDING_DECLARATION, BINDING_NAME, module_id_of
from inline_require.models import RequireBinding
from inline_require.registry import SideEffectRegistry

log = logging.getLogger(__name__)


def extract_bindings(text: str, registry: SideEffectRegistry) -> dict[str, RequireBinding]:
    """Return bindings keyed by name, in first-seen order.

    A require-expression that references an earlier binding gets that
    binding's resolved expression substituted in.  Only the first reference
    is substituted (one alias hop per binding), so the loop always terminates.
    Text that does not match the generated shape yields no bindings.
    """
    bindings: dict[str, RequireBinding] = {}

    for match in BINDING_DECLARATION.finditer(text):
        name = match.group("name")
        expression = _expand_alias(match.group("expression"), bindings)
        module_id = module_id_of(expression)

        bindings[name] = RequireBinding(
            name=name,
            expression=expression,
            module_id=module_id,
            side_effect_free=registry.is_side_effect_free(module_id),
            annotation=match.group("annotation"),
        )

    if bindings:
        log.debug(
            "Found %d require bindings (%d side-effect free)",
            len(bindings), sum(1 for b in bindings.values() if b.side_effect_free),
        )
    return bindings


def _expand_alias(expression: str, seen: dict[str, RequireBinding]) -> str:
    def substitute(m):
        earlier = seen.get(m.group(0))
        return earlier.expression if earlier else m.group(0)

    return BINDING_NAME.sub(substitute, expression, count=1)
