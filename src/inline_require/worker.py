"""Out-of-process worker entry point.

Messages are plain dicts so they pickle cheaply:

    in:  {"file": str, "original": str, "side_effect_free": {id: bool}}
    out: {"file": str, "text": str | None, "inlined": [name, ...]}

``text`` is None when the file needs no change.
"""

from __future__ import annotations

from inline_require.registry import SideEffectRegistry
from inline_require.rewriter import transform_units


def process_source(payload: dict) -> dict:
    registry = SideEffectRegistry.from_snapshot(payload["side_effect_free"])
    result = transform_units(payload["original"], registry)
    return {
        "file": payload["file"],
        "text": result.text,
        "inlined": list(result.inlined),
    }
