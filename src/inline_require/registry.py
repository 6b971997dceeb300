"""Side-effect classification of bundled modules.

One registry belongs to one plugin instance.  It is written during the
classification phase only (single-threaded) and read concurrently afterwards.
"""

from __future__ import annotations

import hashlib
import json
import logging

from inline_require.grammar import is_local_script

log = logging.getLogger(__name__)

ModuleId = str | int


class SideEffectRegistry:
    """Memoized mapping of module id → "free of side effects"."""

    def __init__(self, entries: dict[str, bool] | None = None) -> None:
        self._free: dict[str, bool] = dict(entries or {})
        self._fingerprint: str | None = None

    def classify(
        self,
        module_id: ModuleId | None,
        explicit_flag: bool | None,
        ident: str,
    ) -> bool | None:
        """Classify a module once; later calls return the stored value.

        An explicit declaration wins.  Otherwise only project-local script
        files are considered free of side effects.  A ``None`` id is skipped.
        """
        if module_id is None:
            return None
        key = str(module_id)
        if key in self._free:
            return self._free[key]

        if isinstance(explicit_flag, bool):
            is_free = explicit_flag
        else:
            is_free = is_local_script(ident)

        self._free[key] = is_free
        self._fingerprint = None
        log.debug("Classified %s (%s): side_effect_free=%s", key, ident, is_free)
        return is_free

    def is_side_effect_free(self, module_id: ModuleId | None) -> bool:
        """Unknown modules are treated as having side effects."""
        if module_id is None:
            return False
        return self._free.get(str(module_id), False)

    def snapshot(self) -> dict[str, bool]:
        return dict(self._free)

    @classmethod
    def from_snapshot(cls, entries: dict[str, bool]) -> SideEffectRegistry:
        return cls(entries)

    def fingerprint(self) -> str:
        """Stable hash of the classification state (part of cache keys)."""
        if self._fingerprint is None:
            payload = json.dumps(self._free, sort_keys=True, separators=(",", ":"))
            self._fingerprint = hashlib.sha256(payload.encode("utf-8")).hexdigest()
        return self._fingerprint

    def reset(self) -> None:
        self._free.clear()
        self._fingerprint = None

    def __contains__(self, module_id: object) -> bool:
        return str(module_id) in self._free

    def __len__(self) -> int:
        return len(self._free)
