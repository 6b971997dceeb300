"""RequireBinding and TransformResult dataclasses — pure data, no logic."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RequireBinding:
    name: str                # foo__WEBPACK_IMPORTED_MODULE_0__
    expression: str          # __webpack_require__("./foo.js"), aliases expanded
    module_id: str | None    # "./foo.js", None when no quoted literal
    side_effect_free: bool
    annotation: str = ""     # /*#__PURE__*/ prefix, if the bundler emitted one


@dataclass(frozen=True)
class TransformResult:
    text: str | None = None           # None means "no change"
    inlined: tuple[str, ...] = ()     # binding names rewritten

    @property
    def changed(self) -> bool:
        return self.text is not None

    def text_or(self, original: str) -> str:
        return self.text if self.text is not None else original

    @classmethod
    def no_change(cls) -> TransformResult:
        return cls()
