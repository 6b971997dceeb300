"""Shared fixtures: bundled-output snippets in the shape the bundler emits."""

from __future__ import annotations

import pytest

from inline_require.registry import SideEffectRegistry

FOO = "foo__WEBPACK_IMPORTED_MODULE_0__"
BAR = "bar__WEBPACK_IMPORTED_MODULE_1__"

FOO_DECL = f'var {FOO} = __webpack_require__("./foo.js");'
BAR_DECL = f'var {BAR} = __webpack_require__("./bar.js");'


@pytest.fixture
def registry() -> SideEffectRegistry:
    reg = SideEffectRegistry()
    reg.classify("./foo.js", None, "./foo.js")
    reg.classify("./bar.js", False, "./bar.js")
    return reg
