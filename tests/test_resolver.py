"""Tests for require-binding extraction and alias resolution."""

from __future__ import annotations

from inline_require.registry import SideEffectRegistry
from inline_require.resolver import extract_bindings

from conftest import BAR, BAR_DECL, FOO, FOO_DECL

A = "a__WEBPACK_IMPORTED_MODULE_0__"
A_DEFAULT = "a__WEBPACK_IMPORTED_MODULE_0___default"


def test_extracts_in_order_with_classification(registry):
    bindings = extract_bindings(f"{FOO_DECL}\n{BAR_DECL}\n", registry)
    assert list(bindings) == [FOO, BAR]
    assert bindings[FOO].expression == '__webpack_require__("./foo.js")'
    assert bindings[FOO].module_id == "./foo.js"
    assert bindings[FOO].side_effect_free is True
    assert bindings[BAR].side_effect_free is False


def test_unknown_module_defaults_to_side_effects():
    bindings = extract_bindings(FOO_DECL, SideEffectRegistry())
    assert bindings[FOO].side_effect_free is False


def test_unmatched_text_yields_nothing(registry):
    assert extract_bindings("function f() { return 1; }", registry) == {}
    assert extract_bindings("", registry) == {}
    assert extract_bindings("var ;;; = __webpack_require__(", registry) == {}


def test_numeric_require_has_no_module_id(registry):
    bindings = extract_bindings(f"var {FOO} = __webpack_require__(12);", registry)
    assert bindings[FOO].module_id is None
    assert bindings[FOO].side_effect_free is False


class TestAliasExpansion:
    def test_alias_resolves_to_require_expression(self):
        reg = SideEffectRegistry({"./a.js": True})
        text = (
            f'var {A} = __webpack_require__("./a.js");\n'
            f"var {A_DEFAULT} = /*#__PURE__*/__webpack_require__.n({A});\n"
        )
        bindings = extract_bindings(text, reg)
        alias = bindings[A_DEFAULT]
        assert alias.expression == '__webpack_require__.n(__webpack_require__("./a.js"))'
        assert A not in alias.expression
        assert alias.module_id == "./a.js"
        assert alias.side_effect_free is True
        assert alias.annotation == "/*#__PURE__*/"

    def test_forward_reference_is_left_alone(self):
        reg = SideEffectRegistry({"./a.js": True})
        text = (
            f"var {A_DEFAULT} = __webpack_require__.n({A});\n"
            f'var {A} = __webpack_require__("./a.js");\n'
        )
        bindings = extract_bindings(text, reg)
        assert bindings[A_DEFAULT].expression == f"__webpack_require__.n({A})"
        assert bindings[A_DEFAULT].side_effect_free is False

    def test_self_reference_terminates(self):
        text = f"var {A} = __webpack_require__.n({A});\nvar {A} = __webpack_require__.n({A});"
        bindings = extract_bindings(text, SideEffectRegistry())
        # second declaration substitutes the first exactly once
        assert bindings[A].expression == f"__webpack_require__.n(__webpack_require__.n({A}))"

    def test_two_hop_chain(self):
        reg = SideEffectRegistry({"./a.js": True})
        b = "b__WEBPACK_IMPORTED_MODULE_1__"
        c = "c__WEBPACK_IMPORTED_MODULE_2__"
        text = (
            f'var {A} = __webpack_require__("./a.js");\n'
            f"var {b} = __webpack_require__.n({A});\n"
            f"var {c} = __webpack_require__.t({b});\n"
        )
        bindings = extract_bindings(text, reg)
        assert bindings[c].expression == (
            '__webpack_require__.t(__webpack_require__.n(__webpack_require__("./a.js")))'
        )

    def test_only_first_reference_is_substituted(self):
        reg = SideEffectRegistry({"./a.js": True})
        b = "b__WEBPACK_IMPORTED_MODULE_1__"
        c = "c__WEBPACK_IMPORTED_MODULE_2__"
        text = (
            f'var {A} = __webpack_require__("./a.js");\n'
            f'var {b} = __webpack_require__("./b.js");\n'
            f"var {c} = __webpack_require__.x({A}){b};\n"
        )
        bindings = extract_bindings(text, reg)
        assert bindings[c].expression == f'__webpack_require__.x(__webpack_require__("./a.js")){b}'
