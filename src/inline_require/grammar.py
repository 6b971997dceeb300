"""Micro-grammar for the bundler's generated "require variable" code.

The bundler emits imported-module bindings in one fixed shape:

    var foo__WEBPACK_IMPORTED_MODULE_0__ = __webpack_require__("./foo.js");

Nothing here is a JavaScript parser.  Text that does not fit the shape is
simply not a match.
"""

from __future__ import annotations

import re

# Reserved naming convention for generated bindings
BINDING_NAME = re.compile(r"\w+_WEBPACK_[A-Z]+_MODULE_\w+")

# var <name> = <annotation><require-expression>;
# annotation: optional /*#__PURE__*/-style prefix
BINDING_DECLARATION = re.compile(
    r"var (?P<name>\w+_WEBPACK_[A-Z]+_MODULE_\w+) = "
    r"(?P<annotation>[/*#\w]*)"
    r"(?P<expression>__webpack_require__[^;,]+);"
)

# First quoted string literal inside a require-expression
MODULE_ID_LITERAL = re.compile(r"[\"']([^\"']+)[\"']")

# Boundary between bundled units (one module wrapper each)
UNIT_HEADER = "(function(module, __webpack_exports__, __webpack_require__) {"

# Default classification policy
DEPENDENCY_ROOT_MARKER = "node_modules"
SCRIPT_EXTENSION = re.compile(r"\.[jt]sx?$")

# Output files eligible for rewriting
SCRIPT_OUTPUT = r"\.[cm]?js(\?.*)?$"

INLINED_MARKER = "/* (inlined) {module_id} */"

_IDENT_CHAR = r"[\w$]"


def declaration_pattern(name: str) -> re.Pattern[str]:
    """Top-level declaration statement of one binding."""
    return re.compile(rf"var {re.escape(name)}(?!{_IDENT_CHAR})[^;]+;")


def use_site_pattern(name: str) -> re.Pattern[str]:
    """Token-boundary occurrences of a binding name."""
    return re.compile(rf"(?<!{_IDENT_CHAR}){re.escape(name)}(?!{_IDENT_CHAR})")


def module_id_of(expression: str) -> str | None:
    """Return the module identifier quoted in a require-expression, if any."""
    m = MODULE_ID_LITERAL.search(expression)
    return m.group(1) if m else None


def is_local_script(ident: str) -> bool:
    """Default policy: project-local script files are side-effect free."""
    return DEPENDENCY_ROOT_MARKER not in ident and bool(SCRIPT_EXTENSION.search(ident))


def inlined_marker(module_id: str | None) -> str:
    # "*/" inside an id would close the comment early
    safe = (module_id or "?").replace("*/", "* /")
    return INLINED_MARKER.format(module_id=safe)
