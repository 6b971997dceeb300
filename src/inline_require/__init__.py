"""inline-require: inline side-effect-free require bindings in bundled output."""

from __future__ import annotations

__version__ = "0.1.0"

from inline_require.config import InlineRequireOptions, load_options
from inline_require.errors import ConfigurationError, InlineRequireError, TransformError
from inline_require.plugin import InlineRequirePlugin

__all__ = [
    "ConfigurationError",
    "InlineRequireError",
    "InlineRequireOptions",
    "InlineRequirePlugin",
    "TransformError",
    "__version__",
    "load_options",
]
