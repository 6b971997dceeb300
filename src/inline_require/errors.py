"""Exception hierarchy for inline-require."""

from __future__ import annotations


class InlineRequireError(Exception):
    """Base class for every error raised by inline-require."""


class ConfigurationError(InlineRequireError):
    """Unrecoverable configuration or host problem. Never retried."""


class TransformError(InlineRequireError):
    """A single output file could not be transformed.

    The build must fail: emitting the file unmodified or half-rewritten would
    hide the problem.
    """

    def __init__(self, file: str, reason: str) -> None:
        self.file = file
        self.reason = reason
        super().__init__(f"{file}: {reason}")
