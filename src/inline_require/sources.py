"""Asset values exchanged with the host's output store.

Modelled on the host's own source objects: every asset exposes ``source()``,
``map()`` and ``source_and_map()``.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass


def to_text(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class Source(ABC):
    @abstractmethod
    def source(self) -> str | bytes: ...

    def map(self) -> dict | None:
        return None

    def source_and_map(self) -> tuple[str | bytes, dict | None]:
        return self.source(), self.map()

    def size(self) -> int:
        value = self.source()
        return len(value if isinstance(value, bytes) else value.encode("utf-8"))


@dataclass
class RawSource(Source):
    text: str | bytes

    def source(self) -> str | bytes:
        return self.text


@dataclass
class SourceMapSource(Source):
    text: str | bytes
    name: str
    source_map: dict
    original_text: str | None = None

    def source(self) -> str | bytes:
        return self.text

    def map(self) -> dict | None:
        return self.source_map


def merge_source_map(original_map: dict, file: str) -> dict:
    """Chain the original map onto rewritten text.

    Mappings are line-approximate: columns shift wherever a declaration or
    use site is rewritten, and a declaration spanning several lines shortens
    the file.  No re-mapping is attempted.
    """
    merged = copy.deepcopy(original_map)
    merged["file"] = file
    merged.setdefault("version", 3)
    return merged
