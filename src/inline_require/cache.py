"""Content-addressed cache of transform results.

Keys combine the input text hash with the classification fingerprint: the
same text can rewrite differently once a module's classification changes.
Bounded by an LRU capacity and an optional time-to-live, so long watch
sessions don't grow without limit.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from inline_require.errors import ConfigurationError
from inline_require.models import TransformResult

log = logging.getLogger(__name__)


def fingerprint(text: str, classification: str = "") -> str:
    digest = hashlib.sha256()
    digest.update(text.encode("utf-8", errors="surrogatepass"))
    digest.update(b"\0")
    digest.update(classification.encode("ascii"))
    return digest.hexdigest()


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0


class TransformCache:
    """Thread-safe LRU + TTL map of fingerprint → TransformResult."""

    def __init__(
        self,
        max_entries: int = 1000,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ConfigurationError(f"cache max_entries must be >= 1, got {max_entries}")
        if ttl is not None and ttl <= 0:
            raise ConfigurationError(f"cache ttl must be > 0, got {ttl}")
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, TransformResult]] = OrderedDict()
        self._lock = threading.Lock()
        self.stats = CacheStats()

    def get(self, key: str) -> TransformResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.stats.misses += 1
                return None

            stored_at, result = entry
            if self.ttl is not None and self._clock() - stored_at > self.ttl:
                del self._entries[key]
                self.stats.expirations += 1
                self.stats.misses += 1
                return None

            self._entries.move_to_end(key)
            self.stats.hits += 1
            return result

    def put(self, key: str, result: TransformResult) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), result)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                self.stats.evictions += 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
