from __future__ import annotations

import logging
from dataclasses import dataclass

from advisory_lifecycle.contracts import AdvisoryBatch, ContextKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    key: ContextKey
    batch: AdvisoryBatch


class LookupCache:
    """
    Single-slot memo of the most recent context-based advisory fetch.

    Only one composer is expected to be open at a time, so the slot is
    never evicted; a different context simply overwrites it.
    """

    def __init__(self) -> None:
        self._entry: CacheEntry | None = None

    @property
    def key(self) -> ContextKey | None:
        return self._entry.key if self._entry is not None else None

    def get(self, key: ContextKey) -> AdvisoryBatch | None:
        entry = self._entry
        if entry is None or entry.key != key:
            return None
        return entry.batch

    def store(self, key: ContextKey, batch: AdvisoryBatch) -> None:
        if self._entry is not None and self._entry.key != key:
            logger.debug("lookup cache overwritten: %s -> %s", self._entry.key, key)
        self._entry = CacheEntry(key=key, batch=batch)

    def clear(self) -> None:
        self._entry = None


_PROCESS_CACHE = LookupCache()


def process_lookup_cache() -> LookupCache:
    """The cache shared by engines that are not given one explicitly."""
    return _PROCESS_CACHE
