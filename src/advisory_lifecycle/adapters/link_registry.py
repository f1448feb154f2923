from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Protocol

from advisory_lifecycle.contracts import DuplicateLinkUsage

_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def normalize_link(url: str) -> str:
    """
    Canonical form used to match links across posts.
    Drops scheme, leading ``www.`` and a trailing slash; lowercases the host.
    """
    t = _SCHEME.sub("", (url or "").strip())
    if t.lower().startswith("www."):
        t = t[4:]
    host, sep, rest = t.partition("/")
    t = host.lower() + sep + rest
    return t.rstrip("/")


class LinkLookup:
    """Table of links already posted in the topic, keyed by normalized URL."""

    def __init__(self, links: Mapping[str, DuplicateLinkUsage | Mapping[str, Any]]) -> None:
        self._links: dict[str, DuplicateLinkUsage] = {}
        for url, usage in links.items():
            info = usage if isinstance(usage, DuplicateLinkUsage) else DuplicateLinkUsage.model_validate(usage)
            self._links[normalize_link(url)] = info
        self._warned: set[str] = set()

    def __len__(self) -> int:
        return len(self._links)

    def check(self, url: str) -> DuplicateLinkUsage | None:
        """Prior usage of ``url``, or None if unseen or already warned about."""
        key = normalize_link(url)
        if not key or key in self._warned:
            return None
        return self._links.get(key)

    def mark_warned(self, url: str) -> None:
        self._warned.add(normalize_link(url))


class LinkRegistryAdapter(Protocol):
    """Adapter interface for whatever warns the user about re-posted links."""

    def add_link_lookup(self, lookup: LinkLookup) -> None:
        ...


class InMemoryLinkRegistry:
    def __init__(self) -> None:
        self.lookups: list[LinkLookup] = []

    @property
    def current(self) -> LinkLookup | None:
        return self.lookups[-1] if self.lookups else None

    def add_link_lookup(self, lookup: LinkLookup) -> None:
        self.lookups.append(lookup)
