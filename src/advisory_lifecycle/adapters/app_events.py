from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, Protocol

Handler = Callable[..., Any]
Disposer = Callable[[], None]

COMPOSER_OPENED = "composer:opened"
COMPOSER_TYPED_REPLY = "composer:typed-reply"
COMPOSER_FIND_SIMILAR = "composer:find-similar"
MESSAGES_CLOSE = "composer-messages:close"
MESSAGES_CREATE = "composer-messages:create"


class AppEventBus(Protocol):
    """Adapter interface for the host's event notifications."""

    def on(self, event: str, handler: Handler) -> Disposer:
        """Subscribe ``handler`` and return a callable that unsubscribes it."""
        ...


class InMemoryAppEvents:
    """Minimal bus for hosts without one and for tests."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, event: str, handler: Handler) -> Disposer:
        self._handlers.setdefault(event, []).append(handler)

        def _dispose() -> None:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

        return _dispose

    def subscriber_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    async def trigger(self, event: str, *args: Any) -> list[Any]:
        """Call handlers in subscription order, awaiting any that return awaitables."""
        results: list[Any] = []
        for handler in list(self._handlers.get(event, [])):
            result = handler(*args)
            if inspect.isawaitable(result):
                result = await result
            results.append(result)
        return results
