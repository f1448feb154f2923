# advisory_lifecycle/queue.py
from __future__ import annotations

import logging
from collections.abc import Callable

from advisory_lifecycle._compat import CLEARED
from advisory_lifecycle.contracts import Advisory
from advisory_lifecycle.state import SessionState

logger = logging.getLogger(__name__)

CountListener = Callable[[int], None]


class AdvisoryQueue:
    """
    Ordered advisories currently visible; the last entry is the most recent.

    Every mutation is a no-op once the owning session has started teardown,
    so late async callbacks cannot touch a closed composer.
    """

    def __init__(self, state: SessionState) -> None:
        self._state = state
        self._listeners: list[CountListener] = []

    @property
    def messages(self) -> tuple[Advisory, ...]:
        return tuple(self._state.messages)

    @property
    def count(self) -> int:
        return len(self._state.messages)

    def on_count_changed(self, listener: CountListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _dispose

    def _notify(self) -> None:
        count = self.count
        for listener in list(self._listeners):
            listener(count)

    def _guarded(self, op: str) -> bool:
        if self._state.torn_down:
            logger.debug("queue %s ignored: session torn down", op)
            return True
        return False

    def push(self, advisory: Advisory) -> bool:
        """Append ``advisory`` unless its kind is already tracked. Returns True if appended."""
        if self._guarded("push"):
            return False
        if self._state.tracked(advisory.kind) is not None:
            logger.debug("advisory %s skipped: kind %s already tracked", advisory.id, advisory.kind)
            return False
        self._state.messages.append(advisory)
        self._state.messages_by_kind[advisory.kind] = advisory
        logger.debug("advisory %s shown (%s)", advisory.id, advisory.kind)
        self._notify()
        return True

    def remove_top(self) -> Advisory | None:
        if self._guarded("remove_top") or not self._state.messages:
            return None
        top = self._state.messages.pop()
        self._notify()
        return top

    def remove(self, advisory: Advisory) -> bool:
        if self._guarded("remove"):
            return False
        for index, message in enumerate(self._state.messages):
            if message is advisory:
                del self._state.messages[index]
                self._notify()
                return True
        return False

    def hide(self, advisory: Advisory) -> bool:
        """Remove ``advisory`` and let its kind be shown again later."""
        if self._guarded("hide"):
            return False
        removed = self.remove(advisory)
        if self._state.tracked(advisory.kind) is advisory:
            self._state.messages_by_kind[advisory.kind] = CLEARED
        return removed

    def reset(self) -> None:
        if self._guarded("reset"):
            return
        state = self._state
        had_messages = bool(state.messages)
        state.generation += 1
        state.messages = []
        state.messages_by_kind = {}
        state.queued_for_typing = []
        state.similar_items = []
        state.checked_messages = False
        state.lookup_in_flight = False
        if had_messages:
            self._notify()
