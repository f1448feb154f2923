from __future__ import annotations

import logging

from advisory_lifecycle.contracts import Advisory, AdvisoryKind, ComposingContext
from advisory_lifecycle.queue import AdvisoryQueue
from advisory_lifecycle.state import SessionState

logger = logging.getLogger(__name__)

YOURSELF_CONFIRM_ID = "yourself_confirm"


class TypingGate:
    def __init__(
        self,
        *,
        state: SessionState,
        queue: AdvisoryQueue,
        confirm_title: str = "Did you mean to send this to yourself?",
        confirm_body: str = "Right now this message is only being sent to you!",
    ) -> None:
        self._state = state
        self._queue = queue
        self._confirm_title = confirm_title
        self._confirm_body = confirm_body

    def _self_confirm(self) -> Advisory:
        if self._state.self_confirm_advisory is None:
            self._state.self_confirm_advisory = Advisory(
                id=YOURSELF_CONFIRM_ID,
                kind=AdvisoryKind.CUSTOM_BODY,
                title=self._confirm_title,
                body=self._confirm_body,
            )
        return self._state.self_confirm_advisory

    def typed(self, context: ComposingContext | None) -> None:
        """Release held advisories; repeats are harmless because pushes dedupe by kind."""
        if self._state.torn_down:
            logger.debug("typed signal ignored: session torn down")
            return

        if context is not None and context.self_addressed:
            self._queue.push(self._self_confirm())

        for advisory in list(self._state.queued_for_typing):
            self._queue.push(advisory)
