# advisory_lifecycle/engine.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import ExitStack, contextmanager
from typing import Any

from advisory_lifecycle.adapters.advisory_fetch import AdvisoryFetchAdapter
from advisory_lifecycle.adapters.app_events import (
    COMPOSER_FIND_SIMILAR,
    COMPOSER_OPENED,
    COMPOSER_TYPED_REPLY,
    MESSAGES_CLOSE,
    MESSAGES_CREATE,
    AppEventBus,
)
from advisory_lifecycle.adapters.link_registry import LinkRegistryAdapter
from advisory_lifecycle.adapters.modal import ModalAdapter
from advisory_lifecycle.adapters.similarity_lookup import SimilarityLookupAdapter
from advisory_lifecycle.cache import LookupCache, process_lookup_cache
from advisory_lifecycle.contracts import (
    Advisory,
    AdvisoryContextError,
    ComposingContext,
    EngineSettings,
    ShareDialogRequest,
    SimilarTopic,
    validate_payload,
)
from advisory_lifecycle.queue import AdvisoryQueue, CountListener
from advisory_lifecycle.resolver import ContextResolver
from advisory_lifecycle.similarity import SimilarityDebouncer
from advisory_lifecycle.state import SessionState
from advisory_lifecycle.typing_gate import TypingGate

logger = logging.getLogger(__name__)

SHARE_TOPIC_MODAL = "share-topic"


class ComposerMessagesEngine:
    """
    Decides which advisories are visible above the composer, and when.

    Inbound signals arrive either as direct method calls or through an event
    bus via :meth:`attach`. The presentation layer reads :attr:`messages`
    and :attr:`message_count` and calls the close/hide/share actions.
    Collaborator failures propagate to whoever raised the signal.
    """

    def __init__(
        self,
        *,
        fetch_adapter: AdvisoryFetchAdapter,
        similarity_lookup: SimilarityLookupAdapter,
        link_registry: LinkRegistryAdapter | None = None,
        modal: ModalAdapter | None = None,
        cache: LookupCache | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.state = SessionState()
        self.settings = settings or EngineSettings()
        self.cache = cache if cache is not None else process_lookup_cache()
        self._modal = modal
        self.queue = AdvisoryQueue(self.state)
        self.resolver = ContextResolver(
            state=self.state,
            queue=self.queue,
            cache=self.cache,
            fetch_adapter=fetch_adapter,
            link_registry=link_registry,
        )
        self.typing_gate = TypingGate(state=self.state, queue=self.queue)
        self.similarity = SimilarityDebouncer(
            state=self.state,
            queue=self.queue,
            lookup=similarity_lookup,
            settings=self.settings,
        )

    # --------------------------------------------------------------------------
    # Outbound
    # --------------------------------------------------------------------------

    @property
    def messages(self) -> tuple[Advisory, ...]:
        return self.queue.messages

    @property
    def message_count(self) -> int:
        return self.queue.count

    @property
    def context(self) -> ComposingContext | None:
        return self.state.context

    @property
    def hidden(self) -> bool:
        context = self.state.context
        return context is None or not context.view_open

    @property
    def similar_items(self) -> tuple[SimilarTopic, ...]:
        return tuple(self.state.similar_items)

    @property
    def queued_for_typing(self) -> tuple[Advisory, ...]:
        return tuple(self.state.queued_for_typing)

    def on_count_changed(self, listener: CountListener) -> Callable[[], None]:
        return self.queue.on_count_changed(listener)

    def popup(self, advisory: Advisory) -> bool:
        return self.queue.push(advisory)

    def close_advisory(self, advisory: Advisory) -> bool:
        return self.queue.remove(advisory)

    def hide_advisory(self, advisory: Advisory) -> bool:
        return self.queue.hide(advisory)

    def open_share_dialog(self) -> ShareDialogRequest:
        context = self.state.context
        if context is None or context.topic is None:
            raise AdvisoryContextError("share dialog requires a topic in the composing context")
        if self._modal is None:
            raise AdvisoryContextError("share dialog requires a modal adapter")
        request = ShareDialogRequest(topic_id=context.topic.id, allow_invites=context.topic.allows_invites)
        self._modal.show_modal(SHARE_TOPIC_MODAL, request)
        return request

    # --------------------------------------------------------------------------
    # Inbound signals
    # --------------------------------------------------------------------------

    async def session_opened(self, context: ComposingContext) -> bool:
        if self.state.torn_down:
            return False
        self.state.context = context
        return await self.resolver.resolve(context)

    def user_typed(self) -> None:
        self.typing_gate.typed(self.state.context)

    async def find_similar(self) -> bool:
        if self.state.torn_down:
            return False
        return await self.similarity.find_similar(self.state.context)

    def close_top(self) -> Advisory | None:
        return self.queue.remove_top()

    def create(self, descriptor: Advisory | Mapping[str, Any]) -> Advisory:
        """Start over with a single advisory built from ``descriptor``."""
        advisory = validate_payload(Advisory, descriptor)
        self.reset()
        self.queue.push(advisory)
        return advisory

    # --------------------------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------------------------

    def reset(self) -> None:
        """Forget every advisory, e.g. when a fresh draft is started."""
        self.queue.reset()

    def destroy(self) -> None:
        if self.state.destroyed:
            return
        self.state.destroying = True
        self.state.destroyed = True
        logger.debug("composer messages session destroyed")

    @contextmanager
    def attach(self, bus: AppEventBus) -> Iterator[ComposerMessagesEngine]:
        """Subscribe to ``bus`` for the duration of the block, then tear the session down."""
        with ExitStack() as stack:
            stack.callback(self.destroy)
            for event, handler in (
                (COMPOSER_TYPED_REPLY, self.user_typed),
                (COMPOSER_OPENED, self.session_opened),
                (COMPOSER_FIND_SIMILAR, self.find_similar),
                (MESSAGES_CLOSE, self.close_top),
                (MESSAGES_CREATE, self.create),
            ):
                stack.callback(bus.on(event, handler))
            self.reset()
            yield self
