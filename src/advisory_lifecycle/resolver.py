# advisory_lifecycle/resolver.py
from __future__ import annotations

import logging

from advisory_lifecycle.adapters.advisory_fetch import AdvisoryFetchAdapter
from advisory_lifecycle.adapters.link_registry import LinkLookup, LinkRegistryAdapter
from advisory_lifecycle.cache import LookupCache
from advisory_lifecycle.contracts import (
    AdvisoryBatch,
    AdvisoryFetchRequest,
    ComposingContext,
    ContextKey,
    validate_payload,
)
from advisory_lifecycle.queue import AdvisoryQueue
from advisory_lifecycle.state import SessionState

logger = logging.getLogger(__name__)


class ContextResolver:
    """
    Fetches the advisories that apply to a composing context, at most once per session.

    The session flags are checked before the await so that a second open
    signal arriving mid-fetch does not start another request.
    """

    def __init__(
        self,
        *,
        state: SessionState,
        queue: AdvisoryQueue,
        cache: LookupCache,
        fetch_adapter: AdvisoryFetchAdapter,
        link_registry: LinkRegistryAdapter | None = None,
    ) -> None:
        self._state = state
        self._queue = queue
        self._cache = cache
        self._fetch_adapter = fetch_adapter
        self._link_registry = link_registry

    @staticmethod
    def cache_key(context: ComposingContext) -> ContextKey:
        return ContextKey.from_context(context)

    @staticmethod
    def fetch_request(context: ComposingContext) -> AdvisoryFetchRequest:
        return AdvisoryFetchRequest.from_context(context)

    async def resolve(self, context: ComposingContext) -> bool:
        """Look up and apply advisories for ``context``. Returns True if a fetch was performed."""
        state = self._state
        if state.checked_messages or state.lookup_in_flight:
            logger.debug("advisory lookup skipped: already checked for this session")
            return False

        key = self.cache_key(context)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("advisory lookup served from cache for %s", key)
            self.process(cached)
            return False

        request = self.fetch_request(context)
        logger.info("fetching advisories with %s", request.to_params())
        generation = state.generation
        state.lookup_in_flight = True
        try:
            raw = await self._fetch_adapter.fetch_advisories(request)
            batch = validate_payload(AdvisoryBatch, raw)
        finally:
            # a reset since the await hands the flag to the newer session
            if state.generation == generation:
                state.lookup_in_flight = False

        self._cache.store(key, batch)
        if state.generation != generation:
            logger.debug("advisory batch dropped: session reset while fetching")
            return True
        self.process(batch)
        return True

    def process(self, batch: AdvisoryBatch) -> None:
        state = self._state
        if state.torn_down:
            logger.debug("advisory batch dropped: session torn down")
            return

        duplicate_lookup = batch.extras.duplicate_lookup
        if duplicate_lookup and self._link_registry is not None:
            self._link_registry.add_link_lookup(LinkLookup(duplicate_lookup))

        state.checked_messages = True
        for advisory in batch.advisories:
            if advisory.wait_for_typing:
                if not any(queued is advisory for queued in state.queued_for_typing):
                    state.queued_for_typing.append(advisory)
            else:
                self._queue.push(advisory)
