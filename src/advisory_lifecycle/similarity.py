# advisory_lifecycle/similarity.py
from __future__ import annotations

import logging

from advisory_lifecycle.adapters.similarity_lookup import SimilarityLookupAdapter
from advisory_lifecycle.contracts import (
    Advisory,
    AdvisoryKind,
    ComposingContext,
    EngineSettings,
    SimilarityQuery,
    SimilarTopic,
    validate_payload,
)
from advisory_lifecycle.queue import AdvisoryQueue
from advisory_lifecycle.state import SessionState

logger = logging.getLogger(__name__)

SIMILAR_TOPICS_ID = "similar_topics"


def similarity_query_for(context: ComposingContext, settings: EngineSettings) -> SimilarityQuery | None:
    """
    The query a draft would search with, or None when it is not worth searching.
    Only new topics with a long enough title qualify; the body is truncated.
    """
    if not context.creating_topic:
        return None
    raw = (context.reply or "")[: settings.similarity_body_prefix_chars]
    title = context.title or ""
    if len(title) < settings.min_title_similar_length:
        return None
    return SimilarityQuery(title=title, raw=raw)


class SimilarityDebouncer:
    def __init__(
        self,
        *,
        state: SessionState,
        queue: AdvisoryQueue,
        lookup: SimilarityLookupAdapter,
        settings: EngineSettings | None = None,
    ) -> None:
        self._state = state
        self._queue = queue
        self._lookup = lookup
        self._settings = settings or EngineSettings()

    def _similarity_advisory(self) -> Advisory:
        if self._state.similarity_advisory is None:
            self._state.similarity_advisory = Advisory(
                id=SIMILAR_TOPICS_ID,
                kind=AdvisoryKind.SIMILAR_TOPICS,
                extra_class="similar-topics",
            )
        return self._state.similarity_advisory

    async def find_similar(self, context: ComposingContext | None) -> bool:
        """Search for similar topics if the draft changed. Returns True if a lookup ran."""
        if context is None:
            return False
        query = similarity_query_for(context, self._settings)
        if query is None:
            return False

        concat = query.title + query.raw
        if concat == self._state.last_similarity_query:
            logger.debug("similarity search debounced: draft unchanged")
            return False
        self._state.last_similarity_query = concat

        advisory = self._similarity_advisory()
        generation = self._state.generation
        results = await self._lookup.find_similar(query)

        if not self._state.is_current(generation):
            logger.debug("similarity results dropped: session reset or torn down")
            return True

        topics = [validate_payload(SimilarTopic, item) for item in results]
        self._state.similar_items.clear()
        self._state.similar_items.extend(topics)

        if topics:
            advisory.payload = list(topics)
            self._queue.push(advisory)
        else:
            self._queue.hide(advisory)
        return True
