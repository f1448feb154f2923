from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from advisory_lifecycle.contracts import SimilarityQuery, SimilarTopic


class SimilarityLookupAdapter(Protocol):
    """Adapter interface for searching existing topics similar to a draft."""

    async def find_similar(self, query: SimilarityQuery) -> Sequence[SimilarTopic | Mapping[str, Any]]:
        """Return the topics similar to ``query`` (possibly empty)."""
        ...


class StaticSimilarityLookup:
    """Replays scripted result sets in order; the last one repeats once exhausted."""

    def __init__(
        self,
        responses: Iterable[Sequence[SimilarTopic | Mapping[str, Any]]] = (),
        *,
        gate: asyncio.Event | None = None,
        error: Exception | None = None,
    ) -> None:
        self.responses = list(responses)
        self.gate = gate
        self.error = error
        self.queries: list[SimilarityQuery] = []

    async def find_similar(self, query: SimilarityQuery) -> Sequence[SimilarTopic | Mapping[str, Any]]:
        self.queries.append(query)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if not self.responses:
            return []
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]
