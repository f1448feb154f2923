from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Protocol

from advisory_lifecycle.contracts import AdvisoryBatch, AdvisoryFetchRequest


class AdvisoryFetchAdapter(Protocol):
    """Adapter interface for the service that decides which advisories apply to a context."""

    async def fetch_advisories(self, request: AdvisoryFetchRequest) -> AdvisoryBatch | Mapping[str, Any]:
        """Return the advisory batch (plus optional extras) for ``request``."""
        ...


class StaticAdvisoryFetchAdapter:
    """Serves a fixed batch and records every request; optionally waits on ``gate`` first."""

    def __init__(
        self,
        batch: AdvisoryBatch | Mapping[str, Any] | None = None,
        *,
        gate: asyncio.Event | None = None,
        error: Exception | None = None,
    ) -> None:
        self.batch = batch if batch is not None else AdvisoryBatch()
        self.gate = gate
        self.error = error
        self.requests: list[AdvisoryFetchRequest] = []

    async def fetch_advisories(self, request: AdvisoryFetchRequest) -> AdvisoryBatch | Mapping[str, Any]:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.batch
