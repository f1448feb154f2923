from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

import pytest

from advisory_lifecycle.adapters.advisory_fetch import StaticAdvisoryFetchAdapter
from advisory_lifecycle.adapters.link_registry import InMemoryLinkRegistry
from advisory_lifecycle.adapters.modal import RecordingModalAdapter
from advisory_lifecycle.adapters.similarity_lookup import StaticSimilarityLookup
from advisory_lifecycle.cache import LookupCache
from advisory_lifecycle.contracts import (
    Advisory,
    AdvisoryBatch,
    AdvisoryKind,
    BatchExtras,
    ComposerAction,
    ComposingContext,
    EngineSettings,
    TopicPermissions,
)
from advisory_lifecycle.engine import ComposerMessagesEngine


@pytest.fixture
def lookup_cache() -> LookupCache:
    return LookupCache()


@pytest.fixture
def link_registry() -> InMemoryLinkRegistry:
    return InMemoryLinkRegistry()


@pytest.fixture
def modal() -> RecordingModalAdapter:
    return RecordingModalAdapter()


@pytest.fixture
def make_advisory() -> Callable[..., Advisory]:
    def _make_advisory(
        *,
        advisory_id: str = "adv:test",
        kind: AdvisoryKind = AdvisoryKind.EDUCATION,
        wait_for_typing: bool = False,
        title: str | None = None,
        body: str | None = "(test body)",
    ) -> Advisory:
        return Advisory(
            id=advisory_id,
            kind=kind,
            wait_for_typing=wait_for_typing,
            title=title,
            body=body,
        )

    return _make_advisory


@pytest.fixture
def make_batch() -> Callable[..., AdvisoryBatch]:
    def _make_batch(
        *advisories: Advisory,
        duplicate_lookup: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> AdvisoryBatch:
        extras = BatchExtras.model_validate({"duplicate_lookup": duplicate_lookup})
        return AdvisoryBatch(advisories=list(advisories), extras=extras)

    return _make_batch


@pytest.fixture
def make_context() -> Callable[..., ComposingContext]:
    def _make_context(
        *,
        action: ComposerAction = ComposerAction.REPLY,
        topic_id: int | None = None,
        post_id: int | None = None,
        title: str = "",
        reply: str = "",
        recipients: list[str] | None = None,
        current_username: str | None = "alice",
        topic: TopicPermissions | None = None,
        view_open: bool = True,
    ) -> ComposingContext:
        return ComposingContext(
            action=action,
            topic_id=topic_id,
            post_id=post_id,
            title=title,
            reply=reply,
            recipients=recipients or [],
            current_username=current_username,
            topic=topic,
            view_open=view_open,
        )

    return _make_context


@pytest.fixture
def make_engine(
    lookup_cache: LookupCache,
    link_registry: InMemoryLinkRegistry,
    modal: RecordingModalAdapter,
) -> Callable[..., ComposerMessagesEngine]:
    def _make_engine(
        *,
        fetcher: StaticAdvisoryFetchAdapter | None = None,
        lookup: StaticSimilarityLookup | None = None,
        settings: EngineSettings | None = None,
        cache: LookupCache | None = None,
        similar: Sequence[Sequence[Mapping[str, Any]]] = (),
    ) -> ComposerMessagesEngine:
        return ComposerMessagesEngine(
            fetch_adapter=fetcher or StaticAdvisoryFetchAdapter(),
            similarity_lookup=lookup or StaticSimilarityLookup(similar),
            link_registry=link_registry,
            modal=modal,
            cache=cache or lookup_cache,
            settings=settings,
        )

    return _make_engine
