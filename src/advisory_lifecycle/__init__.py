"""Lifecycle engine for the advisory notices shown while composing a post."""

from advisory_lifecycle._compat import CLEARED
from advisory_lifecycle.cache import LookupCache, process_lookup_cache
from advisory_lifecycle.contracts import (
    Advisory,
    AdvisoryBatch,
    AdvisoryContextError,
    AdvisoryError,
    AdvisoryFetchRequest,
    AdvisoryKind,
    AdvisoryPayloadError,
    ComposerAction,
    ComposingContext,
    ContextKey,
    EngineSettings,
    ShareDialogRequest,
    SimilarityQuery,
    SimilarTopic,
    TopicPermissions,
)
from advisory_lifecycle.engine import ComposerMessagesEngine

__all__ = [
    "CLEARED",
    "Advisory",
    "AdvisoryBatch",
    "AdvisoryContextError",
    "AdvisoryError",
    "AdvisoryFetchRequest",
    "AdvisoryKind",
    "AdvisoryPayloadError",
    "ComposerAction",
    "ComposerMessagesEngine",
    "ComposingContext",
    "ContextKey",
    "EngineSettings",
    "LookupCache",
    "ShareDialogRequest",
    "SimilarTopic",
    "SimilarityQuery",
    "TopicPermissions",
    "process_lookup_cache",
]
