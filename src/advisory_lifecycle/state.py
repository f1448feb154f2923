from __future__ import annotations

from dataclasses import dataclass, field

from advisory_lifecycle._compat import Cleared
from advisory_lifecycle.contracts import Advisory, AdvisoryKind, ComposingContext, SimilarTopic


@dataclass
class SessionState:
    """Mutable state for one composing session, shared by the engine components."""

    messages: list[Advisory] = field(default_factory=list)
    # absent: never shown; Advisory: tracked; CLEARED: hidden and eligible to reappear
    messages_by_kind: dict[AdvisoryKind, Advisory | Cleared] = field(default_factory=dict)
    queued_for_typing: list[Advisory] = field(default_factory=list)
    checked_messages: bool = False
    lookup_in_flight: bool = False
    similar_items: list[SimilarTopic] = field(default_factory=list)
    last_similarity_query: str | None = None
    similarity_advisory: Advisory | None = None
    self_confirm_advisory: Advisory | None = None
    context: ComposingContext | None = None
    # bumped by every reset; async callbacks compare against the value they started with
    generation: int = 0
    destroying: bool = False
    destroyed: bool = False

    @property
    def torn_down(self) -> bool:
        return self.destroying or self.destroyed

    def is_current(self, generation: int) -> bool:
        return not self.torn_down and self.generation == generation

    def tracked(self, kind: AdvisoryKind) -> Advisory | None:
        slot = self.messages_by_kind.get(kind)
        return slot if isinstance(slot, Advisory) else None
