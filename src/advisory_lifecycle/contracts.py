# advisory_lifecycle/contracts.py
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from advisory_lifecycle._compat import Self, StrEnum


class AdvisoryError(Exception):
    """Base class for errors raised by the advisory lifecycle engine."""


class AdvisoryPayloadError(AdvisoryError, ValueError):
    """Raised when a batch, descriptor or settings payload cannot be validated."""


class AdvisoryContextError(AdvisoryError, RuntimeError):
    """Raised when an operation needs composing context that is not available."""


# ------------------------------------------------------------------------------
# Shared BaseModel config helpers
# ------------------------------------------------------------------------------

_CONTRACT_CONFIG = ConfigDict(
    extra="forbid",
    validate_assignment=True,
    use_enum_values=False,  # keep enums as enums in Python
)

# Payloads coming back from fetch services carry presentation keys we do not model.
_INBOUND_CONFIG = ConfigDict(
    extra="ignore",
    validate_assignment=True,
    use_enum_values=False,
)

_IMMUTABLE_CONTRACT_CONFIG = ConfigDict(
    extra="forbid",
    use_enum_values=False,
    frozen=True,
)


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: type[ModelT], payload: Any) -> ModelT:
    """Validate ``payload`` into ``model``, wrapping pydantic errors."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise AdvisoryPayloadError(f"invalid {model.__name__} payload: {exc.error_count()} error(s)") from exc


# ------------------------------------------------------------------------------
# Advisories
# ------------------------------------------------------------------------------


class AdvisoryKind(StrEnum):
    """Template names; one visible advisory per kind per session."""

    EDUCATION = "education"
    CUSTOM_BODY = "custom-body"
    SIMILAR_TOPICS = "similar-topics"
    GET_A_ROOM = "get-a-room"
    DOMINATING_TOPIC = "dominating-topic"
    SEQUENTIAL_REPLIES = "sequential-replies"


class Advisory(BaseModel):
    """
    A single notice shown above the composer.

    Queue membership is tracked by object identity, so two advisories with
    equal fields are still distinct entries.
    """

    model_config = _INBOUND_CONFIG

    id: str = Field(min_length=1)
    kind: AdvisoryKind = Field(validation_alias=AliasChoices("kind", "templateName", "template_name"))
    wait_for_typing: bool = Field(
        default=False, validation_alias=AliasChoices("wait_for_typing", "waitForTyping")
    )
    title: str | None = None
    body: str | None = None
    extra_class: str | None = Field(default=None, validation_alias=AliasChoices("extra_class", "extraClass"))
    payload: Any = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class DuplicateLinkUsage(BaseModel):
    """A previous post that already linked to a URL."""

    model_config = _INBOUND_CONFIG

    domain: str | None = None
    username: str | None = None
    post_url: str | None = None
    created_at: str | None = None


class BatchExtras(BaseModel):
    model_config = _INBOUND_CONFIG

    duplicate_lookup: dict[str, DuplicateLinkUsage] | None = None


class AdvisoryBatch(BaseModel):
    model_config = _INBOUND_CONFIG

    advisories: list[Advisory] = Field(
        default_factory=list, validation_alias=AliasChoices("advisories", "composer_messages", "messages")
    )
    extras: BatchExtras = Field(default_factory=BatchExtras)

    def __len__(self) -> int:
        return len(self.advisories)


class SimilarTopic(BaseModel):
    model_config = _INBOUND_CONFIG

    id: int
    title: str
    url: str | None = None
    excerpt: str | None = Field(default=None, validation_alias=AliasChoices("excerpt", "blurb"))
    created_at: str | None = None


# ------------------------------------------------------------------------------
# Composing context
# ------------------------------------------------------------------------------


class ComposerAction(StrEnum):
    CREATE_TOPIC = "createTopic"
    REPLY = "reply"
    PRIVATE_MESSAGE = "privateMessage"
    EDIT = "edit"
    CREATE_SHARED_DRAFT = "createSharedDraft"


class TopicPermissions(BaseModel):
    model_config = _CONTRACT_CONFIG

    id: int
    can_invite_to: bool = False
    archived: bool = False
    closed: bool = False
    deleted: bool = False

    @property
    def allows_invites(self) -> bool:
        return self.can_invite_to and not (self.archived or self.closed or self.deleted)


class ComposingContext(BaseModel):
    """
    What the user is currently composing.

    Title, reply and recipients change while the session is open; the engine
    reads them at signal time.
    """

    model_config = _CONTRACT_CONFIG

    action: ComposerAction
    topic_id: int | None = None
    post_id: int | None = None
    title: str = ""
    reply: str = ""
    recipients: list[str] = Field(default_factory=list)
    current_username: str | None = None
    topic: TopicPermissions | None = None
    view_open: bool = True

    @property
    def creating_topic(self) -> bool:
        return self.action == ComposerAction.CREATE_TOPIC

    @property
    def private_message(self) -> bool:
        return self.action == ComposerAction.PRIVATE_MESSAGE

    @property
    def self_addressed(self) -> bool:
        if not self.private_message or not self.recipients or self.current_username is None:
            return False
        return all(name == self.current_username for name in self.recipients)


@dataclass(frozen=True)
class ContextKey:
    action: ComposerAction
    topic_id: int | None
    post_id: int | None

    @classmethod
    def from_context(cls, context: ComposingContext) -> ContextKey:
        return cls(action=context.action, topic_id=context.topic_id or None, post_id=context.post_id or None)


class AdvisoryFetchRequest(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG

    composer_action: ComposerAction
    topic_id: int | None = None
    post_id: int | None = None

    @classmethod
    def from_context(cls, context: ComposingContext) -> AdvisoryFetchRequest:
        return cls(
            composer_action=context.action,
            topic_id=context.topic_id or None,
            post_id=context.post_id or None,
        )

    def to_params(self) -> dict[str, Any]:
        """Query parameters; ids are only sent when present."""
        return self.model_dump(mode="json", exclude_none=True)


class SimilarityQuery(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG

    title: str
    raw: str


class ShareDialogRequest(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG

    topic_id: int
    allow_invites: bool


# ------------------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------------------

ENV_PREFIX = "COMPOSER_ADVISORIES_"


class EngineSettings(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG

    min_title_similar_length: int = Field(default=10, ge=0)
    similarity_body_prefix_chars: int = Field(default=200, gt=0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        env = os.environ if environ is None else environ
        raw: dict[str, Any] = {}
        for name in cls.model_fields:
            value = env.get(f"{ENV_PREFIX}{name.upper()}")
            if value is not None and value.strip():
                raw[name] = value.strip()
        return validate_payload(cls, raw)
