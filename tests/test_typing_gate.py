from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from advisory_lifecycle.adapters.advisory_fetch import StaticAdvisoryFetchAdapter
from advisory_lifecycle.contracts import (
    Advisory,
    AdvisoryBatch,
    AdvisoryKind,
    ComposerAction,
    ComposingContext,
)
from advisory_lifecycle.engine import ComposerMessagesEngine
from advisory_lifecycle.typing_gate import YOURSELF_CONFIRM_ID


def test_gated_advisories_appear_after_first_keystroke_in_order(
    make_engine: Callable[..., ComposerMessagesEngine],
    make_advisory: Callable[..., Advisory],
    make_batch: Callable[..., AdvisoryBatch],
    make_context: Callable[..., ComposingContext],
) -> None:
    immediate = make_advisory(advisory_id="now", kind=AdvisoryKind.EDUCATION)
    later_a = make_advisory(advisory_id="later-a", kind=AdvisoryKind.GET_A_ROOM, wait_for_typing=True)
    later_b = make_advisory(advisory_id="later-b", kind=AdvisoryKind.SEQUENTIAL_REPLIES, wait_for_typing=True)
    engine = make_engine(fetcher=StaticAdvisoryFetchAdapter(make_batch(later_a, immediate, later_b)))

    asyncio.run(engine.session_opened(make_context(topic_id=3)))
    assert engine.messages == (immediate,)

    engine.user_typed()
    assert engine.messages == (immediate, later_a, later_b)


def test_repeated_typing_signals_do_not_duplicate(
    make_engine: Callable[..., ComposerMessagesEngine],
    make_advisory: Callable[..., Advisory],
    make_batch: Callable[..., AdvisoryBatch],
    make_context: Callable[..., ComposingContext],
) -> None:
    gated = make_advisory(advisory_id="later", wait_for_typing=True)
    engine = make_engine(fetcher=StaticAdvisoryFetchAdapter(make_batch(gated)))
    asyncio.run(engine.session_opened(make_context()))

    engine.user_typed()
    engine.user_typed()

    assert engine.messages == (gated,)


def test_closed_gated_advisory_is_not_reshown_by_typing(
    make_engine: Callable[..., ComposerMessagesEngine],
    make_advisory: Callable[..., Advisory],
    make_batch: Callable[..., AdvisoryBatch],
    make_context: Callable[..., ComposingContext],
) -> None:
    gated = make_advisory(advisory_id="later", wait_for_typing=True)
    engine = make_engine(fetcher=StaticAdvisoryFetchAdapter(make_batch(gated)))
    asyncio.run(engine.session_opened(make_context()))
    engine.user_typed()

    engine.close_advisory(gated)
    engine.user_typed()

    assert engine.messages == ()


def test_messaging_only_yourself_shows_one_confirmation(
    make_engine: Callable[..., ComposerMessagesEngine],
    make_context: Callable[..., ComposingContext],
) -> None:
    engine = make_engine()
    asyncio.run(
        engine.session_opened(
            make_context(action=ComposerAction.PRIVATE_MESSAGE, recipients=["alice"], current_username="alice")
        )
    )

    engine.user_typed()
    confirm = engine.messages[0]
    engine.user_typed()

    assert engine.messages == (confirm,)
    assert confirm.id == YOURSELF_CONFIRM_ID
    assert confirm.kind is AdvisoryKind.CUSTOM_BODY


def test_confirmation_instance_is_reused_after_hide(
    make_engine: Callable[..., ComposerMessagesEngine],
    make_context: Callable[..., ComposingContext],
) -> None:
    engine = make_engine()
    asyncio.run(
        engine.session_opened(
            make_context(action=ComposerAction.PRIVATE_MESSAGE, recipients=["alice"], current_username="alice")
        )
    )
    engine.user_typed()
    confirm = engine.messages[0]

    engine.hide_advisory(confirm)
    engine.user_typed()

    assert len(engine.messages) == 1
    assert engine.messages[0] is confirm


@pytest.mark.parametrize(
    ("action", "recipients"),
    [
        (ComposerAction.PRIVATE_MESSAGE, ["alice", "bob"]),
        (ComposerAction.PRIVATE_MESSAGE, ["bob"]),
        (ComposerAction.PRIVATE_MESSAGE, []),
        (ComposerAction.REPLY, ["alice"]),
    ],
)
def test_other_recipient_compositions_show_no_confirmation(
    make_engine: Callable[..., ComposerMessagesEngine],
    make_context: Callable[..., ComposingContext],
    action: ComposerAction,
    recipients: list[str],
) -> None:
    engine = make_engine()
    asyncio.run(engine.session_opened(make_context(action=action, recipients=recipients, current_username="alice")))

    engine.user_typed()

    assert engine.messages == ()


def test_typing_before_any_context_is_harmless(make_engine: Callable[..., ComposerMessagesEngine]) -> None:
    engine = make_engine()

    engine.user_typed()

    assert engine.messages == ()
