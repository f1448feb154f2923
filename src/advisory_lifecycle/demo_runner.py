from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from advisory_lifecycle.adapters.advisory_fetch import StaticAdvisoryFetchAdapter
from advisory_lifecycle.adapters.app_events import (
    COMPOSER_FIND_SIMILAR,
    COMPOSER_OPENED,
    COMPOSER_TYPED_REPLY,
    MESSAGES_CLOSE,
    MESSAGES_CREATE,
    InMemoryAppEvents,
)
from advisory_lifecycle.adapters.link_registry import InMemoryLinkRegistry
from advisory_lifecycle.adapters.similarity_lookup import StaticSimilarityLookup
from advisory_lifecycle.cache import LookupCache
from advisory_lifecycle.contracts import (
    AdvisoryBatch,
    AdvisoryKind,
    ComposingContext,
    ContextKey,
    EngineSettings,
    validate_payload,
)
from advisory_lifecycle.engine import ComposerMessagesEngine

_EDITABLE_FIELDS = ("title", "reply", "recipients", "view_open")


@dataclass(frozen=True)
class EventExecution:
    event_index: int
    event_type: str
    visible_kinds: list[str]
    message_count: int
    queued_for_typing: int
    fetches: int
    similarity_lookups: int


@dataclass(frozen=True)
class SessionExecution:
    session_id: str
    events: list[EventExecution]


def load_scenario_packs(packs_dir: Path) -> list[dict[str, Any]]:
    packs: list[dict[str, Any]] = []
    for path in sorted(packs_dir.glob("*.json")):
        payload = json.loads(path.read_text(encoding="utf-8"))
        payload["_source"] = str(path)
        packs.append(payload)
    return packs


def _normalize_events(raw_events: list[Any]) -> list[dict[str, Any]]:
    events: list[dict[str, Any]] = []
    for event in raw_events:
        if isinstance(event, str):
            events.append({"type": event})
        elif isinstance(event, dict):
            events.append({str(k): v for k, v in event.items()})
    return events


async def _drive(pack: dict[str, Any], cache: LookupCache, settings: EngineSettings) -> SessionExecution:
    context = validate_payload(ComposingContext, pack["context"])
    batch = validate_payload(AdvisoryBatch, pack.get("batch") or {})
    if pack.get("cached"):
        cache.store(ContextKey.from_context(context), batch)

    fetcher = StaticAdvisoryFetchAdapter(batch)
    lookup = StaticSimilarityLookup(pack.get("similar") or [])
    engine = ComposerMessagesEngine(
        fetch_adapter=fetcher,
        similarity_lookup=lookup,
        link_registry=InMemoryLinkRegistry(),
        cache=cache,
        settings=settings,
    )
    bus = InMemoryAppEvents()
    executions: list[EventExecution] = []

    with engine.attach(bus):
        for index, event in enumerate(_normalize_events(list(pack.get("events", []))), start=1):
            kind = str(event.get("type", ""))
            if kind == "opened":
                await bus.trigger(COMPOSER_OPENED, context)
            elif kind == "typed":
                await bus.trigger(COMPOSER_TYPED_REPLY)
            elif kind == "find_similar":
                await bus.trigger(COMPOSER_FIND_SIMILAR)
            elif kind == "close_top":
                await bus.trigger(MESSAGES_CLOSE)
            elif kind == "create":
                await bus.trigger(MESSAGES_CREATE, event.get("advisory") or {})
            elif kind == "edit":
                for name in _EDITABLE_FIELDS:
                    if name in event:
                        setattr(context, name, event[name])
            elif kind == "hide":
                tracked = engine.state.tracked(AdvisoryKind(event["kind"]))
                if tracked is not None:
                    engine.hide_advisory(tracked)
            else:
                raise ValueError(f"unknown scenario event type: {kind!r}")

            executions.append(
                EventExecution(
                    event_index=index,
                    event_type=kind,
                    visible_kinds=[message.kind.value for message in engine.messages],
                    message_count=engine.message_count,
                    queued_for_typing=len(engine.queued_for_typing),
                    fetches=len(fetcher.requests),
                    similarity_lookups=len(lookup.queries),
                )
            )

    return SessionExecution(session_id=str(pack.get("session_id", "session")), events=executions)


def run_session(
    pack: dict[str, Any],
    *,
    cache: LookupCache | None = None,
    settings: EngineSettings | None = None,
) -> SessionExecution:
    return asyncio.run(_drive(pack, cache or LookupCache(), settings or EngineSettings()))


def summarize(executions: list[SessionExecution]) -> dict[str, float]:
    total_events = 0
    total_fetches = 0
    total_lookups = 0
    sessions_with_advisories = 0

    for execution in executions:
        total_events += len(execution.events)
        if not execution.events:
            continue
        last = execution.events[-1]
        total_fetches += last.fetches
        total_lookups += last.similarity_lookups
        if any(event.message_count for event in execution.events):
            sessions_with_advisories += 1

    sessions = len(executions)
    return {
        "sessions": sessions,
        "events": total_events,
        "fetches": total_fetches,
        "similarity_lookups": total_lookups,
        "advisory_session_rate": round(sessions_with_advisories / sessions, 4) if sessions else 0.0,
    }


def run_packs(packs_dir: Path, *, settings: EngineSettings | None = None) -> dict[str, Any]:
    """Replay every pack in ``packs_dir`` against one shared cache, in file order."""
    cache = LookupCache()
    packs = load_scenario_packs(packs_dir)
    executions = [run_session(pack, cache=cache, settings=settings) for pack in packs]
    return {
        "sessions": [
            {
                "session_id": execution.session_id,
                "events": [
                    {
                        "event_index": event.event_index,
                        "event_type": event.event_type,
                        "visible_kinds": event.visible_kinds,
                        "message_count": event.message_count,
                        "queued_for_typing": event.queued_for_typing,
                        "fetches": event.fetches,
                        "similarity_lookups": event.similarity_lookups,
                    }
                    for event in execution.events
                ],
            }
            for execution in executions
        ],
        "summary_metrics": summarize(executions),
    }
