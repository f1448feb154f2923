from __future__ import annotations

from typing import Protocol

from advisory_lifecycle.contracts import ShareDialogRequest


class ModalAdapter(Protocol):
    """Adapter interface for the host's dialog facility."""

    def show_modal(self, name: str, request: ShareDialogRequest) -> None:
        ...


class RecordingModalAdapter:
    def __init__(self) -> None:
        self.shown: list[tuple[str, ShareDialogRequest]] = []

    def show_modal(self, name: str, request: ShareDialogRequest) -> None:
        self.shown.append((name, request))
