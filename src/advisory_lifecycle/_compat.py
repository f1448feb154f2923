from __future__ import annotations

from enum import Enum
from typing import Final

from typing_extensions import Self


class StrEnum(str, Enum):  # noqa: UP042
    """Python 3.10-compatible StrEnum."""

    def __str__(self) -> str:
        return str(self.value)


class Cleared(Enum):
    """Marks a per-kind slot whose advisory was hidden and may be shown again."""

    TOKEN = "cleared"

    def __repr__(self) -> str:
        return "CLEARED"

    def __bool__(self) -> bool:
        return False


CLEARED: Final = Cleared.TOKEN


__all__ = ["CLEARED", "Cleared", "Self", "StrEnum"]
