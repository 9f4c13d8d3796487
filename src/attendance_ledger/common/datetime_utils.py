from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of "now" for every ledger operation."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Local device wall-clock."""

    def now(self) -> datetime:
        return now_local()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
