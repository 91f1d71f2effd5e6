"""Time sources for aggregates, handlers and translators.

Creation, update and deletion stamps and integration ``event_time`` are all
read from an injected ``IClock``, so a catalog run can be replayed with a
``SimClock`` and produce identical timestamps.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol

from .ids import ensure_utc, utc_now

_SIM_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class IClock(Protocol):
    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...


class WallClock:
    """System time. The default wherever no clock is injected."""

    def now(self) -> datetime:
        return utc_now()


class SimClock:
    """Manually driven clock; it never moves unless told to.

    Naive start times are taken to be UTC.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._time = ensure_utc(start) if start is not None else _SIM_EPOCH

    def now(self) -> datetime:
        return self._time

    def set_time(self, t: datetime) -> None:
        """Jump to *t*, which must not be earlier than the current time."""
        t = ensure_utc(t)
        if t < self._time:
            raise ValueError(
                f"SimClock cannot go backwards: {t} < {self._time}"
            )
        self._time = t

    def advance(self, seconds: float | timedelta) -> None:
        step = seconds if isinstance(seconds, timedelta) else timedelta(seconds=seconds)
        self.set_time(self._time + step)
