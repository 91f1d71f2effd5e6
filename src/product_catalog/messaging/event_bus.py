"""Domain event bus abstraction and in-memory implementation.

Design goals
------------
1.  **Type-routed dispatching**: subscribers register for a concrete
    ``DomainEvent`` subclass.  When an event is published the bus routes
    it to every handler whose registered type matches ``type(event)``.
2.  **Sequential, ordered fan-out**: handlers run one at a time in
    registration order, each awaited before the next starts.
3.  **Fail loud**: a handler failure is recorded (dead letter + error
    count), logged, and re-raised to the publisher.  Handlers after the
    failing one do not run for that event.
4.  **Nothing retained by default**: events are not kept after
    ``publish()`` returns.  History is opt-in (``history_size``) and both
    history and dead letters are bounded ring buffers.

This module provides:

*  ``DomainEventPublisher``: the narrow capability command handlers depend
   on ("notify subscribers of event E").  An outbox-backed implementation
   can replace the in-memory bus without touching handlers.
*  ``InMemoryDomainEventBus``: the in-process implementation.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, runtime_checkable

from product_catalog.core.ids import utc_now
from product_catalog.domain.events import DomainEvent

logger = logging.getLogger(__name__)

# Type alias for async event handlers.
EventHandler = Callable[[DomainEvent], Awaitable[None]]


@dataclass(frozen=True)
class DeadLetter:
    """Record of a subscriber failure."""

    event: DomainEvent
    subscriber: str
    error: str
    timestamp: datetime = field(default_factory=utc_now)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class DomainEventPublisher(Protocol):
    """Notify every subscriber of *event*; raise if any of them fails."""

    async def publish(self, event: DomainEvent) -> None: ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

class InMemoryDomainEventBus:
    """Deterministic, in-process event bus.

    Parameters
    ----------
    history_size
        Number of most recent events kept for inspection.  ``0`` (default)
        keeps none.
    dead_letter_limit
        Number of most recent subscriber failures kept.
    """

    def __init__(self, history_size: int = 0, dead_letter_limit: int = 100) -> None:
        self._handlers: dict[
            type[DomainEvent], list[tuple[str, EventHandler]]
        ] = defaultdict(list)
        self._history: deque[DomainEvent] = deque(maxlen=history_size)
        self._error_counts: dict[str, int] = defaultdict(int)
        self._dead_letters: deque[DeadLetter] = deque(maxlen=dead_letter_limit)
        self._messages_processed: int = 0

    # -- Core API ----------------------------------------------------------

    async def publish(self, event: DomainEvent) -> None:
        """Publish *event* to all subscribed handlers, in order.

        Raises
        ------
        Exception
            Whatever the first failing handler raised.
        """
        event_cls = type(event)
        if self._history.maxlen:
            self._history.append(event)

        for name, handler in self._handlers.get(event_cls, []):
            try:
                await handler(event)
            except Exception as exc:
                key = event_cls.__name__
                self._error_counts[key] += 1
                self._dead_letters.append(
                    DeadLetter(event=event, subscriber=name, error=str(exc))
                )
                logger.error(
                    "Subscriber %s failed on %s for product %s: %s",
                    name, key, event.product_id, exc,
                )
                raise
            self._messages_processed += 1

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
        name: str | None = None,
    ) -> None:
        """Register *handler* for *event_type*."""
        label = name or getattr(handler, "__qualname__", None) or repr(handler)
        self._handlers[event_type].append((label, handler))

    def subscribers(self, event_type: type[DomainEvent]) -> list[str]:
        """Names of the handlers registered for *event_type*, in order."""
        return [name for name, _ in self._handlers.get(event_type, [])]

    # -- Observability -----------------------------------------------------

    def get_history(
        self,
        event_type: type[DomainEvent] | None = None,
    ) -> list[DomainEvent]:
        """Return published events, optionally filtered."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if type(e) is event_type]

    def clear_history(self) -> None:
        """Clear the event history (testing helper)."""
        self._history.clear()

    def get_error_counts(self) -> dict[str, int]:
        return dict(self._error_counts)

    @property
    def dead_letters(self) -> list[DeadLetter]:
        return list(self._dead_letters)

    def clear_dead_letters(self) -> list[DeadLetter]:
        """Drain and return dead letters."""
        drained = list(self._dead_letters)
        self._dead_letters.clear()
        return drained

    @property
    def messages_processed(self) -> int:
        return self._messages_processed
