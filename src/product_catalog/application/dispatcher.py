"""Intent dispatcher.

Design goals
------------
1.  **Type-routed**: each concrete ``Intent`` subclass is bound to exactly
    one handler.  Routing is by ``type(intent)``; subclasses of a registered
    intent are *not* matched implicitly.
2.  **Immutable after startup**: ``HandlerRegistry`` collects bindings,
    rejecting duplicates, and ``build()`` freezes them into a ``Dispatcher``.
    The dispatcher holds a read-only mapping, so concurrent ``dispatch()``
    calls need no locking.
3.  **Fail fast**: an unbound intent raises ``NoHandlerRegistered`` before
    any handler, repository or publisher is touched.

This module provides:

*  ``IntentHandler``: the handler protocol.
*  ``HandlerRegistry``: startup-time builder.
*  ``Dispatcher``: the runtime router.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

import structlog

from product_catalog.core.errors import (
    MultipleHandlersRegistered,
    NoHandlerRegistered,
    WiringError,
)
from product_catalog.observability.logger import new_trace_id

from .intents import Command, Intent, Query

logger = logging.getLogger(__name__)


@runtime_checkable
class IntentHandler(Protocol):
    """Handles one intent type."""

    async def handle(self, intent: Any) -> Any: ...


class HandlerRegistry:
    """Collects intent→handler bindings during startup."""

    def __init__(self) -> None:
        self._handlers: dict[type[Intent], IntentHandler] = {}
        self._built = False

    def register(self, intent_type: type[Intent], handler: IntentHandler) -> HandlerRegistry:
        """Bind *handler* to *intent_type*.

        Raises
        ------
        TypeError
            If *intent_type* is not a ``Command`` or ``Query`` subclass.
        MultipleHandlersRegistered
            If *intent_type* already has a handler.
        WiringError
            If the registry has already been built.
        """
        if self._built:
            raise WiringError("Handler registry is frozen; register before build()")
        if not (
            isinstance(intent_type, type)
            and issubclass(intent_type, (Command, Query))
        ):
            raise TypeError(
                f"{intent_type!r} is not a Command or Query type"
            )
        if intent_type in self._handlers:
            raise MultipleHandlersRegistered(intent_type)
        self._handlers[intent_type] = handler
        return self

    def build(self) -> Dispatcher:
        """Freeze the bindings into a ``Dispatcher``."""
        self._built = True
        return Dispatcher(self._handlers)


class Dispatcher:
    """Routes each intent to its single registered handler."""

    def __init__(self, handlers: Mapping[type[Intent], IntentHandler]) -> None:
        self._handlers: Mapping[type[Intent], IntentHandler] = MappingProxyType(
            dict(handlers)
        )

    async def dispatch(self, intent: Intent) -> Any:
        """Run the handler bound to ``type(intent)`` and return its result.

        Cancellation of the awaiting task propagates into the handler and
        whatever I/O it is awaiting.

        Raises
        ------
        NoHandlerRegistered
            If no handler is bound to ``type(intent)``.
        """
        intent_type = type(intent)
        handler = self._handlers.get(intent_type)
        if handler is None:
            logger.error("No handler registered for %s", intent_type.__name__)
            raise NoHandlerRegistered(intent_type)

        with structlog.contextvars.bound_contextvars(
            trace_id=new_trace_id(), intent=intent_type.__name__,
        ):
            logger.debug("Dispatching %s", intent_type.__name__)
            return await handler.handle(intent)

    def handles(self, intent_type: type[Intent]) -> bool:
        return intent_type in self._handlers

    @property
    def registered_intents(self) -> tuple[type[Intent], ...]:
        return tuple(self._handlers)
