"""Bridge from in-process domain events to broker integration events.

The bridge is an ordinary domain event subscriber: for each event it builds
the integration event and hands it to the publisher.  Publisher failures
propagate back through the bus to the command handler, after the mutation
has already been committed.
"""

from __future__ import annotations

import logging

from product_catalog.core.clock import IClock, WallClock
from product_catalog.domain.events import ALL_DOMAIN_EVENTS, DomainEvent

from .event_bus import InMemoryDomainEventBus
from .integration_events import routing_key_for, translate
from .publishers import IMessagePublisher

logger = logging.getLogger(__name__)

DEFAULT_EXCHANGE = "product.events"


class IntegrationEventBridge:
    """Translate each product domain event and publish it."""

    def __init__(
        self,
        publisher: IMessagePublisher,
        exchange: str = DEFAULT_EXCHANGE,
        clock: IClock | None = None,
    ) -> None:
        self._publisher = publisher
        self._exchange = exchange
        self._clock = clock or WallClock()

    async def __call__(self, event: DomainEvent) -> None:
        logger.info(
            "Handling %s for product %s", type(event).__name__, event.product_id,
        )
        integration_event = translate(event, self._clock)
        await self._publisher.publish(
            integration_event, self._exchange, routing_key_for(event),
        )
        logger.info(
            "Published %s for product %s",
            type(integration_event).__name__, event.product_id,
        )

    def attach(self, bus: InMemoryDomainEventBus) -> None:
        """Subscribe to every product domain event on *bus*."""
        for event_type in ALL_DOMAIN_EVENTS:
            bus.subscribe(event_type, self, name="integration_event_bridge")
