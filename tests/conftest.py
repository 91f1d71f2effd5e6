"""Shared fixtures for the product-catalog test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from product_catalog.bootstrap import Application, build_application
from product_catalog.core.clock import SimClock
from product_catalog.domain.product import Product
from product_catalog.messaging.event_bus import InMemoryDomainEventBus
from product_catalog.messaging.integration_events import IntegrationEvent
from product_catalog.storage.memory import InMemoryProductRepository


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

@pytest.fixture
def sim_clock() -> SimClock:
    """Return a SimClock starting at 2024-06-01 00:00 UTC."""
    return SimClock(start=datetime(2024, 6, 1, tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

@pytest.fixture
def make_product():
    """Factory for valid products; override any field by keyword."""

    def _make(
        name: str = "Desk Lamp",
        description: str = "LED lamp with adjustable arm",
        price: Decimal = Decimal("49.99"),
        clock: SimClock | None = None,
    ) -> Product:
        return Product.create(name, description, price, clock)

    return _make


@pytest.fixture
def sample_product(make_product, sim_clock) -> Product:
    return make_product(clock=sim_clock)


# ---------------------------------------------------------------------------
# Pipeline pieces
# ---------------------------------------------------------------------------

@pytest.fixture
def repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()


class RecordingPublisher:
    """Publisher double that keeps every (event, exchange, routing_key) it is given."""

    def __init__(self) -> None:
        self.published: list[tuple[IntegrationEvent, str, str]] = []
        self.started = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.started = False

    async def publish(
        self, event: IntegrationEvent, exchange: str, routing_key: str,
    ) -> None:
        self.published.append((event, exchange, routing_key))


@pytest.fixture
def event_bus() -> InMemoryDomainEventBus:
    """Bus that keeps its history so tests can inspect emitted events."""
    return InMemoryDomainEventBus(history_size=1000)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def application(repository, publisher, event_bus, sim_clock) -> Application:
    """Fully wired pipeline over in-memory storage and a recording publisher."""
    return build_application(
        repository=repository, publisher=publisher, clock=sim_clock,
        event_bus=event_bus,
    )
