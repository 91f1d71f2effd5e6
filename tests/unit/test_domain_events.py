"""Tests for product domain events."""

from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from product_catalog.domain.events import (
    ALL_DOMAIN_EVENTS,
    DomainEvent,
    ProductCreated,
    ProductDeleted,
    ProductUpdated,
)


class TestDomainEventBase:
    def test_event_ids_unique(self):
        ids = {DomainEvent().event_id for _ in range(100)}
        assert len(ids) == 100

    def test_timestamp_is_utc(self):
        assert DomainEvent().timestamp.tzinfo is not None

    def test_frozen(self):
        event = ProductDeleted(product_id="p-1")
        with pytest.raises(FrozenInstanceError):
            event.product_id = "p-2"

    def test_all_events_are_domain_events(self):
        assert len(ALL_DOMAIN_EVENTS) == 3
        for cls in ALL_DOMAIN_EVENTS:
            assert issubclass(cls, DomainEvent)


class TestFromProduct:
    def test_created_copies_product_state(self, sample_product):
        event = ProductCreated.from_product(sample_product)
        assert event.product_id == sample_product.id
        assert event.name == sample_product.name
        assert event.description == sample_product.description
        assert event.price == sample_product.price
        assert event.created_at == sample_product.created_at
        assert event.timestamp == sample_product.created_at

    def test_updated_uses_updated_at(self, sample_product, sim_clock):
        sim_clock.advance(30)
        sample_product.update("New", "Newer", Decimal("5.00"), sim_clock)

        event = ProductUpdated.from_product(sample_product)
        assert event.name == "New"
        assert event.price == Decimal("5.00")
        assert event.updated_at == sim_clock.now()
        assert event.timestamp == event.updated_at

    def test_deleted_for_product(self, sim_clock):
        event = ProductDeleted.for_product("p-9", sim_clock.now())
        assert event.product_id == "p-9"
        assert event.deleted_at == sim_clock.now()
        assert event.timestamp == sim_clock.now()

    def test_each_emission_has_fresh_id(self, sample_product):
        first = ProductCreated.from_product(sample_product)
        second = ProductCreated.from_product(sample_product)
        assert first.event_id != second.event_id
