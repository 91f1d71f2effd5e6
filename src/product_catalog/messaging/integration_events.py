"""Integration events and the domain → integration translator.

An integration event is the broker-facing payload derived from one domain
event.  It carries the domain fields plus its own ``event_id`` (fresh per
emission) and ``event_time`` (when it was emitted, which is distinct from
the domain ``timestamp``).  Integration events are built immediately before
hand-off to the publisher and are never stored or reused.

Schema registry
---------------
``ROUTING_KEYS`` maps each domain event type to its broker routing key and
``EVENT_TYPE_MAP`` maps integration event class names back to classes for
consumers deserializing a payload.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from product_catalog.core.clock import IClock, WallClock
from product_catalog.core.ids import new_id
from product_catalog.domain.events import (
    DomainEvent,
    ProductCreated,
    ProductDeleted,
    ProductUpdated,
)


class IntegrationEvent(BaseModel):
    """Base for every broker-facing event."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=new_id)
    event_time: datetime
    product_id: str


class ProductCreatedIntegrationEvent(IntegrationEvent):
    name: str
    description: str
    price: Decimal
    created_at: datetime


class ProductUpdatedIntegrationEvent(IntegrationEvent):
    name: str
    description: str
    price: Decimal
    updated_at: datetime


class ProductDeletedIntegrationEvent(IntegrationEvent):
    deleted_at: datetime


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

ROUTING_KEYS: dict[type[DomainEvent], str] = {
    ProductCreated: "product.created",
    ProductUpdated: "product.updated",
    ProductDeleted: "product.deleted",
}

EVENT_TYPE_MAP: dict[str, type[IntegrationEvent]] = {
    cls.__name__: cls
    for cls in (
        ProductCreatedIntegrationEvent,
        ProductUpdatedIntegrationEvent,
        ProductDeletedIntegrationEvent,
    )
}


def get_event_class(event_type_name: str) -> type[IntegrationEvent] | None:
    """Look up integration event class by name."""
    return EVENT_TYPE_MAP.get(event_type_name)


def routing_key_for(event: DomainEvent) -> str:
    """Broker routing key for *event*.

    Raises:
        TypeError: If *event* is not a known product domain event.
    """
    try:
        return ROUTING_KEYS[type(event)]
    except KeyError:
        raise TypeError(
            f"No routing key for domain event {type(event).__name__}"
        ) from None


# ---------------------------------------------------------------------------
# Translator
# ---------------------------------------------------------------------------

def _from_created(event: ProductCreated, emitted_at: datetime) -> IntegrationEvent:
    return ProductCreatedIntegrationEvent(
        event_time=emitted_at,
        product_id=event.product_id,
        name=event.name,
        description=event.description,
        price=event.price,
        created_at=event.created_at or event.timestamp,
    )


def _from_updated(event: ProductUpdated, emitted_at: datetime) -> IntegrationEvent:
    return ProductUpdatedIntegrationEvent(
        event_time=emitted_at,
        product_id=event.product_id,
        name=event.name,
        description=event.description,
        price=event.price,
        updated_at=event.updated_at or event.timestamp,
    )


def _from_deleted(event: ProductDeleted, emitted_at: datetime) -> IntegrationEvent:
    return ProductDeletedIntegrationEvent(
        event_time=emitted_at,
        product_id=event.product_id,
        deleted_at=event.deleted_at or event.timestamp,
    )


_TRANSLATORS: dict[type[DomainEvent], Callable[..., IntegrationEvent]] = {
    ProductCreated: _from_created,
    ProductUpdated: _from_updated,
    ProductDeleted: _from_deleted,
}


def translate(event: DomainEvent, clock: IClock | None = None) -> IntegrationEvent:
    """Build the integration event for *event* with a fresh id and emission time.

    Raises:
        TypeError: If *event* is not a known product domain event.
    """
    builder = _TRANSLATORS.get(type(event))
    if builder is None:
        raise TypeError(
            f"No integration event for domain event {type(event).__name__}"
        )
    return builder(event, (clock or WallClock()).now())
