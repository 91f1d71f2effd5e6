"""Domain events raised by the Product aggregate's command handlers.

Design invariants
-----------------
1.  Every event is **immutable** (``frozen=True``).
2.  Events are produced only after a successful persistence mutation and are
    consumed only by in-process subscribers during the same call.
3.  ``event_id`` is a UUID4 generated at creation time; ``timestamp`` is the
    domain time of the change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from product_catalog.core.ids import new_id as _uuid
from product_catalog.core.ids import utc_now as _now

from .product import Product


@dataclass(frozen=True)
class DomainEvent:
    """Immutable base for every product domain event.

    Shared fields
    ~~~~~~~~~~~~~
    event_id    Unique identity (UUID4).
    timestamp   UTC time of the state change.
    product_id  Identity of the aggregate that changed.
    """

    event_id: str = field(default_factory=_uuid)
    timestamp: datetime = field(default_factory=_now)
    product_id: str = ""


@dataclass(frozen=True)
class ProductCreated(DomainEvent):
    """A product was added to the catalog."""

    name: str = ""
    description: str = ""
    price: Decimal = Decimal("0")
    created_at: datetime | None = None

    @classmethod
    def from_product(cls, product: Product) -> ProductCreated:
        return cls(
            timestamp=product.created_at,
            product_id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            created_at=product.created_at,
        )


@dataclass(frozen=True)
class ProductUpdated(DomainEvent):
    """A product's name, description or price changed."""

    name: str = ""
    description: str = ""
    price: Decimal = Decimal("0")
    updated_at: datetime | None = None

    @classmethod
    def from_product(cls, product: Product) -> ProductUpdated:
        updated_at = product.updated_at or _now()
        return cls(
            timestamp=updated_at,
            product_id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            updated_at=updated_at,
        )


@dataclass(frozen=True)
class ProductDeleted(DomainEvent):
    """A product was removed from the catalog."""

    deleted_at: datetime | None = None

    @classmethod
    def for_product(cls, product_id: str, deleted_at: datetime) -> ProductDeleted:
        return cls(timestamp=deleted_at, product_id=product_id, deleted_at=deleted_at)


ALL_DOMAIN_EVENTS: tuple[type[DomainEvent], ...] = (
    ProductCreated,
    ProductUpdated,
    ProductDeleted,
)
