"""Intent values routed through the dispatcher.

Commands mutate state and produce domain events; queries only read.
Each concrete intent type is bound to exactly one handler at startup.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Intent:
    """Base for every dispatchable value."""


@dataclass(frozen=True)
class Command(Intent):
    """An intent that mutates the catalog."""


@dataclass(frozen=True)
class Query(Intent):
    """An intent that only reads the catalog."""


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CreateProductCommand(Command):
    name: str
    description: str
    price: Decimal


@dataclass(frozen=True)
class UpdateProductCommand(Command):
    product_id: str
    name: str
    description: str
    price: Decimal


@dataclass(frozen=True)
class DeleteProductCommand(Command):
    product_id: str


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GetProductByIdQuery(Query):
    product_id: str


@dataclass(frozen=True)
class ListProductsQuery(Query):
    """1-based page of products ordered by creation time."""

    page_number: int = 1
    page_size: int = 10
