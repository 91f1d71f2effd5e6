"""Persistence port for the Product aggregate.

Implementations (in-memory, SQLAlchemy) must behave identically:

*  ``list()`` orders by ``created_at`` ascending, ties broken by ``id``.
*  Returned products are detached copies; mutating them does not touch the
   store until ``update()`` is called.
*  ``update()`` raises ``NotFound`` when the row no longer exists.
*  ``delete()`` returns ``False`` when there was nothing to delete.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .product import Product


@runtime_checkable
class IProductRepository(Protocol):
    """Read/write/delete/count/list over products."""

    async def get_by_id(self, product_id: str) -> Product | None: ...

    async def list(self, skip: int, take: int) -> list[Product]: ...

    async def count(self) -> int: ...

    async def add(self, product: Product) -> Product: ...

    async def update(self, product: Product) -> Product: ...

    async def delete(self, product_id: str) -> bool: ...
