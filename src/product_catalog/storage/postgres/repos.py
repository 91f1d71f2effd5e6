"""SQLAlchemy implementation of ``IProductRepository``.

Each operation runs in its own session (one transaction per call), so a
command handler's single mutation is committed before its domain event is
published.

Conversion helpers translate between the domain :class:`Product` and the
ORM :class:`ProductRecord`.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from product_catalog.core.errors import NotFound
from product_catalog.core.ids import ensure_utc
from product_catalog.domain.product import Product

from .connection import session_scope
from .models import ProductRecord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------

def _product_to_record(product: Product) -> ProductRecord:
    """Convert a domain :class:`Product` to an ORM :class:`ProductRecord`."""
    return ProductRecord(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _record_to_product(record: ProductRecord) -> Product:
    """Convert an ORM :class:`ProductRecord` back to a domain :class:`Product`."""
    return Product(
        id=record.id,
        name=record.name,
        description=record.description,
        price=record.price,
        created_at=ensure_utc(record.created_at),
        updated_at=ensure_utc(record.updated_at) if record.updated_at else None,
    )


# ---------------------------------------------------------------------------
# SqlAlchemyProductRepository
# ---------------------------------------------------------------------------

class SqlAlchemyProductRepository:
    """Repository for :class:`ProductRecord` persistence and retrieval."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(self, product_id: str) -> Product | None:
        logger.debug("Getting product by id %s", product_id)
        async with session_scope(self._session_factory) as session:
            record = await session.get(ProductRecord, product_id)
            return _record_to_product(record) if record is not None else None

    async def list(self, skip: int, take: int) -> list[Product]:
        logger.debug("Listing products skip=%d take=%d", skip, take)
        stmt = (
            select(ProductRecord)
            .order_by(ProductRecord.created_at.asc(), ProductRecord.id.asc())
            .offset(skip)
            .limit(take)
        )
        async with session_scope(self._session_factory) as session:
            result = await session.execute(stmt)
            return [_record_to_product(r) for r in result.scalars().all()]

    async def count(self) -> int:
        stmt = select(func.count()).select_from(ProductRecord)
        async with session_scope(self._session_factory) as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def add(self, product: Product) -> Product:
        logger.debug("Adding product %s", product.id)
        async with session_scope(self._session_factory) as session:
            session.add(_product_to_record(product))
        return product

    async def update(self, product: Product) -> Product:
        logger.debug("Updating product %s", product.id)
        async with session_scope(self._session_factory) as session:
            record = await session.get(ProductRecord, product.id)
            if record is None:
                raise NotFound("Product", product.id)
            record.name = product.name
            record.description = product.description
            record.price = product.price
            record.updated_at = product.updated_at
        return product

    async def delete(self, product_id: str) -> bool:
        logger.debug("Deleting product %s", product_id)
        stmt = delete(ProductRecord).where(ProductRecord.id == product_id)
        async with session_scope(self._session_factory) as session:
            result = await session.execute(stmt)
            return result.rowcount > 0
