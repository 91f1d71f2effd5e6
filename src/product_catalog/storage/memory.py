"""Dict-backed product repository.  No persistence across restarts.

Good for: unit tests, demo mode, local development without a database.
"""

from __future__ import annotations

import logging

from product_catalog.core.errors import NotFound
from product_catalog.domain.product import Product

logger = logging.getLogger(__name__)


class InMemoryProductRepository:
    """In-process store keyed by product id."""

    def __init__(self) -> None:
        self._products: dict[str, Product] = {}

    async def get_by_id(self, product_id: str) -> Product | None:
        logger.debug("Getting product by id %s", product_id)
        product = self._products.get(product_id)
        return product.model_copy(deep=True) if product is not None else None

    async def list(self, skip: int, take: int) -> list[Product]:
        logger.debug("Listing products skip=%d take=%d", skip, take)
        ordered = sorted(
            self._products.values(), key=lambda p: (p.created_at, p.id),
        )
        return [p.model_copy(deep=True) for p in ordered[skip:skip + take]]

    async def count(self) -> int:
        return len(self._products)

    async def add(self, product: Product) -> Product:
        logger.debug("Adding product %s", product.id)
        self._products[product.id] = product.model_copy(deep=True)
        return product

    async def update(self, product: Product) -> Product:
        logger.debug("Updating product %s", product.id)
        if product.id not in self._products:
            raise NotFound("Product", product.id)
        self._products[product.id] = product.model_copy(deep=True)
        return product

    async def delete(self, product_id: str) -> bool:
        logger.debug("Deleting product %s", product_id)
        return self._products.pop(product_id, None) is not None

    # ------------------------------------------------------------------
    # Testing helpers
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self._products.clear()
