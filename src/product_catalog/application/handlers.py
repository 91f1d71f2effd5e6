"""Command and query handlers.

Every command handler follows the same sequence:

1.  Check preconditions (existence, field rules).  A rejected command
    returns a failed ``OperationResult`` before any persistence call.
2.  Perform exactly one repository mutation.  A row removed concurrently
    yields a not-found result; other repository errors propagate.  Either
    way no event is produced.
3.  Publish the matching domain event and await every subscriber.  A
    subscriber failure (e.g. ``DeliveryFailed``) propagates to the caller
    even though step 2 already committed.
4.  Return the mapped result.

Query handlers only read and never produce events.
"""

from __future__ import annotations

import logging

from product_catalog.core.clock import IClock, WallClock
from product_catalog.core.errors import NotFound, ValidationFailed
from product_catalog.domain.events import ProductCreated, ProductDeleted, ProductUpdated
from product_catalog.domain.product import Product
from product_catalog.domain.repositories import IProductRepository
from product_catalog.messaging.event_bus import DomainEventPublisher

from .dto import ProductDto, ProductsPage
from .intents import (
    CreateProductCommand,
    DeleteProductCommand,
    GetProductByIdQuery,
    ListProductsQuery,
    UpdateProductCommand,
)
from .results import OperationResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class CreateProductHandler:
    def __init__(
        self,
        repository: IProductRepository,
        events: DomainEventPublisher,
        clock: IClock | None = None,
    ) -> None:
        self._repository = repository
        self._events = events
        self._clock = clock or WallClock()

    async def handle(self, command: CreateProductCommand) -> OperationResult[ProductDto]:
        logger.info("Creating product with name %r", command.name)

        try:
            product = Product.create(
                command.name, command.description, command.price, self._clock,
            )
        except ValidationFailed as exc:
            logger.info("Rejected product creation: %s", exc)
            return OperationResult.validation_failed(exc)

        created = await self._repository.add(product)
        await self._events.publish(ProductCreated.from_product(created))

        logger.info("Product created with id %s", created.id)
        return OperationResult.success(ProductDto.from_product(created))


class UpdateProductHandler:
    def __init__(
        self,
        repository: IProductRepository,
        events: DomainEventPublisher,
        clock: IClock | None = None,
    ) -> None:
        self._repository = repository
        self._events = events
        self._clock = clock or WallClock()

    async def handle(self, command: UpdateProductCommand) -> OperationResult[ProductDto]:
        logger.info("Updating product %s", command.product_id)

        product = await self._repository.get_by_id(command.product_id)
        if product is None:
            logger.warning("Product %s not found for update", command.product_id)
            return OperationResult.not_found("Product", command.product_id)

        try:
            product.update(
                command.name, command.description, command.price, self._clock,
            )
        except ValidationFailed as exc:
            logger.info("Rejected update of product %s: %s", command.product_id, exc)
            return OperationResult.validation_failed(exc)

        try:
            updated = await self._repository.update(product)
        except NotFound:
            # Removed concurrently between the read and the write.
            logger.warning("Product %s vanished before update", command.product_id)
            return OperationResult.not_found("Product", command.product_id)

        await self._events.publish(ProductUpdated.from_product(updated))

        logger.info("Product %s updated", updated.id)
        return OperationResult.success(ProductDto.from_product(updated))


class DeleteProductHandler:
    def __init__(
        self,
        repository: IProductRepository,
        events: DomainEventPublisher,
        clock: IClock | None = None,
    ) -> None:
        self._repository = repository
        self._events = events
        self._clock = clock or WallClock()

    async def handle(self, command: DeleteProductCommand) -> OperationResult[bool]:
        logger.info("Deleting product %s", command.product_id)

        if await self._repository.get_by_id(command.product_id) is None:
            logger.warning("Product %s not found for deletion", command.product_id)
            return OperationResult.not_found("Product", command.product_id)

        # Removed concurrently between the check and the delete.
        if not await self._repository.delete(command.product_id):
            logger.warning("Product %s vanished before deletion", command.product_id)
            return OperationResult.not_found("Product", command.product_id)

        await self._events.publish(
            ProductDeleted.for_product(command.product_id, self._clock.now())
        )

        logger.info("Product %s deleted", command.product_id)
        return OperationResult.success(True)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class GetProductByIdHandler:
    def __init__(self, repository: IProductRepository) -> None:
        self._repository = repository

    async def handle(self, query: GetProductByIdQuery) -> OperationResult[ProductDto]:
        product = await self._repository.get_by_id(query.product_id)
        if product is None:
            logger.info("Product %s not found", query.product_id)
            return OperationResult.success(None)
        return OperationResult.success(ProductDto.from_product(product))


class ListProductsHandler:
    """Pages through products ordered by creation time.

    ``page_number`` is 1-based.  Non-positive values and page sizes above
    ``max_page_size`` are rejected rather than clamped.
    """

    def __init__(self, repository: IProductRepository, max_page_size: int = 100) -> None:
        self._repository = repository
        self._max_page_size = max_page_size

    async def handle(self, query: ListProductsQuery) -> OperationResult[ProductsPage]:
        if query.page_number < 1:
            return OperationResult.invalid_argument(
                f"page_number must be >= 1, got {query.page_number}"
            )
        if not 1 <= query.page_size <= self._max_page_size:
            return OperationResult.invalid_argument(
                f"page_size must be between 1 and {self._max_page_size}, "
                f"got {query.page_size}"
            )

        logger.info(
            "Listing products page %d with size %d", query.page_number, query.page_size,
        )
        skip = (query.page_number - 1) * query.page_size
        products = await self._repository.list(skip, query.page_size)
        total = await self._repository.count()

        logger.info("Retrieved %d products out of %d", len(products), total)
        return OperationResult.success(
            ProductsPage.build(
                items=[ProductDto.from_product(p) for p in products],
                total_count=total,
                page_number=query.page_number,
                page_size=query.page_size,
            )
        )
