"""HTTP surface: FastAPI application over the dispatcher.

Routes translate request bodies into intents, dispatch them, and map
``OperationResult`` outcomes to status codes:

  POST   /api/products        201 (Location: /api/products/{id}) | 400
  GET    /api/products        200 | 400
  GET    /api/products/{id}   200 | 404
  PUT    /api/products/{id}   200 | 400 | 404
  DELETE /api/products/{id}   204 | 404

``DeliveryFailed`` becomes 502: the change is persisted but its integration
event was not delivered.

Usage::

    from product_catalog.api.app import create_api_app
    from product_catalog.bootstrap import application_from_config

    app = create_api_app(application_from_config("configs/catalog.toml"))
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from decimal import Decimal
from typing import Any, AsyncIterator

from fastapi import FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from product_catalog.application.dto import ProductDto, ProductsPage
from product_catalog.application.intents import (
    CreateProductCommand,
    DeleteProductCommand,
    GetProductByIdQuery,
    ListProductsQuery,
    UpdateProductCommand,
)
from product_catalog.application.results import OperationResult
from product_catalog.bootstrap import Application
from product_catalog.core.enums import ErrorKind
from product_catalog.core.errors import DeliveryFailed

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 404,
}


class ProductBody(BaseModel):
    """Request body for create and update.

    Field rules are enforced by the domain, so they surface as 400 with
    per-field errors rather than FastAPI's 422.
    """

    name: str
    description: str
    price: Decimal


def _error_response(result: OperationResult[Any]) -> JSONResponse:
    if result.error is None:
        raise ValueError("Cannot build an error response from a successful result")
    return JSONResponse(
        status_code=_STATUS_BY_ERROR[result.error],
        content={
            "error": result.error.value,
            "detail": result.detail,
            "field_errors": [asdict(e) for e in result.field_errors],
        },
    )


def create_api_app(application: Application) -> FastAPI:
    """Create the catalog FastAPI application around a wired ``Application``.

    The application's resources are opened on startup and closed on
    shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await application.start()
        try:
            yield
        finally:
            await application.stop()

    app = FastAPI(title="Product Catalog", lifespan=lifespan)
    app.state.application = application
    dispatcher = application.dispatcher
    default_page_size = application.settings.pagination.default_page_size

    @app.exception_handler(DeliveryFailed)
    async def delivery_failed(request: Request, exc: DeliveryFailed) -> JSONResponse:
        logger.error("Change persisted but event not delivered: %s", exc)
        return JSONResponse(
            status_code=502,
            content={
                "error": "delivery_failed",
                "detail": (
                    "The change was saved but its event could not be "
                    f"delivered: {exc.reason}"
                ),
            },
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {
            "status": "ok",
            "storage": application.settings.storage_backend.value,
            "publisher": application.settings.publisher_backend.value,
        }

    @app.post("/api/products", status_code=201, response_model=ProductDto)
    async def create_product(body: ProductBody, response: Response) -> Any:
        result = await dispatcher.dispatch(
            CreateProductCommand(body.name, body.description, body.price)
        )
        if not result.ok:
            return _error_response(result)
        response.headers["Location"] = str(app.url_path_for(
            "get_product", product_id=result.value.id,
        ))
        return result.value

    @app.get("/api/products", response_model=ProductsPage)
    async def list_products(
        page_number: int = Query(default=1),
        page_size: int | None = Query(default=None),
    ) -> Any:
        result = await dispatcher.dispatch(
            ListProductsQuery(
                page_number=page_number,
                page_size=page_size if page_size is not None else default_page_size,
            )
        )
        if not result.ok:
            return _error_response(result)
        return result.value

    @app.get("/api/products/{product_id}", response_model=ProductDto)
    async def get_product(product_id: str) -> Any:
        result = await dispatcher.dispatch(GetProductByIdQuery(product_id))
        if result.value is None:
            return JSONResponse(
                status_code=404,
                content={
                    "error": ErrorKind.NOT_FOUND.value,
                    "detail": f"Product with id {product_id} not found",
                    "field_errors": [],
                },
            )
        return result.value

    @app.put("/api/products/{product_id}", response_model=ProductDto)
    async def update_product(product_id: str, body: ProductBody) -> Any:
        result = await dispatcher.dispatch(
            UpdateProductCommand(product_id, body.name, body.description, body.price)
        )
        if not result.ok:
            return _error_response(result)
        return result.value

    @app.delete("/api/products/{product_id}", status_code=204)
    async def delete_product(product_id: str) -> Response:
        result = await dispatcher.dispatch(DeleteProductCommand(product_id))
        if not result.ok:
            return _error_response(result)
        return Response(status_code=204)

    return app
