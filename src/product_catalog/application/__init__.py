"""Application layer: intents, their handlers, and the dispatcher."""

from .dispatcher import Dispatcher, HandlerRegistry
from .intents import (
    Command,
    CreateProductCommand,
    DeleteProductCommand,
    GetProductByIdQuery,
    Intent,
    ListProductsQuery,
    Query,
    UpdateProductCommand,
)
from .results import OperationResult

__all__ = [
    "Command",
    "CreateProductCommand",
    "DeleteProductCommand",
    "Dispatcher",
    "GetProductByIdQuery",
    "HandlerRegistry",
    "Intent",
    "ListProductsQuery",
    "OperationResult",
    "Query",
    "UpdateProductCommand",
]
