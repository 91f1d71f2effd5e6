"""Explicit result values for expected outcomes.

Validation failures, missing aggregates and out-of-range arguments are
returned as ``OperationResult`` failures instead of raised, so callers
branch on ``result.ok``.  ``unwrap()`` converts back to the exception
taxonomy for callers that prefer raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from product_catalog.core.enums import ErrorKind
from product_catalog.core.errors import (
    CatalogError,
    FieldError,
    InvalidArgument,
    NotFound,
    ValidationFailed,
)

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    value: T | None = None
    error: ErrorKind | None = None
    detail: str = ""
    field_errors: tuple[FieldError, ...] = ()
    resource_id: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None) -> OperationResult[T]:
        return cls(value=value)

    @classmethod
    def validation_failed(cls, exc: ValidationFailed) -> OperationResult[T]:
        return cls(
            error=ErrorKind.VALIDATION_FAILED,
            detail=str(exc),
            field_errors=exc.field_errors,
        )

    @classmethod
    def not_found(cls, resource: str, resource_id: str) -> OperationResult[T]:
        return cls(
            error=ErrorKind.NOT_FOUND,
            detail=str(NotFound(resource, resource_id)),
            resource_id=resource_id,
        )

    @classmethod
    def invalid_argument(cls, detail: str) -> OperationResult[T]:
        return cls(error=ErrorKind.INVALID_ARGUMENT, detail=detail)

    def unwrap(self) -> T | None:
        """Return the value, or raise the exception matching ``error``."""
        if self.error is None:
            return self.value
        raise self.to_exception()

    def to_exception(self) -> CatalogError:
        if self.error == ErrorKind.VALIDATION_FAILED:
            return ValidationFailed(self.field_errors)
        if self.error == ErrorKind.NOT_FOUND:
            return NotFound("Product", self.resource_id)
        return InvalidArgument(self.detail)
