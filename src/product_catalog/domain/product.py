"""Product aggregate.

Invariants
----------
1.  ``id`` and ``created_at`` are set once at creation and are frozen.
2.  ``updated_at`` is ``None`` until the first mutation; every mutation moves
    it forward (never earlier than the previous ``updated_at``/``created_at``).
3.  ``name``/``description``/``price`` always satisfy the field rules below;
    a rejected update leaves the aggregate untouched.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from product_catalog.core.clock import IClock, WallClock
from product_catalog.core.errors import FieldError, ValidationFailed
from product_catalog.core.ids import new_id

NAME_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
MAX_PRICE = Decimal("1000000")


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


ProductName = Annotated[
    str,
    Field(min_length=1, max_length=NAME_MAX_LENGTH),
    AfterValidator(_not_blank),
]
ProductDescription = Annotated[
    str,
    Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH),
    AfterValidator(_not_blank),
]
ProductPrice = Annotated[Decimal, Field(gt=0, le=MAX_PRICE, decimal_places=2)]


def field_errors_from(exc: ValidationError) -> list[FieldError]:
    """Flatten a pydantic ``ValidationError`` into ``FieldError`` records."""
    errors: list[FieldError] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
        errors.append(FieldError(field=loc, message=err["msg"]))
    return errors


class ProductChanges(BaseModel):
    """The mutable part of a product, validated as one unit."""

    name: ProductName
    description: ProductDescription
    price: ProductPrice


class Product(BaseModel):
    """A catalog item."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id, frozen=True)
    name: ProductName
    description: ProductDescription
    price: ProductPrice
    created_at: datetime = Field(frozen=True)
    updated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        name: str,
        description: str,
        price: Decimal,
        clock: IClock | None = None,
    ) -> Product:
        """Build a new product with a fresh id and ``created_at`` = now.

        Raises:
            ValidationFailed: If any field breaks its rule.
        """
        clock = clock or WallClock()
        try:
            return cls(
                name=name,
                description=description,
                price=price,
                created_at=clock.now(),
            )
        except ValidationError as exc:
            raise ValidationFailed(field_errors_from(exc)) from exc

    def update(
        self,
        name: str,
        description: str,
        price: Decimal,
        clock: IClock | None = None,
    ) -> None:
        """Replace the mutable fields and stamp ``updated_at``.

        All three fields are validated before any of them is assigned.

        Raises:
            ValidationFailed: If any field breaks its rule.
        """
        try:
            changes = ProductChanges(name=name, description=description, price=price)
        except ValidationError as exc:
            raise ValidationFailed(field_errors_from(exc)) from exc

        now = (clock or WallClock()).now()
        previous = self.updated_at or self.created_at
        self.name = changes.name
        self.description = changes.description
        self.price = changes.price
        self.updated_at = max(now, previous)
