"""External representations returned by handlers."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from product_catalog.domain.product import Product


class ProductDto(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    price: Decimal
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_product(cls, product: Product) -> ProductDto:
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductsPage(BaseModel):
    """One page of products plus the totals needed to navigate."""

    model_config = ConfigDict(frozen=True)

    items: list[ProductDto] = Field(default_factory=list)
    total_count: int
    page_number: int
    page_size: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(
        cls,
        items: list[ProductDto],
        total_count: int,
        page_number: int,
        page_size: int,
    ) -> ProductsPage:
        skip = (page_number - 1) * page_size
        return cls(
            items=items,
            total_count=total_count,
            page_number=page_number,
            page_size=page_size,
            has_next_page=skip + page_size < total_count,
            has_previous_page=page_number > 1,
        )
