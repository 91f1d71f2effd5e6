"""SQLAlchemy ORM models for the catalog database.

Column types are dialect-neutral so the same table works on PostgreSQL and
on SQLite (tests, embedded deployments).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""

    pass


class ProductRecord(Base):
    """One catalog item.  ``id`` is generated by the domain, never by the DB."""

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    __table_args__ = (
        Index("ix_products_created_at", "created_at"),
        Index("ix_products_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<ProductRecord(id={self.id!r}, name={self.name!r}, price={self.price})>"
