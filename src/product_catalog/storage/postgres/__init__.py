"""SQLAlchemy async storage for products (PostgreSQL via asyncpg, or any async URL)."""

from .connection import create_all, create_engine, create_session_factory, session_scope
from .repos import SqlAlchemyProductRepository

__all__ = [
    "SqlAlchemyProductRepository",
    "create_all",
    "create_engine",
    "create_session_factory",
    "session_scope",
]
