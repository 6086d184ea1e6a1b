"""Database layer: engine, sessions and ORM models."""

from .base import Base, CreatedAtMixin, TimestampMixin
from .engine import (
    create_schema,
    dispose_engine,
    get_database_url,
    get_db_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "create_schema",
    "dispose_engine",
    "get_database_url",
    "get_db_session",
    "get_engine",
    "get_session_factory",
]
