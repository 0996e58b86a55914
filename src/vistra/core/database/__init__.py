"""Database layer - session management, base models, and mixins."""

from vistra.core.database.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDMixin,
    utcnow,
)
from vistra.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
)


__all__ = [
    "Base",
    "SoftDeleteMixin",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
    "utcnow",
]
