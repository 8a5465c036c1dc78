"""Persistence layer: database manager, ORM models and repositories."""

from authgate.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    get_db_session,
)

__all__ = ["Base", "DatabaseManager", "get_db_session"]
