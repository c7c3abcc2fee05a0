"""Database connection module."""

from src.core.database.base import Base, TimestampedModel, ensure_utc_aware, utc_now
from src.core.database.connection import (
    DatabaseConnection,
    DbSessionDep,
    create_tables,
    get_db_session,
    init_database,
    shutdown_database,
)
from src.core.database.tree import (
    collect_ancestor_ids,
    collect_descendant_ids,
    delete_by_ids,
)


__all__ = [
    "Base",
    "DatabaseConnection",
    "DbSessionDep",
    "TimestampedModel",
    "collect_ancestor_ids",
    "collect_descendant_ids",
    "create_tables",
    "delete_by_ids",
    "ensure_utc_aware",
    "get_db_session",
    "init_database",
    "shutdown_database",
    "utc_now",
]
