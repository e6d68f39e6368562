"""Database connection and session management."""

from repokit.database.connection import (
    get_engine,
    get_session,
    get_session_factory,
    init_database,
    reset_engine,
)

__all__ = [
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_database",
    "reset_engine",
]
