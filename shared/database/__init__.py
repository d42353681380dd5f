"""
Database Connection and Utilities

Manages the async SQLAlchemy engine and sessions.
"""

from shared.database.connection import (
    AsyncSessionLocal,
    Base,
    build_engine,
    build_session_factory,
    close_db,
    get_db,
    init_db,
)

__all__ = [
    "get_db",
    "init_db",
    "close_db",
    "Base",
    "AsyncSessionLocal",
    "build_engine",
    "build_session_factory",
]
