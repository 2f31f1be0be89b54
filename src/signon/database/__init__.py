"""Database module for signon.

This module provides:
- SQLAlchemy async database connection
- The user model
"""

from signon.database.connection import (
    get_db,
    init_db,
    close_db,
    create_tables,
    DatabaseSession,
)
from signon.database.models import Base, User

__all__ = [
    # Connection
    "get_db",
    "init_db",
    "close_db",
    "create_tables",
    "DatabaseSession",
    # Models
    "Base",
    "User",
]
