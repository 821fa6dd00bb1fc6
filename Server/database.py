"""
Todo RBAC Server - Database Module

This module exports the global db_manager instance for use across the
application and the per-request session dependency.
"""

from typing import Iterator

from sqlalchemy.orm import Session

from managers.database_manager import DatabaseManager

# Global database manager instance
# Initialized in server.py lifespan handler
db_manager: DatabaseManager = None


def GetDbSession() -> Iterator[Session]:
    """
    FastAPI dependency yielding one session per request

    Handlers commit explicitly; anything left uncommitted is rolled back
    when the session closes.
    """
    session = db_manager.GetSession()
    try:
        yield session
    finally:
        session.close()
