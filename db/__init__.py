"""
Database package for the typing practice application.
This package contains all local persistence functionality.
"""
from .database_manager import DatabaseManager
from .exceptions import DatabaseError, DBConnectionError

__all__ = ["DatabaseManager", "DatabaseError", "DBConnectionError"]
