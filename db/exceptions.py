"""
Custom database exceptions for the typing practice application.
"""


class DatabaseError(Exception):
    """Base class for all database-related exceptions."""


class DBConnectionError(DatabaseError):
    """Raised when there are issues connecting to the database."""


class ConstraintError(DatabaseError):
    """Raised when a database constraint is violated."""


class IntegrityError(DatabaseError):
    """Raised when database integrity is violated."""


class SchemaError(DatabaseError):
    """Raised when there are schema-related issues."""


class TableNotFoundError(DatabaseError):
    """Raised when a table is not found in the database."""
