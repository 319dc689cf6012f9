"""Central database manager for the local practice store.

Provides connection, query, and schema management with specific exception handling.
The local store is a single SQLite file (or ":memory:") holding the namespaced
key-value entries of the practice client and the per-user word progress table.

All database access should go through this class so that errors surface as the
exceptions defined in :mod:`db.exceptions`.
"""

import contextlib
import logging
import sqlite3
from typing import Dict, Iterator, List, NoReturn, Optional, Tuple, Type

from .exceptions import (
    ConstraintError,
    DatabaseError,
    DBConnectionError,
    IntegrityError,
    SchemaError,
    TableNotFoundError,
)

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Centralized manager for database connections and operations.

    Handles connection management, query execution, schema initialization, and
    exception translation. Statements commit immediately unless they run inside
    :meth:`transaction`, in which case the whole block commits or rolls back together.
    """

    def __init__(self, db_path: Optional[str] = None, debug_util: Optional[object] = None) -> None:
        """Open a SQLite connection.

        Args:
            db_path: Path to SQLite database file or ":memory:" for in-memory database.
                If None, creates an in-memory database.
            debug_util: Optional DebugUtil instance for handling debug output.

        Raises:
            DBConnectionError: If the database connection cannot be established.
        """
        self.db_path: str = db_path or ":memory:"
        self.debug_util = debug_util
        self._in_transaction = False
        try:
            self._conn: Optional[sqlite3.Connection] = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise DBConnectionError(f"Failed to open database {self.db_path}: {e}") from e
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")

    def _debug_message(self, *args: object) -> None:
        """Send debug message through DebugUtil if available, otherwise log it."""
        if self.debug_util and hasattr(self.debug_util, "debugMessage"):
            self.debug_util.debugMessage(*args)
        else:
            logger.debug(" ".join(str(arg) for arg in args))

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DBConnectionError("Database connection is not established")
        return self._conn

    def _translate_and_raise(self, e: Exception) -> NoReturn:
        """Translate sqlite exceptions to our custom exceptions and raise.

        Always raises; does not return.
        """
        if isinstance(e, DatabaseError):
            raise e
        error_msg = str(e).lower()
        if isinstance(e, sqlite3.IntegrityError):
            if "not null" in error_msg or "unique" in error_msg or "check" in error_msg:
                raise ConstraintError(f"Constraint violation: {e}") from e
            raise IntegrityError(f"Integrity error: {e}") from e
        if isinstance(e, sqlite3.OperationalError):
            if "no such table" in error_msg:
                raise TableNotFoundError(f"Table not found: {e}") from e
            if "no such column" in error_msg or "has no column" in error_msg:
                raise SchemaError(f"Schema error: {e}") from e
            if "unable to open" in error_msg or "closed" in error_msg:
                raise DBConnectionError(f"Database connection failed: {e}") from e
            raise DatabaseError(f"Database operation failed: {e}") from e
        if isinstance(e, sqlite3.ProgrammingError) and "closed" in error_msg:
            raise DBConnectionError(f"Database connection is closed: {e}") from e
        if isinstance(e, sqlite3.Error):
            raise DatabaseError(f"Database error: {e}") from e
        raise DatabaseError(f"Unexpected database error: {e}") from e

    def execute(self, query: str, params: Tuple[object, ...] = ()) -> sqlite3.Cursor:
        """Execute a SQL query with parameters.

        Non-SELECT statements are committed immediately when no transaction is open.

        Args:
            query: SQL query string (parameterized)
            params: Query parameters

        Returns:
            Database cursor object

        Raises:
            DBConnectionError, TableNotFoundError, SchemaError, DatabaseError,
            ConstraintError, IntegrityError
        """
        try:
            conn = self._get_connection()
            self._debug_message(f"Executing SQL: {' '.join(query.split())}; params={params}")
            cursor = conn.execute(query, params)
            if not self._in_transaction and not query.strip().upper().startswith("SELECT"):
                conn.commit()
            return cursor
        except Exception as e:
            if self._conn is not None and not self._in_transaction:
                try:
                    self._conn.rollback()
                except sqlite3.Error as rollback_exc:
                    logger.error("Rollback failed: %s", rollback_exc)
            self._translate_and_raise(e)

    @contextlib.contextmanager
    def transaction(self) -> Iterator["DatabaseManager"]:
        """Group several statements into one atomic unit.

        Commits when the block exits normally and rolls back when it raises.
        """
        conn = self._get_connection()
        if self._in_transaction:
            yield self
            return
        self._in_transaction = True
        try:
            yield self
            conn.commit()
        except Exception as e:
            conn.rollback()
            if isinstance(e, sqlite3.Error):
                self._translate_and_raise(e)
            raise
        finally:
            self._in_transaction = False

    def fetchone(self, query: str, params: Tuple[object, ...] = ()) -> Optional[Dict[str, object]]:
        """Execute a SQL query and fetch a single result.

        Args:
            query: SQL query string (parameterized)
            params: Query parameters

        Returns:
            Dict representing fetched row, or None if no results
        """
        row = self.execute(query, params).fetchone()
        if row is None:
            return None
        return dict(row)

    def fetchall(self, query: str, params: Tuple[object, ...] = ()) -> List[Dict[str, object]]:
        """Execute a query and return all rows as a list of dictionaries."""
        rows = self.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists in the database."""
        row = self.fetchone(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table_name,),
        )
        return row is not None

    def list_tables(self) -> List[str]:
        """Return all user table names in the database, sorted by name."""
        rows = self.fetchall(
            "SELECT name FROM sqlite_master WHERE type = 'table' "
            "AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [str(row["name"]) for row in rows]

    def _create_app_storage_table(self) -> None:
        """Create the namespaced key-value table if it does not exist."""
        self.execute(
            """
            CREATE TABLE IF NOT EXISTS app_storage (
                namespace TEXT NOT NULL,
                storage_key TEXT NOT NULL,
                storage_value TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (namespace, storage_key)
            );
            """
        )

    def _create_word_progress_table(self) -> None:
        """Create the per-user vocabulary progress table if it does not exist."""
        self.execute(
            """
            CREATE TABLE IF NOT EXISTS word_progress (
                user_id TEXT NOT NULL,
                word TEXT NOT NULL,
                status TEXT NOT NULL
                    CHECK (status IN ('new', 'learning', 'review', 'mastered')),
                last_practiced TEXT NOT NULL,
                next_review TEXT NOT NULL,
                correct_count INTEGER NOT NULL DEFAULT 0 CHECK (correct_count >= 0),
                incorrect_count INTEGER NOT NULL DEFAULT 0 CHECK (incorrect_count >= 0),
                PRIMARY KEY (user_id, word)
            );
            """
        )
        self.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_word_progress_due
            ON word_progress(user_id, next_review);
            """
        )

    def init_tables(self) -> None:
        """Initialize all database tables by creating them if they do not exist."""
        self._create_app_storage_table()
        self._create_word_progress_table()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            try:
                self._conn.close()
            except sqlite3.Error as e:
                logger.error("Error closing database connection: %s", e)
                raise
            finally:
                self._conn = None

    def __enter__(self) -> "DatabaseManager":
        """Context manager protocol support."""
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: object,
    ) -> None:
        """Close connection when exiting context."""
        self.close()
