"""Namespaced key-value persistence on top of :class:`DatabaseManager`.

Values are stored as JSON text in the ``app_storage`` table.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from db.database_manager import DatabaseManager

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
RESULTS_KEY = "results"
STATS_KEY = "stats"


class KeyValueStore:
    """JSON values addressed by key within one namespace."""

    def __init__(self, *, db_manager: DatabaseManager, namespace: str = "typing-app") -> None:
        """Bind the store to a database manager and create its table if needed."""
        self.db_manager = db_manager
        self.namespace = namespace
        self.db_manager.init_tables()

    def get(self, key: str) -> Optional[Any]:
        """Return the decoded value for ``key``, or None when absent or unreadable."""
        row = self.db_manager.fetchone(
            "SELECT storage_value FROM app_storage WHERE namespace = ? AND storage_key = ?",
            (self.namespace, key),
        )
        if row is None:
            return None
        try:
            return json.loads(str(row["storage_value"]))
        except json.JSONDecodeError as e:
            logger.warning("Stored value for %s/%s is not valid JSON: %s", self.namespace, key, e)
            return None

    def set(self, key: str, value: Any) -> None:
        """Insert or replace the JSON-encoded value for ``key``."""
        self.db_manager.execute(
            """
            INSERT INTO app_storage (namespace, storage_key, storage_value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(namespace, storage_key)
            DO UPDATE SET storage_value = excluded.storage_value, updated_at = excluded.updated_at
            """,
            (self.namespace, key, json.dumps(value), datetime.now(timezone.utc).isoformat()),
        )

    def set_many(self, values: Mapping[str, Any]) -> None:
        """Write several keys in one transaction; either all land or none do."""
        with self.db_manager.transaction():
            for key, value in values.items():
                self.set(key, value)

    def delete(self, key: str) -> bool:
        """Delete ``key``; returns True if a row was removed."""
        cursor = self.db_manager.execute(
            "DELETE FROM app_storage WHERE namespace = ? AND storage_key = ?",
            (self.namespace, key),
        )
        return cursor.rowcount > 0

