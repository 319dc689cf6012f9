"""Word Progress Manager for CRUD operations.

Handles all DB access for per-user vocabulary progress.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from db.database_manager import DatabaseManager
from models.word_progress import WordProgress, WordStatus

_COLUMNS = "user_id, word, status, last_practiced, next_review, correct_count, incorrect_count"


def _to_db_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class WordProgressManager:
    """Service layer for managing `WordProgress` rows via `DatabaseManager`.

    Timestamps are stored as ISO-8601 UTC text so that string comparison in SQL
    orders them chronologically.
    """

    def __init__(self, *, db_manager: DatabaseManager) -> None:
        """Create a new manager using the provided database manager."""
        self.db_manager: DatabaseManager = db_manager
        self.db_manager.init_tables()

    @staticmethod
    def _row_to_progress(row: Dict[str, object]) -> WordProgress:
        return WordProgress(
            user_id=str(row["user_id"]),
            word=str(row["word"]),
            status=WordStatus(str(row["status"])),
            last_practiced=datetime.fromisoformat(str(row["last_practiced"])),
            next_review=datetime.fromisoformat(str(row["next_review"])),
            correct_count=int(str(row["correct_count"])),
            incorrect_count=int(str(row["incorrect_count"])),
        )

    def get(self, user_id: str, word: str) -> Optional[WordProgress]:
        """Return the progress for ``word`` or None when the user never saw it."""
        row = self.db_manager.fetchone(
            f"SELECT {_COLUMNS} FROM word_progress WHERE user_id = ? AND word = ?",
            (user_id, word),
        )
        return self._row_to_progress(row) if row else None

    def first_due(self, user_id: str, now: datetime) -> Optional[WordProgress]:
        """Earliest learning/review word whose review time has passed."""
        row = self.db_manager.fetchone(
            f"""
            SELECT {_COLUMNS} FROM word_progress
            WHERE user_id = ? AND status IN ('learning', 'review') AND next_review <= ?
            ORDER BY next_review ASC
            LIMIT 1
            """,
            (user_id, _to_db_time(now)),
        )
        return self._row_to_progress(row) if row else None

    def first_new(self, user_id: str) -> Optional[WordProgress]:
        """Any word still in the ``new`` status."""
        row = self.db_manager.fetchone(
            f"""
            SELECT {_COLUMNS} FROM word_progress
            WHERE user_id = ? AND status = 'new'
            ORDER BY last_practiced ASC, word ASC
            LIMIT 1
            """,
            (user_id,),
        )
        return self._row_to_progress(row) if row else None

    def list_due(self, user_id: str, now: datetime) -> List[WordProgress]:
        """All words of any status due at ``now``, earliest first."""
        rows = self.db_manager.fetchall(
            f"""
            SELECT {_COLUMNS} FROM word_progress
            WHERE user_id = ? AND next_review <= ?
            ORDER BY next_review ASC
            """,
            (user_id, _to_db_time(now)),
        )
        return [self._row_to_progress(r) for r in rows]

    def list_for_user(self, user_id: str) -> List[WordProgress]:
        """All progress rows of a user, ordered by word."""
        rows = self.db_manager.fetchall(
            f"SELECT {_COLUMNS} FROM word_progress WHERE user_id = ? ORDER BY word",
            (user_id,),
        )
        return [self._row_to_progress(r) for r in rows]

    def seen_words(self, user_id: str) -> Set[str]:
        rows = self.db_manager.fetchall("SELECT word FROM word_progress WHERE user_id = ?", (user_id,))
        return {str(r["word"]) for r in rows}

    def save(self, progress: WordProgress) -> WordProgress:
        """Insert or replace the row for (user_id, word)."""
        self.db_manager.execute(
            f"""
            INSERT INTO word_progress ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, word) DO UPDATE SET
                status = excluded.status,
                last_practiced = excluded.last_practiced,
                next_review = excluded.next_review,
                correct_count = excluded.correct_count,
                incorrect_count = excluded.incorrect_count
            """,
            (
                progress.user_id,
                progress.word,
                progress.status.value,
                _to_db_time(progress.last_practiced),
                _to_db_time(progress.next_review),
                progress.correct_count,
                progress.incorrect_count,
            ),
        )
        return progress

