"""
Backend Store

In-memory users, their test results and the global leaderboard. Nothing is
persisted: a restart loses all state. Every method takes the store lock, so
Flask request threads can share one instance.
"""

import logging
import threading
from collections import Counter
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from models.submitted_result import SubmittedResult
from models.user import User

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_SIZE = 100
RECENT_RESULTS = 10
POPULAR_SOURCES = 5


class UserValidationError(Exception):
    """Raised when user or result data fails validation checks."""

    def __init__(self, message: str = "User validation failed") -> None:
        """Initialize the exception with an optional message."""
        self.message = message
        super().__init__(self.message)


class UserNotFound(Exception):
    """Raised when a requested user does not exist."""

    def __init__(self, message: str = "User not found") -> None:
        """Initialize the exception with an optional message."""
        self.message = message
        super().__init__(self.message)


class BackendStore:
    """Thread-safe in-memory state of the practice backend."""

    def __init__(self, leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE) -> None:
        if leaderboard_size < 1:
            raise ValueError("leaderboard_size must be at least 1")
        self.leaderboard_size = leaderboard_size
        self._lock = threading.Lock()
        self._users: Dict[str, User] = {}
        self._results: Dict[str, List[SubmittedResult]] = {}
        self._leaderboard: List[SubmittedResult] = []

    def _require_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFound(f"User with ID {user_id} not found.")
        return user

    def create_user(self, name: str, email: str) -> User:
        """Create a user with default settings.

        Raises:
            UserValidationError: If the name or email is invalid.
        """
        try:
            user = User(name=name, email=email)
        except ValidationError as e:
            raise UserValidationError(f"Invalid user: {e}") from e
        with self._lock:
            self._users[user.id] = user
            self._results[user.id] = []
        logger.info("Created user %s", user.id)
        return user

    def get_user(self, user_id: str) -> User:
        with self._lock:
            return self._require_user(user_id)

    def add_result(self, user_id: str, fields: Dict[str, Any]) -> Tuple[SubmittedResult, List[SubmittedResult]]:
        """Record a result for ``user_id`` and update the leaderboard.

        Returns:
            The stored result and a snapshot of the full leaderboard.

        Raises:
            UserNotFound: If the user does not exist.
            UserValidationError: If the result fields are invalid.
        """
        with self._lock:
            self._require_user(user_id)
            try:
                result = SubmittedResult(user_id=user_id, **fields)
            except (TypeError, ValidationError) as e:
                raise UserValidationError(f"Invalid test result: {e}") from e
            self._results[user_id].append(result)
            self._leaderboard.append(result)
            # Stable sort keeps earlier results ahead on ties.
            self._leaderboard.sort(key=lambda r: r.wpm, reverse=True)
            del self._leaderboard[self.leaderboard_size:]
            return result, list(self._leaderboard)

    def user_stats(self, user_id: str) -> Dict[str, Any]:
        """Aggregate stats of one user plus the last results, newest first."""
        with self._lock:
            self._require_user(user_id)
            results = list(self._results[user_id])
        if not results:
            return {
                "totalTests": 0,
                "averageWpm": 0,
                "bestWpm": 0,
                "averageAccuracy": 0,
                "totalTime": 0,
                "recentResults": [],
            }
        return {
            "totalTests": len(results),
            "averageWpm": round(sum(r.wpm for r in results) / len(results)),
            "bestWpm": max(r.wpm for r in results),
            "averageAccuracy": round(sum(r.accuracy for r in results) / len(results)),
            "totalTime": sum(r.time_elapsed for r in results),
            "recentResults": [r.to_dict() for r in reversed(results[-RECENT_RESULTS:])],
        }

    def leaderboard(self, limit: int) -> Tuple[List[SubmittedResult], int]:
        """Top ``limit`` results by WPM and the number of results retained."""
        with self._lock:
            return self._leaderboard[:limit], len(self._leaderboard)

    def get_settings(self, user_id: str) -> Dict[str, Any]:
        with self._lock:
            return dict(self._require_user(user_id).settings)

    def update_settings(self, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge ``changes`` into the user's settings and return them."""
        with self._lock:
            user = self._require_user(user_id).with_settings(changes)
            self._users[user_id] = user
            return dict(user.settings)

    def global_analytics(self) -> Dict[str, Any]:
        """Totals across all users and the most used text sources."""
        with self._lock:
            all_results = [r for results in self._results.values() for r in results]
            total_users = len(self._users)
        if not all_results:
            return {"totalTests": 0, "averageWpm": 0, "totalUsers": total_users, "popularSources": []}
        source_counts = Counter(r.text_source for r in all_results)
        return {
            "totalTests": len(all_results),
            "averageWpm": round(sum(r.wpm for r in all_results) / len(all_results)),
            "totalUsers": total_users,
            "popularSources": [
                {"source": source, "count": count}
                for source, count in source_counts.most_common(POPULAR_SOURCES)
            ],
        }
