"""Adaptive Word Scheduler

Chooses the next vocabulary word for a user and records the outcome of each
attempt, using a simple spaced-repetition heuristic:

* words in learning or review whose review time has passed come first, earliest due first;
* then any word the user was introduced to but never attempted;
* otherwise a random catalog word the user has not seen yet is introduced.

Store failures never reach the caller: they are logged and reported as
``None`` (or an empty list) so practice can continue without progress tracking.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from db.exceptions import DatabaseError
from models.vocabulary import VocabularyCatalog
from models.word_progress import WordProgress, WordStatus, next_progress
from models.word_progress_manager import WordProgressManager

logger = logging.getLogger(__name__)


class AdaptiveWordScheduler:
    """Picks practice words per user and tracks their progress."""

    def __init__(
        self,
        progress_manager: WordProgressManager,
        catalog: VocabularyCatalog,
        *,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Args:
            progress_manager: Persistence for word progress rows.
            catalog: Source of words to introduce.
            now: Clock returning the current UTC time.
            rng: Random generator used when introducing new words.
        """
        self.progress_manager = progress_manager
        self.catalog = catalog
        self._now = now
        self._rng = rng or random.Random()

    def next_word(self, user_id: str) -> Optional[str]:
        """Return the word the user should practice next, or None if the store failed."""
        now = self._now()
        try:
            due = self.progress_manager.first_due(user_id, now)
            if due is not None:
                return due.word

            fresh = self.progress_manager.first_new(user_id)
            if fresh is not None:
                return fresh.word

            seen = self.progress_manager.seen_words(user_id)
            unseen = [w for w in self.catalog.unique_words() if w not in seen]
            if not unseen:
                # Every catalog word is tracked already; nothing to introduce.
                return self.catalog.random_word().word

            word = self._rng.choice(unseen)
            self.progress_manager.save(WordProgress.new(user_id, word, now))
            logger.debug("Introduced word %r for user %s", word, user_id)
            return word
        except DatabaseError as e:
            logger.error("Failed to choose next word for user %s: %s", user_id, e)
            return None

    def record_attempt(self, user_id: str, word: str, was_fully_correct: bool) -> Optional[WordProgress]:
        """Update the user's progress on ``word`` after one attempt.

        Returns:
            The stored progress, or None if the store failed.
        """
        try:
            current = self.progress_manager.get(user_id, word)
            updated = next_progress(current, user_id, word, was_fully_correct, self._now())
            self.progress_manager.save(updated)
        except DatabaseError as e:
            logger.error("Failed to record attempt on %r for user %s: %s", word, user_id, e)
            return None
        logger.info(
            "Word %r for user %s is now %s (next review %s)",
            word,
            user_id,
            updated.status.value,
            updated.next_review.isoformat(),
        )
        return updated

    def vocabulary_stats(self, user_id: str) -> Optional[Dict[str, int]]:
        """Count the user's words per status, plus the total."""
        try:
            rows = self.progress_manager.list_for_user(user_id)
        except DatabaseError as e:
            logger.error("Failed to load vocabulary stats for user %s: %s", user_id, e)
            return None
        stats = {"total": len(rows)}
        for status in WordStatus:
            stats[status.value] = sum(1 for r in rows if r.status is status)
        return stats

    def words_due_for_review(self, user_id: str) -> List[WordProgress]:
        """All of the user's words due now, earliest first."""
        try:
            return self.progress_manager.list_due(user_id, self._now())
        except DatabaseError as e:
            logger.error("Failed to load words due for review for user %s: %s", user_id, e)
            return []
