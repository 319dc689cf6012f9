"""Per-user vocabulary progress data model and its status transitions."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WordStatus(str, Enum):
    """Learning status of a word for one user."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    MASTERED = "mastered"


MASTERY_MIN_CORRECT = 3
MASTERED_INTERVAL = timedelta(days=7)
LEARNING_INTERVAL = timedelta(days=2)
REVIEW_INTERVAL = timedelta(days=1)


class WordProgress(BaseModel):
    """Progress of one user on one word.

    Attributes:
        user_id: Owner of the progress row.
        word: The practiced word.
        status: Current learning status.
        last_practiced: When the word was last attempted (UTC).
        next_review: When the word is next due (UTC).
        correct_count: Fully correct attempts so far.
        incorrect_count: Attempts with at least one error.
    """

    user_id: str = Field(min_length=1)
    word: str = Field(min_length=1)
    status: WordStatus = WordStatus.NEW
    last_practiced: datetime
    next_review: datetime
    correct_count: int = Field(default=0, ge=0)
    incorrect_count: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("last_practiced", "next_review")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def new(cls, user_id: str, word: str, now: datetime) -> "WordProgress":
        """A freshly introduced word, due immediately."""
        return cls(user_id=user_id, word=word, last_practiced=now, next_review=now)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def next_progress(
    current: Optional[WordProgress],
    user_id: str,
    word: str,
    correct: bool,
    now: datetime,
) -> WordProgress:
    """Return the progress after one attempt at ``word``.

    Counters are incremented first. A word already tracked becomes mastered
    once it has at least three correct attempts and more correct than
    incorrect ones; otherwise a correct attempt moves it to learning and a
    failed one to review. A first-ever attempt goes straight to learning or
    review.
    """
    correct_count = (current.correct_count if current else 0) + (1 if correct else 0)
    incorrect_count = (current.incorrect_count if current else 0) + (0 if correct else 1)

    if current is not None and correct_count >= MASTERY_MIN_CORRECT and correct_count > incorrect_count:
        status, interval = WordStatus.MASTERED, MASTERED_INTERVAL
    elif correct:
        status, interval = WordStatus.LEARNING, LEARNING_INTERVAL
    else:
        status, interval = WordStatus.REVIEW, REVIEW_INTERVAL

    return WordProgress(
        user_id=user_id,
        word=word,
        status=status,
        last_practiced=now,
        next_review=now + interval,
        correct_count=correct_count,
        incorrect_count=incorrect_count,
    )
