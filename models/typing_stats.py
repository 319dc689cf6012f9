"""Typing statistics for a single practice passage.

Stats are always recomputed from scratch from the passage, the cumulative typed
string and the elapsed time. Nothing is folded incrementally, so a later correct
character can raise accuracy again.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

CHARS_PER_WORD = 5


class TypingStats(BaseModel):
    """Snapshot of speed and accuracy for the current input.

    Attributes:
        words_per_minute: Gross WPM using the 5-characters-per-word convention.
        accuracy: Percentage of typed characters that match the passage (0-100).
        error_count: Typed characters that do not match the passage.
        elapsed_seconds: Seconds since the first character was typed.
        characters_typed: Length of the typed input.
        characters_correct: Typed characters matching the passage at the same index.
    """

    words_per_minute: int = Field(default=0, ge=0)
    accuracy: int = Field(default=100, ge=0, le=100)
    error_count: int = Field(default=0, ge=0)
    elapsed_seconds: float = Field(default=0.0, ge=0.0)
    characters_typed: int = Field(default=0, ge=0)
    characters_correct: int = Field(default=0, ge=0)

    model_config = {
        "frozen": True,
    }

    @model_validator(mode="after")
    def check_counts(self) -> "TypingStats":
        """Validate cross-field constraints between the character counts."""
        if self.characters_correct > self.characters_typed:
            raise ValueError("characters_correct cannot exceed characters_typed")
        if self.error_count != self.characters_typed - self.characters_correct:
            raise ValueError("error_count must equal characters_typed - characters_correct")
        return self


class WpmSample(BaseModel):
    """One point of the chronological speed history used for charting."""

    elapsed_seconds: float = Field(ge=0.0)
    words_per_minute: int = Field(gt=0)

    model_config = {
        "frozen": True,
    }


def count_correct(passage: str, typed: str) -> int:
    """Count index-aligned matches between typed input and the passage.

    There is no alignment recovery: one inserted or dropped character shifts
    every later position. Positions past the end of the passage never match.
    """
    return sum(1 for i, char in enumerate(typed) if i < len(passage) and passage[i] == char)


def words_per_minute(characters_typed: int, elapsed_seconds: float) -> int:
    """Return round((chars / 5) / minutes), or 0 when no time has elapsed."""
    if elapsed_seconds <= 0:
        return 0
    return round((characters_typed / CHARS_PER_WORD) / (elapsed_seconds / 60.0))


def accuracy_percent(characters_correct: int, characters_typed: int) -> int:
    """Return round(100 * correct / typed), or 100 when nothing was typed."""
    if characters_typed <= 0:
        return 100
    return round(100 * characters_correct / characters_typed)


def compute_stats(passage: str, typed: str, elapsed_seconds: float) -> TypingStats:
    """Compute a fresh :class:`TypingStats` for the typed input against the passage."""
    elapsed = max(0.0, elapsed_seconds)
    typed_count = len(typed)
    correct = count_correct(passage, typed)
    return TypingStats(
        words_per_minute=words_per_minute(typed_count, elapsed),
        accuracy=accuracy_percent(correct, typed_count),
        error_count=typed_count - correct,
        elapsed_seconds=elapsed,
        characters_typed=typed_count,
        characters_correct=correct,
    )
