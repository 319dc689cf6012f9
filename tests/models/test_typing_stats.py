"""Tests for typing statistics computation."""

import pytest
from pydantic import ValidationError

from models.typing_stats import (
    TypingStats,
    WpmSample,
    accuracy_percent,
    compute_stats,
    count_correct,
    words_per_minute,
)


def test_idle_snapshot_defaults() -> None:
    stats = TypingStats()
    assert stats.words_per_minute == 0
    assert stats.accuracy == 100
    assert stats.error_count == 0
    assert stats.elapsed_seconds == 0.0
    assert stats.characters_typed == 0
    assert stats.characters_correct == 0


def test_wpm_uses_five_characters_per_word() -> None:
    # 250 chars in 60 s -> 50 words in 1 minute
    assert words_per_minute(250, 60.0) == 50


@pytest.mark.parametrize("elapsed", [0.0, -1.0])
def test_wpm_is_zero_without_elapsed_time(elapsed: float) -> None:
    assert words_per_minute(10, elapsed) == 0


def test_accuracy_is_100_when_nothing_typed() -> None:
    assert accuracy_percent(0, 0) == 100


def test_accuracy_rounds_to_integer() -> None:
    # 2 of 3 -> 66.67 -> 67
    assert accuracy_percent(2, 3) == 67


def test_compute_stats_perfect_input() -> None:
    passage = "a" * 250
    stats = compute_stats(passage, passage, 60.0)
    assert stats.words_per_minute == 50
    assert stats.accuracy == 100
    assert stats.error_count == 0
    assert stats.characters_typed == 250
    assert stats.characters_correct == 250


def test_compute_stats_counts_one_error() -> None:
    stats = compute_stats("hello", "hellx", 12.0)
    assert stats.characters_correct == 4
    assert stats.error_count == 1
    assert stats.accuracy == 80


def test_comparison_is_index_aligned_without_recovery() -> None:
    """Dropping the first character shifts every later position into an error."""
    passage = "abcdef"
    typed = "bcdef"
    assert count_correct(passage, typed) == 0
    stats = compute_stats(passage, typed, 5.0)
    assert stats.accuracy == 0
    assert stats.error_count == 5


def test_characters_past_passage_count_as_errors() -> None:
    stats = compute_stats("ab", "abcd", 1.0)
    assert stats.characters_correct == 2
    assert stats.error_count == 2
    assert stats.accuracy == 50


def test_later_correct_characters_raise_accuracy_again() -> None:
    passage = "abcd"
    first = compute_stats(passage, "x", 1.0)
    later = compute_stats(passage, "xbcd", 2.0)
    assert first.accuracy == 0
    assert later.accuracy == 75


def test_negative_elapsed_is_clamped_to_zero() -> None:
    stats = compute_stats("abc", "abc", -3.0)
    assert stats.elapsed_seconds == 0.0
    assert stats.words_per_minute == 0


def test_stats_reject_inconsistent_counts() -> None:
    with pytest.raises(ValidationError):
        TypingStats(characters_typed=2, characters_correct=3, error_count=0)
    with pytest.raises(ValidationError):
        TypingStats(characters_typed=3, characters_correct=1, error_count=1)


def test_wpm_sample_requires_positive_speed() -> None:
    assert WpmSample(elapsed_seconds=1.5, words_per_minute=40).words_per_minute == 40
    with pytest.raises(ValidationError):
        WpmSample(elapsed_seconds=1.0, words_per_minute=0)
