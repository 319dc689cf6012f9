"""Typing session lifecycle: idle -> running -> complete.

A :class:`TypingSession` owns the current passage, the cumulative typed input,
the latest stats snapshot and the WPM history for one test. Every input update
is handled synchronously to completion; there is no background timer.

Passage fetches are tagged with a generation token so that a fetch resolving
after a reset can never overwrite the fresher session.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Tuple

from models.test_result import TestResult, TextLength
from models.typing_stats import TypingStats, WpmSample, compute_stats

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle states of a typing session."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"


class FeedbackTier(str, Enum):
    """Celebration level shown after a completed test."""

    INCREDIBLE = "incredible"
    EXCELLENT = "excellent"
    GOOD = "good"
    COMPLETED = "completed"


def feedback_tier(wpm: int) -> FeedbackTier:
    """Map a final WPM to its presentation tier (>=80, >=60, >=40, else plain)."""
    if wpm >= 80:
        return FeedbackTier.INCREDIBLE
    if wpm >= 60:
        return FeedbackTier.EXCELLENT
    if wpm >= 40:
        return FeedbackTier.GOOD
    return FeedbackTier.COMPLETED


@dataclass(frozen=True)
class CompletionEvent:
    """Notification emitted once when the typed input matches the passage."""

    result: TestResult
    tier: FeedbackTier

    @property
    def wpm(self) -> int:
        return self.result.wpm

    @property
    def accuracy(self) -> int:
        return self.result.accuracy


CompletionListener = Callable[[CompletionEvent], None]


class TypingSession:
    """State machine and metrics engine for one practice passage.

    Input longer than the passage is clamped to the passage length, so the
    completion check (exact string equality) is always reachable.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        """Create an idle session with no passage.

        Args:
            clock: Monotonic clock in seconds used for elapsed time.
            wall_clock: Clock used to timestamp finalized results.
        """
        self._clock = clock
        self._wall_clock = wall_clock
        self._listeners: List[CompletionListener] = []
        self._generation = 0
        self._loading = False
        self._passage: Optional[str] = None
        self._text_source = "quotes"
        self._text_length = TextLength.MEDIUM
        self._clear_progress()

    def _clear_progress(self) -> None:
        self._state = SessionState.IDLE
        self._typed = ""
        self._stats = TypingStats()
        self._wpm_history: List[WpmSample] = []
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._result: Optional[TestResult] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def passage(self) -> Optional[str]:
        return self._passage

    @property
    def typed(self) -> str:
        return self._typed

    @property
    def stats(self) -> TypingStats:
        """Latest stats snapshot (idle defaults before the first keystroke)."""
        return self._stats

    @property
    def wpm_history(self) -> Tuple[WpmSample, ...]:
        return tuple(self._wpm_history)

    @property
    def result(self) -> Optional[TestResult]:
        """Finalized result once the session is complete, else None."""
        return self._result

    @property
    def is_loading(self) -> bool:
        """True while a passage fetch is in flight; input is refused meanwhile."""
        return self._loading

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def text_source(self) -> str:
        return self._text_source

    @property
    def elapsed_seconds(self) -> float:
        """Seconds since the first keystroke, frozen once the session completes."""
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time is not None else self._clock()
        return max(0.0, end - self._start_time)

    def add_completion_listener(self, listener: CompletionListener) -> None:
        """Register a callback invoked exactly once per completed passage."""
        self._listeners.append(listener)

    def begin_passage_fetch(self) -> int:
        """Mark a passage fetch as in flight and return its generation token."""
        self._generation += 1
        self._loading = True
        return self._generation

    def load_passage(
        self,
        passage: str,
        token: int,
        *,
        text_source: Optional[str] = None,
        text_length: TextLength | str | None = None,
    ) -> bool:
        """Install a fetched passage if its token is still current.

        Returns:
            True when the passage was installed, False for a stale fetch or a
            token that already delivered its passage.

        Raises:
            ValueError: If the passage is empty.
        """
        if token != self._generation or not self._loading:
            logger.debug("Discarding stale passage for generation %s (current %s)", token, self._generation)
            return False
        if not passage:
            raise ValueError("Passage must not be empty")
        self._passage = passage
        if text_source:
            self._text_source = text_source
        if text_length:
            self._text_length = TextLength(text_length)
        self._loading = False
        return True

    def reset(self) -> int:
        """Return to idle from any state and start a new passage fetch.

        Discards the passage, typed input, stats, WPM history and any pending
        completion. Returns the token the next :meth:`load_passage` must carry.
        """
        self._clear_progress()
        self._passage = None
        return self.begin_passage_fetch()

    def update_input(self, value: str) -> TypingStats:
        """Apply the cumulative typed string and return the fresh stats.

        Input is ignored (previous stats returned) while a fetch is pending,
        before a passage exists, and after completion.
        """
        if self._loading or not self._passage or self._state is SessionState.COMPLETE:
            return self._stats

        value = value[: len(self._passage)]
        if self._state is SessionState.IDLE:
            if not value:
                return self._stats
            self._start_time = self._clock()
            self._state = SessionState.RUNNING
            logger.debug("Session started at %.3f", self._start_time)

        self._typed = value
        now = self._clock()
        self._stats = self._compute_stats(now)
        if self._stats.words_per_minute > 0:
            self._wpm_history.append(
                WpmSample(
                    elapsed_seconds=self._stats.elapsed_seconds,
                    words_per_minute=self._stats.words_per_minute,
                )
            )

        if self._typed == self._passage:
            self._complete(now)
        return self._stats

    def _compute_stats(self, now: float) -> TypingStats:
        # Without a start timestamp the previous snapshot stays in place.
        if self._start_time is None or self._passage is None:
            return self._stats
        return compute_stats(self._passage, self._typed, now - self._start_time)

    def _complete(self, now: float) -> None:
        self._end_time = now
        self._stats = self._compute_stats(now)
        self._state = SessionState.COMPLETE
        self._result = TestResult.from_stats(
            self._stats,
            text_source=self._text_source,
            text_length=self._text_length,
            timestamp=self._wall_clock(),
        )
        event = CompletionEvent(result=self._result, tier=feedback_tier(self._result.wpm))
        logger.info(
            "Test complete: %s WPM, %s%% accuracy (%s)",
            self._result.wpm,
            self._result.accuracy,
            event.tier.value,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Completion listener %r failed", listener)
