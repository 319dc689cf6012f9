"""Bounded local archive of completed test results and their aggregate stats."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from models.key_value_store import RESULTS_KEY, STATS_KEY, KeyValueStore
from models.test_result import TestResult

logger = logging.getLogger(__name__)

MAX_RESULTS = 100


class AggregateStats(BaseModel):
    """Running totals over the retained results, recomputed on every append."""

    total_tests: int = Field(default=0, ge=0)
    total_time: float = Field(default=0.0, ge=0.0)
    average_wpm: int = Field(default=0, ge=0)
    best_wpm: int = Field(default=0, ge=0)
    average_accuracy: int = Field(default=0, ge=0, le=100)
    total_characters: int = Field(default=0, ge=0)
    total_errors: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def compute_aggregate(results: Sequence[TestResult]) -> AggregateStats:
    """Compute aggregate stats from scratch over ``results``."""
    if not results:
        return AggregateStats()
    count = len(results)
    return AggregateStats(
        total_tests=count,
        total_time=sum(r.time_elapsed for r in results),
        average_wpm=round(sum(r.wpm for r in results) / count),
        best_wpm=max(r.wpm for r in results),
        average_accuracy=round(sum(r.accuracy for r in results) / count),
        total_characters=sum(r.characters_typed for r in results),
        total_errors=sum(r.errors for r in results),
    )


def parse_results(raw: Any) -> List[TestResult]:
    """Validate a list of result dicts.

    Raises:
        ValueError: If ``raw`` is not a list or an entry fails validation.
    """
    if not isinstance(raw, list):
        raise ValueError("results must be a list")
    try:
        return [TestResult.from_dict(item) for item in raw]
    except (TypeError, ValidationError) as e:
        raise ValueError(f"Invalid test result: {e}") from e


class ResultArchive:
    """Newest-first log of test results capped at ``limit`` entries.

    The aggregate stats entry is rewritten together with the result list, so the
    two stored values never disagree.
    """

    def __init__(self, *, store: KeyValueStore, limit: int = MAX_RESULTS) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.store = store
        self.limit = limit

    def results(self) -> List[TestResult]:
        """Return retained results, newest first. Unreadable data yields an empty list."""
        raw = self.store.get(RESULTS_KEY)
        if raw is None:
            return []
        try:
            return parse_results(raw)
        except ValueError as e:
            logger.warning("Failed to load test results: %s", e)
            return []

    def stats(self) -> AggregateStats:
        """Return the stored aggregate, or zeroed stats when none is stored."""
        raw = self.store.get(STATS_KEY)
        if raw is None:
            return AggregateStats()
        try:
            return AggregateStats.model_validate(raw)
        except ValidationError as e:
            logger.warning("Failed to load stats: %s", e)
            return AggregateStats()

    def append(self, result: TestResult) -> AggregateStats:
        """Prepend ``result``, evict the oldest beyond the limit and recompute stats."""
        retained = [result, *self.results()][: self.limit]
        stats = compute_aggregate(retained)
        self.store.set_many(
            {
                RESULTS_KEY: [r.to_dict() for r in retained],
                STATS_KEY: stats.to_dict(),
            }
        )
        logger.debug("Archived result (%s retained)", len(retained))
        return stats

    def clear(self) -> None:
        """Remove all results and the aggregate."""
        with self.store.db_manager.transaction():
            self.store.delete(RESULTS_KEY)
            self.store.delete(STATS_KEY)
