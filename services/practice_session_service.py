"""
Practice Session Service

Wires one typing session to its collaborators: fetches passages according to
the user's settings, feeds typed input to the engine and, when a passage is
completed, archives the result, records vocabulary progress and forwards the
result to the backend. Backend forwarding runs on a single worker thread so
that a slow or unreachable backend never delays the input path.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from db.exceptions import DatabaseError
from models.app_settings import AppSettings
from models.result_archive import ResultArchive
from models.settings_manager import SettingsManager
from models.typing_session import CompletionEvent, TypingSession
from models.typing_stats import TypingStats
from models.vocabulary import VocabularyOptions, VocabularyWord, compose_passage
from services.adaptive_word_scheduler import AdaptiveWordScheduler
from services.remote_api_client import RemoteApiClient
from services.text_provider import VOCABULARY_SOURCE, TextProvider

logger = logging.getLogger(__name__)


class PracticeSessionService:
    """Runs practice passages end to end for one (optionally signed-in) user."""

    def __init__(
        self,
        *,
        text_provider: TextProvider,
        archive: ResultArchive,
        settings_manager: SettingsManager,
        scheduler: Optional[AdaptiveWordScheduler] = None,
        remote_client: Optional[RemoteApiClient] = None,
        user_id: Optional[str] = None,
        session: Optional[TypingSession] = None,
    ) -> None:
        self.text_provider = text_provider
        self.archive = archive
        self.settings_manager = settings_manager
        self.scheduler = scheduler
        self.remote_client = remote_client
        self.user_id = user_id
        self.session = session or TypingSession()
        self.session.add_completion_listener(self._on_complete)
        self._scheduled_word: Optional[str] = None
        self._last_completion: Optional[CompletionEvent] = None
        self._submitter: Optional[ThreadPoolExecutor] = None
        if remote_client is not None:
            self._submitter = ThreadPoolExecutor(max_workers=1, thread_name_prefix="result-submit")

    @property
    def last_completion(self) -> Optional[CompletionEvent]:
        """The most recent completion, cleared on reset."""
        return self._last_completion

    @property
    def scheduled_word(self) -> Optional[str]:
        """Word picked by the scheduler for the current passage, if any."""
        return self._scheduled_word

    def reset(self) -> str:
        """Start a new passage using the current settings and return it."""
        token = self.session.reset()
        self._scheduled_word = None
        self._last_completion = None
        settings = self.settings_manager.get_settings()

        if settings.text_source == VOCABULARY_SOURCE and self.user_id and self.scheduler:
            passage = self._scheduled_vocabulary_passage(settings, self.scheduler, self.user_id)
        else:
            passage = self.text_provider.generate_text(
                settings.text_source,
                settings.text_length,
                self._vocabulary_options(settings),
            )

        self.session.load_passage(
            passage,
            token,
            text_source=settings.text_source,
            text_length=settings.text_length,
        )
        return passage

    def type_input(self, value: str) -> TypingStats:
        """Apply the cumulative typed string to the running session."""
        return self.session.update_input(value)

    @staticmethod
    def _vocabulary_options(settings: AppSettings) -> Optional[VocabularyOptions]:
        if settings.text_source != VOCABULARY_SOURCE:
            return None
        return VocabularyOptions(
            difficulty=settings.vocabulary_difficulty or "mixed",
            category=settings.vocabulary_category,
            length=settings.text_length,
        )

    def _scheduled_vocabulary_passage(
        self, settings: AppSettings, scheduler: AdaptiveWordScheduler, user_id: str
    ) -> str:
        catalog = self.text_provider.catalog
        word = scheduler.next_word(user_id)
        entry: Optional[VocabularyWord] = catalog.find(word) if word else None
        if entry is None:
            logger.info("No scheduled word available; using a random catalog word")
            entry = catalog.random_word()
        else:
            self._scheduled_word = entry.word
        return compose_passage(entry, settings.text_length)

    def _on_complete(self, event: CompletionEvent) -> None:
        self._last_completion = event
        try:
            self.archive.append(event.result)
        except DatabaseError as e:
            logger.error("Failed to archive test result: %s", e)

        if self.scheduler and self.user_id and self._scheduled_word:
            self.scheduler.record_attempt(self.user_id, self._scheduled_word, event.accuracy == 100)

        if self.remote_client and self.user_id and self._submitter:
            future = self._submitter.submit(self.remote_client.submit_test_result, self.user_id, event.result)
            future.add_done_callback(_log_submit_failure)

    def close(self) -> None:
        """Wait for pending result submissions and stop the submit worker."""
        if self._submitter is not None:
            self._submitter.shutdown(wait=True)
            self._submitter = None


def _log_submit_failure(future: "Future[bool]") -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Result submission failed: %s", exc)
