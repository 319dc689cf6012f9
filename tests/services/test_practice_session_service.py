"""Tests for PracticeSessionService wiring."""

import random
import threading
import time
from unittest.mock import MagicMock

import pytest
import requests

from db.database_manager import DatabaseManager
from db.exceptions import DatabaseError
from models.result_archive import ResultArchive
from models.settings_manager import SettingsManager
from models.text_corpus import LOCAL_CORPUS
from models.typing_session import SessionState, TypingSession
from models.vocabulary import VocabularyCatalog
from models.word_progress import WordStatus
from models.word_progress_manager import WordProgressManager
from services.adaptive_word_scheduler import AdaptiveWordScheduler
from services.practice_session_service import PracticeSessionService
from services.remote_api_client import RemoteApiClient
from services.text_provider import TextProvider


@pytest.fixture
def text_provider() -> TextProvider:
    http = MagicMock(spec=requests.Session)
    http.get.side_effect = requests.ConnectionError("offline")
    return TextProvider(session=http, rng=random.Random(5))


@pytest.fixture
def scheduler(db_manager: DatabaseManager, text_provider: TextProvider) -> AdaptiveWordScheduler:
    return AdaptiveWordScheduler(
        WordProgressManager(db_manager=db_manager), text_provider.catalog, rng=random.Random(2)
    )


@pytest.fixture
def remote() -> MagicMock:
    return MagicMock(spec=RemoteApiClient)


@pytest.fixture
def typing_session(clock, wall_clock) -> TypingSession:
    return TypingSession(clock=clock, wall_clock=wall_clock)


@pytest.fixture
def service(text_provider, archive, settings_manager, scheduler, remote, typing_session):
    service = PracticeSessionService(
        text_provider=text_provider,
        archive=archive,
        settings_manager=settings_manager,
        scheduler=scheduler,
        remote_client=remote,
        user_id="user_1",
        session=typing_session,
    )
    yield service
    service.close()


def type_passage(service, clock, passage: str) -> None:
    service.type_input(passage[0])
    clock.advance(10.0)
    service.type_input(passage)


def test_reset_loads_passage_for_configured_source(service, settings_manager: SettingsManager) -> None:
    settings_manager.update_settings(text_source="lorem", text_length="long")
    passage = service.reset()
    assert passage in LOCAL_CORPUS["lorem"]
    assert service.session.passage == passage
    assert service.session.text_source == "lorem"
    assert service.scheduled_word is None


def test_completion_archives_and_forwards(service, settings_manager, archive: ResultArchive, remote, clock) -> None:
    settings_manager.update_settings(text_source="sentences")
    passage = service.reset()
    type_passage(service, clock, passage)
    service.close()

    assert service.session.state is SessionState.COMPLETE
    event = service.last_completion
    assert event is not None
    assert archive.results() == [event.result]
    assert archive.stats().total_tests == 1
    remote.submit_test_result.assert_called_once_with("user_1", event.result)


def test_reset_clears_last_completion(service, settings_manager, clock) -> None:
    settings_manager.update_settings(text_source="sentences")
    type_passage(service, clock, service.reset())
    assert service.last_completion is not None
    service.reset()
    assert service.last_completion is None
    assert service.session.state is SessionState.IDLE


def test_vocabulary_passage_uses_scheduled_word(service, settings_manager, scheduler, clock) -> None:
    settings_manager.update_settings(text_source="vocabulary", text_length="short")
    passage = service.reset()
    word = service.scheduled_word
    assert word is not None
    entry = service.text_provider.catalog.find(word)
    assert passage == entry.example

    type_passage(service, clock, passage)
    progress = scheduler.progress_manager.get("user_1", word)
    assert progress is not None
    assert progress.status is WordStatus.LEARNING
    assert progress.correct_count == 1


def test_without_user_no_progress_or_forwarding(
    text_provider, archive, settings_manager, scheduler, remote, typing_session, clock
) -> None:
    anonymous = PracticeSessionService(
        text_provider=text_provider,
        archive=archive,
        settings_manager=settings_manager,
        scheduler=scheduler,
        remote_client=remote,
        session=typing_session,
    )
    settings_manager.update_settings(text_source="vocabulary")
    type_passage(anonymous, clock, anonymous.reset())

    assert anonymous.scheduled_word is None
    assert len(archive.results()) == 1
    remote.submit_test_result.assert_not_called()
    assert scheduler.vocabulary_stats("user_1")["total"] == 0


def test_scheduler_failure_falls_back_to_random_word(service, settings_manager, scheduler) -> None:
    scheduler.next_word = MagicMock(return_value=None)
    settings_manager.update_settings(text_source="vocabulary", text_length="short")
    passage = service.reset()
    assert service.scheduled_word is None
    assert any(passage == w.example for w in VocabularyCatalog().words)


def test_archive_failure_is_logged(service, settings_manager, remote, clock, caplog) -> None:
    service.archive = MagicMock(spec=ResultArchive)
    service.archive.append.side_effect = DatabaseError("disk full")
    settings_manager.update_settings(text_source="sentences")
    type_passage(service, clock, service.reset())
    service.close()
    assert "Failed to archive test result" in caplog.text
    remote.submit_test_result.assert_called_once()


def test_slow_backend_does_not_delay_input(
    text_provider, archive, settings_manager, typing_session, clock, caplog
) -> None:
    release = threading.Event()

    def slow_post(*_args, **_kwargs):
        release.wait(timeout=5)
        raise requests.Timeout("backend too slow")

    http = MagicMock(spec=requests.Session)
    http.post.side_effect = slow_post
    service = PracticeSessionService(
        text_provider=text_provider,
        archive=archive,
        settings_manager=settings_manager,
        remote_client=RemoteApiClient("http://backend:3001", session=http),
        user_id="user_1",
        session=typing_session,
    )
    settings_manager.update_settings(text_source="sentences")
    passage = service.reset()
    service.type_input(passage[0])
    clock.advance(10.0)

    started = time.monotonic()
    stats = service.type_input(passage)
    blocked = time.monotonic() - started

    assert blocked < 1.0
    assert stats.accuracy == 100
    assert service.session.state is SessionState.COMPLETE
    assert len(archive.results()) == 1

    release.set()
    service.close()
    http.post.assert_called_once()
    assert "Could not forward test result" in caplog.text


def test_unexpected_submit_error_is_logged(service, settings_manager, remote, clock, caplog) -> None:
    remote.submit_test_result.side_effect = RuntimeError("boom")
    settings_manager.update_settings(text_source="sentences")
    type_passage(service, clock, service.reset())
    service.close()
    assert "Result submission failed" in caplog.text


def test_close_is_idempotent(service) -> None:
    service.close()
    service.close()
