"""Service initialization module.

Factory helpers to create and wire the practice client services with their dependencies.
"""

from __future__ import annotations

from typing import Optional, Tuple

from db.database_manager import DatabaseManager
from models.key_value_store import KeyValueStore
from models.result_archive import ResultArchive
from models.settings_manager import SettingsManager
from models.word_progress_manager import WordProgressManager
from services.adaptive_word_scheduler import AdaptiveWordScheduler
from services.data_transfer_service import DataTransferService
from services.practice_session_service import PracticeSessionService
from services.remote_api_client import RemoteApiClient
from services.text_provider import TextProvider


def init_services(
    db_path: str,
    *,
    user_id: Optional[str] = None,
    remote_base_url: Optional[str] = None,
) -> Tuple[DatabaseManager, PracticeSessionService, DataTransferService]:
    """Initialize and return the practice client services.

    The adaptive scheduler and the remote client are only wired in when a user
    id (and, for the remote client, a backend URL) is given.

    Example:
        db, practice, transfer = init_services("path/to/practice.sqlite").
    """
    db_manager = DatabaseManager(db_path)
    try:
        store = KeyValueStore(db_manager=db_manager)
        settings_manager = SettingsManager(store=store)
        archive = ResultArchive(store=store)
        text_provider = TextProvider()
        scheduler = None
        remote_client = None
        if user_id:
            scheduler = AdaptiveWordScheduler(
                WordProgressManager(db_manager=db_manager), text_provider.catalog
            )
            if remote_base_url:
                remote_client = RemoteApiClient(remote_base_url)
        practice = PracticeSessionService(
            text_provider=text_provider,
            archive=archive,
            settings_manager=settings_manager,
            scheduler=scheduler,
            remote_client=remote_client,
            user_id=user_id,
        )
        transfer = DataTransferService(settings_manager=settings_manager, archive=archive)
    except Exception:
        # Close the database connection if initialization fails
        db_manager.close()
        raise
    return db_manager, practice, transfer
