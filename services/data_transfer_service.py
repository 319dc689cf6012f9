"""
Data Transfer Service

Exports the local practice data (settings, results and aggregate stats) as one
JSON document and imports such documents back. An import is all or nothing:
every section present is validated before any of them is written, and the
writes share one transaction.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import ValidationError

from models.app_settings import SettingValidationError
from models.key_value_store import RESULTS_KEY, SETTINGS_KEY, STATS_KEY
from models.result_archive import AggregateStats, ResultArchive, compute_aggregate, parse_results
from models.settings_manager import SettingsManager, parse_settings

logger = logging.getLogger(__name__)


class ImportValidationError(Exception):
    """Raised when an import document is malformed; nothing has been written."""

    def __init__(self, message: str = "Import data is invalid") -> None:
        """Initialize the exception with a message."""
        self.message = message
        super().__init__(self.message)


class DataTransferService:
    """Export, import and wipe the locally stored practice data."""

    def __init__(self, *, settings_manager: SettingsManager, archive: ResultArchive) -> None:
        if settings_manager.store is not archive.store:
            raise ValueError("settings manager and result archive must share one store")
        self.settings_manager = settings_manager
        self.archive = archive
        self.store = archive.store

    def export_data(self) -> str:
        """Return settings, results, stats and the export time as a JSON string."""
        document = {
            SETTINGS_KEY: self.settings_manager.get_settings().to_dict(),
            RESULTS_KEY: [r.to_dict() for r in self.archive.results()],
            STATS_KEY: self.archive.stats().to_dict(),
            "exportDate": datetime.now(timezone.utc).isoformat(),
        }
        return json.dumps(document, indent=2)

    def import_data(self, json_text: str) -> None:
        """Replace the sections present in ``json_text``.

        Sections that are absent stay untouched. When results are imported
        without stats, the stats are recomputed from the imported results.

        Raises:
            ImportValidationError: If the text is not JSON, is not an object,
                or any present section fails validation.
        """
        try:
            document = json.loads(json_text)
        except (TypeError, json.JSONDecodeError) as e:
            raise ImportValidationError(f"Import data is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise ImportValidationError("Import data must be a JSON object")

        updates = self._validate(document)
        if not updates:
            logger.info("Import document contained no known sections; nothing changed")
            return
        self.store.set_many(updates)
        logger.info("Imported sections: %s", ", ".join(sorted(updates)))

    def _validate(self, document: Dict[str, Any]) -> Dict[str, Any]:
        updates: Dict[str, Any] = {}
        if SETTINGS_KEY in document:
            try:
                updates[SETTINGS_KEY] = parse_settings(document[SETTINGS_KEY]).to_dict()
            except SettingValidationError as e:
                raise ImportValidationError(e.message) from e

        if RESULTS_KEY in document:
            try:
                results = parse_results(document[RESULTS_KEY])[: self.archive.limit]
            except ValueError as e:
                raise ImportValidationError(str(e)) from e
            updates[RESULTS_KEY] = [r.to_dict() for r in results]
            if STATS_KEY not in document:
                updates[STATS_KEY] = compute_aggregate(results).to_dict()

        if STATS_KEY in document:
            try:
                updates[STATS_KEY] = AggregateStats.model_validate(document[STATS_KEY]).to_dict()
            except ValidationError as e:
                raise ImportValidationError(f"Invalid stats: {e}") from e
        return updates

    def clear_all_data(self) -> None:
        """Delete settings, results and stats in one transaction."""
        with self.store.db_manager.transaction():
            for key in (SETTINGS_KEY, RESULTS_KEY, STATS_KEY):
                self.store.delete(key)
        logger.info("Cleared all local practice data")
