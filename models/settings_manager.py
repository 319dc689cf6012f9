"""Settings Manager for the practice client.

Loads settings merged over defaults and persists them in the local key-value store.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from models.app_settings import AppSettings, SettingValidationError
from models.key_value_store import SETTINGS_KEY, KeyValueStore

logger = logging.getLogger(__name__)


def parse_settings(raw: Any) -> AppSettings:
    """Validate a stored or imported settings object merged over the defaults.

    Raises:
        SettingValidationError: If ``raw`` is not an object or a value is invalid.
    """
    if not isinstance(raw, dict):
        raise SettingValidationError("settings must be a JSON object")
    merged: Dict[str, Any] = {**AppSettings().to_dict(), **raw}
    try:
        return AppSettings.model_validate(merged)
    except ValidationError as e:
        raise SettingValidationError(f"Invalid settings: {e}") from e


class SettingsManager:
    """Read and write :class:`AppSettings` through a :class:`KeyValueStore`."""

    def __init__(self, *, store: KeyValueStore) -> None:
        """Create a manager bound to the given store."""
        self.store = store

    def get_settings(self) -> AppSettings:
        """Return stored settings merged over defaults.

        Missing or unreadable settings fall back to the defaults.
        """
        raw = self.store.get(SETTINGS_KEY)
        if raw is None:
            return AppSettings()
        try:
            return parse_settings(raw)
        except SettingValidationError as e:
            logger.warning("Failed to load settings, using defaults: %s", e)
            return AppSettings()

    def save_settings(self, settings: AppSettings) -> None:
        """Persist the full settings object."""
        self.store.set(SETTINGS_KEY, settings.to_dict())

    def update_settings(self, **changes: Any) -> AppSettings:
        """Apply field changes (snake_case or camelCase names) and persist the result.

        Raises:
            SettingValidationError: If a change is invalid; nothing is persisted then.
        """
        current = self.get_settings().to_dict()
        updated = parse_settings({**current, **self._to_aliases(changes)})
        self.save_settings(updated)
        return updated

    @staticmethod
    def _to_aliases(changes: Dict[str, Any]) -> Dict[str, Any]:
        aliases: Dict[str, Any] = {}
        for name, value in changes.items():
            aliases[to_camel(name) if name in AppSettings.model_fields else name] = value
        return aliases
