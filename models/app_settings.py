"""Practice client settings data model."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.test_result import TextLength


class SettingValidationError(Exception):
    """Raised when a settings payload fails validation."""

    def __init__(self, message: str = "Setting validation failed") -> None:
        """Initialize the exception with a message."""
        self.message = message
        super().__init__(self.message)


class AppSettings(BaseModel):
    """User-facing settings of the practice client.

    Stored and exported with camelCase keys. Unknown keys are ignored so that
    files written by newer versions still load.
    """

    theme: Literal["light", "dark"] = "light"
    sound_enabled: bool = True
    show_cursor: bool = True
    font_size: Literal["small", "medium", "large"] = "medium"
    auto_start: bool = False
    show_timer: bool = True
    show_wpm: bool = True
    show_accuracy: bool = True
    show_errors: bool = True
    text_source: str = Field(default="quotes", min_length=1)
    text_length: TextLength = TextLength.MEDIUM
    sound_volume: float = Field(default=0.3, ge=0.0, le=1.0)
    vocabulary_difficulty: Optional[Literal["easy", "medium", "hard", "mixed"]] = None
    vocabulary_category: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
        validate_assignment=True,
    )

    @field_validator("vocabulary_category")
    @classmethod
    def blank_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty category as "no category filter"."""
        if v is not None and not v.strip():
            return None
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
