"""Test result as submitted to and held by the backend."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.user import new_record_id


class SubmittedResult(BaseModel):
    """One result on the backend; serialized with camelCase keys.

    Attributes:
        id: Generated identifier (``test_<millis>_<random>``).
        user_id: Owner of the result.
        wpm: Words per minute.
        accuracy: Accuracy percentage.
        errors: Number of wrong characters.
        time_elapsed: Duration of the test in seconds.
        text_source: Source id of the practiced text.
        text_length: Length tier, when the client sent one.
        timestamp: Time the backend accepted the result (UTC).
    """

    id: str = Field(default_factory=lambda: new_record_id("test"))
    user_id: str = Field(min_length=1)
    wpm: int = Field(ge=0)
    accuracy: int = Field(ge=0, le=100)
    errors: int = Field(ge=0)
    time_elapsed: float = Field(ge=0.0)
    text_source: str = Field(min_length=1)
    text_length: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    @field_validator("timestamp")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
