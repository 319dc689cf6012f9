"""Backend user data model."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import uuid4

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator

DEFAULT_USER_SETTINGS: Dict[str, Any] = {
    "theme": "light",
    "soundEnabled": True,
    "showCursor": True,
    "fontSize": "medium",
    "autoStart": False,
}


def new_record_id(prefix: str) -> str:
    """Return an id such as ``user_1700000000000_k3j9x0q2a``."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


class User(BaseModel):
    """User account held by the backend.

    Attributes:
        id: Generated identifier (``user_<millis>_<random>``).
        name: Display name (1-64 chars).
        email: Email address, normalized by email-validator.
        settings: Free-form settings object, shallow-merged on update.
        created_at: Creation time (UTC).
    """

    id: str = Field(default_factory=lambda: new_record_id("user"))
    name: str = Field(...)
    email: str = Field(...)
    settings: Dict[str, Any] = Field(default_factory=lambda: dict(DEFAULT_USER_SETTINGS))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {
        "frozen": True,  # Updates go through model_copy
    }

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names must not be blank and must be at most 64 characters once stripped."""
        if not v or not v.strip():
            raise ValueError("Name cannot be blank.")
        stripped_v = v.strip()
        if len(stripped_v) > 64:
            raise ValueError("Name must be at most 64 characters.")
        if any(ord(c) < 32 for c in stripped_v):
            raise ValueError("Name contains invalid control characters.")
        return stripped_v

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: str) -> str:
        """Validate and normalize the email address using email-validator."""
        if not v or not v.strip():
            raise ValueError("Email address cannot be blank.")
        try:
            email_info = validate_email(
                v.strip(),
                check_deliverability=False,  # Don't check if domain actually exists
            )
        except EmailNotValidError as e:
            raise ValueError(str(e)) from e
        return email_info.normalized

    def with_settings(self, changes: Dict[str, Any]) -> "User":
        """Return a copy with ``changes`` shallow-merged into the settings."""
        return self.model_copy(update={"settings": {**self.settings, **changes}})

    def to_dict(self) -> Dict[str, Any]:
        """Public representation returned by the API."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "settings": dict(self.settings),
        }
