"""REST blueprints and the real-time relay of the practice backend."""

from typing import cast

from flask import current_app

from api.realtime import RealtimeHub
from services.backend_store import BackendStore


def get_backend_store() -> BackendStore:
    """Return the store registered on the current app.

    Raises:
        RuntimeError: If the app was not created by ``create_app``.
    """
    if "BACKEND_STORE" in current_app.config:
        return cast(BackendStore, current_app.config["BACKEND_STORE"])
    raise RuntimeError("No BACKEND_STORE found in app.config")


def get_realtime_hub() -> RealtimeHub:
    if "REALTIME_HUB" in current_app.config:
        return cast(RealtimeHub, current_app.config["REALTIME_HUB"])
    raise RuntimeError("No REALTIME_HUB found in app.config")
