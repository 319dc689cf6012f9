"""Flask application factory for the practice backend."""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, jsonify, make_response
from werkzeug.exceptions import HTTPException, NotFound

from api.leaderboard_api import leaderboard_api
from api.realtime import RealtimeHub
from api.test_result_api import test_result_api
from api.user_api import user_api
from services.backend_store import DEFAULT_LEADERBOARD_SIZE, BackendStore

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def _default_config() -> Dict[str, Any]:
    return {
        "LEADERBOARD_SIZE": int(
            os.environ.get("TYPING_PRACTICE_LEADERBOARD_SIZE", DEFAULT_LEADERBOARD_SIZE)
        ),
        "BROADCAST_TOP": int(os.environ.get("TYPING_PRACTICE_BROADCAST_TOP", 10)),
    }


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    """Create the backend app.

    Args:
        config: Values overriding the defaults in ``app.config``. A prebuilt
            ``BACKEND_STORE`` or ``REALTIME_HUB`` may be passed in as well.
    """
    app = Flask(__name__)
    app.config.update(_default_config())
    if config:
        app.config.update(config)
    app.config.setdefault("BACKEND_STORE", BackendStore(app.config["LEADERBOARD_SIZE"]))
    app.config.setdefault("REALTIME_HUB", RealtimeHub())
    app.json.sort_keys = False  # type: ignore[attr-defined]

    app.register_blueprint(user_api)
    app.register_blueprint(test_result_api)
    app.register_blueprint(leaderboard_api)

    @app.route("/api/health", methods=["GET"])
    def api_health():
        return make_response(
            jsonify(
                {
                    "status": "OK",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "version": API_VERSION,
                }
            ),
            200,
        )

    @app.errorhandler(NotFound)
    def handle_not_found(_e: NotFound):
        return make_response(jsonify({"error": "Route not found"}), 404)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return make_response(jsonify({"error": e.description}), e.code or 500)
        logger.exception("Unhandled error: %s", e)
        return make_response(jsonify({"error": "Something went wrong!"}), 500)

    return app
