from flask import Blueprint, jsonify, make_response, request

from api import get_backend_store

leaderboard_api = Blueprint("leaderboard_api", __name__)

DEFAULT_LIMIT = 10


@leaderboard_api.route("/api/leaderboard", methods=["GET"])
def api_get_leaderboard():
    raw_limit = request.args.get("limit")
    if raw_limit is None:
        limit = DEFAULT_LIMIT
    else:
        try:
            limit = int(raw_limit)
        except ValueError:
            return make_response(jsonify({"error": "limit must be an integer"}), 400)
        if limit < 0:
            return make_response(jsonify({"error": "limit must not be negative"}), 400)
    results, total = get_backend_store().leaderboard(limit)
    return make_response(
        jsonify({"leaderboard": [r.to_dict() for r in results], "totalResults": total}), 200
    )


@leaderboard_api.route("/api/analytics/global", methods=["GET"])
def api_get_global_analytics():
    return make_response(jsonify(get_backend_store().global_analytics()), 200)
