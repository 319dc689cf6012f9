from flask import Blueprint, jsonify, make_response, request
from pydantic import BaseModel, ValidationError

from api import get_backend_store
from services.backend_store import UserNotFound, UserValidationError

user_api = Blueprint("user_api", __name__)


class UserCreateModel(BaseModel):
    name: str
    email: str


@user_api.route("/api/users", methods=["POST"])
def api_create_user():
    try:
        data = request.get_json(silent=True)
        model = UserCreateModel(**data)
    except (TypeError, ValidationError) as e:
        return make_response(jsonify({"error": f"Name and email are required: {str(e)}"}), 400)
    try:
        user = get_backend_store().create_user(model.name, model.email)
    except UserValidationError as e:
        return make_response(jsonify({"error": e.message}), 400)
    return make_response(jsonify({"user": user.to_dict()}), 201)


@user_api.route("/api/users/<user_id>/stats", methods=["GET"])
def api_get_user_stats(user_id: str):
    try:
        stats = get_backend_store().user_stats(user_id)
    except UserNotFound:
        return make_response(jsonify({"error": "User not found"}), 404)
    return make_response(jsonify(stats), 200)


@user_api.route("/api/users/<user_id>/settings", methods=["GET"])
def api_get_user_settings(user_id: str):
    try:
        settings = get_backend_store().get_settings(user_id)
    except UserNotFound:
        return make_response(jsonify({"error": "User not found"}), 404)
    return make_response(jsonify({"settings": settings}), 200)


@user_api.route("/api/users/<user_id>/settings", methods=["PUT"])
def api_update_user_settings(user_id: str):
    """Shallow-merge the posted object into the user's settings."""
    data = request.get_json(silent=True)
    store = get_backend_store()
    try:
        if not isinstance(data, dict):
            store.get_user(user_id)
            return make_response(jsonify({"error": "Settings must be a JSON object"}), 400)
        settings = store.update_settings(user_id, data)
    except UserNotFound:
        return make_response(jsonify({"error": "User not found"}), 404)
    return make_response(jsonify({"settings": settings}), 200)
