# route_planner/routes/auth.py
"""Registration, login and profile endpoints."""

import logging
from functools import wraps
from flask import Blueprint, g, jsonify, request

logger = logging.getLogger(__name__)


def token_required(auth_service):
    """Decorator factory: require a valid ``Authorization: Bearer`` token.

    The authenticated user id is stored on ``flask.g.user_id``.
    """
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            auth_header = request.headers.get("Authorization", "")
            parts = auth_header.split(" ")
            token = parts[1] if len(parts) > 1 else None
            if not token:
                return jsonify({"message": "Требуется авторизация"}), 401
            try:
                g.user_id = auth_service.verify_token(token)
            except PermissionError as e:
                return jsonify({"message": str(e)}), 403
            return view(*args, **kwargs)
        return wrapped
    return decorator


def create_auth_blueprint(auth_service):
    """Create the blueprint serving ``/api/auth`` endpoints.

    Args:
        auth_service: AuthService instance

    Returns:
        Configured Flask Blueprint
    """
    auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")
    login_required = token_required(auth_service)

    @auth_bp.route("/register", methods=["POST"])
    def register():
        data = request.get_json(silent=True) or {}
        token, user = auth_service.register(
            data.get("username"), data.get("email"), data.get("password")
        )
        return jsonify({"token": token, "user": user})

    @auth_bp.route("/login", methods=["POST"])
    def login():
        data = request.get_json(silent=True) or {}
        token, user = auth_service.login(data.get("email"), data.get("password"))
        return jsonify({"token": token, "user": user})

    @auth_bp.route("/me")
    @login_required
    def me():
        return jsonify(auth_service.get_me(g.user_id))

    @auth_bp.route("/update-profile", methods=["PUT"])
    @login_required
    def update_profile():
        updates = request.get_json(silent=True) or {}
        return jsonify(auth_service.update_profile(g.user_id, updates))

    return auth_bp


__all__ = ["create_auth_blueprint", "token_required"]
