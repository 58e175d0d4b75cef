# route_planner/routes/routes.py
"""Route generation and route management endpoints."""

import logging
from flask import Blueprint, jsonify, request

from route_planner.api.errors import ValidationError

logger = logging.getLogger(__name__)


def create_routes_blueprint(route_service):
    """Create the blueprint serving ``/api`` route endpoints.

    Args:
        route_service: RouteService instance shared by all requests

    Returns:
        Configured Flask Blueprint
    """
    routes_bp = Blueprint("routes", __name__, url_prefix="/api")

    @routes_bp.route("/generate-route", methods=["POST"])
    def generate_route():
        """Generate a new route from trip parameters."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("JSON body required")
        logger.info(f"Route generation requested: {data}")
        return jsonify(route_service.generate_route(data))

    @routes_bp.route("/route/<route_id>")
    def get_route(route_id):
        route = route_service.get_route(route_id)
        if not route:
            return jsonify({"success": False, "error": "Маршрут не найден"}), 404
        return jsonify(route)

    @routes_bp.route("/save-route", methods=["POST"])
    def save_route():
        """Attach an existing route to a user's profile."""
        data = request.get_json(silent=True) or {}
        user_id = data.get("userId")
        route_id = data.get("routeId")
        if not user_id or not route_id:
            raise ValidationError("userId and routeId are required")
        route_service.save_route_for_user(str(user_id), str(route_id))
        return jsonify({"success": True})

    @routes_bp.route("/user-routes/<user_id>")
    def user_routes(user_id):
        return jsonify({"routes": route_service.get_user_routes(user_id)})

    @routes_bp.route("/routes/<route_id>", methods=["DELETE"])
    def delete_route(route_id):
        route_service.delete_route(route_id)
        return jsonify({"success": True})

    return routes_bp


__all__ = ["create_routes_blueprint"]
