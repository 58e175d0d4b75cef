# route_planner/app.py
"""Flask application factory.

Services and stores are built once here and handed to the blueprints, so
tests can swap in fakes for the completion client, the geocoder or the
stores without touching module globals.
"""

import logging
from datetime import datetime, timezone
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from route_planner.api.config import get_cors_origins, get_parser_markers, get_upload_dir
from route_planner.api.errors import (
    AuthenticationError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from route_planner.api.geocoding import CoordinateResolver, get_geocoder
from route_planner.api.llm import CompletionService
from route_planner.api.parser import ParserMarkers, ResponseParser
from route_planner.api.services.auth_service import AuthService
from route_planner.api.services.review_service import ReviewService
from route_planner.api.services.route_service import RouteService
from route_planner.api.storage import InMemoryStore
from route_planner.routes import (
    create_auth_blueprint,
    create_reviews_blueprint,
    create_routes_blueprint,
    create_uploads_blueprint,
)

logger = logging.getLogger(__name__)


def _error_response(message, status, details=None):
    body = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    return jsonify(body), status


def register_error_handlers(app):
    """Map service exceptions to JSON error responses."""

    @app.errorhandler(UpstreamError)
    def handle_upstream(e):
        logger.error(f"Upstream failure: {e}")
        return _error_response("Ошибка при генерации маршрута", e.status_code, str(e))

    @app.errorhandler(ValidationError)
    @app.errorhandler(AuthenticationError)
    @app.errorhandler(NotFoundError)
    def handle_client_error(e):
        return _error_response(str(e), e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http(e):
        return _error_response(e.name, e.code, e.description)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error:")
        return _error_response("Внутренняя ошибка сервера", 500, str(e))


def create_app(completion=None, geocoder=None, stores=None, upload_dir=None, jwt_secret=None):
    """Build the Flask app.

    Args:
        completion: CompletionService (or any object with ``generate``)
        geocoder: Object with ``lookup(place) -> (lat, lon) | None``
        stores: Optional dict with "users", "routes" and "reviews" stores
        upload_dir: Avatar directory; defaults to ``UPLOAD_DIR``
        jwt_secret: Token signing secret; defaults to ``JWT_SECRET``

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)

    CORS(
        app,
        origins=get_cors_origins(),
        methods=["GET", "POST", "DELETE", "PUT"],
        supports_credentials=True,
    )

    stores = dict(stores or {})
    for name in ("users", "routes", "reviews"):
        if stores.get(name) is None:
            stores[name] = InMemoryStore()
    users, routes, reviews = stores["users"], stores["routes"], stores["reviews"]

    parser = ResponseParser(ParserMarkers.from_overrides(get_parser_markers()))
    resolver = CoordinateResolver((geocoder or get_geocoder()).lookup)

    route_service = RouteService(
        routes, users, completion or CompletionService(), resolver, parser=parser
    )
    review_service = ReviewService(reviews, routes, users)
    auth_service = AuthService(users, secret=jwt_secret)

    app.extensions["route_planner"] = {
        "routes": route_service,
        "reviews": review_service,
        "auth": auth_service,
    }

    app.register_blueprint(create_routes_blueprint(route_service))
    app.register_blueprint(create_reviews_blueprint(review_service))
    app.register_blueprint(create_auth_blueprint(auth_service))
    app.register_blueprint(create_uploads_blueprint(upload_dir or get_upload_dir()))
    register_error_handlers(app)

    @app.before_request
    def log_request():
        logger.info(f"{datetime.now(timezone.utc).isoformat()} - {request.method} {request.path}")

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "route-planner"})

    logger.info("Route planner app initialised")
    return app


__all__ = ["create_app"]
