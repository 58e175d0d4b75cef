# route_planner/routes/__init__.py
"""HTTP blueprints for the route planner."""

from .auth import create_auth_blueprint
from .reviews import create_reviews_blueprint
from .routes import create_routes_blueprint
from .uploads import create_uploads_blueprint

__all__ = [
    "create_auth_blueprint",
    "create_reviews_blueprint",
    "create_routes_blueprint",
    "create_uploads_blueprint",
]
