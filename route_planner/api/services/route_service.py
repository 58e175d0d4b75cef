# route_planner/api/services/route_service.py
"""Service layer for route generation and management."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from route_planner.api.errors import ValidationError
from route_planner.api.geocoding import CoordinateResolver
from route_planner.api.llm import CompletionService, build_system_prompt, build_user_prompt
from route_planner.api.maps import build_map_link
from route_planner.api.models import ParsedItinerary
from route_planner.api.parser import ResponseParser
from route_planner.api.storage import KeyValueStore

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T10:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_user_profile(user_id: str) -> Dict[str, Any]:
    """Profile for a user id seen only through saved routes."""
    return {"id": user_id, "routes": []}


def _add_route_id(route_id: str):
    def apply(profile):
        routes = profile.setdefault("routes", [])
        if route_id not in routes:
            routes.append(route_id)
        return profile
    return apply


def _remove_route_id(route_id: str):
    def apply(profile):
        profile["routes"] = [r for r in profile.get("routes", []) if r != route_id]
        return profile
    return apply


class RouteService:
    """Generates routes and manages them in the route and user stores."""

    def __init__(self,
                 routes: KeyValueStore,
                 users: KeyValueStore,
                 completion: CompletionService,
                 resolver: CoordinateResolver,
                 parser: Optional[ResponseParser] = None):
        self.routes = routes
        self.users = users
        self.completion = completion
        self.resolver = resolver
        self.parser = parser or ResponseParser()

    @staticmethod
    def validate_params(params: Dict[str, Any]) -> None:
        """Reject requests the prompt cannot be built from.

        Raises:
            ValidationError: If categories or duration are missing or malformed
        """
        categories = params.get("categories")
        if not isinstance(categories, list) or not categories:
            raise ValidationError("categories must be a non-empty list")
        if params.get("duration") in (None, ""):
            raise ValidationError("duration is required")

    def build_itinerary(self, raw_text: str) -> ParsedItinerary:
        """Parse a completion, geocode its points and attach the map link."""
        itinerary = self.parser.parse(raw_text)
        self.resolver.enrich(itinerary.points)
        itinerary.map_link = build_map_link(itinerary.points)
        return itinerary

    def generate_route(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Generate, store and return a new route.

        Args:
            params: Request body (categories, duration, pace, transportType,
                timeOfDay, accessibility, preferences, userId)

        Returns:
            The stored route record

        Raises:
            ValidationError: If invalid parameters
            UpstreamError: If the completion service fails
        """
        self.validate_params(params)
        categories = params["categories"]
        duration = params["duration"]

        logger.info(f"Generating route: categories={categories}, duration={duration}")
        raw_text = self.completion.generate(build_system_prompt(), build_user_prompt(params))
        itinerary = self.build_itinerary(raw_text)

        def new_route(route_id):
            route = {
                "routeId": route_id,
                "name": f"{duration}-часовой {' и '.join(str(c) for c in categories)} маршрут",
                "duration": duration,
                "pace": params.get("pace"),
                "timeOfDay": params.get("timeOfDay"),
                "createdAt": utc_timestamp(),
            }
            route.update(itinerary.to_dict())
            return route

        route_id, route = self.routes.insert_new(new_route)
        logger.info(f"Stored route {route_id} with {len(itinerary.points)} points")

        user_id = params.get("userId")
        if user_id:
            self.save_route_for_user(str(user_id), route_id)

        return route

    def get_route(self, route_id: str) -> Optional[Dict[str, Any]]:
        return self.routes.get(route_id)

    def save_route_for_user(self, user_id: str, route_id: str) -> None:
        """Add a route to the user's profile, creating the profile if needed."""
        self.users.update(user_id, _add_route_id(route_id), default=new_user_profile(user_id))
        logger.debug(f"Saved route {route_id} for user {user_id}")

    def get_user_routes(self, user_id: str) -> List[Dict[str, Any]]:
        """Routes saved by a user; ids whose route is gone are skipped."""
        profile = self.users.get(user_id)
        if not profile:
            return []
        user_routes = []
        for route_id in profile.get("routes", []):
            route = self.routes.get(route_id)
            if route:
                route["id"] = route_id
                user_routes.append(route)
        return user_routes

    def delete_route(self, route_id: str) -> None:
        """Remove a route and unlink it from every user profile."""
        self.routes.delete(route_id)
        for user_id, profile in self.users.items():
            if route_id in profile.get("routes", []):
                self.users.update(user_id, _remove_route_id(route_id))
        logger.info(f"Deleted route {route_id}")

