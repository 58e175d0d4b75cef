# route_planner/api/services/review_service.py
"""Service layer for route reviews and ratings."""

import logging
import secrets
from numbers import Number
from typing import Any, Dict, List, Optional

from route_planner.api.errors import NotFoundError, ValidationError
from route_planner.api.services.route_service import utc_timestamp
from route_planner.api.storage import KeyValueStore

logger = logging.getLogger(__name__)


class ReviewService:
    """Stores one review per (route, user) and keeps route ratings current.

    ``reviews`` is keyed by route id; each value maps user id to review.
    """

    def __init__(self, reviews: KeyValueStore, routes: KeyValueStore, users: KeyValueStore):
        self.reviews = reviews
        self.routes = routes
        self.users = users

    def add_review(self,
                   user_id: str,
                   route_id: str,
                   rating: Any,
                   liked_aspects: Optional[List[str]] = None,
                   disliked_aspects: Optional[List[str]] = None,
                   comment: str = "") -> Dict[str, Any]:
        """Create or replace a user's review of a route.

        Raises:
            NotFoundError: If the user or the route does not exist
            ValidationError: If rating is not a number
        """
        if user_id not in self.users:
            raise NotFoundError("Пользователь не найден")
        if route_id not in self.routes:
            raise NotFoundError("Маршрут не найден")
        if isinstance(rating, bool) or not isinstance(rating, Number):
            raise ValidationError("rating must be a number")

        review = {
            "id": f"rev_{secrets.token_urlsafe(8)}",
            "userId": user_id,
            "routeId": route_id,
            "likedAspects": liked_aspects or [],
            "dislikedAspects": disliked_aspects or [],
            "comment": comment or "",
            "rating": rating,
            "createdAt": utc_timestamp(),
        }

        def put(route_reviews):
            route_reviews[user_id] = review
            return route_reviews

        route_reviews = self.reviews.update(route_id, put, default={})
        ratings = [r["rating"] for r in route_reviews.values()]
        average = sum(ratings) / len(ratings)

        def attach(route):
            route.setdefault("reviews", []).append(review["id"])
            route["averageRating"] = average
            return route

        self.routes.update(route_id, attach)
        logger.info(f"Review {review['id']} saved for route {route_id}, average rating {average:.2f}")
        return review

    def get_user_reviews(self, user_id: str) -> List[Dict[str, Any]]:
        """All reviews written by a user, with route name, duration and pace."""
        user_reviews = []
        for route_id, route_reviews in self.reviews.items():
            review = route_reviews.get(user_id)
            if not review:
                continue
            route = self.routes.get(route_id) or {}
            user_reviews.append({
                **review,
                "routeName": route.get("name"),
                "routeDuration": route.get("duration"),
                "routePace": route.get("pace"),
            })
        return user_reviews

    def get_route_reviews(self, route_id: str) -> List[Dict[str, Any]]:
        """All reviews of a route, with the author's name and avatar."""
        route_reviews = self.reviews.get(route_id)
        if not route_reviews:
            return []
        reviews_list = []
        for review in route_reviews.values():
            user = self.users.get(review["userId"]) or {}
            reviews_list.append({
                **review,
                "username": user.get("username"),
                "userAvatar": user.get("avatar"),
            })
        return reviews_list
