# route_planner/routes/reviews.py
"""Review endpoints."""

from flask import Blueprint, jsonify, request


def create_reviews_blueprint(review_service):
    """Create the blueprint serving review endpoints under ``/api``."""
    reviews_bp = Blueprint("reviews", __name__, url_prefix="/api")

    @reviews_bp.route("/reviews", methods=["POST"])
    def add_review():
        data = request.get_json(silent=True) or {}
        review = review_service.add_review(
            str(data.get("userId", "")),
            str(data.get("routeId", "")),
            data.get("rating"),
            liked_aspects=data.get("likedAspects"),
            disliked_aspects=data.get("dislikedAspects"),
            comment=data.get("comment", ""),
        )
        return jsonify({"success": True, "review": review})

    @reviews_bp.route("/user-reviews/<user_id>")
    def user_reviews(user_id):
        return jsonify({"reviews": review_service.get_user_reviews(user_id)})

    @reviews_bp.route("/route-reviews/<route_id>")
    def route_reviews(route_id):
        return jsonify({"reviews": review_service.get_route_reviews(route_id)})

    return reviews_bp


__all__ = ["create_reviews_blueprint"]
