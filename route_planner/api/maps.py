# route_planner/api/maps.py
"""Shareable map links for generated routes."""

from typing import Iterable

from route_planner.api.models import RoutePoint

YANDEX_ROUTE_TEMPLATE = "https://yandex.ru/maps/?rtext={route}&rtt=pd"
ROUTE_SEPARATOR = "~"


def build_map_link(points: Iterable[RoutePoint],
                   template: str = YANDEX_ROUTE_TEMPLATE,
                   separator: str = ROUTE_SEPARATOR) -> str:
    """Build a pedestrian route link through every point that has coordinates.

    Args:
        points: Route points in route order
        template: URL template with a ``{route}`` placeholder
        separator: String placed between "lat,lon" waypoints

    Returns:
        The link; with no resolved points the route part is empty.
    """
    waypoints = [
        f"{point.coordinates[0]},{point.coordinates[1]}"
        for point in points
        if point.coordinates is not None
    ]
    return template.format(route=separator.join(waypoints))


__all__ = ["build_map_link", "YANDEX_ROUTE_TEMPLATE"]
