"""Shared data structures for generated routes.

The parser, the geocoding step and the map-link builder all pass these
objects around, so they live in their own module to keep imports one-way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

Coordinates = Tuple[float, float]  # (latitude, longitude)


@dataclass
class RoutePoint:
    """A single stop on a generated route."""

    sequence_index: int  # 1‑based position within the route
    name: str  # e.g. "Третьяковская галерея"
    stay_duration: str = ""
    description: str = ""
    activities: List[str] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)
    transition_to_next: str = ""
    coordinates: Optional[Coordinates] = None

    @property
    def has_coordinates(self) -> bool:
        return self.coordinates is not None

    def to_dict(self) -> dict:
        data = {
            "id": self.sequence_index,
            "name": self.name,
            "duration": self.stay_duration,
            "description": self.description,
            "activities": list(self.activities),
            "tips": list(self.tips),
            "transition": self.transition_to_next,
        }
        if self.coordinates is not None:
            data["coordinates"] = [self.coordinates[0], self.coordinates[1]]
        return data


@dataclass
class ParsedItinerary:
    """Overview plus ordered route points extracted from a completion."""

    overview_text: str = ""
    points: List[RoutePoint] = field(default_factory=list)
    map_link: str = ""

    def to_dict(self) -> dict:
        return {
            "description": self.overview_text,
            "points": [point.to_dict() for point in self.points],
            "yandexMapsUrl": self.map_link,
        }
