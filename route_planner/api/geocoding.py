# route_planner/api/geocoding.py
"""Resolve route point names to coordinates.

Two providers are supported: the Yandex HTTP geocoder (default, it knows
Moscow street-level names best) and Google via ``googlemaps``. Both follow
the same contract: ``lookup(place)`` returns ``(lat, lon)`` or ``None`` and
never raises.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Tuple

import googlemaps
import requests

from route_planner.api.config import get_geocoder_config
from route_planner.api.models import RoutePoint

logger = logging.getLogger(__name__)

YANDEX_GEOCODER_URL = "https://geocode-maps.yandex.ru/1.x/"

LookupFn = Callable[[str], Optional[Tuple[float, float]]]


class YandexGeocoder:
    """Geocoder backed by the Yandex Geocoder HTTP API."""

    def __init__(self, api_key: str, city: str = "", timeout: float = 10, session=None):
        self.api_key = api_key
        self.city = city
        self.timeout = timeout
        self.session = session or requests.Session()

    def lookup(self, place: str) -> tuple[float, float] | None:
        query = f"{self.city}, {place}" if self.city else place
        try:
            response = self.session.get(
                YANDEX_GEOCODER_URL,
                params={"apikey": self.api_key, "format": "json", "geocode": query},
                timeout=self.timeout,
            )
            response.raise_for_status()
            features = response.json()["response"]["GeoObjectCollection"]["featureMember"]
            if not features:
                logger.warning(f"No results found for place: {query}")
                return None
            # Yandex answers "lon lat"
            lon, lat = map(float, features[0]["GeoObject"]["Point"]["pos"].split())
            logger.debug(f"Geocoded {query} to {lat}, {lon}")
            return lat, lon
        except Exception as e:
            logger.error(f"Geocoding error for '{query}': {e}")
            return None


class GoogleGeocoder:
    """Geocoder backed by the Google Maps Geocoding API."""

    def __init__(self, api_key: str, city: str = "", client: googlemaps.Client | None = None):
        self.city = city
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> googlemaps.Client | None:
        if self._client is None:
            if not self._api_key:
                logger.error("No Google Maps API key found in config")
                return None
            try:
                self._client = googlemaps.Client(key=self._api_key)
            except Exception as e:
                logger.error(f"Failed to initialize Google Maps client: {e}")
                return None
        return self._client

    def lookup(self, place: str) -> tuple[float, float] | None:
        query = f"{place}, {self.city}" if self.city else place
        try:
            client = self._get_client()
            if client is None:
                return None
            results = client.geocode(query, language="ru")
            if not results:
                logger.warning(f"No results found for place: {query}")
                return None
            loc = results[0]["geometry"]["location"]
            logger.debug(f"Geocoded {query} to {loc['lat']}, {loc['lng']}")
            return loc["lat"], loc["lng"]
        except Exception as e:
            logger.error(f"Geocoding error for '{query}': {e}")
            return None


def get_geocoder(config: dict | None = None):
    """Return the geocoder selected by ``GEOCODER_PROVIDER``."""
    cfg = config or get_geocoder_config()
    provider = cfg.get("provider", "yandex")
    if provider == "google":
        return GoogleGeocoder(cfg.get("google_api_key", ""), city=cfg.get("city", ""))
    if provider != "yandex":
        raise ValueError(f"Unknown geocoder provider: {provider}")
    if not cfg.get("yandex_api_key"):
        logger.warning("YANDEX_API_KEY is not set; geocoding requests will be rejected")
    return YandexGeocoder(
        cfg.get("yandex_api_key", ""),
        city=cfg.get("city", ""),
        timeout=cfg.get("timeout", 10),
    )


class CoordinateResolver:
    """Attach coordinates to route points, one lookup per point.

    Points are resolved in order and one at a time. A failed or empty lookup
    leaves ``coordinates`` as ``None``; nothing is retried and nothing is
    raised, so a single bad place name cannot sink the whole route.
    """

    def __init__(self, lookup: LookupFn):
        self._lookup = lookup

    def resolve(self, name: str) -> Optional[Tuple[float, float]]:
        if not name:
            return None
        try:
            coords = self._lookup(name)
        except Exception as e:
            logger.error(f"Geocoder raised for '{name}': {e}")
            return None
        if coords is None:
            return None
        try:
            lat, lon = coords
            return float(lat), float(lon)
        except (TypeError, ValueError) as e:
            logger.error(f"Geocoder returned malformed coordinates for '{name}': {coords!r} ({e})")
            return None

    def enrich(self, points: List[RoutePoint]) -> List[RoutePoint]:
        """Resolve every point in place and return the same list."""
        start_time = time.time()
        resolved = 0
        for point in points:
            point.coordinates = self.resolve(point.name)
            if point.coordinates is None:
                logger.warning(f"Failed to geocode '{point.name}'")
            else:
                resolved += 1

        duration = time.time() - start_time
        logger.info(f"Geocoded {resolved}/{len(points)} route points in {duration:.2f}s")
        return points


__all__ = [
    "YandexGeocoder",
    "GoogleGeocoder",
    "get_geocoder",
    "CoordinateResolver",
]
