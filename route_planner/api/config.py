# route_planner/api/config.py
"""Configuration management for the route planner API."""
import json
import os
from dotenv import load_dotenv

load_dotenv()

DASHSCOPE_BASE_URL = "https://dashscope-intl.aliyuncs.com/compatible-mode/v1"


def get_openai_api_key():
    """Get the completion API key from environment."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise ValueError("OPENAI_API_KEY not set")
    return api_key


def get_completion_config():
    """Get chat completion configuration."""
    return {
        "base_url": os.getenv("OPENAI_BASE_URL", DASHSCOPE_BASE_URL),
        "model": os.getenv("OPENAI_CHAT_MODEL", "qwen-max"),
        "temperature": float(os.getenv("OPENAI_TEMPERATURE", "0.7")),
        "max_tokens": int(os.getenv("OPENAI_MAX_TOKENS", "3000")),
    }


def get_geocoder_config():
    """Get geocoding provider configuration."""
    return {
        "provider": os.getenv("GEOCODER_PROVIDER", "yandex").lower(),
        "yandex_api_key": os.getenv("YANDEX_API_KEY", ""),
        "google_api_key": os.getenv("GOOGLE_MAPS_API_KEY", ""),
        "city": os.getenv("ROUTE_CITY", "Москва"),
        "timeout": float(os.getenv("GEOCODER_TIMEOUT", "10")),
    }


def get_cors_origins():
    """Origins allowed to call the API with credentials."""
    origins = ["http://localhost:3000"]
    frontend_url = os.getenv("FRONTEND_URL")
    if frontend_url:
        origins.insert(0, frontend_url)
    return origins


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 3005))


def get_jwt_secret():
    """Get the secret used to sign auth tokens."""
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise ValueError("JWT_SECRET not set")
    return secret


def get_upload_dir():
    """Directory where uploaded avatars are written."""
    return os.getenv("UPLOAD_DIR", "uploads")


def get_parser_markers():
    """Marker overrides for the itinerary parser.

    ``ROUTE_PARSER_MARKERS`` may hold a JSON object whose keys are
    ``ParserMarkers`` field names. Unknown keys are rejected so a typo does
    not silently fall back to the defaults.
    """
    raw = os.getenv("ROUTE_PARSER_MARKERS")
    if not raw:
        return {}
    overrides = json.loads(raw)
    if not isinstance(overrides, dict):
        raise ValueError("ROUTE_PARSER_MARKERS must be a JSON object")
    return overrides
