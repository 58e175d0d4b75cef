"""Core route generation: prompts, parsing, geocoding, storage and services."""
