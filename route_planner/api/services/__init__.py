"""Service layer used by the HTTP blueprints."""
