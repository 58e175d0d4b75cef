# route_planner/api/errors.py
"""Exceptions the HTTP layer turns into error responses."""


class UpstreamError(RuntimeError):
    """The completion service failed or returned nothing usable."""

    status_code = 502


class ValidationError(ValueError):
    """Request data is missing or malformed."""

    status_code = 400


class AuthenticationError(PermissionError):
    """Credentials or token were rejected."""

    status_code = 401


class NotFoundError(LookupError):
    """A user, route or review does not exist."""

    status_code = 404
