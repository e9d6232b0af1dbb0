"""Domain exceptions.

Each exception carries the HTTP status it maps to; the global error handler
in ``vertex.middleware.error_handler`` turns them into JSON responses.
"""

from __future__ import annotations


class VertexError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(VertexError):
    """Malformed or missing input."""

    status_code = 400
    default_detail = "Invalid request"


class AuthError(VertexError):
    """Missing or unusable credentials."""

    status_code = 401
    default_detail = "Authentication required"


class InvalidCredentials(AuthError):
    default_detail = "Invalid credentials"


class InvalidToken(AuthError):
    default_detail = "Invalid token"


class ForbiddenError(VertexError):
    """Authenticated, but the role does not allow the operation."""

    status_code = 403
    default_detail = "Access denied. Admin role required."


class NotFoundError(VertexError):
    status_code = 404
    default_detail = "Not found"


class ConflictError(VertexError):
    """The operation conflicts with the current state of a resource."""

    status_code = 409
    default_detail = "Conflict"


class AlreadyFollowingError(ConflictError):
    # Existing clients expect 400 for a duplicate follow.
    status_code = 400
    default_detail = "Already following this prediction"


class StoreError(VertexError):
    """The storage backend failed. The detail is logged, never returned."""

    status_code = 500
    default_detail = "Storage backend error"
