"""
FitMatch — Domain error taxonomy.

Services raise these synchronously; the transport layer maps them onto HTTP
status codes (see ``app.main``) or realtime ``error`` events (see
``app.services.realtime_gateway``).
"""

from __future__ import annotations

from fastapi import status


class FitMatchError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(FitMatchError):
    """A referenced user, gym, saved gym or match does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(FitMatchError):
    """The actor may not perform the requested transition."""

    status_code = status.HTTP_403_FORBIDDEN


class ValidationError(FitMatchError):
    """Malformed input: missing fields, out-of-range values."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConflictError(FitMatchError):
    status_code = status.HTTP_409_CONFLICT
