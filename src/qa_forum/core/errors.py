"""Domain error taxonomy shared by services and the HTTP layer.

Services raise these exceptions; the API maps them to a status code and a
short ``{"error": ...}`` body in a single exception handler.
"""

from __future__ import annotations


class ForumError(RuntimeError):
    """Base exception for failures surfaced to callers verbatim."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthorizedError(ForumError):
    """No actor, or an actor that could not be identified."""

    status_code = 401


class ForbiddenError(ForumError):
    """The actor is identified but lacks rights for the operation."""

    status_code = 403


class NotFoundError(ForumError):
    """The target item or account does not exist."""

    status_code = 404


class ValidationFailedError(ForumError):
    """Malformed input, e.g. content below the minimum length."""

    status_code = 400


class ConflictError(ForumError):
    """The request conflicts with the current state of the target."""

    status_code = 409


class DependencyFailureError(ForumError):
    """An external collaborator (blob store, push channel) failed."""

    status_code = 502
