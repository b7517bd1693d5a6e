"""
Error taxonomy shared by services and the route layer.

Services raise these; ``app.main`` turns them into JSON responses with the
matching HTTP status.
"""
from __future__ import annotations

from typing import Optional


class SowServiceError(Exception):
    """Base class for every expected, request-scoped failure."""

    status_code: int = 500
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(SowServiceError):
    """A required field is missing or malformed."""

    status_code = 400
    default_message = "Invalid input"


class NotFoundError(SowServiceError):
    """A referenced account, template or document does not exist."""

    status_code = 404
    default_message = "Not found"


class UpstreamFailureError(SowServiceError):
    """The completion API answered with a non-success status or could not be reached."""

    default_message = "Matcha API failed"

    def __init__(
        self,
        message: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        if upstream_status is not None and 400 <= upstream_status < 600:
            self.status_code = upstream_status


class StorageFailureError(SowServiceError):
    """The database or the upload directory rejected an operation."""

    default_message = "Storage operation failed"
