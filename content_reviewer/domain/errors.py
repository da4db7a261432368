from __future__ import annotations

from typing import Optional

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class ReviewerError(Exception):
    """Base class: carries the HTTP status and the message safe to show a user."""
    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class ValidationError(ReviewerError):
    """Bad input: wrong size, type or length, or both/neither inputs set."""
    status_code = 400


class BackendUnavailable(ReviewerError):
    """Network failure or non-2xx answer from the review backend."""
    status_code = 502

    def __init__(self, message: str, detail: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message, detail)
        self.status = status


class BackendContractError(BackendUnavailable):
    """2xx from the backend, but the body is not the documented shape."""


class ReviewNotFound(ReviewerError):
    status_code = 404


class InternalError(ReviewerError):
    status_code = 500

    def __init__(self, detail: Optional[str] = None):
        super().__init__(GENERIC_ERROR_MESSAGE, detail)
