"""Errors raised by apiretry."""

from typing import Optional


class ApiRetryError(Exception):
    """Base class for errors synthesized by apiretry."""

    pass


class RetriesExhaustedError(ApiRetryError):
    """A retryable failure persisted through the last permitted attempt."""

    def __init__(self, max_retries: int, last_error: BaseException):
        self.max_retries = max_retries
        self.last_error = last_error
        super().__init__(f"Max retries ({max_retries}) reached. Last error: {last_error}")


class UnknownRetryFailureError(ApiRetryError):
    """The retry loop ended without a result and without a captured error."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Retry failed with unknown error")


class ApiCallError(ApiRetryError):
    """Network-level failure of an outbound API call."""

    pass
