"""apiretry - retry with exponential backoff for outbound API calls."""

from apiretry.domain.config.retry import RetryConfig
from apiretry.domain.errors import (
    ApiCallError,
    ApiRetryError,
    RetriesExhaustedError,
    UnknownRetryFailureError,
)
from apiretry.infrastructure.classifier import is_retryable_error
from apiretry.infrastructure.retry import (
    RetryExecutor,
    retry_with_backoff,
    retry_with_backoff_async,
    with_retry,
)

__all__ = [
    "ApiCallError",
    "ApiRetryError",
    "RetriesExhaustedError",
    "RetryConfig",
    "RetryExecutor",
    "UnknownRetryFailureError",
    "is_retryable_error",
    "retry_with_backoff",
    "retry_with_backoff_async",
    "with_retry",
]
