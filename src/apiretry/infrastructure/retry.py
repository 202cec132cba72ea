"""Retry-with-backoff execution using tenacity.

This module wraps fallible API calls (sync or async) in a retry loop that
classifies failures by message text, backs off exponentially up to a cap and
honors ``retry in <seconds>`` hints embedded in error messages.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from apiretry.domain.config.retry import RetryConfig
from apiretry.domain.errors import RetriesExhaustedError, UnknownRetryFailureError
from apiretry.infrastructure.classifier import (
    Classifier,
    error_message,
    extract_retry_hint_ms,
    is_retryable_error,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

NOTICE_MESSAGE_LIMIT = 100


def backoff_delay_ms(config: RetryConfig, attempt_number: int) -> float:
    """Backoff delay before the retry that follows failed attempt ``attempt_number``.

    The delay starts at ``initial_delay`` and after every retryable failure
    becomes ``min(delay * backoff_multiplier, max_delay)``.

    Args:
        config: Retry configuration
        attempt_number: 1-based number of the attempt that just failed

    Returns:
        Delay in milliseconds (not yet clamped when it is the initial delay)
    """
    delay = config.initial_delay
    for _ in range(attempt_number - 1):
        delay = min(delay * config.backoff_multiplier, config.max_delay)
    return delay


def compute_wait_ms(config: RetryConfig, attempt_number: int, message: Optional[str]) -> float:
    """Wait before the next attempt: server hint if present, else backoff, clamped to max_delay."""
    hint = extract_retry_hint_ms(message)
    wait = hint if hint is not None else backoff_delay_ms(config, attempt_number)
    return min(wait, config.max_delay)


class wait_backoff_with_hint(wait_base):
    """Tenacity wait strategy for exponential backoff with retry-after hints."""

    def __init__(self, config: RetryConfig):
        self.config = config

    def __call__(self, retry_state: RetryCallState) -> float:
        return compute_wait_ms(self.config, retry_state.attempt_number, _last_message(retry_state)) / 1000.0


def _last_message(retry_state: RetryCallState) -> str:
    if retry_state.outcome is None:
        return ""
    return error_message(retry_state.outcome.exception())


def _make_notice_logger(config: RetryConfig) -> Callable[[RetryCallState], None]:
    def _before_sleep_log(retry_state: RetryCallState) -> None:
        message = _last_message(retry_state)
        wait_ms = compute_wait_ms(config, retry_state.attempt_number, message)
        logger.warning(
            f"Attempt {retry_state.attempt_number}/{config.max_retries} failed. "
            f"Retrying in {wait_ms:.0f}ms... Error: {message[:NOTICE_MESSAGE_LIMIT]}"
        )

    return _before_sleep_log


class RetryExecutor:
    """Runs an operation until it succeeds, fails fatally or runs out of attempts.

    The executor keeps no state between invocations; the same instance may be
    used concurrently for independent operations.

    Outcomes:
        - success on any attempt: the operation's result is returned
        - non-retryable failure: the original exception propagates unchanged
        - retryable failure on the last attempt: RetriesExhaustedError
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        classifier: Optional[Classifier] = None,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize executor

        Args:
            config: Default retry configuration (RetryConfig defaults if None)
            classifier: Returns True if an exception should be retried
                (defaults to message-based classification)
            sleep: Blocking sleep used by execute(), takes seconds
            async_sleep: Awaitable sleep used by execute_async(), takes seconds
        """
        self.config = config or RetryConfig()
        self.classifier = classifier or is_retryable_error
        self.sleep = sleep
        self.async_sleep = async_sleep

    def _should_retry(self, exception: BaseException) -> bool:
        # Interrupts and task cancellation are never retried
        return isinstance(exception, Exception) and self.classifier(exception)

    def _retrying_kwargs(self, config: RetryConfig) -> dict:
        return {
            "stop": stop_after_attempt(config.max_attempts),
            "wait": wait_backoff_with_hint(config),
            "retry": retry_if_exception(self._should_retry),
            "before_sleep": _make_notice_logger(config),
            "reraise": False,
        }

    def _exhausted(self, error: RetryError, config: RetryConfig) -> Exception:
        last_error = error.last_attempt.exception()
        if last_error is None:
            return UnknownRetryFailureError()
        logger.error(f"Giving up after {error.last_attempt.attempt_number} attempts: {last_error}")
        return RetriesExhaustedError(config.max_retries, last_error)

    def execute(self, operation: Callable[[], T], config: Optional[RetryConfig] = None) -> T:
        """Invoke a blocking operation with retries.

        Args:
            operation: Zero-argument callable
            config: Per-call configuration (executor default if None)

        Returns:
            Result of the first successful invocation

        Raises:
            RetriesExhaustedError: If a retryable failure persisted through the last attempt
            Exception: The original exception if it is not retryable
        """
        config = config or self.config
        retrying = Retrying(sleep=self.sleep, **self._retrying_kwargs(config))
        try:
            return retrying(operation)
        except RetryError as e:
            raise self._exhausted(e, config) from e.last_attempt.exception()

    async def execute_async(
        self, operation: Callable[[], Awaitable[T]], config: Optional[RetryConfig] = None
    ) -> T:
        """Await an asynchronous operation with retries.

        Same outcomes as execute(); waits yield to the event loop, and task
        cancellation propagates from the sleep.
        """
        config = config or self.config
        retrying = AsyncRetrying(sleep=self.async_sleep, **self._retrying_kwargs(config))

        # tenacity only awaits coroutine functions, not callables returning awaitables
        async def _attempt() -> T:
            return await operation()

        try:
            return await retrying(_attempt)
        except RetryError as e:
            raise self._exhausted(e, config) from e.last_attempt.exception()


def retry_with_backoff(operation: Callable[[], T], config: Optional[RetryConfig] = None) -> T:
    """Run a blocking operation with default classification and backoff."""
    return RetryExecutor().execute(operation, config)


async def retry_with_backoff_async(
    operation: Callable[[], Awaitable[T]], config: Optional[RetryConfig] = None
) -> T:
    """Run an async operation with default classification and backoff."""
    return await RetryExecutor().execute_async(operation, config)


def with_retry(
    config: Optional[RetryConfig] = None,
    classifier: Optional[Classifier] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Create a retry decorator for sync or async functions.

    Args:
        config: Retry configuration
        classifier: Function that returns True if exception should be retried

    Returns:
        Retry decorator
    """
    executor = RetryExecutor(config=config, classifier=classifier)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapped(*args: Any, **kwargs: Any) -> Any:
                return await executor.execute_async(lambda: func(*args, **kwargs))

            return async_wrapped

        @functools.wraps(func)
        def wrapped(*args: Any, **kwargs: Any) -> Any:
            return executor.execute(lambda: func(*args, **kwargs))

        return wrapped

    return decorator
