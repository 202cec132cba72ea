"""Retry configuration model."""

from pydantic import BaseModel, ConfigDict, Field


class RetryConfig(BaseModel):
    """Configuration for retry logic.

    Delays are expressed in milliseconds. Every computed wait is clamped to
    ``max_delay``; ``initial_delay <= max_delay`` is not enforced.

    Attributes:
        max_retries: Number of retries after the first attempt (total attempts = max_retries + 1)
        initial_delay: Wait before the first retry, in milliseconds
        max_delay: Upper bound for any wait, in milliseconds
        backoff_multiplier: Growth factor applied to the delay after each retryable failure
    """

    max_retries: int = Field(5, ge=0, alias="maxRetries")
    initial_delay: float = Field(1000, ge=0.0, alias="initialDelay")
    max_delay: float = Field(60000, ge=0.0, alias="maxDelay")
    backoff_multiplier: float = Field(2.0, gt=0.0, alias="backoffMultiplier")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,  # Accept both max_retries and maxRetries
        extra="forbid",
    )

    @property
    def max_attempts(self) -> int:
        """Total number of operation invocations allowed."""
        return self.max_retries + 1
