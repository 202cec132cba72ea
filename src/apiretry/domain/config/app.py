"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from apiretry.domain.config.http import HttpConfig
from apiretry.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model aggregating all configuration sections. Validation happens at
    load time so that a bad .apiretry.yml fails fast.

    Attributes:
        retry: Retry/backoff configuration
        http: Outbound HTTP configuration
    """

    retry: RetryConfig = Field(default_factory=RetryConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "retry": {
                    "max_retries": 5,
                    "initial_delay": 1000,
                    "max_delay": 60000,
                    "backoff_multiplier": 2.0,
                },
                "http": {
                    "timeout": 30.0,
                    "headers": {"Accept": "application/json"},
                },
            }
        },
    )
