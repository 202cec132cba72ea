"""Configuration models with Pydantic validation."""

from apiretry.domain.config.app import AppConfig
from apiretry.domain.config.http import HttpConfig
from apiretry.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "HttpConfig",
    "RetryConfig",
]
