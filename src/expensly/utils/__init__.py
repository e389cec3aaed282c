"""Utility modules."""
from .logger import get_logger, set_category_context
from .exceptions import (
    ExpenslyError,
    ConfigError,
    PermissionDenied,
    TransportError,
    ValidationError,
    RetryableError,
    RetryableTransportError
)
from .retry import retry_with_backoff

__all__ = [
    "get_logger",
    "set_category_context",
    "ExpenslyError",
    "ConfigError",
    "PermissionDenied",
    "TransportError",
    "ValidationError",
    "RetryableError",
    "RetryableTransportError",
    "retry_with_backoff"
]
