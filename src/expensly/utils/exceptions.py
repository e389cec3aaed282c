"""Custom exception classes for Expensly."""


class ExpenslyError(Exception):
    """Base exception for Expensly."""
    pass


class ConfigError(ExpenslyError):
    """Configuration-related errors."""
    pass


class PermissionDenied(ExpenslyError):
    """Inbox access was refused or the prompt timed out."""
    pass


class TransportError(ExpenslyError):
    """Message transport failures."""
    pass


class ValidationError(ExpenslyError):
    """Data validation errors."""
    pass


# Retryable errors
class RetryableError(ExpenslyError):
    """Base class for errors that should trigger retry."""
    pass


class RetryableTransportError(RetryableError, TransportError):
    """Transport errors that can be retried."""
    pass
