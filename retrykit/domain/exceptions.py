"""Retry exception types.

Failures raised by the wrapped operation itself are never wrapped: a
non-retryable failure and the last failure of an exhausted run are
re-raised unchanged. The types below cover the errors retrykit raises on
its own behalf.
"""

import asyncio
from typing import Any, Dict, Optional


class RetryError(Exception):
    """Base exception for errors raised by retrykit itself."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(RetryError, ValueError):
    """Raised when a retry policy is constructed with an out-of-range field."""

    def __init__(
        self,
        message: str,
        field: str,
        value: Optional[Any] = None,
    ):
        super().__init__(message, {"field": field, "value": repr(value)})
        self.field = field
        self.value = value


class InvalidStateTransitionError(RetryError):
    """Raised when an execution moves between states out of order."""

    def __init__(self, from_state: Any, to_state: Any):
        message = f"Invalid state transition from {from_state.value} to {to_state.value}"
        super().__init__(
            message, {"from_state": from_state.value, "to_state": to_state.value}
        )
        self.from_state = from_state
        self.to_state = to_state


class RetryInterruptedError(asyncio.CancelledError):
    """Raised when the wait between two attempts is cancelled.

    Subclasses ``asyncio.CancelledError`` so the cancellation stays visible to
    the caller: ``asyncio.timeout`` converts it to ``TimeoutError``, task groups
    treat it as cancellation, and ``except Exception`` blocks do not absorb it.
    The retryable failure that triggered the wait is deliberately not attached.

    Attributes:
        attempts: Number of attempts completed before the wait was interrupted
    """

    def __init__(self, attempts: int):
        super().__init__(f"Retry interrupted after {attempts} attempt(s)")
        self.attempts = attempts
