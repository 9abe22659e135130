"""Retry execution and decoration."""

from .decorator import retryable
from .executor import RetryExecutor

__all__ = ["RetryExecutor", "retryable"]
