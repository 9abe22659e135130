"""retrykit - retry with exponential backoff for fallible operations."""

from retrykit.__version__ import __version__
from retrykit.domain.exceptions import (
    ConfigurationError,
    InvalidStateTransitionError,
    RetryError,
    RetryInterruptedError,
)
from retrykit.domain.model.retry import (
    AttemptState,
    Backoff,
    ExecutionState,
    RetryPolicy,
)
from retrykit.infrastructure.retry import RetryExecutor, retryable

__all__ = [
    "__version__",
    "AttemptState",
    "Backoff",
    "ConfigurationError",
    "ExecutionState",
    "InvalidStateTransitionError",
    "RetryError",
    "RetryExecutor",
    "RetryInterruptedError",
    "RetryPolicy",
    "retryable",
]
