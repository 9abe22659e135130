"""Retry domain models.

- RetryPolicy: Validated, immutable retry configuration
- Backoff: Delay schedule between attempts
- AttemptState / ExecutionState: Bookkeeping for one execution
"""

from retrykit.domain.model.retry.backoff import Backoff
from retrykit.domain.model.retry.matchers import FailureMatcher, resolve_matcher
from retrykit.domain.model.retry.policy import RetryPolicy
from retrykit.domain.model.retry.state_machine import AttemptState, ExecutionState

__all__ = [
    "AttemptState",
    "Backoff",
    "ExecutionState",
    "FailureMatcher",
    "RetryPolicy",
    "resolve_matcher",
]
