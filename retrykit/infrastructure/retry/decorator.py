"""@retryable - attach a retry policy to a function by explicit decoration."""

import functools
import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from retrykit.domain.model.retry.backoff import Backoff
from retrykit.domain.model.retry.matchers import FailureMatcher
from retrykit.domain.model.retry.policy import DEFAULT_MAX_ATTEMPTS, RetryPolicy
from retrykit.infrastructure.retry.executor import RetryCallback, RetryExecutor

F = TypeVar("F", bound=Callable[..., Any])


def retryable(
    *include: FailureMatcher,
    max_attempts: int | None = None,
    backoff: Backoff | None = None,
    policy: RetryPolicy | None = None,
    on_retry: RetryCallback | None = None,
) -> Callable[[F], F]:
    """
    Decorator to add retry logic to sync or async functions.

    The policy is built when the decorator is applied, so a bad configuration
    fails at import time rather than on the first call. The decorated function
    should be idempotent: it may run up to ``max_attempts`` times.

    Usage:
        @retryable(TimeoutError, ConnectionError, max_attempts=5,
                   backoff=Backoff(delay_ms=2000, multiplier=2.0))
        async def load_profile(user_id: str) -> dict:
            return await client.get_profile(user_id)

    Args:
        *include: Exception classes or predicates that trigger a retry
        max_attempts: Total attempts, including the first (default: 3)
        backoff: Delay and multiplier between attempts (default: 1000ms, 1.0)
        policy: Prebuilt policy, used instead of the arguments above
        on_retry: Optional observer, see ``RetryExecutor``

    Returns:
        Decorator function

    Raises:
        ConfigurationError: If the policy is invalid
        TypeError: If ``policy`` is combined with ``include``, ``max_attempts``
            or ``backoff``
    """
    if policy is None:
        if max_attempts is None:
            max_attempts = DEFAULT_MAX_ATTEMPTS
        policy = RetryPolicy.from_backoff(include, max_attempts=max_attempts, backoff=backoff)
    elif include or max_attempts is not None or backoff is not None:
        raise TypeError(
            "Pass either a policy or include/max_attempts/backoff arguments, not both"
        )

    executor = RetryExecutor(policy, on_retry=on_retry)

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                return await executor.execute_async(lambda: func(*args, **kwargs))

            wrapper: Any = async_wrapper
        else:

            @functools.wraps(func)
            def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
                return executor.execute(lambda: func(*args, **kwargs))

            wrapper = sync_wrapper

        wrapper.retry_policy = policy
        return wrapper

    return decorator
