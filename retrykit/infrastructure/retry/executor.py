"""Retry Executor - runs an operation under a RetryPolicy.

Provides:
- Bounded attempts with exponential backoff between them
- Immediate propagation of failures outside the policy's inclusion set
- Re-raise of the last failure once the attempt budget is spent
- Interruptible waits (threading.Event for sync callers, task cancellation
  for asyncio callers)
"""

import asyncio
import inspect
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from retrykit.domain.exceptions import RetryInterruptedError
from retrykit.domain.model.retry.policy import RetryPolicy
from retrykit.domain.model.retry.state_machine import AttemptState, ExecutionState

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[Exception, int, Any], Any]


class RetryExecutor:
    """
    Execute operations with bounded retries and exponential backoff.

    The executor holds no per-call state: every call to ``execute`` or
    ``execute_async`` owns its own ``AttemptState``, so one executor can be
    shared by any number of threads or tasks.

    Example:
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutError,), initial_delay_ms=1000, multiplier=2.0)
        )
        body = executor.execute(lambda: fetch("https://example.com"))
        body = await executor.execute_async(lambda: afetch("https://example.com"))
    """

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        sleep: Callable[[float], None] | None = None,
        async_sleep: Callable[[float], Awaitable[None]] | None = None,
        on_retry: RetryCallback | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            policy: Validated retry policy
            sleep: Blocking wait in seconds (default: ``time.sleep``). May raise
                ``InterruptedError`` to signal an interruption.
            async_sleep: Non-blocking wait in seconds (default: ``asyncio.sleep``)
            on_retry: Optional observer called before each wait with
                (error, attempt_number, delay_ms). May be a coroutine function
                when used with ``execute_async``.
        """
        self.policy = policy
        self._sleep = sleep or time.sleep
        self._async_sleep = async_sleep or asyncio.sleep
        self._on_retry = on_retry

    def execute(
        self,
        operation: Callable[[], T],
        *,
        cancel_event: threading.Event | None = None,
    ) -> T:
        """
        Execute a blocking operation with retry logic.

        Args:
            operation: Zero-argument callable to invoke
            cancel_event: Optional cancellation token. If it is set before or
                during a wait, the wait ends and ``RetryInterruptedError`` is
                raised. The event is left set for the caller.

        Returns:
            The result of the first successful attempt

        Raises:
            RetryInterruptedError: If a wait was cancelled
            Exception: The operation's own failure, unchanged, when it is not
                retryable or when the last attempt failed
        """
        state = AttemptState(delay_ms=self.policy.initial_delay_ms)

        while state.attempts < self.policy.max_attempts:
            state.transition(ExecutionState.ATTEMPTING)
            try:
                result = operation()
            except Exception as error:
                if not self._record_failure(state, error):
                    raise
            else:
                state.transition(ExecutionState.SUCCEEDED)
                return result

            if state.attempts >= self.policy.max_attempts:
                break

            self._begin_wait(state)
            self._notify(state)
            self._wait(state, cancel_event)
            self._end_wait(state)

        return self._exhausted(state)

    async def execute_async(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute an async operation with retry logic.

        The wait between attempts is a timer yield on the running loop, so it
        never blocks other tasks. Cancelling the calling task during a wait, or
        while an async ``on_retry`` observer runs, raises
        ``RetryInterruptedError``, a ``CancelledError`` subclass, so enclosing
        timeouts and task groups still see a cancellation.

        Args:
            operation: A callable that returns the awaitable to execute

        Returns:
            The result of the first successful attempt

        Raises:
            RetryInterruptedError: If the task was cancelled during a wait
            Exception: The operation's own failure, unchanged, when it is not
                retryable or when the last attempt failed
        """
        state = AttemptState(delay_ms=self.policy.initial_delay_ms)

        while state.attempts < self.policy.max_attempts:
            state.transition(ExecutionState.ATTEMPTING)
            try:
                result = await operation()
            except Exception as error:
                if not self._record_failure(state, error):
                    raise
            else:
                state.transition(ExecutionState.SUCCEEDED)
                return result

            if state.attempts >= self.policy.max_attempts:
                break

            self._begin_wait(state)
            try:
                await self._notify_async(state)
                await self._async_sleep(state.delay_ms / 1000)
            except asyncio.CancelledError as cancelled:
                state.transition(ExecutionState.INTERRUPTED)
                logger.debug(f"Retry wait cancelled after {state.attempts} attempt(s)")
                raise RetryInterruptedError(state.attempts) from cancelled
            self._end_wait(state)

        return self._exhausted(state)

    def _record_failure(self, state: AttemptState, error: Exception) -> bool:
        """Classify a failure. Returns False if it must be propagated now."""
        if not self.policy.is_retryable(error):
            state.transition(ExecutionState.FAILED)
            logger.debug(f"Operation failed with non-retryable error: {error!r}")
            return False

        state.record_failure(error)
        return True

    def _begin_wait(self, state: AttemptState) -> None:
        state.transition(ExecutionState.WAITING)
        state.delays_ms.append(state.delay_ms)
        logger.debug(
            f"Operation failed (attempt {state.attempts}/{self.policy.max_attempts}), "
            f"retrying in {state.delay_ms}ms: {state.last_error!r}"
        )

    def _end_wait(self, state: AttemptState) -> None:
        state.delay_ms = self.policy.backoff.next_delay(state.delay_ms)

    def _wait(self, state: AttemptState, cancel_event: threading.Event | None) -> None:
        seconds = state.delay_ms / 1000
        try:
            if cancel_event is not None:
                interrupted = cancel_event.wait(seconds)
            else:
                self._sleep(seconds)
                interrupted = False
        except InterruptedError as e:
            state.transition(ExecutionState.INTERRUPTED)
            logger.debug(f"Retry wait interrupted after {state.attempts} attempt(s)")
            raise RetryInterruptedError(state.attempts) from e

        if interrupted:
            state.transition(ExecutionState.INTERRUPTED)
            logger.debug(f"Retry wait cancelled after {state.attempts} attempt(s)")
            raise RetryInterruptedError(state.attempts)

    def _exhausted(self, state: AttemptState) -> Any:
        state.transition(ExecutionState.FAILED)
        logger.debug(
            f"Operation failed after {state.attempts} attempt(s), giving up: "
            f"{state.last_error!r}"
        )
        if state.last_error is None:
            raise RuntimeError("Retry loop ended without an attempt")
        raise state.last_error

    def _notify(self, state: AttemptState) -> None:
        if not self._on_retry:
            return
        try:
            self._on_retry(state.last_error, state.attempts, state.delay_ms)
        except Exception as callback_error:
            logger.warning(f"on_retry callback failed: {callback_error}")

    async def _notify_async(self, state: AttemptState) -> None:
        if not self._on_retry:
            return
        try:
            outcome = self._on_retry(state.last_error, state.attempts, state.delay_ms)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as callback_error:
            logger.warning(f"on_retry callback failed: {callback_error}")
