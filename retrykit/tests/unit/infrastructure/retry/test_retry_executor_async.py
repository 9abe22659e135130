"""Unit tests for RetryExecutor.execute_async."""

import asyncio

import pytest

from retrykit.domain.exceptions import RetryInterruptedError
from retrykit.domain.model.retry.policy import RetryPolicy
from retrykit.infrastructure.retry.executor import RetryExecutor


class TimeoutFailure(Exception):
    pass


class UnrelatedFailure(Exception):
    pass


class TestExecuteAsync:
    """Tests for the asyncio execution path."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, recording_async_sleep, async_scripted) -> None:
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,)), async_sleep=recording_async_sleep
        )
        operation = async_scripted("success")

        assert await executor.execute_async(operation) == "success"
        assert operation.calls == 1
        assert recording_async_sleep.calls == []

    @pytest.mark.asyncio
    async def test_success_on_third_call(self, recording_async_sleep, async_scripted) -> None:
        """3 attempts, 1000ms x2.0: waits 1000ms then 2000ms."""
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), max_attempts=3, multiplier=2.0),
            async_sleep=recording_async_sleep,
        )
        operation = async_scripted(TimeoutFailure, TimeoutFailure, "third")

        assert await executor.execute_async(operation) == "third"
        assert operation.calls == 3
        assert recording_async_sleep.calls_ms == [1000, 2000]

    @pytest.mark.asyncio
    async def test_exhausted_raises_last_failure(
        self, recording_async_sleep, async_scripted
    ) -> None:
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), max_attempts=3, multiplier=2.0),
            async_sleep=recording_async_sleep,
        )
        operation = async_scripted(TimeoutFailure)

        with pytest.raises(TimeoutFailure) as exc_info:
            await executor.execute_async(operation)

        assert operation.calls == 3
        assert exc_info.value is operation.raised[2]
        assert recording_async_sleep.calls_ms == [1000, 2000]

    @pytest.mark.asyncio
    async def test_non_retryable_fails_immediately(
        self, recording_async_sleep, async_scripted
    ) -> None:
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), max_attempts=5),
            async_sleep=recording_async_sleep,
        )
        operation = async_scripted(UnrelatedFailure)

        with pytest.raises(UnrelatedFailure):
            await executor.execute_async(operation)

        assert operation.calls == 1
        assert recording_async_sleep.calls == []

    @pytest.mark.asyncio
    async def test_single_attempt_never_waits(self, recording_async_sleep, async_scripted) -> None:
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), max_attempts=1),
            async_sleep=recording_async_sleep,
        )

        with pytest.raises(TimeoutFailure):
            await executor.execute_async(async_scripted(TimeoutFailure))
        assert recording_async_sleep.calls == []

    @pytest.mark.asyncio
    async def test_real_sleep_is_non_blocking(self, async_scripted) -> None:
        """Other tasks should keep running while the executor waits."""
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), max_attempts=2, initial_delay_ms=50)
        )
        ticks = 0

        async def ticker() -> None:
            nonlocal ticks
            for _ in range(5):
                ticks += 1
                await asyncio.sleep(0.001)

        result, _ = await asyncio.gather(
            executor.execute_async(async_scripted(TimeoutFailure, "ok")),
            ticker(),
        )
        assert result == "ok"
        assert ticks == 5

    @pytest.mark.asyncio
    async def test_async_on_retry_callback(self, recording_async_sleep, async_scripted) -> None:
        seen = []

        async def on_retry(error, attempt, delay):
            seen.append((attempt, delay))

        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), initial_delay_ms=10, multiplier=3.0),
            async_sleep=recording_async_sleep,
            on_retry=on_retry,
        )

        assert await executor.execute_async(async_scripted(TimeoutFailure, TimeoutFailure, 1)) == 1
        assert seen == [(1, 10), (2, 30)]

    @pytest.mark.asyncio
    async def test_concurrent_executions_are_independent(self, async_scripted) -> None:
        """Two calls on one executor should each keep their own attempt count."""
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), max_attempts=3, initial_delay_ms=1)
        )
        first = async_scripted(TimeoutFailure, TimeoutFailure, "first")
        second = async_scripted(TimeoutFailure, "second")

        results = await asyncio.gather(
            executor.execute_async(first), executor.execute_async(second)
        )

        assert results == ["first", "second"]
        assert first.calls == 3
        assert second.calls == 2


class TestExecuteAsyncCancellation:
    """Tests for cancellation while waiting between attempts."""

    @pytest.mark.asyncio
    async def test_cancel_during_wait(self, async_scripted) -> None:
        """Should raise RetryInterruptedError carrying the attempt count."""
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), max_attempts=5, initial_delay_ms=60_000)
        )
        operation = async_scripted(TimeoutFailure)
        task = asyncio.create_task(executor.execute_async(operation))

        while operation.calls < 1:
            await asyncio.sleep(0)
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(RetryInterruptedError) as exc_info:
            await task

        assert exc_info.value.attempts == 1
        assert isinstance(exc_info.value.__cause__, asyncio.CancelledError)
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_interruption_is_a_cancellation(self, async_scripted) -> None:
        """Outer cancellation scopes should still see a cancelled task."""
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), initial_delay_ms=60_000)
        )
        operation = async_scripted(TimeoutFailure)
        task = asyncio.create_task(executor.execute_async(operation))

        while operation.calls < 1:
            await asyncio.sleep(0)
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_wait_for_timeout_surfaces_as_timeout(self, async_scripted) -> None:
        """A deadline that expires during a wait should surface as TimeoutError."""
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), initial_delay_ms=60_000)
        )
        operation = async_scripted(TimeoutFailure)

        with pytest.raises(TimeoutError):
            await asyncio.wait_for(executor.execute_async(operation), timeout=0.05)

        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_cancellation_inside_operation_propagates(self) -> None:
        """A CancelledError raised by the operation itself is not classified."""
        calls = 0

        async def operation():
            nonlocal calls
            calls += 1
            raise asyncio.CancelledError

        executor = RetryExecutor(RetryPolicy(include=(asyncio.CancelledError,)))

        with pytest.raises(asyncio.CancelledError) as exc_info:
            await executor.execute_async(operation)

        assert not isinstance(exc_info.value, RetryInterruptedError)
        assert calls == 1

    @pytest.mark.asyncio
    async def test_timeout_scope_surfaces_as_timeout(self, async_scripted) -> None:
        """An asyncio.timeout block that expires during a wait should raise TimeoutError."""
        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), initial_delay_ms=60_000)
        )
        operation = async_scripted(TimeoutFailure)

        with pytest.raises(TimeoutError):
            async with asyncio.timeout(0.05):
                await executor.execute_async(operation)

        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_cancel_during_async_observer(self, async_scripted) -> None:
        """Cancelling while on_retry is awaited should interrupt like a cancelled wait."""
        observer_started = asyncio.Event()

        async def on_retry(error, attempt, delay):
            observer_started.set()
            await asyncio.Event().wait()

        executor = RetryExecutor(
            RetryPolicy(include=(TimeoutFailure,), initial_delay_ms=1),
            on_retry=on_retry,
        )
        operation = async_scripted(TimeoutFailure)
        task = asyncio.create_task(executor.execute_async(operation))

        await observer_started.wait()
        task.cancel()

        with pytest.raises(RetryInterruptedError) as exc_info:
            await task

        assert exc_info.value.attempts == 1
        assert isinstance(exc_info.value.__cause__, asyncio.CancelledError)
        assert operation.calls == 1
