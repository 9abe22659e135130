"""Pytest configuration and shared fixtures for testing."""

from typing import Any, Callable

import pytest


class RecordingSleep:
    """Stand-in for time.sleep that records requested waits instead of blocking."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def calls_ms(self) -> list[float]:
        return [round(seconds * 1000, 6) for seconds in self.calls]


class RecordingAsyncSleep(RecordingSleep):
    """Stand-in for asyncio.sleep that records requested waits."""

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class ScriptedOperation:
    """
    Zero-argument operation that plays back a script of outcomes.

    Exceptions in the script are raised, anything else is returned. The last
    entry repeats once the script runs out.
    """

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0
        self.raised: list[BaseException] = []

    def _next(self) -> Any:
        index = min(self.calls, len(self.outcomes) - 1)
        self.calls += 1
        outcome = self.outcomes[index]
        if isinstance(outcome, type) and issubclass(outcome, BaseException):
            outcome = outcome(f"call {self.calls}")
        if isinstance(outcome, BaseException):
            self.raised.append(outcome)
            raise outcome
        return outcome

    def __call__(self) -> Any:
        return self._next()


class AsyncScriptedOperation(ScriptedOperation):
    async def __call__(self) -> Any:
        return self._next()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def recording_async_sleep() -> RecordingAsyncSleep:
    return RecordingAsyncSleep()


@pytest.fixture
def scripted() -> Callable[..., ScriptedOperation]:
    """Factory for sync scripted operations."""
    return ScriptedOperation


@pytest.fixture
def async_scripted() -> Callable[..., AsyncScriptedOperation]:
    """Factory for async scripted operations."""
    return AsyncScriptedOperation
