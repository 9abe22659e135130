"""Exponential backoff between retry attempts."""

from dataclasses import dataclass

DEFAULT_DELAY_MS = 1000
DEFAULT_MULTIPLIER = 1.0


@dataclass(frozen=True)
class Backoff:
    """
    Backoff strategy for the wait between two attempts.

    The wait before attempt n+1 is ``delay_ms * multiplier ** (n - 1)``.
    Delays are whole milliseconds: each multiplication is truncated toward
    zero, so a 1000ms delay with a 1.5 multiplier waits 1000, 1500, 2250ms.

    A multiplier of 1.0 gives a constant delay, a multiplier below 1.0 a
    shrinking one, and 0 collapses every wait after the first to zero.

    Attributes:
        delay_ms: Wait before the second attempt, in milliseconds
        multiplier: Factor applied to the delay after each wait
    """

    delay_ms: int | float = DEFAULT_DELAY_MS
    multiplier: float = DEFAULT_MULTIPLIER

    def next_delay(self, current_ms: int) -> int:
        """Delay that follows a wait of ``current_ms``."""
        return int(current_ms * self.multiplier)

    def schedule(self, max_attempts: int) -> list[int]:
        """
        Waits performed by a run that fails on every one of ``max_attempts``.

        Args:
            max_attempts: Total attempts, including the first

        Returns:
            ``max_attempts - 1`` delays in milliseconds, in order
        """
        delays: list[int] = []
        delay = int(self.delay_ms)
        for _ in range(max_attempts - 1):
            delays.append(delay)
            delay = self.next_delay(delay)
        return delays
