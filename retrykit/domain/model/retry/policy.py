"""Retry Policy - validated, immutable description of retry behaviour.

A policy answers two questions for the executor: how many attempts are
allowed and how long to wait between them, and whether a given failure is
worth another attempt at all.
"""

import math
import numbers
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from retrykit.domain.exceptions import ConfigurationError
from retrykit.domain.model.retry.backoff import DEFAULT_DELAY_MS, DEFAULT_MULTIPLIER, Backoff
from retrykit.domain.model.retry.matchers import (
    FailureMatcher,
    describe_matcher,
    is_valid_matcher,
    matches_any,
    resolve_matcher,
)

if TYPE_CHECKING:
    from retrykit.configuration.config import RetrySettings

DEFAULT_MAX_ATTEMPTS = 3


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry policy with exponential backoff.

    Validation runs once, at construction time. An invalid policy raises
    ``ConfigurationError`` and never reaches an executor.

    Example:
        policy = RetryPolicy(
            include=(TimeoutError, ConnectionError),
            max_attempts=5,
            initial_delay_ms=200,
            multiplier=2.0,
        )
        policy.is_retryable(TimeoutError())  # True

    Attributes:
        include: Failure kinds that trigger another attempt (exception classes
            or predicates). Must not be empty.
        max_attempts: Total number of attempts, including the first
        initial_delay_ms: Wait before the second attempt, in milliseconds
        multiplier: Factor applied to the wait after each retry
    """

    include: tuple[FailureMatcher, ...]
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay_ms: int = DEFAULT_DELAY_MS
    multiplier: float = DEFAULT_MULTIPLIER
    backoff: Backoff = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Accept any iterable of matchers but store an ordered tuple
        include = self.include
        if is_valid_matcher(include) or isinstance(include, (str, bytes)):
            include = (include,)
        elif isinstance(include, Iterable):
            include = tuple(include)
        object.__setattr__(self, "include", include)

        self.validate()
        # Waits are whole milliseconds, truncated toward zero
        object.__setattr__(self, "initial_delay_ms", int(self.initial_delay_ms))
        object.__setattr__(self, "backoff", Backoff(self.initial_delay_ms, self.multiplier))

    def validate(self) -> None:
        """Validate every field.

        Raises:
            ConfigurationError: With ``field`` set to the first invalid field
        """
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise ConfigurationError(
                f"max_attempts must be an integer, but was: {self.max_attempts!r}",
                field="max_attempts",
                value=self.max_attempts,
            )
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be at least 1, but was: {self.max_attempts}",
                field="max_attempts",
                value=self.max_attempts,
            )

        if not isinstance(self.include, tuple) or not self.include:
            raise ConfigurationError(
                "include cannot be empty. Specify at least one exception type to retry on.",
                field="include",
                value=self.include,
            )
        for matcher in self.include:
            if not is_valid_matcher(matcher):
                raise ConfigurationError(
                    f"include entries must be exception classes or predicates, got: {matcher!r}",
                    field="include",
                    value=matcher,
                )

        if not _is_number(self.initial_delay_ms):
            raise ConfigurationError(
                f"initial_delay_ms must be a number, but was: {self.initial_delay_ms!r}",
                field="initial_delay_ms",
                value=self.initial_delay_ms,
            )
        if not math.isfinite(self.initial_delay_ms) or self.initial_delay_ms < 0:
            raise ConfigurationError(
                f"initial_delay_ms must be finite and non-negative, got: {self.initial_delay_ms}",
                field="initial_delay_ms",
                value=self.initial_delay_ms,
            )

        if (
            not _is_number(self.multiplier)
            or not math.isfinite(self.multiplier)
            or self.multiplier < 0
        ):
            raise ConfigurationError(
                f"multiplier must be a finite, non-negative number, but was: {self.multiplier!r}",
                field="multiplier",
                value=self.multiplier,
            )

    def is_retryable(self, failure: BaseException) -> bool:
        """
        Determine if a failure should trigger another attempt.

        Args:
            failure: The exception raised by the operation

        Returns:
            True if the failure matches at least one inclusion entry
        """
        return matches_any(failure, self.include)

    def with_overrides(self, **changes: Any) -> "RetryPolicy":
        """Return a new, validated policy with some fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_backoff(
        cls,
        include: Iterable[FailureMatcher],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff: Backoff | None = None,
    ) -> "RetryPolicy":
        """Create a policy from a ``Backoff`` value object."""
        backoff = backoff or Backoff()
        return cls(
            include=tuple(include),
            max_attempts=max_attempts,
            initial_delay_ms=backoff.delay_ms,
            multiplier=backoff.multiplier,
        )

    @classmethod
    def from_settings(
        cls,
        settings: "RetrySettings",
        include: Iterable[FailureMatcher] = (),
    ) -> "RetryPolicy":
        """
        Create a policy from resolved configuration values.

        Args:
            settings: Configuration surface (see ``retrykit.configuration``)
            include: Extra matchers added after the ones named in settings

        Raises:
            ConfigurationError: If a dotted path in settings cannot be resolved,
                or the resulting policy is invalid
        """
        matchers: list[FailureMatcher] = [resolve_matcher(path) for path in settings.include]
        matchers.extend(include)
        return cls(
            include=tuple(matchers),
            max_attempts=settings.max_attempts,
            initial_delay_ms=settings.initial_delay_ms,
            multiplier=settings.multiplier,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert retry policy to dictionary."""
        return {
            "max_attempts": self.max_attempts,
            "initial_delay_ms": self.initial_delay_ms,
            "multiplier": self.multiplier,
            "include": [describe_matcher(matcher) for matcher in self.include],
        }
