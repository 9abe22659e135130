"""Failure-kind matching for retry inclusion sets.

A matcher is either an exception class, matched with ``isinstance`` so that
subclasses and ABC-registered types count, or a predicate taking the failure
and returning a bool. Matching never looks at the message text.
"""

import importlib
import inspect
from collections.abc import Callable, Iterable
from typing import Union

from retrykit.domain.exceptions import ConfigurationError

FailurePredicate = Callable[[BaseException], bool]
FailureMatcher = Union[type[BaseException], FailurePredicate]


def is_exception_type(matcher: object) -> bool:
    return inspect.isclass(matcher) and issubclass(matcher, BaseException)


def is_valid_matcher(matcher: object) -> bool:
    """Check if an object can be used as an inclusion-set entry.

    Classes that are not exceptions are rejected even though they are callable.
    """
    if inspect.isclass(matcher):
        return issubclass(matcher, BaseException)
    return callable(matcher)


def matches(failure: BaseException, matcher: FailureMatcher) -> bool:
    """Return True if ``failure`` belongs to the kind described by ``matcher``."""
    if is_exception_type(matcher):
        return isinstance(failure, matcher)
    return bool(matcher(failure))


def matches_any(failure: BaseException, matchers: Iterable[FailureMatcher]) -> bool:
    """Evaluate matchers in order and stop at the first match."""
    return any(matches(failure, matcher) for matcher in matchers)


def resolve_matcher(path: str) -> type[BaseException]:
    """Resolve a dotted path such as ``"socket.timeout"`` to an exception class.

    Bare names (``"TimeoutError"``) are looked up in ``builtins``.

    Raises:
        ConfigurationError: If the path cannot be imported or does not name an
            exception class
    """
    path = path.strip()
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        module_name = "builtins"

    try:
        module = importlib.import_module(module_name)
        resolved = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(
            f"include entry {path!r} cannot be resolved: {e}",
            field="include",
            value=path,
        ) from e

    if not is_exception_type(resolved):
        raise ConfigurationError(
            f"include entry {path!r} is not an exception class",
            field="include",
            value=path,
        )
    return resolved


def describe_matcher(matcher: FailureMatcher) -> str:
    """Qualified name of a matcher, for logs and serialisation."""
    module = getattr(matcher, "__module__", None)
    name = getattr(matcher, "__qualname__", None) or repr(matcher)
    if module in (None, "builtins"):
        return name
    return f"{module}.{name}"
