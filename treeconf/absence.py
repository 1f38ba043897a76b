"""Combinators for reading values which may be absent.

Example:
    if_not_absent(lambda: source.get_value("size")).then(
        lambda size: target.set_value("size", size)
    ).otherwise(lambda: target.clear_value("size"))
"""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from treeconf.errors import AbsentValueError
from treeconf.presence import ABSENT, Presence, Present


T = TypeVar("T")


class OtherwiseContinuation:
    """Runs an action only if the preceding branch did not run."""

    def __init__(self, handled: bool) -> None:
        self._handled = handled

    def otherwise(self, action: Callable[[], Any]) -> None:
        """Run action if the preceding branch was skipped."""
        if not self._handled:
            action()


class PresentContinuation(Generic[T]):
    """Continuation taken when an accessed value is present."""

    def __init__(self, outcome: Presence) -> None:
        self._outcome = outcome

    def then(self, action: Callable[[T], Any]) -> OtherwiseContinuation:
        """Run action with the value if it was present."""
        if isinstance(self._outcome, Present):
            action(self._outcome.value)
            return OtherwiseContinuation(handled=True)
        return OtherwiseContinuation(handled=False)


class AbsentContinuation:
    """Continuation taken when an accessed value is absent."""

    def __init__(self, outcome: Presence) -> None:
        self._outcome = outcome

    def then(self, action: Callable[[], Any]) -> OtherwiseContinuation:
        """Run action if the value was absent."""
        if self._outcome is ABSENT:
            action()
            return OtherwiseContinuation(handled=True)
        return OtherwiseContinuation(handled=False)


def _access(accessor: Callable[[], Any]) -> Presence:
    try:
        return Present(accessor())
    except AbsentValueError:
        return ABSENT


def if_not_absent(accessor: Callable[[], T]) -> PresentContinuation[T]:
    """Access a value, continuing with then() only if it is not absent.

    Args:
        accessor: Reads an element value, possibly raising AbsentValueError.

    Returns:
        A continuation whose then() runs when the value is present.
    """
    return PresentContinuation(_access(accessor))


def if_absent(accessor: Callable[[], Any]) -> AbsentContinuation:
    """Access a value, continuing with then() only if it is absent."""
    return AbsentContinuation(_access(accessor))
