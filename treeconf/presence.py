"""Explicit presence model for element values and default suppliers."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Final


class _AbsentType(Enum):
    """Marker type for a value that is not present."""

    ABSENT = auto()

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Final = _AbsentType.ABSENT


@dataclass(frozen=True)
class Present:
    """A value that is present (which may itself be None).

    Attributes:
        value: The wrapped value.
    """

    value: Any


Presence = Present | _AbsentType


class DefaultState(Enum):
    """State of an element's default-value supplier.

    PENDING: The supplier has not run and no explicit value was set.
    RESOLVED: The supplier ran, the element was written explicitly,
        or there never was a supplier.
    """

    PENDING = auto()
    RESOLVED = auto()
