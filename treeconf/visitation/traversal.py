"""Depth-first traversal of visitable configurations."""

from collections.abc import Iterator
from typing import TYPE_CHECKING, TypeVar

from treeconf.visitation.protocol import (
    ConfigurationVisitable,
    ConfigurationVisitor,
    VisitableElement,
    VisitableItem,
)


if TYPE_CHECKING:
    from treeconf.configuration import Configuration


V = TypeVar("V", bound=ConfigurationVisitor)


def visit(visitable: ConfigurationVisitable, visitor: V) -> V:
    """Drive a visitor over a visitable configuration.

    The root is wrapped in a single begin/end pair.

    Args:
        visitable: The configuration (or proxy) to traverse.
        visitor: The visitor receiving the calls.

    Returns:
        The visitor, for chaining.
    """
    visitor.begin(visitable.configuration_class())
    visit_no_begin(visitable, visitor)
    visitor.end()
    return visitor


def visit_no_begin(
    visitable: ConfigurationVisitable, visitor: ConfigurationVisitor
) -> None:
    """Traverse without begin/end so nested levels can share the code."""
    for element in visitable.iterate_elements():
        if isinstance(element, VisitableItem):
            visitor.item(element.name, element.value, element.metadata)
            continue

        sub = element.value
        visitor.begin_sub_configuration(
            element.name, sub.configuration_class(), element.metadata
        )
        visit_no_begin(sub, visitor)
        visitor.end_sub_configuration()


class SafeVisitable:
    """Read-only view of a configuration exposing only the visitable surface."""

    __slots__ = ("_configuration",)

    def __init__(self, configuration: "Configuration") -> None:
        self._configuration = configuration

    def configuration_class(self) -> type["Configuration"]:
        return self._configuration.configuration_class()

    def iterate_elements(self) -> Iterator[VisitableElement]:
        return self._configuration.iterate_elements()

    def __repr__(self) -> str:
        return f"SafeVisitable({type(self._configuration).__qualname__})"
