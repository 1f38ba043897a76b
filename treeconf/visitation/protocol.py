"""Visitor protocol for configuration trees."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from treeconf.data_model.models import ElementMetadata


if TYPE_CHECKING:
    from treeconf.configuration import Configuration


@dataclass(frozen=True)
class VisitableItem:
    """A plain value element as seen by a visitor."""

    name: str
    value: Any
    metadata: ElementMetadata


@dataclass(frozen=True)
class VisitableSubConfiguration:
    """A nested configuration element as seen by a visitor."""

    name: str
    value: "ConfigurationVisitable"
    metadata: ElementMetadata


VisitableElement = VisitableItem | VisitableSubConfiguration


@runtime_checkable
class ConfigurationVisitable(Protocol):
    """Protocol for objects which can be visited like a configuration."""

    def configuration_class(self) -> type["Configuration"]:
        """Get the type of configuration this visitable represents."""
        ...

    def iterate_elements(self) -> Iterator[VisitableElement]:
        """Iterate over the elements that can be visited, in order."""
        ...


class ConfigurationVisitor(ABC):
    """Base class for visitors of configurations.

    Calls arrive in the order
    ``begin (item | begin_sub_configuration ... end_sub_configuration)* end``.
    """

    @abstractmethod
    def begin(self, configuration_class: type["Configuration"]) -> None:
        """Called to begin a new configuration.

        Args:
            configuration_class: The type of configuration being visited.
        """

    @abstractmethod
    def item(self, name: str, value: Any, metadata: ElementMetadata) -> None:
        """Called once for each present plain value element.

        Args:
            name: The name of the element.
            value: The value of the element.
            metadata: The element metadata.
        """

    @abstractmethod
    def begin_sub_configuration(
        self,
        name: str,
        configuration_class: type["Configuration"],
        metadata: ElementMetadata,
    ) -> None:
        """Called at the start of each present nested configuration.

        Args:
            name: The name of the element.
            configuration_class: The type of the nested configuration.
            metadata: The element metadata.
        """

    @abstractmethod
    def end_sub_configuration(self) -> None:
        """Called at the end of a nested configuration."""

    @abstractmethod
    def end(self) -> None:
        """Called at the end of the configuration."""
