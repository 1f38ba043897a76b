"""Base class for objects configured by a separate configuration."""

from collections.abc import Callable, Iterator
from typing import Any, Generic, Self, TypeVar, cast

from treeconf.configurable.registry import get_configuration_class
from treeconf.configuration import Configuration
from treeconf.visitation.protocol import VisitableElement


C = TypeVar("C", bound=Configuration)


class Configurable(Generic[C]):
    """Base class for types configured by a Configuration.

    Subclasses are registered with the configuration class they take
    (see ``register``). An instance is built either from an initialiser for
    a fresh configuration or from an existing configuration, whose values
    are copied. Either way the instance holds its own finalised
    configuration, and is visitable exactly like it.
    """

    def __init__(
        self, configuration: C | Callable[[C], None] | None = None
    ) -> None:
        """Initialize the configurable.

        Args:
            configuration: A configuration to copy, or an initialiser for a
                new configuration of the registered class.

        Raises:
            ConfigurableNotRegisteredError: If the class is not registered.
            IntegrityError: If the resulting configuration is compromised.
        """
        configuration_class = get_configuration_class(type(self))

        initializer: Callable[[Any], None] | None
        if isinstance(configuration, Configuration):
            initializer = configuration.as_reconfigure_block()
        else:
            initializer = configuration

        built = configuration_class.initialise(initializer).finalise()
        self._configuration = cast(C, built)

    @property
    def configuration(self) -> C:
        """Get the read-only configuration of this object."""
        return self._configuration

    def clone(self) -> Self:
        """Create another instance of this class with the same configuration."""
        return type(self)(self._configuration)

    def configuration_class(self) -> type[Configuration]:
        return self._configuration.configuration_class()

    def iterate_elements(self) -> Iterator[VisitableElement]:
        return self._configuration.iterate_elements()
