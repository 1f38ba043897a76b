"""Registry binding configurable classes to their configuration classes."""

from collections.abc import Callable
from typing import TypeVar

import structlog

from treeconf.configuration import Configuration
from treeconf.constants import COMPONENT_CONFIGURABLE
from treeconf.errors import (
    ConfigurableNotRegisteredError,
    ConfigurableRegistrationError,
)


logger = structlog.get_logger()

T = TypeVar("T", bound=type)


# Module-level singleton state
_registry_instance: "ConfigurableRegistry | None" = None


class ConfigurableRegistry:
    """Registry of configurable classes and the configuration each takes.

    Lookups walk the method resolution order, so a subclass of a
    registered configurable inherits its registration. Use get_instance()
    for singleton access.
    """

    def __init__(self) -> None:
        """Initialize the registry."""
        self._registrations: dict[type, type[Configuration]] = {}
        self._log = logger.bind(component=COMPONENT_CONFIGURABLE)

    @classmethod
    def get_instance(cls) -> "ConfigurableRegistry":
        """Get the singleton instance.

        Returns:
            The shared ConfigurableRegistry instance.
        """
        global _registry_instance  # noqa: PLW0603
        if _registry_instance is None:
            _registry_instance = cls()
        return _registry_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _registry_instance  # noqa: PLW0603
        _registry_instance = None

    def register(
        self, configurable_class: type, configuration_class: type[Configuration]
    ) -> None:
        """Register the configuration class a configurable class takes.

        Args:
            configurable_class: The configurable class.
            configuration_class: The configuration class it takes.

        Raises:
            ConfigurableRegistrationError: If registered with a different class already.
        """
        existing = self._registrations.get(configurable_class)
        if existing is not None and existing is not configuration_class:
            raise ConfigurableRegistrationError(
                configurable_class, existing, configuration_class
            )

        self._registrations[configurable_class] = configuration_class
        self._log.debug(
            "configurable_registered",
            configurable=configurable_class.__qualname__,
            configuration=configuration_class.__qualname__,
        )

    def unregister(self, configurable_class: type) -> bool:
        """Unregister a configurable class.

        Returns:
            True if the class was unregistered, False if not found.
        """
        if configurable_class in self._registrations:
            del self._registrations[configurable_class]
            self._log.debug(
                "configurable_unregistered",
                configurable=configurable_class.__qualname__,
            )
            return True
        return False

    def get_configuration_class(self, configurable_class: type) -> type[Configuration]:
        """Get the configuration class for a configurable class.

        Raises:
            ConfigurableNotRegisteredError: If neither the class nor a base
                is registered.
        """
        for klass in configurable_class.__mro__:
            configuration_class = self._registrations.get(klass)
            if configuration_class is not None:
                return configuration_class
        raise ConfigurableNotRegisteredError(configurable_class)

    def is_registered(self, configurable_class: type) -> bool:
        """Check if a configuration class can be found for a configurable class."""
        return any(klass in self._registrations for klass in configurable_class.__mro__)


def register(configuration_class: type[Configuration]) -> Callable[[T], T]:
    """Class decorator registering a configurable with its configuration class.

    Example:
        @register(ServerConfiguration)
        class Server(Configurable[ServerConfiguration]):
            ...
    """

    def decorator(configurable_class: T) -> T:
        ConfigurableRegistry.get_instance().register(
            configurable_class, configuration_class
        )
        return configurable_class

    return decorator


def get_configuration_class(configurable_class: type) -> type[Configuration]:
    """Get the registered configuration class of a configurable class."""
    return ConfigurableRegistry.get_instance().get_configuration_class(
        configurable_class
    )
