"""Common integrity checks for configurations holding configurable classes."""

from treeconf.configurable.base import Configurable
from treeconf.configurable.registry import ConfigurableRegistry
from treeconf.configuration import Configuration


def class_matches_configuration(cls: type, configuration: Configuration) -> str | None:
    """Check if a class is a Configurable which accepts the given configuration.

    Intended for use inside ``Configuration.check_integrity``.

    Args:
        cls: The class of configurable.
        configuration: The configuration to instantiate the class with.

    Returns:
        None if the class can be instantiated, or the reason it can't.
    """
    if not issubclass(cls, Configurable):
        return f"{cls.__qualname__} is not configurable"

    registry = ConfigurableRegistry.get_instance()
    if not registry.is_registered(cls):
        return f"{cls.__qualname__} is not registered"

    required = registry.get_configuration_class(cls)
    actual = type(configuration)

    if not issubclass(actual, required):
        return (
            f"The configuration for {cls.__qualname__} should be a "
            f"{required.__qualname__} but is a {actual.__qualname__} instead"
        )
    return None
