"""Helpers relating configuration types through inheritance."""

from functools import cache

from treeconf.configuration import Configuration
from treeconf.errors import UnrelatedConfigurationsError


@cache
def configuration_super_class(
    configuration_class: type[Configuration],
) -> type[Configuration]:
    """Get the configuration class that the given class sub-types.

    Args:
        configuration_class: A subclass of Configuration.

    Returns:
        The first base class which is itself a Configuration.

    Raises:
        ValueError: If called with Configuration itself.
    """
    if configuration_class is Configuration:
        raise ValueError("Configuration has no configuration super-class")

    for base in configuration_class.__bases__:
        if issubclass(base, Configuration):
            return base

    raise ValueError(f"{configuration_class.__qualname__} is not a configuration class")


def find_common_configuration_type(
    first: type[Configuration],
    second: type[Configuration],
) -> type[Configuration]:
    """Find the closest common ancestor of two configuration classes.

    Args:
        first: One of the configuration classes.
        second: The other configuration class.

    Returns:
        The common base class of the two arguments.
    """
    if issubclass(first, second):
        return second
    if issubclass(second, first):
        return first
    return find_common_configuration_type(
        configuration_super_class(first),
        configuration_super_class(second),
    )


def get_common_configuration_elements(
    first: Configuration,
    second: Configuration,
) -> tuple[str, ...]:
    """Get the names of the elements two configurations share.

    Only configurations whose types are in a linear inheritance
    relationship are supported; the ancestor's names are returned.

    Args:
        first: One configuration.
        second: The other configuration.

    Returns:
        Element names in the ancestor's declaration order.

    Raises:
        UnrelatedConfigurationsError: If neither type derives from the other.
    """
    first_class = type(first)
    second_class = type(second)

    if issubclass(first_class, second_class):
        return second.ordered_element_names
    if issubclass(second_class, first_class):
        return first.ordered_element_names
    raise UnrelatedConfigurationsError(first_class, second_class)
