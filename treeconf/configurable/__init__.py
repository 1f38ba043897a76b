"""Objects configured by configurations, and their registry."""

from treeconf.configurable.base import Configurable
from treeconf.configurable.integrity import class_matches_configuration
from treeconf.configurable.registry import (
    ConfigurableRegistry,
    get_configuration_class,
    register,
)


__all__ = [
    "Configurable",
    "ConfigurableRegistry",
    "class_matches_configuration",
    "get_configuration_class",
    "register",
]
