"""Structured configuration trees with whole-tree validation.

Configurations are ordered collections of named elements, validated as a
whole, reconfigurable in bulk with rollback, and finalisable to read-only.
"""

from treeconf.absence import if_absent, if_not_absent
from treeconf.configurable import (
    Configurable,
    ConfigurableRegistry,
    class_matches_configuration,
    get_configuration_class,
    register,
)
from treeconf.configuration import Configuration
from treeconf.data_model import ElementMetadata
from treeconf.elements import (
    ConfigurationElement,
    ConfigurationItem,
    SubConfiguration,
    item,
    sub_configuration,
)
from treeconf.errors import (
    AbsentValueError,
    ClearRequiredValueError,
    ConfigurableNotRegisteredError,
    ConfigurableRegistrationError,
    ConfigurationError,
    ConfigurationErrorKind,
    ElementRegistrationError,
    InitialisationError,
    IntegrityError,
    IntermediateStateError,
    MissingDefaultError,
    NoDefaultConstructorError,
    NoSuchElementError,
    NotNavigableError,
    ReadOnlyModificationError,
    UnrelatedConfigurationsError,
    VisitationError,
)
from treeconf.hierarchy import (
    configuration_super_class,
    find_common_configuration_type,
    get_common_configuration_elements,
)
from treeconf.presence import ABSENT, DefaultState, Present
from treeconf.state_machine import LifecyclePhase
from treeconf.visitation import (
    ConfigurationReader,
    ConfigurationVisitable,
    ConfigurationVisitor,
    SafeVisitable,
    read_configuration,
    visit,
)


__all__ = [
    "ABSENT",
    "AbsentValueError",
    "ClearRequiredValueError",
    "Configurable",
    "ConfigurableNotRegisteredError",
    "ConfigurableRegistrationError",
    "ConfigurableRegistry",
    "Configuration",
    "ConfigurationElement",
    "ConfigurationError",
    "ConfigurationErrorKind",
    "ConfigurationItem",
    "ConfigurationReader",
    "ConfigurationVisitable",
    "ConfigurationVisitor",
    "DefaultState",
    "ElementMetadata",
    "ElementRegistrationError",
    "InitialisationError",
    "IntegrityError",
    "IntermediateStateError",
    "LifecyclePhase",
    "MissingDefaultError",
    "NoDefaultConstructorError",
    "NoSuchElementError",
    "NotNavigableError",
    "Present",
    "ReadOnlyModificationError",
    "SafeVisitable",
    "SubConfiguration",
    "UnrelatedConfigurationsError",
    "VisitationError",
    "class_matches_configuration",
    "configuration_super_class",
    "find_common_configuration_type",
    "get_common_configuration_elements",
    "get_configuration_class",
    "if_absent",
    "if_not_absent",
    "item",
    "read_configuration",
    "register",
    "sub_configuration",
    "visit",
]
