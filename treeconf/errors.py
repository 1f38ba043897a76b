"""Error types for the configuration framework.

Every failure the core raises derives from ConfigurationError and carries an
error kind, so callers can either catch a specific class or dispatch on the
kind when logging.
"""

from enum import Enum


class ConfigurationErrorKind(str, Enum):
    """Classification of configuration errors.

    - NOT_INITIALISED: Used before initialisation completed
    - INTERMEDIATE_STATE: Used while initialising or reconfiguring
    - READ_ONLY: Modification of a finalised configuration
    - ABSENT_VALUE: Read of an optional element with no value
    - REQUIRED_VALUE_CLEAR: Clear of a non-optional element
    - NOT_NAVIGABLE: Dotted path through a plain item
    - UNKNOWN_ELEMENT: Name not registered on the configuration
    - INTEGRITY: Integrity check rejected the configuration
    - MISSING_DEFAULT: Required element with neither value nor default
    - REGISTRATION: Invalid element or configurable registration
    - HIERARCHY: Configuration types without a linear relationship
    - VISITATION: Visitor protocol used out of order
    """

    NOT_INITIALISED = "NOT_INITIALISED"
    INTERMEDIATE_STATE = "INTERMEDIATE_STATE"
    READ_ONLY = "READ_ONLY"
    ABSENT_VALUE = "ABSENT_VALUE"
    REQUIRED_VALUE_CLEAR = "REQUIRED_VALUE_CLEAR"
    NOT_NAVIGABLE = "NOT_NAVIGABLE"
    UNKNOWN_ELEMENT = "UNKNOWN_ELEMENT"
    INTEGRITY = "INTEGRITY"
    MISSING_DEFAULT = "MISSING_DEFAULT"
    REGISTRATION = "REGISTRATION"
    HIERARCHY = "HIERARCHY"
    VISITATION = "VISITATION"


class ConfigurationError(Exception):
    """Base exception for configuration errors.

    Provides structured error information for logging.
    """

    error_kind: ConfigurationErrorKind = ConfigurationErrorKind.REGISTRATION

    def __init__(self, message: str) -> None:
        """Initialize the configuration error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_kind": self.error_kind.value,
            "error_type": type(self).__name__,
            "message": self.message,
        }


class InitialisationError(ConfigurationError):
    """Raised when a configuration is used before it is initialised.

    Also raised when initialisation is attempted a second time.
    """

    error_kind = ConfigurationErrorKind.NOT_INITIALISED


class MissingDefaultError(InitialisationError):
    """Raised when a required element has neither a value nor a default."""

    error_kind = ConfigurationErrorKind.MISSING_DEFAULT

    def __init__(self, name: str, configuration_class: type) -> None:
        """Initialize the error.

        Args:
            name: Name of the element that has no value.
            configuration_class: Class of the owning configuration.
        """
        self.name = name
        self.configuration_class = configuration_class
        super().__init__(
            f"Configuration element '{name}' of {configuration_class.__qualname__} "
            "has no default initialiser and wasn't set explicitly"
        )


class IntermediateStateError(ConfigurationError):
    """Raised when a configuration in an intermediate state is used.

    Intermediate states are INITIALISING and RECONFIGURING, where the
    integrity of the configuration has not been checked yet.
    """

    error_kind = ConfigurationErrorKind.INTERMEDIATE_STATE

    def __init__(
        self,
        message: str = "Attempted to use a configuration in an intermediate state",
    ) -> None:
        super().__init__(message)


class ReadOnlyModificationError(ConfigurationError):
    """Raised when a finalised configuration is modified."""

    error_kind = ConfigurationErrorKind.READ_ONLY

    def __init__(
        self, message: str = "Attempted to modify a read-only configuration"
    ) -> None:
        super().__init__(message)


class AbsentValueError(ConfigurationError):
    """Raised when reading an optional element that holds no value."""

    error_kind = ConfigurationErrorKind.ABSENT_VALUE

    def __init__(self, name: str) -> None:
        """Initialize the error.

        Args:
            name: Name (possibly dotted) of the absent element.
        """
        self.name = name
        super().__init__(f"Configuration element {name} is absent")


class ClearRequiredValueError(ConfigurationError):
    """Raised when clearing an element that is not optional."""

    error_kind = ConfigurationErrorKind.REQUIRED_VALUE_CLEAR

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Attempted to clear non-optional element '{name}'")


class NotNavigableError(ConfigurationError):
    """Raised when a dotted path passes through a plain item.

    Only sub-configurations have sub-elements to navigate into.
    """

    error_kind = ConfigurationErrorKind.NOT_NAVIGABLE

    def __init__(self, full_name: str, problem_element: str) -> None:
        """Initialize the error.

        Args:
            full_name: The full dotted name that was being navigated.
            problem_element: The segment of full_name that is not navigable.
        """
        self.full_name = full_name
        self.problem_element = problem_element
        super().__init__(
            f"{problem_element} is not a sub-configuration, and therefore "
            f"can't have sub-members (in {full_name})"
        )


class NoSuchElementError(ConfigurationError):
    """Raised when a name is not registered on a configuration."""

    error_kind = ConfigurationErrorKind.UNKNOWN_ELEMENT

    def __init__(self, name: str, problem_element: str | None = None) -> None:
        """Initialize the error.

        Args:
            name: The full (possibly dotted) name being resolved.
            problem_element: The segment that wasn't found, if different.
        """
        self.name = name
        self.problem_element = problem_element or name
        super().__init__(f"No config item named {self.problem_element} (in {name})")


class IntegrityError(ConfigurationError):
    """Raised when the integrity check of a configuration fails."""

    error_kind = ConfigurationErrorKind.INTEGRITY

    def __init__(self, reason: str) -> None:
        """Initialize the error.

        Args:
            reason: The reason returned by the integrity check.
        """
        self.reason = reason
        super().__init__(reason)


class ElementRegistrationError(ConfigurationError):
    """Raised when an element name is registered twice on a configuration."""

    def __init__(self, name: str, configuration_class: type) -> None:
        self.name = name
        self.configuration_class = configuration_class
        super().__init__(
            f"Element '{name}' is already registered on "
            f"{configuration_class.__qualname__}"
        )


class NoDefaultConstructorError(ConfigurationError):
    """Raised when a configuration class cannot be built without arguments."""

    def __init__(self, configuration_class: type) -> None:
        self.configuration_class = configuration_class
        super().__init__(
            f"{configuration_class.__qualname__} has no default constructor "
            "(one which takes no arguments)"
        )


class ConfigurableNotRegisteredError(ConfigurationError):
    """Raised when a configurable class has no registered configuration class."""

    def __init__(self, configurable_class: type) -> None:
        self.configurable_class = configurable_class
        super().__init__(
            f"{configurable_class.__qualname__} is not registered. "
            "Decorate it with treeconf.configurable.register(configuration_class)"
        )


class ConfigurableRegistrationError(ConfigurationError):
    """Raised when a configurable class is registered with two configurations."""

    def __init__(
        self,
        configurable_class: type,
        registered: type,
        requested: type,
    ) -> None:
        self.configurable_class = configurable_class
        self.registered = registered
        self.requested = requested
        super().__init__(
            f"{configurable_class.__qualname__} is already registered with "
            f"{registered.__qualname__}, not {requested.__qualname__}"
        )


class UnrelatedConfigurationsError(ConfigurationError):
    """Raised when two configuration types have no linear relationship.

    Common elements can only be determined between a type and one of its
    ancestors.
    """

    error_kind = ConfigurationErrorKind.HIERARCHY

    def __init__(self, first: type, second: type) -> None:
        self.first = first
        self.second = second
        super().__init__(
            "Can only get common elements from configurations with a linear "
            f"inheritance relationship ({first.__qualname__}, {second.__qualname__})"
        )


class VisitationError(ConfigurationError):
    """Raised when the visitor protocol is driven out of order."""

    error_kind = ConfigurationErrorKind.VISITATION
