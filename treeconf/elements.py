"""Configuration elements: the named slots of a configuration.

Elements are declared on a Configuration subclass with ``item(...)`` and
``sub_configuration(...)``. Each declaration is a descriptor collected once
when the class is created; every instance then registers its own element
objects, which hold the current value, the default supplier and the
optional flag.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any

from treeconf.data_model.models import ElementMetadata
from treeconf.errors import (
    AbsentValueError,
    ClearRequiredValueError,
    InitialisationError,
    IntegrityError,
    MissingDefaultError,
    ReadOnlyModificationError,
)
from treeconf.presence import ABSENT, DefaultState, Presence, Present
from treeconf.state_machine import LifecyclePhase


if TYPE_CHECKING:
    from treeconf.configuration import Configuration


DefaultSupplier = Callable[[], Any]


class ConfigurationElement(ABC):
    """Base class for the elements registered with a configuration."""

    def __init__(
        self,
        owner: "Configuration",
        name: str,
        metadata: ElementMetadata,
        *,
        optional: bool = False,
        default: DefaultSupplier | None = None,
    ) -> None:
        """Initialize the element.

        Args:
            owner: The configuration the element belongs to.
            name: Name of the element within its owner.
            metadata: Descriptive record passed on to visitors.
            optional: Whether the element may hold no value.
            default: Zero-argument supplier of the default value.
        """
        self._owner = owner
        self._name = name
        self._metadata = metadata
        self._optional = optional
        self._default = default
        self._default_state = (
            DefaultState.PENDING if default is not None else DefaultState.RESOLVED
        )
        self._actual: Presence = ABSENT

    @property
    def owner(self) -> "Configuration":
        """Get the owning configuration."""
        return self._owner

    @property
    def name(self) -> str:
        """Get the element name."""
        return self._name

    @property
    def metadata(self) -> ElementMetadata:
        """Get the element metadata."""
        return self._metadata

    @property
    def optional(self) -> bool:
        """Check if the element may be absent."""
        return self._optional

    @property
    def default_state(self) -> DefaultState:
        """Get the state of the default supplier."""
        return self._default_state

    @property
    def actual(self) -> Presence:
        """Get the stored value without applying any pending default."""
        return self._actual

    def get(self) -> Any:
        """Get the current value of the element.

        Returns:
            The current value.

        Raises:
            InitialisationError: If the owner has not started initialising.
            AbsentValueError: If the element holds no value.
        """
        if not (self._owner.initialising or self._owner.initialised):
            raise InitialisationError(
                f"Attempted to read '{self._name}' "
                f"({type(self._owner).__qualname__}) before initialisation"
            )

        self.apply_default()

        if isinstance(self._actual, Present):
            return self._actual.value
        raise AbsentValueError(self._name)

    def set(self, value: Any) -> None:
        """Set the value of the element.

        Args:
            value: The new value.

        Raises:
            ReadOnlyModificationError: If the owner is finalised.
            InitialisationError: If the owner is not yet writable.
            IntegrityError: If the new value violates the owner's integrity.
        """
        self._modify(lambda: Present(self.prep_value(value)))

    def clear(self) -> None:
        """Clear the value of the element.

        Raises:
            ClearRequiredValueError: If the element is not optional.
            ReadOnlyModificationError: If the owner is finalised.
            InitialisationError: If the owner is not yet writable.
            IntegrityError: If clearing violates the owner's integrity.
        """
        if not self._optional:
            raise ClearRequiredValueError(self._name)

        self._modify(lambda: ABSENT)

    def apply_default(self) -> None:
        """Run the default supplier if it is still pending.

        Raises:
            MissingDefaultError: If a required element has no value and no default.
        """
        if self._default_state is DefaultState.PENDING and self._default is not None:
            self.set(self._default())
            return

        if not self._optional and self._actual is ABSENT:
            raise MissingDefaultError(self._name, type(self._owner))

    def restore(self, previous: Presence) -> None:
        """Put back a value recorded in the owner's restore point."""
        self._actual = previous

    @abstractmethod
    def prep_value(self, value: Any) -> Any:
        """Prepare an incoming value before it is stored."""

    def _modify(self, supplier: Callable[[], Presence]) -> None:
        """Common gating for set/clear.

        Args:
            supplier: Produces the new stored value.
        """
        owner = self._owner

        if owner.finalised:
            raise ReadOnlyModificationError()

        if not owner.writable:
            raise InitialisationError(
                f"Attempted to modify value of '{self._name}' "
                f"({type(owner).__qualname__}) before initialisation"
            )

        if owner.integrity_checks_suspended:
            self._modify_bulk(supplier)
        else:
            self._modify_single(supplier)

        self._default_state = DefaultState.RESOLVED

    def _modify_single(self, supplier: Callable[[], Presence]) -> None:
        """Modify and immediately check the integrity of the owner."""
        current = self._actual
        self._actual = supplier()

        try:
            self._owner.perform_integrity_check()
        except IntegrityError:
            self._actual = current
            raise

    def _modify_bulk(self, supplier: Callable[[], Presence]) -> None:
        """Modify, deferring the integrity check to the end of the transaction."""
        updated = supplier()
        if self._owner.has_restore_point(self._name):
            self._superseded(self._actual)
        self._owner.set_restore_point(self._name, self._actual)
        self._actual = updated
        self._joined(updated)

    def _joined(self, stored: Presence) -> None:  # noqa: B027
        """Hook called after a value is stored during bulk modification."""

    def _superseded(self, stored: Presence) -> None:  # noqa: B027
        """Hook called when a value stored earlier in the transaction is replaced."""


class ConfigurationItem(ConfigurationElement):
    """Element holding a plain value."""

    def prep_value(self, value: Any) -> Any:
        return value


class SubConfiguration(ConfigurationElement):
    """Element holding a nested configuration.

    The stored configuration is a private copy owned by this element. It is
    only shared by reference when both the owner and the incoming value are
    finalised.
    """

    def __init__(
        self,
        owner: "Configuration",
        name: str,
        metadata: ElementMetadata,
        configuration_class: type["Configuration"],
        *,
        optional: bool = False,
        default: DefaultSupplier | None = None,
    ) -> None:
        super().__init__(owner, name, metadata, optional=optional, default=default)
        self._configuration_class = configuration_class

    @property
    def configuration_class(self) -> type["Configuration"]:
        """Get the declared class of the nested configuration."""
        return self._configuration_class

    def current_configuration(self) -> "Configuration | None":
        """Get the stored configuration, if any, without applying defaults."""
        if isinstance(self._actual, Present):
            configuration: Configuration = self._actual.value
            return configuration
        return None

    def prep_value(self, value: Any) -> "Configuration":
        """Clone the incoming configuration unless it can be shared.

        Args:
            value: The configuration being assigned.

        Returns:
            The configuration to store.

        Raises:
            TypeError: If value is not an instance of the declared class.
            InitialisationError: If value is not initialised.
            IntermediateStateError: If value is initialising or reconfiguring.
        """
        if not isinstance(value, self._configuration_class):
            raise TypeError(
                f"Element '{self._name}' expects a "
                f"{self._configuration_class.__qualname__}, "
                f"got {type(value).__qualname__}"
            )

        value.ensure_integrity()

        if self._owner.finalised and value.finalised:
            return value

        clone = value.clone()
        if self._owner.finalised:
            clone.finalise()
        return clone

    def finalise_value(self) -> None:
        """Finalise the stored configuration in place."""
        configuration = self.current_configuration()
        if configuration is not None and not configuration.finalised:
            configuration.finalise()

    def _joined(self, stored: Presence) -> None:
        # A value assigned mid-transaction takes part in the same transaction
        if (
            isinstance(stored, Present)
            and self._owner.lifecycle_phase is LifecyclePhase.RECONFIGURING
        ):
            stored.value.enter_reconfiguration()

    def _superseded(self, stored: Presence) -> None:
        # Only ever seen by this transaction, so nothing of it is kept
        if (
            isinstance(stored, Present)
            and stored.value.lifecycle_phase is LifecyclePhase.RECONFIGURING
        ):
            stored.value._rollback_reconfiguration()


class ElementDescriptor(ABC):
    """Class-level declaration of a configuration element.

    Reading, assigning and deleting the attribute on an instance get, set
    and clear the instance's element of the same name.
    """

    def __init__(
        self,
        *,
        description: str,
        optional: bool = False,
        default: DefaultSupplier | None = None,
    ) -> None:
        self.metadata = ElementMetadata(description=description)
        self.optional = optional
        self.default = default
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(
        self, instance: "Configuration | None", owner: type | None = None
    ) -> Any:
        if instance is None:
            return self
        return instance.element(self.name).get()

    def __set__(self, instance: "Configuration", value: Any) -> None:
        instance.element(self.name).set(value)

    def __delete__(self, instance: "Configuration") -> None:
        instance.element(self.name).clear()

    @abstractmethod
    def create_element(self, owner: "Configuration") -> ConfigurationElement:
        """Create the element registered on a new configuration instance."""


class ItemDescriptor(ElementDescriptor):
    """Declaration of a plain value element."""

    def create_element(self, owner: "Configuration") -> ConfigurationItem:
        return ConfigurationItem(
            owner,
            self.name,
            self.metadata,
            optional=self.optional,
            default=self.default,
        )


class SubConfigurationDescriptor(ElementDescriptor):
    """Declaration of a nested configuration element."""

    def __init__(
        self,
        configuration_class: type["Configuration"],
        *,
        description: str,
        optional: bool = False,
        default: DefaultSupplier | None = None,
    ) -> None:
        super().__init__(description=description, optional=optional, default=default)
        self.configuration_class = configuration_class

    def create_element(self, owner: "Configuration") -> SubConfiguration:
        return SubConfiguration(
            owner,
            self.name,
            self.metadata,
            self.configuration_class,
            optional=self.optional,
            default=self.default,
        )


_NO_DEFAULT = object()


def _constant(value: Any) -> DefaultSupplier:
    """Wrap a fixed value as a default supplier."""

    def supplier() -> Any:
        return value

    return supplier


def item(
    *,
    description: str,
    optional: bool = False,
    default: Any = _NO_DEFAULT,
    default_factory: DefaultSupplier | None = None,
) -> Any:
    """Declare a plain value element on a Configuration subclass.

    Args:
        description: Human-readable description of the element.
        optional: Whether the element may hold no value.
        default: Default value, used if the element is never set.
        default_factory: Zero-argument supplier of the default value.

    Returns:
        The element descriptor.

    Raises:
        ValueError: If both default and default_factory are given.
    """
    if default is not _NO_DEFAULT and default_factory is not None:
        raise ValueError("Cannot specify both default and default_factory")

    supplier = default_factory
    if default is not _NO_DEFAULT:
        supplier = _constant(default)

    return ItemDescriptor(description=description, optional=optional, default=supplier)


def sub_configuration(
    configuration_class: type["Configuration"],
    *,
    description: str,
    optional: bool = False,
    initializer: Callable[[Any], None] | None = None,
    default: "Configuration | None" = None,
) -> Any:
    """Declare a nested configuration element on a Configuration subclass.

    A required element without an explicit default is initialised from a
    freshly built configuration_class. An optional element only gets a
    default when one is given.

    Args:
        configuration_class: Class of the nested configuration.
        description: Human-readable description of the element.
        optional: Whether the element may hold no value.
        initializer: Initialiser for the default nested configuration.
        default: Configuration whose copy becomes the default value.

    Returns:
        The element descriptor.

    Raises:
        ValueError: If both initializer and default are given.
    """
    if initializer is not None and default is not None:
        raise ValueError("Cannot specify both initializer and default")

    supplier: DefaultSupplier | None = None
    if default is not None:
        supplier = _constant(default)
    elif initializer is not None or not optional:
        supplier = partial(configuration_class.initialise, initializer)

    return SubConfigurationDescriptor(
        configuration_class,
        description=description,
        optional=optional,
        default=supplier,
    )
