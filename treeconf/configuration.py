"""Configuration trees and their lifecycle.

A Configuration is an ordered, named collection of elements. Its lifecycle
is governed by a LifecycleStateMachine:

    UNINITIALISED -> INITIALISING -> INITIALISED <-> RECONFIGURING
    INITIALISED -> FINALISED (read-only, terminal)

Outside a transaction every modification is checked against the
configuration's integrity immediately and reverted if it fails. Inside a
transaction checks are deferred until the transaction closes, and a
failure rolls back every element touched anywhere in the tree.
"""

import inspect
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import partial
from typing import Any, ClassVar, Self

import structlog

from treeconf.absence import if_not_absent
from treeconf.constants import COMPONENT_CONFIGURATION, PATH_SEPARATOR
from treeconf.elements import (
    ConfigurationElement,
    ElementDescriptor,
    SubConfiguration,
)
from treeconf.errors import (
    AbsentValueError,
    ElementRegistrationError,
    InitialisationError,
    IntegrityError,
    IntermediateStateError,
    NoDefaultConstructorError,
    NoSuchElementError,
    NotNavigableError,
    ReadOnlyModificationError,
)
from treeconf.observability.metrics import LifecycleMetrics
from treeconf.presence import ABSENT, Presence, Present
from treeconf.state_machine import LifecyclePhase, LifecycleStateMachine
from treeconf.visitation.protocol import (
    ConfigurationVisitor,
    VisitableElement,
    VisitableItem,
    VisitableSubConfiguration,
)
from treeconf.visitation.traversal import SafeVisitable, visit


logger = structlog.get_logger()


class Configuration:
    """Base class for configuration objects.

    Subclasses declare their elements as class attributes and may override
    check_integrity() to validate the configuration as a whole. They must be
    constructible without arguments.

    Example:
        class ServerConfiguration(Configuration):
            host = item(description="Host name", default="localhost")
            port = item(description="Port", default=8080)

            def check_integrity(self) -> str | None:
                if not 0 < self.port < 65536:
                    return f"Port out of range: {self.port}"
                return None

        config = ServerConfiguration.initialise(lambda c: setattr(c, "port", 9000))
    """

    _element_descriptors: ClassVar[tuple[ElementDescriptor, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        # Ancestors first, each class in declaration order
        declared: dict[str, ElementDescriptor] = {}
        for klass in reversed(cls.__mro__):
            for attribute, value in vars(klass).items():
                if not isinstance(value, ElementDescriptor):
                    continue
                existing = declared.get(attribute)
                if existing is not None and existing is not value:
                    raise ElementRegistrationError(attribute, cls)
                declared[attribute] = value

        cls._element_descriptors = tuple(declared.values())

    def __init__(self) -> None:
        self._machine = LifecycleStateMachine(type(self).__qualname__)
        self._ordered_element_names: list[str] = []
        self._elements: dict[str, ConfigurationElement] = {}
        self._restore_point: dict[str, Presence] = {}
        self._log = logger.bind(
            component=COMPONENT_CONFIGURATION,
            configuration=type(self).__qualname__,
        )

        for descriptor in self._element_descriptors:
            self.register_element(descriptor.create_element(self))

    def __repr__(self) -> str:
        values = []
        for name in self._ordered_element_names:
            actual = self._elements[name].actual
            if actual is not ABSENT:
                values.append(f"{name}={actual.value!r}")
        return (
            f"{type(self).__qualname__}(phase={self.lifecycle_phase.name}"
            + "".join(f", {value}" for value in values)
            + ")"
        )

    # Registration

    def register_element(self, element: ConfigurationElement) -> None:
        """Register an element with this configuration.

        Args:
            element: The element to register.

        Raises:
            ElementRegistrationError: If the name is already registered.
        """
        if element.name in self._elements:
            raise ElementRegistrationError(element.name, type(self))
        self._ordered_element_names.append(element.name)
        self._elements[element.name] = element

    @property
    def ordered_element_names(self) -> tuple[str, ...]:
        """Get the element names in declaration order."""
        return tuple(self._ordered_element_names)

    def iterate_element_names(self) -> Iterator[str]:
        """Iterate over the element names in declaration order."""
        return iter(self._ordered_element_names)

    def element(self, name: str) -> ConfigurationElement:
        """Get a registered element by its local (undotted) name.

        Raises:
            NoSuchElementError: If no element has that name.
        """
        try:
            return self._elements[name]
        except KeyError:
            raise NoSuchElementError(name) from None

    # Resolution

    def resolve(self, name: str) -> ConfigurationElement:
        """Resolve a dotted name to an element of this configuration tree.

        Args:
            name: The dotted name of the element.

        Returns:
            The element.

        Raises:
            NoSuchElementError: If a segment isn't registered.
            NotNavigableError: If an intermediate segment is a plain item.
            AbsentValueError: If an intermediate sub-configuration is absent.
        """
        if PATH_SEPARATOR not in name:
            return self.element(name)

        head, rest = name.split(PATH_SEPARATOR, 1)

        try:
            top = self.element(head)
        except NoSuchElementError:
            raise NoSuchElementError(name, head) from None

        if not isinstance(top, SubConfiguration):
            raise NotNavigableError(name, head)

        sub: Configuration = top.get()

        try:
            return sub.resolve(rest)
        except AbsentValueError as exc:
            raise AbsentValueError(f"{head}{PATH_SEPARATOR}{exc.name}") from exc
        except NotNavigableError as exc:
            raise NotNavigableError(name, exc.problem_element) from exc
        except NoSuchElementError as exc:
            raise NoSuchElementError(name, exc.problem_element) from exc

    def get_value(self, name: str) -> Any:
        """Get the value of an element by (dotted) name.

        Raises:
            AbsentValueError: If the element holds no value.
        """
        element = self.resolve(name)
        try:
            return element.get()
        except AbsentValueError as exc:
            if exc.name == name:
                raise
            raise AbsentValueError(name) from exc

    def set_value(self, name: str, value: Any) -> None:
        """Set the value of an element by (dotted) name.

        A dotted assignment made outside a transaction is performed inside
        one, so this configuration's integrity check covers it as well.
        """
        if self._runs_in_root_transaction(name):
            with self.reconfiguring():
                self.resolve(name).set(value)
            return
        self.resolve(name).set(value)

    def clear_value(self, name: str) -> None:
        """Clear the value of an element by (dotted) name."""
        if self._runs_in_root_transaction(name):
            with self.reconfiguring():
                self.resolve(name).clear()
            return
        self.resolve(name).clear()

    def _runs_in_root_transaction(self, name: str) -> bool:
        return (
            PATH_SEPARATOR in name
            and self.lifecycle_phase is LifecyclePhase.INITIALISED
        )

    def _sub_configurations(self) -> Iterator["Configuration"]:
        """Iterate over the nested configurations currently stored."""
        for name in self._ordered_element_names:
            element = self._elements[name]
            if isinstance(element, SubConfiguration):
                configuration = element.current_configuration()
                if configuration is not None:
                    yield configuration

    # Lifecycle

    @property
    def lifecycle_phase(self) -> LifecyclePhase:
        """Get the current lifecycle phase."""
        return self._machine.phase

    @property
    def initialising(self) -> bool:
        """Check if the configuration is being initialised."""
        return self._machine.initialising

    @property
    def initialised(self) -> bool:
        """Check if the configuration has finished being initialised."""
        return self._machine.initialised

    @property
    def writable(self) -> bool:
        """Check if element values may currently be modified."""
        return self._machine.writable

    @property
    def reconfigurable(self) -> bool:
        """Check if the configuration may currently be reconfigured."""
        return self._machine.reconfigurable

    @property
    def integrity_checks_suspended(self) -> bool:
        """Check if integrity checks are deferred for bulk modification."""
        return self._machine.integrity_checks_suspended

    @property
    def integrity_assured(self) -> bool:
        """Check if the integrity of the current state has been checked."""
        return self._machine.integrity_assured

    @property
    def finalised(self) -> bool:
        """Check if the configuration is read-only."""
        return self._machine.finalised

    @property
    def restore_point(self) -> dict[str, Presence]:
        """Get a copy of the values recorded in the open transaction."""
        return dict(self._restore_point)

    def ensure_initialised(self) -> None:
        """Raise InitialisationError unless initialisation has completed."""
        if not self.initialised:
            raise InitialisationError("Configuration is not initialised")

    def ensure_reconfigurable(self) -> None:
        """Raise unless a transaction may be entered.

        Raises:
            InitialisationError: If the configuration is uninitialised.
            ReadOnlyModificationError: If the configuration is finalised.
        """
        self.ensure_initialised()
        if not self.reconfigurable:
            raise ReadOnlyModificationError()

    def ensure_integrity(self) -> None:
        """Raise unless the integrity of the current state has been checked.

        Raises:
            InitialisationError: If the configuration is uninitialised.
            IntermediateStateError: If the configuration is reconfiguring.
        """
        self.ensure_initialised()
        if not self.integrity_assured:
            raise IntermediateStateError()

    @classmethod
    def initialise(cls, initializer: Callable[[Self], None] | None = None) -> Self:
        """Construct and initialise a configuration in one step.

        Args:
            initializer: Sets explicit values on the new configuration.

        Returns:
            The initialised configuration.

        Raises:
            NoDefaultConstructorError: If cls requires constructor arguments.
            MissingDefaultError: If a required element ends up without a value.
            IntegrityError: If the initialised configuration fails its check.
        """
        try:
            inspect.signature(cls).bind()
        except TypeError as exc:
            raise NoDefaultConstructorError(cls) from exc

        configuration = cls()
        configuration.populate(initializer)
        return configuration

    def populate(self, initializer: Callable[[Self], None] | None = None) -> Self:
        """Initialise the values of an uninitialised configuration.

        Runs the initializer, then the pending default of every element not
        set by it, then the integrity check.

        Raises:
            InitialisationError: If the configuration was already initialised.
        """
        if self.lifecycle_phase is not LifecyclePhase.UNINITIALISED:
            raise InitialisationError(
                "Configuration is already initialised or initialising"
            )

        self._machine.transition(LifecyclePhase.INITIALISING)

        if initializer is not None:
            initializer(self)

        for name in self._ordered_element_names:
            self._elements[name].apply_default()

        self._run_integrity_check()
        self._machine.transition(LifecyclePhase.INITIALISED)

        LifecycleMetrics.get_instance().record_initialised()
        self._log.debug("configuration_initialised")
        return self

    def finalise(self) -> Self:
        """Make this configuration and its nested configurations read-only.

        Returns:
            This configuration.

        Raises:
            InitialisationError: If the configuration is uninitialised.
            IntermediateStateError: If the configuration is reconfiguring.
        """
        self.ensure_integrity()
        if self.finalised:
            return self

        for sub in self._sub_configurations():
            sub.ensure_integrity()

        for name in self._ordered_element_names:
            element = self._elements[name]
            if isinstance(element, SubConfiguration):
                element.finalise_value()

        self._machine.transition(LifecyclePhase.FINALISED)
        self._log.debug("configuration_finalised")
        return self

    # Integrity

    def check_integrity(self) -> str | None:
        """Check the integrity of the configuration.

        Override to enforce custom integrity checks.

        Returns:
            A reason the integrity is compromised, or None if it is okay.
        """
        return None

    def perform_integrity_check(self) -> None:
        """Check the integrity of this configuration.

        Raises:
            InitialisationError: If the configuration is not initialised.
            IntegrityError: If the integrity is compromised.
        """
        self.ensure_initialised()
        self._run_integrity_check()

    def _run_integrity_check(self) -> None:
        reason = self.check_integrity()
        if reason is None:
            return

        LifecycleMetrics.get_instance().record_integrity_failure()
        self._log.info("integrity_check_failed", reason=reason)
        raise IntegrityError(reason)

    # Reconfiguration

    def set_restore_point(self, name: str, value: Presence) -> None:
        """Record the value of an element on its first modification in a transaction.

        Args:
            name: The name of the element being modified.
            value: The value of the element before modification.
        """
        if self.lifecycle_phase is not LifecyclePhase.RECONFIGURING:
            return

        # Later touches keep the pre-transaction value
        if name in self._restore_point:
            return

        self._restore_point[name] = value

    def has_restore_point(self, name: str) -> bool:
        """Check whether an element was already modified in the open transaction."""
        return name in self._restore_point

    def enter_reconfiguration(self) -> None:
        """Suspend integrity checks for bulk changes to this tree.

        A no-op if a transaction is already open.

        Raises:
            InitialisationError: If the configuration is uninitialised.
            ReadOnlyModificationError: If the configuration is finalised.
        """
        self.ensure_reconfigurable()
        if self.lifecycle_phase is LifecyclePhase.RECONFIGURING:
            return

        for sub in self._sub_configurations():
            if not sub.finalised:
                sub.enter_reconfiguration()

        self._machine.transition(LifecyclePhase.RECONFIGURING)

    def end_reconfiguration(self) -> None:
        """Resume integrity checks after bulk modification.

        Checks the nested configurations, then this one. If any check fails
        the whole tree is reverted to its state when the transaction began.

        Raises:
            IntegrityError: If the integrity of the tree is compromised.
        """
        if self.lifecycle_phase is not LifecyclePhase.RECONFIGURING:
            return

        try:
            self._verify_reconfiguration()
        except Exception:
            self.unwind_changes()
            raise

        touched = self._commit_reconfiguration()
        LifecycleMetrics.get_instance().record_commit()
        self._log.debug("transaction_committed", elements_touched=touched)

    def unwind_changes(self) -> None:
        """Restore every element of the tree to its pre-transaction value.

        A no-op unless a transaction is open.
        """
        if self.lifecycle_phase is not LifecyclePhase.RECONFIGURING:
            return

        restored = self._rollback_reconfiguration()
        LifecycleMetrics.get_instance().record_rollback()
        self._log.info("transaction_rolled_back", elements_restored=restored)

    def _verify_reconfiguration(self) -> None:
        for sub in self._sub_configurations():
            if sub.lifecycle_phase is LifecyclePhase.RECONFIGURING:
                sub._verify_reconfiguration()
        self._run_integrity_check()

    def _commit_reconfiguration(self) -> int:
        touched = len(self._restore_point)
        for sub in self._sub_configurations():
            if sub.lifecycle_phase is LifecyclePhase.RECONFIGURING:
                touched += sub._commit_reconfiguration()

        # Replaced nested configurations revert to their last checked state
        for name, previous in self._restore_point.items():
            if isinstance(self._elements[name], SubConfiguration):
                _release(previous)

        self._restore_point.clear()
        self._machine.transition(LifecyclePhase.INITIALISED)
        return touched

    def _rollback_reconfiguration(self) -> int:
        restored = len(self._restore_point)
        for name, previous in self._restore_point.items():
            element = self._elements[name]
            if isinstance(element, SubConfiguration):
                _release(element.actual)
            element.restore(previous)
        self._restore_point.clear()

        # Nested configurations are the pre-transaction ones again at this point
        for sub in self._sub_configurations():
            if sub.lifecycle_phase is LifecyclePhase.RECONFIGURING:
                restored += sub._rollback_reconfiguration()

        self._machine.transition(LifecyclePhase.INITIALISED)
        return restored

    @contextmanager
    def reconfiguring(self) -> Iterator[Self]:
        """Context manager for a reconfiguration transaction.

        Integrity checks are suspended inside the block and performed on
        exit. If the check fails, or the block raises, the configuration is
        reverted to its state before the block and the error propagates.
        A block nested in an open transaction joins the outer one.

        Raises:
            InitialisationError: If the configuration is uninitialised.
            ReadOnlyModificationError: If the configuration is finalised.
            IntegrityError: If the reconfigured configuration is compromised.
        """
        self.ensure_reconfigurable()

        if self.lifecycle_phase is LifecyclePhase.RECONFIGURING:
            yield self
            return

        self.enter_reconfiguration()
        try:
            yield self
        except Exception:
            self.unwind_changes()
            raise
        self.end_reconfiguration()

    def reconfigure(self, block: Callable[[Self], None]) -> Self:
        """Reconfigure this configuration in a single transaction.

        Args:
            block: The reconfiguration code.

        Returns:
            This configuration.
        """
        with self.reconfiguring():
            block(self)
        return self

    def update(self, other: "Configuration") -> Self:
        """Update the values of this configuration with those in another.

        Args:
            other: The configuration to draw values from.

        Returns:
            This configuration.
        """
        with self.reconfiguring():
            self.update_without_integrity_check(other)
        return self

    def update_without_integrity_check(self, other: "Configuration") -> Self:
        """Copy the common element values of another configuration.

        Absent values in other clear the corresponding elements here.
        """
        from treeconf.hierarchy import get_common_configuration_elements

        for name in get_common_configuration_elements(self, other):
            if_not_absent(partial(other.get_value, name)).then(
                partial(self.set_value, name)
            ).otherwise(partial(self.clear_value, name))

        return self

    def as_reconfigure_block(self) -> Callable[["Configuration"], None]:
        """Get a block which applies this configuration's values to its argument.

        The argument must be of the same type as this configuration, or an
        ancestor of it.
        """

        def apply(target: Configuration) -> None:
            self.ensure_integrity()
            if target.integrity_checks_suspended:
                target.update_without_integrity_check(self)
            else:
                target.update(self)

        return apply

    def clone(self) -> Self:
        """Create a new, non-finalised configuration identical to this one."""
        self.ensure_initialised()
        return type(self).initialise(self.as_reconfigure_block())

    # Visitation

    def configuration_class(self) -> type["Configuration"]:
        """Get the type of this configuration."""
        return type(self)

    def iterate_elements(self) -> Iterator[VisitableElement]:
        """Iterate over the present elements in declaration order.

        Absent optional elements are skipped. Nested configurations are
        exposed through read-only views.
        """
        self.ensure_initialised()

        for name in self._ordered_element_names:
            element = self._elements[name]
            actual = element.actual
            if actual is ABSENT:
                continue

            if isinstance(element, SubConfiguration):
                yield VisitableSubConfiguration(
                    name, SafeVisitable(actual.value), element.metadata
                )
            else:
                yield VisitableItem(name, actual.value, element.metadata)

    def safe_visitable(self) -> SafeVisitable:
        """Get a view that allows visitation without exposing write access."""
        return SafeVisitable(self)

    def visit(self, visitor: ConfigurationVisitor) -> Self:
        """Let a visitor traverse this configuration.

        Returns:
            This configuration.
        """
        visit(self, visitor)
        return self


def _release(value: Presence) -> None:
    """Roll back a nested configuration that is leaving the tree mid-transaction."""
    if not isinstance(value, Present):
        return
    if value.value.lifecycle_phase is LifecyclePhase.RECONFIGURING:
        value.value._rollback_reconfiguration()
