"""Configuration lifecycle state machine implementation."""

from enum import Enum, auto
from typing import ClassVar

import structlog

from treeconf.constants import COMPONENT_CONFIGURATION


logger = structlog.get_logger()


class LifecyclePhase(Enum):
    """Lifecycle phases of a configuration.

    State transitions:
        UNINITIALISED -> INITIALISING: Initialiser and defaults are being applied
        INITIALISING -> INITIALISED: Integrity check passed after initialisation
        INITIALISED -> RECONFIGURING: Integrity checks suspended for bulk changes
        RECONFIGURING -> INITIALISED: Transaction committed or rolled back
        INITIALISED -> FINALISED: Configuration made read-only (terminal)
    """

    UNINITIALISED = auto()
    INITIALISING = auto()
    INITIALISED = auto()
    RECONFIGURING = auto()
    FINALISED = auto()


class LifecycleStateError(Exception):
    """Raised when an invalid lifecycle transition is attempted."""

    def __init__(self, from_phase: LifecyclePhase, to_phase: LifecyclePhase) -> None:
        """Initialize the error.

        Args:
            from_phase: The current phase.
            to_phase: The attempted target phase.
        """
        self.from_phase = from_phase
        self.to_phase = to_phase
        super().__init__(
            f"Invalid lifecycle transition: {from_phase.name} -> {to_phase.name}"
        )


class LifecycleStateMachine:
    """State machine for the configuration lifecycle.

    Enforces valid phase transitions and exposes the derived predicates
    the elements of a configuration consult before reading or writing.
    """

    VALID_TRANSITIONS: ClassVar[dict[LifecyclePhase, set[LifecyclePhase]]] = {
        LifecyclePhase.UNINITIALISED: {LifecyclePhase.INITIALISING},
        LifecyclePhase.INITIALISING: {LifecyclePhase.INITIALISED},
        LifecyclePhase.INITIALISED: {
            LifecyclePhase.RECONFIGURING,
            LifecyclePhase.FINALISED,
        },
        LifecyclePhase.RECONFIGURING: {LifecyclePhase.INITIALISED},
        LifecyclePhase.FINALISED: set(),  # Terminal state
    }

    def __init__(self, configuration_name: str) -> None:
        """Initialize the state machine in UNINITIALISED phase.

        Args:
            configuration_name: Name of the owning configuration class for logging.
        """
        self._phase = LifecyclePhase.UNINITIALISED
        self._log = logger.bind(
            component=COMPONENT_CONFIGURATION,
            configuration=configuration_name,
        )

    @property
    def phase(self) -> LifecyclePhase:
        """Get the current phase."""
        return self._phase

    def can_transition(self, to_phase: LifecyclePhase) -> bool:
        """Check if a transition to the given phase is valid.

        Args:
            to_phase: The target phase.

        Returns:
            True if the transition is valid, False otherwise.
        """
        return to_phase in self.VALID_TRANSITIONS.get(self._phase, set())

    def transition(self, to_phase: LifecyclePhase) -> None:
        """Transition to a new phase.

        Args:
            to_phase: The target phase.

        Raises:
            LifecycleStateError: If the transition is invalid.
        """
        if not self.can_transition(to_phase):
            self._log.error(
                "invariant_violation",
                error_type="illegal_lifecycle_transition",
                from_phase=self._phase.name,
                to_phase=to_phase.name,
            )
            raise LifecycleStateError(self._phase, to_phase)

        old_phase = self._phase
        self._phase = to_phase
        self._log.debug(
            "lifecycle_transition",
            from_phase=old_phase.name,
            to_phase=to_phase.name,
        )

    @property
    def initialising(self) -> bool:
        """Check if the configuration is being initialised."""
        return self._phase == LifecyclePhase.INITIALISING

    @property
    def initialised(self) -> bool:
        """Check if initialisation has completed."""
        return self._phase in (
            LifecyclePhase.INITIALISED,
            LifecyclePhase.RECONFIGURING,
            LifecyclePhase.FINALISED,
        )

    @property
    def writable(self) -> bool:
        """Check if element values may currently be modified."""
        return self._phase in (
            LifecyclePhase.INITIALISING,
            LifecyclePhase.INITIALISED,
            LifecyclePhase.RECONFIGURING,
        )

    @property
    def reconfigurable(self) -> bool:
        """Check if a reconfiguration transaction may be entered."""
        return self._phase in (
            LifecyclePhase.INITIALISED,
            LifecyclePhase.RECONFIGURING,
        )

    @property
    def reconfiguring(self) -> bool:
        """Check if a reconfiguration transaction is open."""
        return self._phase == LifecyclePhase.RECONFIGURING

    @property
    def integrity_checks_suspended(self) -> bool:
        """Check if integrity checks are deferred for bulk modification."""
        return self._phase in (
            LifecyclePhase.INITIALISING,
            LifecyclePhase.RECONFIGURING,
        )

    @property
    def integrity_assured(self) -> bool:
        """Check if the integrity of the current state has been checked."""
        return self._phase in (
            LifecyclePhase.INITIALISED,
            LifecyclePhase.FINALISED,
        )

    def is_terminal(self) -> bool:
        """Check if the current phase is terminal (no more transitions allowed)."""
        return self._phase == LifecyclePhase.FINALISED

    @property
    def finalised(self) -> bool:
        """Check if the configuration is read-only."""
        return self.is_terminal()
