"""Rebuilding configurations from anything visitable like a configuration."""

from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any

import structlog

from treeconf.constants import COMPONENT_READER
from treeconf.data_model.models import ElementMetadata
from treeconf.errors import VisitationError
from treeconf.observability.metrics import LifecycleMetrics
from treeconf.presence import DefaultState
from treeconf.visitation.protocol import ConfigurationVisitable, ConfigurationVisitor
from treeconf.visitation.traversal import visit


if TYPE_CHECKING:
    from treeconf.configuration import Configuration


logger = structlog.get_logger()


InitializerStep = Callable[["Configuration"], None]


def read_configuration(source: ConfigurationVisitable) -> "Configuration":
    """Read an instance of a configuration from a visitable source.

    Args:
        source: A source that can be visited like a configuration.

    Returns:
        The initialised configuration.
    """
    return visit(source, ConfigurationReader()).result


class PieceWiseConfigurationBuilder:
    """Builds a configuration from initialiser steps added one at a time."""

    def __init__(self, configuration_class: type["Configuration"]) -> None:
        """Initialize the builder.

        Args:
            configuration_class: The type of configuration to build.
        """
        self.configuration_class = configuration_class
        self._steps: list[InitializerStep] = []

    def append(self, step: InitializerStep) -> None:
        """Add more initialisation after the steps already collected."""
        self._steps.append(step)

    def initializer(self, configuration: "Configuration") -> None:
        """Run every collected step, then clear optional elements never set."""
        for step in self._steps:
            step(configuration)

        # An optional element the source left out was absent, not defaulted
        for name in configuration.ordered_element_names:
            element = configuration.element(name)
            if element.optional and element.default_state is DefaultState.PENDING:
                element.clear()

    def instantiate(self) -> "Configuration":
        """Create and integrity-check a configuration from the collected steps."""
        return self.configuration_class.initialise(self.initializer)


class ConfigurationReader(ConfigurationVisitor):
    """Visitor which rebuilds a configuration bottom-up.

    Nested configurations are fully built and integrity-checked before
    they are assigned into their parent, so a parent's own integrity check
    only ever sees consistent children.
    """

    def __init__(self) -> None:
        self._stack: list[tuple[str, PieceWiseConfigurationBuilder]] = []
        self._result: Configuration | None = None
        self._log = logger.bind(component=COMPONENT_READER)

    @property
    def result(self) -> "Configuration":
        """Get the configuration once it has been read.

        Raises:
            VisitationError: If end() has not been called yet.
        """
        if self._result is None:
            raise VisitationError("No configuration has been read yet")
        return self._result

    def begin(self, configuration_class: type["Configuration"]) -> None:
        if self._stack:
            raise VisitationError("begin() called inside an unfinished configuration")
        self._result = None
        self._stack.append(("", PieceWiseConfigurationBuilder(configuration_class)))

    def item(self, name: str, value: Any, metadata: ElementMetadata) -> None:
        self._current().append(partial(_set_value, name, value))

    def begin_sub_configuration(
        self,
        name: str,
        configuration_class: type["Configuration"],
        metadata: ElementMetadata,
    ) -> None:
        self._current()
        self._stack.append((name, PieceWiseConfigurationBuilder(configuration_class)))

    def end_sub_configuration(self) -> None:
        if len(self._stack) < 2:
            raise VisitationError("end_sub_configuration() without a matching begin")

        name, builder = self._stack.pop()
        sub = builder.instantiate()
        self._current().append(partial(_set_value, name, sub))

    def end(self) -> None:
        if not self._stack:
            raise VisitationError("end() called without begin()")
        if len(self._stack) > 1:
            raise VisitationError(
                f"end() called with {len(self._stack) - 1} open sub-configurations"
            )

        _, builder = self._stack.pop()
        self._result = builder.instantiate()
        LifecycleMetrics.get_instance().record_read()
        self._log.debug(
            "configuration_read",
            configuration=builder.configuration_class.__qualname__,
        )

    def _current(self) -> PieceWiseConfigurationBuilder:
        if not self._stack:
            raise VisitationError("Visitor call outside begin()/end()")
        return self._stack[-1][1]


def _set_value(name: str, value: Any, configuration: "Configuration") -> None:
    configuration.set_value(name, value)
