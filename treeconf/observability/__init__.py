"""Observability module for logging and metrics."""

from treeconf.observability.logging import (
    bind_configuration_context,
    clear_configuration_context,
    configure_logging,
    get_logger,
)
from treeconf.observability.metrics import LifecycleMetrics


__all__ = [
    "LifecycleMetrics",
    "bind_configuration_context",
    "clear_configuration_context",
    "configure_logging",
    "get_logger",
]
