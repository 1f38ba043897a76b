"""Metrics collection for configuration lifecycles."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class LifecycleMetrics:
    """Counters for configuration lifecycle events.

    Attributes:
        configurations_initialised: Configurations that passed initialisation.
        transactions_committed: Reconfiguration transactions committed.
        transactions_rolled_back: Reconfiguration transactions rolled back.
        integrity_failures: Integrity checks that rejected a configuration.
        configurations_read: Configurations rebuilt by the reader.
    """

    configurations_initialised: int = 0
    transactions_committed: int = 0
    transactions_rolled_back: int = 0
    integrity_failures: int = 0
    configurations_read: int = 0

    _instance: ClassVar["LifecycleMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "LifecycleMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_initialised(self) -> None:
        """Record a completed initialisation."""
        self.configurations_initialised += 1

    def record_commit(self) -> None:
        """Record a committed transaction."""
        self.transactions_committed += 1

    def record_rollback(self) -> None:
        """Record a rolled-back transaction."""
        self.transactions_rolled_back += 1

    def record_integrity_failure(self) -> None:
        """Record a failed integrity check."""
        self.integrity_failures += 1

    def record_read(self) -> None:
        """Record a configuration rebuilt from a visitable source."""
        self.configurations_read += 1

    def to_dict(self) -> dict[str, int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "configurations_initialised": self.configurations_initialised,
            "transactions_committed": self.transactions_committed,
            "transactions_rolled_back": self.transactions_rolled_back,
            "integrity_failures": self.integrity_failures,
            "configurations_read": self.configurations_read,
        }
