"""Tests for lifecycle metrics, logging setup and settings."""

import io
import json
import logging
from collections.abc import Generator

import pytest
import structlog
from pydantic import ValidationError

from tests.helpers.configurations import Dimensions, Window
from treeconf.errors import IntegrityError
from treeconf.observability import (
    LifecycleMetrics,
    bind_configuration_context,
    clear_configuration_context,
    configure_logging,
    get_logger,
)
from treeconf.settings import TreeconfSettings, get_settings


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None]:
    """Reset singleton before and after each test."""
    LifecycleMetrics.reset()
    yield
    LifecycleMetrics.reset()


@pytest.fixture
def log_stream() -> Generator[io.StringIO]:
    """Route JSON debug logs to a buffer."""
    stream = io.StringIO()
    configure_logging(level=logging.DEBUG, output=stream, json_format=True)
    yield stream
    clear_configuration_context()
    structlog.reset_defaults()


def _events(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestLifecycleMetrics:
    """Tests for LifecycleMetrics."""

    @pytest.mark.unit
    def test_get_instance_returns_same_instance(self) -> None:
        """get_instance returns the same instance each time."""
        assert LifecycleMetrics.get_instance() is LifecycleMetrics.get_instance()

    @pytest.mark.unit
    def test_reset_clears_singleton(self) -> None:
        """reset creates a fresh instance on next access."""
        first = LifecycleMetrics.get_instance()
        first.record_commit()
        LifecycleMetrics.reset()
        assert LifecycleMetrics.get_instance().transactions_committed == 0

    @pytest.mark.unit
    def test_to_dict(self) -> None:
        """Test all counters appear in the dictionary."""
        metrics = LifecycleMetrics.get_instance()
        metrics.record_initialised()
        metrics.record_rollback()
        assert metrics.to_dict() == {
            "configurations_initialised": 1,
            "transactions_committed": 0,
            "transactions_rolled_back": 1,
            "integrity_failures": 0,
            "configurations_read": 0,
        }

    @pytest.mark.unit
    def test_lifecycle_recorded(self) -> None:
        """Test configuration operations update the counters."""
        Dimensions.initialise()
        config = Dimensions.initialise()
        with pytest.raises(IntegrityError):
            config.width = 0

        metrics = LifecycleMetrics.get_instance()
        assert metrics.configurations_initialised == 2
        assert metrics.integrity_failures == 1


class TestLogging:
    """Tests for structured logging."""

    @pytest.mark.unit
    def test_transaction_events(self, log_stream: io.StringIO) -> None:
        """Test commits and rollbacks are logged."""
        config = Window.initialise()
        config.reconfigure(lambda c: setattr(c, "title", "changed"))
        with pytest.raises(IntegrityError):
            config.reconfigure(lambda c: setattr(c, "max_area", 1))

        names = [event["event"] for event in _events(log_stream)]
        assert "configuration_initialised" in names
        assert "transaction_committed" in names
        assert "integrity_check_failed" in names
        assert "transaction_rolled_back" in names

    @pytest.mark.unit
    def test_events_carry_component(self, log_stream: io.StringIO) -> None:
        """Test events are bound to their component and configuration."""
        Window.initialise()
        initialised = [
            event
            for event in _events(log_stream)
            if event["event"] == "configuration_initialised"
        ]
        assert initialised[-1]["component"] == "configuration"
        assert initialised[-1]["configuration"] == "Window"
        assert initialised[-1]["level"] == "debug"

    @pytest.mark.unit
    def test_configuration_context(self, log_stream: io.StringIO) -> None:
        """Test a bound label is attached to events."""
        bind_configuration_context("desktop")
        get_logger().info("custom_event")
        event = _events(log_stream)[-1]
        assert event["event"] == "custom_event"
        assert event["configuration_context"] == "desktop"

    @pytest.mark.unit
    def test_level_filtering(self) -> None:
        """Test events below the level are dropped."""
        stream = io.StringIO()
        configure_logging(level=logging.WARNING, output=stream, json_format=True)
        try:
            Window.initialise()
            assert stream.getvalue() == ""
        finally:
            structlog.reset_defaults()

    @pytest.mark.unit
    def test_console_format(self) -> None:
        """Test the plain console renderer."""
        stream = io.StringIO()
        configure_logging(level=logging.INFO, output=stream, json_format=False)
        try:
            get_logger().info("plain_event", answer=42)
            assert "plain_event" in stream.getvalue()
            assert "answer=42" in stream.getvalue()
        finally:
            structlog.reset_defaults()


class TestSettings:
    """Tests for TreeconfSettings."""

    @pytest.mark.unit
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the defaults without environment overrides."""
        monkeypatch.delenv("TREECONF_LOG_LEVEL", raising=False)
        monkeypatch.delenv("TREECONF_LOG_JSON", raising=False)
        settings = TreeconfSettings()
        assert settings.log_level == "INFO"
        assert settings.log_json is True
        assert settings.log_level_number() == logging.INFO

    @pytest.mark.unit
    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test values are read from prefixed environment variables."""
        monkeypatch.setenv("TREECONF_LOG_LEVEL", "debug")
        monkeypatch.setenv("TREECONF_LOG_JSON", "false")
        settings = get_settings()
        assert settings.log_level == "DEBUG"
        assert settings.log_level_number() == logging.DEBUG
        assert settings.log_json is False

    @pytest.mark.unit
    def test_unknown_level_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an unknown level name is rejected."""
        monkeypatch.setenv("TREECONF_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            TreeconfSettings()

    @pytest.mark.unit
    def test_configure_logging_uses_settings(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test omitted arguments come from the settings."""
        monkeypatch.setenv("TREECONF_LOG_LEVEL", "ERROR")
        stream = io.StringIO()
        configure_logging(output=stream)
        try:
            get_logger().warning("dropped_event")
            get_logger().error("kept_event")
            events = _events(stream)
            assert [event["event"] for event in events] == ["kept_event"]
        finally:
            structlog.reset_defaults()
