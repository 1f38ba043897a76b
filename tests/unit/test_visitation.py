"""Tests for visiting configurations and reading them back."""

from collections.abc import Generator, Iterator

import pytest

from tests.helpers.configurations import (
    Desktop,
    Dimensions,
    RecordingVisitor,
    Spacing,
    Window,
    record,
)
from treeconf import (
    ABSENT,
    Configuration,
    ConfigurationVisitable,
    read_configuration,
    visit,
)
from treeconf.data_model import ElementMetadata
from treeconf.errors import InitialisationError, IntegrityError, VisitationError
from treeconf.observability.metrics import LifecycleMetrics
from treeconf.visitation import (
    ConfigurationReader,
    SafeVisitable,
    VisitableElement,
    VisitableItem,
    VisitableSubConfiguration,
)


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None]:
    """Reset singleton before and after each test."""
    LifecycleMetrics.reset()
    yield
    LifecycleMetrics.reset()


class DimensionsSource:
    """Visitable source that is not a configuration."""

    def __init__(self, **values: int) -> None:
        self._values = values

    def configuration_class(self) -> type[Configuration]:
        return Dimensions

    def iterate_elements(self) -> Iterator[VisitableElement]:
        metadata = ElementMetadata(description="From a plain source")
        for name, value in self._values.items():
            yield VisitableItem(name, value, metadata)


class TestVisit:
    """Tests for driving visitors over configurations."""

    @pytest.mark.unit
    def test_visit_order(self) -> None:
        """Test calls arrive depth-first in declaration order."""
        assert record(Window.initialise()) == [
            ("begin", Window),
            ("item", "title", "untitled"),
            ("begin_sub", "size", Dimensions),
            ("item", "width", 640),
            ("item", "height", 480),
            ("end_sub",),
            ("item", "max_area", 1_000_000),
            ("end",),
        ]

    @pytest.mark.unit
    def test_absent_elements_skipped(self) -> None:
        """Test only present elements are visited."""
        calls = record(Window.initialise(lambda c: setattr(c, "caption", "shown")))
        assert ("item", "caption", "shown") in calls

        calls = record(Window.initialise())
        assert all(call[1] != "caption" for call in calls if call[0] == "item")

    @pytest.mark.unit
    def test_repeated_clear_hides_element(self) -> None:
        """Test clearing twice succeeds and the element stays hidden."""
        config = Window.initialise(lambda c: setattr(c, "caption", "shown"))
        config.clear_value("caption")
        config.clear_value("caption")
        assert record(config) == record(Window.initialise())

    @pytest.mark.unit
    def test_single_begin_end_pair(self) -> None:
        """Test nested levels do not receive begin or end."""
        calls = record(Desktop.initialise())
        assert [call[0] for call in calls].count("begin") == 1
        assert [call[0] for call in calls].count("end") == 1
        assert [call[0] for call in calls].count("begin_sub") == 2

    @pytest.mark.unit
    def test_metadata_passed_through(self) -> None:
        """Test visitors receive the element metadata."""
        visitor = visit(Window.initialise(), RecordingVisitor())
        assert visitor.metadata["title"].description == "Window title"
        assert visitor.metadata["size"].description == "Window size"

    @pytest.mark.unit
    def test_visit_method_returns_configuration(self) -> None:
        """Test Configuration.visit returns the configuration."""
        config = Window.initialise()
        visitor = RecordingVisitor()
        assert config.visit(visitor) is config
        assert visitor.calls[0] == ("begin", Window)

    @pytest.mark.unit
    def test_visit_uninitialised(self) -> None:
        """Test an uninitialised configuration cannot be visited."""
        with pytest.raises(InitialisationError):
            record(Window())

    @pytest.mark.unit
    def test_visit_finalised(self) -> None:
        """Test a finalised configuration can be visited."""
        config = Window.initialise()
        assert record(config.clone().finalise()) == record(config)


class TestSafeVisitable:
    """Tests for the read-only view."""

    @pytest.mark.unit
    def test_view_is_visitable(self) -> None:
        """Test the view satisfies the protocol and visits the same."""
        config = Window.initialise()
        view = config.safe_visitable()
        assert isinstance(view, ConfigurationVisitable)
        assert view.configuration_class() is Window
        assert record(view) == record(config)

    @pytest.mark.unit
    def test_view_hides_configuration(self) -> None:
        """Test the view exposes no way to modify the configuration."""
        view = Window.initialise().safe_visitable()
        assert not hasattr(view, "set_value")
        assert not hasattr(view, "reconfigure")
        with pytest.raises(AttributeError):
            view.extra = 1  # type: ignore[attr-defined]

    @pytest.mark.unit
    def test_nested_elements_are_views(self) -> None:
        """Test nested configurations are exposed through views."""
        elements = list(Window.initialise().iterate_elements())
        nested = [e for e in elements if isinstance(e, VisitableSubConfiguration)]
        assert len(nested) == 1
        assert isinstance(nested[0].value, SafeVisitable)
        assert "Dimensions" in repr(nested[0].value)


class TestReadConfiguration:
    """Tests for rebuilding configurations from visitable sources."""

    @pytest.mark.unit
    def test_round_trip(self) -> None:
        """Test reading a configuration yields an equal, separate one."""
        config = Desktop.initialise(lambda c: setattr(c, "name", "work"))
        config.set_value("window.caption", "hello")

        copy = read_configuration(config)

        assert isinstance(copy, Desktop)
        assert copy is not config
        assert copy.window is not config.window
        assert record(copy) == record(config)
        assert LifecycleMetrics.get_instance().configurations_read == 1

    @pytest.mark.unit
    def test_round_trip_cleared_default(self) -> None:
        """Test a cleared optional element stays absent when read back."""
        config = Spacing.initialise(lambda c: c.clear_value("padding"))
        assert config.element("padding").actual is ABSENT

        copy = read_configuration(config)

        assert copy.element("padding").actual is ABSENT
        assert record(copy) == record(config)

    @pytest.mark.unit
    def test_round_trip_kept_default(self) -> None:
        """Test an optional default that was kept is read back."""
        copy = read_configuration(Spacing.initialise())
        assert copy.padding == 5

    @pytest.mark.unit
    def test_read_is_not_finalised(self) -> None:
        """Test the result of reading is modifiable."""
        copy = read_configuration(Window.initialise().finalise())
        assert not copy.finalised
        copy.title = "changed"
        assert copy.title == "changed"

    @pytest.mark.unit
    def test_read_plain_source(self) -> None:
        """Test reading from an object that only implements the protocol."""
        config = read_configuration(DimensionsSource(width=10, height=20))
        assert isinstance(config, Dimensions)
        assert (config.width, config.height) == (10, 20)

    @pytest.mark.unit
    def test_read_applies_defaults(self) -> None:
        """Test elements the source omits get their defaults."""
        config = read_configuration(DimensionsSource(width=10))
        assert config.height == 480

    @pytest.mark.unit
    def test_read_checks_integrity(self) -> None:
        """Test a source describing a compromised configuration."""
        with pytest.raises(IntegrityError):
            read_configuration(DimensionsSource(width=-1))


class TestConfigurationReader:
    """Tests for protocol misuse on the reader."""

    @pytest.mark.unit
    def test_result_before_end(self) -> None:
        """Test the result is unavailable before reading."""
        with pytest.raises(VisitationError):
            _ = ConfigurationReader().result

    @pytest.mark.unit
    def test_end_without_begin(self) -> None:
        """Test end() must follow begin()."""
        with pytest.raises(VisitationError, match="without begin"):
            ConfigurationReader().end()

    @pytest.mark.unit
    def test_item_without_begin(self) -> None:
        """Test item() must follow begin()."""
        metadata = ElementMetadata(description="Width")
        with pytest.raises(VisitationError):
            ConfigurationReader().item("width", 1, metadata)

    @pytest.mark.unit
    def test_begin_twice(self) -> None:
        """Test begin() cannot be nested."""
        reader = ConfigurationReader()
        reader.begin(Window)
        with pytest.raises(VisitationError):
            reader.begin(Window)

    @pytest.mark.unit
    def test_unmatched_end_sub_configuration(self) -> None:
        """Test end_sub_configuration() needs a matching begin."""
        reader = ConfigurationReader()
        reader.begin(Window)
        with pytest.raises(VisitationError):
            reader.end_sub_configuration()

    @pytest.mark.unit
    def test_end_with_open_sub_configuration(self) -> None:
        """Test end() with a nested configuration still open."""
        reader = ConfigurationReader()
        reader.begin(Window)
        reader.begin_sub_configuration(
            "size", Dimensions, ElementMetadata(description="Size")
        )
        with pytest.raises(VisitationError, match="1 open"):
            reader.end()

    @pytest.mark.unit
    def test_manual_protocol(self) -> None:
        """Test driving the reader by hand."""
        metadata = ElementMetadata(description="Driven by hand")
        reader = ConfigurationReader()
        reader.begin(Window)
        reader.item("title", "manual", metadata)
        reader.begin_sub_configuration("size", Dimensions, metadata)
        reader.item("width", 100, metadata)
        reader.end_sub_configuration()
        reader.end()

        config = reader.result
        assert isinstance(config, Window)
        assert config.title == "manual"
        assert config.size.width == 100
        assert config.size.height == 480
