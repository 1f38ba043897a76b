"""Sample configuration classes shared by the tests."""

from typing import Any

from treeconf import (
    Configuration,
    ConfigurationVisitor,
    item,
    sub_configuration,
    visit,
)
from treeconf.data_model import ElementMetadata


class Dimensions(Configuration):
    """A width and height which must both be positive."""

    width = item(description="Width in pixels", default=640)
    height = item(description="Height in pixels", default=480)

    def check_integrity(self) -> str | None:
        if self.width <= 0 or self.height <= 0:
            return "Dimensions must be positive"
        return None


class Window(Configuration):
    """A window whose area is bounded by one of its own items."""

    title = item(description="Window title", default="untitled")
    size = sub_configuration(Dimensions, description="Window size")
    caption = item(description="Caption shown under the title", optional=True)
    max_area = item(description="Largest permitted area", default=1_000_000)

    def check_integrity(self) -> str | None:
        if self.size.width * self.size.height > self.max_area:
            return f"Window area exceeds {self.max_area}"
        return None


class Desktop(Configuration):
    """Three levels deep: desktop, window, dimensions."""

    name = item(description="Desktop name", default="main")
    window = sub_configuration(Window, description="The only window")


class OptionalChild(Configuration):
    """Holds dimensions only when they are given."""

    child = sub_configuration(Dimensions, description="Optional dimensions", optional=True)


class Holder(Configuration):
    """Holds a configuration which itself has an optional child."""

    holder = sub_configuration(OptionalChild, description="Nested holder")


class Spacing(Configuration):
    """An optional item which nevertheless has a default."""

    padding = item(description="Padding in pixels", optional=True, default=5)


class Named(Configuration):
    """Ancestor type for hierarchy tests."""

    name = item(description="Name", default="base")


class DetailedNamed(Named):
    """Named with an optional detail."""

    detail = item(description="Extra detail", optional=True)


class OtherNamed(Named):
    """Sibling of DetailedNamed."""

    other = item(description="Another value", default=0)


class RequiresValue(Configuration):
    """Has a required item with no default."""

    value = item(description="Value that must be set explicitly")


class NeedsArgument(Configuration):
    """Cannot be constructed without arguments."""

    def __init__(self, argument: int) -> None:
        super().__init__()
        self.argument = argument


class RecordingVisitor(ConfigurationVisitor):
    """Visitor that records every call it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.metadata: dict[str, ElementMetadata] = {}

    def begin(self, configuration_class: type[Configuration]) -> None:
        self.calls.append(("begin", configuration_class))

    def item(self, name: str, value: Any, metadata: ElementMetadata) -> None:
        self.metadata[name] = metadata
        self.calls.append(("item", name, value))

    def begin_sub_configuration(
        self,
        name: str,
        configuration_class: type[Configuration],
        metadata: ElementMetadata,
    ) -> None:
        self.metadata[name] = metadata
        self.calls.append(("begin_sub", name, configuration_class))

    def end_sub_configuration(self) -> None:
        self.calls.append(("end_sub",))

    def end(self) -> None:
        self.calls.append(("end",))


def record(visitable: Any) -> list[tuple[Any, ...]]:
    """Visit a configuration and return the recorded calls."""
    return visit(visitable, RecordingVisitor()).calls
