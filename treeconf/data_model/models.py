"""Data models describing configuration elements."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class StrictBaseModel(BaseModel):
    """Immutable model that rejects unknown fields and blank padding."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)


class ElementMetadata(StrictBaseModel):
    """Descriptive record attached to a configuration element.

    Passed through unchanged to visitors on item and sub-configuration
    calls.

    Attributes:
        description: Human-readable description of the element.
    """

    description: Annotated[str, Field(min_length=1)]
