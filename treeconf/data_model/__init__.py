"""Data models shared across the framework."""

from treeconf.data_model.models import ElementMetadata, StrictBaseModel


__all__ = ["ElementMetadata", "StrictBaseModel"]
