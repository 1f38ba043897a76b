"""Visitor protocol, traversal and reading of configuration trees."""

from treeconf.visitation.protocol import (
    ConfigurationVisitable,
    ConfigurationVisitor,
    VisitableElement,
    VisitableItem,
    VisitableSubConfiguration,
)
from treeconf.visitation.reader import (
    ConfigurationReader,
    PieceWiseConfigurationBuilder,
    read_configuration,
)
from treeconf.visitation.traversal import SafeVisitable, visit, visit_no_begin


__all__ = [
    "ConfigurationReader",
    "ConfigurationVisitable",
    "ConfigurationVisitor",
    "PieceWiseConfigurationBuilder",
    "SafeVisitable",
    "VisitableElement",
    "VisitableItem",
    "VisitableSubConfiguration",
    "read_configuration",
    "visit",
    "visit_no_begin",
]
