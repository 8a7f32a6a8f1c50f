"""Data models for the note graph and its configuration."""

from .graph import (
    Direction,
    Edge,
    EdgeView,
    ExplicitEdge,
    ExplicitEdgeIn,
    GraphData,
    GraphLink,
    GraphNode,
    Node,
    PathView,
    RuleId,
)
from .hierarchy import Hierarchy, HierarchyConfigError, blank_hierarchy, default_hierarchy

__all__ = [
    "Direction",
    "RuleId",
    "Node",
    "Edge",
    "ExplicitEdge",
    "GraphNode",
    "GraphLink",
    "GraphData",
    "EdgeView",
    "ExplicitEdgeIn",
    "PathView",
    "Hierarchy",
    "HierarchyConfigError",
    "blank_hierarchy",
    "default_hierarchy",
]
