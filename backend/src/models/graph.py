"""Graph data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Direction(str, Enum):
    """Logical role of an edge within a hierarchy."""

    UP = "up"
    DOWN = "down"
    SAME = "same"
    NEXT = "next"
    PREV = "prev"


DIRECTIONS: tuple[Direction, ...] = tuple(Direction)


class RuleId(str, Enum):
    """Identifiers of the implied-relationship rules."""

    SELF_IS_SIBLING = "self_is_sibling"
    SAME_PARENT_IS_SIBLING = "same_parent_is_sibling"
    SAME_SIBLING_IS_SIBLING = "same_sibling_is_sibling"
    COUSIN_IS_SIBLING = "cousin_is_sibling"
    SIBLINGS_PARENT_IS_PARENT = "siblings_parent_is_parent"
    PARENTS_SIBLING_IS_PARENT = "parents_sibling_is_parent"


@dataclass(frozen=True)
class Node:
    """A note in the graph. Unresolved notes are referenced but not known to exist."""

    id: str
    resolved: bool = False


@dataclass(frozen=True)
class Edge:
    """Directed, typed edge between two notes.

    Edges are value objects read out of the store; the endpoints always reflect
    the store's current node ids.
    """

    source_id: str
    target_id: str
    hierarchy_i: int
    direction: Direction
    field: Optional[str] = None
    explicit: bool = True
    implied_kind: Optional[RuleId] = None


@dataclass(frozen=True)
class ExplicitEdge:
    """Explicit edge as supplied by the content parser."""

    source_id: str
    target_id: str
    hierarchy_i: int
    direction: Direction
    field: str


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------


class GraphNode(BaseModel):
    """Represents a single note in the graph."""
    id: str = Field(..., description="Unique identifier (Note Path)")
    label: str = Field(..., description="Display title of the note")
    val: int = Field(default=1, description="Weight/Size of the node (incident edge count)")
    group: str = Field(..., description="Grouping category (e.g., top-level folder)")
    resolved: bool = Field(default=True, description="False when only referenced by an edge")


class GraphLink(BaseModel):
    """Represents a directed, typed connection between two notes."""
    source: str = Field(..., description="ID of the source note")
    target: str = Field(..., description="ID of the target note")
    hierarchy_i: int = Field(..., ge=0, description="Index of the hierarchy")
    direction: Direction
    field: Optional[str] = None
    explicit: bool = True
    implied_kind: Optional[RuleId] = None

    @classmethod
    def from_edge(cls, edge: Edge) -> "GraphLink":
        return cls(
            source=edge.source_id,
            target=edge.target_id,
            hierarchy_i=edge.hierarchy_i,
            direction=edge.direction,
            field=edge.field,
            explicit=edge.explicit,
            implied_kind=edge.implied_kind,
        )


class GraphData(BaseModel):
    """The top-level payload returned by the API."""
    version: int = Field(default=0, ge=0, description="Published graph version")
    nodes: List[GraphNode]
    links: List[GraphLink]


class EdgeView(GraphLink):
    """An edge together with its canonical string form."""
    key: str = Field(..., description="Canonical edge string")


class ExplicitEdgeIn(BaseModel):
    """Explicit edge supplied by a client for a rebuild."""
    source_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)
    hierarchy_i: int = Field(..., ge=0)
    direction: Direction
    field: str = Field(..., min_length=1)

    def to_explicit_edge(self) -> ExplicitEdge:
        return ExplicitEdge(
            source_id=self.source_id,
            target_id=self.target_id,
            hierarchy_i=self.hierarchy_i,
            direction=self.direction,
            field=self.field,
        )


class PathView(BaseModel):
    """One chain-walk result."""
    source_id: str
    target_id: str
    nodes: List[str]
    edges: List[EdgeView]


__all__ = [
    "Direction",
    "DIRECTIONS",
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
]
