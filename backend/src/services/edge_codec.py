"""Canonical string forms for edges.

Used for logging, test comparisons and de-duplication keys. The strings
depend only on an edge's attributes, never on when it was inserted.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from ..models.graph import Direction, Edge

EdgeSlot = Tuple[str, str, int, Direction]


def edge_slot(edge: Edge) -> EdgeSlot:
    """The (source, target, hierarchy, direction) key explicit precedence is decided on."""
    return (edge.source_id, edge.target_id, edge.hierarchy_i, edge.direction)


def stringify_edge(
    edge: Edge,
    *,
    show_field: bool = False,
    show_kind: bool = False,
    rename: Optional[dict] = None,
) -> str:
    """Render an edge as ``source -h:dir-> target (explicit|implied)``.

    Args:
        edge: The edge to render.
        show_field: Append the field name in brackets.
        show_kind: Append the implied rule id to implied edges.
        rename: Optional display names for node ids.
    """
    rename = rename or {}
    source = rename.get(edge.source_id, edge.source_id)
    target = rename.get(edge.target_id, edge.target_id)

    origin = "explicit" if edge.explicit else "implied"
    if show_kind and edge.implied_kind is not None:
        origin = f"{origin}:{edge.implied_kind.value}"

    text = f"{source} -{edge.hierarchy_i}:{edge.direction.value}-> {target} ({origin})"
    if show_field and edge.field:
        text = f"{text} [{edge.field}]"
    return text


def stringify_edges(edges: Iterable[Edge], **options) -> List[str]:
    """Sorted canonical strings for a collection of edges."""
    return sorted(stringify_edge(edge, **options) for edge in edges)


__all__ = ["EdgeSlot", "edge_slot", "stringify_edge", "stringify_edges"]
