"""Neighbour and sibling lookups over a built graph."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from ..models.graph import Direction, RuleId
from ..models.hierarchy import Hierarchy
from .graph_store import NoteGraph


def neighbours(
    graph: NoteGraph,
    node_id: str,
    direction: Direction,
    *,
    hierarchy_i: Optional[int] = None,
    explicit_only: bool = False,
) -> List[str]:
    """Targets of ``node_id``'s outgoing edges in ``direction``, de-duplicated in edge order."""
    found: List[str] = []
    for edge in graph.edges_out(node_id):
        if edge.direction != direction:
            continue
        if hierarchy_i is not None and edge.hierarchy_i != hierarchy_i:
            continue
        if explicit_only and not edge.explicit:
            continue
        if edge.target_id not in found:
            found.append(edge.target_id)
    return found


def siblings(
    graph: NoteGraph,
    hierarchies: Sequence[Hierarchy],
    node_id: str,
    *,
    hierarchy_i: Optional[int] = None,
) -> List[str]:
    """Sibling ids of a note.

    The note itself is listed first when any considered hierarchy has
    ``self_is_sibling`` switched on.
    """
    if not graph.has_node(node_id):
        return []

    considered = range(len(hierarchies)) if hierarchy_i is None else [hierarchy_i]
    include_self = any(
        0 <= i < len(hierarchies) and hierarchies[i].rule_enabled(RuleId.SELF_IS_SIBLING)
        for i in considered
    )

    found = neighbours(graph, node_id, Direction.SAME, hierarchy_i=hierarchy_i)
    if include_self:
        found = [node_id] + [sibling for sibling in found if sibling != node_id]
    return found


def prev_next(
    graph: NoteGraph,
    node_id: str,
    *,
    hierarchy_i: Optional[int] = None,
) -> Dict[Direction, List[str]]:
    """The notes before and after ``node_id`` in a sequence, keyed by direction."""
    return {
        direction: neighbours(graph, node_id, direction, hierarchy_i=hierarchy_i)
        for direction in (Direction.PREV, Direction.NEXT)
    }


__all__ = ["neighbours", "prev_next", "siblings"]
