"""In-memory multigraph of notes and their typed edges."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import networkx as nx

from ..models.graph import Direction, Edge, ExplicitEdge, Node, RuleId
from .edge_codec import edge_slot

logger = logging.getLogger(__name__)


class GraphInvariantError(RuntimeError):
    """Raised when an edge would break a store invariant (a programming error)."""


def _to_edge(source_id: str, target_id: str, data: Dict[str, Any]) -> Edge:
    return Edge(
        source_id=source_id,
        target_id=target_id,
        hierarchy_i=data["hierarchy_i"],
        direction=data["direction"],
        field=data["field"],
        explicit=data["explicit"],
        implied_kind=data["implied_kind"],
    )


class NoteGraph:
    """Directed multigraph keyed by note id.

    Several edges may connect the same ordered pair of notes; they are told
    apart by hierarchy index, direction and field. Edges are returned as
    ``Edge`` value objects whose endpoints reflect the current node ids, so a
    rename is visible through every edge touching the renamed note.

    The store is not thread-safe. ``GraphService`` is the single writer.
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def add_node(self, node_id: str, resolved: bool = False) -> Node:
        """Add a node; never downgrades an existing node from resolved to unresolved."""
        if node_id in self._graph:
            attrs = self._graph.nodes[node_id]
            if resolved and not attrs["resolved"]:
                attrs["resolved"] = True
        else:
            self._graph.add_node(node_id, resolved=resolved)
        return Node(id=node_id, resolved=self._graph.nodes[node_id]["resolved"])

    def has_node(self, node_id: str) -> bool:
        return node_id in self._graph

    def get_node(self, node_id: str) -> Optional[Node]:
        if node_id not in self._graph:
            return None
        return Node(id=node_id, resolved=self._graph.nodes[node_id]["resolved"])

    def nodes(self) -> List[Node]:
        return [
            Node(id=node_id, resolved=attrs["resolved"])
            for node_id, attrs in self._graph.nodes(data=True)
        ]

    def node_ids(self) -> List[str]:
        return list(self._graph.nodes)

    def for_each_node(self, fn: Callable[[Node], None]) -> None:
        """Call ``fn`` for every node, in insertion order.

        The node list is taken up front, so ``fn`` may add edges.
        """
        for node in self.nodes():
            fn(node)

    def rename_node(self, old_id: str, new_id: str) -> bool:
        """Re-key a node and every incident edge. Returns False if ``old_id`` is unknown.

        Renaming onto an existing node merges the two: edges are moved across,
        edges running between the two notes are dropped, and the merged node is
        resolved if either side was.
        """
        if old_id not in self._graph:
            logger.debug("Ignoring rename of unknown node", extra={"old_id": old_id, "new_id": new_id})
            return False
        if old_id == new_id:
            return True

        resolved = self._graph.nodes[old_id]["resolved"]
        if new_id in self._graph:
            logger.warning(
                "Rename target already exists, merging nodes",
                extra={"old_id": old_id, "new_id": new_id},
            )
        self.add_node(new_id, resolved=resolved)

        out_edges = list(self._graph.out_edges(old_id, keys=True, data=True))
        in_edges = list(self._graph.in_edges(old_id, keys=True, data=True))

        # Edges between the two merged notes would become self-loops.
        dropped = 0
        for _, target_id, _, data in out_edges:
            if target_id == new_id:
                dropped += 1
                continue
            self._graph.add_edge(new_id, new_id if target_id == old_id else target_id, **data)
        for source_id, _, _, data in in_edges:
            # Self-loops were carried over with the outgoing edges.
            if source_id == old_id:
                continue
            if source_id == new_id:
                dropped += 1
                continue
            self._graph.add_edge(source_id, new_id, **data)

        if dropped:
            logger.warning(
                "Dropped edges between merged nodes",
                extra={"old_id": old_id, "new_id": new_id, "dropped": dropped},
            )
        self._graph.remove_node(old_id)
        return True

    def drop_node(self, node_id: str) -> bool:
        """Remove a node together with every edge into or out of it."""
        if node_id not in self._graph:
            return False
        self._graph.remove_node(node_id)
        return True

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def add_edge(
        self,
        source_id: str,
        target_id: str,
        *,
        hierarchy_i: int,
        direction: Direction,
        field: Optional[str] = None,
        explicit: bool = True,
        implied_kind: Optional[RuleId] = None,
    ) -> Edge:
        """Append a new edge. Missing endpoints are added as unresolved nodes.

        No de-duplication happens here; callers decide what may be added.
        """
        if not explicit and implied_kind is None:
            raise GraphInvariantError(
                f"Implied edge {source_id} -> {target_id} has no implied_kind"
            )
        if explicit and implied_kind is not None:
            raise GraphInvariantError(
                f"Explicit edge {source_id} -> {target_id} carries implied_kind {implied_kind}"
            )

        for node_id in (source_id, target_id):
            if node_id not in self._graph:
                self._graph.add_node(node_id, resolved=False)

        data = {
            "hierarchy_i": hierarchy_i,
            "direction": Direction(direction),
            "field": field,
            "explicit": explicit,
            "implied_kind": RuleId(implied_kind) if implied_kind is not None else None,
        }
        self._graph.add_edge(source_id, target_id, **data)
        return _to_edge(source_id, target_id, data)

    def add_explicit_edge(self, edge: ExplicitEdge) -> Edge:
        return self.add_edge(
            edge.source_id,
            edge.target_id,
            hierarchy_i=edge.hierarchy_i,
            direction=edge.direction,
            field=edge.field,
        )

    def edges_out(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            return []
        return [
            _to_edge(source_id, target_id, data)
            for source_id, target_id, data in self._graph.out_edges(node_id, data=True)
        ]

    def edges_in(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            return []
        return [
            _to_edge(source_id, target_id, data)
            for source_id, target_id, data in self._graph.in_edges(node_id, data=True)
        ]

    def edges_of(self, node_id: str) -> List[Edge]:
        """Outgoing edges followed by incoming ones; a self-loop appears once."""
        incoming = [edge for edge in self.edges_in(node_id) if edge.source_id != node_id]
        return self.edges_out(node_id) + incoming

    def edges_between(self, source_id: str, target_id: str) -> List[Edge]:
        keyed = self._graph.get_edge_data(source_id, target_id) or {}
        return [_to_edge(source_id, target_id, data) for data in keyed.values()]

    def edges(self) -> Iterator[Edge]:
        for source_id, target_id, data in self._graph.edges(data=True):
            yield _to_edge(source_id, target_id, data)

    def has_edge_at(
        self,
        source_id: str,
        target_id: str,
        hierarchy_i: int,
        direction: Direction,
        *,
        explicit: Optional[bool] = None,
    ) -> bool:
        """Whether an edge already occupies the (source, target, hierarchy, direction) slot."""
        slot = (source_id, target_id, hierarchy_i, Direction(direction))
        for edge in self.edges_between(source_id, target_id):
            if edge_slot(edge) != slot:
                continue
            if explicit is None or edge.explicit == explicit:
                return True
        return False

    def number_of_nodes(self) -> int:
        return self._graph.number_of_nodes()

    def number_of_edges(self, *, explicit: Optional[bool] = None) -> int:
        if explicit is None:
            return self._graph.number_of_edges()
        return sum(1 for edge in self.edges() if edge.explicit == explicit)

    def explicit_input(self) -> Tuple[List[Node], List[ExplicitEdge]]:
        """The nodes and explicit edges this graph was seeded with (after any in-place events)."""
        explicit_edges = [
            ExplicitEdge(
                source_id=edge.source_id,
                target_id=edge.target_id,
                hierarchy_i=edge.hierarchy_i,
                direction=edge.direction,
                field=edge.field or "",
            )
            for edge in self.edges()
            if edge.explicit
        ]
        return self.nodes(), explicit_edges


__all__ = ["NoteGraph", "GraphInvariantError"]
