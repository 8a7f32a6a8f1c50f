"""Ownership of the live note graph: rebuilds, lifecycle events and queries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..models.graph import Direction, Edge, ExplicitEdge, Node
from ..models.hierarchy import Hierarchy
from .chain_walk import EdgePredicate, Path, Step, WalkMode, chain_walk
from .config import AppConfig, get_config
from .graph_builder import RebuildReport, build_graph
from .graph_store import NoteGraph
from .implied_rules import ImpliedEdgeEngine
from .list_index import ListIndexOptions, build_list_index
from .neighbours import prev_next, siblings
from .trail import TrailSelection, build_trail

logger = logging.getLogger(__name__)

ExplicitSource = Callable[[], Tuple[Iterable[Union[str, Node]], Iterable[ExplicitEdge]]]


@dataclass(frozen=True)
class GraphSnapshot:
    """A published graph and the rebuild that produced it."""

    version: int
    graph: NoteGraph
    report: RebuildReport
    built_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GraphService:
    """Single writer for the shared graph.

    Rebuilds construct a new graph and publish it only once inference has
    finished, so readers see either the previous graph or the next one.
    Lifecycle events (create/rename/delete) edit the published graph in place
    and do not re-run inference; call ``rebuild()`` to refresh implied edges
    afterwards.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        source: ExplicitSource | None = None,
        engine: ImpliedEdgeEngine | None = None,
    ) -> None:
        self.config = config or get_config()
        self.source = source
        self.engine = engine or ImpliedEdgeEngine()
        self._lock = threading.Lock()
        self._snapshot = GraphSnapshot(
            version=0, graph=NoteGraph(), report=RebuildReport(), built_at=_utcnow()
        )

    @property
    def hierarchies(self) -> List[Hierarchy]:
        return self.config.hierarchies

    @property
    def snapshot(self) -> GraphSnapshot:
        return self._snapshot

    @property
    def graph(self) -> NoteGraph:
        return self._snapshot.graph

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def rebuild(
        self,
        notes: Optional[Iterable[Union[str, Node]]] = None,
        edges: Optional[Iterable[ExplicitEdge]] = None,
    ) -> GraphSnapshot:
        """Rebuild from scratch and publish the result.

        Input comes from the arguments when given, else from the configured
        source, else from the explicit layer of the current graph.

        Raises:
            GraphConfigError: explicit input does not fit the hierarchies; the
                previously published graph is kept.
        """
        with self._lock:
            if notes is None and edges is None:
                if self.source is not None:
                    notes, edges = self.source()
                else:
                    notes, edges = self._snapshot.graph.explicit_input()

            graph, report = build_graph(
                notes or [], edges or [], self.hierarchies, engine=self.engine
            )
            snapshot = GraphSnapshot(
                version=self._snapshot.version + 1,
                graph=graph,
                report=report,
                built_at=_utcnow(),
            )
            self._snapshot = snapshot

        if report.failed_hierarchies:
            logger.warning(
                "Graph published with partially failed hierarchies",
                extra={
                    "version": snapshot.version,
                    "failed_hierarchies": sorted(report.failed_hierarchies),
                },
            )
        return snapshot

    def node_created(self, node_id: str) -> Node:
        with self._lock:
            return self.graph.add_node(node_id, resolved=True)

    def node_renamed(self, old_id: str, new_id: str) -> bool:
        with self._lock:
            return self.graph.rename_node(old_id, new_id)

    def node_deleted(self, node_id: str) -> bool:
        with self._lock:
            return self.graph.drop_node(node_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def edges_of(self, node_id: str) -> List[Edge]:
        return self.graph.edges_of(node_id)

    def chain_walk(
        self,
        source_id: str,
        sequence: Sequence[Union[Step, Direction, str]],
        predicate: Optional[EdgePredicate] = None,
        *,
        mode: WalkMode = WalkMode.MAXIMAL,
        max_phase_steps: Optional[int] = None,
    ) -> List[Path]:
        return chain_walk(
            self.graph,
            source_id,
            sequence,
            predicate,
            mode=mode,
            max_phase_steps=max_phase_steps,
        )

    def trail(
        self,
        node_id: str,
        *,
        selection: Optional[TrailSelection] = None,
        depth: Optional[int] = None,
        hierarchy_i: Optional[int] = None,
    ) -> List[Path]:
        return build_trail(
            self.graph,
            node_id,
            index_notes=self.config.index_notes,
            selection=selection or self.config.trail_selection,
            depth=depth or self.config.trail_default_depth,
            hierarchy_i=hierarchy_i,
            all_if_no_index_path=self.config.trail_all_if_no_index_path,
        )

    def siblings(self, node_id: str, *, hierarchy_i: Optional[int] = None) -> List[str]:
        return siblings(self.graph, self.hierarchies, node_id, hierarchy_i=hierarchy_i)

    def prev_next(
        self, node_id: str, *, hierarchy_i: Optional[int] = None
    ) -> Dict[Direction, List[str]]:
        return prev_next(self.graph, node_id, hierarchy_i=hierarchy_i)

    def list_index(self, root_id: str, options: Optional[ListIndexOptions] = None) -> str:
        return build_list_index(self.graph, root_id, options)


_graph_service: GraphService | None = None


def get_graph_service() -> GraphService:
    """Get or create the graph service singleton."""
    global _graph_service
    if _graph_service is None:
        _graph_service = GraphService()
    return _graph_service


__all__ = ["GraphService", "GraphSnapshot", "ExplicitSource", "get_graph_service"]
