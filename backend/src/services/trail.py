"""Breadcrumb trails: the paths from a note up its hierarchy."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional

from ..models.graph import Direction, Edge
from .chain_walk import Path, WalkMode, chain_walk
from .edge_codec import stringify_edge
from .graph_store import NoteGraph


class TrailSelection(str, Enum):
    """Which of the candidate trails to keep."""

    ALL = "all"
    SHORTEST = "shortest"
    LONGEST = "longest"


def _sort_key(path: Path):
    return (len(path), [stringify_edge(edge) for edge in path.edges])


def is_index_note(node_id: str, index_notes: Iterable[str]) -> bool:
    """Index notes may be given with or without the ``.md`` extension."""
    names = set(index_notes)
    if node_id in names:
        return True
    return node_id.endswith(".md") and node_id[: -len(".md")] in names


def build_trail(
    graph: NoteGraph,
    node_id: str,
    *,
    index_notes: Iterable[str] = (),
    selection: TrailSelection = TrailSelection.ALL,
    depth: Optional[int] = None,
    hierarchy_i: Optional[int] = None,
    all_if_no_index_path: bool = False,
) -> List[Path]:
    """Upward paths from ``node_id``.

    With index notes configured, only paths that reach one of them are kept
    (stopping at the first index note hit). Without, every maximal upward
    path is a trail. ``all_if_no_index_path`` falls back to the maximal
    paths when none reaches an index note.
    """
    indexes = set(index_notes)

    def predicate(edge: Edge) -> bool:
        return hierarchy_i is None or edge.hierarchy_i == hierarchy_i

    candidates: List[Path] = []
    if indexes:
        candidates = [
            path
            for path in chain_walk(graph, node_id, [Direction.UP], predicate, mode=WalkMode.PREFIXES)
            if is_index_note(path.target_id, indexes)
            and not any(is_index_note(node, indexes) for node in path.nodes[1:-1])
        ]
    if not indexes or (not candidates and all_if_no_index_path):
        candidates = chain_walk(graph, node_id, [Direction.UP], predicate, mode=WalkMode.MAXIMAL)

    if depth is not None:
        if depth < 1:
            raise ValueError("Trail depth must be at least 1")
        candidates = [path.truncate(depth) for path in candidates]

    unique: List[Path] = []
    for path in sorted(candidates, key=_sort_key):
        if path not in unique:
            unique.append(path)

    if not unique or selection is TrailSelection.ALL:
        return unique
    if selection is TrailSelection.SHORTEST:
        return [unique[0]]
    longest = max(len(path) for path in unique)
    return [next(path for path in unique if len(path) == longest)]


def trail_labels(path: Path) -> List[str]:
    """Notes along a trail from the top of the hierarchy down to the current note."""
    return list(reversed(path.nodes))


__all__ = ["TrailSelection", "build_trail", "is_index_note", "trail_labels"]
