"""Phased, predicate-filtered walks over the note graph.

A walk follows a sequence of *phases*, one per step in the direction
sequence. Each phase takes at least one edge of its direction; after every
edge the walk either stays in the phase or moves on to the next one, never
back. Every qualifying branch is explored, so the result is the union of all
paths rather than a single best one.

A path never revisits a node it has already passed through, the source
included. This rules out reflexive results (a note being its own derived
parent) and keeps walks finite on cyclic data.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Set, Tuple, Union

from ..models.graph import Direction, Edge
from .graph_store import NoteGraph

EdgePredicate = Callable[[Edge], bool]


class WalkMode(str, Enum):
    """Which paths a walk reports.

    MAXIMAL: only paths that have entered the final phase and cannot be
    extended by any qualifying edge.
    PREFIXES: every path that has entered the final phase, reported before
    its extensions (pre-order).
    """

    MAXIMAL = "maximal"
    PREFIXES = "prefixes"


@dataclass(frozen=True)
class Step:
    """One phase of a walk. ``reverse`` follows incoming edges backwards."""

    direction: Direction
    reverse: bool = False

    def __str__(self) -> str:
        return f"~{self.direction.value}" if self.reverse else self.direction.value


@dataclass(frozen=True)
class Path:
    """Edges walked from ``source_id``, with the node reached after each one."""

    source_id: str
    edges: Tuple[Edge, ...]
    nodes: Tuple[str, ...]

    @property
    def target_id(self) -> str:
        return self.nodes[-1]

    def __len__(self) -> int:
        return len(self.edges)

    def truncate(self, length: int) -> "Path":
        return Path(self.source_id, self.edges[:length], self.nodes[: length + 1])


def as_step(item: Union[Step, Direction, str]) -> Step:
    if isinstance(item, Step):
        return item
    return Step(Direction(item))


def chain_walk(
    graph: NoteGraph,
    source_id: str,
    sequence: Sequence[Union[Step, Direction, str]],
    predicate: Optional[EdgePredicate] = None,
    *,
    mode: WalkMode = WalkMode.MAXIMAL,
    max_phase_steps: Optional[int] = None,
) -> List[Path]:
    """Return every path from ``source_id`` that follows ``sequence``.

    Args:
        graph: Graph to walk.
        source_id: Starting note. Unknown notes yield no paths.
        sequence: Phases, as ``Step`` objects or plain directions (forward).
        predicate: Extra filter every followed edge must pass.
        mode: MAXIMAL or PREFIXES (see ``WalkMode``).
        max_phase_steps: Upper bound on edges taken per phase; None for no bound.
            ``1`` makes the walk an exact composition of the sequence.

    Returns:
        Paths in depth-first order following the graph's edge order.
    """
    steps = [as_step(item) for item in sequence]
    if not steps or not graph.has_node(source_id):
        return []
    if max_phase_steps is not None and max_phase_steps < 1:
        raise ValueError("max_phase_steps must be at least 1")

    last_phase = len(steps) - 1
    paths: List[Path] = []

    def candidates(node_id: str, phase: int, taken: int, has_edges: bool):
        if not has_edges:
            allowed = [0]
        else:
            allowed = []
            if max_phase_steps is None or taken < max_phase_steps:
                allowed.append(phase)
            if phase < last_phase:
                allowed.append(phase + 1)

        for next_phase in allowed:
            step = steps[next_phase]
            edges = graph.edges_in(node_id) if step.reverse else graph.edges_out(node_id)
            for edge in edges:
                if edge.direction != step.direction:
                    continue
                yield next_phase, edge, edge.source_id if step.reverse else edge.target_id

    def walk(
        node_id: str,
        phase: int,
        taken: int,
        edges: Tuple[Edge, ...],
        nodes: Tuple[str, ...],
        visited: Set[str],
    ) -> None:
        at_stop = bool(edges) and phase == last_phase
        if at_stop and mode is WalkMode.PREFIXES:
            paths.append(Path(source_id, edges, nodes))

        extended = False
        for next_phase, edge, next_id in candidates(node_id, phase, taken, bool(edges)):
            if next_id in visited:
                continue
            if predicate is not None and not predicate(edge):
                continue
            extended = True
            visited.add(next_id)
            walk(
                next_id,
                next_phase,
                taken + 1 if next_phase == phase and edges else 1,
                edges + (edge,),
                nodes + (next_id,),
                visited,
            )
            visited.discard(next_id)

        if at_stop and mode is WalkMode.MAXIMAL and not extended:
            paths.append(Path(source_id, edges, nodes))

    walk(source_id, 0, 0, (), (source_id,), {source_id})
    return paths


__all__ = ["WalkMode", "Step", "Path", "EdgePredicate", "as_step", "chain_walk"]
