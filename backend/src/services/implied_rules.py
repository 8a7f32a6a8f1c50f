"""Implied-edge rules and the engine that applies them.

Each rule is a descriptor: a walk (direction sequence plus walk options)
and the direction of the edge asserted from the walk's source to the end of
every path it finds. The engine walks every node of the graph once per
enabled rule and hierarchy.

Contract between rules:
- every rule only follows explicit edges of the hierarchy it runs for, so no
  rule depends on another rule's output;
- rules run in catalog order, and an implied slot
  (source, target, hierarchy, direction) is filled at most once, so the
  first rule to reach a slot tags it;
- a slot held by an explicit edge is never filled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.graph import Direction, Edge, RuleId
from ..models.hierarchy import Hierarchy, HierarchyConfigError, RULE_RESULT_DIRECTION
from .chain_walk import EdgePredicate, Step, WalkMode, chain_walk
from .graph_store import GraphInvariantError, NoteGraph

logger = logging.getLogger(__name__)

UP = Step(Direction.UP)
UP_REVERSED = Step(Direction.UP, reverse=True)
SAME = Step(Direction.SAME)


@dataclass(frozen=True)
class ImpliedRule:
    """Descriptor for one implied-relationship rule."""

    rule_id: RuleId
    description: str
    sequence: Tuple[Step, ...] = ()
    mode: WalkMode = WalkMode.PREFIXES
    max_phase_steps: Optional[int] = 1

    @property
    def result(self) -> Optional[Direction]:
        return RULE_RESULT_DIRECTION[self.rule_id]

    @property
    def materialises(self) -> bool:
        """Whether the rule adds edges (self_is_sibling is only read by queries)."""
        return self.result is not None and bool(self.sequence)


IMPLIED_RULES: Tuple[ImpliedRule, ...] = (
    ImpliedRule(
        RuleId.SELF_IS_SIBLING,
        "Every note is its own sibling",
    ),
    ImpliedRule(
        RuleId.SAME_PARENT_IS_SIBLING,
        "Notes sharing a parent are siblings",
        sequence=(UP, UP_REVERSED),
    ),
    ImpliedRule(
        RuleId.SAME_SIBLING_IS_SIBLING,
        "Siblings of siblings are siblings",
        sequence=(SAME,),
        max_phase_steps=None,
    ),
    ImpliedRule(
        RuleId.SIBLINGS_PARENT_IS_PARENT,
        "A sibling's parent is a parent",
        sequence=(SAME, UP),
    ),
    ImpliedRule(
        RuleId.PARENTS_SIBLING_IS_PARENT,
        "A parent's sibling is a parent",
        sequence=(UP, SAME),
    ),
    ImpliedRule(
        RuleId.COUSIN_IS_SIBLING,
        "Children of a parent's siblings are siblings",
        sequence=(UP, SAME, UP_REVERSED),
    ),
)

RULES_BY_ID: Dict[RuleId, ImpliedRule] = {rule.rule_id: rule for rule in IMPLIED_RULES}


def explicit_in_hierarchy(hierarchy_i: int) -> EdgePredicate:
    def predicate(edge: Edge) -> bool:
        return edge.explicit and edge.hierarchy_i == hierarchy_i

    return predicate


@dataclass
class InferenceReport:
    """Outcome of one inference pass over all hierarchies."""

    added: Dict[int, Dict[RuleId, int]] = field(default_factory=dict)
    failed_hierarchies: Dict[int, str] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def total_added(self) -> int:
        return sum(sum(counts.values()) for counts in self.added.values())

    @property
    def ok(self) -> bool:
        return not self.failed_hierarchies


class ImpliedEdgeEngine:
    """Applies the enabled implied rules of each hierarchy to a graph."""

    def __init__(self, rules: Sequence[ImpliedRule] = IMPLIED_RULES) -> None:
        self.rules = tuple(rules)

    def run(self, graph: NoteGraph, hierarchies: Sequence[Hierarchy]) -> InferenceReport:
        """Add implied edges for every hierarchy.

        A hierarchy whose rules raise is recorded in the report and skipped;
        the remaining hierarchies are still processed. Invariant violations
        are programming errors and propagate.
        """
        start_time = time.time()
        report = InferenceReport()

        for hierarchy_i, hierarchy in enumerate(hierarchies):
            counts: Dict[RuleId, int] = {}
            report.added[hierarchy_i] = counts
            try:
                self.run_hierarchy(graph, hierarchy_i, hierarchy, counts)
            except GraphInvariantError:
                raise
            except Exception as exc:
                logger.exception(
                    "Implied edge inference failed for hierarchy",
                    extra={"hierarchy_i": hierarchy_i},
                )
                report.failed_hierarchies[hierarchy_i] = str(exc) or type(exc).__name__

        report.duration_ms = (time.time() - start_time) * 1000
        return report

    def run_hierarchy(
        self,
        graph: NoteGraph,
        hierarchy_i: int,
        hierarchy: Hierarchy,
        counts: Optional[Dict[RuleId, int]] = None,
    ) -> Dict[RuleId, int]:
        """Apply one hierarchy's enabled rules, returning the number of edges added per rule."""
        counts = {} if counts is None else counts
        for rule in self.rules:
            if not rule.materialises or not hierarchy.rule_enabled(rule.rule_id):
                continue
            counts[rule.rule_id] = self.apply_rule(graph, rule, hierarchy_i, hierarchy)
            logger.debug(
                "Applied implied rule",
                extra={
                    "hierarchy_i": hierarchy_i,
                    "rule": rule.rule_id.value,
                    "added": counts[rule.rule_id],
                },
            )
        return counts

    def apply_rule(
        self,
        graph: NoteGraph,
        rule: ImpliedRule,
        hierarchy_i: int,
        hierarchy: Hierarchy,
    ) -> int:
        direction = rule.result
        field_name = hierarchy.primary_field(direction) if direction else None
        if direction is None or field_name is None:
            raise HierarchyConfigError(
                f"Rule '{rule.rule_id.value}' cannot assert edges in hierarchy {hierarchy_i}"
            )

        predicate = explicit_in_hierarchy(hierarchy_i)
        candidates: List[Tuple[str, str]] = []

        def collect(node) -> None:
            for path in chain_walk(
                graph,
                node.id,
                rule.sequence,
                predicate,
                mode=rule.mode,
                max_phase_steps=rule.max_phase_steps,
            ):
                candidates.append((node.id, path.target_id))

        graph.for_each_node(collect)

        added = 0
        for source_id, target_id in candidates:
            if source_id == target_id:
                raise GraphInvariantError(
                    f"Rule '{rule.rule_id.value}' produced a self-loop on {source_id}"
                )
            if graph.has_edge_at(source_id, target_id, hierarchy_i, direction):
                continue
            graph.add_edge(
                source_id,
                target_id,
                hierarchy_i=hierarchy_i,
                direction=direction,
                field=field_name,
                explicit=False,
                implied_kind=rule.rule_id,
            )
            added += 1
        return added


__all__ = [
    "ImpliedRule",
    "IMPLIED_RULES",
    "RULES_BY_ID",
    "ImpliedEdgeEngine",
    "InferenceReport",
    "explicit_in_hierarchy",
]
