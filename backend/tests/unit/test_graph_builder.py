import pytest

from backend.src.models.graph import Direction, ExplicitEdge, Node, RuleId
from backend.src.models.hierarchy import Hierarchy
from backend.src.services.edge_codec import stringify_edges
from backend.src.services.graph_builder import GraphConfigError, build_graph


@pytest.fixture
def hierarchies():
    return [
        Hierarchy(
            dirs={"up": ["parent", "mother"], "down": ["child"], "same": ["sibling"]},
            implied_relationships={
                "parents_sibling_is_parent": True,
                "same_parent_is_sibling": True,
            },
        )
    ]


def _explicit(source: str, direction: str, target: str, field: str, hierarchy_i: int = 0):
    return ExplicitEdge(source, target, hierarchy_i, Direction(direction), field)


EDGES = [
    _explicit("a.md", "up", "p.md", "parent"),
    _explicit("b.md", "up", "p.md", "mother"),
    _explicit("p.md", "same", "s.md", "sibling"),
]


def test_build_graph_runs_inference(hierarchies) -> None:
    graph, report = build_graph(["a.md", "b.md", "p.md", "s.md"], EDGES, hierarchies)

    assert report.explicit_edge_count == 3
    assert report.implied_edge_count == 4
    assert report.implied_by_rule[0] == {
        RuleId.SAME_PARENT_IS_SIBLING: 2,
        RuleId.PARENTS_SIBLING_IS_PARENT: 2,
    }
    assert report.ok
    # implied edges use the first field of their direction
    assert "b.md -0:up-> s.md (implied) [parent]" in stringify_edges(
        graph.edges(), show_field=True
    )


def test_rebuild_is_idempotent(hierarchies) -> None:
    first, _ = build_graph(["a.md", "b.md"], EDGES, hierarchies)
    second, _ = build_graph(["a.md", "b.md"], list(reversed(EDGES)), hierarchies)

    options = {"show_field": True, "show_kind": True}
    assert stringify_edges(first.edges(), **options) == stringify_edges(second.edges(), **options)


def test_unknown_targets_become_unresolved_nodes(hierarchies) -> None:
    graph, report = build_graph(["a.md"], EDGES[:1], hierarchies)

    assert graph.get_node("a.md") == Node("a.md", resolved=True)
    assert graph.get_node("p.md") == Node("p.md", resolved=False)
    assert report.node_count == 2


def test_node_entries_keep_their_resolution(hierarchies) -> None:
    graph, _ = build_graph([Node("ghost.md", resolved=False)], [], hierarchies)

    assert graph.get_node("ghost.md").resolved is False


def test_duplicate_explicit_edges_are_added_once(hierarchies) -> None:
    graph, report = build_graph([], EDGES[:1] * 3, hierarchies)

    assert graph.number_of_edges(explicit=True) == 1
    assert report.duplicate_explicit_edges == 2


def test_same_pair_in_two_fields_keeps_both(hierarchies) -> None:
    edges = [
        _explicit("a.md", "up", "p.md", "parent"),
        _explicit("a.md", "up", "p.md", "mother"),
    ]

    graph, report = build_graph([], edges, hierarchies)

    assert graph.number_of_edges(explicit=True) == 2
    assert report.duplicate_explicit_edges == 0


@pytest.mark.parametrize(
    "edge",
    [
        _explicit("a.md", "up", "p.md", "parent", hierarchy_i=3),
        _explicit("a.md", "next", "b.md", "next"),
        _explicit("a.md", "up", "p.md", "child"),
    ],
    ids=["unknown-hierarchy", "disabled-direction", "foreign-field"],
)
def test_edges_that_do_not_fit_are_rejected(hierarchies, edge) -> None:
    with pytest.raises(GraphConfigError):
        build_graph([], [EDGES[0], edge], hierarchies)


def test_empty_input_builds_empty_graph(hierarchies) -> None:
    graph, report = build_graph([], [], hierarchies)

    assert graph.number_of_nodes() == 0
    assert report.implied_edge_count == 0
