from dataclasses import replace

import pytest

from backend.src.models.graph import Direction, RuleId
from backend.src.services.edge_codec import stringify_edges
from backend.src.services.graph_store import GraphInvariantError, NoteGraph


def _up(graph: NoteGraph, source: str, target: str, hierarchy_i: int = 0) -> None:
    graph.add_edge(source, target, hierarchy_i=hierarchy_i, direction=Direction.UP, field="up")


def test_add_node_is_idempotent_and_never_downgrades() -> None:
    graph = NoteGraph()

    graph.add_node("a.md", resolved=True)
    node = graph.add_node("a.md", resolved=False)

    assert node.resolved is True
    assert graph.number_of_nodes() == 1


def test_add_node_upgrades_unresolved_node() -> None:
    graph = NoteGraph()
    graph.add_node("a.md")

    graph.add_node("a.md", resolved=True)

    assert graph.get_node("a.md").resolved is True


def test_add_edge_creates_unresolved_endpoints() -> None:
    graph = NoteGraph()

    _up(graph, "a.md", "parent.md")

    assert graph.get_node("a.md").resolved is False
    assert graph.get_node("parent.md").resolved is False


def test_parallel_edges_in_different_hierarchies_are_kept_apart() -> None:
    graph = NoteGraph()

    _up(graph, "a.md", "b.md", hierarchy_i=0)
    _up(graph, "a.md", "b.md", hierarchy_i=1)

    edges = graph.edges_of("a.md")
    assert len(edges) == 2
    assert sorted(edge.hierarchy_i for edge in edges) == [0, 1]
    assert len(graph.edges_between("a.md", "b.md")) == 2


def test_add_edge_does_not_deduplicate() -> None:
    graph = NoteGraph()

    _up(graph, "a.md", "b.md")
    _up(graph, "a.md", "b.md")

    assert graph.number_of_edges() == 2


def test_implied_edge_without_kind_fails_fast() -> None:
    graph = NoteGraph()

    with pytest.raises(GraphInvariantError):
        graph.add_edge("a.md", "b.md", hierarchy_i=0, direction=Direction.UP, explicit=False)


def test_explicit_edge_with_kind_fails_fast() -> None:
    graph = NoteGraph()

    with pytest.raises(GraphInvariantError):
        graph.add_edge(
            "a.md",
            "b.md",
            hierarchy_i=0,
            direction=Direction.UP,
            explicit=True,
            implied_kind=RuleId.PARENTS_SIBLING_IS_PARENT,
        )


def _swap(node_id: str) -> str:
    return "b.md" if node_id == "a.md" else node_id


def test_rename_preserves_edges() -> None:
    graph = NoteGraph()
    graph.add_node("a.md", resolved=True)
    _up(graph, "a.md", "p.md")
    _up(graph, "c.md", "a.md")
    graph.add_edge("a.md", "s.md", hierarchy_i=0, direction=Direction.SAME, field="same")

    before = graph.edges_of("a.md")
    assert graph.rename_node("a.md", "b.md") is True

    after = graph.edges_of("b.md")
    renamed = [
        replace(edge, source_id=_swap(edge.source_id), target_id=_swap(edge.target_id))
        for edge in before
    ]
    assert stringify_edges(after, show_field=True) == stringify_edges(renamed, show_field=True)
    assert graph.edges_of("a.md") == []
    assert graph.get_node("b.md").resolved is True
    assert not graph.has_node("a.md")


def test_rename_carries_self_loops() -> None:
    graph = NoteGraph()
    graph.add_edge("a.md", "a.md", hierarchy_i=0, direction=Direction.NEXT, field="next")

    graph.rename_node("a.md", "b.md")

    edges = graph.edges_of("b.md")
    assert len(edges) == 1
    assert edges[0].source_id == edges[0].target_id == "b.md"


def test_rename_unknown_node_is_noop() -> None:
    graph = NoteGraph()
    graph.add_node("a.md")

    assert graph.rename_node("missing.md", "b.md") is False
    assert graph.node_ids() == ["a.md"]


def test_rename_onto_existing_node_merges() -> None:
    graph = NoteGraph()
    graph.add_node("old.md", resolved=False)
    graph.add_node("new.md", resolved=True)
    _up(graph, "old.md", "p.md")
    _up(graph, "new.md", "q.md")

    graph.rename_node("old.md", "new.md")

    targets = sorted(edge.target_id for edge in graph.edges_out("new.md"))
    assert targets == ["p.md", "q.md"]
    assert graph.get_node("new.md").resolved is True


def test_drop_node_is_total() -> None:
    graph = NoteGraph()
    _up(graph, "a.md", "n.md")
    _up(graph, "n.md", "b.md")
    graph.add_edge("c.md", "n.md", hierarchy_i=1, direction=Direction.SAME, field="same")

    assert graph.drop_node("n.md") is True

    assert graph.edges_of("n.md") == []
    for edge in graph.edges():
        assert "n.md" not in (edge.source_id, edge.target_id)
    assert graph.number_of_edges() == 0
    assert sorted(graph.node_ids()) == ["a.md", "b.md", "c.md"]


def test_drop_unknown_node_is_noop() -> None:
    graph = NoteGraph()

    assert graph.drop_node("missing.md") is False


def test_edges_of_unknown_node_is_empty() -> None:
    assert NoteGraph().edges_of("missing.md") == []


def test_for_each_node_visits_in_insertion_order() -> None:
    graph = NoteGraph()
    for node_id in ("c.md", "a.md", "b.md"):
        graph.add_node(node_id)

    seen = []
    graph.for_each_node(lambda node: seen.append(node.id))

    assert seen == ["c.md", "a.md", "b.md"]


def test_has_edge_at_filters_by_slot_and_origin() -> None:
    graph = NoteGraph()
    _up(graph, "a.md", "b.md")

    assert graph.has_edge_at("a.md", "b.md", 0, Direction.UP)
    assert graph.has_edge_at("a.md", "b.md", 0, Direction.UP, explicit=True)
    assert not graph.has_edge_at("a.md", "b.md", 0, Direction.UP, explicit=False)
    assert not graph.has_edge_at("a.md", "b.md", 1, Direction.UP)
    assert not graph.has_edge_at("a.md", "b.md", 0, Direction.SAME)


def test_explicit_input_skips_implied_edges() -> None:
    graph = NoteGraph()
    graph.add_node("a.md", resolved=True)
    _up(graph, "a.md", "p.md")
    graph.add_edge(
        "a.md",
        "s.md",
        hierarchy_i=0,
        direction=Direction.UP,
        field="up",
        explicit=False,
        implied_kind=RuleId.PARENTS_SIBLING_IS_PARENT,
    )

    nodes, edges = graph.explicit_input()

    assert {node.id for node in nodes} == {"a.md", "p.md", "s.md"}
    assert [(edge.source_id, edge.target_id) for edge in edges] == [("a.md", "p.md")]


def test_rename_merge_drops_edges_between_the_merged_nodes() -> None:
    graph = NoteGraph()
    _up(graph, "a.md", "b.md")
    graph.add_edge("b.md", "a.md", hierarchy_i=0, direction=Direction.DOWN, field="down")
    _up(graph, "a.md", "p.md")

    graph.rename_node("a.md", "b.md")

    for edge in graph.edges():
        assert edge.source_id != edge.target_id
    assert [edge.target_id for edge in graph.edges_out("b.md")] == ["p.md"]
    _, explicit = graph.explicit_input()
    assert [(edge.source_id, edge.target_id) for edge in explicit] == [("b.md", "p.md")]
