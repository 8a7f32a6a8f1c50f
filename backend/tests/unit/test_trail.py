import pytest

from backend.src.models.graph import Direction
from backend.src.services.graph_store import NoteGraph
from backend.src.services.trail import TrailSelection, build_trail, is_index_note, trail_labels


def _up(graph: NoteGraph, source: str, target: str, hierarchy_i: int = 0) -> None:
    graph.add_edge(source, target, hierarchy_i=hierarchy_i, direction=Direction.UP, field="parent")


def _nodes(paths):
    return [list(path.nodes) for path in paths]


@pytest.fixture
def graph() -> NoteGraph:
    graph = NoteGraph()
    _up(graph, "a", "p")
    _up(graph, "p", "g")
    _up(graph, "a", "q")
    return graph


def test_all_maximal_trails_shortest_first(graph: NoteGraph) -> None:
    assert _nodes(build_trail(graph, "a")) == [["a", "q"], ["a", "p", "g"]]


def test_select_shortest_and_longest(graph: NoteGraph) -> None:
    assert _nodes(build_trail(graph, "a", selection=TrailSelection.SHORTEST)) == [["a", "q"]]
    assert _nodes(build_trail(graph, "a", selection=TrailSelection.LONGEST)) == [["a", "p", "g"]]


def test_note_without_parents_has_no_trail(graph: NoteGraph) -> None:
    assert build_trail(graph, "g") == []
    assert build_trail(graph, "missing", selection=TrailSelection.SHORTEST) == []


def test_trails_end_on_first_index_note() -> None:
    graph = NoteGraph()
    _up(graph, "a", "p")
    _up(graph, "p", "index")
    _up(graph, "index", "top")
    _up(graph, "a", "q")

    trails = build_trail(graph, "a", index_notes=["index", "top"])

    assert _nodes(trails) == [["a", "p", "index"]]


def test_depth_truncates_and_deduplicates() -> None:
    graph = NoteGraph()
    _up(graph, "a", "p")
    _up(graph, "p", "g")
    _up(graph, "p", "h")

    assert _nodes(build_trail(graph, "a", depth=1)) == [["a", "p"]]


def test_depth_must_be_positive(graph: NoteGraph) -> None:
    with pytest.raises(ValueError):
        build_trail(graph, "a", depth=0)


def test_hierarchy_filter() -> None:
    graph = NoteGraph()
    _up(graph, "a", "p", hierarchy_i=0)
    _up(graph, "a", "q", hierarchy_i=1)

    assert _nodes(build_trail(graph, "a", hierarchy_i=1)) == [["a", "q"]]


def test_trail_labels_run_top_down(graph: NoteGraph) -> None:
    longest = build_trail(graph, "a", selection=TrailSelection.LONGEST)[0]

    assert trail_labels(longest) == ["g", "p", "a"]


def test_no_trail_when_no_path_reaches_an_index_note(graph: NoteGraph) -> None:
    assert build_trail(graph, "a", index_notes=["home"]) == []


def test_falls_back_to_all_trails_when_no_index_note_is_reached(graph: NoteGraph) -> None:
    trails = build_trail(graph, "a", index_notes=["home"], all_if_no_index_path=True)

    assert _nodes(trails) == [["a", "q"], ["a", "p", "g"]]


def test_fallback_is_unused_when_an_index_note_is_reached(graph: NoteGraph) -> None:
    trails = build_trail(graph, "a", index_notes=["g"], all_if_no_index_path=True)

    assert _nodes(trails) == [["a", "p", "g"]]


def test_index_notes_match_without_extension() -> None:
    graph = NoteGraph()
    _up(graph, "notes/a.md", "000 Home.md")

    trails = build_trail(graph, "notes/a.md", index_notes=["000 Home"])

    assert _nodes(trails) == [["notes/a.md", "000 Home.md"]]


def test_is_index_note() -> None:
    assert is_index_note("000 Home.md", ["000 Home"])
    assert is_index_note("000 Home.md", ["000 Home.md"])
    assert not is_index_note("000 Home", ["000 Home.md"])
    assert not is_index_note("other.md", ["000 Home"])
