"""Render a note's descendants as a nested markdown list."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, Field

from ..models.graph import Direction, Edge
from .chain_walk import WalkMode, chain_walk
from .graph_store import NoteGraph


class LinkKind(str, Enum):
    WIKI = "wiki"
    MARKDOWN = "markdown"
    NONE = "none"


class ListIndexOptions(BaseModel):
    """Options for building a list index."""

    direction: Direction = Field(default=Direction.DOWN, description="Direction to follow from the root")
    hierarchy_i: Optional[int] = Field(default=None, ge=0, description="Restrict to one hierarchy")
    indent: str = Field(default="\t", description="Indent used per nesting level")
    link_kind: LinkKind = LinkKind.WIKI
    show_ext: bool = Field(default=False, description="Keep the file extension in display names")
    show_folder: bool = Field(default=False, description="Keep the folder path in display names")
    max_depth: Optional[int] = Field(default=None, ge=1)


def format_node_id(node_id: str, *, show_ext: bool = False, show_folder: bool = False) -> str:
    """Display name for a note id such as ``folder/note.md``."""
    path = PurePosixPath(node_id)
    name = path.name if show_ext else path.stem
    if show_folder and str(path.parent) not in ("", "."):
        return f"{path.parent.as_posix()}/{name}"
    return name


def format_link(node_id: str, options: ListIndexOptions) -> str:
    display = format_node_id(node_id, show_ext=options.show_ext, show_folder=options.show_folder)
    if options.link_kind is LinkKind.WIKI:
        target = node_id[: -len(".md")] if node_id.endswith(".md") else node_id
        if display == PurePosixPath(target).name or display == target:
            return f"[[{target}]]"
        return f"[[{target}|{display}]]"
    if options.link_kind is LinkKind.MARKDOWN:
        return f"[{display}]({node_id.replace(' ', '%20')})"
    return display


def build_list_index(
    graph: NoteGraph,
    root_id: str,
    options: Optional[ListIndexOptions] = None,
) -> str:
    """Nested list of every note reachable from ``root_id`` along ``options.direction``.

    A note reachable along several paths is listed once per path.
    """
    options = options or ListIndexOptions()

    def predicate(edge: Edge) -> bool:
        return options.hierarchy_i is None or edge.hierarchy_i == options.hierarchy_i

    lines = []
    for path in chain_walk(graph, root_id, [options.direction], predicate, mode=WalkMode.PREFIXES):
        if options.max_depth is not None and len(path) > options.max_depth:
            continue
        indent = options.indent * (len(path) - 1)
        lines.append(f"{indent}- {format_link(path.target_id, options)}")

    return "\n".join(lines) + ("\n" if lines else "")


__all__ = ["LinkKind", "ListIndexOptions", "build_list_index", "format_link", "format_node_id"]
