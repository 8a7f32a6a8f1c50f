"""Service layer: graph engine, inference and queries."""

from .chain_walk import Path, Step, WalkMode, chain_walk
from .config import AppConfig, get_config, reload_config
from .edge_codec import edge_slot, stringify_edge, stringify_edges
from .graph_builder import GraphConfigError, RebuildReport, build_graph
from .graph_service import GraphService, GraphSnapshot, get_graph_service
from .graph_store import GraphInvariantError, NoteGraph
from .implied_rules import IMPLIED_RULES, ImpliedEdgeEngine, ImpliedRule, InferenceReport
from .list_index import ListIndexOptions, build_list_index
from .neighbours import neighbours, prev_next, siblings
from .trail import TrailSelection, build_trail

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "NoteGraph",
    "GraphInvariantError",
    "chain_walk",
    "Path",
    "Step",
    "WalkMode",
    "edge_slot",
    "stringify_edge",
    "stringify_edges",
    "ImpliedRule",
    "IMPLIED_RULES",
    "ImpliedEdgeEngine",
    "InferenceReport",
    "build_graph",
    "GraphConfigError",
    "RebuildReport",
    "GraphService",
    "GraphSnapshot",
    "get_graph_service",
    "neighbours",
    "siblings",
    "prev_next",
    "TrailSelection",
    "build_trail",
    "ListIndexOptions",
    "build_list_index",
]
