"""HTTP API routes for the note graph."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Annotated, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ...models.graph import (
    Direction,
    Edge,
    EdgeView,
    ExplicitEdgeIn,
    GraphData,
    GraphLink,
    GraphNode,
    Node,
    PathView,
    RuleId,
)
from ...services.chain_walk import Path, Step, WalkMode
from ...services.edge_codec import stringify_edge
from ...services.graph_service import GraphService, get_graph_service
from ...services.list_index import LinkKind, ListIndexOptions
from ...services.trail import TrailSelection, trail_labels

router = APIRouter()

Service = Annotated[GraphService, Depends(get_graph_service)]


class RebuildRequest(BaseModel):
    """Explicit input for a rebuild. Omit both fields to rebuild from the current graph."""

    notes: Optional[List[str]] = Field(default=None, description="Known (resolved) note ids")
    edges: Optional[List[ExplicitEdgeIn]] = Field(default=None, description="Explicit edges")


class RebuildResponse(BaseModel):
    """Response from a graph rebuild."""

    version: int
    node_count: int
    explicit_edge_count: int
    implied_edge_count: int
    implied_by_rule: Dict[int, Dict[RuleId, int]]
    failed_hierarchies: Dict[int, str]
    duration_ms: float


class NodeCreateRequest(BaseModel):
    node_id: str = Field(..., min_length=1)


class NodeRenameRequest(BaseModel):
    old_id: str = Field(..., min_length=1)
    new_id: str = Field(..., min_length=1)


class NodeEventResponse(BaseModel):
    status: str
    node_id: str


class StepIn(BaseModel):
    direction: Direction
    reverse: bool = False


class ChainWalkRequest(BaseModel):
    """Parameters of a chain walk."""

    source_id: str = Field(..., min_length=1)
    steps: List[StepIn] = Field(..., min_length=1)
    mode: WalkMode = WalkMode.MAXIMAL
    max_phase_steps: Optional[int] = Field(default=None, ge=1)
    hierarchy_i: Optional[int] = Field(default=None, ge=0)
    explicit_only: bool = False


class TrailView(BaseModel):
    path: PathView
    labels: List[str] = Field(..., description="Notes from the top of the trail down to the current note")


class TrailResponse(BaseModel):
    node_id: str
    trails: List[TrailView]


class SiblingsResponse(BaseModel):
    node_id: str
    siblings: List[str]


class PrevNextResponse(BaseModel):
    node_id: str
    prev: List[str]
    next: List[str]


class ListIndexResponse(BaseModel):
    node_id: str
    markdown: str


def _edge_view(edge: Edge) -> EdgeView:
    link = GraphLink.from_edge(edge)
    return EdgeView(**link.model_dump(), key=stringify_edge(edge))


def _path_view(path: Path) -> PathView:
    return PathView(
        source_id=path.source_id,
        target_id=path.target_id,
        nodes=list(path.nodes),
        edges=[_edge_view(edge) for edge in path.edges],
    )


def _graph_node(node: Node, degree: int) -> GraphNode:
    path = PurePosixPath(node.id)
    parts = path.parts
    return GraphNode(
        id=node.id,
        label=path.stem or node.id,
        val=max(degree, 1),
        group=parts[0] if len(parts) > 1 else "root",
        resolved=node.resolved,
    )


@router.get("/api/graph", response_model=GraphData)
async def get_graph_data(service: Service) -> GraphData:
    """Retrieve every node and edge of the published graph."""
    snapshot = service.snapshot
    graph = snapshot.graph
    return GraphData(
        version=snapshot.version,
        nodes=[_graph_node(node, len(graph.edges_of(node.id))) for node in graph.nodes()],
        links=[GraphLink.from_edge(edge) for edge in graph.edges()],
    )


@router.get("/api/graph/edges", response_model=List[EdgeView])
async def get_edges(service: Service, node_id: str = Query(..., min_length=1)) -> List[EdgeView]:
    """Edges into and out of a note. Unknown notes have none."""
    return [_edge_view(edge) for edge in service.edges_of(node_id)]


@router.post("/api/graph/rebuild", response_model=RebuildResponse)
async def rebuild_graph(service: Service, request: Optional[RebuildRequest] = None) -> RebuildResponse:
    """Rebuild the graph and re-run implied-edge inference."""
    notes = request.notes if request else None
    edges = (
        [edge.to_explicit_edge() for edge in request.edges]
        if request and request.edges is not None
        else None
    )
    snapshot = service.rebuild(notes, edges)
    report = snapshot.report
    return RebuildResponse(
        version=snapshot.version,
        node_count=report.node_count,
        explicit_edge_count=report.explicit_edge_count,
        implied_edge_count=report.implied_edge_count,
        implied_by_rule=report.implied_by_rule,
        failed_hierarchies=report.failed_hierarchies,
        duration_ms=report.duration_ms,
    )


@router.post("/api/graph/nodes", response_model=NodeEventResponse)
async def create_node(service: Service, request: NodeCreateRequest) -> NodeEventResponse:
    service.node_created(request.node_id)
    return NodeEventResponse(status="created", node_id=request.node_id)


@router.post("/api/graph/nodes/rename", response_model=NodeEventResponse)
async def rename_node(service: Service, request: NodeRenameRequest) -> NodeEventResponse:
    renamed = service.node_renamed(request.old_id, request.new_id)
    return NodeEventResponse(status="renamed" if renamed else "ignored", node_id=request.new_id)


@router.delete("/api/graph/nodes", response_model=NodeEventResponse)
async def delete_node(service: Service, node_id: str = Query(..., min_length=1)) -> NodeEventResponse:
    deleted = service.node_deleted(node_id)
    return NodeEventResponse(status="deleted" if deleted else "ignored", node_id=node_id)


@router.post("/api/graph/chain-walk", response_model=List[PathView])
async def post_chain_walk(service: Service, request: ChainWalkRequest) -> List[PathView]:
    """Run a chain walk against the published graph."""

    def predicate(edge: Edge) -> bool:
        if request.hierarchy_i is not None and edge.hierarchy_i != request.hierarchy_i:
            return False
        return edge.explicit or not request.explicit_only

    paths = service.chain_walk(
        request.source_id,
        [Step(step.direction, step.reverse) for step in request.steps],
        predicate,
        mode=request.mode,
        max_phase_steps=request.max_phase_steps,
    )
    return [_path_view(path) for path in paths]


@router.get("/api/graph/trail", response_model=TrailResponse)
async def get_trail(
    service: Service,
    node_id: str = Query(..., min_length=1),
    selection: Optional[TrailSelection] = None,
    depth: Optional[int] = Query(default=None, ge=1),
    hierarchy_i: Optional[int] = Query(default=None, ge=0),
) -> TrailResponse:
    paths = service.trail(node_id, selection=selection, depth=depth, hierarchy_i=hierarchy_i)
    return TrailResponse(
        node_id=node_id,
        trails=[TrailView(path=_path_view(path), labels=trail_labels(path)) for path in paths],
    )


@router.get("/api/graph/siblings", response_model=SiblingsResponse)
async def get_siblings(
    service: Service,
    node_id: str = Query(..., min_length=1),
    hierarchy_i: Optional[int] = Query(default=None, ge=0),
) -> SiblingsResponse:
    return SiblingsResponse(node_id=node_id, siblings=service.siblings(node_id, hierarchy_i=hierarchy_i))


@router.get("/api/graph/prev-next", response_model=PrevNextResponse)
async def get_prev_next(
    service: Service,
    node_id: str = Query(..., min_length=1),
    hierarchy_i: Optional[int] = Query(default=None, ge=0),
) -> PrevNextResponse:
    found = service.prev_next(node_id, hierarchy_i=hierarchy_i)
    return PrevNextResponse(
        node_id=node_id, prev=found[Direction.PREV], next=found[Direction.NEXT]
    )


@router.get("/api/graph/list-index", response_model=ListIndexResponse)
async def get_list_index(
    service: Service,
    node_id: str = Query(..., min_length=1),
    direction: Direction = Direction.DOWN,
    hierarchy_i: Optional[int] = Query(default=None, ge=0),
    link_kind: LinkKind = LinkKind.WIKI,
    max_depth: Optional[int] = Query(default=None, ge=1),
) -> ListIndexResponse:
    options = ListIndexOptions(
        direction=direction,
        hierarchy_i=hierarchy_i,
        link_kind=link_kind,
        max_depth=max_depth,
    )
    return ListIndexResponse(node_id=node_id, markdown=service.list_index(node_id, options))
