"""HTTP API routes for backlinks, graph data and local graph layout."""

from __future__ import annotations

from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...models.graph import GraphData, GraphLayout, NoteConnections
from ...services.config import get_config
from ...services.graph import GraphService
from ...services.layout import get_layout_settings, layout_graph
from ...services.note_store import NoteStore, get_note_store

router = APIRouter()


def get_graph_service(store: Annotated[NoteStore, Depends(get_note_store)]) -> GraphService:
    return GraphService(store)


GraphDep = Annotated[GraphService, Depends(get_graph_service)]


@router.get("/api/graph", response_model=GraphData)
async def get_graph_data(graph_service: GraphDep) -> GraphData:
    """Retrieve every note and link for the overview graph."""
    return graph_service.graph_data()


@router.get("/api/notes/{note_id}/backlinks", response_model=list[str])
async def get_backlinks(note_id: str, graph_service: GraphDep) -> list[str]:
    """List notes linking to ``note_id``; empty when nothing does."""
    return graph_service.backlinks_of(note_id)


@router.get("/api/notes/{note_id}/connections", response_model=NoteConnections)
async def get_connections(note_id: str, graph_service: GraphDep) -> NoteConnections:
    """Outlinks and backlinks of a note."""
    return graph_service.connections_of(note_id)


@router.get("/api/graph/local/{note_id}", response_model=GraphData)
async def get_local_graph(note_id: str, graph_service: GraphDep) -> GraphData:
    """Focal note plus its direct outlinks and backlinks."""
    return graph_service.local_graph(note_id)


@router.get("/api/graph/local/{note_id}/layout", response_model=GraphLayout)
async def get_local_graph_layout(
    note_id: str,
    graph_service: GraphDep,
    width: Optional[int] = Query(None, ge=1, le=4096),
    height: Optional[int] = Query(None, ge=1, le=4096),
    preset: Optional[Literal["panel", "floating"]] = Query(None),
) -> GraphLayout:
    """Local graph with coordinates from the force-directed layout."""
    config = get_config()
    canvas_width = width or config.graph_canvas_width
    canvas_height = height or config.graph_canvas_height
    settings = get_layout_settings(
        preset or config.graph_layout_preset, config.graph_layout_iterations
    )

    graph = graph_service.local_graph(note_id)
    # A lone focal node is not worth drawing.
    if graph.is_isolated:
        positions = []
    else:
        try:
            positions = layout_graph(graph, canvas_width, canvas_height, settings)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    return GraphLayout(
        graph=graph, width=canvas_width, height=canvas_height, positions=positions
    )
