"""Graph data models."""

from typing import List, Optional

from pydantic import BaseModel, Field


class GraphNode(BaseModel):
    """Represents a single note (or unresolved link target) in the graph."""

    id: str = Field(..., description="Note identifier")
    label: str = Field(..., description="Display title of the note")
    resolved: bool = Field(
        default=True, description="False when no note backs this identifier"
    )
    connections: int = Field(default=0, ge=0, description="Links touching this node")
    is_focal: bool = Field(default=False, description="Node the graph is centred on")


class GraphLink(BaseModel):
    """Represents a directed connection between two notes."""

    source: str = Field(..., description="ID of the source note")
    target: str = Field(..., description="ID of the target note")


class GraphData(BaseModel):
    """The top-level payload returned by the API."""

    nodes: List[GraphNode]
    links: List[GraphLink]
    focal_id: Optional[str] = Field(default=None, description="Focal node for local graphs")

    @property
    def is_isolated(self) -> bool:
        """True when the graph is a single node with nothing to draw."""
        return len(self.nodes) <= 1 and not self.links


class NodePosition(BaseModel):
    """Final coordinates of one node after layout."""

    id: str
    x: float
    y: float


class GraphLayout(BaseModel):
    """Local graph plus laid-out coordinates for rendering."""

    graph: GraphData
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    positions: List[NodePosition]


class NoteConnections(BaseModel):
    """Outlinks and backlinks of a note."""

    note_id: str
    outlinks: List[str]
    backlinks: List[str]


__all__ = [
    "GraphNode",
    "GraphLink",
    "GraphData",
    "NodePosition",
    "GraphLayout",
    "NoteConnections",
]
