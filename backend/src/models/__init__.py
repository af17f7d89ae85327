"""Pydantic models for data validation and serialization."""

from .graph import GraphData, GraphLayout, GraphLink, GraphNode, NodePosition, NoteConnections
from .note import DeleteResponse, Note, NoteCreate, NoteSummary, NoteUpdate

__all__ = [
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "NoteSummary",
    "DeleteResponse",
    "GraphNode",
    "GraphLink",
    "GraphData",
    "NodePosition",
    "GraphLayout",
    "NoteConnections",
]
