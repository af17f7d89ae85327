"""FastMCP server exposing note, backlink and local graph tools."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field

# Load environment variables from .env file
load_dotenv()

from ..services.database import init_database
from ..services.graph import GraphService
from ..services.links import extract_wikilinks
from ..services.note_store import NoteStore, get_note_store

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "nexus-link-graph",
    instructions=(
        "Knowledge base tools. Notes are addressed by id and link to each other with "
        "[[id]] or [[id|display text]] tokens. Backlinks come from the persisted link "
        "table; link targets without a backing note are reported as unresolved."
    ),
)


def _log_tool_call(tool_name: str, start_time: float, **extra: Any) -> None:
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "MCP tool called",
        extra={"tool_name": tool_name, "duration_ms": f"{duration_ms:.2f}", **extra},
    )


def list_notes_payload(store: NoteStore) -> List[Dict[str, Any]]:
    return [
        {"id": note["id"], "title": note["title"], "updated": note["updated"]}
        for note in store.list_all()
    ]


def note_payload(store: NoteStore, note_id: str) -> Dict[str, Any]:
    note = store.get(note_id)
    return {
        "id": note["id"],
        "title": note["title"],
        "content": note.get("content") or "",
        "outlinks": extract_wikilinks(note.get("content")),
        "backlinks": GraphService(store).backlinks_of(note_id),
    }


def connections_payload(store: NoteStore, note_id: str) -> Dict[str, Any]:
    graph_service = GraphService(store)
    titles = {note["id"]: note["title"] for note in store.list_all()}

    def describe(ids: List[str]) -> List[Dict[str, Any]]:
        return [
            {"id": other, "title": titles.get(other, other), "resolved": other in titles}
            for other in ids
        ]

    return {
        "id": note_id,
        "outlinks": describe(graph_service.outlinks_of(note_id)),
        "backlinks": describe(graph_service.backlinks_of(note_id)),
    }


@mcp.tool(name="list_notes", description="List every note id and title.")
def list_notes() -> List[Dict[str, Any]]:
    start_time = time.time()
    notes = list_notes_payload(get_note_store())
    _log_tool_call("list_notes", start_time, result_count=len(notes))
    return notes


@mcp.tool(name="get_note", description="Read a note with its outlinks and backlinks.")
def get_note(
    note_id: str = Field(..., description="Note identifier."),
) -> dict:
    start_time = time.time()
    payload = note_payload(get_note_store(), note_id)
    _log_tool_call("get_note", start_time, note_id=note_id)
    return payload


@mcp.tool(
    name="get_connections",
    description="List the notes a note links to and the notes linking to it.",
)
def get_connections(
    note_id: str = Field(..., description="Note identifier."),
) -> dict:
    start_time = time.time()
    payload = connections_payload(get_note_store(), note_id)
    _log_tool_call(
        "get_connections",
        start_time,
        note_id=note_id,
        outlinks=len(payload["outlinks"]),
        backlinks=len(payload["backlinks"]),
    )
    return payload


@mcp.tool(
    name="get_local_graph",
    description="Return the focal note plus its direct outlinks and backlinks as nodes and links.",
)
def get_local_graph(
    note_id: str = Field(..., description="Focal note identifier."),
) -> dict:
    start_time = time.time()
    graph = GraphService(get_note_store()).local_graph(note_id)
    _log_tool_call("get_local_graph", start_time, note_id=note_id, nodes=len(graph.nodes))
    return graph.model_dump()


if __name__ == "__main__":
    init_database()
    transport = os.getenv("MCP_TRANSPORT", "stdio").strip().lower() or "stdio"

    if transport == "http":
        port = int(os.getenv("MCP_PORT", "8001"))
        host = os.getenv("MCP_HOST", "127.0.0.1")
        logger.info(
            "Starting MCP server",
            extra={"transport": transport, "host": host, "port": port},
        )
        mcp.run(transport=transport, host=host, port=port)
    else:
        logger.info("Starting MCP server", extra={"transport": transport})
        mcp.run(transport=transport)
