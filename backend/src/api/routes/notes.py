"""HTTP API routes for note operations."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException

from ...models.note import DeleteResponse, Note, NoteCreate, NoteSummary, NoteUpdate
from ...services.graph import GraphService
from ...services.link_sync import LinkSynchronizer
from ...services.links import extract_wikilinks
from ...services.note_store import NoteNotFoundError, NoteStore, StoredNote, get_note_store

router = APIRouter()

StoreDep = Annotated[NoteStore, Depends(get_note_store)]


def _to_note(stored: StoredNote, backlinks: Optional[list[str]] = None) -> Note:
    return Note(
        id=stored["id"],
        title=stored["title"],
        content=stored.get("content") or "",
        outlinks=extract_wikilinks(stored.get("content")),
        backlinks=backlinks or [],
        created=stored["created"],
        updated=stored["updated"],
    )


@router.get("/api/notes", response_model=list[NoteSummary])
async def list_notes(store: StoreDep):
    """List all notes."""
    return [
        NoteSummary(id=note["id"], title=note["title"], updated=note["updated"])
        for note in store.list_all()
    ]


@router.post("/api/notes", response_model=Note, status_code=201)
async def create_note(create: NoteCreate, store: StoreDep):
    """
    Create a new note and index its links.

    Re-posting an identical note re-runs link synchronization instead of
    conflicting, so a create whose sync failed can be retried as a whole.
    """
    if store.exists(create.id):
        existing = store.get(create.id)
        if existing.get("content") == create.content and existing["title"] == (
            create.title or create.id
        ):
            LinkSynchronizer(store).sync(create.id, create.content)
            return _to_note(existing, GraphService(store).backlinks_of(create.id))
        raise HTTPException(
            status_code=409,
            detail={
                "error": "note_already_exists",
                "message": f"A note with the id '{create.id}' already exists.",
            },
        )
    stored = store.put(create.id, content=create.content, title=create.title)
    LinkSynchronizer(store).sync(create.id, create.content)
    return _to_note(stored, GraphService(store).backlinks_of(create.id))


@router.get("/api/notes/{note_id}", response_model=Note)
async def get_note(note_id: str, store: StoreDep):
    """Get a note together with its backlinks."""
    try:
        stored = store.get(note_id)
    except NoteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    return _to_note(stored, GraphService(store).backlinks_of(note_id))


@router.put("/api/notes/{note_id}", response_model=Note)
async def update_note(note_id: str, update: NoteUpdate, store: StoreDep):
    """Replace a note's content and re-synchronize its links."""
    if not store.exists(note_id):
        raise HTTPException(status_code=404, detail=f"Note not found: {note_id}")
    stored = store.put(note_id, content=update.content, title=update.title)
    LinkSynchronizer(store).sync(note_id, update.content)
    return _to_note(stored, GraphService(store).backlinks_of(note_id))


@router.delete("/api/notes/{note_id}", response_model=DeleteResponse)
async def delete_note(note_id: str, store: StoreDep):
    """Delete a note, turning links to it in other notes into plain text."""
    try:
        outcome = LinkSynchronizer(store).delete_note(note_id)
    except NoteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    return DeleteResponse(id=outcome.note_id, rewritten_sources=list(outcome.rewritten_sources))
