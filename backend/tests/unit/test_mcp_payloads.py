"""Tests for the payload builders behind the MCP tools."""

import pytest

from backend.src.mcp.server import connections_payload, list_notes_payload, note_payload
from backend.src.services.link_sync import LinkSynchronizer
from backend.src.services.note_store import InMemoryNoteStore, NoteNotFoundError


@pytest.fixture
def store() -> InMemoryNoteStore:
    store = InMemoryNoteStore()
    synchronizer = LinkSynchronizer(store)
    for note_id, content in {"A": "[[B]] [[Ghost]]", "B": "[[A]]"}.items():
        store.put(note_id, content=content, title=f"Note {note_id}")
        synchronizer.sync(note_id, content)
    return store


def test_list_notes_payload(store: InMemoryNoteStore) -> None:
    assert [entry["id"] for entry in list_notes_payload(store)] == ["A", "B"]


def test_note_payload(store: InMemoryNoteStore) -> None:
    payload = note_payload(store, "A")

    assert payload["title"] == "Note A"
    assert payload["outlinks"] == ["B", "Ghost"]
    assert payload["backlinks"] == ["B"]


def test_note_payload_missing(store: InMemoryNoteStore) -> None:
    with pytest.raises(NoteNotFoundError):
        note_payload(store, "missing")


def test_connections_payload_marks_unresolved(store: InMemoryNoteStore) -> None:
    payload = connections_payload(store, "A")

    assert payload["outlinks"] == [
        {"id": "B", "title": "Note B", "resolved": True},
        {"id": "Ghost", "title": "Ghost", "resolved": False},
    ]
    assert payload["backlinks"] == [{"id": "B", "title": "Note B", "resolved": True}]
