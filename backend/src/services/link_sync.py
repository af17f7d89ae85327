"""Keep the persisted link table consistent with note content."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import List, Tuple

from .links import unlink_references
from .note_store import NoteNotFoundError, NoteStore, NoteStoreError

logger = logging.getLogger(__name__)


class LinkSyncError(Exception):
    """Raised when link synchronization could not be applied."""

    def __init__(self, source_id: str, message: str):
        self.source_id = source_id
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class SyncOutcome:
    """Result of synchronizing one source note."""

    source_id: str
    targets: Tuple[str, ...]
    inserted: Tuple[str, ...] = ()
    deleted: Tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.deleted)


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of deleting a note and unlinking its references."""

    note_id: str
    rewritten_sources: Tuple[str, ...] = field(default_factory=tuple)


class LinkSynchronizer:
    """Reconcile a note's outgoing edges with the links in its content."""

    def __init__(self, store: NoteStore) -> None:
        self.store = store

    def sync(self, source_id: str, content: str | None) -> SyncOutcome:
        """
        Make ``edges_from(source_id)`` equal the targets linked in ``content``.

        The store reads, diffs and rewrites the edges in one atomic operation,
        so concurrent syncs of a source leave exactly one content's edge set.
        Calling this again with unchanged content performs no writes.
        """
        start_time = time.time()
        try:
            plan = self.store.replace_links(source_id, content)
        except NoteStoreError as exc:
            logger.error(
                "Link synchronization failed",
                extra={"source_id": source_id, "error": exc.message},
            )
            raise LinkSyncError(
                source_id, f"Failed to synchronize links for {source_id}: {exc.message}"
            ) from exc

        if plan.is_noop:
            logger.debug("Links already in sync", extra={"source_id": source_id})
            return SyncOutcome(source_id=source_id, targets=plan.desired)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Links synchronized",
            extra={
                "source_id": source_id,
                "inserted": len(plan.to_insert),
                "deleted": len(plan.to_delete),
                "duration_ms": f"{duration_ms:.2f}",
            },
        )
        return SyncOutcome(
            source_id=source_id,
            targets=plan.desired,
            inserted=plan.to_insert,
            deleted=plan.to_delete,
        )

    def sync_note(self, note_id: str) -> SyncOutcome:
        """Synchronize a stored note from its current content."""
        try:
            note = self.store.get(note_id)
        except NoteStoreError as exc:
            raise LinkSyncError(note_id, exc.message) from exc
        return self.sync(note_id, note.get("content"))

    def sync_all(self) -> List[SyncOutcome]:
        """Synchronize every stored note; used to rebuild the link table."""
        try:
            notes = self.store.list_all()
        except NoteStoreError as exc:
            raise LinkSyncError("*", exc.message) from exc
        return [self.sync(note["id"], note.get("content")) for note in notes]

    def delete_note(self, note_id: str) -> DeleteOutcome:
        """
        Delete a note after turning every link to it into plain text.

        Each backlinking note keeps the token's display text, or the deleted
        note's title when the token had none, and is re-synchronized.
        """
        try:
            note = self.store.get(note_id)
            sources = [s for s in self.store.edges_to(note_id) if s != note_id]
            rewritten: List[str] = []
            for source_id in sources:
                try:
                    source = self.store.get(source_id)
                except NoteNotFoundError:
                    # Orphaned edge with no source row; drop just the edge.
                    self.store.apply_link_changes(source_id, [note_id], [])
                    continue
                content = source.get("content") or ""
                updated = unlink_references(content, note_id, note.get("title"))
                if updated != content:
                    self.store.put(source_id, content=updated, title=source.get("title"))
                    rewritten.append(source_id)
                # Also clears edges that had gone stale against unchanged content.
                self.sync(source_id, updated)
            self.store.delete(note_id)
        except NoteStoreError as exc:
            raise LinkSyncError(note_id, f"Failed to delete {note_id}: {exc.message}") from exc

        logger.info(
            "Note deleted",
            extra={"note_id": note_id, "rewritten_sources": len(rewritten)},
        )
        return DeleteOutcome(note_id=note_id, rewritten_sources=tuple(rewritten))


__all__ = ["LinkSynchronizer", "LinkSyncError", "SyncOutcome", "DeleteOutcome"]
