"""Note and link persistence backends."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
import logging
import sqlite3
import threading
from typing import Any, Dict, Iterator, List, Optional, Protocol, Sequence, Tuple

from .database import DatabaseService
from .links import LinkSyncPlan, plan_link_sync

logger = logging.getLogger(__name__)

StoredNote = Dict[str, Any]


class NoteStoreError(Exception):
    """Raised when the underlying store cannot complete an operation."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NoteNotFoundError(KeyError):
    """Raised when a note id has no backing record."""

    def __init__(self, note_id: str):
        self.note_id = note_id
        self.message = f"Note not found: {note_id}"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class NoteStore(Protocol):
    """Key-value note storage plus the persisted edge table."""

    def get(self, note_id: str) -> StoredNote: ...

    def exists(self, note_id: str) -> bool: ...

    def list_all(self) -> List[StoredNote]: ...

    def put(self, note_id: str, *, content: str, title: str | None = None) -> StoredNote: ...

    def delete(self, note_id: str) -> None: ...

    def edges_from(self, source_id: str) -> List[str]: ...

    def edges_to(self, target_id: str) -> List[str]: ...

    def all_edges(self) -> List[Tuple[str, str]]: ...

    def delete_edges_from(self, source_id: str) -> int: ...

    def insert_edge(self, source_id: str, target_id: str) -> bool: ...

    def apply_link_changes(
        self, source_id: str, to_delete: Sequence[str], to_insert: Sequence[str]
    ) -> None: ...

    def replace_links(self, source_id: str, content: str | None) -> LinkSyncPlan: ...


class SQLiteNoteStore:
    """Store backed by the ``notes`` and ``note_links`` tables."""

    def __init__(self, db_service: DatabaseService | None = None) -> None:
        self.db_service = db_service or DatabaseService()

    @contextmanager
    def _connection(self, action: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = self.db_service.connect()
        except sqlite3.Error as exc:
            raise NoteStoreError(f"Failed to {action}: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            logger.exception("Store operation failed", extra={"action": action})
            raise NoteStoreError(f"Failed to {action}: {exc}") from exc
        finally:
            conn.close()

    def get(self, note_id: str) -> StoredNote:
        with self._connection("read note") as conn:
            row = conn.execute(
                "SELECT id, title, content, created, updated FROM notes WHERE id = ?",
                (note_id,),
            ).fetchone()
        if row is None:
            raise NoteNotFoundError(note_id)
        return dict(row)

    def exists(self, note_id: str) -> bool:
        with self._connection("read note") as conn:
            row = conn.execute("SELECT 1 FROM notes WHERE id = ?", (note_id,)).fetchone()
        return row is not None

    def list_all(self) -> List[StoredNote]:
        with self._connection("list notes") as conn:
            rows = conn.execute(
                "SELECT id, title, content, created, updated FROM notes ORDER BY id"
            ).fetchall()
        return [dict(row) for row in rows]

    def put(self, note_id: str, *, content: str, title: str | None = None) -> StoredNote:
        now_iso = _utcnow_iso()
        with self._connection("write note") as conn:
            with conn:
                row = conn.execute(
                    "SELECT title, created FROM notes WHERE id = ?", (note_id,)
                ).fetchone()
                if row is None:
                    conn.execute(
                        """
                        INSERT INTO notes (id, title, content, created, updated)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        (note_id, title or note_id, content, now_iso, now_iso),
                    )
                else:
                    conn.execute(
                        "UPDATE notes SET title = ?, content = ?, updated = ? WHERE id = ?",
                        (title or row["title"], content, now_iso, note_id),
                    )
        return self.get(note_id)

    def delete(self, note_id: str) -> None:
        with self._connection("delete note") as conn:
            with conn:
                conn.execute("DELETE FROM note_links WHERE source_id = ?", (note_id,))
                cursor = conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
        if cursor.rowcount == 0:
            raise NoteNotFoundError(note_id)

    def edges_from(self, source_id: str) -> List[str]:
        with self._connection("read links") as conn:
            rows = conn.execute(
                "SELECT target_id FROM note_links WHERE source_id = ? ORDER BY rowid",
                (source_id,),
            ).fetchall()
        return [row["target_id"] for row in rows]

    def edges_to(self, target_id: str) -> List[str]:
        with self._connection("read backlinks") as conn:
            rows = conn.execute(
                "SELECT source_id FROM note_links WHERE target_id = ? ORDER BY source_id",
                (target_id,),
            ).fetchall()
        return [row["source_id"] for row in rows]

    def all_edges(self) -> List[Tuple[str, str]]:
        with self._connection("read links") as conn:
            rows = conn.execute(
                "SELECT source_id, target_id FROM note_links ORDER BY source_id, rowid"
            ).fetchall()
        return [(row["source_id"], row["target_id"]) for row in rows]

    def delete_edges_from(self, source_id: str) -> int:
        with self._connection("delete links") as conn:
            with conn:
                cursor = conn.execute(
                    "DELETE FROM note_links WHERE source_id = ?", (source_id,)
                )
        return cursor.rowcount

    def insert_edge(self, source_id: str, target_id: str) -> bool:
        with self._connection("insert link") as conn:
            with conn:
                cursor = conn.execute(
                    "INSERT OR IGNORE INTO note_links (source_id, target_id) VALUES (?, ?)",
                    (source_id, target_id),
                )
        return cursor.rowcount == 1

    def apply_link_changes(
        self, source_id: str, to_delete: Sequence[str], to_insert: Sequence[str]
    ) -> None:
        """Delete then insert edges for one source inside a single transaction."""
        with self._connection("synchronize links") as conn:
            with conn:
                self._write_link_changes(conn, source_id, to_delete, to_insert)

    def replace_links(self, source_id: str, content: str | None) -> LinkSyncPlan:
        """
        Read, diff and rewrite the edges of one source in one write transaction.

        ``BEGIN IMMEDIATE`` takes the write lock before the read, so concurrent
        syncs of the same source serialize and the last one wins outright.
        """
        with self._connection("synchronize links") as conn:
            conn.isolation_level = None
            conn.execute("BEGIN IMMEDIATE")
            try:
                rows = conn.execute(
                    "SELECT target_id FROM note_links WHERE source_id = ? ORDER BY rowid",
                    (source_id,),
                ).fetchall()
                plan = plan_link_sync([row["target_id"] for row in rows], content)
                if not plan.is_noop:
                    self._write_link_changes(conn, source_id, plan.to_delete, plan.to_insert)
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
        return plan

    @staticmethod
    def _write_link_changes(
        conn: sqlite3.Connection,
        source_id: str,
        to_delete: Sequence[str],
        to_insert: Sequence[str],
    ) -> None:
        conn.executemany(
            "DELETE FROM note_links WHERE source_id = ? AND target_id = ?",
            [(source_id, target) for target in to_delete],
        )
        conn.executemany(
            "INSERT OR IGNORE INTO note_links (source_id, target_id) VALUES (?, ?)",
            [(source_id, target) for target in to_insert],
        )


class InMemoryNoteStore:
    """Dict-backed store for embedding and tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._notes: Dict[str, StoredNote] = {}
        # source -> ordered targets
        self._edges: Dict[str, Dict[str, None]] = {}

    def get(self, note_id: str) -> StoredNote:
        with self._lock:
            note = self._notes.get(note_id)
            if note is None:
                raise NoteNotFoundError(note_id)
            return dict(note)

    def exists(self, note_id: str) -> bool:
        with self._lock:
            return note_id in self._notes

    def list_all(self) -> List[StoredNote]:
        with self._lock:
            return [dict(self._notes[key]) for key in sorted(self._notes)]

    def put(self, note_id: str, *, content: str, title: str | None = None) -> StoredNote:
        now_iso = _utcnow_iso()
        with self._lock:
            existing = self._notes.get(note_id)
            note = {
                "id": note_id,
                "title": title or (existing["title"] if existing else note_id),
                "content": content,
                "created": existing["created"] if existing else now_iso,
                "updated": now_iso,
            }
            self._notes[note_id] = note
            return dict(note)

    def delete(self, note_id: str) -> None:
        with self._lock:
            if note_id not in self._notes:
                raise NoteNotFoundError(note_id)
            del self._notes[note_id]
            self._edges.pop(note_id, None)

    def edges_from(self, source_id: str) -> List[str]:
        with self._lock:
            return list(self._edges.get(source_id, {}))

    def edges_to(self, target_id: str) -> List[str]:
        with self._lock:
            return sorted(
                source for source, targets in self._edges.items() if target_id in targets
            )

    def all_edges(self) -> List[Tuple[str, str]]:
        with self._lock:
            return [
                (source, target)
                for source in sorted(self._edges)
                for target in self._edges[source]
            ]

    def delete_edges_from(self, source_id: str) -> int:
        with self._lock:
            return len(self._edges.pop(source_id, {}))

    def insert_edge(self, source_id: str, target_id: str) -> bool:
        with self._lock:
            targets = self._edges.setdefault(source_id, {})
            if target_id in targets:
                return False
            targets[target_id] = None
            return True

    def apply_link_changes(
        self, source_id: str, to_delete: Sequence[str], to_insert: Sequence[str]
    ) -> None:
        with self._lock:
            self._apply_locked(source_id, to_delete, to_insert)

    def replace_links(self, source_id: str, content: str | None) -> LinkSyncPlan:
        with self._lock:
            plan = plan_link_sync(self._edges.get(source_id, {}), content)
            if not plan.is_noop:
                self._apply_locked(source_id, plan.to_delete, plan.to_insert)
            return plan

    def _apply_locked(
        self, source_id: str, to_delete: Sequence[str], to_insert: Sequence[str]
    ) -> None:
        targets = dict(self._edges.get(source_id, {}))
        for target in to_delete:
            targets.pop(target, None)
        for target in to_insert:
            targets.setdefault(target, None)
        if targets:
            self._edges[source_id] = targets
        else:
            self._edges.pop(source_id, None)


# Singleton instance for dependency injection
_note_store: Optional[SQLiteNoteStore] = None


def get_note_store() -> SQLiteNoteStore:
    """Get or create the SQLite note store singleton."""
    global _note_store
    if _note_store is None:
        _note_store = SQLiteNoteStore()
    return _note_store


__all__ = [
    "StoredNote",
    "NoteStore",
    "NoteStoreError",
    "NoteNotFoundError",
    "SQLiteNoteStore",
    "InMemoryNoteStore",
    "get_note_store",
]
