"""Service layer for link maintenance, graph queries and layout."""

from .config import AppConfig, get_config, reload_config
from .database import DatabaseService, init_database
from .graph import GraphQueryError, GraphService
from .layout import (
    ForceLayout,
    LayoutSettings,
    compute_layout,
    get_layout_settings,
    layout_graph,
)
from .link_sync import DeleteOutcome, LinkSyncError, LinkSynchronizer, SyncOutcome
from .links import (
    LinkSyncPlan,
    WikiLink,
    extract_wikilinks,
    parse_wikilinks,
    plan_link_sync,
    unlink_references,
)
from .note_store import (
    InMemoryNoteStore,
    NoteNotFoundError,
    NoteStore,
    NoteStoreError,
    SQLiteNoteStore,
    StoredNote,
    get_note_store,
)

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "DatabaseService",
    "init_database",
    "WikiLink",
    "LinkSyncPlan",
    "parse_wikilinks",
    "extract_wikilinks",
    "plan_link_sync",
    "unlink_references",
    "NoteStore",
    "StoredNote",
    "NoteStoreError",
    "NoteNotFoundError",
    "SQLiteNoteStore",
    "InMemoryNoteStore",
    "get_note_store",
    "LinkSynchronizer",
    "LinkSyncError",
    "SyncOutcome",
    "DeleteOutcome",
    "GraphService",
    "GraphQueryError",
    "ForceLayout",
    "LayoutSettings",
    "get_layout_settings",
    "compute_layout",
    "layout_graph",
]
