"""Backlink queries and local graph extraction over the link table."""

from __future__ import annotations

from collections import Counter
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.graph import GraphData, GraphLink, GraphNode, NoteConnections
from .links import extract_wikilinks
from .note_store import NoteStore, NoteStoreError, StoredNote

logger = logging.getLogger(__name__)


class GraphQueryError(Exception):
    """Raised when graph data cannot be read from the store."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def _build_nodes(
    node_ids: Iterable[str],
    notes: Dict[str, StoredNote],
    links: Sequence[Tuple[str, str]],
    focal_id: Optional[str] = None,
) -> List[GraphNode]:
    degree: Counter[str] = Counter()
    for source, target in links:
        degree[source] += 1
        if target != source:
            degree[target] += 1

    nodes: List[GraphNode] = []
    for node_id in node_ids:
        note = notes.get(node_id)
        nodes.append(
            GraphNode(
                id=node_id,
                label=(note.get("title") or node_id) if note else node_id,
                resolved=note is not None,
                connections=degree[node_id],
                is_focal=node_id == focal_id,
            )
        )
    return nodes


class GraphService:
    """Read-side queries over persisted edges and note content."""

    def __init__(self, store: NoteStore) -> None:
        self.store = store

    def backlinks_of(self, target_id: str) -> List[str]:
        """Return ids of notes linking to ``target_id`` (sorted, possibly empty)."""
        try:
            return sorted(set(self.store.edges_to(target_id)))
        except NoteStoreError as exc:
            raise GraphQueryError(f"Failed to fetch backlinks for {target_id}: {exc.message}") from exc

    def outlinks_of(self, source_id: str) -> List[str]:
        """Return persisted link targets of ``source_id`` in insertion order."""
        try:
            return self.store.edges_from(source_id)
        except NoteStoreError as exc:
            raise GraphQueryError(f"Failed to fetch outlinks for {source_id}: {exc.message}") from exc

    def connections_of(self, note_id: str) -> NoteConnections:
        return NoteConnections(
            note_id=note_id,
            outlinks=self.outlinks_of(note_id),
            backlinks=self.backlinks_of(note_id),
        )

    def local_graph(
        self, focal_id: str, all_notes: Optional[Sequence[StoredNote]] = None
    ) -> GraphData:
        """
        Build the neighbourhood of ``focal_id``.

        Nodes are the focal note, the targets its content links to and the
        notes whose persisted edges point at it. Links are every pair among
        those nodes where the source's content links to the target, so links
        between two neighbours are included too. Targets without a backing
        note stay in the graph as unresolved nodes.
        """
        if all_notes is None:
            try:
                all_notes = self.store.list_all()
            except NoteStoreError as exc:
                raise GraphQueryError(f"Failed to list notes: {exc.message}") from exc
        notes = {note["id"]: note for note in all_notes}

        focal = notes.get(focal_id)
        outlinks = extract_wikilinks(focal.get("content")) if focal else []
        backlinks = self.backlinks_of(focal_id)

        node_ids = list(dict.fromkeys([focal_id, *outlinks, *backlinks]))
        members = set(node_ids)

        links: List[Tuple[str, str]] = []
        for source_id in node_ids:
            note = notes.get(source_id)
            if note is None:
                continue
            for target_id in extract_wikilinks(note.get("content")):
                if target_id in members:
                    links.append((source_id, target_id))

        logger.debug(
            "Local graph built",
            extra={"focal_id": focal_id, "nodes": len(node_ids), "links": len(links)},
        )
        return GraphData(
            nodes=_build_nodes(node_ids, notes, links, focal_id),
            links=[GraphLink(source=s, target=t) for s, t in links],
            focal_id=focal_id,
        )

    def graph_data(self) -> GraphData:
        """Return every note and persisted edge; dangling targets are unresolved nodes."""
        try:
            all_notes = self.store.list_all()
            edges = self.store.all_edges()
        except NoteStoreError as exc:
            raise GraphQueryError(f"Failed to fetch graph data: {exc.message}") from exc

        notes = {note["id"]: note for note in all_notes}
        node_ids = list(notes)
        node_ids.extend(
            dict.fromkeys(target for _, target in edges if target not in notes)
        )
        return GraphData(
            nodes=_build_nodes(node_ids, notes, edges),
            links=[GraphLink(source=s, target=t) for s, t in edges],
        )


__all__ = ["GraphService", "GraphQueryError"]
