"""Unit tests for backlink queries and local graph extraction."""

from itertools import product
from unittest.mock import Mock

import pytest

from backend.src.services.graph import GraphQueryError, GraphService
from backend.src.services.link_sync import LinkSynchronizer
from backend.src.services.links import extract_wikilinks
from backend.src.services.note_store import InMemoryNoteStore, NoteStoreError


def _seed(notes: dict[str, str], titles: dict[str, str] | None = None) -> InMemoryNoteStore:
    store = InMemoryNoteStore()
    synchronizer = LinkSynchronizer(store)
    for note_id, content in notes.items():
        store.put(note_id, content=content, title=(titles or {}).get(note_id))
        synchronizer.sync(note_id, content)
    return store


@pytest.fixture()
def scenario() -> GraphService:
    return GraphService(_seed({"A": "[[B]]", "B": "[[A]] [[C]]", "C": ""}))


def _node_ids(graph) -> set[str]:
    return {node.id for node in graph.nodes}


def _links(graph) -> set[tuple[str, str]]:
    return {(link.source, link.target) for link in graph.links}


class TestBacklinks:
    def test_scenario_backlinks(self, scenario: GraphService) -> None:
        assert scenario.backlinks_of("A") == ["B"]
        assert scenario.backlinks_of("C") == ["B"]
        assert scenario.backlinks_of("B") == ["A"]

    def test_no_backlinks_is_empty_list(self, scenario: GraphService) -> None:
        assert scenario.backlinks_of("nothing-points-here") == []

    def test_backlinks_are_consistent_with_edges(self) -> None:
        notes = {
            "a": "[[b]] [[c]]",
            "b": "[[a]]",
            "c": "[[c]] [[d]] [[b|Bee]]",
            "d": "",
        }
        store = _seed(notes)
        service = GraphService(store)

        for a, b in product(notes, repeat=2):
            assert (b in service.backlinks_of(a)) == (a in store.edges_from(b))

    def test_outlinks_and_connections(self, scenario: GraphService) -> None:
        connections = scenario.connections_of("B")

        assert connections.outlinks == ["A", "C"]
        assert connections.backlinks == ["A"]

    def test_store_failure_raises_query_error(self) -> None:
        store = Mock()
        store.edges_to.side_effect = NoteStoreError("unavailable")

        with pytest.raises(GraphQueryError):
            GraphService(store).backlinks_of("A")


class TestLocalGraph:
    def test_scenario_local_graph_of_a(self, scenario: GraphService) -> None:
        graph = scenario.local_graph("A")

        assert _node_ids(graph) == {"A", "B"}
        assert _links(graph) == {("A", "B"), ("B", "A")}
        assert graph.focal_id == "A"

    def test_scenario_local_graph_of_b(self, scenario: GraphService) -> None:
        graph = scenario.local_graph("B")

        assert _node_ids(graph) == {"A", "B", "C"}
        assert _links(graph) == {("B", "A"), ("B", "C"), ("A", "B")}

    def test_focal_node_comes_first_and_is_marked(self, scenario: GraphService) -> None:
        graph = scenario.local_graph("B")

        assert graph.nodes[0].id == "B"
        assert graph.nodes[0].is_focal
        assert not any(node.is_focal for node in graph.nodes[1:])

    def test_includes_links_between_neighbours(self) -> None:
        service = GraphService(_seed({"hub": "[[x]] [[y]]", "x": "[[y]]", "y": "", "z": "[[x]]"}))

        graph = service.local_graph("hub")

        assert _node_ids(graph) == {"hub", "x", "y"}
        assert ("x", "y") in _links(graph)
        assert ("z", "x") not in _links(graph)

    def test_contains_every_outlink_and_backlink(self) -> None:
        notes = {"f": "[[a]] [[b|Bee]] [[ghost]]", "a": "", "b": "[[f]]", "c": "[[f]]"}
        service = GraphService(_seed(notes))

        graph = service.local_graph("f")

        expected = {"f", *extract_wikilinks(notes["f"]), *service.backlinks_of("f")}
        assert expected <= _node_ids(graph)

    def test_dangling_target_is_unresolved_node(self) -> None:
        service = GraphService(_seed({"x": "see [[Ghost]]"}, titles={"x": "Ex"}))

        graph = service.local_graph("x")
        nodes = {node.id: node for node in graph.nodes}

        assert nodes["x"].resolved and nodes["x"].label == "Ex"
        assert not nodes["Ghost"].resolved
        assert nodes["Ghost"].label == "Ghost"
        assert _links(graph) == {("x", "Ghost")}

    def test_connections_count_links_in_subgraph(self, scenario: GraphService) -> None:
        graph = scenario.local_graph("B")
        connections = {node.id: node.connections for node in graph.nodes}

        assert connections == {"B": 3, "A": 2, "C": 1}

    def test_isolated_note_has_single_node(self) -> None:
        service = GraphService(_seed({"alone": "no links here"}))

        graph = service.local_graph("alone")

        assert [node.id for node in graph.nodes] == ["alone"]
        assert graph.links == []
        assert graph.is_isolated

    def test_empty_note_collection(self) -> None:
        graph = GraphService(InMemoryNoteStore()).local_graph("f", [])

        assert [node.id for node in graph.nodes] == ["f"]
        assert not graph.nodes[0].resolved
        assert graph.links == []

    def test_explicit_note_collection_overrides_store_content(self, scenario: GraphService) -> None:
        notes = [{"id": "A", "title": "A", "content": "[[C]]"}]

        graph = scenario.local_graph("A", notes)

        # Outlinks come from the supplied content, backlinks from the edge table.
        assert _node_ids(graph) == {"A", "B", "C"}
        assert _links(graph) == {("A", "C")}

    def test_recomputed_after_edit(self) -> None:
        store = _seed({"A": "[[B]]", "B": ""})
        service = GraphService(store)
        assert _node_ids(service.local_graph("A")) == {"A", "B"}

        store.put("A", content="[[C]]")
        LinkSynchronizer(store).sync("A", "[[C]]")

        assert _node_ids(service.local_graph("A")) == {"A", "C"}
        assert service.backlinks_of("B") == []


class TestGraphData:
    def test_full_graph_includes_dangling_targets(self) -> None:
        service = GraphService(_seed({"a": "[[b]] [[ghost]]", "b": "[[a]]"}))

        graph = service.graph_data()
        nodes = {node.id: node for node in graph.nodes}

        assert set(nodes) == {"a", "b", "ghost"}
        assert not nodes["ghost"].resolved
        assert nodes["a"].connections == 3
        assert _links(graph) == {("a", "b"), ("a", "ghost"), ("b", "a")}
        assert graph.focal_id is None

    def test_full_graph_store_failure(self) -> None:
        store = Mock()
        store.list_all.side_effect = NoteStoreError("unavailable")

        with pytest.raises(GraphQueryError):
            GraphService(store).graph_data()
