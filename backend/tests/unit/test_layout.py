"""Unit tests for the force-directed layout engine."""

import math

import pytest

from backend.src.models.graph import GraphData, GraphLink, GraphNode
from backend.src.services.layout import (
    FLOATING_CANVAS,
    ForceLayout,
    LayoutSettings,
    compute_layout,
    get_layout_settings,
    layout_graph,
)

WIDTH = 400
HEIGHT = 200


def _star(leaves: int) -> tuple[list[str], list[tuple[str, str]]]:
    ids = ["hub"] + [f"leaf-{i}" for i in range(leaves)]
    return ids, [("hub", leaf) for leaf in ids[1:]]


def _distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def test_empty_input_returns_empty_map() -> None:
    assert compute_layout([], [], WIDTH, HEIGHT) == {}


def test_empty_input_ignores_canvas_size() -> None:
    assert compute_layout([], [], 20, 20) == {}
    assert ForceLayout().run([], [("a", "b")], 0, 0) == {}


def test_every_node_gets_a_position() -> None:
    ids, edges = _star(5)

    positions = compute_layout(ids, edges, WIDTH, HEIGHT, focal_id="hub")

    assert list(positions) == ids


@pytest.mark.parametrize(
    "width,height,count",
    [(400, 200, 12), (220, 160, 8), (60, 60, 30), (1000, 40, 5)],
)
def test_positions_stay_inside_padding(width: int, height: int, count: int) -> None:
    settings = LayoutSettings()
    ids = [f"n{i}" for i in range(count)]
    edges = [(ids[i], ids[(i * 7 + 3) % count]) for i in range(count)]

    positions = compute_layout(ids, edges, width, height, focal_id=ids[0], settings=settings)

    for x, y in positions.values():
        assert settings.padding <= x <= width - settings.padding
        assert settings.padding <= y <= height - settings.padding


def test_layout_is_deterministic() -> None:
    ids, edges = _star(6)
    edges.append(("leaf-1", "leaf-2"))

    first = compute_layout(ids, edges, WIDTH, HEIGHT, focal_id="hub")
    second = compute_layout(ids, edges, WIDTH, HEIGHT, focal_id="hub")

    assert first == second


def test_single_focal_node_sits_at_center() -> None:
    positions = compute_layout(["only"], [], WIDTH, HEIGHT, focal_id="only")

    assert positions == {"only": (WIDTH / 2, HEIGHT / 2)}


def test_zero_iterations_returns_initial_circle() -> None:
    settings = LayoutSettings(iterations=0)
    ids = ["a", "b", "c", "d"]
    radius = min(WIDTH, HEIGHT) / 4

    positions = compute_layout(ids, [], WIDTH, HEIGHT, focal_id="c", settings=settings)

    assert positions["a"] == pytest.approx((WIDTH / 2 + radius, HEIGHT / 2))
    assert positions["b"] == pytest.approx((WIDTH / 2, HEIGHT / 2 + radius))
    assert positions["c"] == (WIDTH / 2, HEIGHT / 2)
    assert positions["d"] == pytest.approx((WIDTH / 2, HEIGHT / 2 - radius))


def test_focal_node_stays_near_center() -> None:
    ids, edges = _star(5)
    center = (WIDTH / 2, HEIGHT / 2)

    positions = compute_layout(ids, edges, WIDTH, HEIGHT, focal_id="hub")

    hub_distance = _distance(positions["hub"], center)
    # The empty focal slot on the starting circle lets the hub drift, but not far.
    assert hub_distance < min(WIDTH, HEIGHT) / 2
    assert hub_distance < max(_distance(positions[leaf], center) for leaf in ids[1:])


def test_nodes_do_not_overlap() -> None:
    ids, edges = _star(6)

    positions = compute_layout(ids, edges, WIDTH, HEIGHT, focal_id="hub")

    points = list(positions.values())
    for i in range(len(points)):
        for j in range(i + 1, len(points)):
            assert _distance(points[i], points[j]) > 1.0


def test_unknown_edges_and_self_loops_are_ignored() -> None:
    ids, edges = _star(3)

    plain = compute_layout(ids, edges, WIDTH, HEIGHT, focal_id="hub")
    noisy = compute_layout(
        ids, edges + [("hub", "ghost"), ("ghost", "leaf-0"), ("hub", "hub")], WIDTH, HEIGHT, focal_id="hub"
    )

    assert plain == noisy


def test_duplicate_node_ids_are_collapsed() -> None:
    positions = compute_layout(["a", "b", "a"], [("a", "b")], WIDTH, HEIGHT)

    assert set(positions) == {"a", "b"}


def test_coincident_bodies_do_not_produce_nan() -> None:
    layout = ForceLayout(LayoutSettings(iterations=3))
    # Padding of half the canvas pins every node to the same point.
    positions = layout.run(["a", "b"], [("a", "b")], 40, 40)

    for x, y in positions.values():
        assert math.isfinite(x) and math.isfinite(y)
        assert (x, y) == (20, 20)


def test_canvas_smaller_than_padding_is_rejected() -> None:
    with pytest.raises(ValueError):
        compute_layout(["a"], [], 20, 200)


def test_presets() -> None:
    floating = get_layout_settings("floating")

    assert floating.link_distance == 60
    assert floating.repulsion_strength == 400
    assert floating.padding == 15
    assert get_layout_settings("panel").padding == 20
    assert FLOATING_CANVAS == (220, 160)
    assert get_layout_settings("panel") == LayoutSettings()
    assert get_layout_settings("panel", iterations=5).iterations == 5

    with pytest.raises(ValueError):
        get_layout_settings("spiral")


def test_layout_graph_uses_focal_id() -> None:
    graph = GraphData(
        nodes=[GraphNode(id="f", label="F", is_focal=True), GraphNode(id="n", label="N")],
        links=[GraphLink(source="f", target="n")],
        focal_id="f",
    )

    positions = layout_graph(graph, WIDTH, HEIGHT, LayoutSettings(iterations=0))

    assert [p.id for p in positions] == ["f", "n"]
    assert (positions[0].x, positions[0].y) == (WIDTH / 2, HEIGHT / 2)
