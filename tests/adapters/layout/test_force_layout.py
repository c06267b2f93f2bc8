from __future__ import annotations

import math
from collections.abc import Callable

import pytest

from adapters.layout.force import ForceLayoutConfig, ForceLayoutEngine, layout
from domain.models import GraphModel, Size
from tests.helpers.graph_fixtures import load_graph_fixture

CANVAS = Size(800.0, 600.0)


def _distance(first: tuple[float, float], second: tuple[float, float]) -> float:
    return math.hypot(first[0] - second[0], first[1] - second[1])


def test_empty_graph_has_no_positions() -> None:
    engine = ForceLayoutEngine()

    assert engine.layout([], [], CANVAS) == []
    assert list(engine.simulate([], [], CANVAS)) == []


def test_layout_is_deterministic() -> None:
    graph = load_graph_fixture("sample.json")

    first = layout(graph.nodes, graph.edges, CANVAS)
    second = layout(graph.nodes, graph.edges, CANVAS)

    assert [(p.id, p.x, p.y) for p in first] == [(p.id, p.x, p.y) for p in second]


def test_positions_follow_input_order() -> None:
    graph = load_graph_fixture("sample.json")

    positions = layout(graph.nodes, graph.edges, CANVAS)

    assert [p.id for p in positions] == [node.id for node in graph.nodes]


def test_positions_stay_inside_margins(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(
        [f"n{idx}" for idx in range(30)], [("n0", f"n{idx}") for idx in range(1, 30)]
    )

    for canvas in (CANVAS, Size(200.0, 120.0), Size(1600.0, 900.0)):
        for p in layout(graph.nodes, graph.edges, canvas):
            assert 60.0 <= p.x <= canvas.width - 60.0
            assert 40.0 <= p.y <= canvas.height - 40.0


def test_two_connected_nodes_settle_at_bounded_distance(
    graph_factory: Callable[..., GraphModel],
) -> None:
    graph = graph_factory(["A", "B"], [("A", "B")])

    a, b = layout(graph.nodes, graph.edges, CANVAS)
    distance = _distance((a.x, a.y), (b.x, b.y))

    assert 20.0 < distance < 300.0
    for p in (a, b):
        assert 60.0 < p.x < 740.0


def test_single_node_stays_on_initial_circle_axis() -> None:
    graph = GraphModel.model_validate({"nodes": ["solo"]})

    (solo,) = layout(graph.nodes, graph.edges, CANVAS)

    assert solo.y == pytest.approx(300.0)
    assert 400.0 <= solo.x <= 580.0


def test_dangling_edges_are_ignored(graph_factory: Callable[..., GraphModel]) -> None:
    clean = graph_factory(["A", "B"], [("A", "B")])
    noisy = graph_factory(["A", "B"], [("A", "B"), ("A", "ghost"), ("phantom", "B")])

    expected = layout(clean.nodes, clean.edges, CANVAS)
    actual = layout(noisy.nodes, noisy.edges, CANVAS)

    assert [(p.x, p.y) for p in actual] == [(p.x, p.y) for p in expected]


def test_self_loops_do_not_move_nodes(graph_factory: Callable[..., GraphModel]) -> None:
    looped = graph_factory(["A", "B"], [("A", "A")])
    plain = graph_factory(["A", "B"])

    assert [(p.x, p.y) for p in layout(looped.nodes, looped.edges, CANVAS)] == [
        (p.x, p.y) for p in layout(plain.nodes, plain.edges, CANVAS)
    ]


def test_coincident_nodes_do_not_produce_nan(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B", "C"])
    engine = ForceLayoutEngine(ForceLayoutConfig(initial_radius_ratio=0.0))

    for p in engine.layout(graph.nodes, graph.edges, CANVAS):
        assert math.isfinite(p.x) and math.isfinite(p.y)


def test_simulate_yields_every_iteration(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B", "C"], [("A", "B")])
    engine = ForceLayoutEngine()

    frames = list(engine.simulate(graph.nodes, graph.edges, CANVAS))

    assert len(frames) == 50
    assert [(p.x, p.y) for p in frames[-1]] == [
        (p.x, p.y) for p in engine.layout(graph.nodes, graph.edges, CANVAS)
    ]


def test_zero_iterations_return_initial_circle(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B"])
    engine = ForceLayoutEngine(ForceLayoutConfig(iterations=0))

    a, b = engine.layout(graph.nodes, graph.edges, CANVAS)

    assert (a.x, a.y) == pytest.approx((580.0, 300.0))
    assert (b.x, b.y) == pytest.approx((220.0, 300.0))


def test_input_is_not_mutated(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B"], [("A", "B")])
    snapshot = graph.model_dump()

    layout(graph.nodes, graph.edges, CANVAS)

    assert graph.model_dump() == snapshot


def test_clamp_respects_configured_margins() -> None:
    engine = ForceLayoutEngine(ForceLayoutConfig(margin_x=10.0, margin_y=5.0))

    assert engine.clamp(-100.0, 1000.0, CANVAS) == (10.0, 595.0)
