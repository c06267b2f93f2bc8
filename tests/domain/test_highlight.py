from __future__ import annotations

from collections.abc import Callable

from domain.models import EdgeState, GraphModel, NodeState
from domain.services.highlight import compute_highlight_state, matches_query, visible_node_ids


def test_no_selection_leaves_everything_normal(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B"], [("A", "B")])

    highlight = compute_highlight_state(graph)

    assert highlight.node_states == {"A": NodeState.NORMAL, "B": NodeState.NORMAL}
    assert highlight.edge_states == {0: EdgeState.NORMAL}
    assert highlight.connected_edges == []


def test_selection_highlights_neighbourhood(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B", "C", "D"], [("A", "B"), ("C", "D")])

    highlight = compute_highlight_state(graph, "A")

    assert highlight.node_states == {
        "A": NodeState.SELECTED,
        "B": NodeState.CONNECTED,
        "C": NodeState.FADED,
        "D": NodeState.FADED,
    }
    assert highlight.edge_states == {0: EdgeState.HIGHLIGHTED, 1: EdgeState.FADED}
    assert highlight.connected_edges == [0]


def test_highlight_ignores_edge_direction(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B"], [("A", "B")])

    from_source = compute_highlight_state(graph, "A")
    from_target = compute_highlight_state(graph, "B")

    assert from_source.node_states["B"] is NodeState.CONNECTED
    assert from_target.node_states["A"] is NodeState.CONNECTED
    assert from_source.edge_states[0] is from_target.edge_states[0] is EdgeState.HIGHLIGHTED


def test_circular_edges_ignore_selection(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(
        ["A", "B", "C", "D"],
        [("A", "B", True), ("B", "C", True), ("C", "A", True), ("C", "D")],
        circular_deps=[["A", "B", "C"]],
    )

    for selected in (None, "A", "D"):
        highlight = compute_highlight_state(graph, selected)
        assert [highlight.edge_states[idx] for idx in range(3)] == [EdgeState.CIRCULAR] * 3

    assert compute_highlight_state(graph, "D").edge_states[3] is EdgeState.HIGHLIGHTED
    assert compute_highlight_state(graph, "A").edge_states[3] is EdgeState.FADED


def test_circular_edge_still_counts_as_connection(
    graph_factory: Callable[..., GraphModel],
) -> None:
    graph = graph_factory(["A", "B"], [("A", "B", True)])

    highlight = compute_highlight_state(graph, "A")

    assert highlight.connected_edges == [0]
    assert highlight.node_states["B"] is NodeState.CONNECTED


def test_search_filters_non_matching_nodes(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["apiGateway", "userService"])

    highlight = compute_highlight_state(graph, search_query="api")

    assert highlight.node_states == {
        "apiGateway": NodeState.NORMAL,
        "userService": NodeState.FILTERED_OUT,
    }
    assert visible_node_ids(highlight) == {"apiGateway"}


def test_search_is_case_insensitive_and_matches_id(
    graph_factory: Callable[..., GraphModel],
) -> None:
    graph = graph_factory([{"id": "svc-42", "name": "Billing"}, {"id": "x", "name": "Other"}])

    assert compute_highlight_state(graph, search_query="BILL").node_states["svc-42"] is (
        NodeState.NORMAL
    )
    assert compute_highlight_state(graph, search_query="42").node_states["svc-42"] is (
        NodeState.NORMAL
    )
    assert compute_highlight_state(graph, search_query="42").node_states["x"] is (
        NodeState.FILTERED_OUT
    )


def test_selection_wins_over_search(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(
        ["apiGateway", "userService", "orderModel"], [("userService", "orderModel")]
    )

    highlight = compute_highlight_state(graph, "userService", "api")

    assert highlight.node_states == {
        "apiGateway": NodeState.FADED,
        "userService": NodeState.SELECTED,
        "orderModel": NodeState.CONNECTED,
    }


def test_unknown_selection_behaves_as_none(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B"], [("A", "B")])

    highlight = compute_highlight_state(graph, "missing")

    assert highlight == compute_highlight_state(graph)


def test_selection_matches_edges_by_name(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(
        [{"id": "n1", "name": "alpha"}, {"id": "n2", "name": "beta"}], [("alpha", "beta")]
    )

    highlight = compute_highlight_state(graph, "n1")

    assert highlight.node_states["n2"] is NodeState.CONNECTED
    assert highlight.edge_states[0] is EdgeState.HIGHLIGHTED


def test_blank_query_matches_everything(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A"])

    assert matches_query(graph.nodes[0], "   ")


def test_node_sharing_selected_name_is_not_connected(
    graph_factory: Callable[..., GraphModel],
) -> None:
    graph = graph_factory(
        [{"id": "b", "name": "shared"}, {"id": "c", "name": "shared"}, "x"],
        [("x", "shared")],
    )

    highlight = compute_highlight_state(graph, "b")

    assert highlight.node_states == {
        "b": NodeState.SELECTED,
        "c": NodeState.FADED,
        "x": NodeState.CONNECTED,
    }
    assert highlight.edge_states[0] is EdgeState.HIGHLIGHTED


def test_self_loop_connects_nothing(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B"], [("A", "A")])

    highlight = compute_highlight_state(graph, "A")

    assert highlight.node_states == {"A": NodeState.SELECTED, "B": NodeState.FADED}
    assert highlight.connected_edges == [0]
