from __future__ import annotations

from collections.abc import Callable

import pytest
from pydantic import ValidationError

from domain.models import GraphModel, Node, NodeType, infer_node_type


def test_graph_payload_uses_wire_aliases() -> None:
    graph = GraphModel.model_validate(
        {
            "nodes": [
                {"id": "a", "name": "apiGateway", "type": "api", "issueCount": 3},
                {"id": "b", "name": "userService", "type": "service"},
            ],
            "edges": [{"from": "a", "to": "b", "type": "import", "isCircular": True}],
            "circularDeps": [["a", "b"]],
        }
    )

    assert graph.nodes[0].issue_count == 3
    assert graph.nodes[1].issue_count is None
    assert graph.edges[0].source == "a"
    assert graph.edges[0].target == "b"
    assert graph.edges[0].is_circular is True
    assert graph.circular_node_ids == {"a", "b"}


def test_missing_fields_default() -> None:
    graph = GraphModel.model_validate({"nodes": [{"id": "x"}], "edges": [{"from": "x", "to": "y"}]})

    assert graph.nodes[0].name == "x"
    assert graph.edges[0].type == "import"
    assert graph.edges[0].is_circular is False
    assert graph.circular_deps == []


def test_bare_string_nodes_infer_type() -> None:
    graph = GraphModel.model_validate(
        {"nodes": ["src/api/users", "billingService", "helpers/lib", "orderEntity", "index"]}
    )

    assert [node.type for node in graph.nodes] == [
        NodeType.API,
        NodeType.SERVICE,
        NodeType.UTIL,
        NodeType.MODEL,
        NodeType.MODULE,
    ]
    assert graph.nodes[0].id == "src/api/users"
    assert graph.nodes[0].issue_count == 0


def test_unknown_type_maps_to_module() -> None:
    node = Node.model_validate({"id": "a", "name": "a", "type": "Widget"})

    assert node.type is NodeType.MODULE


def test_type_is_case_insensitive() -> None:
    node = Node.model_validate({"id": "a", "name": "a", "type": "COMPONENT"})

    assert node.type is NodeType.COMPONENT


def test_empty_node_id_is_rejected() -> None:
    with pytest.raises(ValidationError):
        GraphModel.model_validate({"nodes": [{"id": "", "name": "x"}]})


def test_edge_without_endpoints_is_rejected() -> None:
    with pytest.raises(ValidationError):
        GraphModel.model_validate({"nodes": [], "edges": [{"from": "a"}]})


def test_infer_node_type_prefers_first_hint() -> None:
    assert infer_node_type("ApiRoute") is NodeType.API
    assert infer_node_type("UserComponent") is NodeType.COMPONENT
    assert infer_node_type("main") is NodeType.MODULE


def test_edges_resolve_by_id_or_name(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(
        [{"id": "n1", "name": "alpha"}, {"id": "n2", "name": "beta"}],
        [("alpha", "n2"), ("n1", "ghost")],
    )

    resolved = list(graph.resolved_edges())

    assert len(resolved) == 1
    idx, _, source, target = resolved[0]
    assert idx == 0
    assert (source.id, target.id) == ("n1", "n2")


def test_first_matching_node_wins_for_ambiguous_refs(
    graph_factory: Callable[..., GraphModel],
) -> None:
    graph = graph_factory([{"id": "a", "name": "b"}, {"id": "b", "name": "c"}])

    resolved = graph.resolve("b")

    assert resolved is not None
    assert resolved.id == "a"


def test_duplicate_ids_keep_first(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory([{"id": "a", "name": "first"}, {"id": "a", "name": "second"}])

    assert graph.node_by_id["a"].name == "first"


def test_is_in_cycle_matches_id_or_name(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(
        [{"id": "n1", "name": "alpha"}, {"id": "n2", "name": "beta"}, "gamma"],
        circular_deps=[["alpha", "n2"]],
    )

    assert [graph.is_in_cycle(node) for node in graph.nodes] == [True, True, False]


def test_graph_is_frozen(graph_factory: Callable[..., GraphModel]) -> None:
    graph = graph_factory(["A", "B"], circular_deps=[["A"]])
    assert graph.circular_node_ids == {"A"}

    with pytest.raises(ValidationError):
        graph.circular_deps = [["Z"]]  # type: ignore[misc]
    with pytest.raises(ValidationError):
        graph.nodes[0].name = "renamed"  # type: ignore[misc]
    edge = GraphModel.model_validate({"edges": [{"from": "A", "to": "B"}]}).edges[0]
    with pytest.raises(ValidationError):
        edge.is_circular = True  # type: ignore[misc]

    assert graph.circular_node_ids == {"A"}
