from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal

from domain.models import GraphModel, HighlightState, Node, NodeType


@dataclass(frozen=True)
class GraphSummary:
    nodes: int
    edges: int
    rendered_edges: int
    dangling_edges: int
    cycles: int
    circular_nodes: int
    circular_edges: int
    nodes_by_type: Dict[str, int]


@dataclass(frozen=True)
class Connection:
    edge_index: int
    other: str
    direction: Literal["outgoing", "incoming"]
    is_circular: bool


@dataclass(frozen=True)
class SelectionDetails:
    node: Node
    type: NodeType
    issue_count: int | None
    in_cycle: bool
    connections: List[Connection]


def summarize_graph(graph: GraphModel) -> GraphSummary:
    rendered = sum(1 for _ in graph.resolved_edges())
    nodes_by_type: Dict[str, int] = {node_type.value: 0 for node_type in NodeType}
    for node in graph.nodes:
        nodes_by_type[node.type.value] += 1
    circular_nodes = sum(1 for node in graph.nodes if graph.is_in_cycle(node))
    return GraphSummary(
        nodes=len(graph.nodes),
        edges=len(graph.edges),
        rendered_edges=rendered,
        dangling_edges=len(graph.edges) - rendered,
        cycles=len(graph.circular_deps),
        circular_nodes=circular_nodes,
        circular_edges=sum(1 for edge in graph.edges if edge.is_circular),
        nodes_by_type=nodes_by_type,
    )


def describe_selection(
    graph: GraphModel, node_id: str | None, highlight: HighlightState
) -> SelectionDetails | None:
    if not node_id:
        return None
    node = graph.node_by_id.get(node_id)
    if node is None:
        return None
    connections: List[Connection] = []
    for idx in highlight.connected_edges:
        edge = graph.edges[idx]
        outgoing = edge.source in (node.id, node.name)
        connections.append(
            Connection(
                edge_index=idx,
                other=edge.target if outgoing else edge.source,
                direction="outgoing" if outgoing else "incoming",
                is_circular=edge.is_circular,
            )
        )
    return SelectionDetails(
        node=node,
        type=node.type,
        issue_count=node.issue_count,
        in_cycle=graph.is_in_cycle(node),
        connections=connections,
    )
