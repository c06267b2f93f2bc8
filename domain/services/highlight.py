from __future__ import annotations

from typing import Dict, List

from domain.models import (
    EdgeState,
    GraphModel,
    HighlightState,
    Node,
    NodeState,
    edge_touches,
)


def compute_highlight_state(
    graph: GraphModel,
    selected_node_id: str | None = None,
    search_query: str = "",
) -> HighlightState:
    """Per-node and per-edge visual state for the current selection and search.

    Edge endpoints are matched against both the selected node's id and name,
    and highlighting ignores edge direction. The far endpoint of a touching
    edge resolves to a single node, so nodes that merely share the selected
    node's name stay faded. Circular edges always stay
    ``circular``. Search only affects presentation: nodes that miss the query
    are ``filtered-out`` unless the selection already marks them.
    """
    selected = graph.node_by_id.get(selected_node_id) if selected_node_id else None

    edge_states: Dict[int, EdgeState] = {}
    connected_edges: List[int] = []
    for idx, edge in enumerate(graph.edges):
        touches = selected is not None and edge_touches(edge, selected)
        if touches:
            connected_edges.append(idx)
        if edge.is_circular:
            edge_states[idx] = EdgeState.CIRCULAR
        elif selected is None:
            edge_states[idx] = EdgeState.NORMAL
        elif touches:
            edge_states[idx] = EdgeState.HIGHLIGHTED
        else:
            edge_states[idx] = EdgeState.FADED

    connected_ids: set[str] = set()
    if selected is not None:
        selected_refs = {selected.id, selected.name}
        for idx in connected_edges:
            edge = graph.edges[idx]
            for ref in (edge.source, edge.target):
                if ref in selected_refs:
                    continue
                other = graph.resolve(ref)
                if other is not None:
                    connected_ids.add(other.id)

    query = search_query.strip().lower()
    node_states: Dict[str, NodeState] = {}
    for node in graph.nodes:
        if node.id in node_states:
            continue
        if selected is None:
            state = NodeState.NORMAL
        elif node.id == selected.id:
            state = NodeState.SELECTED
        elif node.id in connected_ids:
            state = NodeState.CONNECTED
        else:
            state = NodeState.FADED
        if query and state not in (NodeState.SELECTED, NodeState.CONNECTED):
            if not matches_query(node, query):
                state = NodeState.FILTERED_OUT
        node_states[node.id] = state

    return HighlightState(
        node_states=node_states,
        edge_states=edge_states,
        connected_edges=connected_edges,
    )


def matches_query(node: Node, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    return needle in node.name.lower() or needle in node.id.lower()


def visible_node_ids(highlight: HighlightState) -> set[str]:
    return {
        node_id
        for node_id, state in highlight.node_states.items()
        if state is not NodeState.FILTERED_OUT
    }
