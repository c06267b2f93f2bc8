from __future__ import annotations

from collections.abc import Sequence
from typing import Dict, List

from domain.models import (
    NODE_CORNER_RADIUS,
    NODE_HEIGHT,
    NODE_WIDTH,
    DrawList,
    EdgeDraw,
    EdgeState,
    EmptyState,
    GraphModel,
    HighlightState,
    LegendEntry,
    NodeDraw,
    NodeState,
    NodeStyle,
    NodeType,
    PositionedNode,
    Viewport,
)

NODE_STYLES: Dict[NodeType, NodeStyle] = {
    NodeType.API: NodeStyle(fill="#eff6ff", stroke="#3b82f6"),
    NodeType.SERVICE: NodeStyle(fill="#f0fdf4", stroke="#22c55e"),
    NodeType.COMPONENT: NodeStyle(fill="#faf5ff", stroke="#a855f7"),
    NodeType.UTIL: NodeStyle(fill="#fefce8", stroke="#eab308"),
    NodeType.MODEL: NodeStyle(fill="#fff7ed", stroke="#f97316"),
    NodeType.MODULE: NodeStyle(fill="#f1f5f9", stroke="#64748b"),
}
CIRCULAR_NODE_STYLE = NodeStyle(fill="#fef2f2", stroke="#ef4444")

EDGE_COLOR = "#cbd5e1"
EDGE_HIGHLIGHT_COLOR = "#3b82f6"
EDGE_CIRCULAR_COLOR = "#ef4444"
LABEL_COLOR = "#374151"
SELECTED_TEXT_COLOR = "#ffffff"

ARROW_MARKER = "arrowhead"
CIRCULAR_ARROW_MARKER = "arrowhead-circular"

LABEL_MAX_LENGTH = 12
LABEL_KEEP = 10
ELLIPSIS = "..."

EMPTY_STATE_TITLE = "No dependency information"
EMPTY_STATE_HINT = "Run an analysis to see the dependency graph here"

LEGEND: List[LegendEntry] = [
    LegendEntry("API", NODE_STYLES[NodeType.API].fill, NODE_STYLES[NodeType.API].stroke),
    LegendEntry(
        "Service", NODE_STYLES[NodeType.SERVICE].fill, NODE_STYLES[NodeType.SERVICE].stroke
    ),
    LegendEntry(
        "Component",
        NODE_STYLES[NodeType.COMPONENT].fill,
        NODE_STYLES[NodeType.COMPONENT].stroke,
    ),
    LegendEntry("Circular dependency", CIRCULAR_NODE_STYLE.fill, CIRCULAR_NODE_STYLE.stroke),
]


def truncate_label(name: str) -> str:
    if len(name) > LABEL_MAX_LENGTH:
        return name[:LABEL_KEEP] + ELLIPSIS
    return name


def node_style(graph: GraphModel, positioned: PositionedNode) -> NodeStyle:
    if graph.is_in_cycle(positioned.node):
        return CIRCULAR_NODE_STYLE
    return NODE_STYLES.get(positioned.node.type, NODE_STYLES[NodeType.MODULE])


def build_draw_list(
    positioned_nodes: Sequence[PositionedNode],
    graph: GraphModel,
    viewport: Viewport,
    highlight: HighlightState,
    *,
    hovered_node_id: str | None = None,
    loading: bool = False,
    can_refresh: bool = False,
) -> DrawList:
    """Map layout, viewport and highlight state to screen-space primitives.

    Pure function: nothing passed in is mutated. Filtered-out nodes and edges
    whose endpoints cannot be resolved are left out.
    """
    zoom = viewport.zoom
    pan = viewport.pan

    if not graph.nodes:
        return DrawList(
            node_draws=[],
            edge_draws=[],
            zoom=zoom,
            pan=pan,
            empty_state=EmptyState(
                title=EMPTY_STATE_TITLE,
                hint=EMPTY_STATE_HINT,
                show_refresh=can_refresh,
            ),
            loading_overlay=loading,
        )

    by_id: Dict[str, PositionedNode] = {}
    for positioned in positioned_nodes:
        by_id.setdefault(positioned.id, positioned)

    edge_draws: List[EdgeDraw] = []
    for idx, edge, source, target in graph.resolved_edges():
        start = by_id.get(source.id)
        end = by_id.get(target.id)
        if start is None or end is None:
            continue
        state = highlight.edge_states.get(idx, EdgeState.NORMAL)
        if state is EdgeState.CIRCULAR:
            stroke, width = EDGE_CIRCULAR_COLOR, 2.5
        elif state is EdgeState.HIGHLIGHTED:
            stroke, width = EDGE_HIGHLIGHT_COLOR, 2.0
        else:
            stroke, width = EDGE_COLOR, 1.5
        # Circular edges keep full opacity even while the selection fades others.
        faded = state is EdgeState.FADED
        edge_draws.append(
            EdgeDraw(
                edge_index=idx,
                x1=start.x * zoom + pan.x,
                y1=start.y * zoom + pan.y,
                x2=end.x * zoom + pan.x,
                y2=end.y * zoom + pan.y,
                stroke=stroke,
                stroke_width=width * zoom,
                dashed=edge.is_circular,
                marker=CIRCULAR_ARROW_MARKER if edge.is_circular else ARROW_MARKER,
                opacity=0.2 if faded else 1.0,
                state=state,
            )
        )

    node_draws: List[NodeDraw] = []
    for positioned in positioned_nodes:
        state = highlight.node_states.get(positioned.id, NodeState.NORMAL)
        if state is NodeState.FILTERED_OUT:
            continue
        style = node_style(graph, positioned)
        selected = state is NodeState.SELECTED
        emphasized = selected or positioned.id == hovered_node_id
        node_draws.append(
            NodeDraw(
                node_id=positioned.id,
                x=positioned.x * zoom + pan.x,
                y=positioned.y * zoom + pan.y,
                width=NODE_WIDTH * zoom,
                height=NODE_HEIGHT * zoom,
                corner_radius=NODE_CORNER_RADIUS * zoom,
                fill=style.stroke if selected else style.fill,
                stroke=style.stroke,
                stroke_width=(3.0 if emphasized else 2.0) * zoom,
                opacity=0.3 if state is NodeState.FADED else 1.0,
                state=state,
                type_label=positioned.node.type.value.upper(),
                label=truncate_label(positioned.node.name),
                type_label_color=SELECTED_TEXT_COLOR if selected else style.stroke,
                label_color=SELECTED_TEXT_COLOR if selected else LABEL_COLOR,
                in_cycle=graph.is_in_cycle(positioned.node),
            )
        )

    return DrawList(
        node_draws=node_draws,
        edge_draws=edge_draws,
        zoom=zoom,
        pan=pan,
        loading_overlay=loading,
        legend=list(LEGEND),
    )
