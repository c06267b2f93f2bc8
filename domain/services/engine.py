from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import List

from domain.models import (
    DrawList,
    Edge,
    GraphModel,
    HighlightState,
    Node,
    NodeState,
    Point,
    PositionedNode,
    SelectionState,
    Size,
    Viewport,
)
from domain.ports.layout import LayoutEngine
from domain.services.graph_summary import (
    GraphSummary,
    SelectionDetails,
    describe_selection,
    summarize_graph,
)
from domain.services.highlight import compute_highlight_state
from domain.services.render_model import build_draw_list
from domain.services.viewport import NodeDrag, PointerRelease, ViewportConfig, ViewportController

logger = logging.getLogger(__name__)

DEFAULT_CANVAS = Size(800.0, 600.0)
DEFAULT_BOUNDS_MARGIN = Size(60.0, 40.0)


class GraphViewEngine:
    """State of one dependency-graph view: graph, layout, viewport, selection.

    Every transition is a synchronous method call. Derived views (highlight
    state, draw list, summary) are computed on demand from the current state.
    Replacing the graph recomputes the layout from scratch and keeps the
    viewport and selection.
    """

    def __init__(
        self,
        layout_engine: LayoutEngine,
        *,
        canvas: Size = DEFAULT_CANVAS,
        bounds_margin: Size = DEFAULT_BOUNDS_MARGIN,
        viewport_config: ViewportConfig | None = None,
        on_refresh: Callable[[], object] | None = None,
    ) -> None:
        self.layout_engine = layout_engine
        self.canvas = canvas
        self.bounds_margin = bounds_margin
        self.controller = ViewportController(viewport_config)
        self.selection = SelectionState()
        self.on_refresh = on_refresh
        self.loading = False
        self.fullscreen = False
        self.graph = GraphModel()
        self.layout: List[PositionedNode] = []

    def load(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        circular_deps: Sequence[Sequence[str]] = (),
    ) -> None:
        self.load_graph(
            GraphModel(
                nodes=list(nodes),
                edges=list(edges),
                circular_deps=[list(cycle) for cycle in circular_deps],
            )
        )

    def load_graph(self, graph: GraphModel) -> None:
        self.controller.pointer_leave()
        self.graph = graph
        self.layout = self.layout_engine.layout(graph.nodes, graph.edges, self.canvas)
        logger.debug(
            "Graph loaded: %d nodes, %d edges, %d cycles",
            len(graph.nodes),
            len(graph.edges),
            len(graph.circular_deps),
        )

    @property
    def viewport(self) -> Viewport:
        return self.controller.viewport

    def position_of(self, node_id: str) -> PositionedNode | None:
        for positioned in self.layout:
            if positioned.id == node_id:
                return positioned
        return None

    def visible_nodes(self) -> List[PositionedNode]:
        states = self.highlight_state().node_states
        return [
            positioned
            for positioned in self.layout
            if states.get(positioned.id) is not NodeState.FILTERED_OUT
        ]

    def pointer_down(self, pos: Point) -> None:
        self.controller.pointer_down(pos, self.visible_nodes())

    def pointer_move(self, pos: Point) -> None:
        drag = self.controller.pointer_move(pos)
        if drag is not None:
            self._move_node(drag)

    def pointer_up(self, pos: Point | None = None) -> PointerRelease | None:
        release = self.controller.pointer_up(pos)
        if release is not None and release.clicked and release.node_id is not None:
            self.toggle_selection(release.node_id)
        return release

    def pointer_leave(self) -> None:
        self.controller.pointer_leave()
        self.selection.hovered_node_id = None

    def wheel(self, delta_y: float, anchor: Point | None = None) -> float:
        return self.controller.wheel(delta_y, anchor)

    def zoom_in(self) -> float:
        return self.controller.zoom_in()

    def zoom_out(self) -> float:
        return self.controller.zoom_out()

    def reset_view(self) -> None:
        self.controller.reset_view()
        self.clear_selection()

    def select(self, node_id: str | None) -> None:
        if node_id is not None and node_id not in self.graph.node_by_id:
            return
        self.selection.selected_node_id = node_id

    def toggle_selection(self, node_id: str) -> None:
        if self.selection.selected_node_id == node_id:
            self.clear_selection()
        else:
            self.select(node_id)

    def clear_selection(self) -> None:
        self.selection.selected_node_id = None

    def set_search(self, query: str) -> None:
        self.selection.search_query = query

    def hover(self, node_id: str | None) -> None:
        self.selection.hovered_node_id = node_id

    def toggle_fullscreen(self) -> bool:
        self.fullscreen = not self.fullscreen
        return self.fullscreen

    def refresh(self) -> None:
        if self.on_refresh is None:
            return
        try:
            self.on_refresh()
        except Exception:
            logger.exception("Graph refresh callback failed.")

    def highlight_state(self) -> HighlightState:
        return compute_highlight_state(
            self.graph,
            self.selection.selected_node_id,
            self.selection.search_query,
        )

    def draw_list(self) -> DrawList:
        return build_draw_list(
            self.layout,
            self.graph,
            self.controller.viewport,
            self.highlight_state(),
            hovered_node_id=self.selection.hovered_node_id,
            loading=self.loading,
            can_refresh=self.on_refresh is not None,
        )

    def summary(self) -> GraphSummary:
        return summarize_graph(self.graph)

    def selection_details(self) -> SelectionDetails | None:
        return describe_selection(
            self.graph, self.selection.selected_node_id, self.highlight_state()
        )

    def _move_node(self, drag: NodeDrag) -> None:
        margin_x = self.bounds_margin.width
        margin_y = self.bounds_margin.height
        for idx, positioned in enumerate(self.layout):
            if positioned.id != drag.node_id:
                continue
            x = max(margin_x, min(self.canvas.width - margin_x, positioned.x + drag.dx))
            y = max(margin_y, min(self.canvas.height - margin_y, positioned.y + drag.dy))
            self.layout[idx] = replace(positioned, x=x, y=y)
            return
