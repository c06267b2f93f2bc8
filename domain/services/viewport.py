from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from domain.models import NODE_HEIGHT, NODE_WIDTH, Point, PositionedNode, Viewport


@dataclass(frozen=True)
class ViewportConfig:
    min_zoom: float = 0.3
    max_zoom: float = 3.0
    button_zoom_step: float = 1.2
    wheel_zoom_in: float = 1.1
    wheel_zoom_out: float = 0.9
    click_threshold: float = 3.0
    node_width: float = NODE_WIDTH
    node_height: float = NODE_HEIGHT


@dataclass(frozen=True)
class PanGesture:
    down: Point
    drag_start: Point


@dataclass(frozen=True)
class NodeGesture:
    down: Point
    node_id: str
    last: Point


@dataclass(frozen=True)
class NodeDrag:
    node_id: str
    dx: float
    dy: float


@dataclass(frozen=True)
class PointerRelease:
    clicked: bool
    node_id: str | None


class ViewportController:
    """Owns the pan/zoom transform and the in-progress pointer gesture.

    A pointer-down on a node starts a node drag, anywhere else a pan. Events
    that do not fit the current gesture (a move or release without a press, a
    second press mid-drag) are ignored.
    """

    def __init__(
        self, config: ViewportConfig | None = None, viewport: Viewport | None = None
    ) -> None:
        self.config = config or ViewportConfig()
        self.viewport = viewport or Viewport()
        self.viewport.zoom = self._clamp_zoom(self.viewport.zoom)
        self._gesture: PanGesture | NodeGesture | None = None
        self._travel = 0.0

    @property
    def zoom(self) -> float:
        return self.viewport.zoom

    @property
    def pan(self) -> Point:
        return self.viewport.pan

    @property
    def zoom_percent(self) -> int:
        return round(self.viewport.zoom * 100)

    @property
    def dragging(self) -> bool:
        return self._gesture is not None

    @property
    def dragged_node_id(self) -> str | None:
        if isinstance(self._gesture, NodeGesture):
            return self._gesture.node_id
        return None

    def world_to_screen(self, point: Point) -> Point:
        zoom = self.viewport.zoom
        pan = self.viewport.pan
        return Point(point.x * zoom + pan.x, point.y * zoom + pan.y)

    def screen_to_world(self, point: Point) -> Point:
        zoom = self.viewport.zoom
        pan = self.viewport.pan
        return Point((point.x - pan.x) / zoom, (point.y - pan.y) / zoom)

    def hit_test(self, pos: Point, nodes: Sequence[PositionedNode]) -> PositionedNode | None:
        world = self.screen_to_world(pos)
        half_w = self.config.node_width / 2
        half_h = self.config.node_height / 2
        # Later nodes are drawn on top.
        for node in reversed(nodes):
            if abs(world.x - node.x) <= half_w and abs(world.y - node.y) <= half_h:
                return node
        return None

    def pointer_down(self, pos: Point, nodes: Sequence[PositionedNode] = ()) -> None:
        if self._gesture is not None:
            return
        self._travel = 0.0
        hit = self.hit_test(pos, nodes)
        if hit is not None:
            self._gesture = NodeGesture(down=pos, node_id=hit.id, last=pos)
        else:
            self._gesture = PanGesture(down=pos, drag_start=pos - self.viewport.pan)

    def pointer_move(self, pos: Point) -> NodeDrag | None:
        gesture = self._gesture
        if gesture is None:
            return None
        self._travel = max(self._travel, _distance(pos, gesture.down))
        if isinstance(gesture, PanGesture):
            self.viewport.pan = pos - gesture.drag_start
            return None
        zoom = self.viewport.zoom
        delta = pos - gesture.last
        self._gesture = NodeGesture(down=gesture.down, node_id=gesture.node_id, last=pos)
        if delta.x == 0 and delta.y == 0:
            return None
        return NodeDrag(node_id=gesture.node_id, dx=delta.x / zoom, dy=delta.y / zoom)

    def pointer_up(self, pos: Point | None = None) -> PointerRelease | None:
        gesture = self._gesture
        if gesture is None:
            return None
        if pos is not None:
            self._travel = max(self._travel, _distance(pos, gesture.down))
        self._gesture = None
        if self._travel >= self.config.click_threshold:
            return PointerRelease(clicked=False, node_id=None)
        node_id = gesture.node_id if isinstance(gesture, NodeGesture) else None
        return PointerRelease(clicked=True, node_id=node_id)

    def pointer_leave(self) -> None:
        self._gesture = None
        self._travel = 0.0

    def wheel(self, delta_y: float, anchor: Point | None = None) -> float:
        if delta_y > 0:
            factor = self.config.wheel_zoom_out
        elif delta_y < 0:
            factor = self.config.wheel_zoom_in
        else:
            return self.viewport.zoom
        return self._zoom_to(self.viewport.zoom * factor, anchor)

    def zoom_in(self) -> float:
        return self._zoom_to(self.viewport.zoom * self.config.button_zoom_step)

    def zoom_out(self) -> float:
        return self._zoom_to(self.viewport.zoom / self.config.button_zoom_step)

    def set_zoom(self, zoom: float) -> float:
        return self._zoom_to(zoom)

    def reset_view(self) -> None:
        self.viewport.zoom = self._clamp_zoom(1.0)
        self.viewport.pan = Point(0.0, 0.0)
        self.pointer_leave()

    def _zoom_to(self, zoom: float, anchor: Point | None = None) -> float:
        if math.isnan(zoom):
            return self.viewport.zoom
        new_zoom = self._clamp_zoom(zoom)
        if anchor is not None and new_zoom != self.viewport.zoom:
            world = self.screen_to_world(anchor)
            self.viewport.pan = Point(anchor.x - world.x * new_zoom, anchor.y - world.y * new_zoom)
        self.viewport.zoom = new_zoom
        return new_zoom

    def _clamp_zoom(self, zoom: float) -> float:
        return max(self.config.min_zoom, min(self.config.max_zoom, zoom))


def _distance(first: Point, second: Point) -> float:
    return math.hypot(first.x - second.x, first.y - second.y)
