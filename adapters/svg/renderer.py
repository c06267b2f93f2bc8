from __future__ import annotations

import html
from dataclasses import dataclass
from typing import List

from domain.models import DrawList, EdgeDraw, NodeDraw
from domain.services.render_model import (
    ARROW_MARKER,
    CIRCULAR_ARROW_MARKER,
    EDGE_CIRCULAR_COLOR,
)

ARROW_COLOR = "#94a3b8"
EMPTY_TITLE_COLOR = "#4b5563"
EMPTY_HINT_COLOR = "#9ca3af"
OVERLAY_FILL = "#ffffff"


@dataclass(frozen=True)
class SvgSurfaceConfig:
    width: float = 800.0
    height: float = 600.0
    type_font_size: float = 9.0
    label_font_size: float = 11.0
    background: str | None = None


class SvgRenderer:
    """Draws a ``DrawList`` as a standalone SVG document.

    Coordinates in the draw list are already in screen space, so no transform
    is applied here.
    """

    def __init__(self, config: SvgSurfaceConfig | None = None) -> None:
        self.config = config or SvgSurfaceConfig()

    def render(self, draw_list: DrawList) -> str:
        cfg = self.config
        parts: List[str] = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(cfg.width)}" '
            f'height="{_num(cfg.height)}" viewBox="0 0 {_num(cfg.width)} {_num(cfg.height)}">',
            self._defs(),
        ]
        if cfg.background:
            parts.append(
                f'<rect width="100%" height="100%" fill="{html.escape(cfg.background)}"/>'
            )

        if draw_list.empty_state is not None:
            parts.extend(self._empty_state(draw_list))
        else:
            parts.append('<g class="edges">')
            parts.extend(self._edge(edge, draw_list.zoom) for edge in draw_list.edge_draws)
            parts.append("</g>")
            parts.append('<g class="nodes">')
            for node in draw_list.node_draws:
                parts.extend(self._node(node, draw_list.zoom))
            parts.append("</g>")

        if draw_list.loading_overlay:
            parts.append(
                f'<rect class="loading" width="100%" height="100%" '
                f'fill="{OVERLAY_FILL}" fill-opacity="0.5"/>'
            )
        parts.append("</svg>")
        return "\n".join(parts)

    def _defs(self) -> str:
        return (
            "<defs>"
            f'<marker id="{ARROW_MARKER}" viewBox="0 0 10 10" refX="8" refY="5" '
            'markerWidth="4" markerHeight="4" orient="auto-start-reverse">'
            f'<path d="M 0 0 L 10 5 L 0 10 z" fill="{ARROW_COLOR}"/></marker>'
            f'<marker id="{CIRCULAR_ARROW_MARKER}" viewBox="0 0 10 10" refX="8" refY="5" '
            'markerWidth="4" markerHeight="4" orient="auto-start-reverse">'
            f'<path d="M 0 0 L 10 5 L 0 10 z" fill="{EDGE_CIRCULAR_COLOR}"/></marker>'
            "</defs>"
        )

    def _edge(self, edge: EdgeDraw, zoom: float) -> str:
        dash = ""
        if edge.dashed:
            dash = f' stroke-dasharray="{_num(6 * zoom)},{_num(3 * zoom)}"'
        return (
            f'<line data-edge="{edge.edge_index}" data-state="{edge.state.value}" '
            f'x1="{_num(edge.x1)}" y1="{_num(edge.y1)}" x2="{_num(edge.x2)}" y2="{_num(edge.y2)}" '
            f'stroke="{edge.stroke}" stroke-width="{_num(edge.stroke_width)}"{dash} '
            f'marker-end="url(#{edge.marker})" opacity="{_num(edge.opacity)}"/>'
        )

    def _node(self, node: NodeDraw, zoom: float) -> List[str]:
        cfg = self.config
        left = node.x - node.width / 2
        top = node.y - node.height / 2
        return [
            f'<g data-node="{html.escape(node.node_id, quote=True)}" '
            f'data-state="{node.state.value}" opacity="{_num(node.opacity)}">',
            f'<rect x="{_num(left)}" y="{_num(top)}" width="{_num(node.width)}" '
            f'height="{_num(node.height)}" rx="{_num(node.corner_radius)}" fill="{node.fill}" '
            f'stroke="{node.stroke}" stroke-width="{_num(node.stroke_width)}"/>',
            f'<text x="{_num(node.x)}" y="{_num(node.y - 4 * zoom)}" text-anchor="middle" '
            f'fill="{node.type_label_color}" font-size="{_num(cfg.type_font_size * zoom)}">'
            f"{html.escape(node.type_label)}</text>",
            f'<text x="{_num(node.x)}" y="{_num(node.y + 10 * zoom)}" text-anchor="middle" '
            f'fill="{node.label_color}" font-size="{_num(cfg.label_font_size * zoom)}" '
            f'font-weight="bold">{html.escape(node.label)}</text>',
            "</g>",
        ]

    def _empty_state(self, draw_list: DrawList) -> List[str]:
        empty = draw_list.empty_state
        if empty is None:
            return []
        center_x = self.config.width / 2
        center_y = self.config.height / 2
        return [
            f'<text class="empty-title" x="{_num(center_x)}" y="{_num(center_y)}" '
            f'text-anchor="middle" fill="{EMPTY_TITLE_COLOR}" font-size="16">'
            f"{html.escape(empty.title)}</text>",
            f'<text class="empty-hint" x="{_num(center_x)}" y="{_num(center_y + 24)}" '
            f'text-anchor="middle" fill="{EMPTY_HINT_COLOR}" font-size="12">'
            f"{html.escape(empty.hint)}</text>",
        ]


def _num(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"
