from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Dict, List, Tuple

from domain.models import Edge, Node, PositionedNode, Size
from domain.ports.layout import LayoutEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForceLayoutConfig:
    iterations: int = 50
    repulsion: float = 5000.0
    attraction: float = 0.01
    centering: float = 0.001
    damping: float = 0.9
    initial_radius_ratio: float = 0.3
    margin_x: float = 60.0
    margin_y: float = 40.0


@dataclass
class _Body:
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0


class ForceLayoutEngine(LayoutEngine):
    """Coulomb repulsion plus Hooke springs along edges, integrated for a fixed
    number of iterations.

    Initial placement depends on input order, so the result is deterministic
    for a given ordering and changes when the input is reordered.
    """

    def __init__(self, config: ForceLayoutConfig | None = None) -> None:
        self.config = config or ForceLayoutConfig()

    def layout(
        self, nodes: Sequence[Node], edges: Sequence[Edge], canvas: Size
    ) -> list[PositionedNode]:
        positions = self.initial_positions(nodes, canvas)
        for positions in self.simulate(nodes, edges, canvas):
            pass
        return positions

    def initial_positions(self, nodes: Sequence[Node], canvas: Size) -> list[PositionedNode]:
        if not nodes:
            return []
        return [
            PositionedNode(node=node, x=body.x, y=body.y)
            for node, body in zip(nodes, self._initial_bodies(len(nodes), canvas))
        ]

    def simulate(
        self, nodes: Sequence[Node], edges: Sequence[Edge], canvas: Size
    ) -> Iterator[list[PositionedNode]]:
        if not nodes:
            return
        bodies = self._initial_bodies(len(nodes), canvas)
        springs, dangling = self._springs(nodes, edges)
        logger.debug(
            "Force layout: %d nodes, %d edges (%d dangling), %d iterations",
            len(nodes),
            len(edges),
            dangling,
            self.config.iterations,
        )
        for _ in range(self.config.iterations):
            self._step(bodies, springs, canvas)
            yield [
                PositionedNode(node=node, x=body.x, y=body.y)
                for node, body in zip(nodes, bodies)
            ]

    def clamp(self, x: float, y: float, canvas: Size) -> Tuple[float, float]:
        cfg = self.config
        x = max(cfg.margin_x, min(canvas.width - cfg.margin_x, x))
        y = max(cfg.margin_y, min(canvas.height - cfg.margin_y, y))
        return x, y

    def _initial_bodies(self, count: int, canvas: Size) -> List[_Body]:
        center_x = canvas.width / 2
        center_y = canvas.height / 2
        radius = min(canvas.width, canvas.height) * self.config.initial_radius_ratio
        bodies: List[_Body] = []
        for idx in range(count):
            angle = 2 * math.pi * idx / count
            bodies.append(
                _Body(
                    x=center_x + radius * math.cos(angle),
                    y=center_y + radius * math.sin(angle),
                )
            )
        return bodies

    def _springs(
        self, nodes: Sequence[Node], edges: Sequence[Edge]
    ) -> Tuple[List[Tuple[int, int]], int]:
        # First node in input order whose id or name matches wins.
        index_by_ref: Dict[str, int] = {}
        for idx, node in enumerate(nodes):
            index_by_ref.setdefault(node.id, idx)
            index_by_ref.setdefault(node.name, idx)

        springs: List[Tuple[int, int]] = []
        dangling = 0
        for edge in edges:
            source = index_by_ref.get(edge.source)
            target = index_by_ref.get(edge.target)
            if source is None or target is None:
                dangling += 1
                continue
            springs.append((source, target))
        return springs, dangling

    def _step(
        self, bodies: List[_Body], springs: List[Tuple[int, int]], canvas: Size
    ) -> None:
        cfg = self.config
        center_x = canvas.width / 2
        center_y = canvas.height / 2

        for i in range(len(bodies)):
            first = bodies[i]
            for j in range(i + 1, len(bodies)):
                second = bodies[j]
                dx = second.x - first.x
                dy = second.y - first.y
                dist = max(math.hypot(dx, dy), 1.0)
                force = cfg.repulsion / (dist * dist)
                fx = dx / dist * force
                fy = dy / dist * force
                first.vx -= fx
                first.vy -= fy
                second.vx += fx
                second.vy += fy

        for source_idx, target_idx in springs:
            if source_idx == target_idx:
                continue
            source = bodies[source_idx]
            target = bodies[target_idx]
            # Spring magnitude is dist * attraction along the unit vector.
            fx = (target.x - source.x) * cfg.attraction
            fy = (target.y - source.y) * cfg.attraction
            source.vx += fx
            source.vy += fy
            target.vx -= fx
            target.vy -= fy

        for body in bodies:
            body.vx += (center_x - body.x) * cfg.centering
            body.vy += (center_y - body.y) * cfg.centering
            body.vx *= cfg.damping
            body.vy *= cfg.damping
            body.x, body.y = self.clamp(body.x + body.vx, body.y + body.vy, canvas)


def layout(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    canvas: Size,
    config: ForceLayoutConfig | None = None,
) -> list[PositionedNode]:
    return ForceLayoutEngine(config).layout(nodes, edges, canvas)
