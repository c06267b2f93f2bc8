from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from domain.models import Edge, Node, PositionedNode, Size


class LayoutEngine(Protocol):
    def layout(
        self, nodes: Sequence[Node], edges: Sequence[Edge], canvas: Size
    ) -> list[PositionedNode]:
        ...
