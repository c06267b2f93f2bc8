from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import DrawList, GraphModel, PositionedNode


class GraphRepository(Protocol):
    def load(self, path: Path) -> GraphModel: ...

    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, GraphModel]]: ...


class LayoutRepository(Protocol):
    def save_positions(self, positions: Sequence[PositionedNode], path: Path) -> None: ...

    def save_draw_list(self, draw_list: DrawList, path: Path) -> None: ...
