from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from filelock import FileLock

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import DrawList, GraphModel, PositionedNode
from domain.ports.repositories import GraphRepository, LayoutRepository


class FileSystemGraphRepository(GraphRepository):
    """Reads graph payloads shaped like ``{"nodes", "edges", "circularDeps"}``.

    A payload wrapped in a ``"graph"`` or ``"dependencies"`` key, as returned by
    the analysis API, is unwrapped first.
    """

    def load(self, path: Path) -> GraphModel:
        if not path.exists():
            msg = f"Graph file not found: {path}"
            raise FileNotFoundError(msg)
        return GraphModel.model_validate(unwrap_graph_payload(load_json(path)))

    def load_all_with_paths(self, directory: Path) -> list[tuple[Path, GraphModel]]:
        return [(path, self.load(path)) for path in sorted(self._iter_paths(directory))]

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        yield from directory.glob("*.json")


class FileSystemLayoutRepository(LayoutRepository):
    def save_positions(self, positions: Sequence[PositionedNode], path: Path) -> None:
        self._write(path, {"nodes": [positioned.to_dict() for positioned in positions]})

    def save_draw_list(self, draw_list: DrawList, path: Path) -> None:
        self._write(path, draw_list.to_dict())

    def _write(self, path: Path, payload: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(path, payload)


def unwrap_graph_payload(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        msg = "Graph payload must be a JSON object"
        raise ValueError(msg)
    for key in ("graph", "dependencies"):
        inner = payload.get(key)
        if isinstance(inner, dict) and "nodes" in inner:
            return inner
    return payload
