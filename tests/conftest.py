from __future__ import annotations

import os
from collections.abc import Callable, Generator, Sequence
from pathlib import Path

import pytest

from app.config import AppSettings, LayoutSettings, ViewerSettings, ViewportSettings
from domain.models import Edge, GraphModel, Node


def _clear_depgraph_env() -> None:
    for key in list(os.environ):
        if key.startswith("DEPGRAPH_"):
            os.environ.pop(key, None)


_clear_depgraph_env()


@pytest.fixture(autouse=True)
def clear_depgraph_env() -> Generator[None, None, None]:
    _clear_depgraph_env()
    yield
    _clear_depgraph_env()


@pytest.fixture
def viewer_settings(tmp_path: Path) -> ViewerSettings:
    return ViewerSettings(
        title="Test Graph",
        canvas_width=800.0,
        canvas_height=600.0,
        graph_dir=tmp_path / "graphs",
        output_dir=tmp_path / "layouts",
        layout=LayoutSettings(),
        viewport=ViewportSettings(),
    )


@pytest.fixture
def viewer_settings_factory(
    viewer_settings: ViewerSettings,
) -> Callable[..., ViewerSettings]:
    def _factory(**overrides: object) -> ViewerSettings:
        return viewer_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def app_settings(viewer_settings: ViewerSettings) -> AppSettings:
    return AppSettings(viewer=viewer_settings)


@pytest.fixture
def app_settings_factory(
    viewer_settings_factory: Callable[..., ViewerSettings],
) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return AppSettings(viewer=viewer_settings_factory(**overrides))

    return _factory


@pytest.fixture
def graph_factory() -> Callable[..., GraphModel]:
    def _factory(
        nodes: Sequence[str | dict[str, object]],
        edges: Sequence[tuple[object, ...]] = (),
        circular_deps: list[list[str]] | None = None,
    ) -> GraphModel:
        return GraphModel(
            nodes=[Node.model_validate(node) for node in nodes],
            edges=[
                Edge(source=edge[0], target=edge[1], is_circular=bool(edge[2:] and edge[2]))
                for edge in edges
            ],
            circular_deps=circular_deps or [],
        )

    return _factory
