from __future__ import annotations

from collections.abc import Callable

from adapters.layout.force import ForceLayoutEngine
from adapters.svg.renderer import SvgRenderer
from app.config import AppSettings
from domain.models import GraphModel, Point
from domain.services.engine import GraphViewEngine


def build_layout_engine(settings: AppSettings) -> ForceLayoutEngine:
    return ForceLayoutEngine(settings.viewer.to_layout_config())


def build_renderer(settings: AppSettings) -> SvgRenderer:
    return SvgRenderer(settings.viewer.to_surface_config())


def build_engine(
    settings: AppSettings,
    graph: GraphModel | None = None,
    on_refresh: Callable[[], object] | None = None,
) -> GraphViewEngine:
    viewer = settings.viewer
    engine = GraphViewEngine(
        build_layout_engine(settings),
        canvas=viewer.canvas,
        bounds_margin=viewer.bounds_margin,
        viewport_config=viewer.to_viewport_config(),
        on_refresh=on_refresh,
    )
    if graph is not None:
        engine.load_graph(graph)
    return engine


def apply_view(
    engine: GraphViewEngine,
    *,
    selected: str | None = None,
    search: str = "",
    zoom: float | None = None,
    pan_x: float = 0.0,
    pan_y: float = 0.0,
    hovered: str | None = None,
) -> None:
    engine.select(selected)
    engine.set_search(search)
    engine.hover(hovered)
    if zoom is not None:
        engine.controller.set_zoom(zoom)
    engine.viewport.pan = Point(pan_x, pan_y)
