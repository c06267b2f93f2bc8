from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, cast

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from adapters.filesystem.graph_repository import FileSystemGraphRepository
from adapters.layout.force import ForceLayoutEngine
from adapters.svg.renderer import SvgRenderer
from app.config import AppSettings, load_settings
from app.viewer_wiring import apply_view, build_engine, build_layout_engine, build_renderer
from domain.models import GraphModel
from domain.services.engine import GraphViewEngine

logger = logging.getLogger(__name__)


class ViewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    graph: GraphModel
    selected: str | None = None
    search: str = ""
    zoom: float | None = Field(default=None, gt=0.0)
    pan_x: float = Field(default=0.0, alias="panX")
    pan_y: float = Field(default=0.0, alias="panY")
    hovered: str | None = None


class ViewerContext:
    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings
        self.graph_repo = FileSystemGraphRepository()
        self.layout_engine: ForceLayoutEngine = build_layout_engine(settings)
        self.renderer: SvgRenderer = build_renderer(settings)

    def engine_for(self, request: ViewRequest) -> GraphViewEngine:
        engine = build_engine(self.settings, request.graph)
        apply_view(
            engine,
            selected=request.selected,
            search=request.search,
            zoom=request.zoom,
            pan_x=request.pan_x,
            pan_y=request.pan_y,
            hovered=request.hovered,
        )
        return engine


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title=settings.viewer.title)
    app.state.context = ViewerContext(settings)

    @app.get("/health")
    def health() -> ORJSONResponse:
        return ORJSONResponse({"status": "ok"})

    @app.get("/api/graphs")
    def api_graphs(context: ViewerContext = Depends(get_context)) -> ORJSONResponse:
        graph_dir = context.settings.viewer.graph_dir
        if not graph_dir.exists():
            return ORJSONResponse({"graphs": []})
        return ORJSONResponse({"graphs": sorted(path.stem for path in graph_dir.glob("*.json"))})

    @app.get("/api/graphs/{graph_id}")
    def api_graph(graph_id: str, context: ViewerContext = Depends(get_context)) -> ORJSONResponse:
        graph = load_stored_graph(context, graph_id)
        return ORJSONResponse(graph.model_dump(mode="json", by_alias=True))

    @app.post("/api/layout")
    def api_layout(
        graph: GraphModel, context: ViewerContext = Depends(get_context)
    ) -> ORJSONResponse:
        positions = context.layout_engine.layout(
            graph.nodes, graph.edges, context.settings.viewer.canvas
        )
        logger.debug("Layout computed for %d nodes", len(positions))
        return ORJSONResponse({"nodes": [positioned.to_dict() for positioned in positions]})

    @app.post("/api/draw-list")
    def api_draw_list(
        request: ViewRequest, context: ViewerContext = Depends(get_context)
    ) -> ORJSONResponse:
        engine = context.engine_for(request)
        return ORJSONResponse(engine.draw_list().to_dict())

    @app.post("/api/summary")
    def api_summary(
        request: ViewRequest, context: ViewerContext = Depends(get_context)
    ) -> ORJSONResponse:
        engine = context.engine_for(request)
        details = engine.selection_details()
        payload: dict[str, Any] = {
            "summary": asdict(engine.summary()),
            "selection": None,
        }
        if details is not None:
            payload["selection"] = {
                "id": details.node.id,
                "name": details.node.name,
                "type": details.type.value,
                "issueCount": details.issue_count,
                "inCycle": details.in_cycle,
                "connections": [asdict(connection) for connection in details.connections],
            }
        return ORJSONResponse(payload)

    @app.post("/api/render.svg")
    def api_render_svg(
        request: ViewRequest, context: ViewerContext = Depends(get_context)
    ) -> Response:
        engine = context.engine_for(request)
        svg = context.renderer.render(engine.draw_list())
        return Response(content=svg, media_type="image/svg+xml")

    return app


def get_context(request: Request) -> ViewerContext:
    return cast(ViewerContext, request.app.state.context)


def load_stored_graph(context: ViewerContext, graph_id: str) -> GraphModel:
    if "/" in graph_id or "\\" in graph_id or graph_id.startswith("."):
        raise HTTPException(status_code=404, detail="Graph not found")
    path = context.settings.viewer.graph_dir / f"{graph_id}.json"
    try:
        return context.graph_repo.load(path)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Graph not found") from exc
    except (ValidationError, ValueError) as exc:
        logger.warning("Stored graph %s is invalid: %s", path, exc)
        raise HTTPException(status_code=422, detail="Stored graph is invalid") from exc


app = create_app(load_settings())
