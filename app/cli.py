from __future__ import annotations

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from adapters.filesystem.graph_repository import (
    FileSystemGraphRepository,
    FileSystemLayoutRepository,
)
from app.config import load_settings
from app.viewer_wiring import apply_view, build_engine, build_layout_engine, build_renderer
from domain.models import GraphModel
from domain.services.graph_summary import summarize_graph

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_graph(path: Path) -> GraphModel:
    try:
        return FileSystemGraphRepository().load(path)
    except FileNotFoundError as exc:
        console.print(f"[red]File not found:[/] {escape(str(path))}")
        raise typer.Exit(code=1) from exc
    except (ValidationError, ValueError) as exc:
        console.print(f"[red]Invalid graph:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@app.command("layout")
def layout_graph(
    graph_path: Path = typer.Argument(..., help="Graph JSON with nodes, edges and circularDeps."),
    output: Path = typer.Option(
        None, "--output", "-o", help="Positions JSON to write (defaults to the output dir)."
    ),
    config: Path = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = load_settings(config)
    graph = _load_graph(graph_path)
    positions = build_layout_engine(settings).layout(
        graph.nodes, graph.edges, settings.viewer.canvas
    )
    target = output or settings.viewer.output_dir / f"{graph_path.stem}.layout.json"
    FileSystemLayoutRepository().save_positions(positions, target)
    console.print(f"[green]Wrote[/] {escape(str(target))} ({len(positions)} nodes)")


@app.command("render")
def render_graph(
    graph_path: Path = typer.Argument(..., help="Graph JSON with nodes, edges and circularDeps."),
    output: Path = typer.Option(..., "--output", "-o", help="SVG file to write."),
    select: str = typer.Option(None, "--select", help="Node id to select."),
    search: str = typer.Option("", "--search", help="Case-insensitive name/id filter."),
    zoom: float = typer.Option(None, "--zoom", help="Zoom factor, clamped to the viewer bounds."),
    pan_x: float = typer.Option(0.0, "--pan-x"),
    pan_y: float = typer.Option(0.0, "--pan-y"),
    draw_list: Path = typer.Option(None, "--draw-list", help="Also write the draw list as JSON."),
    config: Path = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = load_settings(config)
    graph = _load_graph(graph_path)
    engine = build_engine(settings, graph)
    if select and select not in graph.node_by_id:
        console.print(f"[yellow]Unknown node id, selection ignored:[/] {escape(select)}")
    apply_view(engine, selected=select, search=search, zoom=zoom, pan_x=pan_x, pan_y=pan_y)

    drawing = engine.draw_list()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(build_renderer(settings).render(drawing), encoding="utf-8")
    console.print(f"[green]Wrote[/] {escape(str(output))}")
    if draw_list is not None:
        FileSystemLayoutRepository().save_draw_list(drawing, draw_list)
        console.print(f"[green]Wrote[/] {escape(str(draw_list))}")


@app.command("summary")
def summary(
    graph_path: Path = typer.Argument(..., help="Graph JSON with nodes, edges and circularDeps."),
    config: Path = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = load_settings(config)
    graph = _load_graph(graph_path)
    stats = summarize_graph(graph)

    table = Table(title=settings.viewer.title)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Modules", str(stats.nodes))
    table.add_row("Connections", str(stats.edges))
    table.add_row("Rendered connections", str(stats.rendered_edges))
    table.add_row("Dangling connections", str(stats.dangling_edges))
    table.add_row("Cycles", str(stats.cycles))
    table.add_row("Modules in cycles", str(stats.circular_nodes))
    for node_type, count in stats.nodes_by_type.items():
        if count:
            table.add_row(f"type: {node_type}", str(count))
    console.print(table)
    if stats.cycles:
        console.print(f"[red]{stats.cycles} circular dependencies[/]")


@app.command("validate")
def validate(
    graph_path: Path = typer.Argument(..., help="Graph JSON file to validate."),
) -> None:
    graph = _load_graph(graph_path)
    dangling = len(graph.edges) - sum(1 for _ in graph.resolved_edges())
    console.print(f"[green]Valid graph:[/] {escape(str(graph_path))}")
    if dangling:
        console.print(f"[yellow]{dangling} edge(s) reference unknown nodes and are not drawn[/]")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8080, "--port"),
    config: Path = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    import uvicorn

    from app.web_main import create_app

    uvicorn.run(create_app(load_settings(config)), host=host, port=port)


if __name__ == "__main__":
    app()
