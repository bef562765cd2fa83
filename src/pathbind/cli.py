from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pathbind.config import get_settings
from pathbind.errors import ConfigurationError
from pathbind.graph.builder import build_binding_graph, graph_to_dot, graph_to_payload
from pathbind.orchestrator.pipeline import ResolveResult, load_project, resolve_project


app = typer.Typer(no_args_is_help=True, add_completion=False)

graph_app = typer.Typer(no_args_is_help=True)
app.add_typer(graph_app, name="graph")

console = Console()
err_console = Console(stderr=True)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _project_path(project: str) -> Path:
    p = Path(project).expanduser().resolve()
    if not p.exists():
        raise typer.BadParameter(f"Project file does not exist: {p}")
    if not p.is_file():
        raise typer.BadParameter(f"Project path is not a file: {p}")
    return p


def _run(project_path: Path, fail_fast: bool = True) -> ResolveResult:
    try:
        return resolve_project(load_project(project_path), fail_fast=fail_fast)
    except ConfigurationError as e:
        err_console.print(f"[bold red]error[/bold red]: {e}")
        raise typer.Exit(code=1)


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    settings = get_settings()
    _setup_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def resolve(
    project: str = typer.Argument(..., help="Path to the project document (JSON)"),
    format: Optional[str] = typer.Option(None, help="Output format: table|json"),
    keep_going: bool = typer.Option(False, help="Report broken controllers instead of stopping"),
) -> None:
    project_path = _project_path(project)
    fmt = (format or get_settings().output_format).lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    result = _run(project_path, fail_fast=not keep_going)

    if fmt == "json":
        payload = {
            "project": str(project_path),
            "controllers": [c.to_dict() for c in result.controllers],
            "errors": [{"controller": name, "message": msg} for name, msg in result.errors],
        }
        typer.echo(json.dumps(payload, indent=2))
    else:
        table = Table(show_header=True, header_style="bold")
        table.add_column("TYPE", no_wrap=True)
        table.add_column("ENTITY")
        table.add_column("REQUEST PATH")
        table.add_column("BINDINGS")
        table.add_column("ID", no_wrap=True)

        for c in result.controllers:
            table.add_row(
                c.endpoint_kind.value,
                c.root_entity.simple_name,
                c.request_path,
                ", ".join(b.field_name for b in c.all_bindings()),
                f"{c.identifier_field}: {c.identifier_type.simple_name}",
            )

        console.print(f"[bold]Project:[/bold] {project_path}")
        console.print(f"[bold]Controllers:[/bold] {len(result.controllers)}")
        console.print(table)

        for name, msg in result.errors:
            err_console.print(f"[bold red]error[/bold red] {name}: {msg}")

    if result.errors:
        raise typer.Exit(code=1)


@graph_app.command("stats")
def graph_stats(
    project: str = typer.Argument(..., help="Path to the project document (JSON)"),
    limit: int = typer.Option(10, help="How many top services to show"),
) -> None:
    project_path = _project_path(project)
    result = build_binding_graph(_run(project_path).controllers)
    g = result.graph

    console.print(f"[bold]Project:[/bold] {project_path}")
    console.print(
        f"Nodes: controllers={g.count('controller')}, entities={g.count('entity')}, "
        f"services={g.count('service')}"
    )
    console.print(
        "Edges: "
        + ", ".join(f"{t}={g.edge_count(t)}" for t in ("EXPOSES", "NESTS", "BINDS", "SERVED_BY"))
    )

    # services most controllers depend on
    service_to_controllers = Counter(e.dst for e in g.edges if e.type == "BINDS")
    console.print("")
    console.print(f"[bold]Top services by controllers bound (limit {limit}):[/bold]")
    for sid, cnt in service_to_controllers.most_common(limit):
        console.print(f"  {cnt:>4}  {g.nodes[sid].qualified_name}")


@graph_app.command("export")
def graph_export(
    project: str = typer.Argument(..., help="Path to the project document (JSON)"),
    format: Optional[str] = typer.Option(None, help="Export format: json|dot"),
    out: Optional[str] = typer.Option(None, help="Output path (default: print to stdout)"),
) -> None:
    project_path = _project_path(project)

    fmt = (format or get_settings().graph_format).lower().strip()
    if fmt not in ("json", "dot"):
        raise typer.BadParameter("format must be one of: json, dot")

    result = build_binding_graph(_run(project_path).controllers)

    if fmt == "json":
        payload = {"project": str(project_path), **graph_to_payload(result)}
        text = json.dumps(payload, indent=2)
    else:
        text = graph_to_dot(result)

    if out:
        out_path = Path(out).expanduser()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        console.print(f"[bold green]Wrote[/bold green] {fmt} graph to: {out_path}")
    else:
        typer.echo(text)


@app.command()
def ping() -> None:
    console.print("pong")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
