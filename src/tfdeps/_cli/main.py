import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from tfdeps._dot import OutputFormat, RenderScope, render_dot
from tfdeps._models import Graph
from tfdeps._source import SourceLoader
from tfdeps._traverse import build_dependency_graph

from .config import ConfigError, TfdepsConfig, get_config
from .graph_render import render_node_table

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

PathOption = Annotated[
    Path | None,
    typer.Option("-p", "--path", help="Path to a Terraform file; its directory is searched"),
]
TypeOption = Annotated[
    str | None,
    typer.Option("-t", "--type", help="Declaration type (e.g. aws_instance, module, data, output)"),
]
NameOption = Annotated[
    str | None,
    typer.Option("-n", "--name", help="Declaration name (for data sources: <data_type>.<name>)"),
]
DepthOption = Annotated[
    int | None,
    typer.Option("-d", "--depth", help="Maximum depth of dependency tracking"),
]
RecursiveOption = Annotated[
    bool,
    typer.Option("--recursive", help="Also search subdirectories for declarations"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Terraform dependency graph explorer."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(code=1)


def _load_config() -> TfdepsConfig:
    try:
        return get_config()
    except ConfigError as e:
        raise _fail(escape(str(e))) from e


def _build_graph(
    path: Path | None,
    resource_type: str | None,
    name: str | None,
    depth: int,
    *,
    recursive: bool,
) -> Graph:
    """Validate the target options and traverse from the target declaration."""
    if path is None or not resource_type or not name:
        raise _fail("--path, --type and --name are required")
    if not path.exists():
        raise _fail(f"File {escape(str(path))} does not exist")
    if depth < 0:
        raise _fail("--depth must not be negative")

    base_directory = path if path.is_dir() else path.parent
    identifier = f"{resource_type}.{name}"
    err_console.print(f"[cyan]Target:[/cyan] [bold]{escape(identifier)}[/bold] in {escape(str(base_directory))}")

    graph = build_dependency_graph(
        base_directory,
        identifier,
        depth,
        loader=SourceLoader(recursive=recursive),
    )
    if not len(graph):
        err_console.print(f"[yellow]⚠ {escape(identifier)} was not found; the graph is empty[/yellow]")
    return graph


@app.command()
def graph(  # noqa: PLR0913
    path: PathOption = None,
    resource_type: TypeOption = None,
    name: NameOption = None,
    *,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Output file path [default: graph.dot]"),
    ] = None,
    output_format: Annotated[
        str | None,
        typer.Option("-f", "--format", help="Output format (dot)"),
    ] = None,
    depth: DepthOption = None,
    scope: Annotated[
        str | None,
        typer.Option("--scope", help="Render the target's direct references (root) or every node (full)"),
    ] = None,
    recursive: RecursiveOption = False,
) -> None:
    """Write the dependency graph of a declaration as a diagram."""
    config = _load_config()

    output_format = output_format or config.format
    if output_format not in OutputFormat:
        raise _fail(f"Unsupported format {escape(output_format)}")
    scope = scope or config.scope
    if scope not in RenderScope:
        raise _fail(f"Unsupported scope {escape(scope)}")

    dependency_graph = _build_graph(
        path,
        resource_type,
        name,
        config.depth if depth is None else depth,
        recursive=recursive or config.recursive,
    )

    content = render_dot(dependency_graph, RenderScope(scope))
    output = output or config.output
    try:
        output.write_text(content, encoding="utf-8")
    except OSError as e:
        raise _fail(f"Error writing output: {escape(str(e))}") from e

    err_console.print(f"[green]✓[/green] Wrote {len(dependency_graph)} nodes to {escape(str(output))}")


@app.command()
def nodes(
    path: PathOption = None,
    resource_type: TypeOption = None,
    name: NameOption = None,
    *,
    depth: DepthOption = None,
    recursive: RecursiveOption = False,
) -> None:
    """List every declaration discovered from a target."""
    config = _load_config()

    dependency_graph = _build_graph(
        path,
        resource_type,
        name,
        config.depth if depth is None else depth,
        recursive=recursive or config.recursive,
    )
    render_node_table(dependency_graph, out_console)


def main() -> None:
    app()
