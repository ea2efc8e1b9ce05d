"""Rich rendering utilities for the nodes command."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tfdeps._models import DeclarationKind, Graph


def render_node_table(graph: Graph, console: Console) -> None:
    """Render the nodes of a graph as a Rich table.

    Args:
        graph: Graph produced by a traversal.
        console: Rich Console to output to.

    """
    if not len(graph):
        console.print("[dim]No nodes discovered[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Identifier", style="bold", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Depth", justify="right")
    table.add_column("File", style="dim", overflow="fold")
    table.add_column("Refs", justify="right")

    for node in sorted(graph.nodes.values(), key=lambda n: n.depth):
        kind_style = _get_kind_style(node.kind)
        ref_count = sum(len(refs) for refs in node.references.values())
        table.add_row(
            escape(node.id),
            f"[{kind_style}]{node.kind.upper()}[/{kind_style}]",
            str(node.depth),
            escape(str(node.path)),
            str(ref_count),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(graph)} nodes (max depth {graph.max_depth})[/dim]")


def _get_kind_style(kind: DeclarationKind) -> str:
    match kind:
        case DeclarationKind.RESOURCE:
            return "magenta"
        case DeclarationKind.MODULE:
            return "green"
        case DeclarationKind.DATA:
            return "blue"
        case DeclarationKind.OUTPUT:
            return "yellow"
