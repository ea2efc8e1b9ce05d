"""Graphviz DOT rendering of a dependency graph."""

from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path

from ._models import Category, Graph, Node, iter_references

CATEGORY_COLORS: Mapping[str, str] = {
    Category.VARIABLE: "#FFB6C1",  # Light pink
    Category.MODULE: "#98FB98",  # Pale green
    Category.DATA: "#87CEEB",  # Sky blue
    Category.RESOURCE: "#DDA0DD",  # Plum
    Category.OUTPUT: "#FFA07A",  # Light salmon
}
DEFAULT_COLOR = "#DCDCDC"  # Light gray


class RenderScope(StrEnum):
    """How much of the graph is rendered."""

    ROOT = "root"
    FULL = "full"


class OutputFormat(StrEnum):
    DOT = "dot"


def category_color(category: str) -> str:
    """Fill color of a category, light gray for unknown ones."""
    return CATEGORY_COLORS.get(category, DEFAULT_COLOR)


def render_dot(graph: Graph, scope: RenderScope = RenderScope.ROOT) -> str:
    """Render a graph as a DOT digraph.

    With ``RenderScope.ROOT`` only depth-0 nodes, their direct references and
    the edges between them are drawn. ``RenderScope.FULL`` draws every node
    of the graph and every reference edge, plus a dashed edge from each
    module-internal node to its module call.

    Args:
        graph: Graph produced by a traversal.
        scope: Rendering scope.

    Returns:
        DOT source text.

    """
    lines = [
        "digraph terraform {",
        "  rankdir = LR;",
        "  compound = true;",
        "",
        "  // Node styles",
        "  node [shape=box, style=rounded];",
        "",
    ]
    match scope:
        case RenderScope.ROOT:
            lines.extend(_root_scope(graph))
        case RenderScope.FULL:
            lines.extend(_full_scope(graph))
    lines.append("}")
    return "\n".join(lines) + "\n"


def _root_line(node: Node) -> str:
    return f'  "{node.id}" [label="{node.id}\\n({node.path})", color=red];'


def _filled_line(identifier: str, path: Path, color: str) -> str:
    return f'  "{identifier}" [label="{identifier}\\n({path})", fillcolor="{color}", style="filled,rounded"];'


def _edge_line(source: str, target: str, style: str = "solid") -> str:
    return f'  "{source}" -> "{target}" [style={style}];'


def _root_scope(graph: Graph) -> list[str]:
    roots = graph.roots()
    lines = [_root_line(node) for node in roots]

    lines.extend(["", "  // Referenced nodes"])
    for node in roots:
        lines.extend(
            _filled_line(ref.id, ref.path, category_color(category))
            for category, ref in iter_references(node.references)
        )

    lines.extend(["", "  // Dependencies"])
    for node in roots:
        lines.extend(_edge_line(ref.id, node.id) for _, ref in iter_references(node.references))
    return lines


def _full_scope(graph: Graph) -> list[str]:
    nodes = list(graph.nodes.values())
    lines = [_root_line(node) for node in nodes if node.depth == 0]

    lines.extend(["", "  // Referenced nodes"])
    emitted = {node.id for node in nodes if node.depth == 0}
    for node in nodes:
        if node.id not in emitted:
            emitted.add(node.id)
            lines.append(_filled_line(node.id, node.path, category_color(node.kind.category)))
    for node in nodes:
        for category, ref in node.qualified_references():
            if ref.id not in emitted:
                emitted.add(ref.id)
                lines.append(_filled_line(ref.id, ref.path, category_color(category)))

    lines.extend(["", "  // Dependencies"])
    for node in nodes:
        lines.extend(_edge_line(ref.id, node.id) for _, ref in node.qualified_references())

    lines.extend(["", "  // Module contents"])
    lines.extend(_edge_line(node.id, node.module, "dashed") for node in nodes if node.module in graph)
    return lines
