"""Bounded, deduplicated expansion of the references of a declaration."""

import logging
from dataclasses import dataclass
from pathlib import Path

from ._locator import declaration_identifier, locate, node_from_declaration
from ._models import Category, Graph, iter_references, qualify
from ._modules import is_module_reference, resolve_module
from ._source import SourceLoader

logger = logging.getLogger(__name__)

LOCAL_PREFIX = "local."
DEFAULT_MAX_DEPTH = 3


@dataclass(slots=True, frozen=True)
class _Visit:
    """A pending lookup of an identifier within a module namespace."""

    directory: Path
    namespace: str
    identifier: str
    depth: int

    @property
    def key(self) -> str:
        return qualify(self.namespace, self.identifier)


def build_dependency_graph(
    base_directory: Path,
    identifier: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    loader: SourceLoader | None = None,
) -> Graph:
    """Build the dependency graph of one declaration.

    Args:
        base_directory: Directory holding the declaration.
        identifier: Identifier of the declaration, e.g. ``aws_instance.web``.
        max_depth: Deepest level at which declarations are still expanded.
        loader: Source loader to use; a fresh one is created by default.

    Returns:
        The populated graph. It is empty if the declaration is not found.

    """
    graph = Graph(max_depth=max_depth)
    traverse(graph, base_directory, identifier, 0, set(), loader=loader)
    logger.debug(f"Traversal of {identifier} discovered {len(graph)} nodes")
    return graph


def traverse(  # noqa: PLR0913
    graph: Graph,
    base_directory: Path,
    identifier: str,
    depth: int = 0,
    visited: set[str] | None = None,
    *,
    loader: SourceLoader | None = None,
) -> None:
    """Expand an identifier and everything it references into the graph.

    Traversal is depth-first over an explicit stack. An identifier already
    in ``visited`` or deeper than ``graph.max_depth`` is not expanded, which
    also breaks reference cycles.

    Args:
        graph: Graph to populate.
        base_directory: Directory in which the identifier is looked up.
        identifier: Identifier to expand.
        depth: Depth of the identifier.
        visited: Identifiers already processed in this run; updated in place.
        loader: Source loader to use; a fresh one is created by default.

    """
    if visited is None:
        visited = set()
    if loader is None:
        loader = SourceLoader()

    stack = [_Visit(base_directory, "", identifier, depth)]
    while stack:
        visit = stack.pop()
        children = _expand(graph, loader, visit, visited)
        stack.extend(reversed(children))


def _expand(graph: Graph, loader: SourceLoader, visit: _Visit, visited: set[str]) -> list[_Visit]:
    """Process one visit and return the visits it schedules, in order."""
    key = visit.key
    if visit.depth > graph.max_depth or key in visited:
        return []
    visited.add(key)
    logger.debug(f"Traversing {key} at depth {visit.depth}")

    children: list[_Visit] = []
    if is_module_reference(visit.identifier):
        children.extend(_enter_module(graph, loader, visit))

    declaration = locate(loader, visit.directory, visit.identifier)
    if declaration is None:
        return children

    node = graph.add(node_from_declaration(declaration, depth=visit.depth, namespace=visit.namespace))
    for category, reference in iter_references(node.references):
        if category is Category.VARIABLE or reference.id.startswith(LOCAL_PREFIX):
            continue
        children.append(_Visit(visit.directory, visit.namespace, reference.id, node.depth + 1))
    return children


def _enter_module(graph: Graph, loader: SourceLoader, visit: _Visit) -> list[_Visit]:
    """Record a module call and register the declarations of its source directory."""
    resolution = resolve_module(loader, visit.directory, visit.identifier)
    if resolution is None:
        return []

    call = graph.add(resolution.node(depth=visit.depth, namespace=visit.namespace))
    namespace = qualify(visit.namespace, resolution.call_id)
    if graph.max_depth == 0:
        # Only the root may be recorded
        logger.debug(f"Not expanding {namespace}: maximum depth is 0")
        return []

    # Internals sit one level below the call; the depth guard prunes their visits past the maximum
    depth = call.depth + 1
    children: list[_Visit] = []
    for declaration in loader.declarations(resolution.directory):
        identifier = declaration_identifier(declaration)
        if identifier is None:
            continue
        graph.add(node_from_declaration(declaration, depth=depth, namespace=namespace))
        children.append(_Visit(resolution.directory, namespace, identifier, depth))
    return children
