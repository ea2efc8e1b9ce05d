"""Lookup of declarations by identifier."""

import logging
from pathlib import Path

from ._models import DeclarationKind, Node, qualify
from ._references import extract_references
from ._source import Declaration, SourceLoader

logger = logging.getLogger(__name__)

_REQUIRED_LABELS = {
    DeclarationKind.RESOURCE: 2,
    DeclarationKind.DATA: 2,
    DeclarationKind.MODULE: 1,
    DeclarationKind.OUTPUT: 1,
}


def declaration_identifier(declaration: Declaration) -> str | None:
    """Identifier of a declaration, or None for kinds that never become nodes.

    Example:
        >>> declaration_identifier(Declaration("data", ("aws_ami", "latest"), Tree("body", []), Path("main.tf")))
        'data.aws_ami.latest'

    """
    try:
        kind = DeclarationKind(declaration.kind)
    except ValueError:
        return None
    labels = declaration.labels
    if len(labels) < _REQUIRED_LABELS[kind]:
        return None
    match kind:
        case DeclarationKind.RESOURCE:
            return f"{labels[0]}.{labels[1]}"
        case DeclarationKind.DATA:
            return f"data.{labels[0]}.{labels[1]}"
        case DeclarationKind.MODULE:
            return f"module.{labels[0]}"
        case DeclarationKind.OUTPUT:
            return f"output.{labels[0]}"


def locate(loader: SourceLoader, directory: Path, identifier: str) -> Declaration | None:
    """Find the first declaration in a directory with the given identifier.

    Args:
        loader: Source loader of the current run.
        directory: Directory whose configuration files are searched.
        identifier: Identifier to look for.

    Returns:
        The first matching declaration in file order, or None.

    """
    logger.debug(f"Searching for {identifier} in {directory}")
    for declaration in loader.declarations(directory):
        if declaration_identifier(declaration) == identifier:
            logger.debug(f"Found {identifier} in {declaration.path}")
            return declaration
    logger.debug(f"Declaration not found: {identifier}")
    return None


def node_from_declaration(declaration: Declaration, *, depth: int, namespace: str = "") -> Node:
    """Build a graph node for a declaration, extracting its references.

    Args:
        declaration: Declaration with a node kind (resource, module, data or output).
        depth: Depth of discovery.
        namespace: Module namespace the declaration lives in.

    Returns:
        The node, identified by the namespaced identifier of the declaration.

    """
    identifier = declaration_identifier(declaration)
    if identifier is None:
        msg = f"{declaration.kind} blocks cannot become graph nodes"
        raise ValueError(msg)
    return Node(
        id=qualify(namespace, identifier),
        kind=DeclarationKind(declaration.kind),
        name=declaration.name,
        path=declaration.path,
        references=extract_references(declaration),
        depth=depth,
        module=namespace,
    )
