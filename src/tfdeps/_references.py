"""Extraction of categorized references from a declaration."""

import logging
from collections.abc import Mapping

from ._models import Category, Reference, References, add_reference
from ._source import AttributeStep, Declaration, IndexStep, RootStep, Traversal, variable_traversals

logger = logging.getLogger(__name__)

_PREFIX_CATEGORIES: Mapping[str, Category] = {
    "var": Category.VARIABLE,
    "module": Category.MODULE,
    "data": Category.DATA,
}

# Segments needed to address a declaration; data sources carry a type and a name
_DEFAULT_SEGMENTS = 2
_DATA_SEGMENTS = 3


def traversal_path(traversal: Traversal) -> str:
    """Join a traversal into a dotted path.

    Index steps contribute only when their key is a string.

    Example:
        >>> traversal_path((RootStep("aws_instance"), AttributeStep("web"), IndexStep(0), AttributeStep("id")))
        'aws_instance.web.id'

    """
    parts: list[str] = []
    for step in traversal:
        match step:
            case RootStep(name) | AttributeStep(name):
                parts.append(name)
            case IndexStep(str(key)):
                parts.append(key)
            case _:
                pass
    return ".".join(parts)


def reference_identifier(path: str) -> str | None:
    """Truncate a dotted path to the identifier of the declaration it addresses.

    Args:
        path: Dotted path such as ``aws_instance.web.id``.

    Returns:
        The identifier (``aws_instance.web``), or None when the path has a single segment.

    """
    segments = path.split(".")
    if len(segments) < _DEFAULT_SEGMENTS:
        return None
    keep = _DATA_SEGMENTS if segments[0] == "data" else _DEFAULT_SEGMENTS
    return ".".join(segments[:keep])


def classify(identifier: str) -> Category:
    """Category of a reference identifier, decided by its first segment."""
    prefix, _, _ = identifier.partition(".")
    return _PREFIX_CATEGORIES.get(prefix, Category.RESOURCE)


def extract_references(declaration: Declaration) -> References:
    """Collect the references made by every attribute of a declaration.

    Args:
        declaration: The declaration to inspect.

    Returns:
        References per category, unique by identifier, in first-seen order.

    """
    references: References = {}
    for name, expression in declaration.expressions():
        for traversal in variable_traversals(expression):
            identifier = reference_identifier(traversal_path(traversal))
            if identifier is None:
                continue
            reference = Reference(id=identifier, path=declaration.path)
            if add_reference(references, classify(identifier), reference):
                logger.debug(f"{declaration.kind} {'.'.join(declaration.labels)}: {name} -> {identifier}")
    return references
