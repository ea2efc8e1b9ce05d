"""Graph model: references, nodes and the traversal result."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TypeAlias

NAMESPACE_SEPARATOR = "/"


class Category(StrEnum):
    """Classification of a reference by its address prefix."""

    VARIABLE = "variable"
    MODULE = "module"
    DATA = "data"
    RESOURCE = "resource"
    OUTPUT = "output"


class DeclarationKind(StrEnum):
    """Kinds of declarations that can become graph nodes."""

    RESOURCE = "resource"
    MODULE = "module"
    DATA = "data"
    OUTPUT = "output"

    @property
    def category(self) -> Category:
        """Category used when a declaration of this kind is rendered."""
        return Category(self.value)


@dataclass(slots=True, frozen=True)
class Reference:
    """An identifier observed in a declaration, with the file it was seen in."""

    id: str
    path: Path


References: TypeAlias = dict[Category, list[Reference]]


def add_reference(references: References, category: Category, reference: Reference) -> bool:
    """Append a reference to its category unless the identifier is already there.

    Args:
        references: Categorized references to update in place.
        category: Category of the reference.
        reference: The reference to add.

    Returns:
        True if the reference was appended, False if it was a duplicate.

    """
    bucket = references.setdefault(category, [])
    if any(existing.id == reference.id for existing in bucket):
        return False
    bucket.append(reference)
    return True


def iter_references(references: References) -> list[tuple[Category, Reference]]:
    """Flatten categorized references in the fixed category order."""
    return [(category, ref) for category in Category for ref in references.get(category, [])]


def qualify(namespace: str, identifier: str) -> str:
    """Prefix an identifier with a module namespace.

    Example:
        >>> qualify("module.net", "aws_subnet.s")
        'module.net/aws_subnet.s'
        >>> qualify("", "aws_subnet.s")
        'aws_subnet.s'

    """
    if not namespace:
        return identifier
    return f"{namespace}{NAMESPACE_SEPARATOR}{identifier}"


@dataclass(slots=True)
class Node:
    """A declaration materialized in the graph.

    Attributes:
        id: Identifier, qualified with the module namespace when inside a module.
        kind: Declaration kind.
        name: Short name (last label of the declaration).
        path: File the declaration was found in.
        references: Outgoing references by category, unqualified.
        depth: Depth of first discovery (root is 0).
        module: Namespace of the module call path, empty at the root level.

    """

    id: str
    kind: DeclarationKind
    name: str
    path: Path
    references: References = field(default_factory=dict)
    depth: int = 0
    module: str = ""

    def qualified_references(self) -> list[tuple[Category, Reference]]:
        """References with identifiers qualified by this node's namespace."""
        return [
            (category, Reference(id=qualify(self.module, ref.id), path=ref.path))
            for category, ref in iter_references(self.references)
        ]


@dataclass(slots=True)
class Graph:
    """Nodes discovered by one traversal run, keyed by identifier."""

    max_depth: int
    nodes: dict[str, Node] = field(default_factory=dict)

    def add(self, node: Node) -> Node:
        """Store a node unless its identifier is already known.

        Args:
            node: The node to add.

        Returns:
            The node stored under that identifier (the first one discovered).

        """
        return self.nodes.setdefault(node.id, node)

    def roots(self) -> list[Node]:
        """Nodes at depth 0, in discovery order."""
        return [node for node in self.nodes.values() if node.depth == 0]

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self.nodes)

    def __contains__(self, identifier: str) -> bool:
        """Check if an identifier has a node in the graph."""
        return identifier in self.nodes
