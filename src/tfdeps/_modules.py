"""Resolution of module calls to local source directories."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from ._locator import node_from_declaration
from ._models import Node
from ._source import Declaration, SourceLoader, literal_string

logger = logging.getLogger(__name__)

MODULE_PREFIX = "module."


@dataclass(slots=True, frozen=True)
class ModuleResolution:
    """A module call whose source is a local directory.

    Attributes:
        call_id: Identifier of the module call (``module.<name>``).
        directory: Resolved source directory.
        declaration: The module block.

    """

    call_id: str
    directory: Path
    declaration: Declaration

    def node(self, *, depth: int, namespace: str = "") -> Node:
        """Node for the module call site, referencing the module's input arguments."""
        return node_from_declaration(self.declaration, depth=depth, namespace=namespace)


def is_module_reference(identifier: str) -> bool:
    """Check if an identifier addresses a module call."""
    return identifier.startswith(MODULE_PREFIX)


def module_name(identifier: str) -> str:
    """Bare module name of a module reference.

    Example:
        >>> module_name("module.network.vpc_id")
        'network'

    """
    return identifier.removeprefix(MODULE_PREFIX).split(".", 1)[0]


def resolve_module(loader: SourceLoader, directory: Path, identifier: str) -> ModuleResolution | None:
    """Find a module call and resolve its relative source directory.

    Only string-literal sources starting with ``.`` are resolved; registry,
    remote and computed sources leave the module unresolved.

    Args:
        loader: Source loader of the current run.
        directory: Directory containing the module call.
        identifier: Module reference, optionally with an attribute suffix.

    Returns:
        The resolution, or None if the call is missing or its source is not a local directory.

    """
    name = module_name(identifier)
    declaration = next(
        (d for d in loader.declarations(directory) if d.kind == "module" and d.labels[:1] == (name,)),
        None,
    )
    if declaration is None:
        logger.debug(f"Module call not found: module.{name} in {directory}")
        return None

    source = literal_string(declaration.attribute("source"))
    if source is None:
        logger.info(f"module.{name}: source is not a static string, not expanding")
        return None
    if not source.startswith("."):
        logger.info(f"module.{name}: non-relative source {source!r}, not expanding")
        return None

    module_directory = Path(os.path.normpath(directory / source))
    if not module_directory.is_dir():
        logger.warning(f"module.{name}: source directory {module_directory} does not exist")
        return None

    logger.debug(f"module.{name} resolved to {module_directory}")
    return ModuleResolution(call_id=f"{MODULE_PREFIX}{name}", directory=module_directory, declaration=declaration)
