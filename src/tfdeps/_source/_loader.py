"""Discovery and parsing of Terraform configuration files."""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import hcl2
from lark import Token, Tree
from lark.exceptions import LarkError

from ._expressions import literal_string, token_text

logger = logging.getLogger(__name__)

# Number of labels each block type carries
LABEL_COUNTS: Mapping[str, int] = {
    "resource": 2,
    "data": 2,
    "module": 1,
    "output": 1,
    "variable": 1,
    "provider": 1,
    "locals": 0,
    "terraform": 0,
}

CONFIG_SUFFIX = ".tf"


@dataclass(slots=True, frozen=True)
class Declaration:
    """A top-level block of a configuration file.

    Attributes:
        kind: Block type (``resource``, ``module``, ...).
        labels: Block labels, in order.
        body: The block body as a lark tree.
        path: File the block was parsed from.

    """

    kind: str
    labels: tuple[str, ...]
    body: Tree
    path: Path

    @property
    def name(self) -> str:
        """Last label, or the block type for unlabeled blocks."""
        return self.labels[-1] if self.labels else self.kind

    def attribute(self, name: str) -> Tree | None:
        """Expression of an attribute set directly in the block, if any."""
        for child in self.body.children:
            if isinstance(child, Tree) and child.data == "attribute" and _attribute_name(child) == name:
                return child.children[-1]
        return None

    def expressions(self) -> Iterator[tuple[str, Tree]]:
        """Attribute names and expressions of the block and its nested blocks, in file order."""
        for tree in self.body.iter_subtrees_topdown():
            if tree.data == "attribute":
                yield _attribute_name(tree), tree.children[-1]


@dataclass(slots=True)
class SourceLoader:
    """Lists and parses configuration files, caching both for one run.

    Files are not expected to change while a loader is alive, so each
    directory is listed once and each file parsed once.
    """

    recursive: bool = False
    _listings: dict[Path, list[Path]] = field(default_factory=dict, init=False, repr=False)
    _parsed: dict[Path, list[Declaration]] = field(default_factory=dict, init=False, repr=False)

    def files(self, directory: Path) -> list[Path]:
        """Configuration files of a directory, sorted by path.

        Args:
            directory: Directory to list.

        Returns:
            Sorted list of ``*.tf`` files; empty if the directory cannot be read.

        """
        if directory not in self._listings:
            self._listings[directory] = self._list(directory)
        return self._listings[directory]

    def _list(self, directory: Path) -> list[Path]:
        pattern = f"*{CONFIG_SUFFIX}"
        try:
            candidates = directory.rglob(pattern) if self.recursive else directory.glob(pattern)
            files = sorted(path for path in candidates if path.is_file())
        except OSError as e:
            logger.warning(f"Cannot list {directory}: {e}")
            return []
        logger.debug(f"Found {len(files)} configuration files in {directory}")
        return files

    def parse(self, path: Path) -> list[Declaration]:
        """Declarations of a single file, in file order.

        Args:
            path: Configuration file to parse.

        Returns:
            Parsed declarations; empty if the file cannot be read or parsed.

        """
        if path not in self._parsed:
            self._parsed[path] = self._parse(path)
        return self._parsed[path]

    def _parse(self, path: Path) -> list[Declaration]:
        logger.debug(f"Parsing {path}")
        try:
            text = path.read_text(encoding="utf-8")
            return parse_declarations(text, path)
        except (LarkError, OSError, ValueError) as e:
            logger.warning(f"Skipping {path}: {e}")
            return []

    def declarations(self, directory: Path) -> Iterator[Declaration]:
        """All declarations of a directory, ordered by file path then file order."""
        for path in self.files(directory):
            yield from self.parse(path)


def parse_declarations(text: str, path: Path) -> list[Declaration]:
    """Parse configuration text into its top-level declarations.

    Unknown block types and blocks with the wrong number of labels are skipped.

    Args:
        text: Content of a configuration file.
        path: File the content was read from.

    Returns:
        One declaration per block, in file order.

    Raises:
        lark.exceptions.LarkError: If the text is not valid HCL.

    """
    body = hcl2.parses_to_tree(text).children[0]

    declarations: list[Declaration] = []
    for block in body.children:
        if not isinstance(block, Tree) or block.data != "block":
            continue
        declaration = _declaration(block, path)
        if declaration is not None:
            declarations.append(declaration)
    return declarations


def _declaration(block: Tree, path: Path) -> Declaration | None:
    kind_tree, *header = [child for child in block.children if isinstance(child, Tree)]
    kind = token_text(kind_tree)
    label_count = LABEL_COUNTS.get(kind)
    if label_count is None:
        return None

    body = header.pop()
    labels: list[str] = []
    for tree in header:
        if tree.data == "new_line_or_comment":
            continue
        label = literal_string(tree) if tree.data == "string" else token_text(tree)
        if label is None:
            logger.debug(f"{path}: skipping {kind} block with a templated label")
            return None
        labels.append(label)
    if len(labels) != label_count:
        logger.debug(f"{path}: skipping {kind} block with labels {labels}")
        return None
    return Declaration(kind=kind, labels=tuple(labels), body=body, path=path)


def _attribute_name(attribute: Tree) -> str:
    name = attribute.children[0]
    return str(name) if isinstance(name, Token) else token_text(name)
