"""Variable traversals inside attribute expressions.

Expressions are the raw lark trees produced by ``hcl2.parses_to_tree``. A
traversal is a root name followed by attribute and literal index steps, as
in ``aws_instance.web["primary"].id``; it ends at the first splat or
non-literal index, whose key expression is then searched on its own.
"""

import logging
import re
from dataclasses import dataclass
from typing import TypeAlias

import hcl2
from lark import Token, Tree
from lark.exceptions import LarkError
from lark.visitors import Interpreter

logger = logging.getLogger(__name__)

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}
_ESCAPE = re.compile(r"\\(.)")


class StepBase:
    pass


@dataclass(slots=True, frozen=True)
class RootStep(StepBase):
    name: str


@dataclass(slots=True, frozen=True)
class AttributeStep(StepBase):
    name: str


@dataclass(slots=True, frozen=True)
class IndexStep(StepBase):
    """Index with a literal key: ``str`` for quoted keys, ``int`` for numbers."""

    key: str | int


Traversal: TypeAlias = tuple[StepBase, ...]

# Steps read so far, whether more steps may follow, and subexpressions still to search
_Chain: TypeAlias = tuple[list[StepBase], bool, list[Tree]]


def parse_expression(source: str) -> Tree:
    """Parse a standalone expression.

    Raises:
        lark.exceptions.LarkError: If the source is not a valid expression.

    """
    tree = hcl2.parses_to_tree(f"_ = {source}\n")
    attribute = next(tree.find_data("attribute"))
    return attribute.children[-1]


def variable_traversals(expression: Tree) -> list[Traversal]:
    """Collect the variable traversals contained in an expression.

    Names bound by ``for`` expressions and function names are not variables.

    Args:
        expression: Expression tree of an attribute value.

    Returns:
        Traversals in order of appearance. Duplicates are kept.

    Example:
        >>> variable_traversals(parse_expression("var.ami"))
        [(RootStep(name='var'), AttributeStep(name='ami'))]

    """
    collector = _TraversalCollector()
    collector.visit(expression)
    return collector.traversals


def literal_string(expression: Tree | None) -> str | None:
    """Return the value of a quoted string without templates, or None."""
    if expression is None:
        return None
    node = _unwrap(expression)
    if node.data != "string":
        return None
    parts: list[str] = []
    for part in node.children:
        if isinstance(part, Token):
            continue
        token = part.children[0]
        if not isinstance(token, Token):
            return None
        match token.type:
            case "STRING_CHARS":
                parts.append(_unescape(token))
            case "ESCAPED_INTERPOLATION" | "ESCAPED_DIRECTIVE":
                parts.append(token[1:])
            case _:
                return None
    return "".join(parts)


def token_text(tree: Tree) -> str:
    """Text of the first token of a tree, such as the name of an ``identifier``."""
    return str(next(child for child in tree.children if isinstance(child, Token)))


def _unescape(text: str) -> str:
    return _ESCAPE.sub(lambda m: _ESCAPES.get(m[1], m[1]), text)


def _unwrap(tree: Tree) -> Tree:
    """Strip ``expr_term`` wrappers around a single subtree."""
    while tree.data == "expr_term" and len(tree.children) == 1 and isinstance(tree.children[0], Tree):
        tree = tree.children[0]
    return tree


def _index_key(index: Tree) -> str | int | None:
    if index.data == "short_index":
        return int(index.children[-1])
    expression = next(
        child for child in index.children if isinstance(child, Tree) and child.data != "new_line_or_comment"
    )
    node = _unwrap(expression)
    if node.data == "int_lit":
        return int(token_text(node))
    return literal_string(node)


def _chain(tree: Tree) -> _Chain | None:
    """Split a traversal expression into its steps; None if it is not rooted at a name."""
    match tree.data:
        case "expr_term":
            if len(tree.children) != 1 or not isinstance(tree.children[0], Tree):
                return None
            return _chain(tree.children[0])
        case "identifier":
            return [RootStep(token_text(tree))], True, []
        case "get_attr_expr_term":
            inner = _chain(tree.children[0])
            if inner is None:
                return None
            steps, open_, pending = inner
            if open_:
                get_attr = tree.children[1]
                steps.append(AttributeStep(token_text(get_attr.children[-1])))
            return steps, open_, pending
        case "index_expr_term":
            inner = _chain(tree.children[0])
            if inner is None:
                return None
            steps, open_, pending = inner
            index = tree.children[1]
            key = _index_key(index) if open_ else None
            if key is None:
                pending.append(index)
                return steps, False, pending
            steps.append(IndexStep(key))
            return steps, True, pending
        case "attr_splat_expr_term" | "full_splat_expr_term":
            inner = _chain(tree.children[0])
            if inner is None:
                return None
            steps, _, pending = inner
            pending.append(tree.children[1])
            return steps, False, pending
        case _:
            return None


class _TraversalCollector(Interpreter):
    """Walks an expression top-down, collecting traversals in source order."""

    def __init__(self) -> None:
        self.traversals: list[Traversal] = []
        self._bound: list[set[str]] = []

    def _is_bound(self, name: str) -> bool:
        return any(name in names for names in self._bound)

    def expr_term(self, tree: Tree) -> None:
        chain = _chain(tree)
        if chain is None:
            self.visit_children(tree)
            return
        steps, _, pending = chain
        root = steps[0]
        if isinstance(root, RootStep) and not self._is_bound(root.name):
            self.traversals.append(tuple(steps))
        for subtree in pending:
            self.visit(subtree)

    # Names that are not variables
    def identifier(self, tree: Tree) -> None:
        pass

    def get_attr(self, tree: Tree) -> None:
        pass

    def short_index(self, tree: Tree) -> None:
        pass

    def function_call(self, tree: Tree) -> None:
        for child in tree.children:
            if isinstance(child, Tree) and child.data == "arguments":
                self.visit(child)

    def object_elem(self, tree: Tree) -> None:
        key, value = tree.children[0], tree.children[-1]
        # Bare names are literal keys, anything else is evaluated
        if _unwrap(key.children[0]).data not in ("identifier", "keyword"):
            self.visit(key)
        self.visit(value)

    def for_tuple_expr(self, tree: Tree) -> None:
        intro = next(child for child in tree.children if isinstance(child, Tree) and child.data == "for_intro")
        self._enter_for(intro.children)
        for child in tree.children:
            if isinstance(child, Tree) and child is not intro:
                self.visit(child)
        self._bound.pop()

    for_object_expr = for_tuple_expr

    def template_for_start(self, tree: Tree) -> None:
        self._enter_for(tree.children)

    def template_endfor(self, tree: Tree) -> None:
        if self._bound:
            self._bound.pop()

    def _enter_for(self, children: list) -> None:
        """Search the collection of a ``for`` clause, then bind its names."""
        names: set[str] = set()
        for child in children:
            if not isinstance(child, Tree) or child.data == "new_line_or_comment":
                continue
            if child.data == "identifier":
                names.add(token_text(child))
            else:
                self.visit(child)
        self._bound.append(names)

    def heredoc_template(self, tree: Tree) -> None:
        lines = str(tree.children[0]).splitlines()
        body = "\n".join(lines[1:-1])
        try:
            template = parse_expression(_quoted_template(body))
        except LarkError as e:
            logger.warning(f"Cannot parse heredoc starting with {lines[0]!r}: {e}")
            return
        self.visit(template)

    heredoc_template_trim = heredoc_template


def _quoted_template(body: str) -> str:
    """Rewrite a heredoc body as an equivalent quoted template."""
    out: list[str] = []
    i = 0
    while i < len(body):
        if body.startswith(("$${", "%%{"), i):
            out.append(body[i : i + 3])
            i += 3
        elif body.startswith(("${", "%{"), i):
            end = _closing_brace(body, i + 1)
            out.append(body[i : end + 1])
            i = end + 1
        else:
            out.append({"\\": "\\\\", '"': '\\"', "\n": "\\n"}.get(body[i], body[i]))
            i += 1
    return f'"{"".join(out)}"'


def _closing_brace(text: str, open_index: int) -> int:
    depth = 0
    in_string = False
    i = open_index
    while i < len(text):
        c = text[i]
        if in_string:
            if c == "\\":
                i += 1
            elif c == '"':
                in_string = False
        elif c == '"':
            in_string = True
        elif c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return len(text) - 1
