"""Terraform dependency graph explorer."""

__all__ = [
    "Category",
    "Declaration",
    "DeclarationKind",
    "Graph",
    "ModuleResolution",
    "Node",
    "Reference",
    "RenderScope",
    "SourceLoader",
    "build_dependency_graph",
    "classify",
    "declaration_identifier",
    "extract_references",
    "locate",
    "render_dot",
    "resolve_module",
    "traverse",
]

from ._dot import RenderScope, render_dot
from ._locator import declaration_identifier, locate
from ._models import Category, DeclarationKind, Graph, Node, Reference
from ._modules import ModuleResolution, resolve_module
from ._references import classify, extract_references
from ._source import Declaration, SourceLoader
from ._traverse import build_dependency_graph, traverse
