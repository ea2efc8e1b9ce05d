"""Configuration front end built on python-hcl2.

This module contains:
- SourceLoader: per-run cached discovery and parsing of ``*.tf`` files
- Declaration: a parsed top-level block
- variable_traversals: variable references inside attribute expressions
"""

from ._expressions import (
    AttributeStep,
    IndexStep,
    RootStep,
    StepBase,
    Traversal,
    literal_string,
    parse_expression,
    variable_traversals,
)
from ._loader import Declaration, SourceLoader, parse_declarations

__all__ = [
    "AttributeStep",
    "Declaration",
    "IndexStep",
    "RootStep",
    "SourceLoader",
    "StepBase",
    "Traversal",
    "literal_string",
    "parse_declarations",
    "parse_expression",
    "variable_traversals",
]
