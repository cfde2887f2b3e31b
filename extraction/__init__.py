"""
C++ declaration frontend.

Tree-sitter-based parsing of a translation unit (main file plus included
headers), a class symbol table, and matcher rules that report the classes and
methods of a target namespace to a listener.
"""

from extraction.models import (
    BaseSpecifier,
    ClassDecl,
    DeclArena,
    MethodDecl,
    Parameter,
    SourceLocation,
)
from extraction.parser import create_parser, parse_file, parse_bytes, count_error_nodes
from extraction.translation_unit import TranslationUnit
from extraction.matcher import DeclarationListener, DeclarationMatcher, namespace_matches

__all__ = [
    # Declaration records
    "BaseSpecifier",
    "ClassDecl",
    "DeclArena",
    "MethodDecl",
    "Parameter",
    "SourceLocation",
    # Low-level parsing
    "create_parser",
    "parse_file",
    "parse_bytes",
    "count_error_nodes",
    # Translation unit index
    "TranslationUnit",
    # Matcher rules
    "DeclarationListener",
    "DeclarationMatcher",
    "namespace_matches",
]
