"""
Configuration constants for the C++ declaration frontend.

Defines the tree-sitter node type strings used for class and method discovery.
"""

from typing import Dict, Set

# Record types that can become ClassDecl entries
RECORD_TYPES: Set[str] = {
    "class_specifier",
    "struct_specifier",
}

# Template wrapper node type
TEMPLATE_WRAPPER: str = "template_declaration"

# Namespace definition node type
NAMESPACE_NODE: str = "namespace_definition"

# Include directive node type
INCLUDE_NODE: str = "preproc_include"

# Container types whose children we scan
CONTAINER_TYPES: Set[str] = {
    "translation_unit",      # File root
    "declaration_list",      # Namespace body
}

# Wrapper types that should be treated as transparent
TRANSPARENT_WRAPPERS: Set[str] = {
    "linkage_specification",  # extern "C" { ... }
}

# Preprocessor directives that may contain code we need to traverse
PREPROCESSOR_CONTAINERS: Set[str] = {
    "preproc_ifdef",
    "preproc_ifndef",
    "preproc_if",
    "preproc_elif",
    "preproc_else",
    "preproc_elifdef",
}

# Declaration node type (classes/structs can be wrapped in this)
DECLARATION_NODE: str = "declaration"

# Class body member node types
FIELD_DECLARATION_NODE: str = "field_declaration"
FUNCTION_DEFINITION_NODE: str = "function_definition"
ACCESS_SPECIFIER_NODE: str = "access_specifier"
FRIEND_NODE: str = "friend_declaration"

# Declarator wrappers that sit between a declaration and its function_declarator
POINTER_DECLARATORS: Set[str] = {"pointer_declarator", "abstract_pointer_declarator"}
REFERENCE_DECLARATORS: Set[str] = {"reference_declarator", "abstract_reference_declarator"}

# Identifier node types naming a base class
BASE_NAME_TYPES: Set[str] = {
    "type_identifier",
    "qualified_identifier",
    "template_type",
}

# Default member/base access per record keyword
DEFAULT_ACCESS: Dict[str, str] = {
    "class_specifier": "private",
    "struct_specifier": "public",
}

# Record keyword per record node type
RECORD_KIND_MAP: Dict[str, str] = {
    "class_specifier": "class",
    "struct_specifier": "struct",
}

# C++ file extensions
CPP_EXTENSIONS: Set[str] = {
    ".cpp",
    ".cc",
    ".cxx",
    ".h",
    ".hpp",
    ".hxx",
}

# Directories skipped during source discovery
SKIPPED_DIRECTORIES: Set[str] = {
    "build",
    "cmake-build-debug",
    "cmake-build-release",
    "node_modules",
    "venv",
    "__pycache__",
    "dist",
    "out",
}
