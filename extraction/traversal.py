"""
AST traversal helpers for class and method discovery.

These functions only read tree-sitter nodes; they never allocate declaration
records. The translation unit index and the declaration matcher build on them.
"""

import logging
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from tree_sitter import Node

from extraction.config import (
    ACCESS_SPECIFIER_NODE,
    BASE_NAME_TYPES,
    CONTAINER_TYPES,
    DECLARATION_NODE,
    DEFAULT_ACCESS,
    FIELD_DECLARATION_NODE,
    FRIEND_NODE,
    FUNCTION_DEFINITION_NODE,
    POINTER_DECLARATORS,
    PREPROCESSOR_CONTAINERS,
    RECORD_TYPES,
    REFERENCE_DECLARATORS,
    TEMPLATE_WRAPPER,
    TRANSPARENT_WRAPPERS,
)
from extraction.models import BaseSpecifier, Parameter

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_SCOPE_SEPARATOR_RE = re.compile(r"\s*::\s*")

_PARAMETER_TYPES = {
    "parameter_declaration",
    "optional_parameter_declaration",
    "variadic_parameter_declaration",
}

_METHOD_NAME_TYPES = {
    "field_identifier",
    "identifier",
    "destructor_name",
    "operator_name",
    "qualified_identifier",
    "template_method",
    "template_function",
}


def node_text(node: Optional[Node]) -> str:
    """Return the UTF-8 text of a node, or an empty string."""
    if node is None or not node.text:
        return ""
    return node.text.decode("utf-8", errors="replace")


def normalize_name(name: str) -> str:
    """Collapse whitespace in a C++ name and around scope separators."""
    normalized = _SCOPE_SEPARATOR_RE.sub("::", name.strip())
    return _WHITESPACE_RE.sub(" ", normalized)


def strip_template_arguments(name: str) -> str:
    """Remove every balanced ``<...>`` group from a name.

    Example:
        >>> strip_template_arguments("ns::Vector<Foo<int>>::Iter")
        'ns::Vector::Iter'
    """
    out = []
    depth = 0
    for ch in name:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth = max(depth - 1, 0)
        elif depth == 0:
            out.append(ch)
    return normalize_name("".join(out))


def iter_scope_items(node: Node) -> Iterator[Node]:
    """Yield the named declarations of a namespace-level container.

    Preprocessor conditionals and ``extern "C"`` blocks are transparent:
    their contents are yielded as if they were direct children.
    """
    for child in node.named_children:
        if child.type in PREPROCESSOR_CONTAINERS:
            yield from iter_scope_items(child)
        elif child.type in TRANSPARENT_WRAPPERS:
            body = child.child_by_field_name("body")
            if body is None:
                continue
            if body.type in CONTAINER_TYPES:
                yield from iter_scope_items(body)
            else:
                yield body
        else:
            yield child


def record_node_of(item: Node) -> Tuple[Optional[Node], bool]:
    """Find the class/struct specifier declared by a scope item.

    Returns:
        A tuple of (record_node, is_templated); record_node is None when the
        item does not declare a class.
    """
    if item.type in RECORD_TYPES:
        return item, False

    if item.type in (DECLARATION_NODE, FIELD_DECLARATION_NODE):
        type_node = item.child_by_field_name("type")
        if type_node is not None and type_node.type in RECORD_TYPES:
            return type_node, False
        return None, False

    if item.type == TEMPLATE_WRAPPER:
        for child in item.named_children:
            inner, _ = record_node_of(child)
            if inner is not None:
                return inner, True
    return None, False


def is_record_definition(node: Node) -> bool:
    """Check if a class/struct node has a body (not a forward declaration)."""
    return node.type in RECORD_TYPES and node.child_by_field_name("body") is not None


def extract_record_name(node: Node) -> Optional[str]:
    """Extract the spelled name of a class/struct, or None if anonymous.

    Template specializations (``class Foo<int>``) keep only the template name.
    """
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    if name_node.type == "template_type":
        name_node = name_node.child_by_field_name("name") or name_node
    name = node_text(name_node)
    return normalize_name(name) if name else None


def extract_namespace_names(node: Node) -> List[str]:
    """Return the namespace components introduced by a namespace_definition.

    ``namespace A::B {}`` yields ``["A", "B"]``; an anonymous namespace yields
    an empty list.
    """
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return []
    text = normalize_name(node_text(name_node))
    return [part for part in text.split("::") if part]


def extract_include_path(node: Node) -> Optional[Tuple[str, bool]]:
    """Extract the target of a ``#include`` directive.

    Returns:
        A tuple of (path, is_system) or None for computed includes.
    """
    path_node = node.child_by_field_name("path")
    if path_node is None:
        return None
    text = node_text(path_node).strip()
    if path_node.type == "system_lib_string":
        return text.strip("<>"), True
    if path_node.type == "string_literal":
        return text.strip('"'), False
    return None


def parse_base_clause(record: Node) -> List[BaseSpecifier]:
    """Parse the base-clause of a class/struct specifier.

    Access defaults to private for ``class`` and public for ``struct``.
    """
    clause = None
    for child in record.children:
        if child.type == "base_class_clause":
            clause = child
            break
    if clause is None:
        return []

    default_access = DEFAULT_ACCESS[record.type]
    bases: List[BaseSpecifier] = []
    state: Dict[str, Any] = {"access": None, "virtual": False}

    def visit(children: List[Node]) -> None:
        for child in children:
            if child.type == "base_class":
                visit(child.children)
            elif child.type == ACCESS_SPECIFIER_NODE:
                state["access"] = node_text(child).rstrip(":").strip()
            elif child.type == "virtual" or node_text(child) == "virtual":
                state["virtual"] = True
            elif child.type in BASE_NAME_TYPES:
                bases.append(
                    BaseSpecifier(
                        name=normalize_name(node_text(child)),
                        access=state["access"] or default_access,
                        is_virtual=state["virtual"],
                        line=child.start_point.row + 1,
                    )
                )
                state["access"] = None
                state["virtual"] = False
            elif child.type == ",":
                state["access"] = None
                state["virtual"] = False

    visit(clause.children)
    return bases


def _flatten_members(body: Node) -> Iterator[Node]:
    for child in body.named_children:
        if child.type in PREPROCESSOR_CONTAINERS:
            yield from _flatten_members(child)
        else:
            yield child


def iter_class_members(record: Node) -> Iterator[Tuple[str, Node, str]]:
    """Walk a class body, tracking access specifiers.

    Yields:
        Tuples of (member_kind, node, access) where member_kind is
        ``"function"`` for member function declarations/definitions and
        ``"record"`` for nested class definitions. Member templates and
        friend declarations are skipped.
    """
    body = record.child_by_field_name("body")
    if body is None:
        return
    access = DEFAULT_ACCESS[record.type]

    for member in _flatten_members(body):
        if member.type == ACCESS_SPECIFIER_NODE:
            access = node_text(member).rstrip(":").strip()
            continue

        if member.type in (FRIEND_NODE, "comment"):
            continue

        if member.type == TEMPLATE_WRAPPER:
            logger.debug(
                "Skipping member template at line %d", member.start_point.row + 1
            )
            continue

        nested, _ = record_node_of(member)
        if nested is not None and is_record_definition(nested):
            yield "record", nested, access
            continue

        if member.type in (FIELD_DECLARATION_NODE, FUNCTION_DEFINITION_NODE, DECLARATION_NODE):
            if _find_function_declarator(member.child_by_field_name("declarator")) is not None:
                yield "function", member, access


def _next_declarator(node: Node) -> Optional[Node]:
    if node.type in POINTER_DECLARATORS:
        return node.child_by_field_name("declarator")
    inner = node.child_by_field_name("declarator")
    if inner is not None:
        return inner
    named = node.named_children
    return named[-1] if named else None


def _find_function_declarator(declarator: Optional[Node]) -> Optional[Node]:
    node = declarator
    while node is not None:
        if node.type in ("function_declarator", "operator_cast"):
            return node
        if node.type in POINTER_DECLARATORS or node.type in REFERENCE_DECLARATORS \
                or node.type == "parenthesized_declarator":
            node = _next_declarator(node)
            continue
        return None
    return None


def _reference_token(node: Node) -> str:
    for child in node.children:
        if child.type in ("&", "&&"):
            return child.type
    return "&"


def _leading_qualifiers(node: Node) -> List[str]:
    return [node_text(c) for c in node.children if c.type == "type_qualifier"]


def render_type(owner: Node, declarator: Optional[Node]) -> Tuple[str, Optional[str]]:
    """Render the type spelled by a declaration's specifiers and declarator.

    Args:
        owner: Node carrying the ``type`` field and leading qualifiers.
        declarator: Declarator (possibly abstract or absent).

    Returns:
        A tuple of (type_spelling, declared_name).
    """
    base = " ".join(_leading_qualifiers(owner) + [normalize_name(node_text(owner.child_by_field_name("type")))])
    suffix = ""
    name = None
    node = declarator
    while node is not None:
        if node.type in POINTER_DECLARATORS:
            suffix += "*"
            if any(c.type == "type_qualifier" for c in node.children):
                suffix += " const"
        elif node.type in REFERENCE_DECLARATORS:
            suffix += _reference_token(node)
        elif node.type in ("array_declarator", "abstract_array_declarator"):
            suffix += "[]"
        elif node.type in ("identifier", "field_identifier"):
            name = node_text(node)
            break
        elif node.type in ("function_declarator", "operator_cast"):
            break
        node = _next_declarator(node)
    return base.strip() + suffix, name


def _extract_parameters(parameter_list: Optional[Node]) -> List[Parameter]:
    if parameter_list is None:
        return []
    params: List[Parameter] = []
    for child in parameter_list.named_children:
        if child.type not in _PARAMETER_TYPES:
            continue
        if child.type == "variadic_parameter_declaration" and child.child_by_field_name("type") is None:
            params.append(Parameter(type="..."))
            continue
        type_text, name = render_type(child, child.child_by_field_name("declarator"))
        default_node = child.child_by_field_name("default_value")
        params.append(
            Parameter(
                type=type_text,
                name=name,
                default=node_text(default_node) or None,
            )
        )
    for child in parameter_list.children:
        if child.type == "...":
            params.append(Parameter(type="..."))
    if len(params) == 1 and params[0].type == "void" and params[0].name is None:
        return []
    return params


def _has_specifier(member: Node, keyword: str) -> bool:
    for child in member.children:
        if child.type == keyword:
            return True
        if child.type in ("storage_class_specifier", "virtual_function_specifier") \
                and node_text(child) == keyword:
            return True
    return False


def describe_member_function(member: Node, owner_name: str) -> Optional[Dict[str, Any]]:
    """Decompose a member function declaration or inline definition.

    Args:
        member: A field_declaration, declaration or function_definition node.
        owner_name: Unqualified name of the enclosing class, used to tell
            constructors apart from methods.

    Returns:
        Dictionary with name, kind, return_type, parameters, is_static,
        is_const and is_virtual; None if the node declares no function.
    """
    declarator = member.child_by_field_name("declarator")
    function = _find_function_declarator(declarator)
    if function is None:
        return None

    is_static = _has_specifier(member, "static")
    is_virtual = _has_specifier(member, "virtual")

    if function.type == "operator_cast":
        return {
            "name": "operator " + normalize_name(node_text(function.child_by_field_name("type"))),
            "kind": "conversion",
            "return_type": normalize_name(node_text(function.child_by_field_name("type"))),
            "parameters": [],
            "is_static": is_static,
            "is_const": False,
            "is_virtual": is_virtual,
        }

    name_node = function.child_by_field_name("declarator")
    if name_node is not None and name_node.type == "operator_cast":
        return {
            "name": "operator " + normalize_name(node_text(name_node.child_by_field_name("type"))),
            "kind": "conversion",
            "return_type": normalize_name(node_text(name_node.child_by_field_name("type"))),
            "parameters": [],
            "is_static": is_static,
            "is_const": False,
            "is_virtual": is_virtual,
        }

    if name_node is None or name_node.type not in _METHOD_NAME_TYPES:
        return None

    name = normalize_name(node_text(name_node))
    if "::" in name:
        name = name.rsplit("::", 1)[1]

    type_node = member.child_by_field_name("type")
    if name_node.type == "destructor_name" or name.startswith("~"):
        kind = "destructor"
    elif type_node is None or strip_template_arguments(name) == owner_name:
        kind = "constructor"
    else:
        kind = "method"

    return_type = ""
    if kind == "method":
        return_type, _ = render_type(member, declarator)

    is_const = False
    for child in function.children:
        if child.type == "type_qualifier" and node_text(child) == "const":
            is_const = True
        elif child.type == "trailing_return_type":
            trailing = node_text(child).strip()
            if trailing.startswith("->"):
                trailing = trailing[2:]
            return_type = normalize_name(trailing)

    return {
        "name": name,
        "kind": kind,
        "return_type": return_type,
        "parameters": _extract_parameters(function.child_by_field_name("parameters")),
        "is_static": is_static,
        "is_const": is_const,
        "is_virtual": is_virtual,
    }
