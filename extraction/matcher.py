"""
Declaration matcher rules.

Walks the main file of a translation unit and reports, through a listener,
every class defined directly inside the target namespace and every
non-private member function declared anywhere under such a class.
"""

import logging
from typing import List, Protocol, Tuple

from tree_sitter import Node

from extraction.config import NAMESPACE_NODE
from extraction.models import ClassDecl, MethodDecl, SourceLocation
from extraction.translation_unit import TranslationUnit
from extraction.traversal import (
    describe_member_function,
    extract_namespace_names,
    is_record_definition,
    iter_class_members,
    iter_scope_items,
    record_node_of,
)

logger = logging.getLogger(__name__)

ANONYMOUS_NAMESPACE = "(anonymous)"


class DeclarationListener(Protocol):
    """Receives matched declarations in traversal order."""

    def on_class_matched(self, decl: ClassDecl, source_info: TranslationUnit) -> None:
        ...

    def on_method_matched(self, decl: MethodDecl) -> None:
        ...


def namespace_matches(stack: Tuple[str, ...], namespace: str) -> bool:
    """Check a namespace stack against a possibly qualified target name.

    Mirrors name matching on declarations: ``Web`` matches both ``Web`` and
    ``Outer::Web``; ``Outer::Web`` only matches the latter.
    """
    if not stack or ANONYMOUS_NAMESPACE in stack:
        return False
    qualified = "::".join(stack)
    target = namespace.strip().lstrip(":")
    return qualified == target or qualified.endswith("::" + target)


class DeclarationMatcher:
    """Matcher rules for one target namespace.

    Args:
        namespace: Target namespace name, fixed for the whole run.
        listener: Callback receiver, usually the class aggregator.
    """

    def __init__(self, namespace: str, listener: DeclarationListener):
        if not namespace or not namespace.strip():
            raise ValueError("namespace must be a non-empty name")
        self.namespace = namespace.strip()
        self.listener = listener

    def match(self, tu: TranslationUnit) -> int:
        """Run the rules over the main file of ``tu``.

        Returns:
            Number of classes matched.
        """
        tree = tu.main_tree()
        matched = self._match_scope(tree.root_node, tu, ())
        logger.debug("Matched %d classes in namespace %s", matched, self.namespace)
        return matched

    def _match_scope(self, node: Node, tu: TranslationUnit, stack: Tuple[str, ...]) -> int:
        matched = 0
        for item in iter_scope_items(node):
            if item.type == NAMESPACE_NODE:
                names = extract_namespace_names(item) or [ANONYMOUS_NAMESPACE]
                body = item.child_by_field_name("body")
                if body is not None:
                    matched += self._match_scope(body, tu, stack + tuple(names))
                continue

            if not namespace_matches(stack, self.namespace):
                continue

            record, is_templated = record_node_of(item)
            if record is None or not is_record_definition(record):
                continue
            if is_templated:
                logger.debug(
                    "Skipping class template at %s:%d", tu.main_path, record.start_point.row + 1
                )
                continue

            decl = tu.class_at(tu.main_path, record)
            if decl is None:
                continue
            self.listener.on_class_matched(decl, tu)
            self._match_methods(record, decl, tu)
            matched += 1
        return matched

    def _match_methods(self, record: Node, owner: ClassDecl, tu: TranslationUnit) -> None:
        order = 0
        nested: List[Tuple[Node, ClassDecl]] = []
        for member_kind, member, access in iter_class_members(record):
            if member_kind == "record":
                nested_decl = tu.class_at(tu.main_path, member)
                if nested_decl is not None:
                    nested.append((member, nested_decl))
                continue

            info = describe_member_function(member, owner.name)
            if info is None:
                continue
            order += 1
            if access == "private":
                continue

            method = tu.arena.new_method(
                owner=owner,
                access=access,
                order=order,
                location=SourceLocation(path=tu.main_path, line=member.start_point.row + 1),
                **info,
            )
            self.listener.on_method_matched(method)

        for nested_record, nested_decl in nested:
            self._match_methods(nested_record, nested_decl, tu)
