"""
Translation unit index.

Parses a main file together with the headers it includes and builds a class
symbol table over all of them. The index answers the two questions the class
aggregator asks about a declaration: where is its base class defined, and is
a declaration located in the main file.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tree_sitter import Node, Tree

from extraction.config import INCLUDE_NODE, NAMESPACE_NODE, RECORD_KIND_MAP
from extraction.models import BaseSpecifier, ClassDecl, DeclArena, SourceLocation
from extraction.parser import parse_file
from extraction.traversal import (
    extract_include_path,
    extract_namespace_names,
    extract_record_name,
    iter_class_members,
    iter_scope_items,
    parse_base_clause,
    record_node_of,
    strip_template_arguments,
)

logger = logging.getLogger(__name__)


class TranslationUnit:
    """A main file and every header reachable through its includes.

    Loading is lazy: constructing a TranslationUnit never touches the disk,
    so the session controller can check the file's identity first.

    Args:
        main_file: Path to the file being compiled.
        include_dirs: Directories searched for ``#include`` targets.
        arena: Arena used to allocate declaration handles.
    """

    def __init__(
        self,
        main_file: "str | os.PathLike[str]",
        include_dirs: Sequence["str | os.PathLike[str]"] = (),
        arena: Optional[DeclArena] = None,
    ):
        self.main_file = os.fspath(main_file)
        self.include_dirs = [os.path.abspath(d) for d in include_dirs]
        self.arena = arena if arena is not None else DeclArena()
        self.main_path: Optional[str] = None
        self._trees: Dict[str, Tree] = {}
        self._records: Dict[Tuple[str, int], ClassDecl] = {}
        self._by_qualified_name: Dict[str, List[ClassDecl]] = {}
        self._loaded = False

    def main_file_identity(self) -> Optional[str]:
        """Return the canonical absolute path of the main file, or None."""
        try:
            resolved = Path(self.main_file).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            logger.debug("Cannot resolve %s: %s", self.main_file, e)
            return None
        if not resolved.is_file():
            return None
        return str(resolved)

    @property
    def files(self) -> List[str]:
        """Parsed files in include order, main file first."""
        return list(self._trees)

    def load(self) -> "TranslationUnit":
        """Parse the main file and its includes and index their classes.

        Raises:
            FileNotFoundError: If the main file cannot be resolved.
        """
        if self._loaded:
            return self
        identity = self.main_file_identity()
        if identity is None:
            raise FileNotFoundError(f"Main file not found: {self.main_file}")
        self.main_path = identity
        self._load_file(identity)
        self._link_definitions()
        self._loaded = True
        logger.info(
            "Indexed %d classes from %d files for %s",
            len(self._records),
            len(self._trees),
            identity,
        )
        return self

    def main_tree(self) -> Tree:
        self.load()
        return self._trees[self.main_path]

    def class_at(self, path: str, node: Node) -> Optional[ClassDecl]:
        """Return the declaration record for a class node of a parsed file.

        Anonymous classes are never indexed and yield None.
        """
        return self._records.get((path, node.start_byte))

    def lookup(self, qualified_name: str) -> List[ClassDecl]:
        """Return every declaration of a fully qualified class name."""
        return list(self._by_qualified_name.get(qualified_name, ()))

    def classes(self) -> Iterable[ClassDecl]:
        return self._records.values()

    def resolve_base(self, owner: ClassDecl, base: BaseSpecifier) -> Optional[ClassDecl]:
        """Resolve a base-clause entry to the defining class declaration.

        The name is looked up in the owner's scope, then in each enclosing
        scope. The nearest scope that declares the name wins; None is returned
        when no scope declares it or when it is only forward declared there.
        """
        name = strip_template_arguments(base.name)
        if name.startswith("::"):
            candidates = [name[2:]]
        else:
            scope = owner.scope
            candidates = [
                "::".join(scope[:depth] + (name,)) for depth in range(len(scope), -1, -1)
            ]

        for candidate in candidates:
            decls = self._by_qualified_name.get(candidate)
            if decls:
                return decls[0].definition
        return None

    def is_in_main_file(self, decl: ClassDecl) -> bool:
        return decl.location.path == self.main_path

    def _resolve_include(self, target: str, is_system: bool, including: str) -> Optional[str]:
        search = [] if is_system else [os.path.dirname(including)]
        search.extend(self.include_dirs)
        for directory in search:
            candidate = os.path.join(directory, target)
            if os.path.isfile(candidate):
                return str(Path(candidate).resolve())
        return None

    def _load_file(self, path: str) -> None:
        if path in self._trees:
            return
        tree, _ = parse_file(path)
        self._trees[path] = tree
        self._index_scope(tree.root_node, path, ())

    def _index_scope(self, node: Node, path: str, scope: Tuple[str, ...]) -> None:
        for item in iter_scope_items(node):
            if item.type == INCLUDE_NODE:
                include = extract_include_path(item)
                if include is None:
                    continue
                resolved = self._resolve_include(include[0], include[1], path)
                if resolved is None:
                    logger.debug("Skipping unresolved include %s in %s", include[0], path)
                    continue
                self._load_file(resolved)
            elif item.type == NAMESPACE_NODE:
                body = item.child_by_field_name("body")
                if body is not None:
                    self._index_scope(body, path, scope + tuple(extract_namespace_names(item)))
            else:
                record, is_templated = record_node_of(item)
                if record is not None:
                    self._index_record(record, path, scope, is_templated)

    def _index_record(
        self,
        record: Node,
        path: str,
        scope: Tuple[str, ...],
        is_templated: bool,
    ) -> None:
        name = extract_record_name(record)
        if not name:
            logger.debug("Skipping anonymous %s at %s:%d", record.type, path, record.start_point.row + 1)
            return

        parts = name.lstrip(":").split("::")
        if name.startswith("::"):
            scope = ()
        scope = scope + tuple(parts[:-1])
        is_definition = record.child_by_field_name("body") is not None

        decl = self.arena.new_class(
            name=parts[-1],
            kind=RECORD_KIND_MAP[record.type],
            scope=scope,
            location=SourceLocation(path=path, line=record.start_point.row + 1),
            is_definition=is_definition,
            is_templated=is_templated,
            bases=parse_base_clause(record) if is_definition else [],
        )
        self._records[(path, record.start_byte)] = decl
        self._by_qualified_name.setdefault(decl.qualified_name, []).append(decl)

        if not is_definition:
            return
        for member_kind, nested, _ in iter_class_members(record):
            if member_kind == "record":
                self._index_record(nested, path, decl.scope + (decl.name,), False)

    def _link_definitions(self) -> None:
        for decls in self._by_qualified_name.values():
            definition = next((d for d in decls if d.is_definition), None)
            for decl in decls:
                if not decl.is_definition:
                    decl.definition = definition
