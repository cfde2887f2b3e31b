"""
Class aggregation for one translation unit.

The aggregator receives matched classes and methods, classifies base classes
as local or imported, filters methods, and exposes the finished model to the
binding generator as a read-only view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Protocol, Tuple

from bindgen.errors import NonPublicBaseError, UnresolvedBaseError, VirtualBaseError
from extraction.models import BaseSpecifier, ClassDecl, MethodDecl

logger = logging.getLogger(__name__)

# Member function kinds with no equivalent in the generated bindings
EXCLUDED_METHOD_KINDS = frozenset({"constructor", "destructor", "conversion"})


class SourceInfo(Protocol):
    """What the aggregator needs to know about the current translation unit."""

    def resolve_base(self, owner: ClassDecl, base: BaseSpecifier) -> Optional[ClassDecl]:
        ...

    def is_in_main_file(self, decl: ClassDecl) -> bool:
        ...


@dataclass(frozen=True)
class BindingModel:
    """Read-only view of one file's aggregated classes.

    Attributes:
        classes: Locally defined classes in first-encountered order.
        imports: Base classes defined outside the main file, in first-use order.
        methods: Accepted methods per class, in declaration order.
    """

    classes: Tuple[ClassDecl, ...]
    imports: Tuple[ClassDecl, ...]
    methods: Mapping[ClassDecl, Tuple[MethodDecl, ...]]

    def methods_of(self, decl: ClassDecl) -> Tuple[MethodDecl, ...]:
        return self.methods.get(decl, ())


class ClassAggregator:
    """Collects this file's classes, imported bases and methods.

    Implements the matcher listener interface (``on_class_matched`` and
    ``on_method_matched``) so the aggregation logic can be fed synthetic
    declarations in tests.
    """

    def __init__(self):
        self._records: List[ClassDecl] = []
        self._imports: List[ClassDecl] = []
        self._methods: Dict[ClassDecl, List[MethodDecl]] = {}

    @property
    def records(self) -> Tuple[ClassDecl, ...]:
        return tuple(self._records)

    @property
    def imports(self) -> Tuple[ClassDecl, ...]:
        return tuple(self._imports)

    @property
    def methods(self) -> Mapping[ClassDecl, Tuple[MethodDecl, ...]]:
        return MappingProxyType({k: tuple(v) for k, v in self._methods.items()})

    def is_empty(self) -> bool:
        return not (self._records or self._imports or self._methods)

    def reset(self) -> None:
        """Drop all state collected for the previous file."""
        self._records.clear()
        self._imports.clear()
        self._methods.clear()

    def view(self) -> BindingModel:
        """Snapshot the current state for the binding generator."""
        return BindingModel(
            classes=self.records,
            imports=self.imports,
            methods=self.methods,
        )

    def on_class_matched(self, decl: ClassDecl, source_info: SourceInfo) -> None:
        self.visit_class(decl, source_info)

    def on_method_matched(self, decl: MethodDecl) -> None:
        self.visit_method(decl)

    def visit_class(self, decl: ClassDecl, source_info: SourceInfo) -> None:
        """Record a class defined under the target namespace.

        Re-visiting a class is a no-op. Every direct base is validated before
        its location is considered, so an unsupported base is fatal even when
        it is defined in the main file.

        Raises:
            VirtualBaseError: A base is inherited virtually.
            NonPublicBaseError: A base is protected or private.
            UnresolvedBaseError: A base has no resolvable definition.
        """
        if any(existing is decl for existing in self._records):
            return

        self._records.append(decl)
        logger.debug("Visiting class %s", decl.qualified_name)

        for base in decl.bases:
            if base.is_virtual:
                raise VirtualBaseError(decl, base)
            if base.access != "public":
                raise NonPublicBaseError(decl, base)

            base_record = source_info.resolve_base(decl, base)
            if base_record is None:
                raise UnresolvedBaseError(decl, base)

            if source_info.is_in_main_file(base_record):
                continue

            if any(existing is base_record for existing in self._imports):
                continue
            logger.debug("Importing %s for %s", base_record.qualified_name, decl.qualified_name)
            self._imports.append(base_record)

    def visit_method(self, decl: MethodDecl) -> None:
        """Record a member function under its owning class.

        Constructors, destructors, conversion operators and private methods
        are dropped. The owner need not have been visited yet.
        """
        if decl.kind in EXCLUDED_METHOD_KINDS:
            return
        if decl.access == "private":
            return

        # TODO: Walk parameter and return types to find further classes to import
        self._methods.setdefault(decl.owner, []).append(decl)
