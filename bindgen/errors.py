"""Unsupported-input errors raised while aggregating classes.

Any of these aborts the whole run: bindings for a hierarchy the target
language cannot represent must not be emitted, not even partially.
"""

from __future__ import annotations

from extraction.models import BaseSpecifier, ClassDecl


class UnsupportedInputError(RuntimeError):
    """Raised when the input uses a C++ shape the binding model cannot represent."""

    def __init__(self, decl: ClassDecl, base: BaseSpecifier, reason: str):
        self.decl = decl
        self.base = base
        self.reason = reason
        super().__init__(
            f"{reason}: class '{decl.qualified_name}' base '{base.name}' "
            f"at {decl.location.path}:{base.line}"
        )


class VirtualBaseError(UnsupportedInputError):
    """Raised for a virtually inherited base class."""

    def __init__(self, decl: ClassDecl, base: BaseSpecifier):
        super().__init__(decl, base, "Virtual base class")


class NonPublicBaseError(UnsupportedInputError):
    """Raised for a protected or private base class."""

    def __init__(self, decl: ClassDecl, base: BaseSpecifier):
        super().__init__(decl, base, f"Non-public ({base.access}) base class")


class UnresolvedBaseError(UnsupportedInputError):
    """Raised when a base class has no resolvable definition."""

    def __init__(self, decl: ClassDecl, base: BaseSpecifier):
        super().__init__(decl, base, "Base class has no resolvable definition")
