"""
Declaration records produced by the C++ frontend.

Class and method records are compared by identity, not by value: two
declarations with the same spelling in different places are different
declarations. A DeclArena hands out the stable integer ids used in logs
and for ordering.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class SourceLocation:
    """Where a declaration is spelled.

    Attributes:
        path: Absolute, resolved path of the file.
        line: 1-indexed line number.
    """

    path: str
    line: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}"


@dataclass(frozen=True)
class BaseSpecifier:
    """One entry of a class's base-clause.

    Attributes:
        name: Base class name as spelled (may be qualified or templated).
        access: One of public, protected, private.
        is_virtual: Whether the base is inherited virtually.
        line: 1-indexed line of the base-clause entry.
    """

    name: str
    access: str
    is_virtual: bool
    line: int


@dataclass(eq=False)
class ClassDecl:
    """A class or struct declaration.

    Attributes:
        decl_id: Arena-assigned stable handle.
        name: Unqualified class name.
        kind: "class" or "struct".
        scope: Enclosing namespaces and classes, outermost first.
        location: Source location of the declaration.
        is_definition: True if the declaration has a body.
        is_templated: True if wrapped in a template_declaration.
        bases: Direct bases in declaration order.
        definition: The defining declaration (self for definitions).
    """

    decl_id: int
    name: str
    kind: str
    scope: Tuple[str, ...]
    location: SourceLocation
    is_definition: bool
    is_templated: bool = False
    bases: List[BaseSpecifier] = field(default_factory=list)
    definition: Optional["ClassDecl"] = None

    @property
    def qualified_name(self) -> str:
        return "::".join(self.scope + (self.name,))

    def __repr__(self) -> str:
        return f"ClassDecl(#{self.decl_id} {self.qualified_name} @ {self.location})"


@dataclass(frozen=True)
class Parameter:
    """A method parameter."""

    type: str
    name: Optional[str] = None
    default: Optional[str] = None


@dataclass(eq=False)
class MethodDecl:
    """A member function declared inside a class body.

    Attributes:
        decl_id: Arena-assigned stable handle.
        owner: The class whose body declares the method.
        name: Method name (operator names are kept as spelled).
        kind: One of method, constructor, destructor, conversion.
        access: One of public, protected, private.
        return_type: Return type spelling; empty for constructors/destructors.
        parameters: Parameters in declaration order.
        is_static: Declared with the static storage class.
        is_const: Has a trailing const qualifier.
        is_virtual: Declared virtual.
        order: Position among the owner's member functions.
        location: Source location of the declaration.
    """

    decl_id: int
    owner: ClassDecl
    name: str
    kind: str
    access: str
    return_type: str
    parameters: List[Parameter]
    is_static: bool
    is_const: bool
    is_virtual: bool
    order: int
    location: SourceLocation

    @property
    def is_instance(self) -> bool:
        return not self.is_static

    def __repr__(self) -> str:
        return f"MethodDecl(#{self.decl_id} {self.owner.qualified_name}::{self.name})"


class DeclArena:
    """Allocates stable integer handles for declaration records."""

    def __init__(self):
        self._next_id = 0
        self.classes: List[ClassDecl] = []
        self.methods: List[MethodDecl] = []

    def _allocate(self) -> int:
        decl_id = self._next_id
        self._next_id += 1
        return decl_id

    def new_class(self, **kwargs) -> ClassDecl:
        decl = ClassDecl(decl_id=self._allocate(), **kwargs)
        if decl.is_definition:
            decl.definition = decl
        self.classes.append(decl)
        return decl

    def new_method(self, **kwargs) -> MethodDecl:
        decl = MethodDecl(decl_id=self._allocate(), **kwargs)
        self.methods.append(decl)
        return decl

    def __len__(self) -> int:
        return self._next_id
