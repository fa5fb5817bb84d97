# tdl/ast_nodes.py
"""
Syntax tree for the Type Declaration Language.

The parser produces these nodes without resolving any names; the
semantic pass (``tdl.semantic``) turns them into ``valuesem`` symbols.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Pos:
    line: int = 0
    column: int = 0


# ═══════════════════════════════════════════════════════════════════════════
# TYPE EXPRESSIONS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class NamedTypeExpr:
    """``int``, ``System.DateTime``, ``List<int>``."""
    name: str
    args: List[TypeExpr] = field(default_factory=list)
    pos: Pos = field(default_factory=Pos)

    def __str__(self) -> str:
        if self.args:
            return f"{self.name}<{', '.join(str(a) for a in self.args)}>"
        return self.name


@dataclass
class ArrayTypeExpr:
    element: TypeExpr

    def __str__(self) -> str:
        return f"{self.element}[]"


@dataclass
class NullableTypeExpr:
    inner: TypeExpr

    def __str__(self) -> str:
        return f"{self.inner}?"


@dataclass
class TupleTypeExpr:
    elements: List[Tuple[TypeExpr, Optional[str]]] = field(default_factory=list)

    def __str__(self) -> str:
        parts = [f"{t} {n}" if n else str(t) for t, n in self.elements]
        return "(" + ", ".join(parts) + ")"


TypeExpr = Union[NamedTypeExpr, ArrayTypeExpr, NullableTypeExpr, TupleTypeExpr]


# ═══════════════════════════════════════════════════════════════════════════
# MEMBERS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class Param:
    type: TypeExpr
    name: str
    pos: Pos = field(default_factory=Pos)


@dataclass
class FieldDecl:
    type: TypeExpr
    name: str
    modifiers: List[str] = field(default_factory=list)
    is_property: bool = False
    pos: Pos = field(default_factory=Pos)


@dataclass
class MethodDecl:
    return_type: TypeExpr
    name: str
    params: List[Param] = field(default_factory=list)
    modifiers: List[str] = field(default_factory=list)
    pos: Pos = field(default_factory=Pos)


MemberDecl = Union[FieldDecl, MethodDecl]


# ═══════════════════════════════════════════════════════════════════════════
# DECLARATIONS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class TypeDecl:
    """
    One type declaration.

    ``keyword`` is normalised: ``class``, ``struct``, ``record``,
    ``record class``, ``record struct``, ``interface``, ``enum`` or
    ``delegate``.  ``primary_params`` is ``None`` when the declaration
    has no parameter list at all.
    """
    keyword: str
    name: str
    modifiers: List[str] = field(default_factory=list)
    attributes: List[str] = field(default_factory=list)
    type_params: List[str] = field(default_factory=list)
    primary_params: Optional[List[Param]] = None
    bases: List[TypeExpr] = field(default_factory=list)
    constraints: Dict[str, List[TypeExpr]] = field(default_factory=dict)
    members: List[MemberDecl] = field(default_factory=list)
    pos: Pos = field(default_factory=Pos)

    @property
    def is_record(self) -> bool:
        return self.keyword.startswith("record")


@dataclass
class Unit:
    """A parsed source file."""
    declarations: List[TypeDecl] = field(default_factory=list)
    filename: str = "<input>"
