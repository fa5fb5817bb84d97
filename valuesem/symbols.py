"""
valuesem/symbols.py
═══════════════════

Snapshot model of a host type system, as seen by the value-semantics
engine.

The model mirrors what a compiler front end knows about a type without
ever instantiating it: its raw kind, whether it is one of the special
built-in types, its members in declaration order, its generic shape and
the attributes attached to it.  Front ends (see the ``tdl`` package)
build these objects; ``valuesem.kinds`` turns them into the closed
``Kind`` variant the classifier dispatches on.

Symbols have *identity* semantics on purpose: two ``TypeSymbol`` objects
that happen to look alike are still two different types, exactly like
two distinct declarations in a program.  The cycle guard keys on that
identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import (
    Dict,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: RAW KINDS
# ═════════════════════════════════════════════════════════════════════════

class TypeKind(Enum):
    """Raw type kind as reported by the host type system."""
    CLASS = auto()
    STRUCT = auto()
    INTERFACE = auto()
    ENUM = auto()
    DELEGATE = auto()
    ARRAY = auto()
    POINTER = auto()
    TYPE_PARAMETER = auto()
    DYNAMIC = auto()
    ERROR = auto()


class SpecialType(Enum):
    """Built-in types the host treats specially."""
    NONE = auto()
    OBJECT = auto()
    BOOLEAN = auto()
    CHAR = auto()
    SBYTE = auto()
    BYTE = auto()
    INT16 = auto()
    UINT16 = auto()
    INT32 = auto()
    UINT32 = auto()
    INT64 = auto()
    UINT64 = auto()
    SINGLE = auto()
    DOUBLE = auto()
    STRING = auto()


# keyword → (special type, raw kind)
BUILTIN_KEYWORDS: Dict[str, Tuple[SpecialType, TypeKind]] = {
    "object": (SpecialType.OBJECT, TypeKind.CLASS),
    "dynamic": (SpecialType.NONE, TypeKind.DYNAMIC),
    "bool": (SpecialType.BOOLEAN, TypeKind.STRUCT),
    "char": (SpecialType.CHAR, TypeKind.STRUCT),
    "sbyte": (SpecialType.SBYTE, TypeKind.STRUCT),
    "byte": (SpecialType.BYTE, TypeKind.STRUCT),
    "short": (SpecialType.INT16, TypeKind.STRUCT),
    "ushort": (SpecialType.UINT16, TypeKind.STRUCT),
    "int": (SpecialType.INT32, TypeKind.STRUCT),
    "uint": (SpecialType.UINT32, TypeKind.STRUCT),
    "long": (SpecialType.INT64, TypeKind.STRUCT),
    "ulong": (SpecialType.UINT64, TypeKind.STRUCT),
    "float": (SpecialType.SINGLE, TypeKind.STRUCT),
    "double": (SpecialType.DOUBLE, TypeKind.STRUCT),
    "string": (SpecialType.STRING, TypeKind.CLASS),
}

NULLABLE_DEFINITION = "System.Nullable<T>"


@dataclass(frozen=True)
class SourceSpan:
    """Where a symbol was declared (1-based line/column, 0 = unknown)."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: MEMBER SYMBOLS
# ═════════════════════════════════════════════════════════════════════════

@dataclass(eq=False)
class FieldSymbol:
    """A field or property.  Tuple elements are fields too."""
    name: str
    type: Optional[TypeSymbol]
    is_static: bool = False
    is_property: bool = False
    location: SourceSpan = field(default_factory=SourceSpan)

    def __repr__(self) -> str:
        kind = "property" if self.is_property else "field"
        tname = self.type.display_name if self.type is not None else "?"
        return f"<{kind} {tname} {self.name}>"


@dataclass(eq=False)
class ParameterSymbol:
    name: str
    type: Optional[TypeSymbol]
    location: SourceSpan = field(default_factory=SourceSpan)


@dataclass(eq=False)
class MethodSymbol:
    name: str
    parameters: List[ParameterSymbol] = field(default_factory=list)
    return_type: Optional[TypeSymbol] = None
    is_static: bool = False
    is_override: bool = False
    is_abstract: bool = False
    containing_type: Optional[TypeSymbol] = None
    location: SourceSpan = field(default_factory=SourceSpan)

    def __repr__(self) -> str:
        owner = self.containing_type.name if self.containing_type else "?"
        params = ", ".join(
            p.type.display_name if p.type is not None else "?"
            for p in self.parameters
        )
        return f"<method {owner}.{self.name}({params})>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: TYPE SYMBOL
# ═════════════════════════════════════════════════════════════════════════

@dataclass(eq=False)
class TypeSymbol:
    """
    One type in the snapshot.

    Kind-specific attributes
    ────────────────────────
      - ARRAY:          element_type
      - nullable value: is_nullable_value_wrapper, type_arguments[0]
      - tuple:          is_tuple, tuple_elements
      - generic:        type_parameters (definition) or type_arguments
                        (instance), original_definition
      - record:         is_record, primary_parameters
      - TYPE_PARAMETER: constraints
    """

    name: str
    type_kind: TypeKind
    namespace: str = ""
    special_type: SpecialType = SpecialType.NONE
    is_record: bool = False
    is_tuple: bool = False
    is_readonly: bool = False
    is_nullable_value_wrapper: bool = False
    element_type: Optional[TypeSymbol] = None
    type_parameters: List[TypeSymbol] = field(default_factory=list)
    type_arguments: List[TypeSymbol] = field(default_factory=list)
    constraints: List[TypeSymbol] = field(default_factory=list)
    original_definition: str = ""
    attributes: List[str] = field(default_factory=list)
    members: List[object] = field(default_factory=list)
    primary_parameters: List[ParameterSymbol] = field(default_factory=list)
    tuple_elements: List[FieldSymbol] = field(default_factory=list)
    location: SourceSpan = field(default_factory=SourceSpan)

    # ── naming ───────────────────────────────────────────────────────

    @property
    def full_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name

    @property
    def display_name(self) -> str:
        """C#-style display string, e.g. ``(int a, int[] b)``."""
        if self.type_kind == TypeKind.ARRAY and self.element_type is not None:
            return f"{self.element_type.display_name}[]"
        if self.is_nullable_value_wrapper and self.type_arguments:
            return f"{self.type_arguments[0].display_name}?"
        if self.is_tuple:
            parts = []
            for elem in self.tuple_elements:
                tname = elem.type.display_name if elem.type is not None else "?"
                parts.append(f"{tname} {elem.name}" if elem.name else tname)
            return "(" + ", ".join(parts) + ")"
        if self.type_arguments:
            args = ", ".join(a.display_name for a in self.type_arguments)
            return f"{self.name}<{args}>"
        if self.type_parameters:
            params = ", ".join(p.name for p in self.type_parameters)
            return f"{self.name}<{params}>"
        return self.name

    # ── classification helpers ───────────────────────────────────────

    @property
    def is_value_type(self) -> bool:
        if self.special_type in (SpecialType.OBJECT, SpecialType.STRING):
            return False
        return self.type_kind in (TypeKind.STRUCT, TypeKind.ENUM)

    def fields_and_properties(self) -> List[FieldSymbol]:
        """Instance fields and properties, in declaration order."""
        return [
            m for m in self.members
            if isinstance(m, FieldSymbol) and not m.is_static
        ]

    def methods(self, name: Optional[str] = None) -> List[MethodSymbol]:
        return [
            m for m in self.members
            if isinstance(m, MethodSymbol) and (name is None or m.name == name)
        ]

    def add_member(self, member: object) -> None:
        if isinstance(member, MethodSymbol) and member.containing_type is None:
            member.containing_type = self
        self.members.append(member)

    def __repr__(self) -> str:
        return f"<TypeSymbol {self.type_kind.name.lower()} {self.display_name}>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 4: CONSTRUCTED TYPES
# ═════════════════════════════════════════════════════════════════════════

def array_of(element: TypeSymbol) -> TypeSymbol:
    return TypeSymbol(name="Array", type_kind=TypeKind.ARRAY,
                      namespace="System", element_type=element)


def nullable_of(underlying: TypeSymbol) -> TypeSymbol:
    """
    ``T?``.  Only value types get a wrapper; for reference types the
    annotation does not change the type, so *underlying* comes back.
    """
    if not underlying.is_value_type or underlying.is_nullable_value_wrapper:
        return underlying
    return TypeSymbol(
        name="Nullable",
        namespace="System",
        type_kind=TypeKind.STRUCT,
        is_nullable_value_wrapper=True,
        type_arguments=[underlying],
        original_definition=NULLABLE_DEFINITION,
    )


def tuple_of(
    elements: Sequence[Tuple[Optional[str], TypeSymbol]],
) -> TypeSymbol:
    """Build a value tuple.  Unnamed elements keep an empty name."""
    tup = TypeSymbol(
        name="ValueTuple",
        namespace="System",
        type_kind=TypeKind.STRUCT,
        is_tuple=True,
        type_arguments=[t for _, t in elements],
        original_definition=f"System.ValueTuple`{len(elements)}",
    )
    for name, etype in elements:
        tup.tuple_elements.append(FieldSymbol(name=name or "", type=etype))
    return tup


def builtin(keyword: str) -> TypeSymbol:
    """A fresh symbol for a built-in keyword type (``int``, ``object``...)."""
    special, kind = BUILTIN_KEYWORDS[keyword]
    return TypeSymbol(name=keyword, type_kind=kind, special_type=special,
                      namespace="System")


def type_parameter(
    name: str, constraints: Sequence[TypeSymbol] = (),
) -> TypeSymbol:
    return TypeSymbol(name=name, type_kind=TypeKind.TYPE_PARAMETER,
                      constraints=list(constraints))


# ═════════════════════════════════════════════════════════════════════════
#  PART 5: SNAPSHOT
# ═════════════════════════════════════════════════════════════════════════

class AmbiguousName(LookupError):
    """A short name matches more than one declared type."""


class SymbolTable:
    """
    An ordered snapshot of declared types.

    Types are reachable by full name and, when unambiguous, by short
    name.  Iteration follows declaration order, which is what makes the
    checker's output reproducible.
    """

    def __init__(self) -> None:
        self._types: List[TypeSymbol] = []
        self._by_full: Dict[str, TypeSymbol] = {}
        self._by_short: Dict[str, List[TypeSymbol]] = {}
        self._user_start = 0

    def add(self, symbol: TypeSymbol) -> None:
        if symbol.full_name in self._by_full:
            raise KeyError(f"duplicate type '{symbol.full_name}'")
        self._types.append(symbol)
        self._by_full[symbol.full_name] = symbol
        self._by_short.setdefault(symbol.name, []).append(symbol)

    def mark_user_start(self) -> None:
        """Everything added after this call is user-declared (not prelude)."""
        self._user_start = len(self._types)

    def lookup(self, name: str) -> Optional[TypeSymbol]:
        found = self._by_full.get(name)
        if found is not None:
            return found
        candidates = self._by_short.get(name, [])
        if len(candidates) > 1:
            raise AmbiguousName(
                f"'{name}' is ambiguous: "
                + ", ".join(c.full_name for c in candidates)
            )
        return candidates[0] if candidates else None

    def __contains__(self, name: str) -> bool:
        try:
            return self.lookup(name) is not None
        except AmbiguousName:
            return True

    def __iter__(self) -> Iterator[TypeSymbol]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def user_types(self) -> List[TypeSymbol]:
        return self._types[self._user_start:]

    def records(self) -> List[TypeSymbol]:
        """User-declared derived-equality composites, in declaration order."""
        return [t for t in self.user_types() if t.is_record]


__all__ = [
    "TypeKind",
    "SpecialType",
    "BUILTIN_KEYWORDS",
    "NULLABLE_DEFINITION",
    "SourceSpan",
    "FieldSymbol",
    "ParameterSymbol",
    "MethodSymbol",
    "TypeSymbol",
    "array_of",
    "nullable_of",
    "tuple_of",
    "builtin",
    "type_parameter",
    "AmbiguousName",
    "SymbolTable",
]
