"""
valuesem/kinds.py
═════════════════

Kind / capability resolution.

A host type system answers many overlapping "is this an X?" questions
(is it a struct, a record, a tuple, a nullable, does it carry attribute
Y...).  Here they are folded, once per type, into one closed variant
``Kind`` plus two equality-capability flags.  All tie-breaks live in
``resolve_kind`` so they can be audited in one place:

    ┌────┬───────────────────────────────────────────┬─────────────────────────┐
    │  # │ raw evidence                              │ Kind                    │
    ├────┼───────────────────────────────────────────┼─────────────────────────┤
    │  1 │ object / dynamic                          │ UNTYPED_OR_UNIVERSAL    │
    │  2 │ bool, integral, floating, char, string    │ PRIMITIVE               │
    │  3 │ enum (any width, flags included)          │ ENUM_LIKE               │
    │  4 │ struct with an inline-array attribute     │ FIXED_SIZE_BUFFER       │
    │  5 │ generic definition in the wrapper set     │ KNOWN_NON_VALUE_WRAPPER │
    │  6 │ value tuple                               │ TUPLE                   │
    │  7 │ record (class or struct)                  │ DERIVED_EQUALITY        │
    │  8 │ class                                     │ REFERENCE_COMPOSITE     │
    │  9 │ struct                                    │ VALUE_COMPOSITE         │
    │ 10 │ anything else                             │ TYPE_PARAMETER_OR_OTHER │
    └────┴───────────────────────────────────────────┴─────────────────────────┘

Nullable value wrappers are not a Kind: the classifier unwraps them
before asking for one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import (
    Any,
    Callable,
    FrozenSet,
    Hashable,
    List,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from valuesem.config import AnalysisConfig
from valuesem.symbols import (
    FieldSymbol,
    MethodSymbol,
    SpecialType,
    TypeKind,
    TypeSymbol,
)


class Kind(Enum):
    PRIMITIVE = auto()
    ENUM_LIKE = auto()
    UNTYPED_OR_UNIVERSAL = auto()
    FIXED_SIZE_BUFFER = auto()
    KNOWN_NON_VALUE_WRAPPER = auto()
    TUPLE = auto()
    DERIVED_EQUALITY = auto()
    REFERENCE_COMPOSITE = auto()
    VALUE_COMPOSITE = auto()
    TYPE_PARAMETER_OR_OTHER = auto()


PRIMITIVE_SPECIAL_TYPES: FrozenSet[SpecialType] = frozenset({
    SpecialType.BOOLEAN,
    SpecialType.CHAR,
    SpecialType.SBYTE,
    SpecialType.BYTE,
    SpecialType.INT16,
    SpecialType.UINT16,
    SpecialType.INT32,
    SpecialType.UINT32,
    SpecialType.INT64,
    SpecialType.UINT64,
    SpecialType.SINGLE,
    SpecialType.DOUBLE,
    SpecialType.STRING,
})


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: DESCRIPTOR (the classifier's view of a type)
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Member:
    """An ordered (name, type) pair; *type* is whatever the provider uses."""
    name: str
    type: Any


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Everything the classifier needs to know about one type.

    ``members`` / ``tuple_elements`` / ``unwrap`` are thunks so that a
    provider only enumerates what the classifier actually visits.
    """
    identity: Hashable
    kind: Kind
    display_name: str
    is_nullable_value_wrapper: bool = False
    has_own_value_equals: bool = False
    has_own_identity_equals_override: bool = False
    unwrap: Callable[[], Any] = field(default=lambda: None, repr=False)
    members: Callable[[], Sequence[Member]] = field(
        default=lambda: (), repr=False)
    tuple_elements: Callable[[], Sequence[Member]] = field(
        default=lambda: (), repr=False)


@runtime_checkable
class DescriptorProvider(Protocol):
    """Anything that can describe a host type to the classifier."""

    def describe(self, type_ref: Any) -> TypeDescriptor:
        ...


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: KIND RESOLUTION
# ═════════════════════════════════════════════════════════════════════════

def _attribute_key(name: str) -> str:
    if name.endswith("Attribute"):
        return name[: -len("Attribute")]
    return name


def has_inline_array_attribute(
    symbol: TypeSymbol, config: AnalysisConfig,
) -> bool:
    wanted = {_attribute_key(a) for a in config.inline_array_attributes}
    return any(_attribute_key(a) in wanted for a in symbol.attributes)


def resolve_kind(
    symbol: TypeSymbol, config: Optional[AnalysisConfig] = None,
) -> Kind:
    """Map raw symbol information to a ``Kind``; first matching row wins."""
    config = config or AnalysisConfig()

    if (symbol.special_type == SpecialType.OBJECT
            or symbol.type_kind == TypeKind.DYNAMIC):
        return Kind.UNTYPED_OR_UNIVERSAL
    if symbol.special_type in PRIMITIVE_SPECIAL_TYPES:
        return Kind.PRIMITIVE
    if symbol.type_kind == TypeKind.ENUM:
        return Kind.ENUM_LIKE
    if (symbol.type_kind == TypeKind.STRUCT
            and has_inline_array_attribute(symbol, config)):
        return Kind.FIXED_SIZE_BUFFER
    if (symbol.original_definition
            and symbol.original_definition in config.known_wrappers):
        return Kind.KNOWN_NON_VALUE_WRAPPER
    if symbol.is_tuple:
        return Kind.TUPLE
    if symbol.is_record:
        return Kind.DERIVED_EQUALITY
    if symbol.type_kind == TypeKind.CLASS:
        return Kind.REFERENCE_COMPOSITE
    if symbol.type_kind == TypeKind.STRUCT:
        return Kind.VALUE_COMPOSITE
    return Kind.TYPE_PARAMETER_OR_OTHER


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: EQUALITY CAPABILITIES
# ═════════════════════════════════════════════════════════════════════════

def _declared_here(method: MethodSymbol, symbol: TypeSymbol) -> bool:
    return method.containing_type is symbol


def _is_self_or_nullable_self(
    param_type: Optional[TypeSymbol], symbol: TypeSymbol,
) -> bool:
    if param_type is symbol:
        return True
    # Equals(T? other) on a value composite
    return (
        param_type is not None
        and param_type.is_nullable_value_wrapper
        and bool(param_type.type_arguments)
        and param_type.type_arguments[0] is symbol
        and symbol.type_kind == TypeKind.STRUCT
    )


def has_own_value_equals(symbol: TypeSymbol) -> bool:
    """
    ``Equals(T)`` declared directly on *symbol*: one parameter of the
    type itself (or its nullable wrapper), instance, not abstract, and
    not merely re-exposing a base virtual slot.
    """
    if symbol.is_tuple:
        return False
    for method in symbol.methods("Equals"):
        if (len(method.parameters) == 1
                and _is_self_or_nullable_self(method.parameters[0].type, symbol)
                and not method.is_static
                and not method.is_override
                and not method.is_abstract
                and _declared_here(method, symbol)):
            return True
    return False


def has_own_identity_equals_override(symbol: TypeSymbol) -> bool:
    """``override Equals(object)`` declared directly on *symbol*."""
    if symbol.is_tuple:
        return False
    for method in symbol.methods("Equals"):
        if len(method.parameters) != 1:
            continue
        ptype = method.parameters[0].type
        if (ptype is not None
                and ptype.special_type == SpecialType.OBJECT
                and not method.is_static
                and method.is_override
                and _declared_here(method, symbol)):
            return True
    return False


def declares_record_equals(symbol: TypeSymbol) -> bool:
    """
    Whether a record replaced its generated equality with a
    hand-written ``bool Equals(T)``.
    """
    for method in symbol.methods("Equals"):
        rtype = method.return_type
        if (rtype is not None
                and rtype.special_type == SpecialType.BOOLEAN
                and len(method.parameters) == 1
                and method.parameters[0].type is symbol):
            return True
    return False


# ═════════════════════════════════════════════════════════════════════════
#  PART 4: THE DEFAULT PROVIDER
# ═════════════════════════════════════════════════════════════════════════

def _field_members(fields: Sequence[FieldSymbol]) -> List[Member]:
    return [Member(f.name, f.type) for f in fields if f.type is not None]


class SymbolResolver:
    """
    ``DescriptorProvider`` over ``valuesem.symbols``.

    Stateless apart from its config, so one instance can be shared by
    concurrent classifications.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None) -> None:
        self.config = config or AnalysisConfig()

    def describe(self, type_ref: TypeSymbol) -> TypeDescriptor:
        symbol = type_ref
        kind = resolve_kind(symbol, self.config)
        tuple_kind = kind == Kind.TUPLE

        def unwrap() -> Optional[TypeSymbol]:
            if symbol.type_arguments:
                return symbol.type_arguments[0]
            return None

        return TypeDescriptor(
            identity=symbol,
            kind=kind,
            display_name=symbol.display_name,
            is_nullable_value_wrapper=symbol.is_nullable_value_wrapper,
            has_own_value_equals=(
                not tuple_kind and has_own_value_equals(symbol)),
            has_own_identity_equals_override=(
                not tuple_kind and has_own_identity_equals_override(symbol)),
            unwrap=unwrap,
            members=lambda: _field_members(symbol.fields_and_properties()),
            tuple_elements=lambda: _field_members(symbol.tuple_elements),
        )


__all__ = [
    "Kind",
    "PRIMITIVE_SPECIAL_TYPES",
    "Member",
    "TypeDescriptor",
    "DescriptorProvider",
    "has_inline_array_attribute",
    "resolve_kind",
    "has_own_value_equals",
    "has_own_identity_equals_override",
    "declares_record_equals",
    "SymbolResolver",
]
