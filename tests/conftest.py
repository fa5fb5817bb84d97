# tests/conftest.py
"""
Shared builders, providers and TDL snippets for the test-suite.

Import helpers directly (``from tests.conftest import struct``); the
fixtures at the bottom are picked up by pytest automatically.
"""

import textwrap
from typing import Any, Iterable, Optional, Sequence, Tuple

import pytest

from valuesem.kinds import SymbolResolver, TypeDescriptor
from valuesem.symbols import (
    FieldSymbol,
    MethodSymbol,
    ParameterSymbol,
    TypeKind,
    TypeSymbol,
    builtin,
)

INT = builtin("int")
LONG = builtin("long")
BYTE = builtin("byte")
BOOL = builtin("bool")
STRING = builtin("string")
OBJECT = builtin("object")
DYNAMIC = builtin("dynamic")


# ─────────────────────────────────────────────────────────────────────────
#  Symbol builders
# ─────────────────────────────────────────────────────────────────────────

def _with_fields(symbol: TypeSymbol,
                 fields: Iterable[Tuple[str, TypeSymbol]]) -> TypeSymbol:
    for name, ftype in fields:
        symbol.add_member(FieldSymbol(name=name, type=ftype))
    return symbol


def struct(name: str, *fields: Tuple[str, TypeSymbol],
           attributes: Sequence[str] = ()) -> TypeSymbol:
    """A value composite with the given ``(name, type)`` fields."""
    return _with_fields(
        TypeSymbol(name=name, type_kind=TypeKind.STRUCT,
                   attributes=list(attributes)),
        fields)


def klass(name: str, *fields: Tuple[str, TypeSymbol]) -> TypeSymbol:
    return _with_fields(TypeSymbol(name=name, type_kind=TypeKind.CLASS), fields)


def record(name: str, params: Sequence[Tuple[str, TypeSymbol]] = (),
           fields: Sequence[Tuple[str, TypeSymbol]] = (),
           value_type: bool = False) -> TypeSymbol:
    symbol = TypeSymbol(
        name=name,
        type_kind=TypeKind.STRUCT if value_type else TypeKind.CLASS,
        is_record=True,
    )
    for pname, ptype in params:
        symbol.primary_parameters.append(ParameterSymbol(pname, ptype))
    return _with_fields(symbol, fields)


def interface(name: str) -> TypeSymbol:
    return TypeSymbol(name=name, type_kind=TypeKind.INTERFACE)


def enum(name: str, flags: bool = False) -> TypeSymbol:
    return TypeSymbol(name=name, type_kind=TypeKind.ENUM,
                      attributes=["Flags"] if flags else [])


def add_equals(symbol: TypeSymbol, param_type: Optional[TypeSymbol] = None,
               *, override: bool = False, static: bool = False,
               abstract: bool = False) -> MethodSymbol:
    """Declare ``bool Equals(param_type other)`` on *symbol* (default: itself)."""
    method = MethodSymbol(
        name="Equals",
        parameters=[ParameterSymbol(
            "other", symbol if param_type is None else param_type)],
        return_type=BOOL,
        is_static=static,
        is_override=override,
        is_abstract=abstract,
    )
    symbol.add_member(method)
    return method


# ─────────────────────────────────────────────────────────────────────────
#  Instrumented providers
# ─────────────────────────────────────────────────────────────────────────

class RecordingProvider(SymbolResolver):
    """``SymbolResolver`` that remembers every type it was asked about."""

    def __init__(self, config=None):
        super().__init__(config)
        self.seen = []

    def describe(self, type_ref: Any) -> TypeDescriptor:
        self.seen.append(type_ref)
        return super().describe(type_ref)


class ExplodingProvider(SymbolResolver):
    """Raises as soon as any of *forbidden* is described."""

    def __init__(self, *forbidden: TypeSymbol, config=None):
        super().__init__(config)
        self.forbidden = list(forbidden)

    def describe(self, type_ref: Any) -> TypeDescriptor:
        if any(type_ref is f for f in self.forbidden):
            raise AssertionError(f"{type_ref!r} must not be evaluated")
        return super().describe(type_ref)


# ─────────────────────────────────────────────────────────────────────────
#  TDL snippets
# ─────────────────────────────────────────────────────────────────────────

ORDERS_TDL = textwrap.dedent("""\
    // Order book sample
    struct Money { decimal Amount; string Currency; }
    struct Lines { int[] Quantities; }
    [Flags] enum Status : byte { Open, Closed }

    record class Order(int Id, Money Total, Lines Lines, Status State);
    record class Audit(DateTime At, List<string> Notes);
    record struct Stamp(long Ticks, string? Source);
""")

CYCLE_TDL = textwrap.dedent("""\
    struct A { B Next; }
    struct B { A Back; }
    record class Holder(A Head);
""")


@pytest.fixture
def write_tdl(tmp_path):
    """Write TDL *text* to a temp file and return its path as str."""
    def _write(text: str, name: str = "input.tdl") -> str:
        path = tmp_path / name
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return str(path)
    return _write
