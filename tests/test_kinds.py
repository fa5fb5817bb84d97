# tests/test_kinds.py
"""
Tests for kind resolution and the equality-capability probes.
"""

import pytest

from tdl import parse_source
from valuesem.config import AnalysisConfig
from valuesem.kinds import (
    DescriptorProvider,
    Kind,
    Member,
    SymbolResolver,
    declares_record_equals,
    has_own_identity_equals_override,
    has_own_value_equals,
    resolve_kind,
)
from valuesem.symbols import (
    FieldSymbol,
    TypeKind,
    TypeSymbol,
    array_of,
    nullable_of,
    tuple_of,
    type_parameter,
)

from tests.conftest import (
    DYNAMIC,
    INT,
    OBJECT,
    STRING,
    add_equals,
    enum,
    interface,
    klass,
    record,
    struct,
)


class TestResolveKind:
    """One row of the resolution table per test."""

    def test_object_and_dynamic(self):
        assert resolve_kind(OBJECT) is Kind.UNTYPED_OR_UNIVERSAL
        assert resolve_kind(DYNAMIC) is Kind.UNTYPED_OR_UNIVERSAL

    def test_string_is_primitive(self):
        assert resolve_kind(STRING) is Kind.PRIMITIVE
        assert resolve_kind(INT) is Kind.PRIMITIVE

    def test_enum(self):
        assert resolve_kind(enum("Color")) is Kind.ENUM_LIKE

    def test_inline_array_beats_struct(self):
        buf = struct("Buf", attributes=["System.Runtime.CompilerServices.InlineArray"])
        assert resolve_kind(buf) is Kind.FIXED_SIZE_BUFFER

    def test_inline_array_attribute_on_class_ignored(self):
        cls = klass("Buf")
        cls.attributes.append("InlineArray")
        assert resolve_kind(cls) is Kind.REFERENCE_COMPOSITE

    def test_custom_inline_attribute_name(self):
        buf = struct("Buf", attributes=["FixedBuffer"])
        assert resolve_kind(buf) is Kind.VALUE_COMPOSITE
        config = AnalysisConfig(inline_array_attributes=frozenset({"FixedBuffer"}))
        assert resolve_kind(buf, config) is Kind.FIXED_SIZE_BUFFER

    def test_wrapper_beats_value_composite(self):
        table = parse_source("record class R(ArraySegment<int> S);")
        segment = table.lookup("R").primary_parameters[0].type
        assert segment.type_kind is TypeKind.STRUCT
        assert resolve_kind(segment) is Kind.KNOWN_NON_VALUE_WRAPPER

    def test_tuple(self):
        assert resolve_kind(tuple_of([(None, INT), (None, INT)])) is Kind.TUPLE

    def test_record_class_and_struct(self):
        assert resolve_kind(record("R")) is Kind.DERIVED_EQUALITY
        assert resolve_kind(record("S", value_type=True)) is Kind.DERIVED_EQUALITY

    def test_class_and_struct(self):
        assert resolve_kind(klass("C")) is Kind.REFERENCE_COMPOSITE
        assert resolve_kind(struct("S")) is Kind.VALUE_COMPOSITE

    @pytest.mark.parametrize("symbol", [
        type_parameter("T"),
        array_of(INT),
        interface("IThing"),
        TypeSymbol(name="Handler", type_kind=TypeKind.DELEGATE),
        TypeSymbol(name="?", type_kind=TypeKind.ERROR),
    ])
    def test_everything_else(self, symbol):
        assert resolve_kind(symbol) is Kind.TYPE_PARAMETER_OR_OTHER


class TestCapabilities:

    def test_value_equals_on_self(self):
        s = struct("S")
        add_equals(s)
        assert has_own_value_equals(s)

    def test_value_equals_other_type_ignored(self):
        s = struct("S")
        add_equals(s, INT)
        assert not has_own_value_equals(s)

    def test_nullable_self_counts_for_structs(self):
        s = struct("S")
        add_equals(s, nullable_of(s))
        assert has_own_value_equals(s)

    def test_inherited_method_not_counted(self):
        base = klass("Base")
        derived = klass("Derived")
        method = add_equals(base, derived)
        derived.members.append(method)
        assert method.containing_type is base
        assert not has_own_value_equals(derived)

    def test_identity_override(self):
        c = klass("C")
        add_equals(c, OBJECT, override=True)
        assert has_own_identity_equals_override(c)
        assert not has_own_value_equals(c)

    def test_identity_without_override(self):
        c = klass("C")
        add_equals(c, OBJECT)
        assert not has_own_identity_equals_override(c)

    def test_tuples_never_have_capabilities(self):
        tup = tuple_of([(None, INT)])
        add_equals(tup)
        assert not has_own_value_equals(tup)

    def test_declares_record_equals(self):
        table = parse_source("""
            record class Plain(int[] Data);
            record class Custom(int[] Data) { bool Equals(Custom other); }
            record class WrongReturn(int[] Data) { int Equals(WrongReturn other); }
        """)
        assert not declares_record_equals(table.lookup("Plain"))
        assert declares_record_equals(table.lookup("Custom"))
        assert not declares_record_equals(table.lookup("WrongReturn"))


class TestSymbolResolver:

    def test_is_a_descriptor_provider(self):
        assert isinstance(SymbolResolver(), DescriptorProvider)

    def test_describe_struct(self):
        point = struct("Point", ("X", INT), ("Label", STRING))
        desc = SymbolResolver().describe(point)
        assert desc.identity is point
        assert desc.kind is Kind.VALUE_COMPOSITE
        assert desc.display_name == "Point"
        assert list(desc.members()) == [Member("X", INT), Member("Label", STRING)]
        assert list(desc.tuple_elements()) == []

    def test_describe_nullable(self):
        point = struct("Point")
        desc = SymbolResolver().describe(nullable_of(point))
        assert desc.is_nullable_value_wrapper
        assert desc.unwrap() is point
        assert desc.display_name == "Point?"

    def test_describe_tuple(self):
        tup = tuple_of([("a", INT), (None, STRING)])
        desc = SymbolResolver().describe(tup)
        assert desc.kind is Kind.TUPLE
        assert [m.name for m in desc.tuple_elements()] == ["a", ""]
        assert not desc.has_own_value_equals

    def test_members_skip_untyped(self):
        s = struct("S", ("X", INT))
        s.add_member(FieldSymbol(name="Broken", type=None))
        assert [m.name for m in SymbolResolver().describe(s).members()] == ["X"]

    def test_generic_instance_display(self):
        table = parse_source(
            "record class R(Dictionary<string, List<int[]>> Index);")
        index = table.lookup("R").primary_parameters[0].type
        assert SymbolResolver().describe(index).display_name == \
            "Dictionary<string, List<int[]>>"
