# tests/test_checker.py
"""
Tests for the record checker: member enumeration, message formatting,
suppression and the output formats.
"""

import json

import pytest

from tdl import parse_source
from valuesem.checker import (
    DIAGNOSTIC_ID,
    RecordChecker,
    check_snapshot,
    format_member,
)
from valuesem.config import AnalysisConfig
from valuesem.diagnostics import (
    Diagnostic,
    DiagnosticSeverity,
    SuppressionManager,
)
from valuesem.symbols import SourceSpan, SymbolTable, array_of
from valuesem.verdict import Verdict

from tests.conftest import CYCLE_TDL, INT, ORDERS_TDL, record, struct


@pytest.fixture
def orders():
    return parse_source(ORDERS_TDL, filename="orders.tdl")


class TestFormatMember:

    def test_failed(self):
        assert format_member("int[]", "Data", Verdict.FAILED) == "int[] Data"

    def test_nested(self):
        text = format_member("StructA", "Sa", Verdict.nested_failed("int[]"))
        assert text == "StructA Sa (field int[])"

    def test_nested_field_or_property(self):
        text = format_member("StructA", "Sa", Verdict.nested_failed("int[]"),
                             parameter=False)
        assert text == "StructA Sa (int[])"


class TestRecordChecker:

    def test_orders_findings(self, orders):
        results = check_snapshot(orders)
        messages = [d.message for d in results.diagnostics]
        assert messages == [
            "Member 'Lines Lines (field int[])' does not have value semantics",
            "Member 'List<string> Notes' does not have value semantics",
        ]
        assert results.checked_records == ["Order", "Audit", "Stamp"]
        assert results.members_checked == 8

    def test_locations_point_at_members(self, orders):
        first, second = check_snapshot(orders).diagnostics
        assert first.location == SourceSpan("orders.tdl", 6, 41)
        assert second.location == SourceSpan("orders.tdl", 7, 33)

    def test_diagnostic_fields(self, orders):
        diag = check_snapshot(orders).diagnostics[0]
        assert diag.error_id == DIAGNOSTIC_ID == "JSV01"
        assert diag.record == "Order"
        assert diag.member == "Lines"
        assert diag.type_name == "Lines"
        assert diag.nested_type == "int[]"
        assert diag.severity is DiagnosticSeverity.WARNING

    def test_one_diagnostic_per_member(self):
        table = parse_source(
            "record class R(int[] A, object B, string C, long[] D);")
        results = check_snapshot(table)
        assert [d.member for d in results.diagnostics] == ["A", "B", "D"]

    def test_params_then_fields(self):
        table = parse_source("""
            record class R(int[] Param) {
                property object Prop;
                long[] Field;
            }
        """)
        results = check_snapshot(table)
        assert [d.member for d in results.diagnostics] == ["Param", "Prop", "Field"]

    def test_nested_detail_for_parameters_and_fields(self):
        table = parse_source("""
            struct Lines { int[] Quantities; }
            record class R(Lines Param) {
                Lines Field;
                property Lines Prop;
            }
        """)
        messages = [d.message for d in check_snapshot(table).diagnostics]
        assert messages == [
            "Member 'Lines Param (field int[])' does not have value semantics",
            "Member 'Lines Field (int[])' does not have value semantics",
            "Member 'Lines Prop (int[])' does not have value semantics",
        ]

    def test_static_members_not_checked(self):
        table = parse_source("record class R(int Id) { static int[] Cache; }")
        assert check_snapshot(table).diagnostics == []

    def test_nullable_member_named_by_underlying(self):
        table = parse_source("""
            struct Lines { int[] Quantities; }
            record class R(Lines? Maybe);
        """)
        (diag,) = check_snapshot(table).diagnostics
        assert diag.message == \
            "Member 'Lines Maybe (field int[])' does not have value semantics"

    def test_record_with_own_equals_is_skipped(self):
        table = parse_source("""
            record class Custom(int[] Data) { bool Equals(Custom other); }
        """)
        results = check_snapshot(table)
        assert results.diagnostics == []
        assert results.skipped_records == ["Custom"]
        assert results.checked_records == []

    def test_nested_record_trusted_but_checked_separately(self):
        table = parse_source("""
            record class Inner(int[] Data);
            record class Outer(Inner In);
        """)
        results = check_snapshot(table)
        assert [(d.record, d.member) for d in results.diagnostics] == \
            [("Inner", "Data")]

    def test_cycles_do_not_crash(self):
        results = check_snapshot(parse_source(CYCLE_TDL))
        assert results.diagnostics == []
        assert results.checked_records == ["Holder"]

    def test_prelude_types_are_not_records(self):
        results = check_snapshot(parse_source(""))
        assert results.checked_records == []

    def test_hand_built_table(self):
        table = SymbolTable()
        table.add(record("R", params=[("Data", array_of(INT))]))
        (diag,) = check_snapshot(table).diagnostics
        assert diag.message == "Member 'int[] Data' does not have value semantics"

    def test_check_record_returns_every_member(self):
        rec = record("R", params=[("A", INT)], fields=[("B", struct("S"))])
        results = RecordChecker().check_record(rec)
        assert [(r.name, r.verdict) for r in results] == \
            [("A", Verdict.OK), ("B", Verdict.OK)]


class TestConfiguration:

    def test_ignore_types(self, orders):
        config = AnalysisConfig(ignore_types=frozenset({"Audit"}))
        results = check_snapshot(orders, config)
        assert [d.record for d in results.diagnostics] == ["Order"]
        assert "Audit" in results.skipped_records

    def test_severity(self, orders):
        config = AnalysisConfig(severity="error")
        results = check_snapshot(orders, config)
        assert results.error_count == 2

    def test_suppress_via_config(self, orders):
        config = AnalysisConfig(suppress=frozenset({"JSV01"}))
        assert check_snapshot(orders, config).diagnostics == []

    def test_type_suppression(self, orders):
        sm = SuppressionManager()
        sm.add_type_suppression("JSV01", "Ord*")
        results = RecordChecker(suppressions=sm).run(orders)
        assert [d.record for d in results.diagnostics] == ["Audit"]

    def test_type_suppression_via_config(self, orders):
        config = AnalysisConfig(suppress_types=frozenset({"JSV01:Ord*"}))
        results = check_snapshot(orders, config)
        assert [d.record for d in results.diagnostics] == ["Audit"]

    def test_path_guard_same_findings(self, orders):
        config = AnalysisConfig(guard_policy="path")
        assert [d.message for d in check_snapshot(orders, config).diagnostics] == \
            [d.message for d in check_snapshot(orders).diagnostics]


class TestOutput:

    def test_gcc_format(self, orders):
        text = check_snapshot(orders).to_gcc_format()
        assert text.splitlines()[0] == (
            "orders.tdl:6:41: warning: Member 'Lines Lines (field int[])' "
            "does not have value semantics [JSV01]")

    def test_json_lines(self, orders):
        lines = check_snapshot(orders).to_json_lines().splitlines()
        first = json.loads(lines[0])
        assert first["errorId"] == "JSV01"
        assert first["linenr"] == 6
        assert first["column"] == 41
        assert first["nestedType"] == "int[]"
        assert "nestedType" not in json.loads(lines[1])

    def test_summary(self, orders):
        summary = check_snapshot(orders).summary()
        assert summary.splitlines()[0] == \
            "Checked 3 record(s), 8 member(s): 2 diagnostic(s)"
        assert "  Order: 1 finding(s)" in summary
        assert "  Stamp: 0 finding(s)" in summary


class TestSuppressionManager:

    def _diag(self, record="Acme.Order"):
        return Diagnostic(
            error_id="JSV01",
            message="m",
            severity=DiagnosticSeverity.WARNING,
            location=SourceSpan("f", 1, 1),
            record=record,
        )

    def test_global(self):
        sm = SuppressionManager()
        sm.add_global_suppression("*")
        assert sm.is_suppressed(self._diag())

    def test_pattern(self):
        sm = SuppressionManager()
        sm.add_type_suppression("JSV01", "Acme.*")
        assert sm.is_suppressed(self._diag())
        assert not sm.is_suppressed(self._diag("Other.Order"))

    def test_filter(self):
        sm = SuppressionManager()
        sm.add_type_suppression("JSV01", "Acme.Order")
        kept = sm.filter_diagnostics([self._diag(), self._diag("B")])
        assert [d.record for d in kept] == ["B"]
