"""
valuesem/checker.py
═══════════════════

Record checker: the driver that feeds record members to the classifier
and turns non-Ok verdicts into diagnostics.

For each derived-equality composite ("record") in a snapshot:

  1. skip it when the record wrote its own ``bool Equals(T)``, since its
     generated equality is no longer in use;
  2. classify every primary-constructor parameter, then every instance
     field and property, in declaration order, each under a fresh
     cycle guard;
  3. emit exactly one ``JSV01`` diagnostic per failing member, naming
     the member and, for nested failures, the immediate child type.

Nested derived-equality types are not followed; each record is its own
unit and is checked when the loop reaches it.
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from valuesem.classifier import Classifier
from valuesem.config import AnalysisConfig
from valuesem.diagnostics import (
    Diagnostic,
    DiagnosticSeverity,
    SuppressionManager,
)
from valuesem.kinds import SymbolResolver, declares_record_equals
from valuesem.symbols import SourceSpan, SymbolTable, TypeSymbol
from valuesem.verdict import Outcome, Verdict

logger = logging.getLogger(__name__)

DIAGNOSTIC_ID = "JSV01"
MESSAGE_TEMPLATE = "Member '{0}' does not have value semantics"


def format_member(type_name: str, member: str, verdict: Verdict,
                  parameter: bool = True) -> str:
    """``StructA Sa``, ``StructA Sa (field int[])`` for a primary-constructor
    parameter, or ``StructA Sa (int[])`` for a field or property.
    """
    text = f"{type_name} {member}"
    if verdict.outcome is Outcome.NESTED_FAILED and verdict.inner_type_name:
        if parameter:
            text += f" (field {verdict.inner_type_name})"
        else:
            text += f" ({verdict.inner_type_name})"
    return text


@dataclass
class MemberResult:
    record: TypeSymbol
    name: str
    type: TypeSymbol
    verdict: Verdict
    location: SourceSpan
    is_parameter: bool = True


@dataclass
class CheckResults:
    """Diagnostics and bookkeeping from one checker run."""
    diagnostics: List[Diagnostic] = field(default_factory=list)
    checked_records: List[str] = field(default_factory=list)
    skipped_records: List[str] = field(default_factory=list)
    members_checked: int = 0
    diagnostics_by_record: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list))
    elapsed_ms: float = 0.0

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics
                   if d.severity == DiagnosticSeverity.ERROR)

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        lines = [
            f"Checked {len(self.checked_records)} record(s), "
            f"{self.members_checked} member(s): "
            f"{self.total_count} diagnostic(s)",
        ]
        for name in self.checked_records:
            count = len(self.diagnostics_by_record.get(name, []))
            lines.append(f"  {name}: {count} finding(s)")
        if self.skipped_records:
            lines.append("  skipped: " + ", ".join(self.skipped_records))
        return "\n".join(lines)


class RecordChecker:
    """
    Runs the classifier over every record of a ``SymbolTable``.

    >>> results = RecordChecker().run(table)
    >>> print(results.summary())
    """

    name = "value-semantics"

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        suppressions: Optional[SuppressionManager] = None,
    ) -> None:
        self.config = config or AnalysisConfig()
        self.classifier = Classifier(SymbolResolver(self.config), self.config)
        self.suppressions = suppressions or SuppressionManager()
        for error_id in self.config.suppress:
            self.suppressions.add_global_suppression(error_id)
        for error_id, pattern in self.config.type_suppressions():
            self.suppressions.add_type_suppression(error_id, pattern)

    # ── member enumeration ───────────────────────────────────────────

    def iter_members(
        self, record: TypeSymbol,
    ) -> Iterator[Tuple[str, TypeSymbol, SourceSpan, bool]]:
        """Primary-constructor parameters first, then fields/properties.

        The last item of each tuple is true for a parameter.
        """
        for param in record.primary_parameters:
            if param.type is not None:
                yield param.name, param.type, param.location, True
        for member in record.fields_and_properties():
            if member.type is not None:
                yield member.name, member.type, member.location, False

    def check_record(self, record: TypeSymbol) -> List[MemberResult]:
        results = []
        for name, mtype, location, is_param in self.iter_members(record):
            verdict = self.classifier.classify_member(mtype)
            results.append(MemberResult(record, name, mtype, verdict,
                                        location, is_param))
        return results

    # ── diagnostics ──────────────────────────────────────────────────

    def _diagnose(self, result: MemberResult) -> Diagnostic:
        mtype = result.type
        if mtype.is_nullable_value_wrapper and mtype.type_arguments:
            mtype = mtype.type_arguments[0]
        type_name = mtype.display_name
        return Diagnostic(
            error_id=DIAGNOSTIC_ID,
            message=MESSAGE_TEMPLATE.format(
                format_member(type_name, result.name, result.verdict,
                              result.is_parameter)),
            severity=DiagnosticSeverity(self.config.severity),
            location=result.location,
            record=result.record.full_name,
            member=result.name,
            type_name=type_name,
            nested_type=result.verdict.inner_type_name,
        )

    def _is_ignored(self, record: TypeSymbol) -> bool:
        ignored = self.config.ignore_types
        return record.full_name in ignored or record.name in ignored

    def run(self, table: SymbolTable) -> CheckResults:
        results = CheckResults()
        t0 = time.monotonic()

        for record in table.records():
            rname = record.full_name
            if self._is_ignored(record):
                logger.info("skipping ignored record %s", rname)
                results.skipped_records.append(rname)
                continue
            if declares_record_equals(record):
                logger.debug("%s declares Equals(%s); skipped",
                             rname, record.name)
                results.skipped_records.append(rname)
                continue

            results.checked_records.append(rname)
            for member in self.check_record(record):
                results.members_checked += 1
                if member.verdict.is_ok:
                    continue
                diag = self._diagnose(member)
                if self.suppressions.is_suppressed(diag):
                    logger.debug("suppressed: %s", diag.message)
                    continue
                results.diagnostics.append(diag)
                results.diagnostics_by_record[rname].append(diag)

        results.elapsed_ms = (time.monotonic() - t0) * 1000.0
        logger.info("checked %d record(s) in %.1fms",
                    len(results.checked_records), results.elapsed_ms)
        return results


def check_snapshot(
    table: SymbolTable, config: Optional[AnalysisConfig] = None,
) -> CheckResults:
    """Convenience wrapper: ``RecordChecker(config).run(table)``."""
    return RecordChecker(config).run(table)


__all__ = [
    "DIAGNOSTIC_ID",
    "MESSAGE_TEMPLATE",
    "format_member",
    "MemberResult",
    "CheckResults",
    "RecordChecker",
    "check_snapshot",
]
