"""
valuesem/diagnostics.py
═══════════════════════

Diagnostic model and suppression handling for the record checker.

Diagnostics serialise to the same flat JSON shape cppcheck addons use
(``file``, ``linenr``, ``column``, ``severity``, ``message``,
``errorId``...), plus the member/type details a downstream tool may
want without re-parsing the message.
"""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatch
from typing import Any, Dict, Iterable, List, Optional, Set

from valuesem.symbols import SourceSpan


class DiagnosticSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"
    STYLE = "style"
    INFORMATION = "information"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single finding about one top-level record member.

    Attributes
    ----------
    error_id     : Rule identifier (``JSV01``)
    message      : Human-readable description
    severity     : DiagnosticSeverity
    location     : Where the member was declared
    record       : Full name of the record under test
    member       : Member name
    type_name    : Display name of the member type
    nested_type  : Immediate failing child type, for nested failures
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceSpan
    record: str = ""
    member: str = ""
    type_name: str = ""
    nested_type: Optional[str] = None
    addon: str = "valuesem"

    def to_json(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "file": self.location.file,
            "linenr": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "addon": self.addon,
            "errorId": self.error_id,
            "record": self.record,
            "member": self.member,
            "type": self.type_name,
        }
        if self.nested_type is not None:
            result["nestedType"] = self.nested_type
        return result

    def to_json_str(self) -> str:
        return json.dumps(self.to_json())

    def to_gcc_format(self) -> str:
        """``file:line:col: severity: message [id]``."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.error_id}]"

    def __str__(self) -> str:
        return self.to_gcc_format()


class SuppressionManager:
    """
    Global and per-record suppressions.

    >>> sm = SuppressionManager()
    >>> sm.add_global_suppression("JSV01")
    >>> sm.add_type_suppression("JSV01", "Legacy.*")
    """

    def __init__(self) -> None:
        self._global: Set[str] = set()
        # record name pattern → suppressed ids
        self._by_type: Dict[str, Set[str]] = defaultdict(set)

    def add_global_suppression(self, error_id: str) -> None:
        self._global.add(error_id)

    def add_type_suppression(self, error_id: str, type_pattern: str) -> None:
        self._by_type[type_pattern].add(error_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        eid = diag.error_id
        if eid in self._global or "*" in self._global:
            return True
        for pattern, ids in self._by_type.items():
            if eid in ids or "*" in ids:
                if pattern == diag.record or fnmatch(diag.record, pattern):
                    return True
        return False

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic],
    ) -> List[Diagnostic]:
        return [d for d in diagnostics if not self.is_suppressed(d)]


__all__ = ["DiagnosticSeverity", "Diagnostic", "SuppressionManager"]
