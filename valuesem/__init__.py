"""
valuesem: value-semantics analysis for derived-equality types
=============================================================

Records (and similar "data" types) get an equality method generated
from their members.  That generated equality is only meaningful when
every member compares by content.  This package decides, per member,
whether that holds.

Core modules
------------
symbols
    Snapshot model of the host type system (types, fields, methods).
kinds
    Folds raw symbol facts into one ``Kind`` plus two equality
    capability flags; the ``SymbolResolver`` descriptor provider.
guard
    Call-scoped and path-scoped cycle guards.
verdict
    ``Verdict``: Ok, Failed or NestedFailed(inner type).
classifier
    The recursive decision procedure.
checker
    Record checker producing ``JSV01`` diagnostics.
config
    ``AnalysisConfig`` and JSON config loading.

Quick start
-----------
>>> from tdl import parse_source
>>> from valuesem import check_snapshot
>>> table = parse_source("record class A(int I, int[] Numbers);")
>>> print(check_snapshot(table).to_gcc_format())
<input>:1:23: warning: Member 'int[] Numbers' does not have value semantics [JSV01]
"""

from __future__ import annotations

import logging
from typing import List

__version__ = "0.4.0"
__license__ = "MIT"

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

from valuesem.checker import (  # noqa: E402
    DIAGNOSTIC_ID,
    CheckResults,
    RecordChecker,
    check_snapshot,
)
from valuesem.classifier import Classifier, classify, classify_member  # noqa: E402
from valuesem.config import AnalysisConfig, ConfigError, load_config  # noqa: E402
from valuesem.diagnostics import (  # noqa: E402
    Diagnostic,
    DiagnosticSeverity,
    SuppressionManager,
)
from valuesem.guard import CycleGuard, PathScopedGuard, make_guard  # noqa: E402
from valuesem.kinds import (  # noqa: E402
    DescriptorProvider,
    Kind,
    Member,
    SymbolResolver,
    TypeDescriptor,
    resolve_kind,
)
from valuesem.symbols import (  # noqa: E402
    FieldSymbol,
    MethodSymbol,
    ParameterSymbol,
    SpecialType,
    SymbolTable,
    TypeKind,
    TypeSymbol,
)
from valuesem.verdict import Outcome, Verdict  # noqa: E402

__all__: List[str] = [
    "__version__",
    "DIAGNOSTIC_ID",
    "CheckResults",
    "RecordChecker",
    "check_snapshot",
    "Classifier",
    "classify",
    "classify_member",
    "AnalysisConfig",
    "ConfigError",
    "load_config",
    "Diagnostic",
    "DiagnosticSeverity",
    "SuppressionManager",
    "CycleGuard",
    "PathScopedGuard",
    "make_guard",
    "DescriptorProvider",
    "Kind",
    "Member",
    "SymbolResolver",
    "TypeDescriptor",
    "resolve_kind",
    "FieldSymbol",
    "MethodSymbol",
    "ParameterSymbol",
    "SpecialType",
    "SymbolTable",
    "TypeKind",
    "TypeSymbol",
    "Outcome",
    "Verdict",
]
