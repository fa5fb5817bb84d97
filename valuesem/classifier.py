"""
valuesem/classifier.py
══════════════════════

The value-semantics decision procedure.

Given one member type of a derived-equality composite, decide whether
every type reachable through it compares by content.  Rules are applied
in order, first match wins:

   1. nullable value wrapper  → classify the underlying type
                                (nothing underneath → Ok)
   2. already in the guard    → Ok (cycle break); else record it
   3. object / dynamic        → Failed
   4. primitive / enum        → Ok
   5. inline buffer overlay   → Failed
   6. known non-value wrapper → Failed, even with its own Equals(T)
   7. not a tuple:
        own Equals(T)                 → Ok
        own override Equals(object)   → Ok
        derived-equality composite    → Ok (checked as its own unit)
        reference composite           → Failed
   8. member list: tuple elements, or fields/properties of a value
      composite; nothing for anything else
   9. members: classify each in order with the same guard; first
      non-Ok child → NestedFailed(child display name); all Ok → Ok
  10. no member list          → Failed

Termination does not rely on call depth: the guard bounds the number of
expansions by the number of distinct reachable types.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from valuesem.config import AnalysisConfig
from valuesem.guard import CycleGuard, make_guard
from valuesem.kinds import (
    DescriptorProvider,
    Kind,
    Member,
    SymbolResolver,
    TypeDescriptor,
)
from valuesem.verdict import Verdict

logger = logging.getLogger(__name__)


class Classifier:
    """
    Classify member types through a ``DescriptorProvider``.

    Holds no state across calls; each top-level call gets its own guard,
    so one instance may serve concurrent callers.
    """

    def __init__(
        self,
        provider: Optional[DescriptorProvider] = None,
        config: Optional[AnalysisConfig] = None,
    ) -> None:
        self.config = config or AnalysisConfig()
        self.provider = provider or SymbolResolver(self.config)

    def new_guard(self) -> CycleGuard:
        return make_guard(self.config.guard_policy)

    def classify_member(self, type_ref: Any) -> Verdict:
        """Top-level entry: classify *type_ref* under a fresh guard."""
        return self.classify(type_ref, self.new_guard())

    def classify(
        self, type_ref: Any, guard: Optional[CycleGuard] = None,
    ) -> Verdict:
        if guard is None:
            guard = self.new_guard()
        if type_ref is None:
            return Verdict.OK

        desc = self.provider.describe(type_ref)
        if desc.is_nullable_value_wrapper:
            inner = desc.unwrap()
            if inner is None:
                return Verdict.OK
            desc = self.provider.describe(inner)

        if not guard.add(desc.identity):
            logger.debug("cycle: %s already visited", desc.display_name)
            return Verdict.OK
        try:
            verdict = self._classify_described(desc, guard)
        finally:
            guard.release(desc.identity)

        logger.debug("%s → %s", desc.display_name, verdict)
        return verdict

    def _classify_described(
        self, desc: TypeDescriptor, guard: CycleGuard,
    ) -> Verdict:
        kind = desc.kind

        if kind is Kind.UNTYPED_OR_UNIVERSAL:
            return Verdict.FAILED
        if kind in (Kind.PRIMITIVE, Kind.ENUM_LIKE):
            return Verdict.OK
        if kind is Kind.FIXED_SIZE_BUFFER:
            return Verdict.FAILED
        if kind is Kind.KNOWN_NON_VALUE_WRAPPER:
            return Verdict.FAILED

        if kind is not Kind.TUPLE:
            if desc.has_own_value_equals:
                return Verdict.OK
            if desc.has_own_identity_equals_override:
                return Verdict.OK
            if kind is Kind.DERIVED_EQUALITY:
                return Verdict.OK
            if kind is Kind.REFERENCE_COMPOSITE:
                return Verdict.FAILED

        members: Optional[Sequence[Member]] = None
        if kind is Kind.TUPLE:
            members = desc.tuple_elements()
        elif kind is Kind.VALUE_COMPOSITE:
            members = desc.members()

        if members is None:
            return Verdict.FAILED

        for member in members:
            result = self.classify(member.type, guard)
            if not result.is_ok:
                child_name = self.provider.describe(member.type).display_name
                return Verdict.nested_failed(child_name)
        return Verdict.OK


_DEFAULT = Classifier()


def classify(type_ref: Any, guard: Optional[CycleGuard] = None) -> Verdict:
    """Classify with the default ``SymbolResolver`` and configuration."""
    return _DEFAULT.classify(type_ref, guard)


def classify_member(type_ref: Any) -> Verdict:
    return _DEFAULT.classify_member(type_ref)


__all__ = ["Classifier", "classify", "classify_member"]
