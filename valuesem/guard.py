"""
valuesem/guard.py
═════════════════

Cycle guards bounding recursion over possibly-cyclic type graphs.

Some front ends build complete symbol graphs even for declarations they
reject, e.g. two structs that contain each other.  The classifier must
terminate on those, so every expansion of a type is recorded here and a
type is never expanded twice within one guard's lifetime.

Two policies:

``CycleGuard`` (call-scoped, the default)
    Identities stay recorded for the whole top-level call.  A type seen
    a second time anywhere in the same call tree counts as Ok.  Sound
    as long as a type's verdict does not depend on the path used to
    reach it.

``PathScopedGuard``
    Identities are released when the classifier leaves the type, so
    only true back-edges (a type reached from inside itself) are cut.
    Costs one removal per recursive call.

A guard belongs to exactly one top-level classification; never share
one between sibling top-level calls.
"""

from __future__ import annotations

from typing import Hashable, Set


class CycleGuard:
    """Call-scoped identity set."""

    def __init__(self) -> None:
        self._seen: Set[Hashable] = set()

    def add(self, identity: Hashable) -> bool:
        """Record *identity*; ``True`` if it was not yet present."""
        if identity in self._seen:
            return False
        self._seen.add(identity)
        return True

    def release(self, identity: Hashable) -> None:
        """Called when the classifier leaves *identity*; a no-op here."""

    def __contains__(self, identity: Hashable) -> bool:
        return identity in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {len(self._seen)} visited>"


class PathScopedGuard(CycleGuard):
    """Only identities on the current descent path are recorded."""

    def release(self, identity: Hashable) -> None:
        self._seen.discard(identity)


def make_guard(policy: str = "call") -> CycleGuard:
    if policy == "path":
        return PathScopedGuard()
    if policy == "call":
        return CycleGuard()
    raise ValueError(f"unknown guard policy {policy!r}")


__all__ = ["CycleGuard", "PathScopedGuard", "make_guard"]
