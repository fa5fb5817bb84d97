# tests/test_guard.py
"""Tests for the cycle guards."""

import pytest

from valuesem.guard import CycleGuard, PathScopedGuard, make_guard


class TestCycleGuard:

    def test_add_reports_newness(self):
        guard = CycleGuard()
        assert guard.add("A") is True
        assert guard.add("A") is False
        assert "A" in guard
        assert len(guard) == 1

    def test_release_keeps_identity(self):
        guard = CycleGuard()
        guard.add("A")
        guard.release("A")
        assert "A" in guard

    def test_identity_not_equality(self):
        class Same:
            def __eq__(self, other):
                return True
            __hash__ = object.__hash__

        guard = CycleGuard()
        assert guard.add(Same())
        assert guard.add(Same())

    def test_repr(self):
        guard = CycleGuard()
        guard.add(1)
        assert repr(guard) == "<CycleGuard 1 visited>"


class TestPathScopedGuard:

    def test_release_forgets(self):
        guard = PathScopedGuard()
        guard.add("A")
        guard.release("A")
        assert "A" not in guard
        assert guard.add("A") is True

    def test_release_unknown_is_harmless(self):
        PathScopedGuard().release("nope")


class TestMakeGuard:

    def test_policies(self):
        assert type(make_guard("call")) is CycleGuard
        assert type(make_guard("path")) is PathScopedGuard
        assert type(make_guard()) is CycleGuard

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="unknown guard policy"):
            make_guard("global")
