"""Three-way classification outcome handed back to the driver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional


class Outcome(Enum):
    OK = "ok"
    FAILED = "failed"
    NESTED_FAILED = "nested-failed"


@dataclass(frozen=True)
class Verdict:
    """
    ``OK``, ``FAILED`` (the member itself lacks value semantics) or
    ``NESTED_FAILED`` carrying the display name of the *immediate* failing
    child type, which is not necessarily the deepest cause.
    """
    outcome: Outcome
    inner_type_name: Optional[str] = None

    OK: ClassVar[Verdict]
    FAILED: ClassVar[Verdict]

    @classmethod
    def nested_failed(cls, inner_type_name: str) -> Verdict:
        return cls(Outcome.NESTED_FAILED, inner_type_name)

    @property
    def is_ok(self) -> bool:
        return self.outcome is Outcome.OK

    def __str__(self) -> str:
        if self.outcome is Outcome.NESTED_FAILED:
            return f"{self.outcome.value}({self.inner_type_name})"
        return self.outcome.value


Verdict.OK = Verdict(Outcome.OK)
Verdict.FAILED = Verdict(Outcome.FAILED)


__all__ = ["Outcome", "Verdict"]
