# tdl/errors.py
"""
Error types for the Type Declaration Language front end.

Hierarchy::

    TdlError (base)
    ├── TdlSyntaxError     - source text does not match the grammar
    └── TdlSemanticError   - unknown/ambiguous names, duplicates, arity

Every error carries an optional source position and formats as
``file:line:column: message`` so it can be shown next to checker
diagnostics.
"""

from __future__ import annotations

from typing import Optional


class TdlError(Exception):
    """Base class for all front-end errors."""

    kind = "error"

    def __init__(
        self,
        message: str,
        filename: str = "<input>",
        line: int = 0,
        column: int = 0,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column
        self.hint = hint

    @property
    def location(self) -> str:
        if self.line:
            return f"{self.filename}:{self.line}:{self.column}"
        return self.filename

    def __str__(self) -> str:
        text = f"{self.location}: {self.kind}: {self.message}"
        if self.hint:
            text += f" (hint: {self.hint})"
        return text


class TdlSyntaxError(TdlError):
    kind = "syntax error"


class TdlSemanticError(TdlError):
    kind = "semantic error"


__all__ = ["TdlError", "TdlSyntaxError", "TdlSemanticError"]
