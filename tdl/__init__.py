"""
tdl: Type Declaration Language front end for ``valuesem``
=========================================================

Turns a small C#-like declaration file into a ``valuesem.SymbolTable``
snapshot the record checker can run on.

    >>> from tdl import parse_source
    >>> table = parse_source("struct P { int X; } record class R(P Point);")
    >>> [t.name for t in table.records()]
    ['R']
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from tdl.errors import TdlError, TdlSemanticError, TdlSyntaxError
from tdl.parser import parse
from tdl.prelude import PRELUDE_FILENAME, PRELUDE_SOURCE
from tdl.semantic import SymbolBuilder
from valuesem.symbols import SymbolTable

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def parse_source(
    text: str, filename: str = "<input>", prelude: bool = True,
) -> SymbolTable:
    """
    Parse and resolve TDL *text* into a fresh ``SymbolTable``.

    With *prelude* the framework types from ``tdl.prelude`` are declared
    first; ``SymbolTable.records()`` only ever lists the user's types.
    """
    builder = SymbolBuilder()
    if prelude:
        builder.build(parse(PRELUDE_SOURCE, PRELUDE_FILENAME))
    builder.table.mark_user_start()
    return builder.build(parse(text, filename))


def parse_file(path: Union[str, Path], prelude: bool = True) -> SymbolTable:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TdlError(f"cannot read file: {exc.strerror or exc}",
                       str(path)) from exc
    return parse_source(text, filename=str(path), prelude=prelude)


__all__ = [
    "parse_source",
    "parse_file",
    "TdlError",
    "TdlSyntaxError",
    "TdlSemanticError",
]
