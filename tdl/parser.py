# tdl/parser.py
"""
Parser for the Type Declaration Language (TDL).

TDL is a small, C#-flavoured notation for describing a snapshot of a
type system: just enough declarations for the value-semantics engine to
reason about, and nothing executable::

    // comments are C-style
    struct StructA { int I; int[] Numbers; }
    readonly record struct A(int I, string S, DateTime Dt, StructA Sa);
    class Money { override bool Equals(object obj); }
    record class Box<T>(T Value) where T : IMarker;
    [InlineArray(4)] struct Buf { byte _element0; }
    [Flags] enum Perms : byte { Read, Write }

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from parsimonious.exceptions import IncompleteParseError, ParseError
from parsimonious.expressions import Literal, Regex
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from tdl.ast_nodes import (
    ArrayTypeExpr,
    FieldDecl,
    MethodDecl,
    NamedTypeExpr,
    NullableTypeExpr,
    Param,
    Pos,
    TupleTypeExpr,
    TypeDecl,
    Unit,
)
from tdl.errors import TdlError, TdlSyntaxError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1: GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

TDL_GRAMMAR = Grammar(r'''
    unit            = _ declaration*

    declaration     = enum_decl / delegate_decl / type_decl

    # ─────────────────────────────────────────────────────────────
    # Type declarations
    # ─────────────────────────────────────────────────────────────

    type_decl       = attributes decl_modifiers type_keyword _ qualified_name _
                      type_params _ primary_params _ base_clause _
                      where_clause* type_body _
    type_keyword    = ~r"record\s+struct\b" / ~r"record\s+class\b"
                    / ~r"(record|struct|class|interface)\b"

    enum_decl       = attributes decl_modifiers ~r"enum\b" _ qualified_name _
                      base_clause _ enum_body _
    enum_body       = enum_block / semicolon
    enum_block      = "{" ~r"[^}]*" "}" _ semicolon?

    delegate_decl   = attributes decl_modifiers ~r"delegate\b" _ delegate_sig _
                      primary_params _ semicolon _
    delegate_sig    = returning_sig / qualified_name
    returning_sig   = type_expr _ qualified_name

    attributes      = attribute*
    attribute       = "[" _ qualified_name _ attribute_args? _ "]" _
    attribute_args  = ~r"\([^)]*\)"

    decl_modifiers  = decl_modifier*
    decl_modifier   = ~r"(readonly|public|internal|sealed|partial|abstract|static)\b" _

    type_params     = type_param_list?
    type_param_list = "<" _ identifier more_names _ ">"
    more_names      = (_ "," _ identifier)*

    primary_params  = param_block?
    param_block     = "(" _ param_list? _ ")"
    param_list      = param (_ "," _ param)*
    param           = type_expr _ identifier

    base_clause     = base_list?
    base_list       = ":" _ type_list
    where_clause    = ~r"where\b" _ identifier _ ":" _ type_list _

    type_body       = member_block / semicolon
    member_block    = "{" _ member* "}" _ semicolon?
    semicolon       = ";"

    # ─────────────────────────────────────────────────────────────
    # Members
    # ─────────────────────────────────────────────────────────────

    member          = property_decl / method_decl / field_decl
    property_decl   = member_modifiers ~r"property\b" _ type_expr _ identifier _ semicolon _
    method_decl     = member_modifiers type_expr _ identifier _ param_block _ semicolon _
    field_decl      = member_modifiers type_expr _ identifier _ semicolon _
    member_modifiers = member_modifier*
    member_modifier = ~r"(static|override|abstract|virtual|public|private|protected|internal|readonly|sealed|new)\b" _

    # ─────────────────────────────────────────────────────────────
    # Type expressions
    # ─────────────────────────────────────────────────────────────

    type_expr       = base_type type_suffix*
    type_suffix     = "[]" / "?"
    base_type       = tuple_type / generic_type / qualified_name
    tuple_type      = "(" _ tuple_element (_ "," _ tuple_element)+ _ ")"
    tuple_element   = type_expr element_name
    element_name    = (_ identifier)?
    generic_type    = qualified_name _ "<" _ type_list _ ">"
    type_list       = type_expr (_ "," _ type_expr)*

    qualified_name  = identifier ("." identifier)*
    identifier      = !keyword ~r"[A-Za-z_][A-Za-z0-9_]*"
    keyword         = ~r"(record|struct|class|interface|enum|delegate|where|property|static|override|abstract|virtual|public|private|protected|internal|readonly|sealed|partial|new)\b"

    # ─────────────────────────────────────────────────────────────
    # Whitespace & comments
    # ─────────────────────────────────────────────────────────────

    _               = meaningless*
    meaningless     = ~r"\s+" / ~r"//[^\n]*" / ~r"/\*.*?\*/"s
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2: VISITOR (parse tree → AST)
# ═══════════════════════════════════════════════════════════════════

class TDLASTBuilder(NodeVisitor):
    """Transforms the Parsimonious parse tree into ``tdl.ast_nodes``."""

    unwrapped_exceptions = (TdlError,)

    def __init__(self, text: str, filename: str = "<input>") -> None:
        self._text = text
        self._filename = filename

    def _pos(self, offset: int) -> Pos:
        line = self._text.count("\n", 0, offset) + 1
        column = offset - (self._text.rfind("\n", 0, offset) + 1) + 1
        return Pos(line, column)

    def generic_visit(self, node: Node, visited_children: List[Any]) -> Any:
        """Terminals yield their node; everything else its child list."""
        if isinstance(node.expr, (Literal, Regex)):
            return node
        return visited_children

    # ── unit & declarations ──────────────────────────────────────

    def visit_unit(self, node, visited_children):
        _, declarations = visited_children
        return Unit(declarations=list(declarations), filename=self._filename)

    def visit_declaration(self, node, visited_children):
        return visited_children[0]

    def visit_type_decl(self, node, visited_children):
        (attrs, mods, keyword, _, name, _, tparams, _, pparams, _,
         bases, _, wheres, members, _) = visited_children
        return TypeDecl(
            keyword=keyword,
            name=name,
            modifiers=mods,
            attributes=attrs,
            type_params=tparams,
            primary_params=pparams,
            bases=bases,
            constraints={n: types for n, types in wheres},
            members=members,
            pos=self._pos(node.children[4].start),
        )

    def visit_type_keyword(self, node, visited_children):
        return " ".join(node.text.split())

    def visit_enum_decl(self, node, visited_children):
        attrs, mods, _, _, name, _, bases, _, _, _ = visited_children
        return TypeDecl(
            keyword="enum",
            name=name,
            modifiers=mods,
            attributes=attrs,
            bases=bases,
            pos=self._pos(node.children[4].start),
        )

    def visit_enum_body(self, node, visited_children):
        return []

    def visit_delegate_decl(self, node, visited_children):
        attrs, mods, _, _, name, _, pparams, _, _, _ = visited_children
        return TypeDecl(
            keyword="delegate",
            name=name,
            modifiers=mods,
            attributes=attrs,
            primary_params=pparams,
            pos=self._pos(node.children[4].start),
        )

    def visit_delegate_sig(self, node, visited_children):
        return visited_children[0]

    def visit_returning_sig(self, node, visited_children):
        _, _, name = visited_children
        return name

    # ── declaration pieces ───────────────────────────────────────

    def visit_attributes(self, node, visited_children):
        return list(visited_children)

    def visit_attribute(self, node, visited_children):
        return visited_children[2]

    def visit_decl_modifiers(self, node, visited_children):
        return list(visited_children)

    def visit_decl_modifier(self, node, visited_children):
        return node.children[0].text

    def visit_type_params(self, node, visited_children):
        return visited_children[0] if visited_children else []

    def visit_type_param_list(self, node, visited_children):
        _, _, first, rest, _, _ = visited_children
        return [first] + rest

    def visit_more_names(self, node, visited_children):
        return [item[3] for item in visited_children]

    def visit_primary_params(self, node, visited_children):
        return visited_children[0] if visited_children else None

    def visit_param_block(self, node, visited_children):
        _, _, params, _, _ = visited_children
        return params[0] if params else []

    def visit_param_list(self, node, visited_children):
        first, rest = visited_children
        return [first] + [item[3] for item in rest]

    def visit_param(self, node, visited_children):
        type_expr, _, name = visited_children
        return Param(type=type_expr, name=name, pos=self._pos(node.start))

    def visit_base_clause(self, node, visited_children):
        return visited_children[0] if visited_children else []

    def visit_base_list(self, node, visited_children):
        return visited_children[2]

    def visit_where_clause(self, node, visited_children):
        _, _, name, _, _, _, types, _ = visited_children
        return (name, types)

    def visit_type_body(self, node, visited_children):
        return visited_children[0]

    def visit_member_block(self, node, visited_children):
        return list(visited_children[2])

    def visit_semicolon(self, node, visited_children):
        return []

    # ── members ──────────────────────────────────────────────────

    def visit_member(self, node, visited_children):
        return visited_children[0]

    def visit_property_decl(self, node, visited_children):
        mods, _, _, type_expr, _, name, _, _, _ = visited_children
        return FieldDecl(type=type_expr, name=name, modifiers=mods,
                         is_property=True, pos=self._pos(node.start))

    def visit_method_decl(self, node, visited_children):
        mods, rtype, _, name, _, params, _, _, _ = visited_children
        return MethodDecl(return_type=rtype, name=name, params=params,
                          modifiers=mods, pos=self._pos(node.start))

    def visit_field_decl(self, node, visited_children):
        mods, type_expr, _, name, _, _, _ = visited_children
        return FieldDecl(type=type_expr, name=name, modifiers=mods,
                         pos=self._pos(node.start))

    def visit_member_modifiers(self, node, visited_children):
        return list(visited_children)

    def visit_member_modifier(self, node, visited_children):
        return node.children[0].text

    # ── type expressions ─────────────────────────────────────────

    def visit_type_expr(self, node, visited_children):
        base, suffixes = visited_children
        result = base
        for suffix in suffixes:
            if suffix == "[]":
                result = ArrayTypeExpr(result)
            else:
                result = NullableTypeExpr(result)
        return result

    def visit_type_suffix(self, node, visited_children):
        return node.text

    def visit_base_type(self, node, visited_children):
        inner = visited_children[0]
        if isinstance(inner, str):
            return NamedTypeExpr(name=inner, pos=self._pos(node.start))
        return inner

    def visit_tuple_type(self, node, visited_children):
        _, _, first, rest, _, _ = visited_children
        return TupleTypeExpr(elements=[first] + [item[3] for item in rest])

    def visit_tuple_element(self, node, visited_children):
        type_expr, name = visited_children
        return (type_expr, name)

    def visit_element_name(self, node, visited_children):
        return visited_children[0][1] if visited_children else None

    def visit_generic_type(self, node, visited_children):
        name, _, _, _, args, _, _ = visited_children
        return NamedTypeExpr(name=name, args=args, pos=self._pos(node.start))

    def visit_type_list(self, node, visited_children):
        first, rest = visited_children
        return [first] + [item[3] for item in rest]

    def visit_qualified_name(self, node, visited_children):
        return node.text

    def visit_identifier(self, node, visited_children):
        return node.text


# ═══════════════════════════════════════════════════════════════════
#  PART 3: PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def parse(text: str, filename: str = "<input>") -> Unit:
    """Parse TDL source into a ``Unit``; raises ``TdlSyntaxError``."""
    try:
        tree = TDL_GRAMMAR.parse(text)
    except IncompleteParseError as exc:
        raise TdlSyntaxError(
            f"unexpected input {_excerpt(exc.text, exc.pos)!r}",
            filename, exc.line(), exc.column(),
        ) from exc
    except ParseError as exc:
        raise TdlSyntaxError(
            f"cannot parse {_excerpt(exc.text, exc.pos)!r}"
            + (f" (in rule '{exc.expr.name}')" if exc.expr and exc.expr.name else ""),
            filename, exc.line(), exc.column(),
        ) from exc

    unit = TDLASTBuilder(text, filename).visit(tree)
    logger.debug("parsed %d declaration(s) from %s",
                 len(unit.declarations), filename)
    return unit


def _excerpt(text: str, pos: int, width: int = 20) -> str:
    snippet = text[pos:pos + width]
    return snippet.split("\n", 1)[0] or "<end of input>"


__all__ = ["TDL_GRAMMAR", "TDLASTBuilder", "parse"]
