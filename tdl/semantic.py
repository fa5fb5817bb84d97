# tdl/semantic.py
"""
Semantic pass: TDL syntax tree → ``valuesem.symbols`` snapshot.

Works in three passes over the declarations of a unit:

  1. *declare*  - one ``TypeSymbol`` per declaration, so that types may
                  reference each other regardless of order (cycles
                  included);
  2. *populate* - resolve member, parameter and constraint types;
  3. *expand*   - fill in the members of every generic instance that
                  pass 2 created, substituting type arguments for type
                  parameters.  Expansion is bounded so a generic type
                  that keeps growing its own arguments is reported
                  instead of looping.

Built-in keyword types (``int``, ``string``...) are one shared symbol
per builder, so identity-based cycle detection sees them as one type.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Mapping, Optional, Tuple

from tdl.ast_nodes import (
    ArrayTypeExpr,
    FieldDecl,
    MethodDecl,
    NamedTypeExpr,
    NullableTypeExpr,
    Pos,
    TupleTypeExpr,
    TypeDecl,
    TypeExpr,
    Unit,
)
from tdl.errors import TdlSemanticError
from valuesem.symbols import (
    BUILTIN_KEYWORDS,
    AmbiguousName,
    FieldSymbol,
    MethodSymbol,
    ParameterSymbol,
    SourceSpan,
    SymbolTable,
    TypeKind,
    TypeSymbol,
    array_of,
    builtin,
    nullable_of,
    tuple_of,
    type_parameter,
)

logger = logging.getLogger(__name__)

MAX_INSTANTIATIONS = 2000

TYPE_KINDS: Dict[str, TypeKind] = {
    "class": TypeKind.CLASS,
    "record": TypeKind.CLASS,
    "record class": TypeKind.CLASS,
    "struct": TypeKind.STRUCT,
    "record struct": TypeKind.STRUCT,
    "interface": TypeKind.INTERFACE,
    "enum": TypeKind.ENUM,
    "delegate": TypeKind.DELEGATE,
}

# Framework spellings of keyword types.
KEYWORD_ALIASES: Dict[str, str] = {
    "System.Object": "object",
    "System.String": "string",
    "System.Boolean": "bool",
    "System.Char": "char",
    "System.Byte": "byte",
    "System.SByte": "sbyte",
    "System.Int16": "short",
    "System.UInt16": "ushort",
    "System.Int32": "int",
    "System.UInt32": "uint",
    "System.Int64": "long",
    "System.UInt64": "ulong",
    "System.Single": "float",
    "System.Double": "double",
}

# Keywords that name a declared (prelude) type rather than a builtin.
TYPE_ALIASES: Dict[str, str] = {
    "decimal": "System.Decimal",
}


def _split_name(qualified: str) -> Tuple[str, str]:
    namespace, _, name = qualified.rpartition(".")
    return namespace, name


class SymbolBuilder:
    """
    Builds symbols for one or more units into a shared ``SymbolTable``.

    The same builder is used for the prelude and the user unit so that
    both share builtins and generic instances.
    """

    def __init__(self, table: Optional[SymbolTable] = None) -> None:
        self.table = table if table is not None else SymbolTable()
        self._builtins: Dict[str, TypeSymbol] = {}
        # key → (instance, args); args are held so their ids stay unique
        self._instances: Dict[tuple, Tuple[TypeSymbol, List[TypeSymbol]]] = {}
        self._definition_of: Dict[int, TypeSymbol] = {}
        self._pending: Deque[Tuple[TypeSymbol, TypeSymbol]] = deque()
        self._filename = "<input>"

    # ── helpers ──────────────────────────────────────────────────────

    def _span(self, pos: Pos) -> SourceSpan:
        return SourceSpan(self._filename, pos.line, pos.column)

    def _error(self, message: str, pos: Optional[Pos] = None,
               hint: Optional[str] = None) -> TdlSemanticError:
        pos = pos or Pos()
        return TdlSemanticError(message, self._filename, pos.line,
                                pos.column, hint=hint)

    def builtin(self, keyword: str) -> TypeSymbol:
        found = self._builtins.get(keyword)
        if found is None:
            found = self._builtins[keyword] = builtin(keyword)
        return found

    # ── entry point ──────────────────────────────────────────────────

    def build(self, unit: Unit) -> SymbolTable:
        self._filename = unit.filename
        declared = [(decl, self._declare(decl)) for decl in unit.declarations]
        for decl, symbol in declared:
            self._populate(decl, symbol)
        self._expand_pending()
        logger.debug("%s: %d type(s) declared, %d generic instance(s)",
                     unit.filename, len(declared), len(self._instances))
        return self.table

    # ── pass 1: declare ──────────────────────────────────────────────

    def _declare(self, decl: TypeDecl) -> TypeSymbol:
        namespace, name = _split_name(decl.name)
        if name in BUILTIN_KEYWORDS:
            raise self._error(f"'{name}' is a built-in type", decl.pos)

        params = [type_parameter(p) for p in decl.type_params]
        if len({p.name for p in params}) != len(params):
            raise self._error(
                f"duplicate type parameter in '{decl.name}'", decl.pos)

        symbol = TypeSymbol(
            name=name,
            namespace=namespace,
            type_kind=TYPE_KINDS[decl.keyword],
            is_record=decl.is_record,
            is_readonly="readonly" in decl.modifiers,
            attributes=list(decl.attributes),
            type_parameters=params,
            location=self._span(decl.pos),
        )
        if params:
            symbol.original_definition = (
                f"{symbol.full_name}<{', '.join(p.name for p in params)}>")
        else:
            symbol.original_definition = symbol.full_name

        try:
            self.table.add(symbol)
        except KeyError:
            raise self._error(
                f"type '{symbol.full_name}' is declared more than once",
                decl.pos) from None
        return symbol

    # ── pass 2: populate ─────────────────────────────────────────────

    def _populate(self, decl: TypeDecl, symbol: TypeSymbol) -> None:
        scope = {p.name: p for p in symbol.type_parameters}

        for pname, exprs in decl.constraints.items():
            param = scope.get(pname)
            if param is None:
                raise self._error(
                    f"'{pname}' is not a type parameter of '{decl.name}'",
                    decl.pos)
            param.constraints.extend(self.resolve(e, scope) for e in exprs)

        for param in decl.primary_params or ():
            symbol.primary_parameters.append(ParameterSymbol(
                name=param.name,
                type=self.resolve(param.type, scope),
                location=self._span(param.pos),
            ))

        seen = {p.name for p in symbol.primary_parameters}
        for member in decl.members:
            if isinstance(member, FieldDecl):
                if member.name in seen:
                    raise self._error(
                        f"'{decl.name}' already has a member named "
                        f"'{member.name}'", member.pos)
                seen.add(member.name)
                symbol.add_member(FieldSymbol(
                    name=member.name,
                    type=self.resolve(member.type, scope),
                    is_static="static" in member.modifiers,
                    is_property=member.is_property,
                    location=self._span(member.pos),
                ))
            elif isinstance(member, MethodDecl):
                symbol.add_member(self._method(member, symbol, scope))

    def _method(self, decl: MethodDecl, owner: TypeSymbol,
                scope: Mapping[str, TypeSymbol]) -> MethodSymbol:
        return MethodSymbol(
            name=decl.name,
            parameters=[
                ParameterSymbol(p.name, self.resolve(p.type, scope),
                                self._span(p.pos))
                for p in decl.params
            ],
            return_type=self.resolve(decl.return_type, scope),
            is_static="static" in decl.modifiers,
            is_override="override" in decl.modifiers,
            is_abstract=self._is_abstract(decl, owner),
            location=self._span(decl.pos),
        )

    @staticmethod
    def _is_abstract(decl: MethodDecl, owner: TypeSymbol) -> bool:
        # Instance methods declared on an interface have no body.
        if "abstract" in decl.modifiers:
            return True
        return (owner.type_kind is TypeKind.INTERFACE
                and "static" not in decl.modifiers)

    # ── type expressions ─────────────────────────────────────────────

    def resolve(self, expr: TypeExpr,
                scope: Optional[Mapping[str, TypeSymbol]] = None,
                ) -> Optional[TypeSymbol]:
        """Resolve a type expression; ``void`` resolves to ``None``."""
        scope = scope or {}
        if isinstance(expr, ArrayTypeExpr):
            return array_of(self._require(expr.element, scope))
        if isinstance(expr, NullableTypeExpr):
            return nullable_of(self._require(expr.inner, scope))
        if isinstance(expr, TupleTypeExpr):
            return tuple_of([
                (name, self._require(texpr, scope))
                for texpr, name in expr.elements
            ])
        return self._resolve_named(expr, scope)

    def _require(self, expr: TypeExpr,
                 scope: Mapping[str, TypeSymbol]) -> TypeSymbol:
        resolved = self.resolve(expr, scope)
        if resolved is None:
            raise self._error(f"'{expr}' is not a usable type here")
        return resolved

    def _resolve_named(self, expr: NamedTypeExpr,
                       scope: Mapping[str, TypeSymbol]) -> Optional[TypeSymbol]:
        name = expr.name
        if name == "void" and not expr.args:
            return None
        if name in scope and not expr.args:
            return scope[name]

        keyword = KEYWORD_ALIASES.get(name, name)
        if keyword in BUILTIN_KEYWORDS:
            if expr.args:
                raise self._error(f"'{name}' is not generic", expr.pos)
            return self.builtin(keyword)

        target = TYPE_ALIASES.get(name, name)
        try:
            definition = self.table.lookup(target)
        except AmbiguousName as exc:
            raise self._error(str(exc), expr.pos,
                              hint="use the namespace-qualified name") from None
        if definition is None:
            raise self._error(f"unknown type '{name}'", expr.pos)

        arity = len(definition.type_parameters)
        if len(expr.args) != arity:
            raise self._error(
                f"'{definition.full_name}' takes {arity} type argument(s), "
                f"got {len(expr.args)}", expr.pos)
        if not arity:
            return definition
        args = [self._require(a, scope) for a in expr.args]
        return self.instantiate(definition, args, expr.pos)

    # ── pass 3: generic instances ────────────────────────────────────

    def instantiate(self, definition: TypeSymbol, args: List[TypeSymbol],
                    pos: Optional[Pos] = None) -> TypeSymbol:
        """``definition<args>``; the same arguments give the same instance."""
        if all(a is p for a, p in zip(args, definition.type_parameters)):
            return definition

        key = (id(definition),) + tuple(id(a) for a in args)
        hit = self._instances.get(key)
        if hit is not None:
            return hit[0]
        if len(self._instances) >= MAX_INSTANTIATIONS:
            raise self._error(
                f"too many generic instantiations while expanding "
                f"'{definition.full_name}'", pos,
                hint="a generic type may be growing its own arguments")

        instance = TypeSymbol(
            name=definition.name,
            namespace=definition.namespace,
            type_kind=definition.type_kind,
            is_record=definition.is_record,
            is_readonly=definition.is_readonly,
            attributes=list(definition.attributes),
            type_arguments=list(args),
            original_definition=definition.original_definition,
            location=definition.location,
        )
        self._instances[key] = (instance, list(args))
        self._definition_of[id(instance)] = definition
        self._pending.append((instance, definition))
        return instance

    def _expand_pending(self) -> None:
        while self._pending:
            instance, definition = self._pending.popleft()
            mapping = {
                id(p): a for p, a in
                zip(definition.type_parameters, instance.type_arguments)
            }
            for param in definition.primary_parameters:
                instance.primary_parameters.append(ParameterSymbol(
                    param.name, self.substitute(param.type, mapping),
                    param.location))
            for member in definition.members:
                if isinstance(member, FieldSymbol):
                    instance.add_member(FieldSymbol(
                        name=member.name,
                        type=self.substitute(member.type, mapping),
                        is_static=member.is_static,
                        is_property=member.is_property,
                        location=member.location,
                    ))
                elif isinstance(member, MethodSymbol):
                    instance.add_member(MethodSymbol(
                        name=member.name,
                        parameters=[
                            ParameterSymbol(
                                p.name, self.substitute(p.type, mapping),
                                p.location)
                            for p in member.parameters
                        ],
                        return_type=self.substitute(member.return_type,
                                                    mapping),
                        is_static=member.is_static,
                        is_override=member.is_override,
                        is_abstract=member.is_abstract,
                        location=member.location,
                    ))

    def substitute(self, symbol: Optional[TypeSymbol],
                   mapping: Mapping[int, TypeSymbol]) -> Optional[TypeSymbol]:
        """Replace type parameters in *symbol* according to *mapping*."""
        if symbol is None:
            return None
        if id(symbol) in mapping:
            return mapping[id(symbol)]

        if symbol.type_kind == TypeKind.ARRAY and symbol.element_type:
            element = self.substitute(symbol.element_type, mapping)
            if element is symbol.element_type:
                return symbol
            return array_of(element)

        if symbol.is_nullable_value_wrapper and symbol.type_arguments:
            inner = self.substitute(symbol.type_arguments[0], mapping)
            if inner is symbol.type_arguments[0]:
                return symbol
            return nullable_of(inner)

        if symbol.is_tuple:
            elements = [(e.name or None, self.substitute(e.type, mapping))
                        for e in symbol.tuple_elements]
            if all(new is old.type for (_, new), old
                   in zip(elements, symbol.tuple_elements)):
                return symbol
            return tuple_of(elements)

        definition = self._definition_of.get(id(symbol))
        if definition is not None:
            args = [self.substitute(a, mapping) for a in symbol.type_arguments]
            if all(new is old for new, old in zip(args, symbol.type_arguments)):
                return symbol
            return self.instantiate(definition, args)

        if symbol.type_parameters:
            args = [self.substitute(p, mapping) for p in symbol.type_parameters]
            return self.instantiate(symbol, args)

        return symbol


__all__ = [
    "MAX_INSTANTIATIONS",
    "SymbolBuilder",
    "TYPE_KINDS",
]
