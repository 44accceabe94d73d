"""Extractors that enumerate every matching declaration."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional

from ..errors import DuplicateValueError
from ..models import FilterConfig
from ..query.base import Declaration, QuerySession
from .base import Cardinality, DeclarationExtractor, join_rows, wrap_output
from .formatting import format_name, format_row, parse_int_literal, quote, render_tokens


class EnumTable(DeclarationExtractor):
    """Rows of ``name = value`` for enum constants or numeric macros.

    Macro bodies that are not integer literals are skipped unless ``-R`` asks
    for the raw body text. With ``-R`` every macro body is emitted verbatim.
    """

    name = "enum_table"
    cardinality = Cardinality.ENUMERATE_ALL
    default_kind = "EnumConstantDecl"
    allowed_kinds = frozenset({"EnumConstantDecl", "MacroDefinition"})

    def render(self, decl: Declaration, config: FilterConfig) -> str:
        if decl.kind == "EnumConstantDecl":
            return format_row(decl.name, decl.enum_value, config)
        body = render_tokens(decl.tokens(), compact=True)
        if config.raw:
            return format_row(decl.name, body, config)
        value = parse_int_literal(body)
        if value is None:
            return ""
        return format_row(decl.name, value, config)


class DeclList(DeclarationExtractor):
    """Re-declares typedefs and function prototypes, or lists other names.

    ``-x`` also excludes typedefs whose underlying type, and functions whose
    result type, is one of the excluded names.
    """

    name = "decl_list"
    cardinality = Cardinality.ENUMERATE_ALL
    default_kind = "TypedefDecl"
    allowed_kinds = frozenset(
        {"TypedefDecl", "FunctionDecl", "StructDecl", "UnionDecl", "EnumDecl", "VarDecl", "MacroDefinition"}
    )

    def render(self, decl: Declaration, config: FilterConfig) -> str:
        name = format_name(decl.name, config)
        if decl.kind == "TypedefDecl":
            underlying = decl.underlying_type or ""
            if underlying in config.exclude_names:
                return ""
            return f"typedef {underlying} {name};"
        if decl.kind == "FunctionDecl":
            result = decl.result_type or "void"
            if result in config.exclude_names:
                return ""
            arguments = list(decl.argument_types)
            if decl.is_variadic:
                arguments.append("...")
            return f"{result} {name}({', '.join(arguments) or 'void'});"
        return name


class ReverseTable(DeclarationExtractor):
    """Rows of ``[value] = "name"`` mapping enum or numeric macro values back to names.

    Rows follow declaration order. Two declarations sharing a value abort the
    run, since the mapping would be ambiguous. Macros whose body is not an
    integer literal are skipped.
    """

    name = "reverse_table"
    cardinality = Cardinality.ENUMERATE_ALL
    default_kind = "EnumConstantDecl"
    allowed_kinds = frozenset({"EnumConstantDecl", "MacroDefinition"})

    def evaluate(self, session: QuerySession, config: FilterConfig) -> str:
        self.validate(config)
        seen: Dict[int, str] = {}
        rows: List[str] = []
        for decl in self.select(session.declarations(), config):
            value = _numeric_value(decl)
            if value is None:
                continue
            if value in seen:
                raise DuplicateValueError(
                    f"Value {value} not unique: {seen[value]} and {decl.name}"
                )
            seen[value] = decl.name
            rows.append(self.render(decl, config))
        return wrap_output(join_rows(rows, config), config)

    def render(self, decl: Declaration, config: FilterConfig) -> str:
        name = quote(format_name(decl.name, replace(config, quote=False)))
        if config.composite:
            return f"[{_numeric_value(decl)}]={name}"
        return f"[{_numeric_value(decl)}] = {name}"


def _numeric_value(decl: Declaration) -> Optional[int]:
    if decl.kind == "EnumConstantDecl":
        return decl.enum_value
    return parse_int_literal(render_tokens(decl.tokens(), compact=True))


__all__ = ["DeclList", "EnumTable", "ReverseTable"]
