"""Extractors for preprocessor macro definitions."""

from __future__ import annotations

from ..models import FilterConfig
from ..query.base import Declaration
from .base import DeclarationExtractor
from .formatting import format_row, render_tokens


class MacroDef(DeclarationExtractor):
    """Body of the one macro definition matching the filters, tokens joined tightly."""

    name = "macro_def"
    default_kind = "MacroDefinition"
    allowed_kinds = frozenset({"MacroDefinition"})

    def render(self, decl: Declaration, config: FilterConfig) -> str:
        body = render_tokens(decl.tokens(), compact=True)
        if config.composite:
            return format_row(decl.name, body, config)
        return body


__all__ = ["MacroDef"]
