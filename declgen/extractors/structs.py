"""Extractors for struct layout facts."""

from __future__ import annotations

import re
from typing import Optional, Sequence

from ..dialect import select_dialect
from ..errors import BakedValueMismatch, InvalidArgument, MalformedDirective
from ..models import BakedConstant, FilterConfig, PropertySelector
from ..query.base import Declaration, QuerySession
from .base import DeclarationExtractor
from .formatting import format_row, query_property, render_surrogate, render_tokens

_RECORD_KINDS = frozenset({"StructDecl", "UnionDecl"})
_TYPE_KINDS = frozenset({"StructDecl", "UnionDecl", "TypedefDecl"})

_SIZE = PropertySelector(name="size")
_ALIGNMENT = PropertySelector(name="alignment")


def _emit(decl: Declaration, value: object, config: FilterConfig) -> str:
    if config.composite:
        return format_row(decl.name, value, config)
    return str(value)


def _selector(config: FilterConfig) -> PropertySelector:
    if config.property is None:
        raise MalformedDirective("Option -a is required for property extraction")
    return config.property


class SizeOfStruct(DeclarationExtractor):
    """Byte size of the one struct definition matching the filters."""

    name = "sizeof_struct"
    default_kind = "StructDecl"
    allowed_kinds = _TYPE_KINDS
    requires_definition = True

    def render(self, decl: Declaration, config: FilterConfig) -> str:
        return _emit(decl, query_property(decl, _SIZE), config)


class StructProperty(DeclarationExtractor):
    """Size, alignment or member offset selected with ``-a``."""

    name = "struct_property"
    default_kind = "StructDecl"
    allowed_kinds = _TYPE_KINDS
    requires_definition = True
    uses_property = True

    def render(self, decl: Declaration, config: FilterConfig) -> str:
        return _emit(decl, query_property(decl, _selector(config)), config)


class StructDef(DeclarationExtractor):
    """Re-emits the body of a struct definition, tokens separated by spaces."""

    name = "struct_def"
    default_kind = "StructDecl"
    allowed_kinds = _RECORD_KINDS
    requires_definition = True

    def render(self, decl: Declaration, config: FilterConfig) -> str:
        return render_tokens(decl.tokens(), compact=False)


class SurrogateStruct(DeclarationExtractor):
    """Opaque placeholder with the size and alignment of a typedef'd type."""

    name = "surrogate_struct"
    default_kind = "TypedefDecl"
    allowed_kinds = _TYPE_KINDS
    requires_definition = True

    def render(self, decl: Declaration, config: FilterConfig) -> str:
        alignment = query_property(decl, _ALIGNMENT)
        size = query_property(decl, _SIZE)
        return render_surrogate(size, alignment)


class DialectProperty(DeclarationExtractor):
    """Resolves one property across a legacy and a large-file variant of a type.

    The first ``-p`` pattern selects the legacy variant and the second the
    large-file variant. Either may be absent; :func:`select_dialect` decides
    which value is baked in.

    With ``-E NAME=LITERAL`` the output is an assignment of the resolved value
    to ``NAME`` followed by an ``assert_baked`` call against ``LITERAL``, and
    generation fails outright when the two already differ.
    """

    name = "dialect_property"
    default_kind = "StructDecl"
    allowed_kinds = _TYPE_KINDS
    requires_definition = True
    uses_property = True
    accepts_expected = True

    def validate(self, config: FilterConfig) -> None:
        super().validate(config)
        if len(config.include_patterns) != 2:
            raise MalformedDirective(
                "Extractor 'dialect_property' requires exactly two -p patterns "
                "(legacy variant, then large-file variant)"
            )
        if config.expected is not None and config.composite:
            raise InvalidArgument("Options -E and -C cannot be combined")

    def evaluate(self, session: QuerySession, config: FilterConfig) -> str:
        self.validate(config)
        selector = _selector(config)
        legacy_pattern, large_pattern = config.include_patterns
        declarations = list(session.declarations())
        legacy = self._variant(declarations, config, legacy_pattern)
        large = self._variant(declarations, config, large_pattern)
        legacy_value = query_property(legacy, selector) if legacy is not None else None
        large_value = query_property(large, selector) if large is not None else None
        subject = f"{selector.describe()} of {legacy_pattern.pattern}"
        choice = select_dialect(legacy_value, large_value, subject=subject)
        if config.expected is not None:
            return render_baked(config.expected, choice.value)
        if config.composite and legacy is not None:
            return format_row(legacy.name, choice.value, config)
        return str(choice.value)

    def _variant(
        self,
        declarations: Sequence[Declaration],
        config: FilterConfig,
        pattern: re.Pattern[str],
    ) -> Optional[Declaration]:
        variant_config = FilterConfig(
            kind=config.kind,
            include_patterns=[pattern],
            exclude_names=config.exclude_names,
        )
        return self.single(self.select(declarations, variant_config))

    def render(self, decl: Declaration, config: FilterConfig) -> str:
        return _emit(decl, query_property(decl, _selector(config)), config)


def render_baked(expected: BakedConstant, value: int) -> str:
    """Assign ``value`` to the expected constant and re-check it when the artifact loads."""
    if value != expected.value:
        raise BakedValueMismatch(
            f"{expected.name} resolved to {value}, but the template expects {expected.value}"
        )
    return (
        f"{expected.name} = {value}\n"
        f'assert_baked("{expected.name}", {expected.name}, {expected.value})'
    )


__all__ = [
    "DialectProperty",
    "SizeOfStruct",
    "StructDef",
    "StructProperty",
    "SurrogateStruct",
    "render_baked",
]
