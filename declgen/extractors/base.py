"""Base classes for extraction modules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar, FrozenSet, Iterable, Iterator, List, Optional

from ..errors import InvalidArgument, MalformedDirective, MultipleMatchesError
from ..models import FilterConfig
from ..query.base import Declaration, QuerySession


class Cardinality(Enum):
    """How many matching declarations an extractor accepts."""

    EXACTLY_ONE = "exactly-one"
    ENUMERATE_ALL = "enumerate-all"


class Extractor(ABC):
    """Contract for extraction modules dispatched by directives."""

    name: ClassVar[str] = ""

    def validate(self, config: FilterConfig) -> None:
        """Reject flag combinations this module cannot honour, before any query."""

    @abstractmethod
    def evaluate(self, session: QuerySession, config: FilterConfig) -> str:
        """Return the text that replaces the directive."""


class DeclarationExtractor(Extractor):
    """Extractor that filters the session's declarations and formats the matches.

    Subclasses declare which declaration kinds they handle and how many
    matches they accept, and implement :meth:`render` for a single match.
    """

    cardinality: ClassVar[Cardinality] = Cardinality.EXACTLY_ONE
    default_kind: ClassVar[Optional[str]] = None
    allowed_kinds: ClassVar[FrozenSet[str]] = frozenset()
    requires_definition: ClassVar[bool] = False
    uses_property: ClassVar[bool] = False
    accepts_expected: ClassVar[bool] = False

    def validate(self, config: FilterConfig) -> None:
        kind = self.kind_for(config)
        if config.kind is not None and config.kind not in self.allowed_kinds:
            allowed = ", ".join(sorted(self.allowed_kinds)) or "none"
            raise InvalidArgument(
                f"Extractor '{self.name}' cannot extract '{config.kind}' (supports {allowed})"
            )
        if config.enum_name is not None and kind != "EnumConstantDecl":
            raise InvalidArgument("Option -e is only available for enum constant extraction")
        if self.uses_property and config.property is None:
            raise MalformedDirective(
                f"Extractor '{self.name}' requires -a size|alignment|offset:<member>"
            )
        if not self.uses_property and config.property is not None:
            raise InvalidArgument(f"Extractor '{self.name}' does not take -a")
        if not self.accepts_expected and config.expected is not None:
            raise InvalidArgument(f"Extractor '{self.name}' does not take -E")
        enumerating = self.cardinality is Cardinality.ENUMERATE_ALL
        if not enumerating and (config.before is not None or config.after is not None):
            raise InvalidArgument(
                f"Options -1 and -2 are only available for enumerating extractors, not '{self.name}'"
            )

    def kind_for(self, config: FilterConfig) -> Optional[str]:
        return config.kind or self.default_kind

    def matches(self, decl: Declaration, config: FilterConfig) -> bool:
        """Apply kind, enum, include, exclude and definition filters in that order.

        Patterns must match the whole name.
        """
        if decl.kind != self.kind_for(config):
            return False
        if config.enum_name is not None:
            owner = decl.enum_name
            if owner is None or not config.enum_name.fullmatch(owner):
                return False
        if config.include_patterns and not any(
            pattern.fullmatch(decl.name) for pattern in config.include_patterns
        ):
            return False
        if decl.name in config.exclude_names:
            return False
        if self.requires_definition and not decl.is_definition():
            return False
        return True

    def select(
        self, declarations: Iterable[Declaration], config: FilterConfig
    ) -> Iterator[Declaration]:
        for decl in declarations:
            if self.matches(decl, config):
                yield decl

    def evaluate(self, session: QuerySession, config: FilterConfig) -> str:
        self.validate(config)
        matched = self.select(session.declarations(), config)
        if self.cardinality is Cardinality.EXACTLY_ONE:
            match = self.single(matched)
            if match is None:
                return ""
            return self.render(match, config)
        rows: List[str] = []
        for decl in matched:
            row = self.render(decl, config)
            if row:
                rows.append(row)
        return wrap_output(join_rows(rows, config), config)

    def single(self, matched: Iterable[Declaration]) -> Optional[Declaration]:
        """Return the only match, ``None`` for no match; a second match is fatal."""
        found: Optional[Declaration] = None
        for decl in matched:
            if found is not None:
                raise MultipleMatchesError(
                    f"Extractor '{self.name}' found more than one match: "
                    f"'{found.name}' and '{decl.name}'"
                )
            found = decl
        return found

    @abstractmethod
    def render(self, decl: Declaration, config: FilterConfig) -> str:
        """Format the fact for one matched declaration."""


def join_rows(rows: Iterable[str], config: FilterConfig) -> str:
    separator = "," if config.composite else "\n"
    return separator.join(rows)


def wrap_output(body: str, config: FilterConfig) -> str:
    """Surround enumerated rows with the ``-1`` and ``-2`` lines, which are emitted even without rows."""
    parts = [part for part in (config.before, body, config.after) if part]
    return "\n".join(parts)


__all__ = ["Cardinality", "DeclarationExtractor", "Extractor", "join_rows", "wrap_output"]
