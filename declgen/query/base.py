"""Interfaces for the AST query service that directives run against."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Mapping, Optional, Protocol, Sequence, Tuple


class Declaration(Protocol):
    """A declaration handle. Valid only while its originating session is open."""

    @property
    def kind(self) -> str:
        """Declaration kind name, e.g. ``StructDecl`` or ``MacroDefinition``."""

    @property
    def name(self) -> str:
        """Qualified name (``ns::name`` for C++ namespaces)."""

    @property
    def enum_name(self) -> Optional[str]:
        """For enum constants: the owning enum's name, or its constants' common prefix."""

    @property
    def enum_value(self) -> Optional[int]:
        ...

    @property
    def underlying_type(self) -> Optional[str]:
        ...

    @property
    def result_type(self) -> Optional[str]:
        ...

    @property
    def argument_types(self) -> Tuple[str, ...]:
        ...

    @property
    def is_variadic(self) -> bool:
        ...

    def is_definition(self) -> bool:
        ...

    def size(self) -> int:
        """Byte size of the declared type; negative when unknown."""

    def alignment(self) -> int:
        """Byte alignment of the declared type; negative when unknown."""

    def offset_of(self, member: str) -> int:
        """Byte offset of ``member``; negative when unknown."""

    def tokens(self) -> Sequence[str]:
        """Source token spellings of the declaration, in order."""


class QuerySession(ABC):
    """One parse of a directive's headers. Use as a context manager."""

    @abstractmethod
    def declarations(self) -> Iterator[Declaration]:
        """Yield declarations in traversal (source) order."""

    @abstractmethod
    def target_triple(self) -> str:
        """Return the target triple the headers were parsed for."""

    def close(self) -> None:
        """Release the parse and invalidate every declaration handle."""

    def __enter__(self) -> "QuerySession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class QueryService(ABC):
    """Factory for query sessions scoped to one directive."""

    @abstractmethod
    def open(
        self,
        headers: Sequence[str],
        defines: Mapping[str, str],
        extra_args: Sequence[str] = (),
    ) -> QuerySession:
        """Parse ``headers`` under ``defines`` and return an open session."""


__all__ = ["Declaration", "QuerySession", "QueryService"]
