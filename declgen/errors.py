"""Exception hierarchy shared by the generator and generated artifacts."""

from __future__ import annotations

from typing import Optional


class DeclgenError(RuntimeError):
    """Base class for every declgen failure."""


class ExtractionError(DeclgenError):
    """Raised when a directive cannot be evaluated; aborts the generation run."""

    def __init__(self, message: str, *, location: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class MalformedDirective(ExtractionError):
    """Raised for unknown flags, missing flag values or wrong argument counts."""


class InvalidArgument(ExtractionError):
    """Raised for flag combinations that parse but make no sense together."""


class QueryError(ExtractionError):
    """Raised when the AST query service cannot answer a question."""


class MultipleMatchesError(ExtractionError):
    """Raised when an exactly-one extractor sees a second matching declaration."""


class UnsupportedAlignment(ExtractionError):
    """Raised when an opaque surrogate cannot be built for an alignment."""


class UnsupportedSize(ExtractionError):
    """Raised when a size is not a multiple of the alignment."""


class UnrecognizedDialectError(ExtractionError):
    """Raised when extracted candidate facts match no known ABI dialect."""


class BakedValueMismatch(ExtractionError):
    """Raised when a dialect-resolved value differs from the literal the template expects."""


class DuplicateValueError(ExtractionError):
    """Raised when a reverse table would map one value to two names."""


class PlatformMismatchError(DeclgenError):
    """Raised by a generated artifact loaded on a platform it was not built for."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            f"generated for platform '{expected}' but running on '{actual}'"
        )
        self.expected = expected
        self.actual = actual


__all__ = [
    "BakedValueMismatch",
    "DeclgenError",
    "DuplicateValueError",
    "ExtractionError",
    "InvalidArgument",
    "MalformedDirective",
    "MultipleMatchesError",
    "PlatformMismatchError",
    "QueryError",
    "UnrecognizedDialectError",
    "UnsupportedAlignment",
    "UnsupportedSize",
]
