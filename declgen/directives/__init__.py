"""Directive parsing."""

from .flags import (
    KNOWN_KINDS,
    parse_directive,
    parse_expected,
    parse_flags,
    parse_property,
    tokenize,
)

__all__ = [
    "KNOWN_KINDS",
    "parse_directive",
    "parse_expected",
    "parse_flags",
    "parse_property",
    "tokenize",
]
