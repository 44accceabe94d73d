"""Layout fact queries and text rendering for matched declarations."""

from __future__ import annotations

import re
from typing import Optional, Sequence

from ..errors import QueryError, UnsupportedAlignment, UnsupportedSize
from ..models import FilterConfig, PropertySelector
from ..query.base import Declaration

SURROGATE_ELEMENT_TYPES = {
    1: "uint8_t",
    2: "uint16_t",
    4: "uint32_t",
    8: "uint64_t",
}

_INT_LITERAL = re.compile(
    r"^(?P<sign>[-+]?)(?P<body>0[xX][0-9a-fA-F]+|0[bB][01]+|0[0-7]*|[1-9][0-9]*)(?P<suffix>[uUlL]*)$"
)


def query_property(decl: Declaration, selector: PropertySelector) -> int:
    """Return size, alignment or member offset in bytes."""
    if selector.name == "size":
        value = decl.size()
    elif selector.name == "alignment":
        value = decl.alignment()
    else:
        value = decl.offset_of(selector.member or "")
    if value < 0:
        raise QueryError(f"Could not determine {selector.describe()} of '{decl.name}'")
    return value


def render_tokens(tokens: Sequence[str], *, compact: bool) -> str:
    """Join a token span without its leading token (macro name or ``struct`` keyword)."""
    separator = "" if compact else " "
    return separator.join(tokens[1:])


def render_surrogate(size: int, alignment: int) -> str:
    """Return an opaque aggregate with the given size and alignment but no real fields."""
    element_type = SURROGATE_ELEMENT_TYPES.get(alignment)
    if element_type is None:
        raise UnsupportedAlignment(
            f"Unexpected or overlarge alignment {alignment} (expected 1, 2, 4 or 8)"
        )
    if size % alignment != 0:
        raise UnsupportedSize(
            f"Unsupported size {size}: not evenly divisible by alignment {alignment}"
        )
    return f"struct {{ {element_type} v_[{size // alignment}]; }}"


def format_name(name: str, config: FilterConfig) -> str:
    """Apply ``-s`` prefix stripping, then ``-Q`` quoting."""
    prefix = config.strip_prefix
    if prefix and name.startswith(prefix):
        name = name[len(prefix):]
    if config.quote:
        return quote(name)
    return name


def format_row(name: str, value: object, config: FilterConfig) -> str:
    """Render one named fact as a composite initializer entry or an assignment."""
    formatted = format_name(name, config)
    if config.composite:
        return f"[{formatted}]={value}"
    return f"{formatted} = {value}"


def quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def parse_int_literal(text: str) -> Optional[int]:
    """Parse a C integer literal (hex, binary, octal or decimal, with suffixes)."""
    stripped = text.strip()
    while stripped.startswith("(") and stripped.endswith(")"):
        stripped = stripped[1:-1].strip()
    match = _INT_LITERAL.match(stripped)
    if match is None:
        return None
    body = match.group("body")
    if body[:2] in ("0x", "0X"):
        value = int(body[2:], 16)
    elif body[:2] in ("0b", "0B"):
        value = int(body[2:], 2)
    elif body.startswith("0") and len(body) > 1:
        value = int(body[1:], 8)
    else:
        value = int(body)
    return -value if match.group("sign") == "-" else value


__all__ = [
    "SURROGATE_ELEMENT_TYPES",
    "format_name",
    "format_row",
    "parse_int_literal",
    "query_property",
    "quote",
    "render_surrogate",
    "render_tokens",
]
