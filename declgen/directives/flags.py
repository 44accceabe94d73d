"""Parse directive lines into structured filter configurations."""

from __future__ import annotations

import re
import shlex
from typing import Dict, List, Sequence, Tuple

from ..errors import InvalidArgument, MalformedDirective
from ..extractors.formatting import parse_int_literal
from ..models import PROPERTY_NAMES, BakedConstant, Directive, FilterConfig, PropertySelector

KNOWN_KINDS = frozenset(
    {
        "MacroDefinition",
        "StructDecl",
        "UnionDecl",
        "TypedefDecl",
        "EnumDecl",
        "EnumConstantDecl",
        "FunctionDecl",
        "VarDecl",
    }
)

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")

# Flags that consume the following token.
_VALUE_FLAGS = frozenset({"-w", "-e", "-p", "-x", "-s", "-a", "-D", "-E", "-1", "-2"})
_SWITCH_FLAGS = frozenset({"-C", "-A", "-Q", "-R"})


def tokenize(text: str) -> List[str]:
    """Split a directive line using shell quoting rules."""
    try:
        return shlex.split(text)
    except ValueError as exc:
        raise MalformedDirective(f"Cannot tokenize directive '{text}': {exc}") from exc


def parse_directive(text: str, *, line: int = 0) -> Directive:
    """Parse ``<module> <flags...> <header...>`` into a :class:`Directive`."""
    tokens = tokenize(text)
    if not tokens:
        raise MalformedDirective("Empty directive")
    module, rest = tokens[0], tokens[1:]
    if module.startswith("-"):
        raise MalformedDirective(f"Directive must start with an extractor name, got '{module}'")
    flags, headers = parse_flags(rest)
    if not headers:
        raise MalformedDirective(f"Directive '{module}' names no header to query")
    return Directive(module=module, flags=flags, headers=headers, line=line)


def parse_flags(tokens: Sequence[str]) -> Tuple[FilterConfig, List[str]]:
    """Return the filter configuration and the positional (header) arguments."""
    config = FilterConfig()
    positional: List[str] = []
    index = 0
    flags_done = False
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if flags_done or not token.startswith("-") or token == "-":
            positional.append(token)
            continue
        if token == "--":
            flags_done = True
            continue
        if token.startswith("-D") and len(token) > 2:
            _add_define(config.defines, token[2:])
            continue
        if token in _SWITCH_FLAGS:
            _apply_switch(config, token)
            continue
        if token not in _VALUE_FLAGS:
            raise MalformedDirective(f"Unrecognized option {token}")
        if index >= len(tokens):
            raise MalformedDirective(f"Option {token} requires a value")
        value = tokens[index]
        index += 1
        _apply_value(config, token, value)
    return config, positional


def parse_property(value: str) -> PropertySelector:
    """Parse the ``-a`` value: ``size``, ``alignment`` or ``offset:<member>``."""
    name, sep, argument = value.partition(":")
    if name not in PROPERTY_NAMES:
        raise InvalidArgument(
            f"Property must be 'size', 'alignment' or 'offset', got '{name}'"
        )
    if name == "offset":
        if not sep or not argument:
            raise MalformedDirective("Property 'offset' requires a member name (offset:<member>)")
        return PropertySelector(name=name, member=argument)
    if sep:
        raise InvalidArgument(f"Property '{name}' takes no argument, got '{value}'")
    return PropertySelector(name=name)


def compile_pattern(pattern: str, option: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise MalformedDirective(f"Invalid pattern for {option} '{pattern}': {exc}") from exc


def _apply_switch(config: FilterConfig, flag: str) -> None:
    if flag == "-C":
        config.composite = True
    elif flag == "-A":
        config.largefile = True
    elif flag == "-Q":
        config.quote = True
    elif flag == "-R":
        config.raw = True


def _apply_value(config: FilterConfig, flag: str, value: str) -> None:
    if flag == "-w":
        if value not in KNOWN_KINDS:
            known = ", ".join(sorted(KNOWN_KINDS))
            raise InvalidArgument(f"Unknown declaration kind '{value}' (expected one of {known})")
        config.kind = value
    elif flag == "-e":
        config.enum_name = compile_pattern(value, flag)
    elif flag == "-p":
        config.include_patterns.append(compile_pattern(value, flag))
    elif flag == "-x":
        config.exclude_names.append(value)
    elif flag == "-s":
        config.strip_prefix = value
    elif flag == "-a":
        if config.property is not None:
            raise MalformedDirective("Option -a may only be given once")
        config.property = parse_property(value)
    elif flag == "-D":
        _add_define(config.defines, value)
    elif flag == "-E":
        if config.expected is not None:
            raise MalformedDirective("Option -E may only be given once")
        config.expected = parse_expected(value)
    elif flag == "-1":
        config.before = value
    elif flag == "-2":
        config.after = value


def parse_expected(value: str) -> BakedConstant:
    """Parse the ``-E`` value ``NAME=LITERAL`` naming a baked constant and its expected value."""
    name, sep, literal = value.partition("=")
    if not sep or not _IDENTIFIER.match(name):
        raise MalformedDirective(f"Option -E expects NAME=LITERAL, got '{value}'")
    expected = parse_int_literal(literal)
    if expected is None:
        raise InvalidArgument(f"Expected value '{literal}' for {name} is not an integer literal")
    return BakedConstant(name=name, value=expected)


def _add_define(defines: Dict[str, str], value: str) -> None:
    name, sep, macro_value = value.partition("=")
    if not _IDENTIFIER.match(name):
        raise MalformedDirective(f"Invalid define '{value}'")
    defines[name] = macro_value if sep else "1"


__all__ = [
    "KNOWN_KINDS",
    "compile_pattern",
    "parse_directive",
    "parse_expected",
    "parse_flags",
    "parse_property",
    "tokenize",
]
