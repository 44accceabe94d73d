"""libclang powered query service."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from clang.cindex import (
    Config,
    Cursor,
    CursorKind,
    Diagnostic,
    Index,
    LibclangError,
    TranslationUnit,
    TranslationUnitLoadError,
    TypeKind,
    _CXString,
    c_object_p,
    conf,
    register_function,
)

from ..errors import QueryError
from ..logging import get_logger
from .base import QuerySession, QueryService

_UMBRELLA_NAME = "declgen_umbrella.h"

# Not registered by the clang.cindex bindings themselves.
_TARGET_INFO_FUNCTIONS = (
    ("clang_getTranslationUnitTargetInfo", [TranslationUnit], c_object_p),
    ("clang_TargetInfo_getTriple", [c_object_p], _CXString, _CXString.from_result),
    ("clang_TargetInfo_dispose", [c_object_p]),
)

_KIND_NAMES: Dict[CursorKind, str] = {
    CursorKind.MACRO_DEFINITION: "MacroDefinition",
    CursorKind.STRUCT_DECL: "StructDecl",
    CursorKind.UNION_DECL: "UnionDecl",
    CursorKind.TYPEDEF_DECL: "TypedefDecl",
    CursorKind.ENUM_DECL: "EnumDecl",
    CursorKind.ENUM_CONSTANT_DECL: "EnumConstantDecl",
    CursorKind.FUNCTION_DECL: "FunctionDecl",
    CursorKind.VAR_DECL: "VarDecl",
}

_RECORD_KINDS = {CursorKind.STRUCT_DECL, CursorKind.UNION_DECL, CursorKind.ENUM_DECL}
_SCOPE_KINDS = {CursorKind.NAMESPACE, CursorKind.LINKAGE_SPEC}


class ClangDeclaration:
    """Declaration handle wrapping a libclang cursor."""

    def __init__(
        self,
        session: "ClangQuerySession",
        cursor: Cursor,
        kind: str,
        name: str,
        enum_name: Optional[str] = None,
    ) -> None:
        self._session = session
        self._handle = cursor
        self._kind = kind
        self._name = name
        self._enum_name = enum_name

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def name(self) -> str:
        return self._name

    @property
    def enum_name(self) -> Optional[str]:
        return self._enum_name

    @property
    def _cursor(self) -> Cursor:
        if self._session.closed:
            raise QueryError(f"Declaration '{self._name}' used after its query session was closed")
        return self._handle

    @property
    def enum_value(self) -> Optional[int]:
        if self._kind != "EnumConstantDecl":
            return None
        return int(self._cursor.enum_value)

    @property
    def underlying_type(self) -> Optional[str]:
        if self._kind != "TypedefDecl":
            return None
        return self._cursor.underlying_typedef_type.spelling

    @property
    def result_type(self) -> Optional[str]:
        if self._kind != "FunctionDecl":
            return None
        return self._cursor.result_type.spelling

    @property
    def argument_types(self) -> Tuple[str, ...]:
        if self._kind != "FunctionDecl":
            return ()
        return tuple(arg.type.spelling for arg in self._cursor.get_arguments())

    @property
    def is_variadic(self) -> bool:
        if self._kind != "FunctionDecl":
            return False
        fn_type = self._cursor.type
        return fn_type.kind == TypeKind.FUNCTIONPROTO and fn_type.is_function_variadic()

    def is_definition(self) -> bool:
        return bool(self._cursor.is_definition())

    def size(self) -> int:
        return int(self._cursor.type.get_size())

    def alignment(self) -> int:
        return int(self._cursor.type.get_align())

    def offset_of(self, member: str) -> int:
        bits = int(self._cursor.type.get_offset(member))
        if bits < 0:
            return bits
        return bits // 8

    def tokens(self) -> List[str]:
        return [token.spelling for token in self._cursor.get_tokens()]

    def __repr__(self) -> str:
        return f"ClangDeclaration(kind={self._kind!r}, name={self._name!r})"


class ClangQuerySession(QuerySession):
    """A parsed umbrella translation unit including every directive header."""

    def __init__(self, translation_unit: TranslationUnit, triple: str) -> None:
        self._tu: Optional[TranslationUnit] = translation_unit
        self._triple = triple

    @property
    def closed(self) -> bool:
        return self._tu is None

    def declarations(self) -> Iterator[ClangDeclaration]:
        if self._tu is None:
            raise QueryError("Query session is closed")
        yield from self._walk(self._tu.cursor, prefix="")

    def target_triple(self) -> str:
        return self._triple

    def close(self) -> None:
        self._tu = None

    def _walk(self, parent: Cursor, prefix: str) -> Iterator[ClangDeclaration]:
        for cursor in parent.get_children():
            if cursor.kind in _SCOPE_KINDS:
                scope = f"{prefix}{cursor.spelling}::" if cursor.spelling else prefix
                yield from self._walk(cursor, scope)
                continue
            kind = _KIND_NAMES.get(cursor.kind)
            if kind is None:
                continue
            if cursor.kind == CursorKind.MACRO_DEFINITION and cursor.location.file is None:
                # builtin
                continue
            yield ClangDeclaration(self, cursor, kind, prefix + _spelling(cursor))
            if cursor.kind == CursorKind.ENUM_DECL:
                yield from self._enum_constants(cursor, prefix)

    def _enum_constants(self, enum_cursor: Cursor, prefix: str) -> Iterator[ClangDeclaration]:
        constants = [
            child for child in enum_cursor.get_children()
            if child.kind == CursorKind.ENUM_CONSTANT_DECL
        ]
        owner = _spelling(enum_cursor) or os.path.commonprefix([c.spelling for c in constants])
        for child in constants:
            yield ClangDeclaration(
                self, child, "EnumConstantDecl", prefix + child.spelling, enum_name=owner
            )


class ClangQueryService(QueryService):
    """Opens query sessions by parsing headers with libclang."""

    def __init__(
        self,
        *,
        args: Sequence[str] = (),
        include_paths: Sequence[str] = (),
        target: Optional[str] = None,
        library_file: Optional[str] = None,
    ) -> None:
        if library_file and not Config.loaded:
            Config.set_library_file(library_file)
        self._args = list(args)
        self._include_paths = list(include_paths)
        self._target = target or target_from_args(args)
        self._index: Optional[Index] = None
        self.logger = get_logger("query.clang")

    def open(
        self,
        headers: Sequence[str],
        defines: Mapping[str, str],
        extra_args: Sequence[str] = (),
    ) -> ClangQuerySession:
        args = self._build_args(defines, extra_args)
        umbrella = umbrella_source(headers)
        self.logger.debug("Parsing %s with args %s", ", ".join(headers), " ".join(args))
        options = (
            TranslationUnit.PARSE_DETAILED_PROCESSING_RECORD
            | TranslationUnit.PARSE_SKIP_FUNCTION_BODIES
        )
        try:
            tu = self._get_index().parse(
                _UMBRELLA_NAME,
                args=args,
                unsaved_files=[(_UMBRELLA_NAME, umbrella)],
                options=options,
            )
        except TranslationUnitLoadError as exc:
            raise QueryError(f"Failed parsing {', '.join(headers)}: {exc}") from exc
        self._check_diagnostics(tu, headers)
        return ClangQuerySession(tu, translation_unit_triple(tu))

    def _get_index(self) -> Index:
        if self._index is None:
            self._index = Index.create()
        return self._index

    def _build_args(self, defines: Mapping[str, str], extra_args: Sequence[str]) -> List[str]:
        args = list(self._args)
        if self._target and not _has_target_arg(args):
            args.append(f"--target={self._target}")
        args.extend(f"-I{path}" for path in self._include_paths)
        args.extend(f"-D{name}={value}" for name, value in defines.items())
        args.extend(extra_args)
        return args

    def _check_diagnostics(self, tu: TranslationUnit, headers: Sequence[str]) -> None:
        fatal: List[str] = []
        for diagnostic in tu.diagnostics:
            if diagnostic.severity >= Diagnostic.Fatal:
                fatal.append(diagnostic.spelling)
            elif diagnostic.severity >= Diagnostic.Warning:
                self.logger.warning("%s: %s", diagnostic.location, diagnostic.spelling)
        if fatal:
            raise QueryError(f"Failed parsing {', '.join(headers)}: {'; '.join(fatal)}")


def umbrella_source(headers: Sequence[str]) -> str:
    """Return a header that includes each path, by file name when it exists."""
    lines = []
    for header in headers:
        path = Path(header)
        if path.is_file():
            lines.append(f'#include "{path.resolve().as_posix()}"')
        else:
            lines.append(f"#include <{header}>")
    return "\n".join(lines) + "\n"


def translation_unit_triple(tu: TranslationUnit) -> str:
    """Return the target triple clang actually parsed ``tu`` for.

    This reflects ``--target`` as well as flags such as ``-m32`` that change
    the target after the fact.
    """
    lib = conf.lib
    try:
        for item in _TARGET_INFO_FUNCTIONS:
            register_function(lib, item, False)
    except LibclangError as exc:
        raise QueryError(f"libclang cannot report the target triple: {exc}") from exc
    info = lib.clang_getTranslationUnitTargetInfo(tu)
    if not info:
        raise QueryError("libclang returned no target information for the translation unit")
    try:
        triple = lib.clang_TargetInfo_getTriple(info)
    finally:
        lib.clang_TargetInfo_dispose(info)
    if isinstance(triple, bytes):
        triple = triple.decode("utf-8")
    return str(triple)


def _spelling(cursor: Cursor) -> str:
    spelling = cursor.spelling or ""
    if cursor.kind in _RECORD_KINDS:
        # Newer libclang spells unnamed tags as "(unnamed struct at file:line)".
        if cursor.is_anonymous() or "(unnamed" in spelling or "(anonymous" in spelling:
            return ""
    return spelling


def _has_target_arg(args: Sequence[str]) -> bool:
    return any(arg == "-target" or arg.startswith("--target=") for arg in args)


def target_from_args(args: Sequence[str]) -> Optional[str]:
    """Return the ``--target``/``-target`` value in a clang argument list, if any."""
    for position, arg in enumerate(args):
        if arg.startswith("--target="):
            return arg.split("=", 1)[1]
        if arg == "-target" and position + 1 < len(args):
            return args[position + 1]
    return None


__all__ = [
    "ClangDeclaration",
    "ClangQueryService",
    "ClangQuerySession",
    "translation_unit_triple",
    "umbrella_source",
]
