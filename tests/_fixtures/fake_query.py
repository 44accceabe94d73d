"""In-memory query service standing in for libclang in tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from declgen.errors import QueryError
from declgen.query.base import QuerySession, QueryService


@dataclass
class FakeDeclaration:
    """Declaration with canned answers; unusable once its session closes."""

    kind: str
    name: str
    definition: bool = True
    size_bytes: int = -1
    align_bytes: int = -1
    offsets: Dict[str, int] = field(default_factory=dict)
    token_list: List[str] = field(default_factory=list)
    enum_name: Optional[str] = None
    enum_value: Optional[int] = None
    underlying_type: Optional[str] = None
    result_type: Optional[str] = None
    argument_types: Tuple[str, ...] = ()
    is_variadic: bool = False
    requires_define: Optional[str] = None
    session: Optional["FakeQuerySession"] = field(default=None, repr=False, compare=False)

    def _check_open(self) -> None:
        if self.session is not None and self.session.closed:
            raise QueryError(f"Declaration '{self.name}' used after its query session was closed")

    def is_definition(self) -> bool:
        self._check_open()
        return self.definition

    def size(self) -> int:
        self._check_open()
        return self.size_bytes

    def alignment(self) -> int:
        self._check_open()
        return self.align_bytes

    def offset_of(self, member: str) -> int:
        self._check_open()
        return self.offsets.get(member, -1)

    def tokens(self) -> List[str]:
        self._check_open()
        return list(self.token_list)


class FakeQuerySession(QuerySession):
    def __init__(self, declarations: Sequence[FakeDeclaration], triple: str) -> None:
        self._declarations = list(declarations)
        self._triple = triple
        self.closed = False

    def declarations(self) -> Iterator[FakeDeclaration]:
        if self.closed:
            raise QueryError("Query session is closed")
        for decl in self._declarations:
            decl.session = self
            yield decl

    def target_triple(self) -> str:
        return self._triple

    def close(self) -> None:
        self.closed = True


class FakeQueryService(QueryService):
    """Serves declarations registered per header name."""

    def __init__(
        self,
        headers: Mapping[str, Sequence[FakeDeclaration]] | None = None,
        *,
        triple: str = "x86_64-pc-linux-gnu",
    ) -> None:
        self.headers: Dict[str, List[FakeDeclaration]] = {
            name: list(decls) for name, decls in (headers or {}).items()
        }
        self.triple = triple
        self.opened: List[Tuple[Tuple[str, ...], Dict[str, str]]] = []
        self.sessions: List[FakeQuerySession] = []

    def open(
        self,
        headers: Sequence[str],
        defines: Mapping[str, str],
        extra_args: Sequence[str] = (),
    ) -> FakeQuerySession:
        self.opened.append((tuple(headers), dict(defines)))
        declarations: List[FakeDeclaration] = []
        for header in headers:
            if header not in self.headers:
                raise QueryError(f"Failed parsing {header}: file not found")
            for decl in self.headers[header]:
                if decl.requires_define and decl.requires_define not in defines:
                    continue
                declarations.append(decl)
        session = FakeQuerySession(declarations, self.triple)
        self.sessions.append(session)
        return session


def struct(
    name: str,
    size: int = 8,
    align: int = 4,
    *,
    offsets: Optional[Dict[str, int]] = None,
    definition: bool = True,
    tokens: Optional[List[str]] = None,
    requires_define: Optional[str] = None,
) -> FakeDeclaration:
    return FakeDeclaration(
        kind="StructDecl",
        name=name,
        definition=definition,
        size_bytes=size,
        align_bytes=align,
        offsets=offsets or {},
        token_list=tokens or [],
        requires_define=requires_define,
    )


def typedef(name: str, underlying: str, size: int = 8, align: int = 8) -> FakeDeclaration:
    return FakeDeclaration(
        kind="TypedefDecl",
        name=name,
        size_bytes=size,
        align_bytes=align,
        underlying_type=underlying,
    )


def macro(name: str, *body: str) -> FakeDeclaration:
    return FakeDeclaration(kind="MacroDefinition", name=name, token_list=[name, *body])


def enum_constant(name: str, value: int, enum_name: str) -> FakeDeclaration:
    return FakeDeclaration(
        kind="EnumConstantDecl", name=name, enum_value=value, enum_name=enum_name
    )


def function(name: str, result: str, *arguments: str, variadic: bool = False) -> FakeDeclaration:
    return FakeDeclaration(
        kind="FunctionDecl",
        name=name,
        definition=False,
        result_type=result,
        argument_types=tuple(arguments),
        is_variadic=variadic,
    )


__all__ = [
    "FakeDeclaration",
    "FakeQueryService",
    "FakeQuerySession",
    "enum_constant",
    "function",
    "macro",
    "struct",
    "typedef",
]
