"""Core data models shared across declgen components."""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

PROPERTY_NAMES = ("size", "alignment", "offset")


@dataclass(frozen=True)
class PropertySelector:
    """Which layout fact to extract from a matched declaration."""

    name: str
    member: Optional[str] = None

    def describe(self) -> str:
        if self.member is not None:
            return f"{self.name}:{self.member}"
        return self.name


@dataclass(frozen=True)
class BakedConstant:
    """Constant name and the literal its resolved value must equal (``-E NAME=VALUE``)."""

    name: str
    value: int


@dataclass
class FilterConfig:
    """Filter and format settings parsed from a directive's flags."""

    kind: Optional[str] = None
    enum_name: Optional[re.Pattern[str]] = None
    include_patterns: List[re.Pattern[str]] = field(default_factory=list)
    exclude_names: List[str] = field(default_factory=list)
    strip_prefix: Optional[str] = None
    property: Optional[PropertySelector] = None
    composite: bool = False
    quote: bool = False
    raw: bool = False
    largefile: bool = False
    defines: Dict[str, str] = field(default_factory=dict)
    expected: Optional[BakedConstant] = None
    before: Optional[str] = None
    after: Optional[str] = None


@dataclass
class Directive:
    """One parsed directive: extractor name, filters and the headers to query."""

    module: str
    flags: FilterConfig
    headers: List[str]
    line: int = 0

    @property
    def defines(self) -> Dict[str, str]:
        return self.flags.defines


@dataclass
class DirectiveLine:
    """A directive line with continuations already joined."""

    text: str
    line: int


@dataclass
class DirectiveBlock:
    """A template region (markers included) replaced by generated output."""

    start_line: int
    end_line: int
    lines: List[DirectiveLine] = field(default_factory=list)


@dataclass
class Template:
    """Template source split into lines, plus the directive blocks found in it."""

    name: str
    lines: List[str]
    blocks: List[DirectiveBlock] = field(default_factory=list)


@dataclass(frozen=True)
class Fingerprint:
    """Operating system and architecture pair identifying an ABI."""

    os: str
    arch: str

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"

    @classmethod
    def parse(cls, value: str) -> "Fingerprint":
        os_name, sep, arch = value.partition("-")
        if not sep or not os_name or not arch:
            raise ValueError(f"Invalid platform fingerprint: {value!r}")
        return cls(os=os_name, arch=arch)


@dataclass(frozen=True)
class DialectChoice:
    """The dialect detected for a pair of candidate facts and the value to bake."""

    dialect: str
    value: int
    candidates: Tuple[Optional[int], ...] = ()
