"""Locate directive blocks in template text."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..errors import MalformedDirective
from ..models import DirectiveBlock, DirectiveLine, Template


@dataclass
class MarkerSet:
    """Template-format policy: how directives and inactive regions are delimited.

    A line starting with ``directive_prefix`` is a one-line block. Lines between
    ``begin`` and ``end`` form a multi-directive block. Text between the open and
    close delimiter of an inactive region is copied verbatim and never scanned.
    """

    directive_prefix: str = "@@"
    begin: str = "@@begin"
    end: str = "@@end"
    continuation: str = "\\"
    inactive_regions: Sequence[Tuple[str, str]] = field(
        default_factory=lambda: [("@@disable", "@@enable")]
    )


class DirectiveScanner:
    """Splits a template into lines and finds the directive blocks in it."""

    def __init__(self, markers: MarkerSet | None = None) -> None:
        self.markers = markers or MarkerSet()

    def scan(self, text: str, *, name: str = "<template>") -> Template:
        lines = text.splitlines(keepends=True)
        template = Template(name=name, lines=lines)
        markers = self.markers
        inactive_close: Optional[str] = None
        block: Optional[DirectiveBlock] = None
        index = 0
        while index < len(lines):
            number = index + 1
            content = _strip_eol(lines[index])
            stripped = content.strip()
            index += 1

            if inactive_close is not None:
                if inactive_close in content:
                    inactive_close = None
                continue

            if block is not None:
                if stripped == markers.end:
                    block.end_line = number
                    template.blocks.append(block)
                    block = None
                    continue
                if stripped == markers.begin:
                    raise MalformedDirective(
                        f"Nested '{markers.begin}' inside block opened at line {block.start_line}",
                        location=f"{name}:{number}",
                    )
                if not stripped or stripped.startswith("#"):
                    continue
                body = stripped
                if body.startswith(markers.directive_prefix):
                    body = body[len(markers.directive_prefix):].strip()
                joined, index = self._join_continuations(body, lines, index, name, number)
                block.lines.append(DirectiveLine(text=joined, line=number))
                continue

            region = self._inactive_region(content)
            if region is not None:
                opener, closer = region
                if closer not in content.lstrip()[len(opener):]:
                    inactive_close = closer
                continue

            if stripped == markers.begin:
                block = DirectiveBlock(start_line=number, end_line=number)
                continue
            if stripped == markers.end:
                raise MalformedDirective(
                    f"'{markers.end}' without a matching '{markers.begin}'",
                    location=f"{name}:{number}",
                )
            if _is_directive(content, markers.directive_prefix):
                body = content[len(markers.directive_prefix):].strip()
                if not body:
                    raise MalformedDirective("Empty directive", location=f"{name}:{number}")
                joined, index = self._join_continuations(body, lines, index, name, number)
                template.blocks.append(
                    DirectiveBlock(
                        start_line=number,
                        end_line=index,
                        lines=[DirectiveLine(text=joined, line=number)],
                    )
                )

        if block is not None:
            raise MalformedDirective(
                f"Block opened with '{markers.begin}' is never closed",
                location=f"{name}:{block.start_line}",
            )
        return template

    def _inactive_region(self, content: str) -> Optional[Tuple[str, str]]:
        stripped = content.lstrip()
        for opener, closer in self.markers.inactive_regions:
            if stripped.startswith(opener):
                return opener, closer
        return None

    def _join_continuations(
        self, body: str, lines: Sequence[str], index: int, name: str, number: int
    ) -> Tuple[str, int]:
        """Join ``body`` with following lines while it ends in the continuation marker."""
        marker = self.markers.continuation
        parts: List[str] = []
        current = body
        while current.endswith(marker):
            parts.append(current[: -len(marker)].strip())
            if index >= len(lines):
                raise MalformedDirective(
                    "Line continuation at end of template", location=f"{name}:{number}"
                )
            current = _strip_eol(lines[index]).strip()
            index += 1
        parts.append(current)
        return " ".join(part for part in parts if part), index


def _is_directive(content: str, prefix: str) -> bool:
    if not content.startswith(prefix):
        return False
    rest = content[len(prefix):]
    return not rest or rest[0].isspace()


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


__all__ = ["DirectiveScanner", "MarkerSet"]
