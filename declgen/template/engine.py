"""Substitute evaluated directive output into templates."""

from __future__ import annotations

from typing import Callable, List

from ..directives import parse_directive
from ..errors import ExtractionError
from ..logging import directive_context, get_logger
from ..models import Directive, DirectiveBlock, Template
from .scanner import DirectiveScanner, MarkerSet

DirectiveEvaluator = Callable[[Directive], str]


class TemplateEngine:
    """Replaces every directive block with the output of its directives.

    Text outside blocks is preserved byte for byte. The first failing directive
    aborts rendering; no partial output is produced.
    """

    def __init__(self, evaluate: DirectiveEvaluator, markers: MarkerSet | None = None) -> None:
        self._evaluate = evaluate
        self.scanner = DirectiveScanner(markers)
        self.logger = get_logger("template")

    def render(self, text: str, *, name: str = "<template>") -> str:
        template = self.scanner.scan(text, name=name)
        if not template.blocks:
            return text
        self.logger.debug("Found %d directive blocks in %s", len(template.blocks), name)
        output: List[str] = []
        position = 0
        for block in template.blocks:
            output.extend(template.lines[position : block.start_line - 1])
            rendered = self.render_block(block, template)
            if rendered:
                output.append(rendered + _line_ending(template.lines[block.end_line - 1]))
            position = block.end_line
        output.extend(template.lines[position:])
        return "".join(output)

    def render_block(self, block: DirectiveBlock, template: Template) -> str:
        """Evaluate a block's directives in order and concatenate their output."""
        buffer = ""
        for line in block.lines:
            location = f"{template.name}:{line.line}"
            try:
                with directive_context(location):
                    directive = parse_directive(line.text, line=line.line)
                    self.logger.debug("Evaluating %s", directive.module)
                    text = self._evaluate(directive)
            except ExtractionError as exc:
                if exc.location is None:
                    exc.location = location
                raise
            if not text:
                continue
            if buffer:
                buffer += "," if directive.flags.composite else "\n"
            buffer += text
        return buffer


def _line_ending(line: str) -> str:
    stripped = line.rstrip("\r\n")
    return line[len(stripped):]


__all__ = ["DirectiveEvaluator", "TemplateEngine"]
