"""Directive block scanning tests."""

from __future__ import annotations

import pytest

from declgen.errors import MalformedDirective
from declgen.template import DirectiveScanner, MarkerSet


def test_scan_finds_one_line_directives() -> None:
    text = "local a = 1\n@@ sizeof_struct -p ^stat$ sys/stat.h\nlocal b = 2\n"
    template = DirectiveScanner().scan(text, name="t.lua")
    assert len(template.blocks) == 1
    block = template.blocks[0]
    assert (block.start_line, block.end_line) == (2, 2)
    assert block.lines[0].text == "sizeof_struct -p ^stat$ sys/stat.h"


def test_scan_joins_continuation_lines() -> None:
    text = "@@ enum_table -C \\\n   -p ^AF_ \\\n   sys/socket.h\nrest\n"
    template = DirectiveScanner().scan(text)
    block = template.blocks[0]
    assert block.lines[0].text == "enum_table -C -p ^AF_ sys/socket.h"
    assert (block.start_line, block.end_line) == (1, 3)


def test_scan_multi_directive_block() -> None:
    text = (
        "before\n"
        "@@begin\n"
        "# comment lines are skipped\n"
        "enum_table -C -p ^A_ a.h\n"
        "\n"
        "@@ enum_table -C -p ^B_ b.h\n"
        "@@end\n"
        "after\n"
    )
    template = DirectiveScanner().scan(text)
    block = template.blocks[0]
    assert (block.start_line, block.end_line) == (2, 7)
    assert [line.text for line in block.lines] == [
        "enum_table -C -p ^A_ a.h",
        "enum_table -C -p ^B_ b.h",
    ]
    assert [line.line for line in block.lines] == [4, 6]


def test_scan_skips_inactive_regions() -> None:
    text = "@@disable\n@@ sizeof_struct -p ^x$ x.h\n@@enable\n@@disable @@ not scanned @@enable\n"
    template = DirectiveScanner().scan(text)
    assert template.blocks == []


def test_scan_custom_markers() -> None:
    markers = MarkerSet(directive_prefix="%%", begin="%%{", end="%%}", inactive_regions=[])
    text = "%%{\nmacro_def -p ^X$ x.h\n%%}\n%% macro_def -p ^Y$ y.h\n@@ ignored\n"
    template = DirectiveScanner(markers).scan(text)
    assert [block.lines[0].text for block in template.blocks] == [
        "macro_def -p ^X$ x.h",
        "macro_def -p ^Y$ y.h",
    ]


def test_scan_rejects_unclosed_block() -> None:
    with pytest.raises(MalformedDirective, match="never closed") as excinfo:
        DirectiveScanner().scan("@@begin\nmacro_def x.h\n", name="t.lua")
    assert excinfo.value.location == "t.lua:1"


def test_scan_rejects_stray_end() -> None:
    with pytest.raises(MalformedDirective, match="without a matching"):
        DirectiveScanner().scan("text\n@@end\n")


def test_scan_rejects_nested_begin() -> None:
    with pytest.raises(MalformedDirective, match="Nested"):
        DirectiveScanner().scan("@@begin\n@@begin\n@@end\n")


def test_scan_rejects_trailing_continuation() -> None:
    with pytest.raises(MalformedDirective, match="continuation"):
        DirectiveScanner().scan("@@ macro_def -p ^X$ \\\n")


def test_scan_ignores_prefix_without_separator() -> None:
    text = "@@enable\n@@version 2\n@@ macro_def x.h\n"
    template = DirectiveScanner().scan(text)
    assert [block.start_line for block in template.blocks] == [3]
