"""Dialect selection tests."""

from __future__ import annotations

import logging

import pytest

from declgen.dialect import LARGEFILE_RULES, DialectRule, select_dialect
from declgen.errors import UnrecognizedDialectError


def test_both_variants_present_selects_glibc() -> None:
    choice = select_dialect(19, 19)
    assert choice.dialect == "glibc"
    assert choice.value == 19
    assert choice.candidates == (19, 19)


def test_legacy_only_selects_musl() -> None:
    choice = select_dialect(19, None)
    assert choice.dialect == "musl"
    assert choice.value == 19


def test_legacy_larger_than_large_file_is_unrecognized() -> None:
    with pytest.raises(UnrecognizedDialectError, match="legacy=24, large-file=19"):
        select_dialect(24, 19, subject="offset:d_name of ^dirent$")


def test_no_candidates_is_unrecognized() -> None:
    with pytest.raises(UnrecognizedDialectError, match="known dialects: glibc, musl"):
        select_dialect(None, None)


def test_detected_dialect_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="declgen")
    select_dialect(8, 8, subject="size of ^stat$")
    assert "Detected glibc dialect for size of ^stat$: 8" in caplog.text


def test_custom_rules_are_applied_in_order() -> None:
    prefer_large = DialectRule(
        name="large",
        applies=lambda legacy, large: large is not None,
        pick=lambda legacy, large: large,
    )
    assert select_dialect(4, 8, [prefer_large, *LARGEFILE_RULES]).value == 8
    assert select_dialect(4, None, [prefer_large, *LARGEFILE_RULES]).dialect == "musl"
