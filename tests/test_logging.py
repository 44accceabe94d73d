"""Logging setup tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from declgen.logging import DirectiveLocationFilter, configure_logging, directive_context, get_logger


def test_console_records_name_the_directive(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging()
    logger = get_logger("query.clang")
    with directive_context("t.lua:3"):
        logger.warning("boom")
    logger.warning("outside")

    err = capsys.readouterr().err
    assert "[declgen] WARNING t.lua:3: boom" in err
    assert "[declgen] WARNING outside" in err


def test_verbose_enables_debug(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging()
    get_logger().debug("hidden")
    configure_logging(verbose=True)
    get_logger().debug("shown")

    captured = capsys.readouterr()
    assert "hidden" not in captured.err
    assert "shown" in captured.err
    assert captured.out == ""


def test_log_file_gets_a_copy(tmp_path: Path) -> None:
    log_file = tmp_path / "declgen.log"
    logger = configure_logging(log_file=log_file)
    with directive_context("ffi.lua:7"):
        get_logger("generator").info("evaluated")
    for handler in logger.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "INFO declgen.generator ffi.lua:7: evaluated" in text


def test_reconfiguring_replaces_handlers(tmp_path: Path) -> None:
    configure_logging(log_file=tmp_path / "first.log")
    logger = configure_logging()
    assert len(logger.handlers) == 1


def test_explicit_location_attribute_wins() -> None:
    record = logging.LogRecord("declgen", logging.INFO, __file__, 1, "msg", None, None)
    record.location = "a.lua:1"
    with directive_context("b.lua:2"):
        DirectiveLocationFilter().filter(record)
    assert record.where == "a.lua:1: "


def test_location_is_reset_after_block() -> None:
    record = logging.LogRecord("declgen", logging.INFO, __file__, 1, "msg", None, None)
    with directive_context("b.lua:2"):
        pass
    DirectiveLocationFilter().filter(record)
    assert record.where == ""
