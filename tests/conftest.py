from __future__ import annotations

import logging
from typing import Iterator

import pytest

from tests._fixtures.fake_query import FakeQueryService, enum_constant, macro, struct, typedef


@pytest.fixture(autouse=True)
def _reset_declgen_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog keeps seeing declgen records."""
    yield
    logger = logging.getLogger("declgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_service() -> FakeQueryService:
    """Query service with a small libc-like header set."""
    return FakeQueryService(
        {
            "sys/stat.h": [
                struct("stat", size=144, align=8, offsets={"st_size": 48}),
                struct("stat64", size=144, align=8, requires_define="_LARGEFILE64_SOURCE"),
            ],
            "dirent.h": [
                struct("dirent", size=280, align=8, offsets={"d_name": 19}),
                struct(
                    "dirent64",
                    size=280,
                    align=8,
                    offsets={"d_name": 19},
                    requires_define="_LARGEFILE64_SOURCE",
                ),
            ],
            "sys/socket.h": [
                enum_constant("AF_UNSPEC", 0, "AF_"),
                enum_constant("AF_INET", 2, "AF_"),
                enum_constant("AF_INET6", 10, "AF_"),
            ],
            "fcntl.h": [
                macro("O_RDONLY", "00"),
                macro("O_CLOEXEC", "02000000"),
            ],
            "signal.h": [typedef("sigset_t", "__sigset_t", size=128, align=8)],
        }
    )
