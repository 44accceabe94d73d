"""Platform guard tests, including guards executed by generated artifacts."""

from __future__ import annotations

from pathlib import Path

import pytest

from declgen import runtime
from declgen.config import DeclgenConfig
from declgen.errors import PlatformMismatchError
from declgen.generator import Generator
from declgen.models import Fingerprint
from declgen.runtime import (
    assert_baked,
    fingerprint_from_triple,
    normalise_arch,
    normalise_os,
    require_platform,
)
from tests._fixtures.fake_query import FakeQueryService, struct


@pytest.mark.parametrize(
    ("triple", "expected"),
    [
        ("x86_64-pc-linux-gnu", "linux-x64"),
        ("aarch64-unknown-linux-musl", "linux-arm64"),
        ("arm64-apple-darwin23.1.0", "osx-arm64"),
        ("x86_64-pc-windows-msvc", "windows-x64"),
        ("i686-unknown-freebsd13", "bsd-x86"),
        ("x86_64-linux", "linux-x64"),
        ("x86_64-linux-gnu", "linux-x64"),
        ("aarch64-linux-gnu", "linux-arm64"),
        ("i386-linux-gnu", "linux-x86"),
        ("x86_64-w64-mingw32", "windows-x64"),
    ],
)
def test_fingerprint_from_triple(triple: str, expected: str) -> None:
    assert str(fingerprint_from_triple(triple)) == expected


def test_fingerprint_from_invalid_triple() -> None:
    with pytest.raises(ValueError):
        fingerprint_from_triple("x86_64")


def test_fingerprint_from_triple_without_known_os() -> None:
    with pytest.raises(ValueError, match="No known operating system"):
        fingerprint_from_triple("wasm32-unknown-unknown")


def test_normalisers() -> None:
    assert normalise_arch("AMD64") == "x64"
    assert normalise_arch("sparc64") == "sparc64"
    assert normalise_os("linux") == "linux"
    assert normalise_os("darwin") == "osx"
    assert normalise_os("") == "other"


def test_fingerprint_parse() -> None:
    assert Fingerprint.parse("linux-x64") == Fingerprint(os="linux", arch="x64")
    with pytest.raises(ValueError):
        Fingerprint.parse("linux")


def test_require_platform_matching() -> None:
    require_platform("linux-x64", actual="linux-x64")


def test_require_platform_rejects_malformed_fingerprint() -> None:
    with pytest.raises(ValueError):
        require_platform("linux", actual="linux-x64")


def test_require_platform_mismatch_names_both_platforms() -> None:
    with pytest.raises(PlatformMismatchError) as excinfo:
        require_platform("linux-x64", actual="linux-arm64")
    assert excinfo.value.expected == "linux-x64"
    assert excinfo.value.actual == "linux-arm64"
    assert "linux-x64" in str(excinfo.value)
    assert "linux-arm64" in str(excinfo.value)


def test_require_platform_defaults_to_running_platform(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(runtime, "current_fingerprint", lambda: Fingerprint("linux", "x64"))
    require_platform("linux-x64")
    with pytest.raises(PlatformMismatchError):
        require_platform("osx-arm64")


def test_assert_baked() -> None:
    assert_baked("DIRENT_NAME_OFFSET", 19, 19)
    with pytest.raises(AssertionError, match="DIRENT_NAME_OFFSET is 24, expected 19"):
        assert_baked("DIRENT_NAME_OFFSET", 24, 19)


ARTIFACT_TEMPLATE = '''\
from declgen.runtime import assert_baked, require_platform

require_platform(
@@ system_fingerprint -Q sys/stat.h
)

STAT_SIZE = \\
@@ sizeof_struct -p ^stat$ sys/stat.h
assert_baked("STAT_SIZE", STAT_SIZE, 144)
'''


def _generate_artifact(tmp_path: Path, triple: str) -> Path:
    service = FakeQueryService({"sys/stat.h": [struct("stat", size=144, align=8)]}, triple=triple)
    generator = Generator(DeclgenConfig(root=tmp_path), query_service=service)
    artifact = tmp_path / "stat_layout.py"
    artifact.write_text(generator.generate_text(ARTIFACT_TEMPLATE), encoding="utf-8")
    return artifact


def test_generated_artifact_loads_on_matching_platform(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    artifact = _generate_artifact(tmp_path, "x86_64-pc-linux-gnu")
    text = artifact.read_text(encoding="utf-8")
    assert 'require_platform(\n"linux-x64"\n)' in text
    assert "STAT_SIZE = \\\n144\n" in text

    monkeypatch.setattr(runtime, "current_fingerprint", lambda: Fingerprint("linux", "x64"))
    namespace: dict[str, object] = {}
    exec(compile(text, str(artifact), "exec"), namespace)
    assert namespace["STAT_SIZE"] == 144


def test_generated_artifact_refuses_other_platform(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    artifact = _generate_artifact(tmp_path, "x86_64-pc-linux-gnu")
    monkeypatch.setattr(runtime, "current_fingerprint", lambda: Fingerprint("linux", "arm64"))
    namespace: dict[str, object] = {}
    with pytest.raises(PlatformMismatchError) as excinfo:
        exec(compile(artifact.read_text(encoding="utf-8"), str(artifact), "exec"), namespace)
    assert excinfo.value.expected == "linux-x64"
    assert excinfo.value.actual == "linux-arm64"
    assert "STAT_SIZE" not in namespace
