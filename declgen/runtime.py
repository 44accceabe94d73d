"""Load-time guards executed by generated artifacts.

Generated modules start with::

    from declgen.runtime import require_platform
    require_platform("linux-x64")

so that sizes, alignments and offsets baked in at generation time are never
used on a platform with a different ABI. This module only depends on the
standard library so that artifacts stay cheap to import.
"""

from __future__ import annotations

import platform
import sys
from typing import Optional

from .errors import PlatformMismatchError
from .models import Fingerprint

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
    "x86": "x86",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "armv7": "arm",
    "arm": "arm",
    "ppc64le": "ppc64le",
    "powerpc64le": "ppc64le",
    "ppc64": "ppc64",
    "powerpc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "mips": "mips",
    "mipsel": "mipsel",
    "mips64": "mips64",
    "mips64el": "mips64el",
}

_OS_PREFIXES = (
    ("linux", "linux"),
    ("darwin", "osx"),
    ("macos", "osx"),
    ("ios", "osx"),
    ("win32", "windows"),
    ("windows", "windows"),
    ("mingw", "windows"),
    ("cygwin", "windows"),
    ("freebsd", "bsd"),
    ("openbsd", "bsd"),
    ("netbsd", "bsd"),
    ("dragonfly", "bsd"),
)


def normalise_arch(machine: str) -> str:
    lowered = machine.strip().lower()
    return _ARCH_ALIASES.get(lowered, lowered)


def _known_os(name: str) -> Optional[str]:
    lowered = name.strip().lower()
    for prefix, normalised in _OS_PREFIXES:
        if lowered.startswith(prefix):
            return normalised
    return None


def normalise_os(name: str) -> str:
    return _known_os(name) or name.strip().lower() or "other"


def fingerprint_from_triple(triple: str) -> Fingerprint:
    """Derive a fingerprint from a clang target triple.

    The vendor field is optional (``x86_64-linux-gnu`` and ``x86_64-pc-linux-gnu``
    both describe ``linux-x64``), so the OS is the first component after the
    architecture that names a known operating system.
    """
    parts = triple.strip().split("-")
    if len(parts) < 2 or not parts[0]:
        raise ValueError(f"Invalid target triple: {triple!r}")
    for part in parts[1:]:
        system = _known_os(part)
        if system is not None:
            return Fingerprint(os=system, arch=normalise_arch(parts[0]))
    raise ValueError(f"No known operating system in target triple: {triple!r}")


def current_fingerprint() -> Fingerprint:
    """Fingerprint of the running interpreter."""
    return Fingerprint(os=normalise_os(sys.platform), arch=normalise_arch(platform.machine()))


def require_platform(expected: str, actual: Optional[str] = None) -> None:
    """Abort with :class:`PlatformMismatchError` unless running on ``expected``."""
    wanted = Fingerprint.parse(expected)
    running = Fingerprint.parse(actual) if actual is not None else current_fingerprint()
    if running != wanted:
        raise PlatformMismatchError(str(wanted), str(running))


def assert_baked(name: str, value: object, expected: object) -> None:
    """Fail loudly when a dialect-resolved constant drifted from its expected literal."""
    if value != expected:
        raise AssertionError(f"{name} is {value!r}, expected {expected!r}")


__all__ = [
    "assert_baked",
    "current_fingerprint",
    "fingerprint_from_triple",
    "normalise_arch",
    "normalise_os",
    "require_platform",
]
